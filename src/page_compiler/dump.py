"""Serialize compiled declarations to JSON-ready dicts."""

from __future__ import annotations

from typing import Any

from page_compiler.actions import Matcher
from page_compiler.arguments import Literal, Parameter
from page_compiler.declarations import (
    ElementGetterBody,
    ImplementationView,
    InterfaceView,
    MethodDeclaration,
    PageObjectDeclaration,
    PageObjectMethod,
)
from page_compiler.methods import (
    AbstractBody,
    ChainBody,
    ComposeBody,
    ComposeStatement,
    UtilityBody,
)
from page_compiler.selectors import Selector
from page_compiler.types import CustomTypeDefinition, TypeDefinition


def type_to_str(type_def: TypeDefinition) -> str:
    """Render a type name; custom types use their dotted full name."""
    if isinstance(type_def, CustomTypeDefinition):
        return type_def.full_name
    if type_def.is_list:
        return f"{type_to_str(type_def.element_type)}[]"  # type: ignore[attr-defined]
    return type_def.name


def parameter_to_dict(parameter: Parameter) -> dict[str, Any]:
    if isinstance(parameter, Literal):
        return {"value": parameter.value, "type": type_to_str(parameter.type)}
    return {"name": parameter.name, "type": type_to_str(parameter.type)}


def selector_to_dict(selector: Selector | None) -> dict[str, Any] | None:
    if selector is None:
        return None
    result: dict[str, Any] = {selector.kind.value: selector.template}
    if selector.parameters:
        result["args"] = [parameter_to_dict(p) for p in selector.parameters]
    if selector.returns_all:
        result["returnAll"] = True
    return result


def _matcher_to_dict(matcher: Matcher | None) -> dict[str, Any] | None:
    if matcher is None:
        return None
    return {
        "type": matcher.type.name,
        "args": [parameter_to_dict(p) for p in matcher.parameters],
    }


def statement_to_dict(statement: ComposeStatement) -> dict[str, Any]:
    result: dict[str, Any] = {
        "element": statement.element_name,
        "getter": statement.getter_name,
        "apply": statement.action_name,
        "args": [parameter_to_dict(p) for p in statement.parameters],
        "returnType": type_to_str(statement.return_type),
    }
    if statement.element_parameters:
        result["elementArgs"] = [parameter_to_dict(p) for p in statement.element_parameters]
    if statement.predicate:
        result["predicate"] = [statement_to_dict(s) for s in statement.predicate]
    if statement.filter:
        result["filter"] = [statement_to_dict(s) for s in statement.filter]
    if statement.matcher is not None:
        result["matcher"] = _matcher_to_dict(statement.matcher)
    if statement.fan_out:
        result["fanOut"] = True
    if statement.is_last:
        result["isLast"] = True
    return result


def body_to_dict(body: Any) -> dict[str, Any]:
    if isinstance(body, ComposeBody):
        return {"kind": "compose", "statements": [statement_to_dict(s) for s in body.statements]}
    if isinstance(body, ChainBody):
        return {
            "kind": "chain",
            "links": [
                {
                    "element": link.element_name,
                    "getter": link.getter_name,
                    "type": type_to_str(link.type),
                    "returnAll": link.returns_all,
                }
                for link in body.links
            ],
        }
    if isinstance(body, UtilityBody):
        return {
            "kind": "externalUtility",
            "type": type_to_str(body.type),
            "invoke": body.invoke,
            "args": [parameter_to_dict(p) for p in body.parameters],
        }
    if isinstance(body, ElementGetterBody):
        result: dict[str, Any] = {
            "kind": "element",
            "element": body.element_name,
            "scope": body.scope,
            "selector": selector_to_dict(body.selector),
            "list": body.is_list,
            "nullable": body.is_nullable,
        }
        if body.filter is not None:
            result["filter"] = {
                "apply": body.filter.apply,
                "args": [parameter_to_dict(p) for p in body.filter.parameters],
                "matcher": _matcher_to_dict(body.filter.matcher),
                "findFirst": body.filter.find_first,
            }
        return result
    if isinstance(body, AbstractBody):
        return {"kind": "abstract"}
    raise TypeError(f"Unknown method body: {type(body).__name__}")


def method_declaration_to_dict(declaration: MethodDeclaration) -> dict[str, Any]:
    result: dict[str, Any] = {
        "name": declaration.name,
        "args": [parameter_to_dict(p) for p in declaration.parameters],
        "return": type_to_str(declaration.return_type),
        "imports": [type_to_str(t) for t in declaration.imports],
    }
    if declaration.comments:
        result["description"] = list(declaration.comments)
    return result


def method_to_dict(method: PageObjectMethod) -> dict[str, Any]:
    result = method_declaration_to_dict(method.declaration)
    result["public"] = method.is_public
    result["body"] = body_to_dict(method.body)
    return result


def _interface_to_dict(view: InterfaceView | None) -> dict[str, Any] | None:
    if view is None:
        return None
    return {
        "type": type_to_str(view.type),
        "imports": [type_to_str(t) for t in view.imports],
        "methods": [method_declaration_to_dict(m) for m in view.methods],
    }


def _implementation_to_dict(view: ImplementationView | None) -> dict[str, Any] | None:
    if view is None:
        return None
    return {
        "type": type_to_str(view.type),
        "implements": type_to_str(view.implements),
        "imports": [type_to_str(t) for t in view.imports],
        "methods": [method_to_dict(m) for m in view.methods],
    }


def declaration_to_dict(declaration: PageObjectDeclaration) -> dict[str, Any]:
    """JSON-ready rendition of a compiled page object."""
    return {
        "identifier": declaration.identifier,
        "type": type_to_str(declaration.type),
        "interfaceOnly": declaration.is_interface,
        "implements": type_to_str(declaration.implements) if declaration.implements else None,
        "interface": _interface_to_dict(declaration.interface),
        "implementation": _implementation_to_dict(declaration.implementation),
    }
