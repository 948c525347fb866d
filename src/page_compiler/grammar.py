"""Page object grammar: decoded JSON trees to unresolved specs.

The functions here only check the *shape* of the document (which keys exist,
what JSON types they hold). Names, types and selectors are resolved later
against a :class:`~page_compiler.context.TranslationContext`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from page_compiler.errors import MalformedDeclaration

LOCATOR_KINDS: tuple[str, ...] = ("css", "accessid", "classchain", "uiautomator")


# ---- Argument specs ----


@dataclass(frozen=True)
class SelectorSpec:
    """Selector before its placeholders are checked against its args."""

    kind: str
    template: str
    args: tuple[ArgumentDescriptor, ...] = ()
    returns_all: bool = False


@dataclass(frozen=True)
class ElementReferenceSpec:
    """``{"element": name, "args": [...]}`` used as an argument value."""

    element: str
    args: tuple[ArgumentDescriptor, ...] = ()


@dataclass(frozen=True)
class ValueArgument:
    value: Union[bool, int, float, str, SelectorSpec, ElementReferenceSpec]
    # Optional declared type, checked against the value
    type_token: str | None = None


@dataclass(frozen=True)
class NamedArgument:
    name: str
    type_token: str


@dataclass(frozen=True)
class PredicateArgument:
    statements: tuple[StatementSpec, ...]


ArgumentDescriptor = Union[ValueArgument, NamedArgument, PredicateArgument]


# ---- Statement and method specs ----


@dataclass(frozen=True)
class MatcherSpec:
    type: str
    args: tuple[ArgumentDescriptor, ...] = ()


@dataclass(frozen=True)
class StatementSpec:
    """One compose statement: apply an action to an element."""

    element: str
    apply: str
    args: tuple[ArgumentDescriptor, ...] = ()
    matcher: MatcherSpec | None = None
    predicate: tuple[StatementSpec, ...] | None = None
    return_type: str | None = None
    returns_all: bool = False


@dataclass(frozen=True)
class ChainLinkSpec:
    element: str
    type: str | None = None
    returns_all: bool = False


@dataclass(frozen=True)
class UtilitySpec:
    type: str
    invoke: str
    args: tuple[ArgumentDescriptor, ...] = ()


@dataclass(frozen=True)
class MethodSpec:
    """Method before its body is compiled.

    ``None`` means a key was absent; an empty tuple means it was present but
    empty. The distinction matters for body-kind validation.
    """

    name: str
    args: tuple[ArgumentDescriptor, ...] | None = None
    return_type: str | tuple[str, ...] | None = None
    returns_all: bool | None = None
    compose: tuple[StatementSpec, ...] | None = None
    chain: tuple[ChainLinkSpec, ...] | None = None
    external_utility: UtilitySpec | None = None
    description: str = ""


# ---- Element and page object specs ----


@dataclass(frozen=True)
class FilterSpec:
    apply: str
    args: tuple[ArgumentDescriptor, ...] = ()
    matcher: MatcherSpec | None = None
    find_first: bool = False


@dataclass(frozen=True)
class ElementSpec:
    name: str
    type: str | tuple[str, ...] | None = None
    selector: SelectorSpec | None = None
    is_public: bool = False
    is_nullable: bool = False
    elements: tuple[ElementSpec, ...] = ()
    shadow_elements: tuple[ElementSpec, ...] = ()
    filter: FilterSpec | None = None
    description: str = ""


@dataclass
class PageObjectSpec:
    """Whole page object document before resolution."""

    elements: list[ElementSpec] = field(default_factory=list)
    shadow_elements: list[ElementSpec] = field(default_factory=list)
    methods: list[MethodSpec] = field(default_factory=list)
    is_interface: bool = False
    implements: str | None = None
    is_root: bool = False
    root_selector: SelectorSpec | None = None
    root_type: str | tuple[str, ...] | None = None
    expose_root_element: bool = False
    description: str = ""


# ---- Shape helpers ----


def _where(path: str) -> str:
    return path or "page object"


def _check_keys(node: dict[str, Any], allowed: set[str], path: str, strict: bool) -> None:
    if not strict:
        return
    unknown = sorted(set(node) - allowed)
    if unknown:
        raise MalformedDeclaration(
            f"unsupported properties {unknown}, supported are {sorted(allowed)}", _where(path)
        )


def _expect_dict(node: Any, path: str) -> dict[str, Any]:
    if not isinstance(node, dict):
        raise MalformedDeclaration(f"expected an object, got {type(node).__name__}", _where(path))
    return node


def _expect_list(node: Any, path: str) -> list[Any]:
    if not isinstance(node, list):
        raise MalformedDeclaration(f"expected an array, got {type(node).__name__}", _where(path))
    return node


def _expect_str(node: Any, path: str) -> str:
    if not isinstance(node, str) or not node:
        raise MalformedDeclaration("expected a non-empty string", _where(path))
    return node


def _expect_bool(node: Any, path: str) -> bool:
    if not isinstance(node, bool):
        raise MalformedDeclaration("expected a boolean", _where(path))
    return node


def _optional_bool(node: dict[str, Any], key: str, path: str, default: bool = False) -> bool:
    if key not in node or node[key] is None:
        return default
    return _expect_bool(node[key], f"{path}.{key}")


def _type_token(node: Any, path: str) -> str | tuple[str, ...]:
    """Types are a string token or an array of capability names."""
    if isinstance(node, list):
        return tuple(_expect_str(item, f"{path}[{i}]") for i, item in enumerate(node))
    return _expect_str(node, path)


# ---- Parsers ----


class GrammarParser:
    """Turns a decoded page object JSON tree into unresolved declarations."""

    def __init__(self, strict: bool = True) -> None:
        self.strict = strict

    def parse(self, tree: Any) -> PageObjectSpec:
        root = _expect_dict(tree, "")
        _check_keys(
            root,
            {
                "elements", "methods", "interface", "implements", "root",
                "selector", "type", "exposeRootElement", "shadow", "description",
            },
            "",
            self.strict,
        )
        spec = PageObjectSpec(
            is_interface=_optional_bool(root, "interface", ""),
            is_root=_optional_bool(root, "root", ""),
            expose_root_element=_optional_bool(root, "exposeRootElement", ""),
            description=self._description(root, ""),
        )
        if root.get("implements") is not None:
            spec.implements = _expect_str(root["implements"], "implements")
        if root.get("selector") is not None:
            spec.root_selector = self.parse_selector(root["selector"], "selector")
        if root.get("type") is not None:
            spec.root_type = _type_token(root["type"], "type")
        spec.elements = list(self._elements(root.get("elements"), "elements"))
        spec.shadow_elements = list(self._shadow(root.get("shadow"), "shadow"))
        spec.methods = [
            self.parse_method(m, f"methods[{i}]")
            for i, m in enumerate(_expect_list(root.get("methods") or [], "methods"))
        ]
        return spec

    def _description(self, node: dict[str, Any], path: str) -> str:
        value = node.get("description")
        if value is None:
            return ""
        if isinstance(value, list):
            return "\n".join(_expect_str(v, f"{path}.description") for v in value)
        return _expect_str(value, f"{path}.description")

    def _elements(self, node: Any, path: str) -> tuple[ElementSpec, ...]:
        if node is None:
            return ()
        return tuple(
            self.parse_element(e, f"{path}[{i}]") for i, e in enumerate(_expect_list(node, path))
        )

    def _shadow(self, node: Any, path: str) -> tuple[ElementSpec, ...]:
        if node is None:
            return ()
        shadow = _expect_dict(node, path)
        _check_keys(shadow, {"elements"}, path, self.strict)
        return self._elements(shadow.get("elements"), f"{path}.elements")

    def parse_element(self, node: Any, path: str) -> ElementSpec:
        element = _expect_dict(node, path)
        _check_keys(
            element,
            {"name", "type", "selector", "public", "nullable", "elements", "shadow", "filter", "description"},
            path,
            self.strict,
        )
        name = _expect_str(element.get("name"), f"{path}.name")
        where = f"element '{name}'"
        return ElementSpec(
            name=name,
            type=_type_token(element["type"], where) if element.get("type") is not None else None,
            selector=(
                self.parse_selector(element["selector"], where)
                if element.get("selector") is not None
                else None
            ),
            is_public=_optional_bool(element, "public", where),
            is_nullable=_optional_bool(element, "nullable", where),
            elements=self._elements(element.get("elements"), f"{where}.elements"),
            shadow_elements=self._shadow(element.get("shadow"), f"{where}.shadow"),
            filter=(
                self.parse_filter(element["filter"], where)
                if element.get("filter") is not None
                else None
            ),
            description=self._description(element, where),
        )

    def parse_selector(self, node: Any, path: str) -> SelectorSpec:
        selector = _expect_dict(node, path)
        _check_keys(selector, set(LOCATOR_KINDS) | {"returnAll", "args"}, path, self.strict)
        kinds = [k for k in LOCATOR_KINDS if k in selector]
        if len(kinds) != 1:
            raise MalformedDeclaration(
                f"selector must declare exactly one of {list(LOCATOR_KINDS)}", _where(path)
            )
        kind = kinds[0]
        return SelectorSpec(
            kind=kind,
            template=_expect_str(selector[kind], f"{path} selector"),
            args=self.parse_arguments(selector.get("args"), path),
            returns_all=_optional_bool(selector, "returnAll", path),
        )

    def parse_filter(self, node: Any, path: str) -> FilterSpec:
        filter_node = _expect_dict(node, f"{path} filter")
        _check_keys(filter_node, {"apply", "args", "matcher", "findFirst"}, f"{path} filter", self.strict)
        return FilterSpec(
            apply=_expect_str(filter_node.get("apply"), f"{path} filter.apply"),
            args=self.parse_arguments(filter_node.get("args"), path),
            matcher=self.parse_matcher(filter_node.get("matcher"), path),
            find_first=_optional_bool(filter_node, "findFirst", path),
        )

    def parse_matcher(self, node: Any, path: str) -> MatcherSpec | None:
        if node is None:
            return None
        matcher = _expect_dict(node, f"{path} matcher")
        _check_keys(matcher, {"type", "args"}, f"{path} matcher", self.strict)
        return MatcherSpec(
            type=_expect_str(matcher.get("type"), f"{path} matcher.type"),
            args=self.parse_arguments(matcher.get("args"), path),
        )

    # ---- Arguments ----

    def parse_arguments(self, node: Any, path: str) -> tuple[ArgumentDescriptor, ...]:
        if node is None:
            return ()
        return tuple(
            self.parse_argument(a, path) for a in _expect_list(node, f"{path} args")
        )

    def parse_argument(self, node: Any, path: str) -> ArgumentDescriptor:
        arg = _expect_dict(node, f"{path} argument")
        _check_keys(arg, {"value", "name", "type", "predicate"}, f"{path} argument", self.strict)
        has_value = "value" in arg
        has_name = "name" in arg
        has_predicate = "predicate" in arg
        if sum((has_value, has_name, has_predicate)) != 1:
            raise MalformedDeclaration(
                "argument must declare exactly one of 'value', 'name' with 'type', or 'predicate'",
                path,
            )
        if has_predicate:
            if arg.get("type", "function") != "function":
                raise MalformedDeclaration("predicate argument must have type 'function'", path)
            return PredicateArgument(
                statements=self.parse_statements(arg["predicate"], f"{path} predicate")
            )
        if has_value:
            return ValueArgument(
                value=self._argument_value(arg["value"], path),
                type_token=_expect_str(arg["type"], f"{path} argument type") if "type" in arg else None,
            )
        return NamedArgument(
            name=_expect_str(arg["name"], f"{path} argument name"),
            type_token=_expect_str(arg.get("type"), f"{path} argument type"),
        )

    def _argument_value(self, value: Any, path: str) -> Any:
        if isinstance(value, (bool, int, float, str)):
            return value
        if isinstance(value, dict):
            if "element" in value:
                _check_keys(value, {"element", "args"}, f"{path} element reference", self.strict)
                return ElementReferenceSpec(
                    element=_expect_str(value["element"], f"{path} element reference"),
                    args=self.parse_arguments(value.get("args"), path),
                )
            return self.parse_selector(value, f"{path} selector value")
        raise MalformedDeclaration(
            f"unsupported argument value of type {type(value).__name__}", path
        )

    # ---- Methods ----

    def parse_method(self, node: Any, path: str) -> MethodSpec:
        method = _expect_dict(node, path)
        _check_keys(
            method,
            {"name", "args", "return", "returnAll", "compose", "chain", "externalUtility", "description"},
            path,
            self.strict,
        )
        name = _expect_str(method.get("name"), f"{path}.name")
        where = f"method '{name}'"
        return MethodSpec(
            name=name,
            args=self.parse_arguments(method["args"], where) if "args" in method else None,
            return_type=_type_token(method["return"], where) if method.get("return") is not None else None,
            returns_all=(
                _expect_bool(method["returnAll"], where)
                if method.get("returnAll") is not None
                else None
            ),
            compose=self.parse_statements(method["compose"], where) if "compose" in method else None,
            chain=self.parse_chain(method["chain"], where) if "chain" in method else None,
            external_utility=(
                self.parse_utility(method["externalUtility"], where)
                if "externalUtility" in method
                else None
            ),
            description=self._description(method, where),
        )

    def parse_statements(self, node: Any, path: str) -> tuple[StatementSpec, ...]:
        return tuple(
            self.parse_statement(s, path) for s in _expect_list(node, f"{path} statements")
        )

    def parse_statement(self, node: Any, path: str) -> StatementSpec:
        stmt = _expect_dict(node, f"{path} statement")
        _check_keys(
            stmt,
            {"element", "apply", "args", "matcher", "predicate", "returnType", "returnAll"},
            f"{path} statement",
            self.strict,
        )
        return StatementSpec(
            element=_expect_str(stmt.get("element"), f"{path} statement.element"),
            apply=_expect_str(stmt.get("apply"), f"{path} statement.apply"),
            args=self.parse_arguments(stmt.get("args"), path),
            matcher=self.parse_matcher(stmt.get("matcher"), path),
            predicate=(
                self.parse_statements(stmt["predicate"], f"{path} predicate")
                if stmt.get("predicate") is not None
                else None
            ),
            return_type=(
                _expect_str(stmt["returnType"], f"{path} statement.returnType")
                if stmt.get("returnType") is not None
                else None
            ),
            returns_all=_optional_bool(stmt, "returnAll", path),
        )

    def parse_chain(self, node: Any, path: str) -> tuple[ChainLinkSpec, ...]:
        links = []
        for i, item in enumerate(_expect_list(node, f"{path} chain")):
            link = _expect_dict(item, f"{path} chain[{i}]")
            _check_keys(link, {"element", "type", "returnAll"}, f"{path} chain[{i}]", self.strict)
            links.append(
                ChainLinkSpec(
                    element=_expect_str(link.get("element"), f"{path} chain[{i}].element"),
                    type=(
                        _expect_str(link["type"], f"{path} chain[{i}].type")
                        if link.get("type") is not None
                        else None
                    ),
                    returns_all=_optional_bool(link, "returnAll", path),
                )
            )
        return tuple(links)

    def parse_utility(self, node: Any, path: str) -> UtilitySpec:
        utility = _expect_dict(node, f"{path} externalUtility")
        _check_keys(utility, {"type", "invoke", "args"}, f"{path} externalUtility", self.strict)
        return UtilitySpec(
            type=_expect_str(utility.get("type"), f"{path} externalUtility.type"),
            invoke=_expect_str(utility.get("invoke"), f"{path} externalUtility.invoke"),
            args=self.parse_arguments(utility.get("args"), path),
        )


def parse_page_object(tree: Any, strict: bool = True) -> PageObjectSpec:
    """Parse a decoded JSON page object document."""
    return GrammarParser(strict=strict).parse(tree)
