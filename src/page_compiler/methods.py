"""Method composition: method specs to compiled bodies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Union

from page_compiler.actions import ActionType, Matcher, resolve_matcher
from page_compiler.arguments import Parameter, Regular, check_unique_names
from page_compiler.context import TranslationContext
from page_compiler.elements import ContainerElement, CustomElement
from page_compiler.errors import (
    ActionNotSupported,
    EmptyComposeBody,
    InvalidTypeReference,
    MalformedDeclaration,
    MissingMethodBody,
    PredicateDepthExceeded,
    RedundantMethodBody,
    ReturnTypeMismatch,
    TypeMismatch,
)
from page_compiler.grammar import (
    ChainLinkSpec,
    MethodSpec,
    PredicateArgument,
    StatementSpec,
    UtilitySpec,
)
from page_compiler.naming import is_type_reference
from page_compiler.types import BOOLEAN, VOID, TypeDefinition, list_of

logger = logging.getLogger(__name__)


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


# ---- Compiled bodies ----


@dataclass(frozen=True)
class ComposeStatement:
    """One action invocation on an element.

    ``fan_out`` means the action runs once per element of a list target.
    ``predicate`` holds the statements of a function argument, ``filter``
    the statements narrowing a list target before the action runs.
    """

    element_name: str
    getter_name: str
    action_name: str
    action: ActionType | None
    element_parameters: tuple[Parameter, ...] = ()
    parameters: tuple[Parameter, ...] = ()
    predicate: tuple[ComposeStatement, ...] = ()
    filter: tuple[ComposeStatement, ...] = ()
    matcher: Matcher | None = None
    fan_out: bool = False
    return_type: TypeDefinition = VOID
    is_last: bool = False


@dataclass(frozen=True)
class ComposeBody:
    statements: tuple[ComposeStatement, ...]


@dataclass(frozen=True)
class ChainLink:
    element_name: str
    getter_name: str
    type: TypeDefinition
    returns_all: bool = False


@dataclass(frozen=True)
class ChainBody:
    links: tuple[ChainLink, ...]


@dataclass(frozen=True)
class UtilityBody:
    type: TypeDefinition
    invoke: str
    parameters: tuple[Parameter, ...] = ()


@dataclass(frozen=True)
class AbstractBody:
    """Signature only; implemented elsewhere."""


MethodBody = Union[ComposeBody, ChainBody, UtilityBody, AbstractBody]


@dataclass(frozen=True)
class CompiledMethod:
    name: str
    parameters: tuple[Regular, ...]
    return_type: TypeDefinition
    body: MethodBody
    description: str = ""

    @property
    def is_abstract(self) -> bool:
        return isinstance(self.body, AbstractBody)


# ---- Compiler ----


class MethodCompiler:
    """Compiles methods of one page object against its context."""

    def __init__(self, context: TranslationContext, is_interface: bool = False) -> None:
        self.context = context
        self.is_interface = is_interface

    def compile(self, spec: MethodSpec) -> CompiledMethod:
        owner = f"method '{spec.name}'"
        bodies = [
            name
            for name, body in (
                ("compose", spec.compose),
                ("chain", spec.chain),
                ("externalUtility", spec.external_utility),
            )
            if body is not None
        ]
        if len(bodies) > 1:
            raise RedundantMethodBody(
                f"method can declare only one of 'compose', 'chain' or 'externalUtility', found {bodies}",
                owner,
            )
        if self.is_interface:
            if bodies:
                raise RedundantMethodBody(f"interface method cannot declare '{bodies[0]}'", owner)
            method = self._abstract(spec, owner)
        elif not bodies:
            raise MissingMethodBody(owner)
        elif spec.compose is not None:
            method = self._compose(spec, spec.compose, owner)
        elif spec.chain is not None:
            method = self._chain(spec, spec.chain, owner)
        else:
            method = self._utility(spec, spec.external_utility, owner)  # type: ignore[arg-type]
        logger.debug(
            "Compiled %s of %s: %s -> %s",
            owner,
            self.context.identifier,
            type(method.body).__name__,
            method.return_type.name,
        )
        return method

    # ---- Return types ----

    def _declared_return(self, spec: MethodSpec, owner: str) -> TypeDefinition | None:
        if spec.return_type is None:
            if spec.returns_all is not None:
                raise RedundantMethodBody("'returnAll' requires 'return'", owner)
            return None
        if isinstance(spec.return_type, tuple):
            type_def = self.context.type_registry.basic_element_type(spec.return_type, owner)
        else:
            type_def = self.context.resolve_type(spec.return_type, owner)
        return list_of(type_def) if spec.returns_all else type_def

    # ---- Abstract ----

    def _abstract(self, spec: MethodSpec, owner: str) -> CompiledMethod:
        parameters = self.context.resolver(owner).resolve(spec.args or ())
        return CompiledMethod(
            name=spec.name,
            parameters=_regular(parameters),
            return_type=self._declared_return(spec, owner) or VOID,
            body=AbstractBody(),
            description=spec.description,
        )

    # ---- Compose ----

    def _compose(
        self, spec: MethodSpec, statement_specs: Sequence[StatementSpec], owner: str
    ) -> CompiledMethod:
        if not statement_specs:
            raise EmptyComposeBody(owner)
        if spec.args is not None:
            raise RedundantMethodBody("compose method cannot declare 'args'", owner)
        declared = self._declared_return(spec, owner)
        statements = self.compile_statements(statement_specs, owner, depth=0)
        inferred = statements[-1].return_type
        if declared is not None and declared != inferred:
            raise ReturnTypeMismatch(declared, inferred, owner)
        parameters = collect_parameters(statements)
        check_unique_names(parameters, owner)
        return CompiledMethod(
            name=spec.name,
            parameters=tuple(parameters),
            return_type=inferred,
            body=ComposeBody(statements=statements),
            description=spec.description,
        )

    def compile_statements(
        self, specs: Sequence[StatementSpec], owner: str, depth: int
    ) -> tuple[ComposeStatement, ...]:
        """Compile a statement sequence; the last one yields the result."""
        if depth > self.context.config.max_predicate_depth:
            raise PredicateDepthExceeded(self.context.config.max_predicate_depth, owner)
        if not specs:
            raise EmptyComposeBody(owner)
        last = len(specs) - 1
        return tuple(
            self.compile_statement(s, owner, depth, is_last=(i == last)) for i, s in enumerate(specs)
        )

    def compile_statement(
        self, spec: StatementSpec, owner: str, depth: int, is_last: bool = False
    ) -> ComposeStatement:
        element = self.context.get_element(spec.element, owner)
        resolver = self.context.resolver(owner)
        predicate: tuple[ComposeStatement, ...] = ()
        for argument in spec.args:
            if isinstance(argument, PredicateArgument):
                if predicate:
                    raise MalformedDeclaration("only one predicate argument is supported", owner)
                predicate = self.compile_statements(argument.statements, owner, depth + 1)

        if isinstance(element, ContainerElement):
            raise ActionNotSupported(spec.apply, element.name, element.type.name, owner)
        if isinstance(element, CustomElement):
            action = None
            parameters = resolver.resolve(spec.args)
            result = self._component_result(spec, owner)
            fan_out = element.is_list
        else:
            if spec.return_type is not None or spec.returns_all:
                raise MalformedDeclaration(
                    "'returnType' and 'returnAll' apply only to component statements", owner
                )
            action = self.context.action_registry.lookup(
                element.type, spec.apply, element.name, element.is_list, owner
            )
            parameters = action.resolve_arguments(resolver, spec.args, owner)
            result = action.return_type
            if action.returns_predicate_result and predicate:
                result = predicate[-1].return_type
            fan_out = element.is_list and not action.is_list_action

        matcher = None
        if spec.matcher is not None:
            matcher = resolve_matcher(spec.matcher, result, resolver, owner)
            result = BOOLEAN

        statement_filter: tuple[ComposeStatement, ...] = ()
        if spec.predicate is not None:
            if not element.is_list:
                raise MalformedDeclaration(
                    f"predicate can only filter a list element, '{element.name}' is not", owner
                )
            statement_filter = self.compile_statements(spec.predicate, owner, depth + 1)
            if statement_filter[-1].return_type != BOOLEAN:
                raise TypeMismatch(BOOLEAN, statement_filter[-1].return_type, owner)

        if fan_out and not result.is_void and not result.is_list:
            result = list_of(result)

        return ComposeStatement(
            element_name=element.name,
            getter_name=element.getter_name,
            action_name=spec.apply,
            action=action,
            element_parameters=tuple(element.getter_parameters),
            parameters=tuple(parameters),
            predicate=predicate,
            filter=statement_filter,
            matcher=matcher,
            fan_out=fan_out,
            return_type=result,
            is_last=is_last,
        )

    def _component_result(self, spec: StatementSpec, owner: str) -> TypeDefinition:
        if spec.return_type is None:
            if spec.returns_all:
                raise RedundantMethodBody("'returnAll' requires 'returnType'", owner)
            return VOID
        type_def = self.context.resolve_type(spec.return_type, owner)
        return list_of(type_def) if spec.returns_all else type_def

    # ---- Chain ----

    def _chain(self, spec: MethodSpec, links: Sequence[ChainLinkSpec], owner: str) -> CompiledMethod:
        redundant = [
            key
            for key, value in (("args", spec.args), ("return", spec.return_type), ("returnAll", spec.returns_all))
            if value is not None
        ]
        if redundant:
            raise RedundantMethodBody(f"chain method cannot declare {redundant}", owner)
        if not links:
            raise MalformedDeclaration("chain cannot be empty", owner)

        first = self.context.get_element(links[0].element, owner)
        if not isinstance(first, CustomElement):
            raise MalformedDeclaration(
                f"chain must start with a component element, '{first.name}' is not", owner
            )
        first_type = first.type
        if links[0].type is not None:
            declared = self._page_object_type(links[0].type, owner)
            if declared != first_type:
                raise TypeMismatch(first_type, declared, owner)
        compiled = [
            ChainLink(
                element_name=first.name,
                getter_name=first.getter_name,
                type=first_type,
                returns_all=first.is_list or links[0].returns_all,
            )
        ]
        for link in links[1:]:
            if link.type is None:
                raise MalformedDeclaration(f"chain link '{link.element}' must declare a type", owner)
            compiled.append(
                ChainLink(
                    element_name=link.element,
                    getter_name=f"get{_capitalize(link.element)}",
                    type=self._page_object_type(link.type, owner),
                    returns_all=link.returns_all,
                )
            )
        return_type = compiled[-1].type
        if any(link.returns_all for link in compiled):
            return_type = list_of(return_type)
        return CompiledMethod(
            name=spec.name,
            parameters=tuple(first.getter_parameters),
            return_type=return_type,
            body=ChainBody(links=tuple(compiled)),
            description=spec.description,
        )

    def _page_object_type(self, token: str, owner: str) -> TypeDefinition:
        if not is_type_reference(token):
            raise InvalidTypeReference(token, owner)
        return self.context.type_namer(token)

    # ---- External utility ----

    def _utility(self, spec: MethodSpec, utility: UtilitySpec, owner: str) -> CompiledMethod:
        if spec.args is not None:
            raise RedundantMethodBody("utility method cannot declare 'args'", owner)
        utility_type = self._page_object_type(utility.type, owner)
        parameters = self.context.resolver(owner).resolve(utility.args)
        self.context.add_utility_type(utility_type)
        return CompiledMethod(
            name=spec.name,
            parameters=_regular(parameters),
            return_type=self._declared_return(spec, owner) or VOID,
            body=UtilityBody(type=utility_type, invoke=utility.invoke, parameters=tuple(parameters)),
            description=spec.description,
        )


def _regular(parameters: Sequence[Parameter]) -> tuple[Regular, ...]:
    return tuple(p for p in parameters if isinstance(p, Regular))


def collect_parameters(statements: Sequence[ComposeStatement]) -> list[Regular]:
    """Method parameters of a compose body, in statement order.

    Scope parameters of an element are added the first time the element is
    used; repeated uses share them.
    """
    seen: set[str] = set()
    parameters: list[Regular] = []

    def visit(statement: ComposeStatement) -> None:
        if statement.element_name not in seen:
            seen.add(statement.element_name)
            parameters.extend(_regular(statement.element_parameters))
        for nested in statement.filter:
            visit(nested)
        parameters.extend(_regular(statement.parameters))
        for nested in statement.predicate:
            visit(nested)
        if statement.matcher is not None:
            parameters.extend(_regular(statement.matcher.parameters))

    for statement in statements:
        visit(statement)
    return parameters
