"""Argument resolution: descriptors to typed parameters."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Sequence, Union

from page_compiler.errors import (
    ArgumentCountMismatch,
    DuplicateArgumentName,
    MalformedDeclaration,
    TypeMismatch,
)
from page_compiler.grammar import (
    ArgumentDescriptor,
    ElementReferenceSpec,
    NamedArgument,
    PredicateArgument,
    SelectorSpec,
    ValueArgument,
)
from page_compiler.selectors import (
    Selector,
    locator_kind,
    normalize_template,
    template_parameter_tokens,
)
from page_compiler.types import (
    BASIC_ELEMENT,
    BOOLEAN,
    FUNCTION,
    NUMBER,
    SELECTOR,
    STRING,
    BasicElementTypeDefinition,
    TypeDefinition,
    TypeRegistry,
)

if TYPE_CHECKING:
    from page_compiler.context import TranslationContext


@dataclass(frozen=True)
class Literal:
    """A constant argument, already rendered as code."""

    value: str
    type: TypeDefinition

    @property
    def is_literal(self) -> bool:
        return True


@dataclass(frozen=True)
class Regular:
    """A named argument that becomes a method parameter."""

    name: str
    type: TypeDefinition

    @property
    def is_literal(self) -> bool:
        return False


Parameter = Union[Literal, Regular]


def accepts(expected: TypeDefinition, actual: TypeDefinition) -> bool:
    """Whether a value of ``actual`` type can be passed where ``expected`` is declared.

    The generic ``element`` type accepts any basic element.
    """
    if expected == actual:
        return True
    return expected == BASIC_ELEMENT and isinstance(actual, BasicElementTypeDefinition)


def render_value(value: Any) -> tuple[str, TypeDefinition]:
    """Render a JSON scalar as a literal and infer its type."""
    # bool is a subclass of int
    if isinstance(value, bool):
        return ("true" if value else "false"), BOOLEAN
    if isinstance(value, (int, float)):
        return str(value), NUMBER
    if isinstance(value, str):
        return json.dumps(value), STRING
    raise MalformedDeclaration(f"unsupported literal value '{value!r}'")


def check_unique_names(parameters: Sequence[Parameter], owner: str | None = None) -> None:
    """Raise DuplicateArgumentName when two Regular parameters share a name."""
    seen: set[str] = set()
    for parameter in parameters:
        if isinstance(parameter, Regular):
            if parameter.name in seen:
                raise DuplicateArgumentName(parameter.name, owner)
            seen.add(parameter.name)


class ArgumentResolver:
    """Resolves argument descriptors against optional expected types.

    ``context`` is needed only to resolve element references. The resolver
    keeps no state between calls to :meth:`resolve`.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        owner: str | None = None,
        context: TranslationContext | None = None,
    ) -> None:
        self.registry = registry
        self.owner = owner
        self.context = context

    def resolve(
        self,
        descriptors: Sequence[ArgumentDescriptor],
        expected_types: Sequence[TypeDefinition] | None = None,
    ) -> list[Parameter]:
        """Resolve descriptors in order.

        Predicate descriptors are checked as ``function`` and produce no
        parameter; compiling their statements is the caller's job.
        """
        if expected_types is not None and len(expected_types) != len(descriptors):
            raise ArgumentCountMismatch(len(expected_types), len(descriptors), self.owner)
        parameters: list[Parameter] = []
        for i, descriptor in enumerate(descriptors):
            parameter = self._resolve_one(descriptor)
            actual = FUNCTION if parameter is None else parameter.type
            if expected_types is not None and not accepts(expected_types[i], actual):
                raise TypeMismatch(expected_types[i], actual, self.owner)
            if parameter is not None:
                parameters.append(parameter)
        check_unique_names(parameters, self.owner)
        return parameters

    def argument_types(self, descriptors: Sequence[ArgumentDescriptor]) -> list[TypeDefinition]:
        """Types the descriptors resolve to, predicates included."""
        types = []
        for descriptor in descriptors:
            parameter = self._resolve_one(descriptor)
            types.append(FUNCTION if parameter is None else parameter.type)
        return types

    def _resolve_one(self, descriptor: ArgumentDescriptor) -> Parameter | None:
        if isinstance(descriptor, PredicateArgument):
            return None
        if isinstance(descriptor, NamedArgument):
            return Regular(
                name=descriptor.name,
                type=self.registry.resolve_argument_type(descriptor.type_token, self.owner),
            )
        if isinstance(descriptor, ValueArgument):
            literal = self._literal(descriptor.value)
            if descriptor.type_token is not None:
                declared = self.registry.resolve_argument_type(descriptor.type_token, self.owner)
                if not accepts(declared, literal.type):
                    raise TypeMismatch(declared, literal.type, self.owner)
            return literal
        raise MalformedDeclaration(f"unsupported argument {descriptor!r}", self.owner)

    def _literal(self, value: Any) -> Literal:
        if isinstance(value, SelectorSpec):
            selector = self.resolve_selector(value, literal_only=True)
            return Literal(value=_render_selector(selector), type=SELECTOR)
        if isinstance(value, ElementReferenceSpec):
            return self._element_reference(value)
        rendered, type_def = render_value(value)
        return Literal(value=rendered, type=type_def)

    def _element_reference(self, reference: ElementReferenceSpec) -> Literal:
        if self.context is None:
            raise MalformedDeclaration(
                f"element reference '{reference.element}' is not allowed here", self.owner
            )
        element = self.context.get_element(reference.element, self.owner)
        expected = [p.type for p in element.parameters if isinstance(p, Regular)]
        values = self._literal_arguments(reference.args, expected, f"element '{reference.element}'")
        call = f"{element.getter_name}({', '.join(values)})"
        return Literal(value=call, type=element.reference_type)

    def _literal_arguments(
        self,
        descriptors: Sequence[ArgumentDescriptor],
        expected: Sequence[TypeDefinition],
        what: str,
    ) -> list[str]:
        if any(not isinstance(d, ValueArgument) for d in descriptors):
            raise MalformedDeclaration(f"arguments of nested {what} must be literal values", self.owner)
        return [p.value for p in self.resolve(descriptors, expected)]  # type: ignore[union-attr]

    def resolve_selector(self, spec: SelectorSpec, literal_only: bool = False) -> Selector:
        """Resolve a selector, matching its args to the template placeholders."""
        kind = locator_kind(spec.kind, self.owner)
        template = normalize_template(kind, spec.template, self.owner)
        expected = [
            self.registry.resolve_primitive(token, self.owner)
            for token in template_parameter_tokens(template, self.owner)
        ]
        if literal_only:
            values = self._literal_arguments(spec.args, expected, f"selector '{template}'")
            parameters = tuple(Literal(value=v, type=t) for v, t in zip(values, expected))
        else:
            parameters = tuple(self.resolve(spec.args, expected))
        return Selector(
            kind=kind, template=template, parameters=parameters, returns_all=spec.returns_all
        )


def _render_selector(selector: Selector) -> str:
    if not selector.parameters:
        return selector.render()
    values = ", ".join(p.value for p in selector.parameters if isinstance(p, Literal))
    return f"{selector.kind.value}({json.dumps(selector.template)}, {values})"
