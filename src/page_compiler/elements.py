"""Element model and the scope validator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from page_compiler.actions import ActionType, Matcher, lookup_matcher, resolve_matcher
from page_compiler.arguments import Parameter, Regular, check_unique_names
from page_compiler.errors import (
    ComponentElementDuplicateSelector,
    DuplicateWithRootSelector,
    MalformedDeclaration,
    SameSelectorDifferentTypes,
    TypeMismatch,
    UnknownType,
)
from page_compiler.grammar import ElementSpec, FilterSpec
from page_compiler.naming import is_type_reference
from page_compiler.selectors import CONTAINER_DEFAULT_SELECTOR, Selector
from page_compiler.types import (
    ACTIONABLE,
    BASIC_ELEMENT,
    BOOLEAN,
    CAPABILITY_NAMES,
    CONTAINER,
    CONTAINER_TOKEN,
    TypeDefinition,
    list_of,
)

if TYPE_CHECKING:
    from page_compiler.context import TranslationContext

ROOT_ELEMENT_NAME = "root"


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


@dataclass(frozen=True)
class ElementFilter:
    """Narrows a list selector by applying an action to each found element.

    ``action`` is None for component elements, whose methods are not known
    at compile time.
    """

    apply: str
    action: ActionType | None
    parameters: tuple[Parameter, ...] = ()
    matcher: Matcher | None = None
    find_first: bool = False


@dataclass
class Element:
    """Base for the element variants: Root, Basic, Custom and Container."""

    name: str
    type: TypeDefinition
    selector: Selector | None = None
    scope: str | None = None
    # Ancestors' selector parameters first, then this element's own
    parameters: tuple[Parameter, ...] = ()
    is_public: bool = False
    is_nullable: bool = False
    filter: ElementFilter | None = None
    description: str = ""

    @property
    def is_list(self) -> bool:
        if self.selector is None or not self.selector.returns_all:
            return False
        return self.filter is None or not self.filter.find_first

    @property
    def getter_name(self) -> str:
        suffix = "" if self.is_public else "Element"
        return f"get{_capitalize(self.name)}{suffix}"

    @property
    def getter_return_type(self) -> TypeDefinition:
        return list_of(self.type) if self.is_list else self.type

    @property
    def getter_parameters(self) -> list[Regular]:
        """Regular scope parameters followed by filter parameters."""
        parameters = [p for p in self.parameters if isinstance(p, Regular)]
        if self.filter is not None:
            parameters.extend(p for p in self.filter.parameters if isinstance(p, Regular))
            if self.filter.matcher is not None:
                parameters.extend(
                    p for p in self.filter.matcher.parameters if isinstance(p, Regular)
                )
        return parameters

    @property
    def reference_type(self) -> TypeDefinition:
        """Type of a getter call passed as an argument value."""
        return list_of(BASIC_ELEMENT) if self.is_list else BASIC_ELEMENT


@dataclass
class RootElement(Element):
    name: str = ROOT_ELEMENT_NAME
    type: TypeDefinition = ACTIONABLE

    @property
    def getter_name(self) -> str:
        return "getRoot" if self.is_public else "getRootElement"


@dataclass
class BasicElement(Element):
    pass


@dataclass
class CustomElement(Element):
    """A nested page object (component)."""

    @property
    def reference_type(self) -> TypeDefinition:
        return list_of(self.type) if self.is_list else self.type


@dataclass
class ContainerElement(Element):
    """Scope for a page object whose type is only known at runtime."""

    type: TypeDefinition = CONTAINER
    selector: Selector | None = CONTAINER_DEFAULT_SELECTOR

    @property
    def reference_type(self) -> TypeDefinition:
        return CONTAINER


def validate_pair(element: Element, other: Element) -> None:
    """Raise if ``element`` and ``other`` cannot share one scope.

    Comparing against a root that has no selector is a programming error.
    """
    for candidate in (element, other):
        if isinstance(candidate, RootElement) and candidate.selector is None:
            raise RuntimeError("root element without a selector cannot be validated")
    if not element.selector or not element.selector.same_locator(other.selector):
        return
    selector = element.selector.render()
    if isinstance(element, RootElement) or isinstance(other, RootElement):
        raise DuplicateWithRootSelector(element.name, other.name, selector)
    if isinstance(element, ContainerElement) or isinstance(other, ContainerElement):
        return
    if isinstance(element, CustomElement) and isinstance(other, CustomElement):
        if element.type != other.type:
            raise SameSelectorDifferentTypes(element.name, other.name, selector)
        return
    if isinstance(element, CustomElement) or isinstance(other, CustomElement):
        raise ComponentElementDuplicateSelector(element.name, other.name, selector)


class ElementBuilder:
    """Builds elements from specs and declares them in a translation context."""

    def __init__(self, context: TranslationContext) -> None:
        self.context = context

    def declare_all(self, specs: Sequence[ElementSpec], scope: Element) -> None:
        for spec in specs:
            element = self.build(spec, scope)
            self.context.declare_element(element)
            children = spec.elements + spec.shadow_elements
            if children:
                if not isinstance(element, BasicElement):
                    raise MalformedDeclaration(
                        "only basic elements can have nested elements", f"element '{spec.name}'"
                    )
                self.declare_all(children, element)

    def build(self, spec: ElementSpec, scope: Element) -> Element:
        owner = f"element '{spec.name}'"
        resolver = self.context.resolver(owner)
        kind = self._element_kind(spec.type)
        selector = resolver.resolve_selector(spec.selector) if spec.selector is not None else None
        if selector is None and kind is not ContainerElement:
            raise MalformedDeclaration("element must declare a selector", owner)
        own = selector.parameters if selector is not None else ()
        parameters = tuple(scope.parameters) + tuple(own)
        check_unique_names(parameters, owner)
        kwargs = dict(
            name=spec.name,
            scope=scope.name,
            parameters=parameters,
            is_public=spec.is_public,
            is_nullable=spec.is_nullable,
            description=spec.description,
        )
        if selector is not None:
            kwargs["selector"] = selector
        if kind is not ContainerElement:
            kwargs["type"] = self.resolve_element_type(spec.type, owner)
        element = kind(**kwargs)
        if spec.filter is not None:
            element.filter = self._filter(element, spec.filter, owner)
            check_unique_names(element.getter_parameters, owner)
        return element

    def _element_kind(self, token: str | tuple[str, ...] | None) -> type[Element]:
        if token == CONTAINER_TOKEN:
            return ContainerElement
        if is_type_reference(token):
            return CustomElement
        return BasicElement

    def resolve_element_type(self, token: str | tuple[str, ...] | None, owner: str) -> TypeDefinition:
        """Element type from its grammar token; absent means actionable."""
        registry = self.context.type_registry
        if token is None:
            return ACTIONABLE
        if isinstance(token, tuple):
            return registry.basic_element_type(token, owner)
        if token == CONTAINER_TOKEN:
            return CONTAINER
        if is_type_reference(token):
            return self.context.type_namer(token)
        if token in CAPABILITY_NAMES:
            return registry.basic_element_type([token], owner)
        raise UnknownType(token, list(CAPABILITY_NAMES) + [CONTAINER_TOKEN], owner)

    def _filter(self, element: Element, spec: FilterSpec, owner: str) -> ElementFilter:
        if element.selector is None or not element.selector.returns_all:
            raise MalformedDeclaration("filter can only be applied to a selector returning all", owner)
        resolver = self.context.resolver(owner)
        if isinstance(element, CustomElement):
            # Component methods are not known here, the matcher decides the result
            parameters = resolver.resolve(spec.args)
            matcher = None
            if spec.matcher is not None:
                matcher = resolve_matcher(
                    spec.matcher, self._matcher_operand(spec.matcher.type, owner), resolver, owner
                )
            return ElementFilter(
                apply=spec.apply,
                action=None,
                parameters=tuple(parameters),
                matcher=matcher,
                find_first=spec.find_first,
            )
        action = self.context.action_registry.lookup(element.type, spec.apply, element.name, owner=owner)
        parameters = action.resolve_arguments(resolver, spec.args, owner)
        if spec.matcher is not None:
            matcher = resolve_matcher(spec.matcher, action.return_type, resolver, owner)
        elif action.return_type != BOOLEAN:
            raise TypeMismatch(BOOLEAN, action.return_type, owner)
        else:
            matcher = None
        return ElementFilter(
            apply=spec.apply,
            action=action,
            parameters=tuple(parameters),
            matcher=matcher,
            find_first=spec.find_first,
        )

    def _matcher_operand(self, matcher_name: str, owner: str) -> TypeDefinition:
        return lookup_matcher(matcher_name, owner).operand_type
