"""Per-unit translation context."""

from __future__ import annotations

from typing import TYPE_CHECKING

from page_compiler.actions import ActionTypeRegistry
from page_compiler.arguments import ArgumentResolver
from page_compiler.config import CompilerConfig
from page_compiler.elements import Element, RootElement, validate_pair
from page_compiler.errors import DuplicateElementName, DuplicateMethodName, UnknownElement, UnknownType
from page_compiler.naming import TypeNamer, is_type_reference
from page_compiler.types import TypeDefinition, TypeRegistry, is_primitive_token

if TYPE_CHECKING:
    from page_compiler.methods import CompiledMethod


class TranslationContext:
    """Elements and methods of one page object, in declaration order.

    A context belongs to exactly one compilation call. The registries,
    namer and config it holds are shared and never modified.
    """

    def __init__(
        self,
        identifier: str,
        type_registry: TypeRegistry,
        action_registry: ActionTypeRegistry,
        type_namer: TypeNamer,
        config: CompilerConfig | None = None,
    ) -> None:
        self.identifier = identifier
        self.type_registry = type_registry
        self.action_registry = action_registry
        self.type_namer = type_namer
        self.config = config or CompilerConfig()
        self.page_object_type = type_namer(identifier)
        self._elements: dict[str, Element] = {}
        self._methods: dict[str, CompiledMethod] = {}
        self.utility_types: list[TypeDefinition] = []

    # ---- Elements ----

    @property
    def elements(self) -> list[Element]:
        return list(self._elements.values())

    @property
    def root(self) -> RootElement:
        for element in self._elements.values():
            if isinstance(element, RootElement):
                return element
        raise RuntimeError("root element was not declared")

    def declare_element(self, element: Element) -> None:
        """Register an element after checking it against its siblings."""
        owner = f"element '{element.name}'"
        if element.name in self._elements:
            raise DuplicateElementName(element.name, owner)
        if not isinstance(element, RootElement):
            for other in self._elements.values():
                if isinstance(other, RootElement):
                    if element.scope == other.name and other.selector is not None:
                        validate_pair(element, other)
                elif other.scope == element.scope:
                    validate_pair(element, other)
        self._elements[element.name] = element

    def get_element(self, name: str, owner: str | None = None) -> Element:
        element = self._elements.get(name)
        if element is None:
            raise UnknownElement(name, owner)
        return element

    def has_element(self, name: str) -> bool:
        return name in self._elements

    # ---- Methods ----

    @property
    def methods(self) -> list[CompiledMethod]:
        return list(self._methods.values())

    def add_method(self, method: CompiledMethod) -> None:
        owner = f"method '{method.name}'"
        getter_names = {e.getter_name for e in self._elements.values()}
        if method.name in self._methods or method.name in getter_names:
            raise DuplicateMethodName(method.name, owner)
        self._methods[method.name] = method

    def add_utility_type(self, type_def: TypeDefinition) -> None:
        if type_def not in self.utility_types:
            self.utility_types.append(type_def)

    # ---- Resolution ----

    def resolver(self, owner: str | None = None) -> ArgumentResolver:
        return ArgumentResolver(self.type_registry, owner, self)

    def resolve_type(self, token: str, owner: str | None = None) -> TypeDefinition:
        """Resolve a return or chain type token.

        Page object references go through the type namer; everything else
        must be a registered token.
        """
        if is_primitive_token(token):
            return self.type_registry.resolve_primitive(token, owner)
        if is_type_reference(token):
            return self.type_namer(token)
        if token in self.type_registry:
            return self.type_registry.resolve(token, owner)
        raise UnknownType(token, self.type_registry.list_types(), owner)
