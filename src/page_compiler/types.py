"""Type definitions for the page object compiler."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from page_compiler.errors import UnknownType


class PrimitiveType(Enum):
    """Built-in primitive types supported by the type system."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"


# Mapping from type name strings to PrimitiveType enum values
PRIMITIVE_TYPE_NAMES: dict[str, PrimitiveType] = {pt.value: pt for pt in PrimitiveType}


class Capability(Enum):
    """Action families a basic element can expose."""

    ACTIONABLE = "actionable"
    CLICKABLE = "clickable"
    EDITABLE = "editable"
    TOUCHABLE = "touchable"
    DRAGGABLE = "draggable"


CAPABILITY_NAMES: dict[str, Capability] = {c.value: c for c in Capability}

SELECTOR_TOKEN = "locator"
REFERENCE_TOKEN = "reference"
ELEMENT_TOKEN = "element"
FUNCTION_TOKEN = "function"
VOID_TOKEN = "void"
CONTAINER_TOKEN = "container"

# Tokens accepted in a {"name": ..., "type": ...} argument
ARGUMENT_TYPE_TOKENS: tuple[str, ...] = tuple(PRIMITIVE_TYPE_NAMES) + (
    SELECTOR_TOKEN,
    REFERENCE_TOKEN,
    ELEMENT_TOKEN,
)


@dataclass(frozen=True)
class TypeDefinition:
    """Base class for all type definitions.

    Definitions are frozen dataclasses so two types are equal whenever their
    tags and names match, regardless of where they were created.
    """

    name: str

    @property
    def is_primitive(self) -> bool:
        return False

    @property
    def is_list(self) -> bool:
        return False

    @property
    def is_element(self) -> bool:
        """Whether values of this type are UI elements or components."""
        return False

    @property
    def is_void(self) -> bool:
        return False

    def referenced_types(self) -> list[TypeDefinition]:
        """Return the non-primitive types a declaration using this type needs."""
        return [self]


@dataclass(frozen=True)
class PrimitiveTypeDefinition(TypeDefinition):
    """Type definition wrapping a primitive type."""

    primitive: PrimitiveType = PrimitiveType.STRING

    @property
    def is_primitive(self) -> bool:
        return True

    def referenced_types(self) -> list[TypeDefinition]:
        return []


@dataclass(frozen=True)
class SelectorTypeDefinition(TypeDefinition):
    """Locator passed as a value, e.g. to ``containsElement``."""


@dataclass(frozen=True)
class ReferenceTypeDefinition(TypeDefinition):
    """Opaque reference handed through to the automation runtime."""


@dataclass(frozen=True)
class FunctionTypeDefinition(TypeDefinition):
    """Predicate argument; never becomes a runtime parameter."""


@dataclass(frozen=True)
class VoidTypeDefinition(TypeDefinition):
    @property
    def is_void(self) -> bool:
        return True

    def referenced_types(self) -> list[TypeDefinition]:
        return []


@dataclass(frozen=True)
class BasicElementTypeDefinition(TypeDefinition):
    """A basic element described by its capability set.

    The generic element type (``element`` argument token) has no
    capabilities of its own.
    """

    capabilities: tuple[Capability, ...] = ()

    @property
    def is_element(self) -> bool:
        return True

    def has_capability(self, capability: Capability) -> bool:
        """Every basic element is actionable; other capabilities are declared."""
        return capability is Capability.ACTIONABLE or capability in self.capabilities

    def referenced_types(self) -> list[TypeDefinition]:
        if len(self.capabilities) <= 1:
            return [self]
        # One interface per capability, the renderer combines them
        return [
            BasicElementTypeDefinition(name=c.value, capabilities=(c,))
            for c in self.capabilities
        ]


@dataclass(frozen=True)
class ContainerTypeDefinition(TypeDefinition):
    """Placeholder scope for page objects injected at runtime."""

    @property
    def is_element(self) -> bool:
        return True


@dataclass(frozen=True)
class CustomTypeDefinition(TypeDefinition):
    """A page object or utility type produced by the type-naming collaborator.

    ``name`` is the simple name, ``package`` the dotted namespace it lives in.
    """

    package: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name

    @property
    def is_element(self) -> bool:
        return True


@dataclass(frozen=True)
class ListTypeDefinition(TypeDefinition):
    """List of values of another type (e.g. ``string[]``)."""

    element_type: TypeDefinition = field(default_factory=lambda: VOID)

    @property
    def is_list(self) -> bool:
        return True

    @property
    def is_element(self) -> bool:
        return self.element_type.is_element

    def referenced_types(self) -> list[TypeDefinition]:
        return [self] + self.element_type.referenced_types()


BOOLEAN = PrimitiveTypeDefinition(name="boolean", primitive=PrimitiveType.BOOLEAN)
NUMBER = PrimitiveTypeDefinition(name="number", primitive=PrimitiveType.NUMBER)
STRING = PrimitiveTypeDefinition(name="string", primitive=PrimitiveType.STRING)
SELECTOR = SelectorTypeDefinition(name=SELECTOR_TOKEN)
REFERENCE = ReferenceTypeDefinition(name=REFERENCE_TOKEN)
FUNCTION = FunctionTypeDefinition(name=FUNCTION_TOKEN)
VOID = VoidTypeDefinition(name=VOID_TOKEN)
CONTAINER = ContainerTypeDefinition(name=CONTAINER_TOKEN)
BASIC_ELEMENT = BasicElementTypeDefinition(name=ELEMENT_TOKEN, capabilities=())
ACTIONABLE = BasicElementTypeDefinition(
    name=Capability.ACTIONABLE.value, capabilities=(Capability.ACTIONABLE,)
)


def list_of(element_type: TypeDefinition) -> ListTypeDefinition:
    """Wrap a type as a list of that type."""
    return ListTypeDefinition(name=f"{element_type.name}[]", element_type=element_type)


class TypeRegistry:
    """Catalog of the built-in types, keyed by their grammar token.

    The registry is populated once at construction and only read afterwards,
    so a single instance can be shared by parallel compilations.
    """

    def __init__(self) -> None:
        self._types: dict[str, TypeDefinition] = {}
        self._register_builtins()

    def _register_builtins(self) -> None:
        for type_def in (BOOLEAN, NUMBER, STRING, SELECTOR, REFERENCE, FUNCTION, VOID, CONTAINER, BASIC_ELEMENT):
            self._types[type_def.name] = type_def
        for capability in Capability:
            self._types[capability.value] = BasicElementTypeDefinition(
                name=capability.value, capabilities=(capability,)
            )

    def get(self, token: str) -> TypeDefinition | None:
        """Get a type by token."""
        return self._types.get(token)

    def resolve(self, token: str, owner: str | None = None) -> TypeDefinition:
        """Get a type by token, raising UnknownType if it is not registered."""
        type_def = self._types.get(token) if isinstance(token, str) else None
        if type_def is None:
            raise UnknownType(token, self.list_types(), owner)
        return type_def

    def resolve_argument_type(self, token: str, owner: str | None = None) -> TypeDefinition:
        """Resolve a token allowed in a name+type argument."""
        if token not in ARGUMENT_TYPE_TOKENS:
            raise UnknownType(token, ARGUMENT_TYPE_TOKENS, owner)
        return self._types[token]

    def resolve_primitive(self, token: str, owner: str | None = None) -> PrimitiveTypeDefinition:
        if token not in PRIMITIVE_TYPE_NAMES:
            raise UnknownType(token, PRIMITIVE_TYPE_NAMES, owner)
        return self._types[token]  # type: ignore[return-value]

    def basic_element_type(
        self, capabilities: Iterable[str], owner: str | None = None
    ) -> BasicElementTypeDefinition:
        """Build the canonical type for a set of capability names.

        Order and repetition in the declaration do not matter:
        ``["editable", "clickable"]`` equals ``["clickable", "editable"]``.
        """
        resolved: set[Capability] = set()
        for token in capabilities:
            capability = CAPABILITY_NAMES.get(token) if isinstance(token, str) else None
            if capability is None:
                raise UnknownType(token, CAPABILITY_NAMES, owner)
            resolved.add(capability)
        if not resolved:
            return ACTIONABLE
        ordered = tuple(c for c in Capability if c in resolved)
        if len(ordered) == 1:
            return self._types[ordered[0].value]  # type: ignore[return-value]
        return BasicElementTypeDefinition(
            name="+".join(c.value for c in ordered), capabilities=ordered
        )

    def list_of(self, element_type: TypeDefinition) -> ListTypeDefinition:
        return list_of(element_type)

    def list_types(self) -> list[str]:
        """List all registered type tokens."""
        return list(self._types.keys())

    def __contains__(self, token: str) -> bool:
        return token in self._types


def is_primitive_token(token: object) -> bool:
    return isinstance(token, str) and token in PRIMITIVE_TYPE_NAMES


def required_imports(types: Iterable[TypeDefinition]) -> list[TypeDefinition]:
    """Ordered, de-duplicated closure of the non-primitive types referenced."""
    seen: list[TypeDefinition] = []
    for type_def in types:
        for referenced in type_def.referenced_types():
            if referenced not in seen:
                seen.append(referenced)
    return seen
