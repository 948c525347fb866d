"""Declaration assembly: compiled methods and elements to interface/implementation views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from page_compiler.arguments import Regular
from page_compiler.context import TranslationContext
from page_compiler.elements import Element, ElementFilter, RootElement
from page_compiler.methods import ChainBody, CompiledMethod, ComposeBody, MethodBody, UtilityBody
from page_compiler.naming import implementation_type
from page_compiler.selectors import Selector
from page_compiler.types import CustomTypeDefinition, TypeDefinition, required_imports


@dataclass(frozen=True)
class MethodDeclaration:
    """Externally visible signature of a method."""

    name: str
    parameters: tuple[Regular, ...]
    return_type: TypeDefinition
    imports: tuple[TypeDefinition, ...] = ()
    comments: tuple[str, ...] = ()


@dataclass(frozen=True)
class ElementGetterBody:
    """Body of a generated element getter."""

    element_name: str
    selector: Selector | None
    scope: str | None
    is_list: bool = False
    is_nullable: bool = False
    filter: ElementFilter | None = None


PageObjectMethodBody = Union[MethodBody, ElementGetterBody]


@dataclass(frozen=True)
class PageObjectMethod:
    declaration: MethodDeclaration
    body: PageObjectMethodBody
    is_public: bool = True
    # Types the implementation needs beyond the signature
    class_imports: tuple[TypeDefinition, ...] = ()

    @property
    def name(self) -> str:
        return self.declaration.name


@dataclass(frozen=True)
class InterfaceView:
    type: CustomTypeDefinition
    methods: tuple[MethodDeclaration, ...]
    imports: tuple[TypeDefinition, ...]


@dataclass(frozen=True)
class ImplementationView:
    type: CustomTypeDefinition
    implements: TypeDefinition
    methods: tuple[PageObjectMethod, ...]
    imports: tuple[TypeDefinition, ...]


@dataclass(frozen=True)
class PageObjectDeclaration:
    """Compiled page object, ready for a renderer."""

    identifier: str
    type: CustomTypeDefinition
    interface: InterfaceView | None
    implementation: ImplementationView | None
    implements: TypeDefinition | None = None
    is_interface: bool = False
    description: str = ""

    def method(self, name: str) -> PageObjectMethod | None:
        """Find an implementation method by name."""
        if self.implementation is None:
            return None
        for method in self.implementation.methods:
            if method.name == name:
                return method
        return None


def _comments(description: str) -> tuple[str, ...]:
    return tuple(line for line in description.splitlines() if line.strip())


def _signature_imports(return_type: TypeDefinition, parameters: Iterable[Regular]) -> tuple[TypeDefinition, ...]:
    return tuple(required_imports([return_type, *(p.type for p in parameters)]))


def _merge(groups: Iterable[Sequence[TypeDefinition]]) -> tuple[TypeDefinition, ...]:
    merged: list[TypeDefinition] = []
    for group in groups:
        for type_def in group:
            if type_def not in merged:
                merged.append(type_def)
    return tuple(merged)


class DeclarationAssembler:
    """Builds the views of a page object from a filled translation context."""

    def __init__(
        self,
        context: TranslationContext,
        is_interface: bool = False,
        implements: TypeDefinition | None = None,
        description: str = "",
    ) -> None:
        self.context = context
        self.is_interface = is_interface
        self.implements = implements
        self.description = description

    def getter(self, element: Element) -> PageObjectMethod:
        parameters = tuple(element.getter_parameters)
        return_type = element.getter_return_type
        declaration = MethodDeclaration(
            name=element.getter_name,
            parameters=parameters,
            return_type=return_type,
            imports=_signature_imports(return_type, parameters),
            comments=_comments(element.description),
        )
        return PageObjectMethod(
            declaration=declaration,
            body=ElementGetterBody(
                element_name=element.name,
                selector=element.selector,
                scope=element.scope,
                is_list=element.is_list,
                is_nullable=element.is_nullable,
                filter=element.filter,
            ),
            is_public=element.is_public,
            class_imports=tuple(required_imports([element.type])),
        )

    def method(self, method: CompiledMethod) -> PageObjectMethod:
        declaration = MethodDeclaration(
            name=method.name,
            parameters=method.parameters,
            return_type=method.return_type,
            imports=_signature_imports(method.return_type, method.parameters),
            comments=_comments(method.description),
        )
        return PageObjectMethod(
            declaration=declaration,
            body=method.body,
            is_public=True,
            class_imports=tuple(required_imports(self._body_types(method.body))),
        )

    def _body_types(self, body: MethodBody) -> list[TypeDefinition]:
        if isinstance(body, UtilityBody):
            return [body.type]
        if isinstance(body, ChainBody):
            return [link.type for link in body.links]
        if isinstance(body, ComposeBody):
            return [self.context.get_element(s.element_name).type for s in body.statements]
        return []

    def methods(self) -> list[PageObjectMethod]:
        """Element getters in declaration order, then declared methods."""
        getters = [
            self.getter(element)
            for element in self.context.elements
            if not isinstance(element, RootElement) or element.is_public
        ]
        return getters + [self.method(m) for m in self.context.methods]

    def assemble(self) -> PageObjectDeclaration:
        page_type = self.context.page_object_type
        methods = self.methods()
        public = [m for m in methods if m.is_public]

        interface = None
        if self.implements is None:
            interface = InterfaceView(
                type=page_type,
                methods=tuple(m.declaration for m in public),
                imports=_merge(m.declaration.imports for m in public),
            )

        implementation = None
        if not self.is_interface:
            implemented = self.implements or page_type
            implementation = ImplementationView(
                type=implementation_type(page_type),
                implements=implemented,
                methods=tuple(methods),
                imports=_merge(
                    [[implemented]]
                    + [m.declaration.imports for m in methods]
                    + [m.class_imports for m in methods]
                    + [self.context.utility_types]
                ),
            )

        return PageObjectDeclaration(
            identifier=self.context.identifier,
            type=page_type,
            interface=interface,
            implementation=implementation,
            implements=self.implements,
            is_interface=self.is_interface,
            description=self.description,
        )
