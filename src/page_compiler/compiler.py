"""Compiler entry points: one page object, or a batch of them."""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Mapping, Union

from page_compiler.actions import ActionTypeRegistry
from page_compiler.config import CompilerConfig
from page_compiler.context import TranslationContext
from page_compiler.declarations import DeclarationAssembler, PageObjectDeclaration
from page_compiler.elements import ElementBuilder, RootElement
from page_compiler.errors import (
    BatchCompilationError,
    CompilationError,
    DuplicatePageObject,
    MalformedDeclaration,
)
from page_compiler.grammar import PageObjectSpec, parse_page_object
from page_compiler.methods import MethodCompiler
from page_compiler.naming import TypeNamer, default_type_namer, is_type_reference
from page_compiler.types import ACTIONABLE, TypeRegistry

logger = logging.getLogger(__name__)

Sources = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


class PageObjectCompiler:
    """Compiles decoded page object documents into declarations.

    The type and action registries are built once and shared, read-only,
    by every compilation, so one compiler can run units in parallel.
    """

    def __init__(
        self,
        config: CompilerConfig | None = None,
        type_namer: TypeNamer = default_type_namer,
    ) -> None:
        self.config = config or CompilerConfig()
        self.type_namer = type_namer
        self.type_registry = TypeRegistry()
        self.action_registry = ActionTypeRegistry()

    def compile(self, identifier: str, tree: Any) -> PageObjectDeclaration:
        """Compile one page object.

        Any CompilationError leaving this call carries ``identifier``.
        """
        try:
            spec = parse_page_object(tree, strict=self.config.strict_grammar)
            return self.compile_spec(identifier, spec)
        except CompilationError as e:
            e.set_page_object(identifier)
            raise

    def compile_spec(self, identifier: str, spec: PageObjectSpec) -> PageObjectDeclaration:
        logger.debug("Compiling page object %s", identifier)
        context = TranslationContext(
            identifier,
            self.type_registry,
            self.action_registry,
            self.type_namer,
            self.config,
        )
        root = self._root(context, spec)
        context.declare_element(root)

        builder = ElementBuilder(context)
        builder.declare_all(spec.elements + spec.shadow_elements, root)

        methods = MethodCompiler(context, is_interface=spec.is_interface)
        for method_spec in spec.methods:
            context.add_method(methods.compile(method_spec))

        implements = None
        if spec.implements is not None:
            if not is_type_reference(spec.implements):
                raise MalformedDeclaration(
                    f"'implements' must reference a page object type, got '{spec.implements}'"
                )
            implements = self.type_namer(spec.implements)

        declaration = DeclarationAssembler(
            context,
            is_interface=spec.is_interface,
            implements=implements,
            description=spec.description,
        ).assemble()
        logger.debug(
            "Compiled %s: %d elements, %d methods",
            identifier,
            len(context.elements),
            len(context.methods),
        )
        return declaration

    def _root(self, context: TranslationContext, spec: PageObjectSpec) -> RootElement:
        owner = "element 'root'"
        if spec.root_selector is not None and not spec.is_root:
            raise MalformedDeclaration("'selector' requires 'root': true", owner)
        if spec.is_root and spec.root_selector is None:
            raise MalformedDeclaration("root page object must declare a selector", owner)
        selector = None
        if spec.root_selector is not None:
            selector = context.resolver(owner).resolve_selector(spec.root_selector)
            if selector.parameters:
                raise MalformedDeclaration("root selector cannot have parameters", owner)
        root_type = ACTIONABLE
        if spec.root_type is not None:
            root_type = ElementBuilder(context).resolve_element_type(spec.root_type, owner)
        return RootElement(
            type=root_type,
            selector=selector,
            is_public=spec.expose_root_element,
            description=spec.description,
        )

    def compile_all(self, sources: Sources, max_workers: int | None = None) -> dict[str, PageObjectDeclaration]:
        """Compile every source, then report all failures together.

        ``sources`` maps identifiers to decoded trees (a mapping or an
        iterable of pairs). With ``max_workers`` greater than 1 units
        compile on a thread pool.
        """
        items = list(sources.items()) if isinstance(sources, Mapping) else list(sources)
        if max_workers is not None and max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                outcomes = list(executor.map(lambda item: self._compile_unit(*item), items))
        else:
            outcomes = [self._compile_unit(identifier, tree) for identifier, tree in items]

        declarations: dict[str, PageObjectDeclaration] = {}
        failures: dict[str, CompilationError] = {}
        counts = Counter(identifier for identifier, _ in items)
        for (identifier, _), outcome in zip(items, outcomes):
            if counts[identifier] > 1:
                failures[identifier] = DuplicatePageObject(identifier)
            elif isinstance(outcome, CompilationError):
                failures[identifier] = outcome
            else:
                declarations[identifier] = outcome

        logger.info(
            "Compiled %d page object(s), %d failed", len(declarations), len(failures)
        )
        if failures:
            raise BatchCompilationError(failures)
        return declarations

    def _compile_unit(self, identifier: str, tree: Any) -> PageObjectDeclaration | CompilationError:
        try:
            return self.compile(identifier, tree)
        except CompilationError as e:
            logger.debug("Failed to compile %s: %s", identifier, e)
            return e


def compile_page_object(
    identifier: str,
    tree: Any,
    config: CompilerConfig | None = None,
    type_namer: TypeNamer = default_type_namer,
) -> PageObjectDeclaration:
    """Compile a single page object with a throwaway compiler."""
    return PageObjectCompiler(config, type_namer).compile(identifier, tree)
