"""Compilation errors raised while translating page object declarations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from page_compiler.types import TypeDefinition


class CompilationError(ValueError):
    """Base class for every error that aborts compilation of a page object.

    ``owner`` names the entity being compiled when the error was detected
    (e.g. ``method 'clickButton'``). ``page_object`` is filled in by the
    compiler once the error leaves the unit it was raised in.
    """

    def __init__(self, message: str, owner: str | None = None) -> None:
        self.message = message
        self.owner = owner
        self.page_object: str | None = None
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"{self.owner}: {self.message}" if self.owner else self.message
        if self.page_object:
            text = f"page object '{self.page_object}', {text}"
        return text

    def set_page_object(self, identifier: str) -> None:
        """Attach the identifier of the page object that failed."""
        if self.page_object is None:
            self.page_object = identifier
            self.args = (self._format(),)

    def __str__(self) -> str:
        return self._format()


# ---- Type and argument errors ----


class UnknownType(CompilationError):
    def __init__(self, token: Any, allowed: Iterable[str], owner: str | None = None) -> None:
        self.token = token
        self.allowed = tuple(allowed)
        super().__init__(
            f"unknown type '{token}', supported types are: {', '.join(self.allowed)}",
            owner,
        )


class InvalidTypeReference(CompilationError):
    def __init__(self, reference: str, owner: str | None = None) -> None:
        self.reference = reference
        super().__init__(
            "type should have format '<namespace>/<kind>/[<sub package>/]<name>', "
            f"actual was '{reference}'",
            owner,
        )


class ArgumentCountMismatch(CompilationError):
    def __init__(self, expected: int | tuple[int, ...], actual: int, owner: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        if isinstance(expected, tuple):
            shown = " or ".join(str(n) for n in expected)
        else:
            shown = str(expected)
        super().__init__(f"expected {shown} parameters, provided {actual}", owner)


class TypeMismatch(CompilationError):
    def __init__(self, expected: TypeDefinition, actual: TypeDefinition, owner: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"expected type is '{expected.name}', actual was '{actual.name}'", owner
        )


class DuplicateArgumentName(CompilationError):
    def __init__(self, name: str, owner: str | None = None) -> None:
        self.name = name
        super().__init__(f"duplicate arguments names '{name}'", owner)


# ---- Element errors ----


class DuplicateElementName(CompilationError):
    def __init__(self, name: str, owner: str | None = None) -> None:
        self.name = name
        super().__init__(f"element with name '{name}' already exists", owner)


class UnknownElement(CompilationError):
    def __init__(self, name: str, owner: str | None = None) -> None:
        self.name = name
        super().__init__(f"unknown element with name '{name}'", owner)


class ElementSelectorConflict(CompilationError):
    """Two elements in one scope resolve to the same selector incompatibly."""

    reason = "selector conflict"

    def __init__(self, element: str, other: str, selector: str) -> None:
        self.element = element
        self.other = other
        self.selector = selector
        super().__init__(
            f"{self.reason}: elements '{element}' and '{other}' share selector {selector}",
            f"element '{element}'",
        )


class SameSelectorDifferentTypes(ElementSelectorConflict):
    reason = "components with the same selector must have the same type"


class ComponentElementDuplicateSelector(ElementSelectorConflict):
    reason = "a component and a basic element cannot have the same selector"


class DuplicateWithRootSelector(ElementSelectorConflict):
    reason = "element cannot have the same selector as the root element"


class InvalidSelector(CompilationError):
    def __init__(self, selector: str, reason: str, owner: str | None = None) -> None:
        self.selector = selector
        self.reason = reason
        super().__init__(f"invalid selector '{selector}': {reason}", owner)


# ---- Action errors ----


class UnknownAction(CompilationError):
    def __init__(self, action: str, owner: str | None = None) -> None:
        self.action = action
        super().__init__(f"unknown action '{action}'", owner)


class ActionNotSupported(CompilationError):
    def __init__(self, action: str, element: str, type_name: str, owner: str | None = None) -> None:
        self.action = action
        self.element = element
        self.type_name = type_name
        super().__init__(
            f"action '{action}' is not supported by element '{element}' of type '{type_name}'",
            owner,
        )


# ---- Method errors ----


class MethodBodyError(CompilationError):
    """A method body contradicts its declaration."""


class RedundantMethodBody(MethodBodyError):
    pass


class EmptyComposeBody(MethodBodyError):
    def __init__(self, owner: str | None = None) -> None:
        super().__init__("compose statements list cannot be empty", owner)


class MissingMethodBody(MethodBodyError):
    def __init__(self, owner: str | None = None) -> None:
        super().__init__(
            "method must declare one of 'compose', 'chain' or 'externalUtility'", owner
        )


class ReturnTypeMismatch(CompilationError):
    def __init__(self, expected: TypeDefinition, actual: TypeDefinition, owner: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"declared return type '{expected.name}' does not match "
            f"inferred type '{actual.name}'",
            owner,
        )


class DuplicateMethodName(CompilationError):
    def __init__(self, name: str, owner: str | None = None) -> None:
        self.name = name
        super().__init__(f"method with name '{name}' already exists", owner)


class PredicateDepthExceeded(CompilationError):
    def __init__(self, limit: int, owner: str | None = None) -> None:
        self.limit = limit
        super().__init__(f"predicates nested deeper than {limit} levels", owner)


class MalformedDeclaration(CompilationError):
    """The JSON tree does not follow the page object grammar."""


# ---- Cross-unit errors ----


class DuplicatePageObject(CompilationError):
    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"duplicate page object name '{identifier}'")


class BatchCompilationError(CompilationError):
    """Every failure collected from one batch run."""

    def __init__(self, failures: dict[str, CompilationError]) -> None:
        self.failures = dict(failures)
        lines = [f"{len(self.failures)} page object(s) failed to compile:"]
        for identifier, error in self.failures.items():
            lines.append(f"  {identifier}: {error}")
        super().__init__("\n".join(lines))
