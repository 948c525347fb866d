"""Action catalog: what each element capability can do."""

from __future__ import annotations

from dataclasses import dataclass

from page_compiler.errors import (
    ActionNotSupported,
    ArgumentCountMismatch,
    TypeMismatch,
    UnknownAction,
    UnknownType,
)
from page_compiler.types import (
    BASIC_ELEMENT,
    BOOLEAN,
    FUNCTION,
    NUMBER,
    SELECTOR,
    STRING,
    VOID,
    BasicElementTypeDefinition,
    Capability,
    TypeDefinition,
)

Shape = tuple[TypeDefinition, ...]


@dataclass(frozen=True)
class ActionType:
    """An action and its accepted parameter shapes.

    Most actions have one shape. Overloaded actions list their shapes in
    the order they are tried.
    """

    name: str
    return_type: TypeDefinition
    capability: Capability
    shapes: tuple[Shape, ...] = ((),)
    # Applies to the list as a whole instead of each element
    is_list_action: bool = False
    # Returns whatever the predicate argument returns
    returns_predicate_result: bool = False
    description: str = ""

    @property
    def arities(self) -> tuple[int, ...]:
        return tuple(len(shape) for shape in self.shapes)

    def shapes_for(self, arg_count: int, owner: str | None = None) -> list[Shape]:
        """Shapes accepting ``arg_count`` arguments, in declaration order."""
        shapes = [shape for shape in self.shapes if len(shape) == arg_count]
        if not shapes:
            arities = self.arities
            raise ArgumentCountMismatch(arities[0] if len(arities) == 1 else arities, arg_count, owner)
        return shapes

    def resolve_arguments(self, resolver, descriptors, owner: str | None = None) -> list:
        """Resolve arguments against the first shape of matching arity that type-checks.

        When no shape type-checks, the mismatch against the first one is raised.
        """
        errors: list[TypeMismatch] = []
        for shape in self.shapes_for(len(descriptors), owner):
            try:
                return resolver.resolve(descriptors, shape)
            except TypeMismatch as e:
                errors.append(e)
        raise errors[0]


def _action(
    name: str,
    capability: Capability,
    return_type: TypeDefinition = VOID,
    *shapes: Shape,
    description: str = "",
    **kwargs: bool,
) -> ActionType:
    return ActionType(
        name=name,
        return_type=return_type,
        capability=capability,
        shapes=tuple(shapes) or ((),),
        description=description,
        **kwargs,
    )


_A = Capability.ACTIONABLE
_C = Capability.CLICKABLE
_E = Capability.EDITABLE
_T = Capability.TOUCHABLE
_D = Capability.DRAGGABLE

BUILTIN_ACTIONS: tuple[ActionType, ...] = (
    # actionable
    _action("blur", _A, description="Remove focus from the element."),
    _action("focus", _A, description="Set focus on the element."),
    _action("getAttribute", _A, STRING, (STRING,), description="Value of the named attribute."),
    _action("getClassAttribute", _A, STRING, description="Value of the class attribute."),
    _action("getText", _A, STRING, description="Visible inner text."),
    _action("getTitle", _A, STRING, description="Value of the title attribute."),
    _action("getValue", _A, STRING, description="Value of the value property."),
    _action("isEnabled", _A, BOOLEAN, description="Whether the element is enabled."),
    _action("isFocused", _A, BOOLEAN, description="Whether the element has focus."),
    _action("isPresent", _A, BOOLEAN, description="Whether the element is attached to the document."),
    _action("isVisible", _A, BOOLEAN, description="Whether the element is displayed."),
    _action("moveTo", _A, description="Move the pointer over the element."),
    _action("scrollToCenter", _A, description="Scroll the element to the viewport center."),
    _action("scrollToTop", _A, description="Scroll the element to the top of the viewport."),
    _action(
        "containsElement", _A, BOOLEAN, (SELECTOR,), (SELECTOR, BOOLEAN),
        description="Whether a descendant matches the locator; the flag searches in shadow DOM.",
    ),
    _action("waitForAbsence", _A, description="Wait until the element is removed."),
    _action("waitForVisible", _A, description="Wait until the element is displayed."),
    _action("waitForInvisible", _A, description="Wait until the element is hidden."),
    _action(
        "waitFor", _A, VOID, (FUNCTION,),
        description="Wait until the predicate returns a truthy value and return it.",
        returns_predicate_result=True,
    ),
    _action(
        "size", _A, NUMBER,
        description="Number of elements found by a list selector.",
        is_list_action=True,
    ),
    # clickable
    _action("click", _C, description="Click the element."),
    _action("javascriptClick", _C, description="Click the element using a script."),
    # editable
    _action("clear", _E, description="Clear the element's value."),
    _action("clearAndType", _E, VOID, (STRING,), description="Clear the value, then type text."),
    _action("setText", _E, VOID, (STRING,), description="Type text into the element."),
    _action("press", _E, VOID, (STRING,), description="Press a key while the element has focus."),
    # touchable
    _action("flick", _T, VOID, (NUMBER, NUMBER), description="Flick by an x/y offset."),
    # draggable
    _action(
        "dragAndDrop", _D, VOID,
        (BASIC_ELEMENT,),
        (BASIC_ELEMENT, NUMBER),
        (NUMBER, NUMBER),
        (NUMBER, NUMBER, NUMBER),
        description="Drag to a target element or by an x/y offset, optionally holding for seconds.",
    ),
)


class ActionTypeRegistry:
    """Actions keyed by capability.

    Populated once at construction and read-only afterwards.
    """

    def __init__(self) -> None:
        self._actions: dict[Capability, dict[str, ActionType]] = {c: {} for c in Capability}
        for action in BUILTIN_ACTIONS:
            self._actions[action.capability][action.name] = action

    def get(self, action_name: str) -> ActionType | None:
        """Find an action by name in any capability."""
        for actions in self._actions.values():
            if action_name in actions:
                return actions[action_name]
        return None

    def lookup(
        self,
        element_type: TypeDefinition,
        action_name: str,
        element_name: str = "",
        is_list: bool = False,
        owner: str | None = None,
    ) -> ActionType:
        """Resolve an action for an element of ``element_type``.

        Raises UnknownAction for names no capability knows and
        ActionNotSupported when the element lacks the capability.
        """
        action = self.get(action_name)
        if action is None:
            raise UnknownAction(action_name, owner)
        if (
            not isinstance(element_type, BasicElementTypeDefinition)
            or not element_type.has_capability(action.capability)
            or (action.is_list_action and not is_list)
        ):
            raise ActionNotSupported(action_name, element_name, element_type.name, owner)
        return action

    def actions_for(self, capability: Capability) -> list[ActionType]:
        return list(self._actions[capability].values())

    def list_actions(self) -> list[str]:
        return [name for actions in self._actions.values() for name in actions]


# ---- Matchers ----


@dataclass(frozen=True)
class MatcherType:
    """Turns an action result into a boolean."""

    name: str
    operand_type: TypeDefinition
    argument_types: tuple[TypeDefinition, ...] = ()


MATCHERS: dict[str, MatcherType] = {
    m.name: m
    for m in (
        MatcherType("isTrue", BOOLEAN),
        MatcherType("isFalse", BOOLEAN),
        MatcherType("stringContains", STRING, (STRING,)),
        MatcherType("stringEquals", STRING, (STRING,)),
    )
}


def lookup_matcher(name: str, owner: str | None = None) -> MatcherType:
    matcher = MATCHERS.get(name)
    if matcher is None:
        raise UnknownType(name, MATCHERS, owner)
    return matcher


@dataclass(frozen=True)
class Matcher:
    """A resolved matcher with its extra parameters."""

    type: MatcherType
    parameters: tuple = ()


def resolve_matcher(spec, operand_type: TypeDefinition, resolver, owner: str | None = None) -> Matcher:
    """Resolve a matcher applied to a value of ``operand_type``."""
    matcher_type = lookup_matcher(spec.type, owner)
    if operand_type != matcher_type.operand_type:
        raise TypeMismatch(matcher_type.operand_type, operand_type, owner)
    parameters = resolver.resolve(spec.args, matcher_type.argument_types)
    return Matcher(type=matcher_type, parameters=tuple(parameters))
