"""Selector model: locator kind, template, substitutions."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from page_compiler.errors import InvalidSelector, UnknownType
from page_compiler.parsing.selector_lexer import placeholder_types
from page_compiler.parsing.uiselector_parser import UiSelectorParser, with_prefix

if TYPE_CHECKING:
    from page_compiler.arguments import Parameter


class LocatorKind(Enum):
    CSS = "css"
    ACCESSID = "accessid"
    CLASSCHAIN = "classchain"
    UIAUTOMATOR = "uiautomator"


LOCATOR_KIND_NAMES: dict[str, LocatorKind] = {k.value: k for k in LocatorKind}

# Container elements without a selector scope the first child
CONTAINER_DEFAULT_TEMPLATE = ":scope > *:first-child"


@dataclass(frozen=True)
class Selector:
    """A resolved locator.

    ``parameters`` hold one entry per placeholder in ``template``, in order.
    """

    kind: LocatorKind
    template: str
    parameters: tuple[Parameter, ...] = ()
    returns_all: bool = False

    def same_locator(self, other: Selector | None) -> bool:
        """Two selectors locate the same nodes when kind and template match."""
        return other is not None and self.kind is other.kind and self.template == other.template

    def render(self) -> str:
        return f"{self.kind.value}({json.dumps(self.template)})"

    def __str__(self) -> str:
        return self.render()


CONTAINER_DEFAULT_SELECTOR = Selector(kind=LocatorKind.CSS, template=CONTAINER_DEFAULT_TEMPLATE)

_local = threading.local()


def _uiselector_parser() -> UiSelectorParser:
    # yacc parsers are not reentrant, each thread builds its own
    parser = getattr(_local, "uiselector_parser", None)
    if parser is None:
        parser = UiSelectorParser()
        parser.build()
        _local.uiselector_parser = parser
    return parser


def locator_kind(name: str, owner: str | None = None) -> LocatorKind:
    kind = LOCATOR_KIND_NAMES.get(name)
    if kind is None:
        raise UnknownType(name, LOCATOR_KIND_NAMES, owner)
    return kind


def normalize_template(kind: LocatorKind, template: str, owner: str | None = None) -> str:
    """Validate a template for its locator kind and return its canonical form.

    UIAutomator templates get the ``new UiSelector().`` prefix and only
    the supported selector methods are accepted.
    """
    if not template.strip():
        raise InvalidSelector(template, "selector cannot be empty", owner)
    if kind is LocatorKind.UIAUTOMATOR:
        try:
            _uiselector_parser().parse(template)
        except SyntaxError as e:
            raise InvalidSelector(template, str(e), owner) from e
        return with_prefix(template)
    return template


def template_parameter_tokens(template: str, owner: str | None = None) -> list[str]:
    """Primitive type tokens of a template's placeholders."""
    try:
        return placeholder_types(template)
    except SyntaxError as e:
        raise InvalidSelector(template, str(e), owner) from e
