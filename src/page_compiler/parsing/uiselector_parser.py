"""Parser for UIAutomator selector expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import ply.yacc as yacc

from page_compiler.parsing.uiselector_lexer import UiSelectorLexer

UI_SELECTOR_PREFIX = "new UiSelector()."

SUPPORTED_METHODS: tuple[str, ...] = (
    "checkable",
    "checked",
    "className",
    "description",
    "descriptionContains",
    "descriptionStartsWith",
    "enabled",
    "selected",
    "resourceId",
)


@dataclass(frozen=True)
class UiSelectorCall:
    """One ``.method(argument)`` link of a UiSelector chain."""

    method: str
    argument: Any = None


def with_prefix(selector: str) -> str:
    """Prepend ``new UiSelector().`` unless already present."""
    if selector.startswith(UI_SELECTOR_PREFIX):
        return selector
    return UI_SELECTOR_PREFIX + selector


class UiSelectorParser:
    """Parser for ``new UiSelector().checkable(true).resourceId("%s")``."""

    tokens = UiSelectorLexer.tokens

    def __init__(self) -> None:
        self._lexer = UiSelectorLexer()
        self._parser: yacc.LRParser | None = None

    def build(self, **kwargs) -> None:  # type: ignore
        self._lexer.build()
        kwargs.setdefault("debug", False)
        kwargs.setdefault("write_tables", False)
        kwargs.setdefault("errorlog", yacc.NullLogger())
        self._parser = yacc.yacc(module=self, **kwargs)

    def parse(self, text: str) -> list[UiSelectorCall]:
        if self._parser is None:
            self.build()
        calls = self._parser.parse(with_prefix(text), lexer=self._lexer.lexer)
        for call in calls:
            if call.method not in SUPPORTED_METHODS:
                raise SyntaxError(
                    f"UiSelector: unsupported method '{call.method}', "
                    f"supported are {', '.join(SUPPORTED_METHODS)}"
                )
        return calls

    # ---- Grammar rules ----

    def p_selector(self, p: yacc.YaccProduction) -> None:
        """selector : NEW UISELECTOR LPAREN RPAREN DOT call_chain"""
        p[0] = p[6]

    def p_call_chain_single(self, p: yacc.YaccProduction) -> None:
        """call_chain : call"""
        p[0] = [p[1]]

    def p_call_chain_multi(self, p: yacc.YaccProduction) -> None:
        """call_chain : call_chain DOT call"""
        p[0] = p[1] + [p[3]]

    def p_call_no_arg(self, p: yacc.YaccProduction) -> None:
        """call : IDENTIFIER LPAREN RPAREN"""
        p[0] = UiSelectorCall(method=p[1])

    def p_call_arg(self, p: yacc.YaccProduction) -> None:
        """call : IDENTIFIER LPAREN argument RPAREN"""
        p[0] = UiSelectorCall(method=p[1], argument=p[3])

    def p_argument_value(self, p: yacc.YaccProduction) -> None:
        """argument : STRING
                    | NUMBER
                    | PLACEHOLDER"""
        p[0] = p[1]

    def p_argument_true(self, p: yacc.YaccProduction) -> None:
        """argument : TRUE"""
        p[0] = True

    def p_argument_false(self, p: yacc.YaccProduction) -> None:
        """argument : FALSE"""
        p[0] = False

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"UiSelector: Syntax error at '{p.value}' (position {p.lexpos})")
        raise SyntaxError("UiSelector: Unexpected end of input")
