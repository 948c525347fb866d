"""Lexer for UIAutomator ``new UiSelector()`` expressions."""

import ply.lex as lex


class UiSelectorLexer:
    """Lexer for UIAutomator ``new UiSelector().method(arg)`` chains."""

    reserved = {
        "new": "NEW",
        "UiSelector": "UISELECTOR",
        "true": "TRUE",
        "false": "FALSE",
    }

    tokens = [
        "IDENTIFIER",
        "STRING",
        "NUMBER",
        "PLACEHOLDER",
        "LPAREN",
        "RPAREN",
        "DOT",
    ] + list(reserved.values())

    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_DOT = r"\."
    t_ignore = " \t\n"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"'
        t.value = t.value[1:-1]
        return t

    def t_PLACEHOLDER(self, t: lex.LexToken) -> lex.LexToken:
        r"%[sd]"
        return t

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+"
        t.value = int(t.value)
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        t.type = self.reserved.get(t.value, "IDENTIFIER")
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"UiSelector: Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        return self.lexer.token()
