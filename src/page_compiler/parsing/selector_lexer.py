"""Lexer for selector templates with ``%s``/``%d`` placeholders."""

import threading

import ply.lex as lex


class SelectorTemplateLexer:
    """Splits a selector template into literal text and placeholders."""

    tokens = [
        "ESCAPED_PERCENT",
        "STRING_PLACEHOLDER",
        "NUMBER_PLACEHOLDER",
        "TEXT",
        "PERCENT",
    ]

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    # Function rules are tried in definition order

    def t_ESCAPED_PERCENT(self, t: lex.LexToken) -> lex.LexToken:
        r"%%"
        t.value = "%"
        return t

    def t_STRING_PLACEHOLDER(self, t: lex.LexToken) -> lex.LexToken:
        r"%s"
        return t

    def t_NUMBER_PLACEHOLDER(self, t: lex.LexToken) -> lex.LexToken:
        r"%d"
        return t

    def t_TEXT(self, t: lex.LexToken) -> lex.LexToken:
        r"[^%]+"
        t.lexer.lineno += t.value.count("\n")
        return t

    def t_PERCENT(self, t: lex.LexToken) -> lex.LexToken:
        r"%"
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Selector: Illegal character '{t.value[0]}' at position {t.lexpos}")

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens


_PLACEHOLDER_TYPES = {
    "STRING_PLACEHOLDER": "string",
    "NUMBER_PLACEHOLDER": "number",
}

_local = threading.local()


def _template_lexer() -> SelectorTemplateLexer:
    # ply lexers are not thread-safe, each thread builds its own
    built = getattr(_local, "template_lexer", None)
    if built is None:
        built = SelectorTemplateLexer()
        built.build()
        _local.template_lexer = built
    return built


def placeholder_types(template: str) -> list[str]:
    """Return the primitive type token of each placeholder, in order.

    ``"a[title='%s'] > li:nth-child(%d)"`` gives ``["string", "number"]``.
    """
    # ply lexers keep state between inputs, so each call gets a clone
    lexer = SelectorTemplateLexer()
    lexer.lexer = _template_lexer().lexer.clone()
    return [
        _PLACEHOLDER_TYPES[tok.type]
        for tok in lexer.tokenize(template)
        if tok.type in _PLACEHOLDER_TYPES
    ]
