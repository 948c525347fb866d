"""Lexer for compiler configuration files."""

import ply.lex as lex


class ConfigLexer:
    """Lexer for tokenizing compiler config files."""

    reserved = {
        "compiler": "COMPILER",
        "true": "TRUE",
        "false": "FALSE",
    }

    tokens = [
        "IDENTIFIER",
        "STRING",
        "NUMBER",
        "COLON",
        "COMMA",
        "LBRACE",
        "RBRACE",
    ] + list(reserved.values())

    t_COLON = r":"
    t_COMMA = r","
    t_LBRACE = r"\{"
    t_RBRACE = r"\}"
    t_ignore = " \t\r"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_COMMENT(self, t: lex.LexToken) -> None:
        r"--[^\n]*"
        pass

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"'
        t.value = t.value[1:-1]
        return t

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+"
        t.value = int(t.value)
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        t.type = self.reserved.get(t.value, "IDENTIFIER")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Config: Illegal character '{t.value[0]}' at line {t.lexer.lineno}")

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
