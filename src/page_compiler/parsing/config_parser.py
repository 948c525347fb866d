"""Parser for compiler configuration files."""

from __future__ import annotations

from typing import Any

import ply.yacc as yacc

from page_compiler.parsing.config_lexer import ConfigLexer


class ConfigParser:
    """Parser for ``compiler { key: value, ... }`` config files.

    Returns the raw entries; key validation happens when they are applied to
    a :class:`~page_compiler.config.CompilerConfig`.
    """

    tokens = ConfigLexer.tokens

    def __init__(self) -> None:
        self._lexer = ConfigLexer()
        self._parser: yacc.LRParser | None = None
        self._entries: dict[str, Any] = {}
        self._duplicates: list[tuple[str, int]] = []

    def build(self, **kwargs) -> None:  # type: ignore
        self._lexer.build()
        kwargs.setdefault("debug", False)
        kwargs.setdefault("write_tables", False)
        kwargs.setdefault("errorlog", yacc.NullLogger())
        self._parser = yacc.yacc(module=self, **kwargs)

    def parse(self, text: str) -> dict[str, Any]:
        if self._parser is None:
            self.build()
        self._entries = {}
        self._duplicates = []
        self._lexer.lexer.lineno = 1
        self._parser.parse(text, lexer=self._lexer.lexer)
        if self._duplicates:
            key, line = self._duplicates[0]
            raise SyntaxError(f"Config: duplicate key '{key}' (line {line})")
        return self._entries

    # ---- Grammar rules ----

    def p_config_file(self, p: yacc.YaccProduction) -> None:
        """config_file : sections"""
        pass

    def p_sections_empty(self, p: yacc.YaccProduction) -> None:
        """sections : """
        pass

    def p_sections_multi(self, p: yacc.YaccProduction) -> None:
        """sections : sections section"""
        pass

    def p_section_compiler(self, p: yacc.YaccProduction) -> None:
        """section : COMPILER LBRACE entries RBRACE"""
        pass

    def p_entries_empty(self, p: yacc.YaccProduction) -> None:
        """entries : """
        pass

    def p_entries_multi(self, p: yacc.YaccProduction) -> None:
        """entries : entries entry"""
        pass

    def p_entry(self, p: yacc.YaccProduction) -> None:
        """entry : IDENTIFIER COLON value opt_comma"""
        if p[1] in self._entries:
            self._duplicates.append((p[1], p.lineno(1)))
        else:
            self._entries[p[1]] = p[3]

    def p_value(self, p: yacc.YaccProduction) -> None:
        """value : STRING
                 | NUMBER"""
        p[0] = p[1]

    def p_value_true(self, p: yacc.YaccProduction) -> None:
        """value : TRUE"""
        p[0] = True

    def p_value_false(self, p: yacc.YaccProduction) -> None:
        """value : FALSE"""
        p[0] = False

    def p_opt_comma_yes(self, p: yacc.YaccProduction) -> None:
        """opt_comma : COMMA"""
        pass

    def p_opt_comma_no(self, p: yacc.YaccProduction) -> None:
        """opt_comma : """
        pass

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Config: Syntax error at '{p.value}' (line {p.lineno})")
        raise SyntaxError("Config: Unexpected end of input")
