"""Parsing module for selector templates, UiSelector chains and config files."""

from page_compiler.parsing.config_parser import ConfigParser
from page_compiler.parsing.selector_lexer import placeholder_types
from page_compiler.parsing.uiselector_parser import UiSelectorCall, UiSelectorParser

__all__ = [
    "ConfigParser",
    "UiSelectorCall",
    "UiSelectorParser",
    "placeholder_types",
]
