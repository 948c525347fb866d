"""Compiler configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from page_compiler.parsing.config_parser import ConfigParser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilerConfig:
    """Settings shared by every unit of one compiler.

    Attributes:
        max_predicate_depth: How deeply predicate arguments may nest.
        namespace: First segment of identifiers built by the CLI.
        strict_grammar: Reject unknown JSON properties.
    """

    max_predicate_depth: int = 8
    namespace: str = "utam"
    strict_grammar: bool = True

    @classmethod
    def from_entries(cls, entries: dict[str, Any]) -> CompilerConfig:
        """Build a config from parsed ``key: value`` entries."""
        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in entries.items():
            if key not in known:
                raise ValueError(f"Unknown config key '{key}', supported are {sorted(known)}")
            default = known[key].default
            # bool is an int subclass, so compare exact types
            if type(value) is not type(default):
                raise ValueError(
                    f"Config key '{key}' expects {type(default).__name__}, got {type(value).__name__}"
                )
            values[key] = value
        if values.get("max_predicate_depth", 1) < 1:
            raise ValueError("Config key 'max_predicate_depth' must be at least 1")
        return cls(**values)


def parse_config(text: str) -> CompilerConfig:
    return CompilerConfig.from_entries(ConfigParser().parse(text))


def load_config(path: str | Path) -> CompilerConfig:
    """Load a config file; see :class:`ConfigParser` for the syntax."""
    config_path = Path(path)
    config = parse_config(config_path.read_text())
    logger.debug("Loaded %s from %s", config, config_path)
    return config
