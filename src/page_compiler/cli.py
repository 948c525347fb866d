"""Command-line compiler for page object JSON files."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from page_compiler.compiler import PageObjectCompiler
from page_compiler.config import CompilerConfig, load_config
from page_compiler.dump import declaration_to_dict
from page_compiler.errors import BatchCompilationError

PAGE_OBJECT_SUFFIXES = (".utam.json", ".json")


def identifier_for(path: Path, namespace: str) -> str:
    """``<namespace>/pageObjects/<file name without suffix>``."""
    name = path.name
    for suffix in PAGE_OBJECT_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    return f"{namespace}/pageObjects/{name}"


def load_sources(paths: list[Path], namespace: str) -> list[tuple[str, Any]]:
    sources = []
    for path in paths:
        with open(path) as f:
            sources.append((identifier_for(path, namespace), json.load(f)))
    return sources


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Compile page object JSON files into declarations"
    )
    parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="Page object JSON files",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Compiler config file",
    )
    parser.add_argument(
        "-n", "--namespace",
        default=None,
        help="Namespace used to build page object identifiers",
    )
    parser.add_argument(
        "-j", "--json",
        action="store_true",
        help="Print compiled declarations as JSON",
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=None,
        help="Compile on a pool of this many threads",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log compilation progress",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else CompilerConfig()
    except (OSError, SyntaxError, ValueError) as e:
        print(f"Error: Cannot load config: {e}", file=sys.stderr)
        return 1
    if args.namespace:
        config = replace(config, namespace=args.namespace)

    for path in args.files:
        if not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1

    try:
        sources = load_sources(args.files, config.namespace)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: Cannot read page object: {e}", file=sys.stderr)
        return 1

    compiler = PageObjectCompiler(config)
    try:
        declarations = compiler.compile_all(sources, max_workers=args.workers)
    except BatchCompilationError as e:
        for error in e.failures.values():
            print(f"Error: {error}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([declaration_to_dict(d) for d in declarations.values()], indent=2))
    else:
        for identifier, declaration in declarations.items():
            view = declaration.implementation or declaration.interface
            methods = view.methods if view else ()
            print(f"{identifier}: {declaration.type.full_name} ({len(methods)} methods)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
