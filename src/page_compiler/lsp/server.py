"""Page object language server: diagnostics, completion, hover via pygls."""

from __future__ import annotations

import json
import re
from pathlib import Path
from urllib.parse import unquote, urlparse

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from page_compiler.actions import BUILTIN_ACTIONS
from page_compiler.cli import identifier_for
from page_compiler.compiler import PageObjectCompiler
from page_compiler.errors import CompilationError
from page_compiler.types import TypeRegistry

# ---------------------------------------------------------------------------
# Static data
# ---------------------------------------------------------------------------

ACTION_DESCRIPTIONS: dict[str, str] = {
    action.name: f"{action.description} ({action.capability.value}, returns {action.return_type.name})"
    for action in BUILTIN_ACTIONS
}

TYPE_TOKENS: list[str] = TypeRegistry().list_types()

# Owner names look like "element 'foo'" or "method 'bar'"
_OWNER_RE = re.compile(r"^(element|method) '([^']+)'")

_APPLY_RE = re.compile(r'"apply"\s*:\s*"?[\w]*$')
_TYPE_RE = re.compile(r'"type"\s*:\s*"?[\w\-/]*$')

# ---------------------------------------------------------------------------
# Helpers (module-level so they are easy to unit-test)
# ---------------------------------------------------------------------------


def lexpos_to_position(source: str, lexpos: int) -> types.Position:
    """Convert a character offset into an LSP ``Position(line, character)``."""
    line = source.count("\n", 0, lexpos)
    last_nl = source.rfind("\n", 0, lexpos)
    character = lexpos if last_nl == -1 else lexpos - last_nl - 1
    return types.Position(line=line, character=character)


def _owner_offset(source: str, owner: str | None) -> int | None:
    """Offset of the ``"name": "<owner name>"`` entry the error belongs to."""
    if not owner:
        return None
    m = _OWNER_RE.match(owner)
    if not m:
        return None
    name_match = re.search(r'"name"\s*:\s*"' + re.escape(m.group(2)) + '"', source)
    return name_match.start() if name_match else None


def _word_at_position(line_text: str, character: int) -> str:
    """Return the contiguous identifier-like word surrounding *character*."""
    if character < 0 or character >= len(line_text):
        return ""
    ch = line_text[character]
    if not (ch.isalnum() or ch == "_"):
        return ""
    left = character
    while left > 0 and (line_text[left - 1].isalnum() or line_text[left - 1] == "_"):
        left -= 1
    right = character
    while right < len(line_text) and (line_text[right].isalnum() or line_text[right] == "_"):
        right += 1
    return line_text[left:right]


def _identifier_for_uri(uri: str, namespace: str) -> str:
    return identifier_for(Path(unquote(urlparse(uri).path)), namespace)


def diagnose(source: str, identifier: str, compiler: PageObjectCompiler) -> list[types.Diagnostic]:
    """Compile *source* and turn the first failure into a diagnostic."""
    try:
        tree = json.loads(source)
    except json.JSONDecodeError as exc:
        offset: int | None = exc.pos
        message = f"Invalid JSON: {exc.msg}"
    else:
        try:
            compiler.compile(identifier, tree)
            return []
        except CompilationError as exc:
            offset = _owner_offset(source, exc.owner)
            message = str(exc)

    if offset is not None:
        start = lexpos_to_position(source, offset)
    else:
        start = types.Position(line=0, character=0)
    end = types.Position(line=start.line, character=start.character + 1)
    return [
        types.Diagnostic(
            range=types.Range(start=start, end=end),
            severity=types.DiagnosticSeverity.Error,
            source="page-compiler",
            message=message,
        )
    ]


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

server = LanguageServer("page-compiler-language-server", "0.1.0")
_compiler = PageObjectCompiler()


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: types.DidOpenTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: types.DidChangeTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


def _validate_document(uri: str) -> None:
    doc = server.workspace.get_text_document(uri)
    identifier = _identifier_for_uri(uri, _compiler.config.namespace)
    diagnostics = diagnose(doc.source, identifier, _compiler)
    server.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(
    types.TEXT_DOCUMENT_COMPLETION,
    types.CompletionOptions(trigger_characters=[":", '"']),
)
def completions(params: types.CompletionParams) -> types.CompletionList:
    doc = server.workspace.get_text_document(params.text_document.uri)
    line_text = doc.lines[params.position.line] if params.position.line < len(doc.lines) else ""
    prefix = line_text[: params.position.character]
    return types.CompletionList(is_incomplete=False, items=completion_items(prefix))


def completion_items(prefix: str) -> list[types.CompletionItem]:
    """Actions after ``"apply":``, type tokens after ``"type":``."""
    items: list[types.CompletionItem] = []
    if _APPLY_RE.search(prefix):
        for name, desc in ACTION_DESCRIPTIONS.items():
            items.append(
                types.CompletionItem(
                    label=name,
                    kind=types.CompletionItemKind.Method,
                    detail=desc,
                )
            )
    elif _TYPE_RE.search(prefix):
        for token in TYPE_TOKENS:
            items.append(
                types.CompletionItem(
                    label=token,
                    kind=types.CompletionItemKind.TypeParameter,
                )
            )
    return items


@server.feature(types.TEXT_DOCUMENT_HOVER)
def hover(params: types.HoverParams) -> types.Hover | None:
    doc = server.workspace.get_text_document(params.text_document.uri)
    if params.position.line >= len(doc.lines):
        return None
    line_text = doc.lines[params.position.line]
    word = _word_at_position(line_text, params.position.character)
    if word not in ACTION_DESCRIPTIONS:
        return None
    return types.Hover(
        contents=types.MarkupContent(
            kind=types.MarkupKind.Markdown,
            value=f"**{word}**: {ACTION_DESCRIPTIONS[word]}",
        )
    )


def main() -> None:
    server.start_io()


if __name__ == "__main__":
    main()
