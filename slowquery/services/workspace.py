"""Editor-side state: open documents, the active document and diagnostics.

The rule engine is pure; everything keyed by document identity lives here.
"""

import bisect
import logging
import re
from typing import Optional

from slowquery.core.config import settings
from slowquery.core.error_handler import DocumentNotFoundError
from slowquery.core.models import Diagnostic, Finding, Position, Range
from slowquery.services.analyzer.rules_engine import analyze

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class TextDocument:
    """A document as the host sees it: identity, content type and text."""

    def __init__(self, uri: str, language_id: str, text: str, version: int = 1):
        self.uri = uri
        self.language_id = language_id
        self.version = version
        self._text = ""
        self._line_starts = [0]
        self.set_text(text)

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self._text = text or ""
        self._line_starts = [0] + [m.end() for m in _LINE_BREAK.finditer(self._text)]

    def position_at(self, offset: int) -> Position:
        """Translate a character offset into a zero-based line/character."""
        offset = max(0, min(offset, len(self._text)))
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return Position(line=line, character=offset - self._line_starts[line])

    def is_sql(self) -> bool:
        return self.language_id.lower() in settings.get_sql_language_ids()

    def __repr__(self) -> str:
        return f"TextDocument(uri={self.uri!r}, language_id={self.language_id!r}, version={self.version})"


class DiagnosticCollection:
    """Diagnostics per document URI. Each update replaces the previous set."""

    def __init__(self, name: str = "sql"):
        self.name = name
        self._entries: dict[str, list[Diagnostic]] = {}

    def set(self, uri: str, diagnostics: list[Diagnostic]) -> None:
        self._entries[uri] = list(diagnostics)

    def get(self, uri: str) -> list[Diagnostic]:
        return list(self._entries.get(uri, []))

    def delete(self, uri: str) -> None:
        self._entries.pop(uri, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, uri: str) -> bool:
        return uri in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def to_diagnostic(document: TextDocument, finding: Finding) -> Diagnostic:
    return Diagnostic(
        **finding.model_dump(),
        range=Range(
            start=document.position_at(finding.start_offset),
            end=document.position_at(finding.end_offset),
        ),
    )


def report_diagnostics(document: TextDocument, collection: DiagnosticCollection) -> list[Diagnostic]:
    """
    Analyze a document and store its diagnostics in ``collection``.

    Non-SQL documents return an empty list without running the catalog and
    leave the collection untouched.
    """
    if not document.is_sql():
        logger.debug(f"Skipping {document.uri}: language '{document.language_id}' is not SQL")
        return []

    diagnostics = [to_diagnostic(document, finding) for finding in analyze(document.text)]
    collection.set(document.uri, diagnostics)
    return diagnostics


class Workspace:
    """Open documents plus the one currently active (focused) document."""

    def __init__(self, collection: Optional[DiagnosticCollection] = None):
        self.documents: dict[str, TextDocument] = {}
        self.diagnostics = collection or DiagnosticCollection()
        self._active_uri: Optional[str] = None

    @property
    def active_document(self) -> Optional[TextDocument]:
        if self._active_uri is None:
            return None
        return self.documents.get(self._active_uri)

    def get_document(self, uri: str) -> TextDocument:
        document = self.documents.get(uri)
        if document is None:
            raise DocumentNotFoundError(uri)
        return document

    def open_document(self, uri: str, language_id: str, text: str, activate: bool = True) -> TextDocument:
        existing = self.documents.get(uri)
        if existing is not None:
            # Reopening an open document behaves like an edit
            existing.language_id = language_id
            existing.set_text(text)
            existing.version += 1
            document = existing
        else:
            document = TextDocument(uri, language_id, text)
            self.documents[uri] = document

        if activate:
            self._active_uri = uri
        return document

    def change_document(self, uri: str, text: str) -> TextDocument:
        document = self.get_document(uri)
        document.set_text(text)
        document.version += 1
        return document

    def focus(self, uri: str) -> TextDocument:
        document = self.get_document(uri)
        self._active_uri = uri
        return document

    def close_document(self, uri: str) -> None:
        self.get_document(uri)
        del self.documents[uri]
        self.diagnostics.delete(uri)
        if self._active_uri == uri:
            self._active_uri = None


# Global workspace instance
_workspace: Optional[Workspace] = None


def get_workspace() -> Workspace:
    """Get global workspace instance."""
    global _workspace
    if _workspace is None:
        _workspace = Workspace()
    return _workspace
