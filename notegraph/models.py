"""Data models for notes and graph diagnostics."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class NoteGraphError(Exception):
    """Base class for conditions that prevent a graph from being built."""


class DiagnosticKind(str, Enum):
    """Kinds of findings reported while reading notes and building the graph."""

    UNREADABLE_DOCUMENT = "unreadable-document"
    DUPLICATE_NOTE = "duplicate-note"
    DANGLING_LINK = "dangling-link"
    SELF_REFERENCE = "self-reference"
    ORPHAN_NOTE = "orphan-note"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


SEVERITY_BY_KIND = {
    DiagnosticKind.UNREADABLE_DOCUMENT: Severity.ERROR,
    DiagnosticKind.DANGLING_LINK: Severity.WARNING,
    DiagnosticKind.SELF_REFERENCE: Severity.WARNING,
    DiagnosticKind.DUPLICATE_NOTE: Severity.INFO,
    DiagnosticKind.ORPHAN_NOTE: Severity.INFO,
}


@dataclass
class Document:
    """A note read from disk."""

    path: Path
    name: str  # filename stem, as written
    links: list[str] = field(default_factory=list)  # raw [[target]] identifiers, in order


@dataclass
class Diagnostic:
    """A single finding about a document or reference."""

    kind: DiagnosticKind
    source: str  # note name (or path for unreadable documents)
    message: str
    target: str | None = None
    path: Path | None = None

    @property
    def severity(self) -> Severity:
        return SEVERITY_BY_KIND[self.kind]

    def to_dict(self) -> dict:
        d = {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "source": self.source,
            "message": self.message,
        }
        if self.target is not None:
            d["target"] = self.target
        if self.path is not None:
            d["path"] = str(self.path)
        return d

    def __str__(self) -> str:
        return f"{self.severity.value.upper()}: [{self.kind.value}] {self.source} - {self.message}"
