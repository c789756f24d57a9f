"""Note discovery and loading."""

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..models import Diagnostic, DiagnosticKind, Document, NoteGraphError
from .graph import DiagnosticReport, NoteGraph, build_graph
from .parser import extract_links, normalize_identifier

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".md",)
DEFAULT_IGNORE_FILE = ".gitignore"


class RootNotFoundError(NoteGraphError):
    def __init__(self, root: Path):
        super().__init__(f"{root} does not exist")
        self.root = root


class RootNotADirectoryError(NoteGraphError):
    def __init__(self, root: Path):
        super().__init__(f"{root} is not a directory")
        self.root = root


class NoDocumentsError(NoteGraphError):
    def __init__(self, root: Path, extensions: tuple[str, ...]):
        super().__init__(f"No {', '.join(extensions)} files found in {root}")
        self.root = root
        self.extensions = extensions


@dataclass
class LoadedNotes:
    """Documents read from a notes directory, keyed by normalized identifier."""

    root: Path
    documents: dict[str, Document] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def link_map(self) -> dict[str, list[str]]:
        """Identifier -> ordered link targets, one entry per document."""
        return {key: list(doc.links) for key, doc in self.documents.items()}

    def names(self) -> dict[str, str]:
        """Identifier -> display name (the filename stem as written)."""
        return {key: doc.name for key, doc in self.documents.items()}


def read_ignore_patterns(path: Path) -> list[str]:
    """Read glob patterns from an ignore file (blank lines and # comments skipped)."""
    patterns = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        patterns.append(stripped)
    return patterns


def is_ignored(rel_path: str, patterns: list[str]) -> bool:
    """Check a root-relative POSIX path against ignore patterns.

    Only a subset of gitignore syntax is understood: fnmatch globs matched
    against the whole path or the file name, a leading ``/`` (dropped) and a
    trailing ``/`` for directories. ``!`` negation is not supported, so a
    negated pattern never re-includes a file. fnmatch's ``*`` also crosses
    ``/``, which makes ``**`` behave like ``*``.
    """
    name = rel_path.rsplit("/", 1)[-1]
    for pattern in patterns:
        if pattern.endswith("/"):
            prefix = pattern.strip("/")
            if rel_path.startswith(prefix + "/") or f"/{prefix}/" in f"/{rel_path}":
                return True
            continue
        anchored = pattern.lstrip("/")
        if fnmatch.fnmatch(rel_path, anchored) or fnmatch.fnmatch(name, anchored):
            return True
    return False


def discover_documents(
    root: Path,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ignore_file: str | None = DEFAULT_IGNORE_FILE,
) -> list[Path]:
    """List candidate note files under root.

    Raises:
        RootNotFoundError: root does not exist
        RootNotADirectoryError: root is not a directory
        NoDocumentsError: nothing matched
    """
    if not root.exists():
        raise RootNotFoundError(root)
    if not root.is_dir():
        raise RootNotADirectoryError(root)

    wanted = {ext.lower() for ext in extensions}
    patterns: list[str] = []
    if ignore_file:
        ignore_path = root / ignore_file
        if ignore_path.is_file():
            patterns = read_ignore_patterns(ignore_path)
            logger.debug("Using %d ignore patterns from %s", len(patterns), ignore_path)

    found = []
    for path in root.rglob("*"):
        rel = path.relative_to(root)
        # Skip hidden files and directories
        if any(part.startswith(".") for part in rel.parts):
            continue
        if not path.is_file() or path.suffix.lower() not in wanted:
            continue
        if patterns and is_ignored(rel.as_posix(), patterns):
            continue
        found.append(path)

    if not found:
        raise NoDocumentsError(root, tuple(extensions))

    return sorted(found)


def read_document(path: Path) -> Document:
    """Read one note and extract its links.

    Raises OSError or UnicodeDecodeError when the file cannot be read as text.
    """
    content = path.read_bytes().decode("utf-8")
    return Document(path=path, name=path.stem, links=extract_links(content))


def read_documents(paths: list[Path], root: Path | None = None) -> LoadedNotes:
    """Read every path, recording unreadable files instead of aborting.

    When two files share a stem the later one replaces the earlier one and a
    duplicate-note diagnostic is recorded.
    """
    notes = LoadedNotes(root=root or Path("."))

    for path in paths:
        try:
            doc = read_document(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", path, e)
            notes.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.UNREADABLE_DOCUMENT,
                    source=path.stem,
                    path=path,
                    message=f"Could not read document: {e}",
                )
            )
            continue

        key = normalize_identifier(doc.name)
        previous = notes.documents.get(key)
        if previous is not None:
            notes.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.DUPLICATE_NOTE,
                    source=doc.name,
                    path=path,
                    message=f"'{path}' replaces '{previous.path}' (same note name)",
                )
            )
        notes.documents[key] = doc

    logger.debug("Read %d documents (%d diagnostics)", len(notes.documents), len(notes.diagnostics))
    return notes


def load_notes(
    root: Path,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ignore_file: str | None = DEFAULT_IGNORE_FILE,
) -> LoadedNotes:
    """Discover and read all notes under root."""
    paths = discover_documents(root, extensions=extensions, ignore_file=ignore_file)
    return read_documents(paths, root=root)


def load_graph(
    root: Path,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ignore_file: str | None = DEFAULT_IGNORE_FILE,
) -> tuple[NoteGraph, DiagnosticReport]:
    """Discover, read and build the graph for a notes directory.

    Loader diagnostics come first in the report, followed by graph diagnostics.
    """
    notes = load_notes(root, extensions=extensions, ignore_file=ignore_file)
    graph, graph_report = build_graph(notes.link_map(), notes.names())

    report = DiagnosticReport()
    report.extend(notes.diagnostics)
    report.extend(graph_report)
    return graph, report
