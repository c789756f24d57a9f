"""Note loading, link parsing and graph construction."""

from .graph import DiagnosticReport, NoteGraph, build_graph
from .loader import LoadedNotes, discover_documents, load_graph, load_notes, read_documents
from .parser import extract_links, normalize_identifier

__all__ = [
    "DiagnosticReport",
    "NoteGraph",
    "build_graph",
    "LoadedNotes",
    "discover_documents",
    "load_graph",
    "load_notes",
    "read_documents",
    "extract_links",
    "normalize_identifier",
]
