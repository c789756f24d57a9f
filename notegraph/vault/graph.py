"""Reference graph construction."""

from collections import Counter
from dataclasses import dataclass, field

from ..models import Diagnostic, DiagnosticKind, Severity
from .parser import normalize_identifier


@dataclass
class DiagnosticReport:
    """Ordered collection of diagnostics from loading and building."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def extend(self, diagnostics) -> None:
        self.diagnostics.extend(diagnostics)

    def by_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]

    def counts(self) -> dict[str, int]:
        """Count diagnostics by severity."""
        counts = {s.value: 0 for s in Severity}
        for d in self.diagnostics:
            counts[d.severity.value] += 1
        return counts

    def has_at_least(self, level: Severity) -> bool:
        order = [Severity.ERROR, Severity.WARNING, Severity.INFO]
        threshold = order.index(level)
        return any(order.index(d.severity) <= threshold for d in self.diagnostics)

    def to_dict(self) -> dict:
        return {
            "counts": self.counts(),
            "by_kind": dict(Counter(d.kind.value for d in self.diagnostics)),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self):
        return iter(self.diagnostics)


@dataclass
class NoteGraph:
    """Notes and their references, stored as an index arena.

    Node indices are assigned once at construction and never reused.
    Edges keep the direction they were written in, but neighbour queries
    treat them as undirected.
    """

    names: list[str] = field(default_factory=list)  # index -> display name
    index: dict[str, int] = field(default_factory=dict)  # identifier -> index
    edges: list[tuple[int, int]] = field(default_factory=list)  # (source, target), duplicates kept
    _neighbors: list[list[int]] = field(default_factory=list)

    def add_node(self, identifier: str, name: str) -> int:
        idx = len(self.names)
        self.names.append(name)
        self.index[identifier] = idx
        self._neighbors.append([])
        return idx

    def add_edge(self, src: int, dst: int) -> None:
        self.edges.append((src, dst))
        self._neighbors[src].append(dst)
        self._neighbors[dst].append(src)

    def __len__(self) -> int:
        return len(self.names)

    def node_id(self, name: str) -> int | None:
        """Look up a node index by name or identifier."""
        return self.index.get(normalize_identifier(name))

    def identifiers(self) -> list[str]:
        """Identifiers ordered by node index."""
        ordered = [""] * len(self.names)
        for ident, idx in self.index.items():
            ordered[idx] = ident
        return ordered

    def neighbors_undirected(self, idx: int) -> set[int]:
        return set(self._neighbors[idx])

    def neighbor_list(self, idx: int) -> list[int]:
        """Undirected neighbours, one entry per incident edge."""
        return self._neighbors[idx]

    def out_degree(self, idx: int) -> int:
        return sum(1 for src, _ in self.edges if src == idx)

    def in_degree(self, idx: int) -> int:
        return sum(1 for _, dst in self.edges if dst == idx)


def build_graph(
    links: dict[str, list[str]],
    names: dict[str, str] | None = None,
) -> tuple[NoteGraph, DiagnosticReport]:
    """Build the reference graph from identifier -> link targets.

    Args:
        links: One entry per document, even when its link list is empty
        names: Optional identifier -> display name mapping (defaults to the key)

    Returns:
        The graph and a report of dangling links, self-references and orphans.
        Invalid references never abort construction.
    """
    names = names or {}
    graph = NoteGraph()
    report = DiagnosticReport()

    # Keys that normalize alike collapse; the later entry wins
    entries: dict[str, tuple[str, list[str]]] = {}
    for key, targets in links.items():
        entries[normalize_identifier(key)] = (key, targets)

    # Every node exists before any edge so forward references resolve
    for ident, (key, _) in entries.items():
        graph.add_node(ident, names.get(key, key))

    for ident, (_, targets) in entries.items():
        src = graph.index[ident]
        source_name = graph.names[src]
        for target in targets:
            dst = graph.index.get(normalize_identifier(target))
            if dst is None:
                report.add(
                    Diagnostic(
                        kind=DiagnosticKind.DANGLING_LINK,
                        source=source_name,
                        target=target,
                        message=f"'{target}' is a bad link",
                    )
                )
                continue
            if dst == src:
                report.add(
                    Diagnostic(
                        kind=DiagnosticKind.SELF_REFERENCE,
                        source=source_name,
                        target=target,
                        message="Self reference",
                    )
                )
                continue
            graph.add_edge(src, dst)

    for idx, name in enumerate(graph.names):
        if not graph.neighbors_undirected(idx):
            report.add(
                Diagnostic(
                    kind=DiagnosticKind.ORPHAN_NOTE,
                    source=name,
                    message="Has no neighbors",
                )
            )

    return graph, report
