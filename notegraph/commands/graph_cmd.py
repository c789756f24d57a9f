"""Graph command - export the note graph and its settled layout."""

from __future__ import annotations

import html
import json
from dataclasses import replace
from pathlib import Path

from rich.console import Console

from ..config import Config, resolve_config
from ..layout.engine import LayoutEngine
from ..vault.graph import NoteGraph
from ..view.scene import DEFAULT_PALETTE, Color
from ..view.viewport import Rect, Viewport, graph_bounds
from .check import build_from_config


def run_graph(
    root: Path,
    *,
    config: Config | None = None,
    fmt: str = "md",
    out: Path | None = None,
    top: int = 25,
    steps: int | None = None,
) -> int:
    """Output a graph summary or a drawing of the settled layout.

    Args:
        root: Notes directory
        config: Loaded configuration (defaults to the one found in root)
        fmt: md|json|dot|svg|html
        out: Optional output path; prints to stdout if None
        top: How many nodes to list in the degree tables
        steps: Layout steps for svg/html (defaults to the configured max_steps)
    """
    console = Console(stderr=True)
    config = config or resolve_config(root)
    graph, report = build_from_config(root, config)

    if fmt in ("svg", "html"):
        params = config.layout
        if steps is not None:
            params = replace(params, max_steps=steps)
        engine = LayoutEngine(graph, params)
        engine.run()
        svg = to_svg(graph, engine.get_positions(), title=str(root))
        text = svg if fmt == "svg" else wrap_html(svg, title=str(root))
    else:
        payload = summarize_graph(graph, title=f"Note graph: {root}", top=top)
        payload["diagnostics"] = report.counts()
        if fmt == "json":
            text = json.dumps(payload, indent=2, sort_keys=True) + "\n"
        elif fmt == "dot":
            text = to_dot(graph, title=payload["title"])
        else:
            text = to_markdown(payload)

    if out:
        out.write_text(text, encoding="utf-8")
        console.print(f"Wrote graph output to {out}", style="green")
    else:
        print(text, end="" if text.endswith("\n") else "\n")

    return 0


def summarize_graph(graph: NoteGraph, *, title: str, top: int) -> dict:
    rows = [
        {
            "name": name,
            "in_degree": graph.in_degree(idx),
            "out_degree": graph.out_degree(idx),
            "neighbors": len(graph.neighbors_undirected(idx)),
        }
        for idx, name in enumerate(graph.names)
    ]

    def top_list(key: str) -> list[dict]:
        ranked = sorted(rows, key=lambda r: (-r[key], r["name"]))
        return ranked[: max(0, top)]

    return {
        "title": title,
        "node_count": len(graph),
        "edge_count": len(graph.edges),
        "orphan_count": sum(1 for r in rows if r["neighbors"] == 0),
        "top_in_degree": top_list("in_degree"),
        "top_out_degree": top_list("out_degree"),
    }


def to_markdown(payload: dict) -> str:
    lines: list[str] = []
    lines.append(f"## {payload['title']}")
    lines.append("")
    lines.append(f"- Notes: {payload['node_count']}")
    lines.append(f"- Links: {payload['edge_count']}")
    lines.append(f"- Orphans: {payload['orphan_count']}")
    lines.append("")

    def table(title: str, rows: list[dict]) -> None:
        lines.append(f"### {title}")
        lines.append("")
        lines.append("| Note | In-degree | Out-degree |")
        lines.append("|---|---:|---:|")
        for r in rows:
            lines.append(f"| `{r['name']}` | {r['in_degree']} | {r['out_degree']} |")
        lines.append("")

    table("Top in-degree", payload["top_in_degree"])
    table("Top out-degree", payload["top_out_degree"])

    return "\n".join(lines).rstrip() + "\n"


def to_dot(graph: NoteGraph, *, title: str) -> str:
    def esc(s: str) -> str:
        return s.replace("\\", "\\\\").replace('"', '\\"')

    lines = [
        "graph notes {",
        f'  label="{esc(title)}";',
        "  labelloc=t;",
        "  layout=neato;",
        '  bgcolor="#2e3440";',
        '  node [fontname="Helvetica", fontsize=10, shape=circle, style=filled, fillcolor="#d8dee9", fontcolor="#e5e9f0"];',
        '  edge [color="#4c566a", penwidth=0.8];',
    ]
    for name in sorted(graph.names):
        lines.append(f'  "{esc(name)}";')
    for src, dst in graph.edges:
        lines.append(f'  "{esc(graph.names[src])}" -- "{esc(graph.names[dst])}";')
    lines.append("}")
    return "\n".join(lines) + "\n"


def _css(color: Color) -> str:
    r, g, b, a = color
    return f"rgba({r},{g},{b},{a / 255:.2f})"


def to_svg(graph: NoteGraph, positions, *, title: str, width: int = 1200, height: int = 900) -> str:
    """Render node positions as a standalone SVG (no external deps)."""
    surface = Rect(0, 0, width, height)
    viewport = Viewport(padding=40.0)
    bounds = graph_bounds(positions)
    screen = [viewport.to_screen(p, bounds, surface) for p in positions]
    palette = DEFAULT_PALETTE

    def esc(s: str) -> str:
        return html.escape(s, quote=True)

    parts: list[str] = []
    parts.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}" style="background:{_css(palette.background)}">'
    )
    parts.append(f"<title>{esc(title)}</title>")

    parts.append(f'<g id="edges" stroke="{_css(palette.primary)}" stroke-width="1">')
    for src, dst in graph.edges:
        (x1, y1), (x2, y2) = screen[src], screen[dst]
        parts.append(f'<line x1="{x1:.1f}" y1="{y1:.1f}" x2="{x2:.1f}" y2="{y2:.1f}"/>')
    parts.append("</g>")

    parts.append('<g id="nodes">')
    for idx, (x, y) in enumerate(screen):
        r = 4.0 + min(8.0, float(len(graph.neighbors_undirected(idx))))
        parts.append(f'<circle cx="{x:.1f}" cy="{y:.1f}" r="{r:.1f}" fill="{_css(palette.success)}"/>')
        parts.append(
            f'<text x="{(x + r + 2):.1f}" y="{(y + 4):.1f}" fill="{_css(palette.text)}" '
            f'font-family="Helvetica" font-size="11">{esc(graph.names[idx])}</text>'
        )
    parts.append("</g>")
    parts.append("</svg>")
    return "\n".join(parts) + "\n"


_PANZOOM_SCRIPT = """
(function () {
  const svg = document.querySelector('#viewport svg');
  if (!svg) return;
  const vb = svg.viewBox.baseVal;
  const initial = { x: vb.x, y: vb.y, width: vb.width, height: vb.height };
  const clamp = (v, lo, hi) => Math.max(lo, Math.min(hi, v));
  let drag = null;

  svg.addEventListener('pointerdown', (e) => {
    svg.setPointerCapture(e.pointerId);
    drag = { x: e.clientX, y: e.clientY, vbX: vb.x, vbY: vb.y };
  });
  svg.addEventListener('pointerup', () => { drag = null; });
  svg.addEventListener('pointermove', (e) => {
    if (!drag) return;
    const rect = svg.getBoundingClientRect();
    vb.x = drag.vbX - (e.clientX - drag.x) * (vb.width / rect.width);
    vb.y = drag.vbY - (e.clientY - drag.y) * (vb.height / rect.height);
  });
  svg.addEventListener('wheel', (e) => {
    e.preventDefault();
    const rect = svg.getBoundingClientRect();
    const px = (e.clientX - rect.left) / rect.width;
    const py = (e.clientY - rect.top) / rect.height;
    const factor = e.deltaY > 0 ? 1 / 1.15 : 1.15;
    const newW = clamp(vb.width / factor, initial.width / 3, initial.width * 10);
    const newH = newW * (initial.height / initial.width);
    vb.x += (vb.width - newW) * px;
    vb.y += (vb.height - newH) * py;
    vb.width = newW;
    vb.height = newH;
  }, { passive: false });
  document.getElementById('resetBtn').addEventListener('click', () => {
    vb.x = initial.x; vb.y = initial.y; vb.width = initial.width; vb.height = initial.height;
  });
})();
"""


def wrap_html(svg: str, *, title: str) -> str:
    """Wrap an SVG in a standalone page with drag-to-pan and wheel zoom."""
    t = html.escape(title, quote=True)
    return (
        "<!doctype html>\n"
        "<html>\n"
        "<head>\n"
        '  <meta charset="utf-8" />\n'
        f"  <title>{t}</title>\n"
        "  <style>\n"
        "    html, body { height: 100%; margin: 0; background: #2e3440; color: #e5e9f0; font-family: system-ui, sans-serif; }\n"
        "    .bar { padding: 8px 12px; display: flex; gap: 12px; align-items: center; }\n"
        "    .bar button { background: #3b4252; color: #e5e9f0; border: 1px solid #4c566a; border-radius: 6px; padding: 4px 10px; }\n"
        "    #viewport { height: calc(100vh - 48px); }\n"
        "    svg { width: 100%; height: 100%; display: block; touch-action: none; user-select: none; }\n"
        "  </style>\n"
        "</head>\n"
        "<body>\n"
        f'  <div class="bar"><button id="resetBtn" type="button">Reset</button><span>Drag to pan, wheel to zoom</span></div>\n'
        f'  <div id="viewport">\n{svg}  </div>\n'
        f"  <script>{_PANZOOM_SCRIPT}</script>\n"
        "</body>\n"
        "</html>\n"
    )
