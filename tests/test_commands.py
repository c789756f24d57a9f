import json
from pathlib import Path

import pytest

from notegraph.commands.check import exit_code_for, run_check
from notegraph.commands.graph_cmd import run_graph, summarize_graph, to_dot, wrap_html
from notegraph.commands.view_cmd import make_controller
from notegraph.config import Config
from notegraph.vault.loader import NoDocumentsError


def test_check_json_reports_every_diagnostic(abc_vault: Path, capsys) -> None:
    code = run_check(abc_vault, output_json=True)
    payload = json.loads(capsys.readouterr().out)

    assert code == 0
    assert payload["node_count"] == 3
    assert payload["edge_count"] == 1
    assert payload["by_kind"] == {"dangling-link": 1, "orphan-note": 1}
    assert payload["counts"] == {"error": 0, "warning": 1, "info": 1}


def test_check_fail_on_warning(abc_vault: Path, capsys) -> None:
    assert run_check(abc_vault, fail_on="warning") == 1
    out = capsys.readouterr().out
    assert "dangling-link" in out
    assert "orphan-note" in out
    assert "3 notes, 1 links" in out


def test_check_unreadable_is_an_error(make_vault, capsys) -> None:
    root = make_vault({"a.md": ""})
    (root / "b.md").write_bytes(b"\xc3\x28")
    assert run_check(root, output_json=True) == 1
    assert run_check(root, output_json=True, fail_on="never") == 0


def test_check_no_documents(make_vault) -> None:
    root = make_vault({"a.txt": ""})
    with pytest.raises(NoDocumentsError):
        run_check(root)


def test_exit_code_policy(abc_graph) -> None:
    _, report = abc_graph
    assert exit_code_for(report, "error") == 0
    assert exit_code_for(report, "warning") == 1
    assert exit_code_for(report, "never") == 0


def test_graph_json_summary(abc_vault: Path, capsys) -> None:
    run_graph(abc_vault, fmt="json", top=2)
    payload = json.loads(capsys.readouterr().out)

    assert payload["node_count"] == 3
    assert payload["edge_count"] == 1
    assert payload["orphan_count"] == 1
    assert [r["name"] for r in payload["top_in_degree"]] == ["A", "B"]
    assert payload["top_out_degree"][0]["name"] == "B"
    assert payload["diagnostics"]["warning"] == 1


def test_graph_markdown_to_file(abc_vault: Path, tmp_path: Path) -> None:
    out = tmp_path / "graph.md"
    assert run_graph(abc_vault, fmt="md", out=out) == 0
    text = out.read_text(encoding="utf-8")
    assert text.startswith("## Note graph:")
    assert "- Notes: 3" in text
    assert "| `A` | 1 | 0 |" in text


def test_graph_dot_is_undirected(abc_graph) -> None:
    graph, _ = abc_graph
    dot = to_dot(graph, title='my "notes"')
    assert dot.startswith("graph notes {")
    assert '"B" -- "A";' in dot
    assert 'label="my \\"notes\\""' in dot
    assert "->" not in dot


def test_graph_svg_and_html(abc_vault: Path, capsys) -> None:
    run_graph(abc_vault, fmt="svg", steps=5)
    svg = capsys.readouterr().out
    assert svg.startswith("<svg")
    assert svg.count("<circle") == 3
    assert svg.count("<line") == 1

    run_graph(abc_vault, fmt="html", steps=5)
    page = capsys.readouterr().out
    assert "<!doctype html>" in page
    assert "<svg" in page


def test_graph_html_includes_panzoom_script() -> None:
    html = wrap_html('<svg viewBox="0 0 10 10"></svg>', title="t")
    assert "<svg" in html
    assert "Drag to pan" in html
    assert "wheel" in html


def test_summary_respects_top(abc_graph) -> None:
    graph, _ = abc_graph
    assert summarize_graph(graph, title="t", top=0)["top_in_degree"] == []


def test_make_controller_wires_rebuild(abc_vault: Path) -> None:
    config = Config()
    controller, report = make_controller(abc_vault, config)
    assert len(controller.graph) == 3
    assert len(report) == 2
    assert controller.surface.width == config.view.width
    assert controller.viewport.max_zoom == config.view.max_zoom
    graph, _ = controller.rebuild()
    assert graph.names == controller.graph.names
