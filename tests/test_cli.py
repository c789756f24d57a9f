import json
from pathlib import Path

from click.testing import CliRunner

from notegraph import __version__
from notegraph.cli import cli


def test_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_check_json(abc_vault: Path) -> None:
    result = CliRunner().invoke(cli, ["check", str(abc_vault), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["by_kind"]["dangling-link"] == 1


def test_check_fail_on_warning(abc_vault: Path) -> None:
    result = CliRunner().invoke(cli, ["check", str(abc_vault), "--fail-on", "warning"])
    assert result.exit_code == 1


def test_missing_root_is_reported(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["check", str(tmp_path / "nope")])
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_root_not_a_directory(tmp_path: Path) -> None:
    f = tmp_path / "a.md"
    f.write_text("", encoding="utf-8")
    result = CliRunner().invoke(cli, ["graph", str(f)])
    assert result.exit_code == 1
    assert "is not a directory" in result.output


def test_too_many_roots_is_a_usage_error(abc_vault: Path) -> None:
    result = CliRunner().invoke(cli, ["check", str(abc_vault), str(abc_vault)])
    assert result.exit_code == 2


def test_bad_config_is_reported(abc_vault: Path) -> None:
    (abc_vault / ".notegraph.toml").write_text("[layout]\nscale = -1\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["check", str(abc_vault)])
    assert result.exit_code == 1
    assert "scale must be positive" in result.output


def test_graph_dot_to_file(abc_vault: Path, tmp_path: Path) -> None:
    out = tmp_path / "notes.dot"
    result = CliRunner().invoke(cli, ["graph", str(abc_vault), "--format", "dot", "--out", str(out)])
    assert result.exit_code == 0
    assert '"B" -- "A";' in out.read_text(encoding="utf-8")


def test_view_no_documents_never_opens_window(make_vault) -> None:
    root = make_vault({"readme.txt": ""})
    result = CliRunner().invoke(cli, ["view", str(root)])
    assert result.exit_code == 1
    assert "No .md files found" in result.output


def test_bad_view_config_is_reported(abc_vault: Path) -> None:
    (abc_vault / ".notegraph.toml").write_text("[view]\nmin_zoom = 5.0\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["view", str(abc_vault)])
    assert result.exit_code == 1
    assert "zoom bounds" in result.output
