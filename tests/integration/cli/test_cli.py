"""Integration tests for the pagemd CLI commands"""

import pytest
from typer.testing import CliRunner

from pagemd.cli.cli import app


runner = CliRunner()

HELLO = '---\ntitle: "Hello"\nstatus: "Published"\n---\n\n# Hi\n\nWorld **bold**\n'
DRAFT = '---\ntitle: "Draft post"\nstatus: "Draft"\ntags:\n  - wip\n---\n\nNot yet.\n'


@pytest.fixture(autouse=True)
def project_dir(tmp_path, monkeypatch):
    """Run each command in an empty project with its own SQLite file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PAGEMD_DB_URL", f"sqlite:///{tmp_path}/test.db")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "hello.md").write_text(HELLO)
    (tmp_path / "docs" / "draft.md").write_text(DRAFT)
    return tmp_path


@pytest.mark.parametrize("cmd", ["init", "list", "export", "import", "validate"])
def test_command_help(cmd):
    result = runner.invoke(app, [cmd, "--help"])
    assert result.exit_code == 0, result.output


def test_init():
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    assert "Page store initialized" in result.output


def test_list_empty_store_exits_1():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    assert "No pages found." in result.output


def test_import_list_export(project_dir):
    result = runner.invoke(app, ["import", "docs"])
    assert result.exit_code == 0, result.output
    assert "Import complete - 2 imported, 0 failed, 2 total" in result.output

    result = runner.invoke(app, ["list", "--status", "Draft"])
    assert result.exit_code == 0, result.output
    assert "Draft post" in result.output
    assert "1 page(s)" in result.output

    out = project_dir / "out"
    result = runner.invoke(app, ["export", "--all", "--out-dir", str(out)])
    assert result.exit_code == 0, result.output
    assert "2 exported, 0 failed, 2 total" in result.output
    assert (out / "hello.md").read_text(encoding="utf-8") == HELLO


def test_export_with_tag_filter(project_dir):
    runner.invoke(app, ["import", "docs"])
    out = project_dir / "out"
    result = runner.invoke(app, ["export", "--tag", "wip", "--out-dir", str(out)])
    assert result.exit_code == 0, result.output
    assert [p.name for p in out.iterdir()] == ["draft-post.md"]


def test_export_without_selection_fails():
    result = runner.invoke(app, ["export"])
    assert result.exit_code == 1


def test_export_missing_page_exits_1(project_dir):
    runner.invoke(app, ["import", "docs"])
    result = runner.invoke(app, ["export", "--page", "ghost", "--out-dir", str(project_dir / "out")])
    assert result.exit_code == 1
    assert "0 exported, 1 failed, 1 total" in result.output


def test_import_with_default_status(project_dir):
    (project_dir / "plain.md").write_text("Just text\n")
    result = runner.invoke(app, ["import", "plain.md", "--default-status", "Published"])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["list", "--status", "Published"])
    assert "plain" in result.output


def test_validate_ok(project_dir):
    result = runner.invoke(app, ["validate", "docs"])
    assert result.exit_code == 0, result.output
    assert "2 valid, 0 invalid, 2 total" in result.output


def test_validate_reports_issues(project_dir):
    (project_dir / "bad.md").write_text('---\ntitle: "Bad"\ndate: "someday"\n---\n')
    result = runner.invoke(app, ["validate", "bad.md"])
    assert result.exit_code == 1
    assert "INVALID: bad.md" in result.output
    assert "Empty content" in result.output
    assert "Invalid date format" in result.output


def test_validate_no_files(project_dir):
    (project_dir / "empty").mkdir()
    result = runner.invoke(app, ["validate", "empty"])
    assert result.exit_code == 1
