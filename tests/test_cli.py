"""Smoke tests for the CLI using typer CliRunner."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

import issuedash.settings as settings_module
from issuedash.errors import FetchError, TransportError
from issuedash.main import app
from issuedash.models import IssueRow, Report

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "CONFIG_PATH", tmp_path / "missing.toml")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
    monkeypatch.delenv("ISSUEDASH_USER", raising=False)
    monkeypatch.delenv("ISSUEDASH_ORGS", raising=False)
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


def _report(issue_row: IssueRow) -> Report:
    return Report(personal_other=[issue_row], personal_bot=[], organizational=[])


def test_writes_dashboard(tmp_path: Path, issue_row: IssueRow) -> None:
    output = tmp_path / "site" / "index.html"
    with patch("issuedash.main.GitHubClient", MagicMock()), patch(
        "issuedash.main.build_report", return_value=_report(issue_row)
    ) as build:
        result = runner.invoke(app, ["--user", "jdoss", "--org", "quickvm", "--org", "fedora", "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert "Wrote" in result.output
    assert "Fix null check" in output.read_text()
    config = build.call_args.args[0]
    assert config.user == "jdoss"
    assert config.orgs == ["quickvm", "fedora"]


def test_uses_config_file(tmp_path: Path, issue_row: IssueRow) -> None:
    config_path = tmp_path / "issuedash.toml"
    config_path.write_text('user = "jdoss"\norgs = ["quickvm"]\noutput = "out/index.html"\n')
    with patch("issuedash.main.GitHubClient", MagicMock()), patch(
        "issuedash.main.build_report", return_value=_report(issue_row)
    ):
        result = runner.invoke(app, ["--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "index.html").exists()


def test_pipeline_error_exits_nonzero_and_keeps_previous_output(tmp_path: Path) -> None:
    output = tmp_path / "index.html"
    output.write_text("previous run")
    error = FetchError("jdoss/quickvm", TransportError("/repos/jdoss/quickvm/issues", "boom", 500))
    with patch("issuedash.main.GitHubClient", MagicMock()), patch("issuedash.main.build_report", side_effect=error):
        result = runner.invoke(app, ["--user", "jdoss", "--output", str(output)])

    assert result.exit_code == 1
    assert "jdoss/quickvm" in result.output
    assert output.read_text() == "previous run"


def test_missing_user_exits() -> None:
    result = runner.invoke(app, [])
    assert result.exit_code == 1
    assert "Missing user" in result.output
