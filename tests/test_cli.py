"""CLI tests for the ledger, diagnose and config commands.

Remote commands are covered through the orchestrator tests; here they only
appear with a stubbed client, so nothing needs an API key or the network.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from ragsync.cli import app
from ragsync.upload.client import PermanentError

runner = CliRunner()


@pytest.fixture
def ledger_env(tmp_path: Path, monkeypatch) -> Path:
    path = tmp_path / "ledger.json"
    path.write_text(
        json.dumps(
            {
                "fileSearchStores/one": {
                    "uploaded_files": ["a.txt", "b.txt", "a.txt"],
                    "last_update": "2026-10-01T00:00:00+00:00",
                },
                "fileSearchStores/two": {"uploaded_files": ["c.txt"], "last_update": None},
            }
        )
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RAGSYNC_LEDGER_PATH", str(path))
    return path


class TestLedgerCommands:
    def test_show(self, ledger_env):
        result = runner.invoke(app, ["ledger", "show"])
        assert result.exit_code == 0
        assert "fileSearchStores/one" in result.output
        assert "fileSearchStores/two" in result.output

    def test_verify_reports_duplicates(self, ledger_env):
        result = runner.invoke(app, ["ledger", "verify", "fileSearchStores/one", "--list"])
        assert result.exit_code == 0
        assert "Total entries: 3" in result.output
        assert "Unique files: 2" in result.output
        assert "a.txt (x2)" in result.output

    def test_dedupe_all(self, ledger_env):
        result = runner.invoke(app, ["ledger", "dedupe"])

        assert result.exit_code == 0
        assert "removed 1" in result.output
        data = json.loads(ledger_env.read_text())
        assert data["fileSearchStores/one"]["uploaded_files"] == ["a.txt", "b.txt"]

    def test_show_empty(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RAGSYNC_LEDGER_PATH", str(tmp_path / "none.json"))
        result = runner.invoke(app, ["ledger", "show"])
        assert result.exit_code == 0
        assert "empty" in result.output


class TestDiagnoseCommand:
    def test_diagnose(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        docs = tmp_path / "docs"
        docs.mkdir()
        (docs / "a.txt").write_text("hello")
        (docs / "b.txt").write_text("world")

        result = runner.invoke(app, ["diagnose", "a.txt", "missing.txt", "--dir", str(docs)])

        assert result.exit_code == 0
        assert "a.txt" in result.output
        assert "file not found" in result.output

    def test_diagnose_bracketed_content_printed_literally(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        docs = tmp_path / "docs"
        docs.mkdir()
        (docs / "[draft] memo.txt").write_text("See [/b] and [link]")

        result = runner.invoke(app, ["diagnose", "[draft] memo.txt", "--dir", str(docs)])

        assert result.exit_code == 0
        assert "See [/b] and [link]" in result.output
        assert "[draft] memo.txt" in result.output

    def test_diagnose_missing_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["diagnose", "a.txt", "--dir", str(tmp_path / "nope")])
        assert result.exit_code == 1


class TestConfigCommands:
    def test_set_api_key(self):
        with patch("ragsync.config.keyring.set_password") as set_pw:
            result = runner.invoke(app, ["config", "set-api-key", "secret-key"])
        assert result.exit_code == 0
        set_pw.assert_called_once_with("ragsync-gemini", "api_key", "secret-key")

    def test_set_empty_api_key(self):
        result = runner.invoke(app, ["config", "set-api-key", "  "])
        assert result.exit_code == 1

    def test_get_api_key_masked(self):
        with patch("ragsync.config.keyring.get_password", return_value="abcdefghijklmnop"):
            result = runner.invoke(app, ["config", "get-api-key"])
        assert result.exit_code == 0
        assert "abcdefgh********" in result.output
        assert "ijklmnop" not in result.output

    def test_remove_missing_api_key(self):
        with patch("ragsync.config.keyring.get_password", return_value=None):
            result = runner.invoke(app, ["config", "remove-api-key"])
        assert result.exit_code == 0
        assert "Nothing to remove" in result.output

    def test_sync_without_api_key_exits(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        with patch("ragsync.config.keyring.get_password", return_value=None):
            result = runner.invoke(app, ["sync"])
        assert result.exit_code == 1
        assert "API key not found" in result.output


class TestRemoteErrors:
    def test_api_error_is_reported_not_raised(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        client = MagicMock()
        client.list_stores = AsyncMock(side_effect=PermanentError("403: permission denied"))
        client.close = AsyncMock()

        with patch("ragsync.cli._make_client", return_value=client):
            result = runner.invoke(app, ["stores", "list"])

        assert result.exit_code == 1
        assert "403: permission denied" in result.output
        client.close.assert_awaited_once()
