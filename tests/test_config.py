"""Tests for configuration loading and API key lookup."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from ragsync.config import SERVICE_NAME, get_api_key, load_sync_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "RAGSYNC_DOCUMENTS_DIR",
        "RAGSYNC_STORE_NAME",
        "RAGSYNC_LEDGER_PATH",
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)


class TestLoadSyncConfig:
    def test_defaults_when_file_absent(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cfg = load_sync_config()

        assert cfg.store_name == "national-security-documents-store"
        assert cfg.target_count == 607
        assert cfg.ledger_path == Path("data/upload_ledger.json")
        assert cfg.upload.max_retries == 5

    def test_file_values_merge_over_defaults(self, tmp_path):
        path = tmp_path / "sync_config.json"
        path.write_text(
            json.dumps(
                {
                    "documents_dir": "/srv/docs",
                    "store_name": "custom-store",
                    "target_count": 10,
                    "upload": {"max_retries": 2, "max_poll_attempts": 200, "unknown": 1},
                }
            )
        )

        cfg = load_sync_config(path)

        assert cfg.documents_dir == Path("/srv/docs")
        assert cfg.store_name == "custom-store"
        assert cfg.target_count == 10
        assert cfg.upload.max_retries == 2
        assert cfg.upload.max_poll_attempts == 200
        assert cfg.upload.poll_interval_seconds == 3.0

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "sync_config.json"
        path.write_text(json.dumps({"store_name": "from-file"}))
        monkeypatch.setenv("RAGSYNC_STORE_NAME", "from-env")
        monkeypatch.setenv("RAGSYNC_DOCUMENTS_DIR", "/env/docs")
        monkeypatch.setenv("RAGSYNC_LEDGER_PATH", "/env/ledger.json")

        cfg = load_sync_config(path)

        assert cfg.store_name == "from-env"
        assert cfg.documents_dir == Path("/env/docs")
        assert cfg.ledger_path == Path("/env/ledger.json")

    def test_explicit_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_sync_config(tmp_path / "missing.json")


class TestGetApiKey:
    def test_keyring_first(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        with patch("ragsync.config.keyring.get_password", return_value="ring-key") as get:
            assert get_api_key() == "ring-key"
        get.assert_called_once_with(SERVICE_NAME, "api_key")

    def test_gemini_env_fallback(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        with patch("ragsync.config.keyring.get_password", return_value=None):
            assert get_api_key() == "env-key"

    def test_google_env_fallback(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        with patch("ragsync.config.keyring.get_password", return_value=None):
            assert get_api_key() == "google-key"

    def test_missing_everywhere(self):
        with patch("ragsync.config.keyring.get_password", return_value=None):
            with pytest.raises(RuntimeError, match="set-api-key"):
                get_api_key()
