"""Configuration loading and API key lookup."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import keyring

from ragsync.models import SyncConfig, UploadConfig

logger = logging.getLogger(__name__)

SERVICE_NAME = "ragsync-gemini"
KEY_NAME = "api_key"

DEFAULT_CONFIG_PATH = Path("config/sync_config.json")

ENV_DOCUMENTS_DIR = "RAGSYNC_DOCUMENTS_DIR"
ENV_STORE_NAME = "RAGSYNC_STORE_NAME"
ENV_LEDGER_PATH = "RAGSYNC_LEDGER_PATH"


def get_api_key() -> str:
    """Get the Gemini API key: system keyring first, then environment.

    Environment fallbacks are ``GEMINI_API_KEY`` then ``GOOGLE_API_KEY``.

    Raises:
        RuntimeError: If no key is found anywhere, with setup instructions.
    """
    api_key = keyring.get_password(SERVICE_NAME, KEY_NAME)
    if api_key:
        return api_key

    for var in ("GEMINI_API_KEY", "GOOGLE_API_KEY"):
        api_key = os.environ.get(var)
        if api_key:
            return api_key

    raise RuntimeError(
        "Gemini API key not found.\n"
        "Set it with: ragsync config set-api-key YOUR_KEY\n"
        "Or: export GEMINI_API_KEY=your-key"
    )


def get_keyring_api_key() -> str | None:
    return keyring.get_password(SERVICE_NAME, KEY_NAME)


def set_keyring_api_key(key: str) -> None:
    keyring.set_password(SERVICE_NAME, KEY_NAME, key)


def remove_keyring_api_key() -> bool:
    """Delete the stored key. Returns False when there was none."""
    if not keyring.get_password(SERVICE_NAME, KEY_NAME):
        return False
    keyring.delete_password(SERVICE_NAME, KEY_NAME)
    return True


def load_sync_config(config_path: Path | None = None) -> SyncConfig:
    """Load sync configuration from JSON, merging with defaults.

    The file is optional when *config_path* is not given; an explicitly
    named file must exist. Environment variables override file values.

    Args:
        config_path: Path to sync_config.json (default ``config/sync_config.json``).

    Returns:
        SyncConfig with values from file and environment merged over defaults.
    """
    data: dict[str, object] = {}
    path = config_path or DEFAULT_CONFIG_PATH
    if config_path is not None or path.exists():
        with open(path) as f:
            data = json.load(f)
        logger.debug("Loaded sync config from %s", path)

    kwargs: dict[str, object] = {}

    if "documents_dir" in data:
        kwargs["documents_dir"] = Path(str(data["documents_dir"]))

    if "store_name" in data:
        kwargs["store_name"] = data["store_name"]

    if "ledger_path" in data:
        kwargs["ledger_path"] = Path(str(data["ledger_path"]))

    if "target_count" in data:
        kwargs["target_count"] = data["target_count"]

    if "model" in data:
        kwargs["model"] = data["model"]

    if "recursive" in data:
        kwargs["recursive"] = bool(data["recursive"])

    upload = data.get("upload")
    if isinstance(upload, dict):
        known = UploadConfig.__dataclass_fields__
        kwargs["upload"] = UploadConfig(**{k: v for k, v in upload.items() if k in known})

    if os.environ.get(ENV_DOCUMENTS_DIR):
        kwargs["documents_dir"] = Path(os.environ[ENV_DOCUMENTS_DIR])
    if os.environ.get(ENV_STORE_NAME):
        kwargs["store_name"] = os.environ[ENV_STORE_NAME]
    if os.environ.get(ENV_LEDGER_PATH):
        kwargs["ledger_path"] = Path(os.environ[ENV_LEDGER_PATH])

    return SyncConfig(**kwargs)  # type: ignore[arg-type]
