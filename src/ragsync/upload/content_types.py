"""File extension to MIME type mapping for ingestion uploads."""

from __future__ import annotations

import os

CONTENT_TYPES: dict[str, str] = {
    ".txt": "text/plain",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".md": "text/markdown",
    ".html": "text/html",
    ".json": "application/json",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Extensions the sync engine discovers in a source directory.
SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(CONTENT_TYPES)


def resolve_content_type(file_path: str | os.PathLike[str]) -> str:
    """Return the MIME type for *file_path* based on its lowercased extension."""
    ext = os.path.splitext(os.fspath(file_path))[1].lower()
    return CONTENT_TYPES.get(ext, DEFAULT_CONTENT_TYPE)
