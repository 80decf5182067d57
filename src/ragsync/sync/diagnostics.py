"""Local diagnosis of documents that failed to upload.

Compares each named file against the rest of the corpus and flags the
properties that have historically correlated with stalled ingestion:
unusual size, encoding problems and odd filenames.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from ragsync.exceptions import SourceNotFoundError
from ragsync.upload.content_types import SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)

LARGE_FILE_BYTES = 10 * 1024 * 1024
LARGE_RATIO = 2.0
PREVIEW_CHARS = 200
MAX_SIMILAR = 3

_SPECIAL_CHARS = re.compile(r"[^\w\s\-.()]")


@dataclass
class FileDiagnosis:
    """Findings for one file."""

    file_name: str
    exists: bool
    size_bytes: int = 0
    ratio_to_average: float | None = None
    readable: bool = False
    char_count: int | None = None
    line_count: int | None = None
    preview: str = ""
    warnings: list[str] = field(default_factory=list)
    similar_files: list[str] = field(default_factory=list)


@dataclass
class DiagnosticReport:
    """Corpus statistics plus one diagnosis per requested file."""

    directory: Path
    file_count: int
    average_size: float
    min_size: int
    max_size: int
    files: list[FileDiagnosis] = field(default_factory=list)

    @property
    def warning_count(self) -> int:
        return sum(len(f.warnings) for f in self.files)


def diagnose_files(directory: Path | str, file_names: list[str]) -> DiagnosticReport:
    """Diagnose *file_names* relative to the corpus in *directory*.

    Raises:
        SourceNotFoundError: If *directory* does not exist.
    """
    root = Path(directory)
    if not root.is_dir():
        raise SourceNotFoundError(f"Source directory not found: {root}")

    sizes: dict[str, int] = {}
    for name in sorted(os.listdir(root)):
        path = root / name
        if path.suffix.lower() in SUPPORTED_EXTENSIONS and path.is_file():
            sizes[name] = path.stat().st_size

    average = sum(sizes.values()) / len(sizes) if sizes else 0.0
    report = DiagnosticReport(
        directory=root,
        file_count=len(sizes),
        average_size=average,
        min_size=min(sizes.values(), default=0),
        max_size=max(sizes.values(), default=0),
    )
    for name in file_names:
        diagnosis = _diagnose_one(root / name, average, sizes)
        if diagnosis.warnings:
            logger.warning("%s: %s", name, "; ".join(diagnosis.warnings))
        report.files.append(diagnosis)
    return report


def _diagnose_one(path: Path, average: float, corpus: dict[str, int]) -> FileDiagnosis:
    name = path.name
    if not path.is_file():
        return FileDiagnosis(file_name=name, exists=False, warnings=["File not found"])

    diag = FileDiagnosis(file_name=name, exists=True, size_bytes=path.stat().st_size)
    if average:
        diag.ratio_to_average = diag.size_bytes / average
        if diag.size_bytes > average * LARGE_RATIO:
            diag.warnings.append("File is unusually large (>2x average)")
    if diag.size_bytes > LARGE_FILE_BYTES:
        diag.warnings.append("File exceeds 10MB")

    try:
        data = path.read_bytes()
    except OSError as exc:
        diag.warnings.append(f"File is not readable: {exc}")
    else:
        diag.readable = True
        text = data.decode("utf-8", errors="replace")
        diag.char_count = len(text)
        diag.line_count = len(text.split("\n"))
        diag.preview = text[:PREVIEW_CHARS].replace("\n", " ")
        if b"\x00" in data:
            diag.warnings.append("Contains null bytes (may indicate binary content)")
        if "\ufffd" in text:
            diag.warnings.append("Contains invalid UTF-8 characters")

    if _SPECIAL_CHARS.search(name):
        diag.warnings.append("Filename contains special characters")

    diag.similar_files = _similar(name, corpus)
    return diag


def _similar(name: str, corpus: dict[str, int]) -> list[str]:
    """Other corpus files sharing the leading token (usually a document number)."""
    prefix = name.split(" ")[0]
    found = []
    for other in corpus:
        if other == name:
            continue
        if prefix in other or other.split(" ")[0] in name:
            found.append(other)
        if len(found) >= MAX_SIMILAR:
            break
    return found
