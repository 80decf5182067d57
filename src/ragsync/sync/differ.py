"""Source discovery and the corpus differ.

The remote index and the ledger are both keyed by file name, so two
source files with the same name cannot both be uploaded safely. The
first occurrence wins; later ones are reported as skipped duplicates.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from ragsync.exceptions import SourceNotFoundError
from ragsync.models import Document, UploadPlan
from ragsync.upload.content_types import SUPPORTED_EXTENSIONS, resolve_content_type

logger = logging.getLogger(__name__)


def discover_documents(
    directory: Path | str,
    extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
    recursive: bool = False,
) -> list[Document]:
    """List the supported documents under *directory* in sorted order.

    With ``recursive=True`` sub-directories are walked as well, which is
    where same-named files in different folders come from.

    Raises:
        SourceNotFoundError: If the directory is missing, unreadable, or
            holds no supported documents.
    """
    root = Path(directory)
    if not root.is_dir():
        raise SourceNotFoundError(f"Source directory not found: {root}")

    allowed = {ext.lower() for ext in extensions}
    documents: list[Document] = []
    try:
        if recursive:
            for dirpath, dirnames, filenames in os.walk(root):
                dirnames.sort()
                for name in sorted(filenames):
                    _collect(Path(dirpath) / name, allowed, documents)
        else:
            for name in sorted(os.listdir(root)):
                _collect(root / name, allowed, documents)
    except OSError as exc:
        raise SourceNotFoundError(f"Cannot read source directory {root}: {exc}") from exc

    if not documents:
        raise SourceNotFoundError(f"No supported documents found in {root}")
    logger.info("Discovered %d supported documents in %s", len(documents), root)
    return documents


def _collect(path: Path, allowed: set[str], out: list[Document]) -> None:
    if path.suffix.lower() not in allowed or not path.is_file():
        return
    out.append(
        Document(
            file_name=path.name,
            path=path,
            size_bytes=path.stat().st_size,
            content_type=resolve_content_type(path),
        )
    )


def compute_upload_set(
    all_files: Sequence[Document],
    uploaded: Iterable[str] = (),
    resume: bool = False,
) -> UploadPlan:
    """Decide which documents to upload.

    1. Deduplicate by file name, keeping the first occurrence; every later
       occurrence is recorded in ``skipped_duplicate_filenames``.
    2. With *resume*, drop names already in *uploaded* (the ledger's record
       for the target store) into ``skipped_already_uploaded``.

    ``to_upload`` keeps the enumeration order of *all_files*.
    """
    plan = UploadPlan()
    seen: set[str] = set()
    unique: list[Document] = []
    for doc in all_files:
        if doc.file_name in seen:
            logger.warning(
                "Duplicate filename in source: %s - will be uploaded only once",
                doc.file_name,
            )
            plan.skipped_duplicate_filenames.append(doc.file_name)
            continue
        seen.add(doc.file_name)
        unique.append(doc)

    if not resume:
        plan.to_upload = unique
    else:
        done = set(uploaded)
        for doc in unique:
            if doc.file_name in done:
                plan.skipped_already_uploaded.append(doc.file_name)
            else:
                plan.to_upload.append(doc)
        logger.info(
            "Resume mode: %d already uploaded, %d remaining",
            len(plan.skipped_already_uploaded),
            len(plan.to_upload),
        )

    logger.info(
        "Found %d files, %d unique names (%s)",
        len(all_files),
        len(unique),
        plan.summary,
    )
    return plan
