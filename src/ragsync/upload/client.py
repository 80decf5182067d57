"""Gemini File Search store client.

Thin async boundary over ``google-genai``. Everything above this module
talks to the small method set below, so tests substitute an in-memory
remote with the same shape:

* :meth:`GeminiStoreClient.create_store`
* :meth:`GeminiStoreClient.list_stores`
* :meth:`GeminiStoreClient.delete_store`
* :meth:`GeminiStoreClient.submit_document`
* :meth:`GeminiStoreClient.poll_operation`
* :meth:`GeminiStoreClient.query`

Ingestion is single-step: ``upload_to_file_search_store()`` returns a
long-running operation that is polled with ``operations.get()`` until
``done``. There is no completion callback.
"""

from __future__ import annotations

import io
import logging
import os
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from ragsync.exceptions import RagSyncError
from ragsync.models import (
    GroundingReference,
    QueryAnswer,
    RemoteStore,
    normalize_store_listing,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Custom exceptions
# ---------------------------------------------------------------------------


class RateLimitError(RagSyncError):
    """Raised when the Gemini API returns a 429 rate-limit response."""


class TransientError(RagSyncError):
    """Raised on transient server errors (5xx) that may succeed on retry."""


class PermanentError(RagSyncError):
    """Raised on permanent client errors (4xx except 429)."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GeminiStoreClient:
    """Async wrapper around the google-genai File Search store API.

    Usage::

        client = GeminiStoreClient(api_key="...")
        store = await client.create_store("national-security-documents-store")
        op = await client.submit_document(store.store_id, data, "a.txt", "text/plain")
        while not op.done:
            op = await client.poll_operation(op)
    """

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash") -> None:
        self._client = genai.Client(api_key=api_key)
        self.model = model

    # ------------------------------------------------------------------
    # Store management
    # ------------------------------------------------------------------

    async def create_store(self, display_name: str) -> RemoteStore:
        """Create a new File Search store.

        Raises:
            RuntimeError: If the API returns a store without a resource name.
        """
        store = await self._safe_call(
            self._client.aio.file_search_stores.create,
            config={"display_name": display_name},
        )
        if not getattr(store, "name", None):
            raise RuntimeError("Failed to create store: name is missing")
        logger.info("Created store %s (%s)", store.name, display_name)
        return RemoteStore.from_api(store)

    async def list_stores(self) -> list[RemoteStore]:
        """List every store visible to the configured API key."""
        pager = await self._safe_call(self._client.aio.file_search_stores.list)
        stores = normalize_store_listing([raw async for raw in pager])
        logger.info("Found %d stores in account", len(stores))
        return stores

    async def delete_store(self, store_id: str, force: bool = True) -> None:
        """Delete a store, including its documents when *force* is set."""
        await self._safe_call(
            self._client.aio.file_search_stores.delete,
            name=store_id,
            config={"force": force},
        )
        logger.info("Deleted store %s", store_id)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    async def submit_document(
        self,
        store_id: str,
        data: bytes,
        file_name: str,
        content_type: str,
    ) -> Any:
        """Send one document to the store and return its long-running operation."""
        operation = await self._safe_call(
            self._client.aio.file_search_stores.upload_to_file_search_store,
            file_search_store_name=store_id,
            file=io.BytesIO(data),
            config={"display_name": file_name, "mime_type": content_type},
        )
        logger.debug("Submitted %s to %s (op=%s)", file_name, store_id, getattr(operation, "name", ""))
        return operation

    async def poll_operation(self, operation: Any) -> Any:
        """Refresh a long-running operation."""
        return await self._safe_call(self._client.aio.operations.get, operation)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    async def query(self, store_id: str, text: str, model: str | None = None) -> QueryAnswer:
        """Ask a question answered from the store's documents."""
        config = genai_types.GenerateContentConfig(
            tools=[
                genai_types.Tool(
                    file_search=genai_types.FileSearch(
                        file_search_store_names=[store_id],
                    )
                )
            ],
        )
        response = await self._safe_call(
            self._client.aio.models.generate_content,
            model=model or self.model,
            contents=text,
            config=config,
        )
        return QueryAnswer(
            answer_text=getattr(response, "text", None) or "",
            references=extract_references(response),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying genai client if it supports closing."""
        aio = getattr(self._client, "aio", None)
        closer = getattr(aio, "aclose", None)
        if callable(closer):
            await closer()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _safe_call(self, func: Any, *args: Any, **kwargs: Any) -> Any:
        """Call *func*, translating API errors into the local taxonomy."""
        try:
            return await func(*args, **kwargs)
        except genai_errors.APIError as exc:
            if exc.code == 429:
                raise RateLimitError(f"429 rate limit: {exc.message}") from exc
            if exc.code is not None and exc.code >= 500:
                raise TransientError(f"{exc.code}: {exc.message}") from exc
            raise PermanentError(f"{exc.code}: {exc.message}") from exc


def extract_references(response: Any) -> list[GroundingReference]:
    """Pull grounding chunks out of a ``generate_content`` response.

    The source file name is taken from the chunk URI when present, else
    from its title.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    grounding = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(grounding, "grounding_chunks", None) or []

    references: list[GroundingReference] = []
    for chunk in chunks:
        ctx = getattr(chunk, "retrieved_context", None)
        if ctx is None:
            continue
        uri = getattr(ctx, "uri", None)
        title = getattr(ctx, "title", None)
        if uri:
            file_name = os.path.basename(uri)
        else:
            file_name = title
        references.append(
            GroundingReference(
                source_text=getattr(ctx, "text", None),
                source_uri=uri,
                source_title=title,
                file_name=file_name,
            )
        )
    return references
