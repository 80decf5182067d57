"""Single-document ingestion with bounded polling and retry.

Protocol per document:

1. Submit bytes + content type, receive a long-running operation.
2. Poll every ``poll_interval_seconds`` until ``done``, at most
   ``max_poll_attempts`` times (:class:`UploadTimeoutError` beyond that).
3. Any exception in 1-2 fails the attempt; the whole submit-and-poll
   sequence is retried up to ``max_retries`` attempts with exponential
   backoff ``backoff_base * 2**(attempt - 1)`` between attempts.
4. Exhaustion raises :class:`UploadFailedError`.
5. After success, sleep ``post_success_delay_seconds`` before returning.

All waiting goes through the injected ``sleep`` coroutine so tests can
run the protocol without real delays.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ragsync.exceptions import UploadFailedError, UploadTimeoutError
from ragsync.models import Document, UploadConfig
from ragsync.upload.client import TransientError

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


class DocumentUploader:
    """Drives one document at a time through the remote ingestion protocol.

    Args:
        client: Remote store client (see :mod:`ragsync.upload.client`).
        config: Retry/poll bounds.
        sleep: Awaitable sleep used for every wait; ``asyncio.sleep`` by default.
    """

    def __init__(
        self,
        client: Any,
        config: UploadConfig | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        self._client = client
        self.config = config or UploadConfig()
        self._sleep = sleep or asyncio.sleep

    async def upload(self, store_id: str, document: Document) -> int:
        """Ingest *document* into *store_id*.

        Returns:
            The number of attempts used.

        Raises:
            UploadFailedError: After ``max_retries`` failed attempts.
        """
        cfg = self.config
        retrying = AsyncRetrying(
            stop=stop_after_attempt(cfg.max_retries),
            wait=wait_exponential(multiplier=cfg.backoff_base_seconds, exp_base=2, max=3600),
            retry=retry_if_exception_type(Exception),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=False,
        )
        attempts = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    if attempts > 1:
                        logger.info(
                            "Retrying %s (attempt %d/%d)",
                            document.file_name,
                            attempts,
                            cfg.max_retries,
                        )
                    await self._attempt(store_id, document)
        except RetryError as exc:
            last = exc.last_attempt
            raise UploadFailedError(
                document.file_name, last.exception(), last.attempt_number
            ) from last.exception()

        await self._sleep(cfg.post_success_delay_seconds)
        return attempts

    async def pause(self, seconds: float) -> None:
        """Wait between files using the injected sleep."""
        if seconds > 0:
            await self._sleep(seconds)

    async def _attempt(self, store_id: str, document: Document) -> None:
        """One submit-and-poll sequence."""
        data = document.path.read_bytes()
        operation = await self._client.submit_document(
            store_id, data, document.file_name, document.content_type
        )

        polls = 0
        while not getattr(operation, "done", False):
            if polls >= self.config.max_poll_attempts:
                raise UploadTimeoutError(
                    document.file_name, polls * self.config.poll_interval_seconds
                )
            await self._sleep(self.config.poll_interval_seconds)
            operation = await self._client.poll_operation(operation)
            polls += 1
            if self.config.progress_log_every and polls % self.config.progress_log_every == 0:
                logger.info(
                    "Still processing %s... (%.0fs elapsed)",
                    document.file_name,
                    polls * self.config.poll_interval_seconds,
                )
            else:
                logger.debug("Polled %s (%d/%d)", document.file_name, polls, self.config.max_poll_attempts)

        error = getattr(operation, "error", None)
        if error:
            raise TransientError(f"Ingestion of {document.file_name} failed: {error}")
