"""
Write-back of a single record with a bounded retry budget.

Each attempt gets its own deadline. Between attempts the writer sleeps
`backoff_start`, then `backoff_start + increment`, and so on (3s, 4s, 5s, ...
with the defaults). Exhausting the budget raises `WriteError` carrying the
last failure.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from tenacity import (
    RetryError,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from datastore_touch.config import Settings
from datastore_touch.domain.models import Record
from datastore_touch.errors import WriteError
from datastore_touch.pipeline.abstract import DocumentStore
from datastore_touch.utils.logging import get_logger

log = get_logger(__name__)


class Writer:
    """
    Upserts records through a `DocumentStore`, retrying failed puts.

    Parameters
    ----------
    store : DocumentStore
        Target store.
    attempts : int
        Total number of put attempts per record.
    timeout : float
        Per-attempt deadline in seconds.
    backoff_start : float
        Sleep before the second attempt.
    backoff_increment : float
        Added to the sleep before every following attempt.
    sleep : callable
        Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        store: DocumentStore,
        attempts: int = 6,
        timeout: float = 20.0,
        backoff_start: float = 3.0,
        backoff_increment: float = 1.0,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        self._store = store
        self.attempts = attempts
        self.timeout = timeout
        self.backoff_start = backoff_start
        self.backoff_increment = backoff_increment
        self._sleep = sleep or time.sleep

    @classmethod
    def from_settings(
        cls,
        store: DocumentStore,
        settings: Settings,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> "Writer":
        return cls(
            store,
            attempts=settings.write_attempts,
            timeout=settings.write_timeout_seconds,
            backoff_start=settings.write_backoff_start_seconds,
            backoff_increment=settings.write_backoff_increment_seconds,
            sleep=sleep,
        )

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_incrementing(start=self.backoff_start, increment=self.backoff_increment),
            retry=retry_if_exception_type(Exception),
            before_sleep=before_sleep_log(log, logging.WARNING),
            sleep=self._sleep,
        )

    def write(self, record: Record) -> None:
        """
        Put `record` back under its key.

        Raises
        ------
        WriteError
            If every attempt failed.
        """
        try:
            for attempt in self._retrying():
                with attempt:
                    self._store.put(record, timeout=self.timeout)
        except RetryError as exc:
            last = exc.last_attempt
            cause = last.exception()
            raise WriteError(record.key, last.attempt_number, cause) from cause


__all__ = ["Writer"]
