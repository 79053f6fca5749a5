"""Single-slot busy flag guarding record-mutating operations."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from assetscan.runtime.logging import get_logger

logger = get_logger(__name__)


class StoreBusy(RuntimeError):
    """Raised when a mutating operation is requested while another is running."""


class BusyFlag:
    """Non-queueing mutual exclusion for the local record store.

    A second caller is turned away immediately instead of waiting; the scan
    surface stays locked until the running operation releases the flag.
    """

    def __init__(self) -> None:
        self._holder: str | None = None

    @property
    def is_busy(self) -> bool:
        return self._holder is not None

    @property
    def holder(self) -> str | None:
        return self._holder

    @contextmanager
    def hold(self, operation: str) -> Iterator[None]:
        if self._holder is not None:
            raise StoreBusy(f"Cannot start {operation}: {self._holder} is still running")
        self._holder = operation
        logger.debug("Busy flag acquired by %s", operation)
        try:
            yield
        finally:
            self._holder = None
            logger.debug("Busy flag released by %s", operation)
