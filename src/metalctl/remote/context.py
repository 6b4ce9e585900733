# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/context.py
from __future__ import annotations

import threading
import time
from typing import Optional

from .errors import OperationCancelledError, OperationTimeoutError


class OperationContext:
    """
    Deadline and cancel flag for a single client call.

    Create a fresh one per call; never keep one on a host.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    @classmethod
    def background(cls) -> "OperationContext":
        return cls(None)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self, action: Optional[str] = None) -> None:
        if self.cancelled:
            raise OperationCancelledError("operation cancelled", action=action)
        if self.expired():
            raise OperationTimeoutError(
                f"deadline of {self.timeout}s exceeded", action=action
            )

    def sleep(self, delay: float, action: Optional[str] = None) -> None:
        """Wait *delay* seconds, waking early on cancel or deadline."""
        self.check(action)
        remaining = self.remaining()
        wait = delay if remaining is None else min(delay, remaining)
        if wait > 0:
            self._cancelled.wait(wait)
        self.check(action)
