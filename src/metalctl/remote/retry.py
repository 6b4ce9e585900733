# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/retry.py
from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from .context import OperationContext
from .errors import RetriesExhaustedError, TransportError

log = logging.getLogger("metalctl")

T = TypeVar("T")


def retry_operation(
    fn: Callable[[], T],
    *,
    ctx: OperationContext,
    action: str,
    target: str,
    retries: int,
    delay: float,
    retry_on: tuple[type[Exception], ...] = (TransportError,),
    on_retry: Callable[[int, Exception], None] | None = None,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """
    Run a stateful action against one BMC.

    retries: extra attempts after the first one fails
    delay: seconds between attempts (waited through *ctx*)
    retry_on: exception types treated as transient; anything else propagates
    on_retry: callback(attempt, exception)
    """
    pause = sleep or (lambda d: ctx.sleep(d, action))
    attempts = retries + 1
    last_exc: Optional[Exception] = None

    for attempt in range(1, attempts + 1):
        ctx.check(action)
        try:
            return fn()
        except retry_on as exc:
            last_exc = exc
            log.debug("%s on %s failed (attempt %d/%d): %s", action, target, attempt, attempts, exc)
            if on_retry:
                on_retry(attempt, exc)
            if attempt == attempts:
                break
            pause(delay)

    raise RetriesExhaustedError(action=action, target=target, attempts=attempts) from last_exc
