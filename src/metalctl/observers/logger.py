# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations
import logging
from .events import BaseEvent

# already on every line of the run log, or carried by the file name
_SKIP = ("ts", "run_id")


class LoggerObserver:
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        fields = " ".join(
            f"{k}={v}" for k, v in event.dict().items() if k not in _SKIP and v is not None
        )
        self.logger.debug("[EVENT] %s %s", event.__class__.__name__, fields)
