# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations
import json
import threading
from pathlib import Path
from .interface import Observer
from .events import BaseEvent

EVENTS_SUFFIX = ".jsonl"


class JsonFileObserver(Observer):
    """
    Appends one JSON object per event. Fields left as None are omitted; a
    lock keeps lines whole when hosts run in parallel.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @classmethod
    def beside(cls, log_path: str | Path) -> "JsonFileObserver":
        """Event file next to the run log: ``metalctl-<ts>-<run>.jsonl``."""
        return cls(Path(log_path).with_suffix(EVENTS_SUFFIX))

    def notify(self, event: BaseEvent) -> None:
        record = {"type": event.__class__.__name__}
        record.update((k, v) for k, v in event.dict().items() if v is not None)
        line = json.dumps(record, default=str)
        with self._lock, self.path.open("a") as f:
            f.write(line + "\n")
