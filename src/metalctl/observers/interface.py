# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations
from typing import Protocol
from .events import BaseEvent


class Observer(Protocol):
    """
    Receives manager and host-operation events. With ``--parallel`` the
    host events arrive from worker threads, one thread per host.
    """

    def notify(self, event: BaseEvent) -> None: ...
