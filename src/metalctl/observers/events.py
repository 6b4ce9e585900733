# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str                 # ISO timestamp
    run_id: str             # correlates all events in a single invocation
    context: Optional[str]  # metalctl context name
    phase: Optional[str]    # phase whose documents were selected

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(context: Optional[str], phase: Optional[str] = None, run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "context": context,
        "phase": phase,
    }


# ---------------------------------------------------------------------
# Manager construction
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ManagerReady(BaseEvent):
    management_type: str
    hosts: List[str]


# ---------------------------------------------------------------------
# Host operations
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class HostOperationStarted(BaseEvent):
    host: str
    action: str

@dataclass(frozen=True)
class HostOperationSucceeded(BaseEvent):
    host: str
    action: str
    duration_ms: int
    result: Optional[str] = None

@dataclass(frozen=True)
class HostOperationFailed(BaseEvent):
    host: str
    action: str
    error: str

@dataclass(frozen=True)
class BatchSummary(BaseEvent):
    action: str
    ok: int
    failed: int
    skipped: int
