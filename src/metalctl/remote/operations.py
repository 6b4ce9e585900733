# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/operations.py
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from metalctl.observers.dispatcher import EventBus
from metalctl.observers.events import (
    BatchSummary,
    HostOperationFailed,
    HostOperationStarted,
    HostOperationSucceeded,
    new_ctx,
)
from .context import OperationContext
from .errors import RemoteOperationError
from .host import BaremetalHost

log = logging.getLogger("metalctl")

HostAction = Callable[[BaremetalHost, OperationContext], Any]


@dataclass(frozen=True)
class HostResult:
    host: str
    action: str
    ok: bool
    value: Any = None
    error: Optional[Exception] = None
    skipped: bool = False


# -----------------------
# Actions
# -----------------------
def power_on(host: BaremetalHost, ctx: OperationContext) -> None:
    host.power_on(ctx)


def power_off(host: BaremetalHost, ctx: OperationContext) -> None:
    host.power_off(ctx)


def power_status(host: BaremetalHost, ctx: OperationContext) -> str:
    return host.power_status(ctx).value


def reboot(host: BaremetalHost, ctx: OperationContext) -> None:
    host.reboot_system(ctx)


def eject_media(host: BaremetalHost, ctx: OperationContext) -> None:
    host.eject_virtual_media(ctx)


def remote_direct(iso_url: str) -> HostAction:
    """Insert *iso_url*, boot from it once, and reboot into it."""

    def action(host: BaremetalHost, ctx: OperationContext) -> None:
        log.info("remote direct %s: inserting %s", host.name, iso_url)
        host.set_virtual_media(ctx, iso_url)
        host.set_boot_source_by_type(ctx)
        host.reboot_system(ctx)

    return action


ACTIONS: Dict[str, HostAction] = {
    "poweron": power_on,
    "poweroff": power_off,
    "powerstatus": power_status,
    "reboot": reboot,
    "ejectmedia": eject_media,
}


# -----------------------
# Batch driver
# -----------------------
def _run_one(
    host: BaremetalHost,
    action: HostAction,
    action_name: str,
    timeout: Optional[float],
    bus: Optional[EventBus],
    event_ctx: Dict[str, Any],
) -> HostResult:
    ctx = OperationContext(timeout)
    if bus:
        bus.emit(HostOperationStarted(host=host.name, action=action_name, **event_ctx))

    started = time.monotonic()
    try:
        value = action(host, ctx)
    except RemoteOperationError as exc:
        log.error("%s failed: %s", action_name, exc)
        if bus:
            bus.emit(HostOperationFailed(host=host.name, action=action_name, error=str(exc), **event_ctx))
        return HostResult(host=host.name, action=action_name, ok=False, error=exc)

    duration_ms = int((time.monotonic() - started) * 1000)
    log.info("%s on %s done in %dms", action_name, host.name, duration_ms)
    if bus:
        bus.emit(
            HostOperationSucceeded(
                host=host.name,
                action=action_name,
                duration_ms=duration_ms,
                result=None if value is None else str(value),
                **event_ctx,
            )
        )
    return HostResult(host=host.name, action=action_name, ok=True, value=value)


def run_on_hosts(
    hosts: Sequence[BaremetalHost],
    action: HostAction,
    *,
    action_name: str,
    timeout: Optional[float] = None,
    continue_on_error: bool = True,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    bus: Optional[EventBus] = None,
    event_ctx: Optional[Dict[str, Any]] = None,
) -> List[HostResult]:
    """
    Run *action* once per host, each call with its own OperationContext.

    Sequential by default. With ``continue_on_error=False`` the remaining
    hosts are skipped after the first failure. ``parallel=True`` runs one
    task per host; every host is attempted in that mode.
    """
    event_ctx = event_ctx or new_ctx(None)
    results: List[HostResult] = []

    if parallel and hosts:
        with ThreadPoolExecutor(max_workers=max_workers or len(hosts)) as pool:
            futures = [
                pool.submit(_run_one, h, action, action_name, timeout, bus, event_ctx)
                for h in hosts
            ]
            results = [f.result() for f in futures]
    else:
        failed = False
        for host in hosts:
            if failed and not continue_on_error:
                results.append(
                    HostResult(host=host.name, action=action_name, ok=False, skipped=True)
                )
                continue
            result = _run_one(host, action, action_name, timeout, bus, event_ctx)
            failed = failed or not result.ok
            results.append(result)

    if bus:
        bus.emit(
            BatchSummary(
                action=action_name,
                ok=sum(1 for r in results if r.ok),
                failed=sum(1 for r in results if not r.ok and not r.skipped),
                skipped=sum(1 for r in results if r.skipped),
                **event_ctx,
            )
        )
    return results
