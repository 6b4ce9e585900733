# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/observers/console.py
import typer

from .events import (
    BaseEvent,
    BatchSummary,
    HostOperationFailed,
    HostOperationSucceeded,
    ManagerReady,
)


class ConsoleObserver:
    """Short, human readable lines for the interactive CLI."""

    def notify(self, event: BaseEvent) -> None:
        if isinstance(event, ManagerReady):
            typer.echo(f"Selected {len(event.hosts)} host(s): {', '.join(event.hosts)}")
        elif isinstance(event, HostOperationSucceeded):
            suffix = f": {event.result}" if event.result else ""
            typer.echo(f"  [ok]     {event.host} {event.action}{suffix}")
        elif isinstance(event, HostOperationFailed):
            typer.secho(f"  [failed] {event.host} {event.action}: {event.error}", fg=typer.colors.RED, err=True)
        elif isinstance(event, BatchSummary):
            typer.echo(
                f"{event.action}: ok={event.ok} failed={event.failed} skipped={event.skipped}"
            )
