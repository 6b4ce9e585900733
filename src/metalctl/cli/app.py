# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/cli/app.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
import yaml

from metalctl.config.loader import load_config
from metalctl.errors import MetalctlError
from metalctl.logging.log import init_logging
from metalctl.observers.console import ConsoleObserver
from metalctl.observers.dispatcher import EventBus
from metalctl.observers.events import new_ctx
from metalctl.observers.jsonfile import JsonFileObserver
from metalctl.observers.logger import LoggerObserver
from metalctl.phase.resolver import PhaseResolver
from metalctl.remote import operations
from metalctl.remote.manager import new_manager
from metalctl.remote.operations import HostAction
from metalctl.remote.registry import build_client_registry
from metalctl.remote.selectors import ByLabel, ByName, HostSelector


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="metalctl: out-of-band management of baremetal hosts")
baremetal_app = typer.Typer(help="Power and boot control through the host BMCs")
config_app = typer.Typer(help="Inspect the metalctl config")
app.add_typer(baremetal_app, name="baremetal")
app.add_typer(config_app, name="config")

DEFAULT_PHASE = "remotedirect-ephemeral"
EPHEMERAL_HOST_LABEL = "metalctl.io/ephemeral-node=true"

EXIT_HOST_FAILED = 1
EXIT_USAGE = 2


@dataclass
class CliState:
    config_path: Optional[Path]
    debug: bool


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", envvar="METALCTL_CONFIG", help="metalctl config file"
    ),
    debug: bool = typer.Option(False, "--debug"),
):
    ctx.obj = CliState(config_path=config, debug=debug)


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------

def build_selectors(name: Optional[str], labels: Optional[str], default_label: str = "") -> List[HostSelector]:
    """
    --labels narrows first, then --name. With neither flag, every host
    matching *default_label* is selected (all hosts when it is empty).
    """
    selectors: List[HostSelector] = []
    if labels:
        selectors.append(ByLabel(labels))
    if name:
        selectors.append(ByName(name))
    if not selectors:
        selectors.append(ByLabel(default_label))
    return selectors


def _fail(message: str, code: int) -> NoReturn:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=code)


def run_baremetal(
    state: CliState,
    *,
    action: HostAction,
    action_name: str,
    name: Optional[str],
    labels: Optional[str],
    phase: str,
    timeout: Optional[float],
    parallel: bool,
    default_label: str = "",
) -> None:
    logger, run_id, log_path = init_logging(verbose=state.debug)
    bus = EventBus(
        observers=[
            ConsoleObserver(),
            LoggerObserver(logger),
            JsonFileObserver.beside(log_path),
        ]
    )

    try:
        cfg = load_config(state.config_path)
        mgr = new_manager(
            cfg,
            phase,
            *build_selectors(name, labels, default_label),
            registry=build_client_registry(),
            bus=bus,
            run_id=run_id,
        )
    except MetalctlError as exc:
        logger.debug("manager construction failed", exc_info=True)
        _fail(str(exc), EXIT_USAGE)

    results = operations.run_on_hosts(
        mgr.hosts,
        action,
        action_name=action_name,
        timeout=timeout,
        parallel=parallel,
        bus=bus,
        event_ctx=new_ctx(cfg.current_context, phase, run_id),
    )

    if any(not r.ok for r in results):
        raise typer.Exit(code=EXIT_HOST_FAILED)


# ------------------------------------------------------------------------------
# Shared options
# ------------------------------------------------------------------------------

NAME_OPTION = typer.Option(None, "--name", help="Select the BareMetalHost with this name")
LABELS_OPTION = typer.Option(None, "--labels", "-l", help="Label expression, e.g. 'site=1,role in (worker)'")
PHASE_OPTION = typer.Option(DEFAULT_PHASE, "--phase", envvar="METALCTL_PHASE", help="Phase whose documents hold the hosts")
TIMEOUT_OPTION = typer.Option(None, "--timeout", help="Per-host timeout in seconds")
PARALLEL_OPTION = typer.Option(False, "--parallel", help="Run one task per host")


# ------------------------------------------------------------------------------
# baremetal commands
# ------------------------------------------------------------------------------

def _register(command: str, action: HostAction, help_text: str) -> None:
    def command_fn(
        ctx: typer.Context,
        name: Optional[str] = NAME_OPTION,
        labels: Optional[str] = LABELS_OPTION,
        phase: str = PHASE_OPTION,
        timeout: Optional[float] = TIMEOUT_OPTION,
        parallel: bool = PARALLEL_OPTION,
    ):
        run_baremetal(
            ctx.obj,
            action=action,
            action_name=command,
            name=name,
            labels=labels,
            phase=phase,
            timeout=timeout,
            parallel=parallel,
        )

    baremetal_app.command(name=command, help=help_text)(command_fn)


_register("poweron", operations.power_on, "Power on the selected hosts")
_register("poweroff", operations.power_off, "Power off the selected hosts")
_register("powerstatus", operations.power_status, "Print the power state of the selected hosts")
_register("reboot", operations.reboot, "Power cycle the selected hosts")
_register("ejectmedia", operations.eject_media, "Eject all virtual media from the selected hosts")


@baremetal_app.command("remotedirect")
def remotedirect(
    ctx: typer.Context,
    iso_url: str = typer.Option(..., "--iso-url", help="Bootable image to insert as virtual CD"),
    name: Optional[str] = NAME_OPTION,
    labels: Optional[str] = LABELS_OPTION,
    phase: str = PHASE_OPTION,
    timeout: Optional[float] = TIMEOUT_OPTION,
    parallel: bool = PARALLEL_OPTION,
):
    """
    Boot the selected hosts (the ephemeral host by default) from an ISO.
    """
    run_baremetal(
        ctx.obj,
        action=operations.remote_direct(iso_url),
        action_name="remotedirect",
        name=name,
        labels=labels,
        phase=phase,
        timeout=timeout,
        parallel=parallel,
        default_label=EPHEMERAL_HOST_LABEL,
    )


# ------------------------------------------------------------------------------
# config commands
# ------------------------------------------------------------------------------

@config_app.command("show")
def config_show(ctx: typer.Context):
    """Print the management configuration of the current context."""
    try:
        cfg = load_config(ctx.obj.config_path)
        mgmt = cfg.current_management_config()
    except MetalctlError as exc:
        _fail(str(exc), EXIT_USAGE)

    typer.echo(f"context: {cfg.current_context}")
    typer.echo(yaml.safe_dump(mgmt.model_dump(by_alias=True), sort_keys=False).rstrip())


@config_app.command("phases")
def config_phases(ctx: typer.Context):
    """List the phases defined by the current manifest."""
    try:
        cfg = load_config(ctx.obj.config_path)
        names = PhaseResolver.from_config(cfg).phase_names()
    except MetalctlError as exc:
        _fail(str(exc), EXIT_USAGE)

    for phase_name in names:
        typer.echo(phase_name)


if __name__ == "__main__":
    app()
