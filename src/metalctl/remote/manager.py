# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/manager.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from metalctl.config.models import ManagementConfiguration, MetalctlConfig
from metalctl.observers.dispatcher import EventBus
from metalctl.observers.events import ManagerReady, new_ctx
from metalctl.phase.resolver import PhaseResolver
from .errors import NoHostsFoundError
from .host import BaremetalHost
from .registry import ClientRegistry, build_client_registry
from .selectors import HostSelector

log = logging.getLogger("metalctl")


class BuildState(str, Enum):
    UNVALIDATED = "Unvalidated"
    CONFIG_VALIDATED = "ConfigValidated"
    BUNDLE_LOADED = "BundleLoaded"
    SELECTING = "Selecting"
    RECONCILED = "Reconciled"
    READY = "Ready"
    FAILED = "Failed"


@dataclass(frozen=True)
class Manager:
    """
    The hosts selected for one invocation. Iterate ``hosts`` and call the
    client operations on each; hosts are independent of one another.
    """
    config: ManagementConfiguration
    hosts: Tuple[BaremetalHost, ...]

    def host_names(self) -> List[str]:
        return [h.name for h in self.hosts]


def validate_management_config(mgmt_cfg: ManagementConfiguration, registry: ClientRegistry) -> None:
    mgmt_cfg.check_fields()
    registry.ensure_supported(mgmt_cfg.type)


def new_manager(
    cfg: MetalctlConfig,
    phase_name: str,
    *selectors: HostSelector,
    phase_resolver: Optional[PhaseResolver] = None,
    registry: Optional[ClientRegistry] = None,
    bus: Optional[EventBus] = None,
    run_id: Optional[str] = None,
) -> Manager:
    """
    Build a Manager for *phase_name*.

    Selectors run in order; each one narrows the hosts left by the previous
    one (intersection by host name). Raises NoHostsFoundError when nothing
    is left.
    """
    registry = registry or build_client_registry()
    state = BuildState.UNVALIDATED

    def advance(to: BuildState, detail: str = "") -> None:
        nonlocal state
        log.debug("manager: %s -> %s %s", state.value, to.value, detail)
        state = to

    try:
        mgmt_cfg = cfg.current_management_config()
        validate_management_config(mgmt_cfg, registry)
        advance(BuildState.CONFIG_VALIDATED, f"(type={mgmt_cfg.type})")

        resolver = phase_resolver or PhaseResolver.from_config(cfg)
        bundle = resolver.bundle(phase_name)
        advance(BuildState.BUNDLE_LOADED, f"(phase={phase_name}, documents={len(bundle)})")

        hosts: Optional[List[BaremetalHost]] = None
        for i, selector in enumerate(selectors):
            advance(BuildState.SELECTING, f"({i + 1}/{len(selectors)}: {selector})")
            hosts = selector.apply(hosts, mgmt_cfg, bundle, registry)
        hosts = hosts or []
        advance(BuildState.RECONCILED, f"(hosts={[h.name for h in hosts]})")

        if not hosts:
            raise NoHostsFoundError()
    except Exception as exc:
        advance(BuildState.FAILED, f"({exc})")
        raise

    advance(BuildState.READY)
    manager = Manager(config=mgmt_cfg, hosts=tuple(hosts))

    if bus:
        bus.emit(
            ManagerReady(
                management_type=mgmt_cfg.type,
                hosts=manager.host_names(),
                **new_ctx(cfg.current_context, phase_name, run_id),
            )
        )
    return manager
