# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/registry.py

from __future__ import annotations

import logging
from typing import Callable, Dict, Tuple

from metalctl.config.errors import UnknownManagementTypeError
from metalctl.config.models import ManagementConfiguration
from .client import Client
from .redfish.client import RedfishClient
from .redfish.dell import DellRedfishClient

log = logging.getLogger("metalctl")

# constructor(address, *, insecure, use_proxy, username, password,
#             system_action_retries, system_reboot_delay) -> Client
ClientConstructor = Callable[..., Client]


class ClientRegistry:
    """Management type tag -> vendor client constructor."""

    def __init__(self):
        self._constructors: Dict[str, ClientConstructor] = {}

    def register(self, type_: str, constructor: ClientConstructor) -> None:
        self._constructors[type_] = constructor

    def types(self) -> Tuple[str, ...]:
        return tuple(sorted(self._constructors))

    def ensure_supported(self, type_: str) -> None:
        if type_ not in self._constructors:
            raise UnknownManagementTypeError(type_, self.types())

    def new_client(
        self,
        address: str,
        username: str,
        password: str,
        mgmt_cfg: ManagementConfiguration,
    ) -> Client:
        constructor = self._constructors.get(mgmt_cfg.type)
        if constructor is None:
            raise UnknownManagementTypeError(mgmt_cfg.type, self.types())

        log.debug("Remote type: %s", mgmt_cfg.type)
        return constructor(
            address,
            insecure=mgmt_cfg.insecure,
            use_proxy=mgmt_cfg.use_proxy,
            username=username,
            password=password,
            system_action_retries=mgmt_cfg.system_action_retries,
            system_reboot_delay=mgmt_cfg.system_reboot_delay,
        )


def build_client_registry() -> ClientRegistry:
    registry = ClientRegistry()
    registry.register(RedfishClient.client_type, RedfishClient)
    registry.register(DellRedfishClient.client_type, DellRedfishClient)
    return registry
