# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/host.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, TypeVar

from metalctl.config.models import ManagementConfiguration
from metalctl.document.bmh import get_bmc_address, get_bmc_credentials
from metalctl.document.bundle import Bundle
from metalctl.document.models import Document
from .client import Client, PowerStatus
from .context import OperationContext
from .errors import RemoteOperationError
from .registry import ClientRegistry

T = TypeVar("T")


@dataclass(frozen=True)
class BaremetalHost:
    """
    One BareMetalHost document bound to one vendor client.
    Operations forward to the client; failures are tagged with the host name.
    """
    name: str
    bmc_address: str
    client: Client = field(repr=False, compare=False)
    username: str = field(default="", repr=False, compare=False)
    password: str = field(default="", repr=False, compare=False)

    def _call(self, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except RemoteOperationError as exc:
            if exc.host is None:
                exc.host = self.name
            raise

    def node_id(self) -> str:
        return self.client.node_id()

    def power_on(self, ctx: OperationContext) -> None:
        self._call(lambda: self.client.power_on(ctx))

    def power_off(self, ctx: OperationContext) -> None:
        self._call(lambda: self.client.power_off(ctx))

    def power_status(self, ctx: OperationContext) -> PowerStatus:
        return self._call(lambda: self.client.power_status(ctx))

    def reboot_system(self, ctx: OperationContext) -> None:
        self._call(lambda: self.client.reboot_system(ctx))

    def set_boot_source_by_type(self, ctx: OperationContext) -> None:
        self._call(lambda: self.client.set_boot_source_by_type(ctx))

    def set_virtual_media(self, ctx: OperationContext, media_ref: str) -> None:
        self._call(lambda: self.client.set_virtual_media(ctx, media_ref))

    def eject_virtual_media(self, ctx: OperationContext) -> None:
        self._call(lambda: self.client.eject_virtual_media(ctx))


def new_baremetal_host(
    mgmt_cfg: ManagementConfiguration,
    doc: Document,
    bundle: Bundle,
    registry: ClientRegistry,
) -> BaremetalHost:
    """Resolve address and credentials for *doc*, then build its vendor client."""
    address = get_bmc_address(doc)
    username, password = get_bmc_credentials(doc, bundle)
    client = registry.new_client(address, username, password, mgmt_cfg)
    return BaremetalHost(
        name=doc.name,
        bmc_address=address,
        client=client,
        username=username,
        password=password,
    )
