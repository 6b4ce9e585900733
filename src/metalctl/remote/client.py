# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/client.py
from __future__ import annotations

from enum import Enum
from typing import Protocol

from .context import OperationContext


class PowerStatus(str, Enum):
    ON = "On"
    OFF = "Off"
    POWERING_ON = "PoweringOn"
    POWERING_OFF = "PoweringOff"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: object) -> "PowerStatus":
        for status in cls:
            if status.value == value:
                return status
        return cls.UNKNOWN


class Client(Protocol):
    """
    Out-of-band operations a vendor client must provide. Every call takes its
    own OperationContext and raises a RemoteOperationError subclass on failure.
    """

    def node_id(self) -> str: ...

    def power_on(self, ctx: OperationContext) -> None: ...

    def power_off(self, ctx: OperationContext) -> None: ...

    def power_status(self, ctx: OperationContext) -> PowerStatus: ...

    def reboot_system(self, ctx: OperationContext) -> None: ...

    def set_boot_source_by_type(self, ctx: OperationContext) -> None: ...

    def set_virtual_media(self, ctx: OperationContext, media_ref: str) -> None: ...

    def eject_virtual_media(self, ctx: OperationContext) -> None: ...
