# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/errors.py
from __future__ import annotations

from typing import Optional

from metalctl.errors import MetalctlError


class NoHostsFoundError(MetalctlError):
    """Every selector matched documents, but their intersection is empty."""

    def __init__(self):
        super().__init__("no hosts found: the selectors left no baremetal host to manage")


class InvalidAddressError(MetalctlError):
    def __init__(self, address: str, reason: str):
        super().__init__(f"invalid BMC address '{address}': {reason}")
        self.address = address


class RemoteOperationError(MetalctlError):
    """
    Failure of one out-of-band call. ``host`` is filled in when the error
    passes through a BaremetalHost.
    """

    transient = False

    def __init__(self, message: str, *, action: Optional[str] = None, host: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.action = action
        self.host = host

    def __str__(self) -> str:
        prefix = ""
        if self.host:
            prefix += f"host {self.host}: "
        if self.action:
            prefix += f"{self.action}: "
        return prefix + self.message


class TransportError(RemoteOperationError):
    transient = True


class AuthenticationError(RemoteOperationError):
    pass


class UnsupportedOperationError(RemoteOperationError):
    pass


class OperationTimeoutError(RemoteOperationError):
    pass


class OperationCancelledError(RemoteOperationError):
    pass


class RetriesExhaustedError(RemoteOperationError):
    def __init__(self, *, action: str, target: str, attempts: int, host: Optional[str] = None):
        super().__init__(
            f"gave up on {target} after {attempts} attempt(s)", action=action, host=host
        )
        self.target = target
        self.attempts = attempts
