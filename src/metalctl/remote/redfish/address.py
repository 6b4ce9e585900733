# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/redfish/address.py
from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from metalctl.remote.errors import InvalidAddressError

# driver prefixes accepted before "+" in a BMC address, e.g. "redfish+https://"
DRIVER_PREFIXES = ("redfish", "redfish-virtualmedia", "idrac", "idrac-virtualmedia", "idrac-redfish")


@dataclass(frozen=True)
class RedfishAddress:
    base_url: str       # scheme://host[:port]
    system_path: str    # /redfish/v1/Systems/<id>
    system_id: str


def parse_bmc_address(address: str) -> RedfishAddress:
    """
    Split a BareMetalHost BMC address into the endpoint and the system it names.

    ``redfish+https://10.0.0.5/redfish/v1/Systems/1`` ->
    (``https://10.0.0.5``, ``/redfish/v1/Systems/1``, ``1``).
    A bare driver scheme (``redfish://``) means https.
    """
    if not address:
        raise InvalidAddressError(address, "empty address")

    parts = urlsplit(address)
    scheme = parts.scheme.lower()
    driver, plus, transport = scheme.partition("+")
    if plus:
        if driver not in DRIVER_PREFIXES:
            raise InvalidAddressError(address, f"unsupported driver '{driver}'")
        scheme = transport
    elif scheme in DRIVER_PREFIXES:
        scheme = "https"

    if scheme not in ("http", "https"):
        raise InvalidAddressError(address, f"unsupported scheme '{parts.scheme}'")
    if not parts.netloc:
        raise InvalidAddressError(address, "missing host")

    path = parts.path.rstrip("/")
    system_id = path.rsplit("/", 1)[-1] if path else ""
    if not system_id:
        raise InvalidAddressError(address, "missing system id in path")

    return RedfishAddress(
        base_url=f"{scheme}://{parts.netloc}",
        system_path=path,
        system_id=system_id,
    )
