# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/redfish/client.py

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

import requests

from metalctl.remote.client import PowerStatus
from metalctl.remote.context import OperationContext
from metalctl.remote.errors import (
    AuthenticationError,
    OperationTimeoutError,
    RemoteOperationError,
    RetriesExhaustedError,
    TransportError,
    UnsupportedOperationError,
)
from metalctl.remote.retry import retry_operation
from .address import parse_bmc_address

log = logging.getLogger("metalctl")

T = TypeVar("T")

CD_MEDIA_TYPES = ("CD", "DVD")
DEFAULT_REQUEST_TIMEOUT = 30.0


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _odata_id(link: Any) -> Optional[str]:
    """Return the @odata.id of a Redfish link object, or None when it is malformed."""
    value = _as_dict(link).get("@odata.id")
    return value if isinstance(value, str) and value else None


class RedfishClient:
    """
    DMTF Redfish client for one ComputerSystem.

    Stateful actions (reset, boot override, media insert/eject) retry on
    transport failures up to ``system_action_retries`` times, pausing
    ``system_reboot_delay`` seconds. The same budget bounds power-state and
    media-state polling.
    """

    client_type = "redfish"

    def __init__(
        self,
        address: str,
        *,
        insecure: bool = False,
        use_proxy: bool = False,
        username: str = "",
        password: str = "",
        system_action_retries: int = 30,
        system_reboot_delay: float = 30.0,
        session: Optional[requests.Session] = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        parsed = parse_bmc_address(address)
        self.address = address
        self.base_url = parsed.base_url
        self.system_path = parsed.system_path
        self.system_id = parsed.system_id
        self.retries = system_action_retries
        self.delay = system_reboot_delay
        self.request_timeout = request_timeout

        self.session = session if session is not None else requests.Session()
        self.session.verify = not insecure
        # without trust_env, requests ignores HTTP(S)_PROXY
        self.session.trust_env = use_proxy
        if username:
            self.session.auth = (username, password)
        self.session.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )

    def node_id(self) -> str:
        return self.system_id

    # -----------------------
    # HTTP helpers
    # -----------------------
    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(
        self,
        ctx: OperationContext,
        method: str,
        path: str,
        *,
        action: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        ctx.check(action)
        timeout = self.request_timeout
        remaining = ctx.remaining()
        if remaining is not None:
            if remaining <= 0:
                raise OperationTimeoutError("deadline exceeded before request", action=action)
            timeout = min(timeout, remaining)

        url = self._url(path)
        log.debug("redfish %s %s", method, url)
        try:
            r = self.session.request(method, url, json=payload, timeout=timeout)
        except requests.Timeout as exc:
            raise TransportError(f"{method} {url} timed out", action=action) from exc
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}", action=action) from exc

        status = r.status_code
        if status in (401, 403):
            raise AuthenticationError(
                f"{method} {url} rejected credentials ({status})", action=action
            )
        if status in (404, 405, 501) and method != "GET":
            raise UnsupportedOperationError(
                f"{method} {url} is not supported by the BMC ({status})", action=action
            )
        if status >= 500:
            raise TransportError(f"{method} {url} returned {status}: {r.text}", action=action)
        if status >= 400:
            raise RemoteOperationError(f"{method} {url} returned {status}: {r.text}", action=action)
        return r

    def _get_json(self, ctx: OperationContext, path: str, *, action: str) -> Dict[str, Any]:
        r = self._request(ctx, "GET", path, action=action)
        try:
            body = r.json()
        except ValueError as exc:
            raise RemoteOperationError(f"GET {path} returned invalid JSON", action=action) from exc
        if not isinstance(body, dict):
            raise RemoteOperationError(
                f"GET {path} returned {type(body).__name__}, expected a JSON object", action=action
            )
        return body

    def _retry(self, ctx: OperationContext, action: str, fn: Callable[[], T]) -> T:
        return retry_operation(
            fn,
            ctx=ctx,
            action=action,
            target=self.address,
            retries=self.retries,
            delay=self.delay,
            on_retry=lambda attempt, exc: log.info(
                "%s on %s: attempt %d failed, retrying in %ss: %s",
                action, self.system_id, attempt, self.delay, exc,
            ),
        )

    def _poll(self, ctx: OperationContext, action: str, done: Callable[[], bool]) -> None:
        """Poll *done* until it returns True, within the retry budget."""
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                if done():
                    return
            except TransportError as exc:
                log.debug("%s poll %d/%d failed: %s", action, attempt, attempts, exc)
            if attempt < attempts:
                ctx.sleep(self.delay, action)
        raise RetriesExhaustedError(action=action, target=self.address, attempts=attempts)

    # -----------------------
    # Power
    # -----------------------
    def _reset(self, ctx: OperationContext, reset_type: str, action: str) -> None:
        self._retry(
            ctx,
            action,
            lambda: self._request(
                ctx,
                "POST",
                f"{self.system_path}/Actions/ComputerSystem.Reset",
                action=action,
                payload={"ResetType": reset_type},
            ),
        )

    def _wait_for_power_state(self, ctx: OperationContext, desired: PowerStatus, action: str) -> None:
        self._poll(ctx, action, lambda: self.power_status(ctx) == desired)

    def power_status(self, ctx: OperationContext) -> PowerStatus:
        system = self._get_json(ctx, self.system_path, action="power_status")
        return PowerStatus.parse(system.get("PowerState"))

    def power_on(self, ctx: OperationContext) -> None:
        self._reset(ctx, "On", "power_on")
        self._wait_for_power_state(ctx, PowerStatus.ON, "power_on")

    def power_off(self, ctx: OperationContext) -> None:
        self._reset(ctx, "ForceOff", "power_off")
        self._wait_for_power_state(ctx, PowerStatus.OFF, "power_off")

    def reboot_system(self, ctx: OperationContext) -> None:
        if self.power_status(ctx) != PowerStatus.OFF:
            self._reset(ctx, "ForceOff", "reboot_system")
            self._wait_for_power_state(ctx, PowerStatus.OFF, "reboot_system")
        self._reset(ctx, "On", "reboot_system")
        self._wait_for_power_state(ctx, PowerStatus.ON, "reboot_system")

    # -----------------------
    # Virtual media
    # -----------------------
    def _manager_path(self, ctx: OperationContext, action: str) -> str:
        system = self._get_json(ctx, self.system_path, action=action)
        managers = _as_list(_as_dict(system.get("Links")).get("ManagedBy"))
        path = _odata_id(managers[0]) if managers else None
        if not path:
            raise UnsupportedOperationError(
                f"system {self.system_id} does not report a managing BMC", action=action
            )
        return path

    def _virtual_media(self, ctx: OperationContext, action: str) -> List[Tuple[str, Dict[str, Any]]]:
        manager = self._get_json(ctx, self._manager_path(ctx, action), action=action)
        collection = _odata_id(manager.get("VirtualMedia"))
        if not collection:
            raise UnsupportedOperationError(
                f"system {self.system_id} has no virtual media support", action=action
            )
        members = _as_list(self._get_json(ctx, collection, action=action).get("Members"))
        paths = [p for p in (_odata_id(m) for m in members) if p]
        return [(p, self._get_json(ctx, p, action=action)) for p in paths]

    def _cd_media(self, ctx: OperationContext, action: str) -> Tuple[str, Dict[str, Any]]:
        for path, media in self._virtual_media(ctx, action):
            if any(t in CD_MEDIA_TYPES for t in _as_list(media.get("MediaTypes"))):
                return path, media
        raise UnsupportedOperationError(
            f"system {self.system_id} has no CD/DVD virtual media device", action=action
        )

    @staticmethod
    def _media_action(path: str, media: Dict[str, Any], name: str) -> str:
        target = _as_dict(_as_dict(media.get("Actions")).get(f"#VirtualMedia.{name}")).get("target")
        return target if isinstance(target, str) and target else f"{path}/Actions/VirtualMedia.{name}"

    def _eject(self, ctx: OperationContext, path: str, media: Dict[str, Any], action: str) -> None:
        self._retry(
            ctx,
            action,
            lambda: self._request(
                ctx, "POST", self._media_action(path, media, "EjectMedia"), action=action, payload={}
            ),
        )
        self._poll(
            ctx,
            action,
            lambda: not self._get_json(ctx, path, action=action).get("Inserted"),
        )

    def eject_virtual_media(self, ctx: OperationContext) -> None:
        for path, media in self._virtual_media(ctx, "eject_virtual_media"):
            if media.get("Inserted"):
                log.debug("ejecting %s from %s", media.get("Image"), path)
                self._eject(ctx, path, media, "eject_virtual_media")

    def set_virtual_media(self, ctx: OperationContext, media_ref: str) -> None:
        action = "set_virtual_media"
        path, media = self._cd_media(ctx, action)
        if media.get("Inserted"):
            self._eject(ctx, path, media, action)

        self._retry(
            ctx,
            action,
            lambda: self._request(
                ctx,
                "POST",
                self._media_action(path, media, "InsertMedia"),
                action=action,
                payload={"Image": media_ref, "Inserted": True, "WriteProtected": True},
            ),
        )

    # -----------------------
    # Boot source
    # -----------------------
    def set_boot_source_by_type(self, ctx: OperationContext) -> None:
        action = "set_boot_source_by_type"
        self._cd_media(ctx, action)
        self._retry(
            ctx,
            action,
            lambda: self._request(
                ctx,
                "PATCH",
                self.system_path,
                action=action,
                payload={
                    "Boot": {
                        "BootSourceOverrideTarget": "Cd",
                        "BootSourceOverrideEnabled": "Once",
                    }
                },
            ),
        )
