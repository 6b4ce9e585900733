# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/redfish/dell.py

from __future__ import annotations

import logging

from metalctl.remote.context import OperationContext
from metalctl.remote.errors import RemoteOperationError
from .client import RedfishClient

log = logging.getLogger("metalctl")

IMPORT_SYSTEM_CONFIGURATION = "Actions/Oem/EID_674_Manager.ImportSystemConfiguration"

# one-time boot from the iDRAC virtual CD/DVD
BOOT_ONCE_FROM_VIRTUAL_CD = (
    "<SystemConfiguration>"
    '<Component FQDD="iDRAC.Embedded.1">'
    '<Attribute Name="ServerBoot.1#BootOnce">Enabled</Attribute>'
    '<Attribute Name="ServerBoot.1#FirstBootDevice">VCD-DVD</Attribute>'
    "</Component>"
    "</SystemConfiguration>"
)

JOB_DONE = "Completed"
JOB_FAILED = ("Failed", "CompletedWithErrors")


class DellRedfishClient(RedfishClient):
    """
    Redfish client for Dell iDRAC. iDRAC ignores the standard boot override
    for virtual media, so the boot source is set through a system
    configuration import job.
    """

    client_type = "redfish-dell"

    def set_boot_source_by_type(self, ctx: OperationContext) -> None:
        action = "set_boot_source_by_type"
        manager = self._manager_path(ctx, action)
        payload = {
            "ShareParameters": {"Target": "ALL"},
            "ImportBuffer": BOOT_ONCE_FROM_VIRTUAL_CD,
        }

        r = self._retry(
            ctx,
            action,
            lambda: self._request(
                ctx,
                "POST",
                f"{manager.rstrip('/')}/{IMPORT_SYSTEM_CONFIGURATION}",
                action=action,
                payload=payload,
            ),
        )

        job = r.headers.get("Location")
        if not job:
            raise RemoteOperationError(
                "iDRAC accepted the configuration import but returned no job location",
                action=action,
            )
        log.debug("waiting for iDRAC job %s", job)
        self._poll(ctx, action, lambda: self._job_finished(ctx, job, action))

    def _job_finished(self, ctx: OperationContext, job: str, action: str) -> bool:
        status = self._get_json(ctx, job, action=action)
        state = status.get("JobState") or status.get("TaskState")
        if state == JOB_DONE:
            return True
        if state in JOB_FAILED:
            raise RemoteOperationError(
                f"iDRAC job {job} ended in state {state}: {status.get('Message', '')}",
                action=action,
            )
        return False
