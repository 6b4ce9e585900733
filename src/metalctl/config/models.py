# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/config/models.py

from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from .errors import (
    ContextNotFoundError,
    InvalidManagementConfigError,
    ManagementConfigNotFoundError,
    ManifestNotFoundError,
)

DEFAULT_SYSTEM_ACTION_RETRIES = 30
DEFAULT_SYSTEM_REBOOT_DELAY = 30.0


class ManagementConfiguration(BaseModel):
    """Out-of-band management settings for one context."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: str = "redfish"
    insecure: bool = False
    use_proxy: bool = Field(False, alias="useproxy")
    system_action_retries: int = Field(
        DEFAULT_SYSTEM_ACTION_RETRIES, alias="systemActionRetries"
    )
    system_reboot_delay: float = Field(
        DEFAULT_SYSTEM_REBOOT_DELAY, alias="systemRebootDelay"
    )

    def check_fields(self) -> None:
        """
        Raise InvalidManagementConfigError when the fields are inconsistent.
        Whether the type is known is decided by the client registry.
        """
        if not self.type or not self.type.strip():
            raise InvalidManagementConfigError("management type must not be empty")
        if self.system_action_retries < 0:
            raise InvalidManagementConfigError(
                f"systemActionRetries must be >= 0, got {self.system_action_retries}"
            )
        if self.system_reboot_delay < 0:
            raise InvalidManagementConfigError(
                f"systemRebootDelay must be >= 0, got {self.system_reboot_delay}"
            )


class Manifest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_path: str = Field(..., alias="targetPath")
    phases_path: str = Field("phases", alias="phasesPath")   # relative to target_path
    doc_entry_point_prefix: str = Field("", alias="docEntryPointPrefix")


class Context(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    manifest: str = "default"
    management_configuration: str = Field("default", alias="managementConfiguration")


class MetalctlConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_context: str = Field(..., alias="currentContext")
    contexts: Dict[str, Context] = Field(default_factory=dict)
    manifests: Dict[str, Manifest] = Field(default_factory=dict)
    management_configuration: Dict[str, ManagementConfiguration] = Field(
        default_factory=dict, alias="managementConfiguration"
    )

    def current(self, name: Optional[str] = None) -> Context:
        name = name or self.current_context
        ctx = self.contexts.get(name)
        if ctx is None:
            raise ContextNotFoundError(name)
        return ctx

    def current_manifest(self) -> Manifest:
        ref = self.current().manifest
        manifest = self.manifests.get(ref)
        if manifest is None:
            raise ManifestNotFoundError(ref)
        return manifest

    def current_management_config(self) -> ManagementConfiguration:
        ref = self.current().management_configuration
        mgmt = self.management_configuration.get(ref)
        if mgmt is None:
            raise ManagementConfigNotFoundError(ref)
        return mgmt
