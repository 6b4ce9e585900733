# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/config/errors.py
from metalctl.errors import MetalctlError


class ConfigError(MetalctlError):
    """Base class for configuration failures. Always raised before any I/O."""


class ContextNotFoundError(ConfigError):
    def __init__(self, name: str):
        super().__init__(f"context '{name}' is not defined in the metalctl config")
        self.name = name


class ManifestNotFoundError(ConfigError):
    def __init__(self, name: str):
        super().__init__(f"manifest '{name}' is not defined in the metalctl config")
        self.name = name


class ManagementConfigNotFoundError(ConfigError):
    def __init__(self, name: str):
        super().__init__(
            f"management configuration '{name}' is not defined in the metalctl config"
        )
        self.name = name


class InvalidManagementConfigError(ConfigError):
    pass


class UnknownManagementTypeError(ConfigError):
    def __init__(self, type_: str, known: tuple[str, ...] = ()):
        msg = f"unknown management type '{type_}'"
        if known:
            msg += f" (known types: {', '.join(known)})"
        super().__init__(msg)
        self.type = type_
        self.known = known
