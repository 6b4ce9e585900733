# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/config/loader.py

import logging
import os
import yaml
from pathlib import Path
from pydantic import ValidationError

from .errors import ConfigError
from .models import MetalctlConfig

log = logging.getLogger("metalctl")


def default_config_path() -> Path:
    """
    Resolve the config file location:

    1. METALCTL_CONFIG environment variable
    2. ~/.metalctl/config.yaml
    """
    env = os.environ.get("METALCTL_CONFIG")
    if env:
        return Path(env)
    return Path.home() / ".metalctl" / "config.yaml"


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def load_config(path: str | Path | None = None) -> MetalctlConfig:
    """
    Load and validate a metalctl YAML config.

    Use ``${ENV_VAR}`` placeholders anywhere in the file (for example in
    ``targetPath``); ``os.path.expandvars`` resolves them at load time.
    The management configuration itself is only checked when a manager is
    built, so a config with a bad management type still loads.
    """
    path = Path(path) if path else default_config_path()
    if not path.is_file():
        raise ConfigError(f"metalctl config not found at {path}")

    log.debug("Loading metalctl config from %s", path)
    try:
        data = _load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse {path}: {exc}") from exc

    try:
        return MetalctlConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid metalctl config {path}: {exc}") from exc
