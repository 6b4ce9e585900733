# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/document/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

BAREMETALHOST_KIND = "BareMetalHost"
SECRET_KIND = "Secret"
PHASE_KIND = "Phase"

_MISSING = object()


@dataclass(frozen=True)
class Document:
    """
    One YAML document from a bundle. ``raw`` is the parsed mapping;
    ``source`` is the file it came from, when known.
    """
    raw: Dict[str, Any]
    source: Optional[Path] = field(default=None, compare=False)

    @property
    def kind(self) -> str:
        return self.raw.get("kind") or ""

    @property
    def metadata(self) -> Dict[str, Any]:
        return self.raw.get("metadata") or {}

    @property
    def name(self) -> str:
        return self.metadata.get("name") or ""

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace") or ""

    @property
    def labels(self) -> Dict[str, str]:
        return {str(k): str(v) for k, v in (self.metadata.get("labels") or {}).items()}

    def get(self, path: str, default: Any = None) -> Any:
        """Dotted lookup, e.g. ``doc.get("spec.bmc.address")``."""
        node: Any = self.raw
        for part in path.split("."):
            if not isinstance(node, dict):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return node

    def __str__(self) -> str:
        ns = f"{self.namespace}/" if self.namespace else ""
        return f"{self.kind}/{ns}{self.name}"
