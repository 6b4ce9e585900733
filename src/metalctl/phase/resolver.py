# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/phase/resolver.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from metalctl.config.models import Manifest, MetalctlConfig
from metalctl.document.bundle import Bundle
from metalctl.document.errors import DocumentNotFoundError
from metalctl.document.models import PHASE_KIND
from metalctl.document.selector import Selector
from metalctl.errors import MetalctlError

log = logging.getLogger("metalctl")


class PhaseError(MetalctlError):
    pass


class PhaseNotFoundError(PhaseError):
    def __init__(self, name: str):
        super().__init__(f"phase '{name}' not found")
        self.name = name


class PhaseResolver:
    """
    Maps a phase name to its document root and loads the bundle there.

    Phase documents live under ``<targetPath>/<phasesPath>``; each one names
    ``config.documentEntryPoint`` relative to
    ``<targetPath>/<docEntryPointPrefix>``.
    """

    def __init__(self, manifest: Manifest):
        self.manifest = manifest
        self.target_path = Path(manifest.target_path).expanduser()

    @classmethod
    def from_config(cls, cfg: MetalctlConfig) -> "PhaseResolver":
        return cls(cfg.current_manifest())

    def _phase_bundle(self) -> Bundle:
        return Bundle.from_path(self.target_path / self.manifest.phases_path)

    def phase_names(self) -> List[str]:
        sel = Selector().by_kind(PHASE_KIND)
        return sorted(d.name for d in self._phase_bundle().select(sel))

    def document_root(self, phase_name: str) -> Path:
        sel = Selector().by_kind(PHASE_KIND).by_name(phase_name)
        try:
            phase = self._phase_bundle().select_one(sel)
        except DocumentNotFoundError as exc:
            raise PhaseNotFoundError(phase_name) from exc

        entry_point = phase.get("config.documentEntryPoint")
        if not entry_point:
            raise PhaseError(
                f"phase '{phase_name}' does not define config.documentEntryPoint"
            )

        root = self.target_path / self.manifest.doc_entry_point_prefix / entry_point
        log.debug("phase %s -> document root %s", phase_name, root)
        return root

    def bundle(self, phase_name: str) -> Bundle:
        return Bundle.from_path(self.document_root(phase_name))
