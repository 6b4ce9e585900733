# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/remote/selectors.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from metalctl.config.models import ManagementConfiguration
from metalctl.document.bundle import Bundle
from metalctl.document.errors import DocumentNotFoundError
from metalctl.document.models import BAREMETALHOST_KIND, Document
from metalctl.document.selector import Selector
from .host import BaremetalHost, new_baremetal_host
from .registry import ClientRegistry


def reconcile_hosts(
    existing: Optional[Sequence[BaremetalHost]],
    new: Sequence[BaremetalHost],
) -> List[BaremetalHost]:
    """
    Intersect two host sets by name. When *existing* is None no selector has
    run yet, so *new* is taken as is. An empty *existing* stays empty.
    Duplicate names keep the first host.
    """
    seen = set()
    unique: List[BaremetalHost] = []
    for host in new:
        if host.name not in seen:
            seen.add(host.name)
            unique.append(host)

    if existing is None:
        return unique

    names = {h.name for h in existing}
    return [h for h in unique if h.name in names]


class HostSelector(ABC):
    """Resolves BareMetalHost documents into hosts and narrows the working set."""

    @abstractmethod
    def match_documents(self, bundle: Bundle) -> List[Document]:
        """Return the matched documents; raise DocumentNotFoundError when none match."""

    def apply(
        self,
        hosts: Optional[Sequence[BaremetalHost]],
        mgmt_cfg: ManagementConfiguration,
        bundle: Bundle,
        registry: ClientRegistry,
    ) -> List[BaremetalHost]:
        matched = [
            new_baremetal_host(mgmt_cfg, doc, bundle, registry)
            for doc in self.match_documents(bundle)
        ]
        return reconcile_hosts(hosts, matched)


@dataclass(frozen=True)
class ByName(HostSelector):
    name: str

    def match_documents(self, bundle: Bundle) -> List[Document]:
        sel = Selector().by_kind(BAREMETALHOST_KIND).by_name(self.name)
        return [bundle.select_one(sel)]


@dataclass(frozen=True)
class ByLabel(HostSelector):
    label: str

    def match_documents(self, bundle: Bundle) -> List[Document]:
        sel = Selector().by_kind(BAREMETALHOST_KIND).by_label(self.label)
        docs = bundle.select(sel)
        if not docs:
            raise DocumentNotFoundError(sel)
        return docs
