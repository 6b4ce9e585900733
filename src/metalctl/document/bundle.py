# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/document/bundle.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List

import yaml

from .errors import BundleLoadError, DocumentNotFoundError, DocumentNotUniqueError
from .models import Document
from .selector import Selector

log = logging.getLogger("metalctl")

YAML_SUFFIXES = (".yaml", ".yml")


class Bundle:
    """
    An in-memory set of documents. Every document must be a mapping with a
    ``kind``; anything else in the YAML stream (empty docs, kustomization
    files) is skipped.
    """

    def __init__(self, documents: Iterable[Document] = ()):
        self._docs: List[Document] = list(documents)

    @classmethod
    def from_path(cls, root: str | Path) -> "Bundle":
        """Load every YAML file under *root* (a file or a directory)."""
        root = Path(root)
        if not root.exists():
            raise BundleLoadError(f"document root {root} does not exist")

        files = [root] if root.is_file() else sorted(
            p for p in root.rglob("*") if p.is_file() and p.suffix in YAML_SUFFIXES
        )

        docs: List[Document] = []
        for path in files:
            docs.extend(_read_documents(path))

        log.debug("Loaded %d documents from %s", len(docs), root)
        return cls(docs)

    @classmethod
    def from_string(cls, text: str) -> "Bundle":
        try:
            raw_docs = list(yaml.safe_load_all(text))
        except yaml.YAMLError as exc:
            raise BundleLoadError(f"failed to parse documents: {exc}") from exc
        return cls(Document(raw=d) for d in raw_docs if isinstance(d, dict) and d.get("kind"))

    def __iter__(self) -> Iterator[Document]:
        return iter(self._docs)

    def __len__(self) -> int:
        return len(self._docs)

    def select(self, selector: Selector) -> List[Document]:
        return [d for d in self._docs if selector.matches(d)]

    def select_one(self, selector: Selector) -> Document:
        docs = self.select(selector)
        if not docs:
            raise DocumentNotFoundError(selector)
        if len(docs) > 1:
            raise DocumentNotUniqueError(selector, len(docs))
        return docs[0]


def _read_documents(path: Path) -> List[Document]:
    try:
        raw_docs = list(yaml.safe_load_all(path.read_text()))
    except yaml.YAMLError as exc:
        raise BundleLoadError(f"failed to parse {path}: {exc}") from exc

    return [
        Document(raw=d, source=path)
        for d in raw_docs
        if isinstance(d, dict) and d.get("kind")
    ]
