# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/document/selector.py
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import FrozenSet, List, Optional, Tuple

from .errors import LabelSelectorError
from .models import Document

_SET_RE = re.compile(r"^(?P<key>[^\s!=,()]+)\s+(?P<op>in|notin)\s+\((?P<values>[^()]*)\)$")


@dataclass(frozen=True)
class LabelRequirement:
    key: str
    op: str                      # "=", "!=", "in", "notin", "exists", "!exists"
    values: FrozenSet[str] = frozenset()

    def matches(self, labels: dict) -> bool:
        present = self.key in labels
        if self.op == "exists":
            return present
        if self.op == "!exists":
            return not present
        if self.op in ("=", "in"):
            return present and labels[self.key] in self.values
        # "!=" and "notin" also match when the key is absent
        return not present or labels[self.key] not in self.values


def _split_terms(expr: str) -> List[str]:
    terms, depth, buf = [], 0, []
    for ch in expr:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise LabelSelectorError(f"unbalanced ')' in label selector '{expr}'")
        if ch == "," and depth == 0:
            terms.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
    if depth != 0:
        raise LabelSelectorError(f"unbalanced '(' in label selector '{expr}'")
    terms.append("".join(buf))
    return [t.strip() for t in terms if t.strip()]


def _parse_term(term: str) -> LabelRequirement:
    m = _SET_RE.match(term)
    if m:
        values = frozenset(v.strip() for v in m.group("values").split(",") if v.strip())
        return LabelRequirement(m.group("key"), m.group("op"), values)

    if term.startswith("!"):
        key = term[1:].strip()
        op, values = "!exists", frozenset()
    elif "!=" in term:
        key, _, value = term.partition("!=")
        op, values = "!=", frozenset({value.strip()})
    elif "==" in term:
        key, _, value = term.partition("==")
        op, values = "=", frozenset({value.strip()})
    elif "=" in term:
        key, _, value = term.partition("=")
        op, values = "=", frozenset({value.strip()})
    else:
        key, op, values = term, "exists", frozenset()

    key = key.strip()
    if not key or any(c in key for c in " =!()"):
        raise LabelSelectorError(f"invalid label selector term '{term}'")
    return LabelRequirement(key, op, values)


def parse_label_selector(expr: Optional[str]) -> Tuple[LabelRequirement, ...]:
    """
    Parse a Kubernetes-style label expression. Supported terms, ANDed by
    commas: ``k=v``, ``k==v``, ``k!=v``, ``k``, ``!k``, ``k in (a,b)``,
    ``k notin (a,b)``. An empty expression has no requirements.
    """
    if not expr:
        return ()
    return tuple(_parse_term(t) for t in _split_terms(expr))


@dataclass(frozen=True)
class Selector:
    """
    Document filter. Build it fluently:

        Selector().by_kind(BAREMETALHOST_KIND).by_label("site=1")
    """
    kind: Optional[str] = None
    name: Optional[str] = None
    namespace: Optional[str] = None
    label: Optional[str] = None

    def by_kind(self, kind: str) -> "Selector":
        return replace(self, kind=kind)

    def by_name(self, name: str) -> "Selector":
        return replace(self, name=name)

    def by_namespace(self, namespace: str) -> "Selector":
        return replace(self, namespace=namespace)

    def by_label(self, label: str) -> "Selector":
        parse_label_selector(label)  # fail early on a bad expression
        return replace(self, label=label)

    def requirements(self) -> Tuple[LabelRequirement, ...]:
        return parse_label_selector(self.label)

    def matches(self, doc: Document) -> bool:
        if self.kind is not None and doc.kind != self.kind:
            return False
        if self.name is not None and doc.name != self.name:
            return False
        if self.namespace is not None and doc.namespace != self.namespace:
            return False
        labels = doc.labels
        return all(req.matches(labels) for req in self.requirements())

    def __str__(self) -> str:
        parts = [
            f"{k}={v!r}"
            for k, v in (
                ("kind", self.kind),
                ("name", self.name),
                ("namespace", self.namespace),
                ("label", self.label),
            )
            if v is not None
        ]
        return "selector(" + ", ".join(parts) + ")"
