# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/document/errors.py
from metalctl.errors import MetalctlError


class DocumentError(MetalctlError):
    """Base class for document-layer failures."""


class BundleLoadError(DocumentError):
    pass


class LabelSelectorError(DocumentError):
    """Raised when a label expression cannot be parsed."""


class DocumentNotFoundError(DocumentError):
    def __init__(self, selector):
        super().__init__(f"document not found: no document matches {selector}")
        self.selector = selector


class DocumentNotUniqueError(DocumentError):
    def __init__(self, selector, count: int):
        super().__init__(f"{count} documents match {selector}, expected exactly one")
        self.selector = selector
        self.count = count


class DocumentFieldError(DocumentError):
    def __init__(self, document: str, field: str, reason: str = "is missing"):
        super().__init__(f"document {document}: field '{field}' {reason}")
        self.document = document
        self.field = field
