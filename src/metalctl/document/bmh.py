# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/document/bmh.py
from __future__ import annotations

import base64
import binascii
from typing import Tuple

from .bundle import Bundle
from .errors import DocumentFieldError
from .models import SECRET_KIND, Document
from .selector import Selector


def get_bmc_address(doc: Document) -> str:
    address = doc.get("spec.bmc.address")
    if not address or not isinstance(address, str):
        raise DocumentFieldError(str(doc), "spec.bmc.address")
    return address


def _secret_value(secret: Document, key: str) -> str:
    string_data = secret.get("stringData") or {}
    if key in string_data:
        return str(string_data[key])

    encoded = (secret.get("data") or {}).get(key)
    if encoded is None:
        raise DocumentFieldError(str(secret), f"data.{key}")
    try:
        return base64.b64decode(str(encoded), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise DocumentFieldError(str(secret), f"data.{key}", "is not valid base64") from exc


def get_bmc_credentials(doc: Document, bundle: Bundle) -> Tuple[str, str]:
    """
    Resolve (username, password) through the Secret named by
    ``spec.bmc.credentialsName``, looked up in the host's namespace.
    """
    secret_name = doc.get("spec.bmc.credentialsName")
    if not secret_name:
        raise DocumentFieldError(str(doc), "spec.bmc.credentialsName")

    selector = Selector().by_kind(SECRET_KIND).by_name(secret_name)
    if doc.namespace:
        selector = selector.by_namespace(doc.namespace)
    secret = bundle.select_one(selector)

    return _secret_value(secret, "username"), _secret_value(secret, "password")
