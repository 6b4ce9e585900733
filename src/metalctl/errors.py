# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metalctl/errors.py


class MetalctlError(RuntimeError):
    """Base class for every failure raised by metalctl."""
