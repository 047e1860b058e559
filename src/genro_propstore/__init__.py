# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-PropStore - Hierarchical property lists with inheritance and freezing.

A lightweight, zero-dependency library providing property containers that
inherit from a parent, hide deleted names from it, and can be frozen
for the Genro ecosystem (Genro Kyō).
"""

__version__ = "0.1.0"

from .exceptions import (
    CyclicDelegationError,
    FrozenStoreError,
    InvalidImportSourceError,
    PropertyStoreError,
)
from .reporting import (
    StructuredError,
    error_factory,
    get_error_factory,
    register_error_factory,
    unregister_error_factory,
)
from .store import PropertyStore

__all__ = [
    # Core classes
    "PropertyStore",
    # Failure reporting
    "StructuredError",
    "error_factory",
    "get_error_factory",
    "register_error_factory",
    "unregister_error_factory",
    # Exceptions
    "PropertyStoreError",
    "FrozenStoreError",
    "InvalidImportSourceError",
    "CyclicDelegationError",
]
