# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PropertyStore exceptions."""

from __future__ import annotations


class PropertyStoreError(Exception):
    """Base exception for PropertyStore errors.

    Attributes:
        message: Human readable description of the failure.
        code: Identifier used to group related failures. Defaults to the
            name of the store class that reported it.
    """

    def __init__(self, message: str, code: str = '') -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


class FrozenStoreError(PropertyStoreError):
    """Raised when a frozen store is asked to change."""

    pass


class InvalidImportSourceError(PropertyStoreError, TypeError):
    """Raised when import_() gets something that is neither record nor mapping."""

    pass


class CyclicDelegationError(PropertyStoreError):
    """Raised when a parent chain loops back on itself."""

    pass
