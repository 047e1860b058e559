# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Normalization of import_() sources into (name, value) pairs.

PropertyStore.import_() accepts two shapes:

- mappings: any ``collections.abc.Mapping``, or any object exposing
  ``keys()`` and ``__getitem__``
- records: another PropertyStore (its own properties), a named tuple,
  a dataclass instance, or a plain object instance (its public slots and
  attributes)

Everything else is rejected with InvalidImportSourceError.
"""

from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Mapping
from typing import Any, TYPE_CHECKING

from ..exceptions import InvalidImportSourceError

if TYPE_CHECKING:
    from .core import PropertyStore


def _is_namedtuple(source: Any) -> bool:
    return isinstance(source, tuple) and hasattr(type(source), '_fields')


def _is_mapping_like(source: Any) -> bool:
    """True if source quacks like a mapping without being registered as one."""
    if inspect.isclass(source):
        return False
    return callable(getattr(source, 'keys', None)) and hasattr(source, '__getitem__')


def _slot_names(source: Any) -> list[str]:
    """Return public, assigned slot names declared across the MRO of source."""
    names: list[str] = []
    for klass in type(source).__mro__:
        slots = klass.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name.startswith('_') or name in names:
                continue
            if hasattr(source, name):
                names.append(name)
    return names


def _is_record(source: Any) -> bool:
    """True if source is an object instance whose fields can be imported."""
    if inspect.isclass(source) or inspect.ismodule(source) or inspect.isroutine(source):
        return False
    if _is_namedtuple(source) or dataclasses.is_dataclass(source):
        return True
    return hasattr(source, '__dict__') or bool(_slot_names(source))


def items_from_mapping(source: Any) -> list[tuple[Any, Any]]:
    """Return the items of a mapping, or of an object with keys() and __getitem__."""
    if isinstance(source, Mapping):
        return list(source.items())
    return [(name, source[name]) for name in source.keys()]


def items_from_store(source: PropertyStore) -> list[tuple[str, Any]]:
    """Return the own properties of another store (parent and tombstones ignored)."""
    return list(source.get_all().items())


def items_from_record(source: Any) -> list[tuple[str, Any]]:
    """Return the fields of a record-like object.

    Named tuples and dataclasses contribute their declared fields (shallow,
    values are not copied). Other objects contribute their public slots
    followed by their public instance attributes, like iterating an
    object's visible properties.
    """
    if _is_namedtuple(source):
        return list(source._asdict().items())
    if dataclasses.is_dataclass(source):
        return [(f.name, getattr(source, f.name)) for f in dataclasses.fields(source)]
    items = [(name, getattr(source, name)) for name in _slot_names(source)]
    instance_dict = getattr(source, '__dict__', {})
    items.extend(
        (name, value) for name, value in instance_dict.items() if not name.startswith('_')
    )
    return items


def import_items(source: Any, code: str = '') -> list[tuple[Any, Any]]:
    """Convert an import source into a list of (name, value) pairs.

    Args:
        source: Mapping or record to import.
        code: Error code to attach if the source is rejected.

    Returns:
        List of (name, value) pairs in the source's iteration order.

    Raises:
        InvalidImportSourceError: If source is neither a record nor a mapping.
    """
    from .core import PropertyStore

    if isinstance(source, PropertyStore):
        return items_from_store(source)
    if isinstance(source, Mapping) or _is_mapping_like(source):
        return items_from_mapping(source)
    if isinstance(source, (str, bytes, bytearray)) or not _is_record(source):
        raise InvalidImportSourceError(
            'Cannot import this variable. '
            f'Use mappings and records only, not a "{type(source).__name__}".',
            code=code,
        )
    return items_from_record(source)
