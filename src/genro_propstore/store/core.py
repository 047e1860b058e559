# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PropertyStore - A hierarchical, freezable property container.

This module provides the PropertyStore class, a flat name/value container
that can delegate lookups to a parent store, remember explicit deletions,
and be locked forever against further changes.

Key Features:
    - **Delegation**: Names missing locally are resolved through a parent
      store, which may be shared by several children
    - **Tombstones**: Deleting a name hides it even if an ancestor defines it
    - **Freezing**: freeze() turns the store read-only for the rest of its life
    - **Pluggable failures**: Refused changes raise, or return a recoverable
      error value when the host registers an error factory
    - **Thread safety**: Each store serializes its own writes with a lock

Resolution Order:
    1. Own properties
    2. Own tombstones (hard stop, the parent is never consulted)
    3. The parent chain
    4. The default

Example:
    Basic usage::

        john = PropertyStore()
        john.set('first_name', 'John').set('last_name', 'Doe').freeze()

        # John's daughter with the same last name
        mildred = PropertyStore()
        mildred.set_parent(john).set('first_name', 'Mildred')

        mildred.get('last_name')   # 'Doe'
        mildred['first_name']      # 'Mildred'

    Hiding an inherited name::

        mildred.delete('last_name')
        mildred.has('last_name')   # False
        john.get('last_name')      # 'Doe'
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterator

from ..exceptions import (
    CyclicDelegationError,
    FrozenStoreError,
    PropertyStoreError,
)
from ..reporting import get_error_factory
from .sources import import_items

logger = logging.getLogger(__name__)

_MISSING = object()


class PropertyStore:
    """A name/value container with parent delegation and freeze support.

    PropertyStore provides:
    - set(name, value) / delete(name) / import_(source): Mutations
    - get(name) / has(name) / get_all(include_parent): Resolution
    - set_parent(other) / has_parent(): Delegation
    - freeze() / is_frozen(): Permanent write protection

    Mutators return the store itself for fluent chaining. When a mutation
    is refused, the failure goes through _stop(), which subclasses may
    override.

    Example:
        >>> store = PropertyStore()
        >>> store.set('a', 1).set('b', 2).get_all()
        {'a': 1, 'b': 2}
    """

    __slots__ = (
        '_properties', '_deleted', '_parent', '_frozen', '_lock', '_on_error',
    )

    def __init__(
        self,
        source: Any = None,
        parent: PropertyStore | None = None,
        on_error: Callable[[PropertyStoreError], Any] | None = None,
    ) -> None:
        """Initialize a PropertyStore.

        Args:
            source: Optional initial data, imported as with import_().
            parent: Optional store to delegate missing names to.
            on_error: Optional failure strategy. When set, a refused
                mutation returns ``on_error(error)`` instead of consulting
                the registered error factory or raising.

        Raises:
            InvalidImportSourceError: If source is neither record nor mapping.
            TypeError: If parent is not a PropertyStore.

        Example:
            >>> PropertyStore({'a': 1})
            PropertyStore(['a'])
            >>> defaults = PropertyStore({'lang': 'en'})
            >>> PropertyStore(parent=defaults).get('lang')
            'en'
            >>> PropertyStore(on_error=lambda err: None).freeze().set('a', 1) is None
            True
        """
        self._properties: dict[str, Any] = {}
        self._deleted: set[str] = set()
        self._parent: PropertyStore | None = None
        self._frozen = False
        self._lock = threading.RLock()
        self._on_error = on_error

        if parent is not None:
            self._set_parent(parent)
        if source is not None:
            self._import(source)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        """Return string representation showing own names."""
        with self._lock:
            names = list(self._properties)
            frozen = self._frozen
        flag = ', frozen' if frozen else ''
        return f"{type(self).__name__}({names}{flag})"

    def __len__(self) -> int:
        """Return the number of own properties."""
        with self._lock:
            return len(self._properties)

    def __iter__(self) -> Iterator[str]:
        """Iterate over own property names in insertion order."""
        with self._lock:
            return iter(list(self._properties))

    def __contains__(self, name: str) -> bool:
        """Check if name resolves to a value (see has()).

        Resolves through the parent chain, while len() and iter() cover own
        properties only. Use get_all(True) to enumerate the resolved view.
        """
        return self.has(name)

    def __getitem__(self, name: str) -> Any:
        """Get the resolved value of name.

        Raises:
            KeyError: If name resolves to nothing.
        """
        value = self.get(name, _MISSING)
        if value is _MISSING:
            raise KeyError(name)
        return value

    def __setitem__(self, name: str, value: Any) -> None:
        """Set name to value.

        Unlike set(), always raises on failure: there is no return value
        to carry an error value.
        """
        self._set(name, value)

    def __delitem__(self, name: str) -> None:
        """Delete name, leaving a tombstone. Always raises on failure."""
        self._delete(name)

    # ==================== Failure Policy ====================

    def _error_code(self) -> str:
        return type(self).__name__

    def _stop(self, error: PropertyStoreError) -> Any:
        """Report a refused operation.

        Might be replaced by a subclass. The default policy is:

        1. the ``on_error`` strategy given at construction, if any
        2. the error factory registered in genro_propstore.reporting, if any,
           called as ``factory(code, message)``
        3. raise the error

        Args:
            error: The failure. Its code is filled with the store class
                name when empty.

        Returns:
            Whatever the strategy or factory returns.

        Raises:
            PropertyStoreError: When neither strategy nor factory is present.
        """
        if not error.code:
            error.code = self._error_code()
        logger.debug("%s refused: [%s] %s", type(self).__name__, error.code, error.message)

        if self._on_error is not None:
            return self._on_error(error)

        factory = get_error_factory()
        if factory is not None:
            return factory(error.code, error.message)

        raise error

    def _guarded(self, operation: Callable[..., None], *args: Any) -> Any:
        """Run operation, routing failures through _stop(); return self on success."""
        try:
            operation(*args)
        except PropertyStoreError as error:
            return self._stop(error)
        return self

    def _check_frozen(self, message: str) -> None:
        """Raise FrozenStoreError if frozen. Call with the lock held."""
        if self._frozen:
            raise FrozenStoreError(message, code=self._error_code())

    # ==================== Mutation ====================

    def _set(self, name: str, value: Any) -> None:
        with self._lock:
            self._check_frozen(
                'This store has been frozen. You cannot set properties anymore.'
            )
            self._properties[name] = value
            self._deleted.discard(name)

    def _import(self, source: Any) -> None:
        message = 'This store has been frozen. You cannot import properties anymore.'
        with self._lock:
            self._check_frozen(message)

        # Read the source without holding our lock, it may be another store.
        items = import_items(source, code=self._error_code())

        with self._lock:
            self._check_frozen(message)
            for name, value in items:
                self._properties[name] = value

    def _delete(self, name: str) -> None:
        with self._lock:
            self._check_frozen(
                'This store has been frozen. You cannot delete properties anymore.'
            )
            self._deleted.add(name)
            self._properties.pop(name, None)

    def _set_parent(self, other: PropertyStore) -> None:
        if not isinstance(other, PropertyStore):
            raise TypeError(
                f"parent must be a PropertyStore, not {type(other).__name__}"
            )
        with self._lock:
            self._check_frozen(
                'This store has been frozen. You cannot change the parent anymore.'
            )
            for node in other._chain():
                if node is self:
                    logger.warning(
                        "%s: refusing parent that would create a delegation cycle",
                        type(self).__name__,
                    )
                    raise CyclicDelegationError(
                        'This parent would make the store delegate to itself.',
                        code=self._error_code(),
                    )
            self._parent = other

    def set(self, name: str, value: Any) -> Any:
        """Set a value and clear any tombstone for name.

        Args:
            name: Property name.
            value: Any value, stored as is.

        Returns:
            The store for fluent chaining, or the error value produced by
            _stop() if the store is frozen.

        Raises:
            FrozenStoreError: If frozen and no error strategy is available.

        Example:
            >>> store.set('first_name', 'John').set('last_name', 'Doe')
        """
        return self._guarded(self._set, name, value)

    def import_(self, source: Any) -> Any:
        """Copy every field of a mapping or record into the own properties.

        Colliding names are overwritten. Tombstones are left untouched, so a
        name deleted earlier stays in deleted_names() even though import_()
        gives it a value again (set() would clear it).

        Args:
            source: A mapping, another PropertyStore (its own properties),
                a named tuple, a dataclass instance or a plain object.

        Returns:
            The store, or the error value produced by _stop().

        Raises:
            FrozenStoreError: If frozen and no error strategy is available.
            InvalidImportSourceError: If source has an unsupported shape and
                no error strategy is available.
        """
        return self._guarded(self._import, source)

    def delete(self, name: str) -> Any:
        """Remove name and record a tombstone for it.

        Further calls to has() and get() will not look for name in the
        parent chain. Deleting an absent name is allowed and still records
        the tombstone.

        Returns:
            The store, or the error value produced by _stop().

        Raises:
            FrozenStoreError: If frozen and no error strategy is available.
        """
        return self._guarded(self._delete, name)

    def set_parent(self, other: PropertyStore) -> Any:
        """Set the store whose properties this one inherits.

        The parent is not owned: it may be shared by several children.

        Returns:
            The store, or the error value produced by _stop().

        Raises:
            TypeError: If other is not a PropertyStore.
            FrozenStoreError: If frozen and no error strategy is available.
            CyclicDelegationError: If other already delegates (directly or
                not) to this store and no error strategy is available.
        """
        return self._guarded(self._set_parent, other)

    def freeze(self) -> PropertyStore:
        """Lock write access to this store. Forever.

        Idempotent, never fails.
        """
        with self._lock:
            if not self._frozen:
                logger.debug("%s frozen with %d properties", type(self).__name__, len(self._properties))
            self._frozen = True
        return self

    def is_frozen(self) -> bool:
        """True if freeze() has been called."""
        return self._frozen

    # ==================== Resolution ====================

    def _chain(self) -> Iterator[PropertyStore]:
        """Yield this store and its ancestors, nearest first.

        Parent references are read without taking locks; a reference
        swap is atomic, and each node is locked only while it is read.

        Raises:
            CyclicDelegationError: If a store appears twice in the chain.
        """
        seen: set[int] = set()
        node: PropertyStore | None = self
        while node is not None:
            if id(node) in seen:
                raise CyclicDelegationError(
                    'Delegation chain loops back on itself.',
                    code=self._error_code(),
                )
            seen.add(id(node))
            yield node
            node = node._parent

    def get(self, name: str, default: Any = None) -> Any:
        """Get a value, possibly inherited from the parent chain.

        Args:
            name: Property name.
            default: Returned when name resolves to nothing, either because
                no store defines it or because it was deleted before any
                store defining it is reached.

        Returns:
            The resolved value or default. A stored None is returned as None.

        Example:
            >>> child.get('last_name')          # from the parent
            >>> child.get('missing', 'n/a')     # 'n/a'
        """
        for node in self._chain():
            with node._lock:
                if name in node._properties:
                    return node._properties[name]
                if name in node._deleted:
                    return default
        return default

    def has(self, name: str) -> bool:
        """Check if name resolves to a value in this store or its parents."""
        for node in self._chain():
            with node._lock:
                if name in node._properties:
                    return True
                if name in node._deleted:
                    return False
        return False

    def get_all(self, include_parent: bool = False) -> dict[str, Any]:
        """Get all properties as a new dict.

        Args:
            include_parent: If False (default), only own properties.
                If True, the parent's resolved view overlaid with own
                properties, minus every name deleted in this store. The
                rule applies recursively up the chain.

        Returns:
            Shallow copy; changing it does not affect the store.

        Example:
            >>> parent.set('a', 1)
            >>> child.set_parent(parent).set('b', 2).delete('a')
            >>> child.get_all(include_parent=True)
            {'b': 2}
        """
        if not include_parent:
            with self._lock:
                return dict(self._properties)

        layers: list[tuple[dict[str, Any], frozenset[str]]] = []
        for node in self._chain():
            with node._lock:
                layers.append((dict(node._properties), frozenset(node._deleted)))

        result: dict[str, Any] = {}
        for properties, deleted in reversed(layers):
            result.update(properties)
            for name in deleted:
                result.pop(name, None)
        return result

    def deleted_names(self) -> frozenset[str]:
        """Return the names tombstoned in this store (not its parents)."""
        with self._lock:
            return frozenset(self._deleted)

    # ==================== Navigation ====================

    @property
    def parent(self) -> PropertyStore | None:
        """The store this one delegates to, or None."""
        return self._parent

    def has_parent(self) -> bool:
        """True if a parent store is set."""
        return self._parent is not None
