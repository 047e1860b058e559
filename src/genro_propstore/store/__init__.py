# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""PropertyStore package - Hierarchical, freezable property container.

The package is organized into:
- core: Main PropertyStore class with mutation guard, resolution and sugar
- sources: Functions normalizing import_() sources (mappings and records)

Example:
    >>> from genro_propstore import PropertyStore
    >>> store = PropertyStore()
    >>> store.set('name', 'MyApp')['name']
    'MyApp'
"""

from .core import PropertyStore

__all__ = ["PropertyStore"]
