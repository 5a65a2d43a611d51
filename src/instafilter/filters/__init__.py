"""
Filters module - Filter catalog and the handles that implement each kind.
"""

from instafilter.filters.handles import FilterHandle
from instafilter.filters.catalog import (
    FilterCatalog,
    FilterDescription,
    FilterKind,
    get_catalog,
)

__all__ = [
    "FilterHandle",
    "FilterCatalog",
    "FilterDescription",
    "FilterKind",
    "get_catalog",
]
