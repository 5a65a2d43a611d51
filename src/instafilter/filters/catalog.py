"""
Filter Catalog - The fixed set of supported filter kinds.

This module defines FilterKind (the closed enumeration offered in the
filter menu), FilterDescription (what a menu needs to show for a kind),
and FilterCatalog, which constructs the handle behind each kind.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from instafilter.core.errors import UnsupportedKindError
from instafilter.core.parameters import ParameterName
from instafilter.filters.handles import (
    AreaAverageHandle,
    BloomHandle,
    CrystallizeHandle,
    EdgesHandle,
    FilterHandle,
    GaussianBlurHandle,
    MorphologyGradientHandle,
    PixellateHandle,
    SepiaToneHandle,
    UnsharpMaskHandle,
    VignetteHandle,
)


class FilterKind(Enum):
    """Supported filters, in menu order. Values are display titles."""
    AREA_AVERAGE = "Area Average"
    BLOOM = "Bloom"
    CRYSTALLIZE = "Crystallize"
    EDGES = "Edges"
    GAUSSIAN_BLUR = "Gaussian Blur"
    MORPHOLOGY_GRADIENT = "Morphology Gradient"
    PIXELLATE = "Pixellate"
    SEPIA_TONE = "Sepia Tone"
    UNSHARP_MASK = "Unsharp Mask"
    VIGNETTE = "Vignette"

    @property
    def title(self) -> str:
        return self.value

    @property
    def slug(self) -> str:
        """Command-line friendly name, e.g. "gaussian-blur"."""
        return self.name.lower().replace("_", "-")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FilterDescription:
    """
    What a selection menu shows for a filter kind.

    Attributes:
        kind: The filter kind
        title: Display name
        parameters: Parameters the kind's filter declares, in slider order
    """
    kind: FilterKind
    title: str
    parameters: tuple[ParameterName, ...]


_HANDLES: dict[FilterKind, type[FilterHandle]] = {
    FilterKind.AREA_AVERAGE: AreaAverageHandle,
    FilterKind.BLOOM: BloomHandle,
    FilterKind.CRYSTALLIZE: CrystallizeHandle,
    FilterKind.EDGES: EdgesHandle,
    FilterKind.GAUSSIAN_BLUR: GaussianBlurHandle,
    FilterKind.MORPHOLOGY_GRADIENT: MorphologyGradientHandle,
    FilterKind.PIXELLATE: PixellateHandle,
    FilterKind.SEPIA_TONE: SepiaToneHandle,
    FilterKind.UNSHARP_MASK: UnsharpMaskHandle,
    FilterKind.VIGNETTE: VignetteHandle,
}


def _normalize(text: str) -> str:
    return re.sub(r"[\s_\-]+", "", text).lower()


class FilterCatalog:
    """
    Catalog of filter kinds and the handles that implement them.

    Usage:
        catalog = get_catalog()
        for kind in catalog.list_kinds():
            handle = catalog.instantiate(kind)
    """

    def __init__(self, handles: dict[FilterKind, type[FilterHandle]] | None = None):
        self._handles = dict(_HANDLES if handles is None else handles)

    def list_kinds(self) -> list[FilterKind]:
        """All supported kinds in stable menu order."""
        return [kind for kind in FilterKind if kind in self._handles]

    def instantiate(self, kind: Any) -> FilterHandle:
        """
        Construct a fresh filter handle for a kind.

        Raises:
            UnsupportedKindError: If kind is not a supported FilterKind
        """
        if not isinstance(kind, FilterKind) or kind not in self._handles:
            raise UnsupportedKindError(f"Unsupported filter kind: {kind!r}")
        return self._handles[kind]()

    def kind_from_name(self, text: str) -> FilterKind:
        """
        Parse a kind from its enum name, title or slug.

        "GaussianBlur", "Gaussian Blur", "gaussian-blur" and
        "GAUSSIAN_BLUR" all resolve to FilterKind.GAUSSIAN_BLUR.
        """
        wanted = _normalize(str(text))
        for kind in self.list_kinds():
            if wanted in (_normalize(kind.name), _normalize(kind.title)):
                return kind
        raise UnsupportedKindError(f"Unknown filter: {text!r}")

    def describe(self, kind: FilterKind) -> FilterDescription:
        """Title and declared parameters for a kind."""
        keys = set(self.instantiate(kind).input_keys)
        params = tuple(name for name in ParameterName if name.key in keys)
        return FilterDescription(kind=kind, title=kind.title, parameters=params)

    def describe_all(self) -> list[FilterDescription]:
        return [self.describe(kind) for kind in self.list_kinds()]


_catalog: FilterCatalog | None = None


def get_catalog() -> FilterCatalog:
    """Get the default filter catalog."""
    global _catalog
    if _catalog is None:
        _catalog = FilterCatalog()
    return _catalog
