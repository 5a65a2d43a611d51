"""
Filter Instance - One filter kind bound to parameter values and an image.

A FilterInstance is created when a kind is picked, mutated when a slider
moves or a new photo is loaded, and replaced (via with_kind) when the
user switches to another kind.
"""

from __future__ import annotations

from typing import Any

from instafilter.core.data_types import ImageData
from instafilter.core.parameters import ParameterName, check_finite, default_values
from instafilter.filters.catalog import FilterCatalog, FilterKind, get_catalog
from instafilter.filters.handles import FilterHandle


class FilterInstance:
    """
    Binding of a FilterKind to parameter values and an input image.

    Values for parameters the kind does not honor are kept, so a value
    set while a slider was hidden is still there after switching kinds.
    """

    def __init__(
        self,
        kind: FilterKind,
        parameters: dict[ParameterName, float] | None = None,
        image: ImageData | None = None,
        catalog: FilterCatalog | None = None,
    ):
        self._catalog = catalog or get_catalog()
        self._handle = self._catalog.instantiate(kind)
        self._kind = kind
        self._parameters = default_values()
        for name, value in (parameters or {}).items():
            self.set_parameter(name, value)
        self._image: ImageData | None = None
        self._fingerprint: str | None = None
        if image is not None:
            self.bind(image)

    def __repr__(self) -> str:
        values = ", ".join(f"{n.label}={v:g}" for n, v in self._parameters.items())
        return f"FilterInstance({self._kind.title}, {values}, bound={self.is_bound})"

    @property
    def kind(self) -> FilterKind:
        return self._kind

    @property
    def handle(self) -> FilterHandle:
        """The underlying filter object."""
        return self._handle

    @property
    def image(self) -> ImageData | None:
        return self._image

    @property
    def is_bound(self) -> bool:
        return self._image is not None

    @property
    def parameters(self) -> dict[ParameterName, float]:
        """Copy of all stored parameter values."""
        return dict(self._parameters)

    @property
    def fingerprint(self) -> str | None:
        """Digest of the bound image, computed once per bind."""
        return self._fingerprint

    def bind(self, image: Any) -> None:
        """
        Attach or replace the source image. Does not render.

        Rebind after editing the image's pixels in place so the render
        cache sees the new contents.
        """
        self._image = ImageData.coerce(image)
        self._fingerprint = self._image.fingerprint()

    def set_parameter(self, name: ParameterName | str, value: float) -> None:
        """Store a parameter value, whether or not this kind honors it."""
        name = ParameterName.parse(name)
        self._parameters[name] = check_finite(name, value)

    def parameter(self, name: ParameterName | str) -> float:
        return self._parameters[ParameterName.parse(name)]

    def applicable_parameters(self) -> frozenset[ParameterName]:
        """Parameters the underlying filter declares, queried fresh each call."""
        keys = set(self._handle.input_keys)
        return frozenset(name for name in ParameterName if name.key in keys)

    def with_kind(self, kind: FilterKind) -> FilterInstance:
        """New instance for another kind, keeping values and the bound image."""
        instance = FilterInstance(kind, parameters=self._parameters, catalog=self._catalog)
        instance._image = self._image
        instance._fingerprint = self._fingerprint
        return instance
