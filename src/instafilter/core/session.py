"""
Filter Session - The photo editing flow, independent of any UI toolkit.

A session holds the loaded photo, the chosen filter and the slider values.
Every change triggers exactly one render. Failed renders keep the last
good image on display.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any

from instafilter.core.data_types import ImageData
from instafilter.core.engine import FilterEngine, RenderResult
from instafilter.core.errors import InstaFilterError, PersistFailure
from instafilter.core.instance import FilterInstance
from instafilter.core.parameters import ParameterName
from instafilter.filters.catalog import FilterCatalog, FilterKind, get_catalog
from instafilter.output.sinks import FailureCallback, OutputSink, SuccessCallback

logger = logging.getLogger(__name__)


class FilterSession:
    """
    Controller behind a photo filter screen.

    Usage:
        session = FilterSession(engine, sink)
        session.load_image(photo)
        session.select_filter(FilterKind.VIGNETTE)
        session.set_intensity(0.8)
        session.save()
    """

    def __init__(
        self,
        engine: FilterEngine | None = None,
        sink: OutputSink | None = None,
        kind: FilterKind = FilterKind.SEPIA_TONE,
        parameters: dict[ParameterName, float] | None = None,
        catalog: FilterCatalog | None = None,
    ):
        self.engine = engine or FilterEngine()
        self.sink = sink or OutputSink()
        self.catalog = catalog or get_catalog()
        self._instance = FilterInstance(kind, parameters=parameters, catalog=self.catalog)
        self._result: RenderResult | None = None
        self.last_error: InstaFilterError | None = None

    @property
    def instance(self) -> FilterInstance:
        return self._instance

    @property
    def kind(self) -> FilterKind:
        return self._instance.kind

    @property
    def result(self) -> RenderResult | None:
        """Last successful render shown by this session."""
        return self._result

    @property
    def display_image(self) -> ImageData | None:
        return self._result.image if self._result else None

    @property
    def visible_parameters(self) -> list[ParameterName]:
        """Sliders to show for the current filter, in display order."""
        applicable = self._instance.applicable_parameters()
        return [name for name in ParameterName if name in applicable]

    @property
    def can_save(self) -> bool:
        return self._instance.is_bound

    # -------------------------------------------------------------------------
    # User events
    # -------------------------------------------------------------------------

    def load_image(self, image: Any) -> RenderResult | None:
        """Bind a picked photo and render it with the current filter."""
        self._instance.bind(image)
        return self.apply()

    def select_filter(self, kind: FilterKind | str) -> RenderResult | None:
        """Switch filters; slider values carry over to the new kind."""
        if not isinstance(kind, FilterKind):
            kind = self.catalog.kind_from_name(kind)
        self._instance = self._instance.with_kind(kind)
        if not self._instance.is_bound:
            return None
        return self.apply()

    def set_parameter(self, name: ParameterName | str, value: float) -> RenderResult | None:
        self._instance.set_parameter(name, value)
        if not self._instance.is_bound:
            return None
        return self.apply()

    def set_intensity(self, value: float) -> RenderResult | None:
        return self.set_parameter(ParameterName.INTENSITY, value)

    def set_radius(self, value: float) -> RenderResult | None:
        return self.set_parameter(ParameterName.RADIUS, value)

    def set_scale(self, value: float) -> RenderResult | None:
        return self.set_parameter(ParameterName.SCALE, value)

    def apply(self) -> RenderResult | None:
        """
        Render the current filter.

        Returns the new result, or None if the filter declined to render;
        in that case the previous image stays on display and the error is
        kept in `last_error`.
        """
        try:
            result = self.engine.render(self._instance)
        except InstaFilterError as e:
            logger.warning(f"Render failed: {e}")
            self.last_error = e
            return None

        self.last_error = None
        self._result = result
        self.sink.preview(result)
        return result

    def save(
        self,
        on_success: SuccessCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> Future | None:
        """
        Persist the displayed image in the background.

        Returns None when there is nothing to save yet.
        """
        if self._result is None:
            logger.warning("Nothing to save: no image has been rendered")
            return None
        return self.sink.persist(
            self._result,
            on_success=on_success or self._report_saved,
            on_failure=on_failure or self._report_failure,
        )

    @staticmethod
    def _report_saved(path) -> None:
        logger.info(f"Saved {path}")

    @staticmethod
    def _report_failure(failure: PersistFailure) -> None:
        logger.error(f"Save failed: {failure.cause}")
