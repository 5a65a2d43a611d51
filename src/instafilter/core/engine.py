"""
Filter Engine - Applies a FilterInstance to its bound image.

One render pass:
1. Derive the applicable parameter set from the instance's filter
2. Push the image and each applicable value (coerced) into the filter
3. Pull the filter's output image
4. Rasterize it through the execution context into a RenderResult
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from instafilter.core.data_types import ImageData
from instafilter.core.errors import (
    FilterInputError,
    NoInputBoundError,
    RenderUnavailableError,
)
from instafilter.core.execution import ExecutionContext
from instafilter.core.instance import FilterInstance
from instafilter.core.parameters import INPUT_IMAGE_KEY, ParameterName
from instafilter.filters.catalog import FilterKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """
    The materialized output of one filter execution.

    Attributes:
        image: Finished output image
        kind: Filter kind that produced it
        applicable: Parameters the filter honored (slider visibility)
        applied: Coerced values that were pushed into the filter
    """
    image: ImageData
    kind: FilterKind
    applicable: frozenset[ParameterName]
    applied: dict[ParameterName, float | int]

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


class FilterEngine:
    """
    Executes filter instances against their bound images.

    The engine owns an ExecutionContext and passes it to every render.
    A failed render leaves `last_result` untouched.
    """

    def __init__(self, context: ExecutionContext | None = None):
        self.context = context or ExecutionContext()
        self._last_result: RenderResult | None = None

    @property
    def last_result(self) -> RenderResult | None:
        """Most recent successful render, if any."""
        return self._last_result

    def render(
        self,
        instance: FilterInstance,
        context: ExecutionContext | None = None,
    ) -> RenderResult:
        """
        Run the instance's filter on its bound image.

        Args:
            instance: Filter binding to execute
            context: Override for the engine's execution context

        Returns:
            RenderResult with the output image and applicable parameters

        Raises:
            NoInputBoundError: No image is bound to the instance
            RenderUnavailableError: The filter produced no output for the
                current values
        """
        context = context or self.context
        image = instance.image
        if image is None:
            raise NoInputBoundError()

        applicable = instance.applicable_parameters()
        handle = instance.handle
        applied: dict[ParameterName, float | int] = {}

        try:
            handle.set_value(INPUT_IMAGE_KEY, image)
            for name in ParameterName:
                if name in applicable:
                    value = name.coerce(instance.parameter(name))
                    handle.set_value(name.key, value)
                    applied[name] = value
        except FilterInputError as e:
            raise RenderUnavailableError(str(e), kind=instance.kind, applied=applied) from e

        cache_key = self._cache_key(instance.kind, instance.fingerprint, applied)
        cached = context.cache_get(cache_key)
        if cached is not None:
            logger.debug(f"Render cache hit for {instance.kind.title}")
            self._last_result = cached
            return cached

        logger.debug(f"Rendering {instance.kind.title} with {self._format(applied)}")
        try:
            output = handle.output_image
        except FilterInputError as e:
            raise RenderUnavailableError(str(e), kind=instance.kind, applied=applied) from e

        if output is None:
            logger.warning(f"{instance.kind.title} produced no output for {self._format(applied)}")
            raise RenderUnavailableError(
                f"{instance.kind.title} produced no output for {self._format(applied)}",
                kind=instance.kind,
                applied=applied,
            )

        finished = context.rasterize(output, size=image.size)
        finished.metadata.filter_kind = instance.kind.name
        finished.metadata.parameters = {name.label: value for name, value in applied.items()}

        result = RenderResult(
            image=finished,
            kind=instance.kind,
            applicable=applicable,
            applied=applied,
        )
        context.cache_set(cache_key, result)
        self._last_result = result
        return result

    def clear_cache(self) -> None:
        self.context.clear_cache()

    @staticmethod
    def _cache_key(
        kind: FilterKind,
        fingerprint: str | None,
        applied: dict[ParameterName, float | int],
    ) -> tuple:
        values = tuple((name.name, value) for name, value in applied.items())
        return (kind.name, fingerprint, values)

    @staticmethod
    def _format(applied: dict[ParameterName, float | int]) -> str:
        if not applied:
            return "no parameters"
        return ", ".join(f"{name.label}={value}" for name, value in applied.items())
