"""
Tests for FilterInstance.
"""

import pytest
import numpy as np

from instafilter.core.data_types import ImageData
from instafilter.core.instance import FilterInstance
from instafilter.core.parameters import INPUT_IMAGE_KEY, ParameterName
from instafilter.filters.catalog import FilterKind


class TestParameters:
    """Tests for storing parameter values."""

    def test_defaults(self):
        instance = FilterInstance(FilterKind.SEPIA_TONE)
        assert instance.parameters == {
            ParameterName.INTENSITY: 0.5,
            ParameterName.RADIUS: 100.0,
            ParameterName.SCALE: 10.0,
        }

    def test_initial_values(self):
        instance = FilterInstance(FilterKind.BLOOM, parameters={ParameterName.RADIUS: 7})
        assert instance.parameter(ParameterName.RADIUS) == 7.0
        assert instance.parameter(ParameterName.SCALE) == 10.0

    def test_unhonored_parameter_is_retained(self):
        instance = FilterInstance(FilterKind.SEPIA_TONE)
        instance.set_parameter(ParameterName.SCALE, 3.5)
        assert ParameterName.SCALE not in instance.applicable_parameters()
        assert instance.parameter(ParameterName.SCALE) == 3.5

    def test_set_by_name(self):
        instance = FilterInstance(FilterKind.GAUSSIAN_BLUR)
        instance.set_parameter("radius", 12)
        assert instance.parameter("Radius") == 12.0

    def test_unknown_parameter(self):
        instance = FilterInstance(FilterKind.GAUSSIAN_BLUR)
        with pytest.raises(KeyError):
            instance.set_parameter("contrast", 1.0)

    def test_non_finite_rejected(self):
        instance = FilterInstance(FilterKind.GAUSSIAN_BLUR)
        with pytest.raises(ValueError):
            instance.set_parameter(ParameterName.RADIUS, float("inf"))
        assert instance.parameter(ParameterName.RADIUS) == 100.0

    def test_parameters_is_a_copy(self):
        instance = FilterInstance(FilterKind.GAUSSIAN_BLUR)
        instance.parameters[ParameterName.RADIUS] = 1.0
        assert instance.parameter(ParameterName.RADIUS) == 100.0


class TestApplicableParameters:
    """Tests for the derived applicable parameter set."""

    @pytest.mark.parametrize("kind", list(FilterKind))
    def test_subset_and_stable(self, kind):
        instance = FilterInstance(kind)
        first = instance.applicable_parameters()
        assert first <= set(ParameterName)
        assert instance.applicable_parameters() == first
        assert instance.applicable_parameters() == first

    def test_follows_handle_keys(self):
        assert FilterInstance(FilterKind.PIXELLATE).applicable_parameters() == {ParameterName.SCALE}
        assert FilterInstance(FilterKind.AREA_AVERAGE).applicable_parameters() == frozenset()


class TestBinding:
    """Tests for binding input images."""

    def test_unbound_by_default(self):
        instance = FilterInstance(FilterKind.EDGES)
        assert instance.image is None
        assert not instance.is_bound

    def test_bind_converts_sources(self):
        instance = FilterInstance(FilterKind.EDGES)
        instance.bind(np.zeros((3, 5, 3), dtype=np.uint8))
        assert isinstance(instance.image, ImageData)
        assert instance.image.size == (5, 3)

    def test_bind_replaces(self, gray_image):
        instance = FilterInstance(FilterKind.EDGES, image=ImageData.solid(2, 2))
        instance.bind(gray_image)
        assert instance.image is gray_image

    def test_bind_does_not_execute(self, gray_image):
        instance = FilterInstance(FilterKind.EDGES)
        instance.bind(gray_image)
        assert instance.handle.value(INPUT_IMAGE_KEY) is None


class TestWithKind:
    """Tests for switching filter kinds."""

    def test_returns_new_instance(self):
        instance = FilterInstance(FilterKind.SEPIA_TONE)
        switched = instance.with_kind(FilterKind.VIGNETTE)
        assert switched is not instance
        assert switched.kind is FilterKind.VIGNETTE
        assert instance.kind is FilterKind.SEPIA_TONE
        assert switched.handle is not instance.handle

    def test_preserves_values_and_image(self, gray_image):
        instance = FilterInstance(FilterKind.SEPIA_TONE, image=gray_image)
        instance.set_parameter(ParameterName.INTENSITY, 0.8)
        instance.set_parameter(ParameterName.SCALE, 4.0)

        switched = instance.with_kind(FilterKind.VIGNETTE)

        assert switched.parameter(ParameterName.INTENSITY) == 0.8
        assert switched.parameter(ParameterName.SCALE) == 4.0
        assert switched.image is gray_image

    def test_rederives_applicable(self):
        instance = FilterInstance(FilterKind.SEPIA_TONE)
        switched = instance.with_kind(FilterKind.VIGNETTE)
        assert instance.applicable_parameters() == {ParameterName.INTENSITY}
        assert switched.applicable_parameters() == {ParameterName.INTENSITY, ParameterName.RADIUS}
