"""
Parameters - The closed set of tunable filter inputs.

Every filter kind honors some subset of Intensity, Radius and Scale.
ParameterName carries the handle input key, the default value, the
slider range and the coercion rule for each of them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

# Input keys understood by filter handles
INPUT_IMAGE_KEY = "inputImage"
INPUT_INTENSITY_KEY = "inputIntensity"
INPUT_RADIUS_KEY = "inputRadius"
INPUT_SCALE_KEY = "inputScale"
INPUT_CENTER_KEY = "inputCenter"
INPUT_EXTENT_KEY = "inputExtent"


@dataclass(frozen=True)
class ParameterSpec:
    """
    Definition of a tunable parameter.

    Attributes:
        key: Handle input key the value is pushed into
        label: Display label for the slider
        default: Initial value
        min_value: Lower slider bound
        max_value: Upper slider bound
        integral: If True, values are truncated to int before use
    """
    key: str
    label: str
    default: float
    min_value: float
    max_value: float
    integral: bool = False


class ParameterName(Enum):
    """Named numeric inputs a filter kind may or may not honor."""
    INTENSITY = ParameterSpec(INPUT_INTENSITY_KEY, "Intensity", 0.5, 0.0, 1.0)
    # Radius and Scale are truncated to integers before reaching the filter.
    # Kept for compatibility with the original app; see DESIGN.md.
    RADIUS = ParameterSpec(INPUT_RADIUS_KEY, "Radius", 100.0, 1.0, 360.0, integral=True)
    SCALE = ParameterSpec(INPUT_SCALE_KEY, "Scale", 10.0, 1.0, 20.0, integral=True)

    @property
    def key(self) -> str:
        return self.value.key

    @property
    def label(self) -> str:
        return self.value.label

    @property
    def default(self) -> float:
        return self.value.default

    @property
    def range(self) -> tuple[float, float]:
        """Slider range as (min, max)."""
        return (self.value.min_value, self.value.max_value)

    def coerce(self, value: float) -> float | int:
        """Convert a stored value to the numeric type the filter expects."""
        if self.value.integral:
            return int(value)
        return float(value)

    @classmethod
    def from_key(cls, key: str) -> ParameterName | None:
        """Look up the parameter pushed into a handle input key."""
        for name in cls:
            if name.key == key:
                return name
        return None

    @classmethod
    def parse(cls, name: str | ParameterName) -> ParameterName:
        """
        Resolve a parameter from its enum name, label or input key.

        Raises:
            KeyError: If the name is not one of the recognized parameters
        """
        if isinstance(name, ParameterName):
            return name
        text = str(name).strip().lower()
        for member in cls:
            if text in (member.name.lower(), member.label.lower(), member.key.lower()):
                return member
        raise KeyError(f"Unknown parameter: {name!r}")


def default_values() -> dict[ParameterName, float]:
    """Initial value for every parameter."""
    return {name: name.default for name in ParameterName}


def check_finite(name: ParameterName, value: float) -> float:
    """Reject NaN and infinite slider values."""
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name.label} must be a finite number, got {value}")
    return value
