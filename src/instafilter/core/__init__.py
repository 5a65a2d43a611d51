"""
Core module - Image data, parameters, execution and the filter engine.

Leaf modules are re-exported here. The engine, instance and session
modules import the filter catalog, so import them from their own modules:
- instafilter.core.instance: FilterInstance
- instafilter.core.engine: FilterEngine, RenderResult
- instafilter.core.session: FilterSession
"""

from instafilter.core.data_types import (
    ImageData,
    ImageMetadata,
)

from instafilter.core.errors import (
    ConfigError,
    FilterInputError,
    InstaFilterError,
    NoInputBoundError,
    PersistFailure,
    RenderUnavailableError,
    UnsupportedKindError,
)

from instafilter.core.execution import ExecutionContext

from instafilter.core.parameters import (
    ParameterName,
    ParameterSpec,
    default_values,
)


__all__ = [
    # data_types.py
    "ImageData",
    "ImageMetadata",
    # errors.py
    "ConfigError",
    "FilterInputError",
    "InstaFilterError",
    "NoInputBoundError",
    "PersistFailure",
    "RenderUnavailableError",
    "UnsupportedKindError",
    # execution.py
    "ExecutionContext",
    # parameters.py
    "ParameterName",
    "ParameterSpec",
    "default_values",
]
