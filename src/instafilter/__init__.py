"""
InstaFilter - Parametrized photo filter engine.

Pick a photo, pick a filter, tune Intensity/Radius/Scale, save.
"""

from instafilter.core import (
    ExecutionContext,
    ImageData,
    InstaFilterError,
    NoInputBoundError,
    ParameterName,
    PersistFailure,
    RenderUnavailableError,
    UnsupportedKindError,
)
from instafilter.filters import FilterCatalog, FilterKind, get_catalog
from instafilter.core.instance import FilterInstance
from instafilter.core.engine import FilterEngine, RenderResult
from instafilter.output import FileImageWriter, OutputSink
from instafilter.core.session import FilterSession

__version__ = "0.1.0"

__all__ = [
    "ExecutionContext",
    "FileImageWriter",
    "FilterCatalog",
    "FilterEngine",
    "FilterInstance",
    "FilterKind",
    "FilterSession",
    "ImageData",
    "InstaFilterError",
    "NoInputBoundError",
    "OutputSink",
    "ParameterName",
    "PersistFailure",
    "RenderResult",
    "RenderUnavailableError",
    "UnsupportedKindError",
    "get_catalog",
]
