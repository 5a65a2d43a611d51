"""
Output module - Preview and persistence of finished renders.
"""

from instafilter.output.sinks import (
    FileImageWriter,
    FixedPathWriter,
    ImageWriter,
    OutputSink,
)

__all__ = [
    "FileImageWriter",
    "FixedPathWriter",
    "ImageWriter",
    "OutputSink",
]
