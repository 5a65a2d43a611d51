"""
InstaFilter - Main Entry Point

Applies one filter to a photo from the command line.

Usage:
    instafilter photo.jpg --filter vignette --intensity 0.8 -o out.png
    instafilter --list-filters
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from instafilter.config import load_settings
from instafilter.core.engine import FilterEngine
from instafilter.core.execution import ExecutionContext
from instafilter.core.errors import InstaFilterError, PersistFailure
from instafilter.core.parameters import ParameterName
from instafilter.core.session import FilterSession
from instafilter.filters.catalog import get_catalog
from instafilter.output.sinks import FileImageWriter, FixedPathWriter, OutputSink


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="instafilter",
        description="Apply a photo filter and save the result.",
    )
    parser.add_argument("input", nargs="?", type=Path, help="Photo to filter")
    parser.add_argument("-f", "--filter", dest="filter_name", help="Filter name, e.g. 'gaussian-blur'")
    parser.add_argument("--intensity", type=float, help="Intensity (0-1)")
    parser.add_argument("--radius", type=float, help="Radius (1-360)")
    parser.add_argument("--scale", type=float, help="Scale (1-20)")
    parser.add_argument("-o", "--output", type=Path, help="Output file (default: configured output directory)")
    parser.add_argument("--config", type=Path, help="Settings file")
    parser.add_argument("--list-filters", action="store_true", help="List filters and exit")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    return parser


def list_filters() -> None:
    for description in get_catalog().describe_all():
        params = ", ".join(p.label for p in description.parameters) or "-"
        print(f"{description.kind.slug:<22} {description.title:<22} {params}")


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for InstaFilter.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    level = ("WARNING", "INFO", "DEBUG")[min(args.verbose, 2)] if args.verbose else settings.log_level
    logging.basicConfig(level=level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.list_filters:
        list_filters()
        return 0

    if args.input is None:
        parser.error("an input photo is required")

    catalog = get_catalog()
    try:
        kind = catalog.kind_from_name(args.filter_name or settings.default_filter)
    except InstaFilterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.output:
        writer = FixedPathWriter(args.output)
    else:
        writer = FileImageWriter(settings.output_path, settings.image_format)

    parameters = settings.parameter_defaults()
    for name, value in (
        (ParameterName.INTENSITY, args.intensity),
        (ParameterName.RADIUS, args.radius),
        (ParameterName.SCALE, args.scale),
    ):
        if value is not None:
            parameters[name] = value

    engine = FilterEngine(ExecutionContext(cache_size=settings.cache_size))
    with OutputSink(writer, thumbnail_size=settings.thumbnail_size) as sink:
        try:
            session = FilterSession(engine, sink, kind=kind, parameters=parameters)
            result = session.load_image(args.input)
        except (OSError, ValueError) as e:
            print(f"Error: cannot load {args.input}: {e}", file=sys.stderr)
            return 1

        if result is None:
            print(f"Error: {session.last_error}", file=sys.stderr)
            return 1

        visible = ", ".join(
            f"{name.label}={result.applied[name]}" for name in session.visible_parameters
        )
        print(f"{kind.title}: {visible or 'no parameters'}")

        failures: list[PersistFailure] = []
        saved = session.save(on_success=lambda p: print(f"Saved {p}"), on_failure=failures.append)
        saved.result()

    if failures:
        print(f"Error: could not save image: {failures[0].cause}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
