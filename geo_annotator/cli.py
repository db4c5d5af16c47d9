"""Command line access to a file-backed marker set."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence, TextIO

from .config import APP_CONFIG, STORAGE_CONFIG
from .context import AnnotationContext
from .core import AnnotationError, GeoPoint, ValidationError, validate_coordinates
from .services import EXPORT_FORMATS, MeasurementEngine
from .utils import format_area, format_coordinate, format_distance

LOGGER = logging.getLogger(__name__)


def _parse_point(value: str) -> GeoPoint:
    try:
        lat_str, lng_str = value.split(",", 1)
        point = GeoPoint(lat=float(lat_str), lng=float(lng_str))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected LAT,LNG but got {value!r}") from exc
    try:
        validate_coordinates(point.lat, point.lng)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return point


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage geographic annotations stored on disk.")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=STORAGE_CONFIG.directory,
        help=f"Directory holding the marker store (default: {STORAGE_CONFIG.directory})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="Print the stored markers in order.")

    import_cmd = subparsers.add_parser("import", help="Import markers from a .json, .csv or .kml file.")
    import_cmd.add_argument("input", type=Path, help="File to import")

    export_cmd = subparsers.add_parser("export", help="Export the stored markers.")
    export_cmd.add_argument("format", choices=sorted(EXPORT_FORMATS), help="Output format")
    export_cmd.add_argument(
        "--output",
        type=Path,
        help="Optional output path (defaults to standard output)",
    )

    subparsers.add_parser("clear", help="Remove every stored marker.")

    measure = subparsers.add_parser("measure", help="Measure the path through the given points.")
    measure.add_argument("points", nargs="+", type=_parse_point, help="Vertices as LAT,LNG")

    geocode = subparsers.add_parser("geocode", help="Look up coordinates for a place name.")
    geocode.add_argument("query", help="Free text query")

    return parser


def _print_markers(context: AnnotationContext, stream: TextIO) -> None:
    for position, marker in enumerate(context.markers(), start=1):
        stream.write(
            f"{position:>3}. {marker.icon} {marker.title} "
            f"({format_coordinate(marker.lat)}, {format_coordinate(marker.lng)})"
        )
        if marker.description:
            stream.write(f" - {marker.description}")
        stream.write("\n")


def _measure(points: Sequence[GeoPoint], stream: TextIO) -> None:
    engine = MeasurementEngine()
    engine.activate()
    for point in points:
        engine.add_point(point.lat, point.lng)
    stream.write(f"Distance: {format_distance(engine.total_distance())}\n")
    stream.write(f"Area: {format_area(engine.enclosed_area())}\n")


def main(argv: Optional[Iterable[str]] = None, *, stream: TextIO | None = None) -> int:
    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    stream = stream or sys.stdout

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    if args.command == "measure":
        _measure(args.points, stream)
        return 0

    context = AnnotationContext.for_directory(args.data_dir).bootstrap(
        seed_defaults=APP_CONFIG.seed_default_markers
    )

    try:
        if args.command == "list":
            _print_markers(context, stream)
        elif args.command == "import":
            ids = context.importer.import_file(args.input)
            LOGGER.info("Imported %s marker(s); %s stored", len(ids), len(context.store))
        elif args.command == "export":
            if args.output:
                context.exporter.write(context.markers(), args.format, args.output)
                LOGGER.info("Wrote %s marker(s) to %s", len(context.store), args.output)
            else:
                stream.write(context.export(args.format))
                stream.write("\n")
        elif args.command == "clear":
            context.store.clear()
            LOGGER.info("Cleared marker store")
        elif args.command == "geocode":
            result = context.geocoder.search(args.query)
            if result is None:
                LOGGER.error("No results for %r", args.query)
                return 1
            stream.write(
                f"{result.display_name}\n{format_coordinate(result.lat)}, {format_coordinate(result.lon)}\n"
            )
        else:
            parser.error("Unknown command")
    except AnnotationError as error:
        LOGGER.error("%s", error)
        return 1
    except OSError as error:
        LOGGER.error("Geocoding service unavailable: %s", error)
        return 1

    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
