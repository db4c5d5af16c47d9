"""Parse JSON, CSV and KML marker files and load them into the store."""

from __future__ import annotations

import csv
import io
import json
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Mapping, Sequence

from ..core import MarkerDraft, ParseError, UnsupportedFormatError, ValidationError
from ..core.models import DEFAULT_ICON
from ..utils import decode_text, file_extension
from .exporter import CSV_HEADERS
from .marker_store import MarkerStore

LOGGER = logging.getLogger(__name__)

IMPORT_EXTENSIONS: tuple[str, ...] = ("json", "csv", "kml")


def detect_format(filename: str) -> str:
    """Return the import format implied by ``filename``'s extension."""

    extension = file_extension(filename)
    if extension not in IMPORT_EXTENSIONS:
        raise UnsupportedFormatError(
            f"Unsupported file format: {filename}",
            details={"extension": extension, "supported": list(IMPORT_EXTENSIONS)},
        )
    return extension


def _record_to_draft(record: Mapping[str, object], index: int) -> MarkerDraft:
    try:
        return MarkerDraft.from_mapping(record)
    except ValidationError as exc:
        details = {"record": index}
        details.update(exc.details)
        raise ParseError(f"Record {index}: {exc}", details=details) from exc


def parse_json(text: str) -> list[MarkerDraft]:
    """Parse a JSON array of marker objects.

    ``createdAt`` values are ignored; imported markers are stamped on insertion.
    """

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError("Invalid JSON document", details={"line": exc.lineno, "column": exc.colno}) from exc

    if not isinstance(data, list):
        raise ParseError("JSON import must contain an array of markers")

    drafts: list[MarkerDraft] = []
    for index, record in enumerate(data, start=1):
        if not isinstance(record, dict):
            raise ParseError(f"Record {index} is not an object", details={"record": index})
        drafts.append(_record_to_draft(record, index))
    return drafts


def parse_csv(text: str) -> list[MarkerDraft]:
    """Parse the ``Latitude,Longitude,Title,Description,Icon`` layout."""

    reader = csv.DictReader(io.StringIO(text, newline=""))
    headers = reader.fieldnames or []
    missing = [column for column in CSV_HEADERS[:2] if column not in headers]
    if missing:
        raise ParseError("CSV file is missing required columns", details={"missing": missing})

    drafts: list[MarkerDraft] = []
    for index, row in enumerate(reader, start=1):
        if not any(row.values()):
            continue
        record = {
            "lat": row.get("Latitude"),
            "lng": row.get("Longitude"),
            "title": row.get("Title"),
            "description": row.get("Description"),
            "icon": row.get("Icon"),
        }
        drafts.append(_record_to_draft(record, index))
    return drafts


def parse_kml(text: str) -> list[MarkerDraft]:
    """Parse point placemarks; coordinates are ``lng,lat[,alt]``."""

    try:
        root = ET.fromstring(text.encode("utf-8"))
    except ET.ParseError as exc:
        raise ParseError("Invalid KML document", details={"error": str(exc)}) from exc

    drafts: list[MarkerDraft] = []
    for index, node in enumerate(root.iterfind(".//{*}Placemark"), start=1):
        coordinates = _text(node, "./{*}Point/{*}coordinates")
        if not coordinates:
            raise ParseError(f"Placemark {index} has no point coordinates", details={"record": index})

        lng_str, lat_str, *_ = (coordinates.strip().split(",") + [""])[:3]
        record = {
            "lat": lat_str.strip(),
            "lng": lng_str.strip(),
            "title": _text(node, "./{*}name") or "",
            "description": _text(node, "./{*}description") or "",
            "icon": _extended_value(node, "icon") or DEFAULT_ICON,
        }
        drafts.append(_record_to_draft(record, index))
    return drafts


def _text(node: ET.Element, selector: str) -> str | None:
    found = node.find(selector)
    return (found.text or None) if found is not None else None


def _extended_value(node: ET.Element, name: str) -> str | None:
    for element in node.iterfind("./{*}ExtendedData/{*}Data"):
        if element.attrib.get("name") == name:
            return _text(element, "./{*}value")
    return None


PARSERS: dict[str, Callable[[str], list[MarkerDraft]]] = {
    "json": parse_json,
    "csv": parse_csv,
    "kml": parse_kml,
}


class MarkerImporter:
    """Load a whole file into a :class:`MarkerStore`, or nothing at all."""

    def __init__(self, store: MarkerStore, *, allowed_extensions: Sequence[str] = IMPORT_EXTENSIONS):
        self.store = store
        self.allowed_extensions = tuple(allowed_extensions)

    def parse(self, filename: str, content: str | bytes) -> list[MarkerDraft]:
        fmt = detect_format(filename)
        if fmt not in self.allowed_extensions:
            raise UnsupportedFormatError(
                f"Import of .{fmt} files is disabled",
                details={"supported": list(self.allowed_extensions)},
            )
        text = decode_text(content) if isinstance(content, bytes) else content
        return PARSERS[fmt](text)

    def import_text(self, filename: str, content: str | bytes) -> list[str]:
        """Parse ``content`` and add every marker; returns the new ids in file order."""

        drafts = self.parse(filename, content)
        ids = [self.store.add(draft) for draft in drafts]
        LOGGER.info("Imported %s marker(s) from %s", len(ids), filename)
        return ids

    def import_file(self, path: Path | str) -> list[str]:
        path = Path(path)
        detect_format(path.name)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise ParseError(f"Unable to read {path}", details={"error": str(exc)}) from exc
        return self.import_text(path.name, raw)
