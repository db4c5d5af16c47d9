"""Render the marker set as JSON, CSV or KML text."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence
from xml.sax.saxutils import escape

from ..core import Marker, UnsupportedFormatError
from ..utils import format_number

__all__ = ["ExportFormat", "EXPORT_FORMATS", "MarkerExporter", "escape_xml"]

CSV_HEADERS: tuple[str, ...] = ("Latitude", "Longitude", "Title", "Description", "Icon")

KML_NAMESPACE = "http://www.opengis.net/kml/2.2"

_XML_ENTITIES = {"'": "&apos;", '"': "&quot;"}


@dataclass(frozen=True, slots=True)
class ExportFormat:
    name: str
    filename: str
    mimetype: str


EXPORT_FORMATS: dict[str, ExportFormat] = {
    "json": ExportFormat("json", "markers.json", "application/json"),
    "csv": ExportFormat("csv", "markers.csv", "text/csv"),
    "kml": ExportFormat("kml", "markers.kml", "application/vnd.google-earth.kml+xml"),
}


def escape_xml(value: str | None) -> str:
    """Escape ``&``, ``<``, ``>``, ``'`` and ``"`` for XML text."""

    return escape(value or "", _XML_ENTITIES)


def _quote_csv(value: str | None) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


class MarkerExporter:
    """Serialize markers in insertion order."""

    document_name = "GeoExplorer Markers"

    def __init__(self) -> None:
        self._renderers: dict[str, Callable[[Sequence[Marker]], str]] = {
            "json": self.to_json,
            "csv": self.to_csv,
            "kml": self.to_kml,
        }

    def export(self, markers: Iterable[Marker], fmt: str) -> str:
        renderer = self._renderers.get(fmt.lower())
        if renderer is None:
            raise UnsupportedFormatError(
                f"Unsupported export format: {fmt}",
                details={"supported": sorted(self._renderers)},
            )
        return renderer(list(markers))

    def write(self, markers: Iterable[Marker], fmt: str, output_path: Path | str) -> Path:
        output_path = Path(output_path)
        output_path.write_text(self.export(markers, fmt), encoding="utf-8")
        return output_path

    def to_json(self, markers: Sequence[Marker]) -> str:
        return json.dumps([marker.to_record() for marker in markers], indent=2, ensure_ascii=False)

    def to_csv(self, markers: Sequence[Marker]) -> str:
        lines = [",".join(CSV_HEADERS)]
        for marker in markers:
            row = [
                format_number(marker.lat),
                format_number(marker.lng),
                _quote_csv(marker.title),
                _quote_csv(marker.description),
                marker.icon,
            ]
            lines.append(",".join(row))
        return "\n".join(lines)

    def to_kml(self, markers: Sequence[Marker]) -> str:
        placemarks = "".join(self._placemark(marker) for marker in markers)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<kml xmlns="{KML_NAMESPACE}">\n'
            "  <Document>\n"
            f"    <name>{escape_xml(self.document_name)}</name>\n"
            f"{placemarks}"
            "  </Document>\n"
            "</kml>\n"
        )

    @staticmethod
    def _placemark(marker: Marker) -> str:
        coordinates = f"{format_number(marker.lng)},{format_number(marker.lat)},0"
        return (
            "    <Placemark>\n"
            f"      <name>{escape_xml(marker.title)}</name>\n"
            f"      <description>{escape_xml(marker.description)}</description>\n"
            "      <ExtendedData>\n"
            f'        <Data name="icon"><value>{escape_xml(marker.icon)}</value></Data>\n'
            "      </ExtendedData>\n"
            "      <Point>\n"
            f"        <coordinates>{coordinates}</coordinates>\n"
            "      </Point>\n"
            "    </Placemark>\n"
        )
