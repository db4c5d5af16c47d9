from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from geo_annotator.core import MarkerDraft, ParseError, UnsupportedFormatError
from geo_annotator.services import MarkerExporter, MarkerImporter, MarkerStore, detect_format
from geo_annotator.services.exporter import escape_xml


def content(store: MarkerStore) -> list[dict]:
    return [marker.content() for marker in store.list()]


@pytest.fixture()
def store() -> MarkerStore:
    store = MarkerStore()
    store.add(MarkerDraft(48.8584, 2.2945, "Eiffel Tower", "Paris, France", "🗼"))
    store.add(MarkerDraft(40.6892, -74.0445, 'Joe"s Pizza', "Slices, \"the best\"\nsince 1975", "🍕"))
    store.add(MarkerDraft(-33.8568, 151.2153, "A & B <co>", "it's", "📍"))
    store.add(MarkerDraft(0.0, -180.0, "Antimeridian", "", "⭐"))
    return store


@pytest.fixture()
def exporter() -> MarkerExporter:
    return MarkerExporter()


@pytest.mark.parametrize("fmt", ["json", "csv", "kml"])
def test_export_then_import_reproduces_content(store: MarkerStore, exporter: MarkerExporter, fmt: str):
    text = exporter.export(store.list(), fmt)
    original = content(store)
    original_ids = {marker.id for marker in store.list()}

    store.clear()
    MarkerImporter(store).import_text(f"markers.{fmt}", text)

    assert content(store) == original
    assert original_ids.isdisjoint(marker.id for marker in store.list())


def test_json_export_is_pretty_printed_with_created_at(store: MarkerStore, exporter: MarkerExporter):
    text = exporter.to_json(store.list())
    data = json.loads(text)

    assert text.startswith("[\n  {")
    assert list(data[0]) == ["lat", "lng", "title", "description", "icon", "createdAt"]
    assert data[0]["createdAt"] == store.list()[0].created_at


def test_csv_export_quotes_text_columns(exporter: MarkerExporter):
    store = MarkerStore()
    store.add(MarkerDraft(40.5, -74.25, 'Joe"s Pizza', "", "🍕"))

    lines = exporter.to_csv(store.list()).split("\n")

    assert lines[0] == "Latitude,Longitude,Title,Description,Icon"
    assert lines[1] == '40.5,-74.25,"Joe""s Pizza","",🍕'


def test_csv_import_unescapes_doubled_quotes():
    store = MarkerStore()
    csv_text = 'Latitude,Longitude,Title,Description,Icon\n40.5,-74.25,"Joe""s Pizza","",🍕\n'

    MarkerImporter(store).import_text("pizza.csv", csv_text)

    assert store.list()[0].title == 'Joe"s Pizza'


def test_kml_export_escapes_user_text(store: MarkerStore, exporter: MarkerExporter):
    kml = exporter.to_kml(store.list())

    assert "<name>A &amp; B &lt;co&gt;</name>" in kml
    assert "A & B" not in kml
    assert "it&apos;s" in kml
    assert "Joe&quot;s Pizza" in kml


def test_kml_coordinates_put_longitude_first(exporter: MarkerExporter):
    store = MarkerStore()
    store.add(MarkerDraft(48.8584, 2.2945, "Eiffel Tower"))

    root = ET.fromstring(exporter.to_kml(store.list()).encode("utf-8"))
    coordinates = root.find(".//{*}Placemark/{*}Point/{*}coordinates")

    assert coordinates.text == "2.2945,48.8584,0"


def test_escape_xml_handles_all_special_characters():
    assert escape_xml("<&>'\"") == "&lt;&amp;&gt;&apos;&quot;"
    assert escape_xml(None) == ""


def test_kml_import_without_icon_uses_default():
    kml = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2"><Document>
  <Placemark><name>Spot</name><Point><coordinates> 13.4,52.5,0 </coordinates></Point></Placemark>
</Document></kml>"""
    store = MarkerStore()
    MarkerImporter(store).import_text("spot.kml", kml)

    marker = store.list()[0]
    assert (marker.lat, marker.lng, marker.title, marker.description, marker.icon) == (52.5, 13.4, "Spot", "", "📍")


def test_unsupported_extension_fails_before_parsing():
    store = MarkerStore()
    with pytest.raises(UnsupportedFormatError):
        MarkerImporter(store).import_text("markers.gpx", "not even read")
    with pytest.raises(UnsupportedFormatError):
        detect_format("markers")
    assert len(store) == 0


def test_disabled_extension_is_rejected():
    importer = MarkerImporter(MarkerStore(), allowed_extensions=("json",))
    with pytest.raises(UnsupportedFormatError):
        importer.import_text("markers.csv", "Latitude,Longitude\n1,2\n")


def test_detect_format_is_case_insensitive():
    assert detect_format("Markers.KML") == "kml"


@pytest.mark.parametrize(
    "filename, text",
    [
        ("bad.json", '[{"lat": 1, "lng": 2, "title": "ok"}, {"lat": "north", "lng": 2}]'),
        ("bad.json", "[{"),
        ("bad.json", '{"lat": 1}'),
        ("bad.csv", "Latitude,Longitude,Title\n1,2,ok\nabc,2,broken\n"),
        ("bad.csv", "Lat,Lng\n1,2\n"),
        ("bad.kml", "<kml><Document><Placemark><name>x</name></Placemark></Document></kml>"),
        ("bad.kml", "<kml><Document>"),
        ("bad.json", '[{"lat": 95, "lng": 0, "title": "too far north"}]'),
    ],
)
def test_malformed_files_abort_without_adding(filename: str, text: str):
    store = MarkerStore()
    store.add(MarkerDraft(1.0, 1.0, "Existing"))

    with pytest.raises(ParseError):
        MarkerImporter(store).import_text(filename, text)

    assert [marker.title for marker in store.list()] == ["Existing"]


def test_parse_error_reports_failing_record():
    with pytest.raises(ParseError) as excinfo:
        MarkerImporter(MarkerStore()).import_text("bad.csv", "Latitude,Longitude\n1,2\n3,\n")
    assert excinfo.value.details["record"] == 2


def test_import_ignores_created_at_and_fills_defaults():
    store = MarkerStore()
    payload = json.dumps([{"lat": "1.5", "lng": 2, "title": "T", "createdAt": 5}])

    MarkerImporter(store).import_text("m.json", payload)

    marker = store.list()[0]
    assert (marker.lat, marker.description, marker.icon) == (1.5, "", "📍")
    assert marker.created_at != 5


def test_import_bytes_with_bom(tmp_path: Path):
    path = tmp_path / "markers.csv"
    path.write_bytes("Latitude,Longitude,Title,Description,Icon\n1,2,\"Café\",\"\",📍\n".encode("utf-8-sig"))
    store = MarkerStore()

    ids = MarkerImporter(store).import_file(path)

    assert len(ids) == 1
    assert store.list()[0].title == "Café"


def test_export_rejects_unknown_format(store: MarkerStore, exporter: MarkerExporter):
    with pytest.raises(UnsupportedFormatError):
        exporter.export(store.list(), "gpx")


def test_write_creates_file(store: MarkerStore, exporter: MarkerExporter, tmp_path: Path):
    output = exporter.write(store.list(), "csv", tmp_path / "markers.csv")
    assert output.read_text(encoding="utf-8").startswith("Latitude,Longitude")
