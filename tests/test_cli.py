from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from geo_annotator import cli
from geo_annotator.config import AppConfig


@pytest.fixture(autouse=True)
def no_default_markers(monkeypatch):
    monkeypatch.setattr(cli, "APP_CONFIG", AppConfig(seed_default_markers=False))


def run(*argv: str) -> tuple[int, str]:
    stream = io.StringIO()
    code = cli.main(list(argv), stream=stream)
    return code, stream.getvalue()


@pytest.fixture()
def markers_json(tmp_path: Path) -> Path:
    path = tmp_path / "markers.json"
    path.write_text(
        json.dumps(
            [
                {"lat": 48.8584, "lng": 2.2945, "title": "Eiffel Tower", "description": "Paris", "icon": "🗼"},
                {"lat": 51.5007, "lng": -0.1246, "title": "Big Ben"},
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_import_then_list(tmp_path: Path, markers_json: Path):
    data_dir = tmp_path / "store"

    assert run("--data-dir", str(data_dir), "import", str(markers_json))[0] == 0
    code, output = run("--data-dir", str(data_dir), "list")

    assert code == 0
    lines = output.splitlines()
    assert lines[0] == "  1. 🗼 Eiffel Tower (48.858400, 2.294500) - Paris"
    assert lines[1] == "  2. 📍 Big Ben (51.500700, -0.124600)"


def test_export_to_file_and_stdout(tmp_path: Path, markers_json: Path):
    data_dir = tmp_path / "store"
    run("--data-dir", str(data_dir), "import", str(markers_json))

    output_path = tmp_path / "out.kml"
    assert run("--data-dir", str(data_dir), "export", "kml", "--output", str(output_path))[0] == 0
    assert "<name>Eiffel Tower</name>" in output_path.read_text(encoding="utf-8")

    code, output = run("--data-dir", str(data_dir), "export", "csv")
    assert code == 0
    assert output.startswith("Latitude,Longitude,Title,Description,Icon\n")


def test_bad_import_returns_error_code(tmp_path: Path):
    bad = tmp_path / "markers.gpx"
    bad.write_text("<gpx/>", encoding="utf-8")

    code, _ = run("--data-dir", str(tmp_path / "store"), "import", str(bad))
    assert code == 1


def test_clear(tmp_path: Path, markers_json: Path):
    data_dir = tmp_path / "store"
    run("--data-dir", str(data_dir), "import", str(markers_json))

    assert run("--data-dir", str(data_dir), "clear")[0] == 0
    assert run("--data-dir", str(data_dir), "list")[1] == ""


def test_measure_prints_distance_and_area():
    code, output = run("measure", "0,0", "1,0", "1,1")

    assert code == 0
    assert output.splitlines()[0].startswith("Distance: 222.")
    assert output.splitlines()[1] == "Area: 6196.07 km²"


def test_measure_rejects_malformed_points():
    with pytest.raises(SystemExit):
        run("measure", "north")


def test_measure_rejects_out_of_range_points():
    with pytest.raises(SystemExit):
        run("measure", "0,0", "95,0")
