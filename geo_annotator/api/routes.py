"""REST API blueprint."""

from __future__ import annotations

import logging
from flask import Blueprint, Flask, Response, current_app, jsonify, request

from ..context import AnnotationContext
from ..core import (
    AnnotationError,
    MarkerDraft,
    ParseError,
    StorageError,
    UnsupportedFormatError,
    ValidationError,
)
from ..core.models import coerce_coordinate
from ..services import EXPORT_FORMATS
from ..utils.io import safe_filename

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

_ERROR_STATUS = {
    ValidationError: 400,
    ParseError: 400,
    UnsupportedFormatError: 415,
    StorageError: 503,
}


@api_bp.get("/markers")
def list_markers():
    context = _context()
    return jsonify({"markers": [marker.as_dict() for marker in context.store.list()]})


@api_bp.post("/markers")
def create_marker():
    draft = MarkerDraft.from_mapping(_json_body(), require_title=True)
    marker_id = _context().store.add(draft)
    return jsonify({"id": marker_id}), 201


@api_bp.get("/markers/<marker_id>")
def get_marker(marker_id: str):
    marker = _context().store.get(marker_id)
    if marker is None:
        return jsonify({"error": "Marker not found"}), 404
    return jsonify(marker.as_dict())


@api_bp.patch("/markers/<marker_id>")
def update_marker(marker_id: str):
    context = _context()
    if marker_id not in context.store:
        return jsonify({"error": "Marker not found"}), 404

    fields = _json_body()
    if "title" in fields and not str(fields["title"] or "").strip():
        raise ValidationError("Title is required", details={"field": "title"})

    context.store.update(marker_id, fields)
    return jsonify(context.store.get(marker_id).as_dict())


@api_bp.delete("/markers/<marker_id>")
def delete_marker(marker_id: str):
    _context().store.remove(marker_id)
    return "", 204


@api_bp.delete("/markers")
def clear_markers():
    _context().store.clear()
    return "", 204


@api_bp.get("/history")
def history_state():
    return jsonify(_context().history_state())


@api_bp.post("/history/undo")
def undo():
    context = _context()
    applied = context.undo()
    return jsonify({"applied": applied, **context.history_state()})


@api_bp.post("/history/redo")
def redo():
    context = _context()
    applied = context.redo()
    return jsonify({"applied": applied, **context.history_state()})


@api_bp.get("/export/<fmt>")
def export_markers(fmt: str):
    export_format = EXPORT_FORMATS.get(fmt.lower())
    if export_format is None:
        raise UnsupportedFormatError(f"Unsupported export format: {fmt}", details={"supported": sorted(EXPORT_FORMATS)})

    body = _context().export(export_format.name)
    return Response(
        body,
        mimetype=export_format.mimetype,
        headers={"Content-Disposition": f"attachment; filename={export_format.filename}"},
    )


@api_bp.post("/import")
def import_markers():
    uploaded = request.files.get("file")
    if uploaded is None or not uploaded.filename:
        return jsonify({"error": "file field is required"}), 400

    filename = safe_filename(uploaded.filename)
    ids = _context().import_text(filename, uploaded.read())
    return jsonify({"imported": len(ids), "ids": ids}), 201


@api_bp.get("/geocode")
def geocode():
    query = (request.args.get("q") or "").strip()
    if not query:
        return jsonify({"error": "q parameter is required"}), 400

    try:
        result = _context().geocoder.search(query)
    except (OSError, ValueError) as exc:
        logger.warning("Geocoding %r failed: %s", query, exc)
        return jsonify({"error": "Geocoding service unavailable"}), 502

    if result is None:
        return jsonify({"error": "No results"}), 404
    return jsonify(result.as_dict())


@api_bp.get("/geocode/reverse")
def reverse_geocode():
    lat = coerce_coordinate(request.args.get("lat"), "lat")
    lon = coerce_coordinate(request.args.get("lon"), "lon")
    payload = _context().geocoder.reverse(lat, lon)
    if payload is None:
        return jsonify({"error": "No results"}), 404
    return jsonify(payload)


@api_bp.get("/measurement")
def measurement_state():
    return jsonify(_measurement_payload())


@api_bp.post("/measurement/toggle")
def toggle_measurement():
    _context().measurement.toggle()
    return jsonify(_measurement_payload())


@api_bp.post("/measurement/points")
def add_measurement_point():
    body = _json_body()
    lat = coerce_coordinate(body.get("lat"), "lat")
    lng = coerce_coordinate(body.get("lng"), "lng")
    if not _context().measurement.add_point(lat, lng):
        return jsonify({"error": "Measurement mode is not active"}), 409
    return jsonify(_measurement_payload())


@api_bp.post("/measurement/reset")
def reset_measurement():
    _context().measurement.reset()
    return jsonify(_measurement_payload())


@api_bp.post("/measurement/finish")
def finish_measurement():
    measurement = _context().measurement.finish()
    if measurement is None:
        return jsonify({"error": "At least two points are required"}), 400
    return jsonify(measurement.as_dict())


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AnnotationError)
    def handle_annotation_error(exc: AnnotationError):
        status = next(
            (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
            500,
        )
        return jsonify({"error": exc.as_dict()}), status


def _measurement_payload() -> dict:
    engine = _context().measurement
    return {
        "active": engine.active,
        "points": [{"lat": point.lat, "lng": point.lng} for point in engine.points],
        "distance": engine.total_distance(),
        "area": engine.enclosed_area(),
    }


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _context() -> AnnotationContext:
    return current_app.extensions["geo_annotator"]
