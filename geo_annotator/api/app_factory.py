"""Flask application factory."""

from __future__ import annotations

import logging
from flask import Flask
from flask_cors import CORS

from ..config import APP_CONFIG
from ..context import AnnotationContext
from .routes import api_bp, register_error_handlers

logger = logging.getLogger(__name__)


def create_app(context: AnnotationContext | None = None) -> Flask:
    """Create and configure the Flask application.

    When ``context`` is omitted one is built from the environment
    configuration and bootstrapped from storage.
    """

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = APP_CONFIG.max_upload_bytes

    if context is None:
        context = AnnotationContext.from_config().bootstrap(
            seed_defaults=APP_CONFIG.seed_default_markers
        )

    CORS(app)
    app.register_blueprint(api_bp, url_prefix="/api")
    register_error_handlers(app)
    app.extensions["geo_annotator"] = context

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    logger.info("Flask application initialised with %s marker(s)", len(context.store))
    return app
