"""Flask application exposing the image guard over HTTP."""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify

import config
from config import configure_logging
from routes.guard_routes import bp as guard_bp
from services.admission_service import Limits
from services.guard_service import ImageGuard


def create_app(limits: Optional[Limits] = None) -> Flask:
    """Application factory.  ``limits`` defaults to the environment's limits."""
    configure_logging()
    app = Flask(__name__)
    app.config.update(
        MAX_CONTENT_LENGTH=config.MAX_UPLOAD_BYTES or None,
        IMAGE_GUARD=ImageGuard(
            limits or Limits.default(), max_peek_bytes=config.MAX_PEEK_BYTES
        ),
    )

    @app.errorhandler(404)
    def not_found(_e):
        return jsonify({"error": "not found"}), 404

    @app.errorhandler(413)
    def too_large(_e):
        return jsonify({"error": "upload too large"}), 413

    @app.errorhandler(500)
    def server_error(_e):
        return jsonify({"error": "internal error"}), 500

    app.register_blueprint(guard_bp)
    return app


app = create_app()
