# routes/guard_routes.py
# ======================================================================
# Guard Routes – JSON API for checking uploaded images before decoding
# ======================================================================

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from werkzeug.utils import secure_filename

from services.admission_service import AdmissionResult
from services.decode_service import DecodeOptions
from services.errors import AdmissionError, HeaderParseError
from services.guard_service import ImageGuard
from services.metadata import ImageMetadata

bp = Blueprint("guard", __name__)


def _guard() -> ImageGuard:
    return current_app.config["IMAGE_GUARD"]


def _upload():
    """Return the uploaded ``image`` file or ``None``."""
    upload = request.files.get("image")
    if upload is None or not upload.filename:
        return None
    return upload


def _metadata_json(metadata: ImageMetadata) -> Dict[str, Any]:
    return {
        "width": metadata.width,
        "height": metadata.height,
        "mode": metadata.mode,
        "format": metadata.format,
    }


def _rejection_json(result: AdmissionResult) -> Dict[str, Any]:
    return {
        "error": str(result.to_error()),
        "reason": result.reason.value,
        "observed": result.observed,
        "limit": result.limit,
    }


# ----------------------------------------------------------------------
# GET /limits
# ----------------------------------------------------------------------
@bp.get("/limits")
def limits_route():
    return jsonify(_guard().limits.as_dict()), 200


# ----------------------------------------------------------------------
# POST /inspect  (multipart field "image")
# Returns JSON: { admitted: bool, metadata, estimated_bytes?, reason? }
# 200 when admitted, 413 when rejected, 400 when the header is unreadable
# ----------------------------------------------------------------------
@bp.post("/inspect")
def inspect_route():
    upload = _upload()
    if upload is None:
        return jsonify({"error": "missing image upload"}), 400
    name = secure_filename(upload.filename)

    try:
        metadata, result, replay = _guard().inspect(upload.stream)
    except HeaderParseError as exc:
        current_app.logger.info("Unreadable header in %s: %s", name, exc)
        return jsonify({"error": str(exc)}), 400
    replay.close()

    body: Dict[str, Any] = {"admitted": result.passed, "metadata": _metadata_json(metadata)}
    if not result.passed:
        body.update(_rejection_json(result))
        return jsonify(body), 413
    body["estimated_bytes"] = result.estimated_bytes
    return jsonify(body), 200


# ----------------------------------------------------------------------
# POST /decode  (multipart field "image", optional form field "auto_orient")
# Runs the full guarded decode and reports the decoded buffer's shape.
# ----------------------------------------------------------------------
@bp.post("/decode")
def decode_route():
    upload = _upload()
    if upload is None:
        return jsonify({"error": "missing image upload"}), 400
    name = secure_filename(upload.filename)
    auto_orient = (request.form.get("auto_orient") or "").strip().lower() in {"1", "true", "yes"}

    try:
        image = _guard().decode(upload.stream, DecodeOptions(auto_orient=auto_orient))
    except HeaderParseError as exc:
        current_app.logger.info("Unreadable header in %s: %s", name, exc)
        return jsonify({"error": str(exc)}), 400
    except AdmissionError as exc:
        return jsonify({"error": str(exc), "observed": exc.observed, "limit": exc.limit}), 413

    with image:
        body = {
            "width": image.width,
            "height": image.height,
            "mode": image.mode,
            "format": image.format,
        }
    current_app.logger.info("Decoded %s (%dx%d)", name, body["width"], body["height"])
    return jsonify(body), 200
