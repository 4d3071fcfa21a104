"""HTTP error helpers and image file extension detection."""

from __future__ import annotations

import json
import logging

from flask import Response

from mangaroo.errors import AppError

_log = logging.getLogger(__name__)


def log_error(context: str, err: object) -> None:
    """Log an error together with what was being done."""
    _log.error("[ERROR] %s: %s", context, err)


def respond_with_error(code: int, message: str) -> Response:
    """Build a JSON error response."""
    body = json.dumps({"error": message}) + "\n"
    return Response(body, status=code, mimetype="application/json")


def handle_error(app_error: AppError) -> Response:
    """Log the cause of ``app_error`` if any and build its JSON response."""
    if app_error.err is not None:
        log_error(app_error.message, app_error.err)
    return respond_with_error(app_error.code, app_error.message)


def determine_file_extension(url: str, content_type: str) -> str:
    """Pick an image extension from the content type, falling back to the URL."""
    if "jpeg" in content_type or "jpg" in content_type:
        return "jpg"
    if "png" in content_type:
        return "png"
    if "webp" in content_type:
        return "webp"

    _, dot, candidate = url.rpartition(".")
    if dot and len(candidate.encode("utf-8")) <= 4:
        return candidate
    return "jpg"