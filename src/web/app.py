from __future__ import annotations

import random
import time
from datetime import UTC, datetime
from pathlib import Path

from flask import Flask, Response, jsonify, request
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import HTTPException, MethodNotAllowed, RequestEntityTooLarge

from src.logging.error_log import ErrorLogBuffer
from src.logging.init import get_logger
from src.models.config_models import AppConfig
from src.models.error_record import ErrorRecord
from src.services.upload import (
    InputRejected,
    ProcessingError,
    process_upload,
    suffix_for,
    validate_upload,
)

"""HTTP surface.

POST /api/upload-excel  multipart field "excel" -> normalized rows as JSON
GET  /api/health        liveness

The uploaded file is written to a uniquely named file under upload_dir and
removed on every exit path.
"""

__all__ = [
    "create_app",
]

logger = get_logger("web")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}
CORS_METHODS = "GET,OPTIONS,POST"
CORS_HEADERS = "Content-Type, Accept, X-Requested-With"
MULTIPART_SLACK_BYTES = 64 * 1024  # boundary + part headers


def _now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _temp_path(upload_dir: Path, field_name: str, suffix: str) -> Path:
    unique = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return upload_dir / f"{field_name}-{unique}{suffix}"


def _record_failure(app: Flask, file_name: str, stage: str, error_type: str, message: str) -> None:
    buffer: ErrorLogBuffer = app.extensions["error_log"]
    buffer.append(ErrorRecord.create(file=file_name, stage=stage, error_type=error_type, message=message))
    try:
        buffer.flush()
    except OSError as e:
        logger.warning(f"error log write failed: {e}")


def create_app(config: AppConfig | None = None) -> Flask:
    """Application factory."""
    config = config or AppConfig()
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.upload.max_upload_bytes + MULTIPART_SLACK_BYTES
    app.config["APP_CONFIG"] = config
    app.extensions["error_log"] = ErrorLogBuffer(config.error_log_dir)

    upload_dir = Path(config.upload.upload_dir)

    @app.after_request
    def add_headers(response: Response) -> Response:
        response.headers["Access-Control-Allow-Origin"] = config.server.cors_origin
        response.headers["Access-Control-Allow-Methods"] = CORS_METHODS
        response.headers["Access-Control-Allow-Headers"] = CORS_HEADERS
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e: RequestEntityTooLarge):
        limit_mb = config.upload.max_upload_bytes / (1024 * 1024)
        message = f"File too large. Maximum size is {limit_mb:g}MB."
        logger.warning(message)
        _record_failure(app, "", "upload", "INPUT_REJECTED", message)
        return jsonify({"error": message}), 400

    @app.errorhandler(MethodNotAllowed)
    def method_not_allowed(e: MethodNotAllowed):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(Exception)
    def internal_error(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.error(f"unhandled error: {e}", exc_info=e)
        return jsonify({"error": "Internal server error", "details": str(e)}), 500

    @app.route("/api/upload-excel", methods=["POST", "OPTIONS"])
    def upload_excel():
        if request.method == "OPTIONS":
            return "", 200

        file: FileStorage | None = request.files.get(config.upload.field_name)
        file_name = file.filename if file is not None else None
        mime_type = file.mimetype if file is not None else None
        try:
            validate_upload(file_name, mime_type, None, config.upload)
        except InputRejected as e:
            logger.warning(f"upload rejected: {e}")
            _record_failure(app, file_name or "", "upload", "INPUT_REJECTED", str(e))
            return jsonify({"error": str(e)}), 400

        suffix = suffix_for(file_name, mime_type)
        upload_dir.mkdir(parents=True, exist_ok=True)
        path = _temp_path(upload_dir, config.upload.field_name, suffix)
        try:
            file.save(path)
            validate_upload(file_name, mime_type, path.stat().st_size, config.upload)
            result = process_upload(path, file_name, config.reader, file_type=suffix)
        except ProcessingError as e:
            logger.error(f"failed to process {file_name}: {e}")
            _record_failure(app, file_name, "decode", "DECODE_FAILURE", str(e))
            return jsonify({"error": "Failed to process Excel file", "details": str(e)}), 500
        except InputRejected as e:
            logger.warning(f"upload rejected: {e}")
            _record_failure(app, file_name, "upload", "INPUT_REJECTED", str(e))
            return jsonify({"error": str(e)}), 400
        finally:
            path.unlink(missing_ok=True)

        return jsonify(result.to_response())

    @app.get("/api/health")
    def health():
        return jsonify({
            "status": "OK",
            "message": "Excel Upload API is running",
            "timestamp": _now_iso(),
        })

    return app
