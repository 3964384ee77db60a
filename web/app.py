"""
Flask application for the photo strip API.
"""
import io
import logging

from flask import Flask, Response, jsonify, request, send_file

from controller.strip_session import StripSession
from imaging.image_loader import decode_image, validate_upload_count
from imaging.strip_config import DEFAULT_CANVAS_SIZE, StripConfig
from imaging.strip_errors import (
    ImageDecodeError,
    MissingLogoError,
    StripConfigError,
    StripCreationError,
    UploadCountError,
)
from imaging.strip_export import encode_png

logger = logging.getLogger(__name__)


def _error(code: str, status: int, message: str | None = None):
    return jsonify({"ok": False, "error": code, "message": message}), status


def create_app(session: StripSession | None = None, config: dict | None = None):
    app = Flask(__name__)
    app.config.update(
        STRIP_CANVAS_SIZE=DEFAULT_CANVAS_SIZE,
        STRIP_FONT_PATH=None,
        LOG_LEVEL="INFO",
        MAX_CONTENT_LENGTH=64 * 1024 * 1024,
    )
    # e.g. PHOTOSTRIP_STRIP_FONT_PATH=/usr/share/fonts/...
    app.config.from_prefixed_env("PHOTOSTRIP")
    if config:
        app.config.update(config)

    if session is None:
        width, height = app.config["STRIP_CANVAS_SIZE"]
        session = StripSession(
            StripConfig(
                canvas_size=(int(width), int(height)),
                font_path=app.config["STRIP_FONT_PATH"],
            )
        )
    app.strip_session = session

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify(app.strip_session.get_health().to_dict())

    @app.route("/status", methods=["GET"])
    def status():
        return jsonify(app.strip_session.get_status())

    @app.route("/config", methods=["GET"])
    def get_config():
        return jsonify(app.strip_session.config.to_dict())

    @app.route("/config", methods=["POST"])
    def update_config():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error("invalid_json", 400, "Expected a JSON object")

        try:
            updated = app.strip_session.update_config(data)
        except StripConfigError as e:
            return _error("invalid_config", 400, str(e))

        return jsonify({"ok": True, "config": updated.to_dict()})

    @app.route("/captures", methods=["POST"])
    def add_capture():
        file = request.files.get("photo")
        if file is None:
            return _error("missing_file", 400, "Expected an image in field 'photo'")

        try:
            image = decode_image(file.read(), name=file.filename or "photo")
        except ImageDecodeError as e:
            return _error("decode_failed", 400, str(e))

        accepted = app.strip_session.add_capture(image)
        return jsonify({
            "ok": True,
            "accepted": accepted,
            "captures": app.strip_session.get_status()["captures"],
        })

    @app.route("/captures", methods=["DELETE"])
    def clear_captures():
        app.strip_session.clear_captures()
        return jsonify({"ok": True})

    @app.route("/uploads", methods=["POST"])
    def upload_photos():
        files = request.files.getlist("photos")
        if not validate_upload_count(len(files)):
            return _error("upload_count", 400, "Please upload 2-4 images.")

        try:
            images = [decode_image(f.read(), name=f.filename or "photo") for f in files]
            frame_count = app.strip_session.set_uploads(images)
        except ImageDecodeError as e:
            logger.warning("Rejected upload: %s", e)
            return _error("decode_failed", 400, str(e))
        except UploadCountError as e:
            return _error("upload_count", 400, str(e))

        return jsonify({"ok": True, "frame_count": frame_count})

    @app.route("/logo", methods=["POST"])
    def upload_logo():
        file = request.files.get("logo")
        if file is None:
            return _error("missing_file", 400, "Expected an image in field 'logo'")

        try:
            logo = decode_image(file.read(), name=file.filename or "logo")
        except ImageDecodeError as e:
            logger.warning("Rejected logo: %s", e)
            return _error("decode_failed", 400, str(e))

        app.strip_session.set_logo(logo)
        return jsonify({"ok": True})

    @app.route("/logo", methods=["DELETE"])
    def remove_logo():
        app.strip_session.set_logo(None)
        return jsonify({"ok": True})

    @app.route("/preview.png", methods=["GET"])
    def preview():
        try:
            strip = app.strip_session.render()
        except StripCreationError as e:
            return _error("render_failed", 500, str(e))
        return Response(encode_png(strip), mimetype="image/png")

    @app.route("/export", methods=["GET"])
    def export():
        try:
            result = app.strip_session.export()
        except MissingLogoError as e:
            return _error("logo_required", 409, str(e))
        except StripCreationError as e:
            return _error("render_failed", 500, str(e))

        return send_file(
            io.BytesIO(result.data),
            mimetype=result.mimetype,
            as_attachment=True,
            download_name=result.filename,
        )

    return app
