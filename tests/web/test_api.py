import io
import json
import struct
import zlib

import pytest
from PIL import Image

from controller.strip_session import StripSession
from imaging.strip_config import StripConfig
from tests.helpers import SMALL_CANVAS, image_bytes, solid_image
from web.app import create_app


@pytest.fixture
def session():
    return StripSession(StripConfig(canvas_size=SMALL_CANVAS))


@pytest.fixture
def client(session):
    app = create_app(session=session)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def _png(name="a.png", size=(40, 30), color=(255, 0, 0)):
    return io.BytesIO(image_bytes(solid_image(size, color))), name


def test_create_app_builds_session_from_config():
    app = create_app(config={"STRIP_CANVAS_SIZE": (200, 600)})

    assert app.strip_session.config.canvas_size == (200, 600)


def test_create_app_reads_prefixed_env(monkeypatch):
    monkeypatch.setenv("PHOTOSTRIP_STRIP_CANVAS_SIZE", "[150, 500]")

    app = create_app()

    assert app.strip_session.config.canvas_size == (150, 500)


def test_health_warns_without_logo(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.get_json()
    assert data["level"] == "WARNING"
    assert data["code"] == "LOGO_MISSING"


def test_status_endpoint(client):
    response = client.get("/status")

    assert response.status_code == 200
    data = response.get_json()
    assert data["frame_count"] == 4
    assert data["captures"] == 0
    assert data["ready_to_export"] is False


def test_get_config(client):
    data = client.get("/config").get_json()

    assert data["theme"] == "blue"
    assert data["canvas_size"] == list(SMALL_CANVAS)
    assert data["has_logo"] is False


def test_update_config_ok(client):
    response = client.post(
        "/config",
        data=json.dumps({"frame_count": 3, "theme": "white"}),
        content_type="application/json",
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["ok"] is True
    assert data["config"]["frame_count"] == 3
    assert data["config"]["theme"] == "white"


def test_update_config_rejects_invalid_value(client):
    response = client.post(
        "/config",
        data=json.dumps({"frame_count": 6}),
        content_type="application/json",
    )

    assert response.status_code == 400
    data = response.get_json()
    assert data["ok"] is False
    assert data["error"] == "invalid_config"


def test_update_config_rejects_non_object(client):
    response = client.post("/config", data="[1, 2]", content_type="application/json")

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_json"


def test_add_capture(client):
    response = client.post(
        "/captures",
        data={"photo": _png()},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    assert response.get_json() == {"ok": True, "accepted": True, "captures": 1}


def test_add_capture_requires_file(client):
    response = client.post("/captures", data={}, content_type="multipart/form-data")

    assert response.status_code == 400
    assert response.get_json()["error"] == "missing_file"


def test_add_capture_rejects_undecodable_file(client):
    response = client.post(
        "/captures",
        data={"photo": (io.BytesIO(b"nope"), "bad.jpg")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    data = response.get_json()
    assert data["error"] == "decode_failed"
    assert "bad.jpg" in data["message"]


def test_clear_captures(client, session):
    session.add_capture(solid_image())

    response = client.delete("/captures")

    assert response.status_code == 200
    assert session.captures == []


def test_upload_photos_sets_frame_count(client, session):
    response = client.post(
        "/uploads",
        data={"photos": [_png("1.png"), _png("2.png"), _png("3.png")]},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    assert response.get_json() == {"ok": True, "frame_count": 3}
    assert session.config.frame_count == 3
    assert len(session.captures) == 3


@pytest.mark.parametrize("n", [1, 5])
def test_upload_photos_rejects_wrong_count(client, n):
    response = client.post(
        "/uploads",
        data={"photos": [_png(f"{i}.png") for i in range(n)]},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "upload_count"


def test_upload_photos_rejects_bad_image(client, session):
    response = client.post(
        "/uploads",
        data={"photos": [_png("1.png"), (io.BytesIO(b"junk"), "2.png")]},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "decode_failed"
    assert session.captures == []


def test_logo_upload_and_removal(client, session):
    response = client.post(
        "/logo",
        data={"logo": _png("logo.png", (80, 40))},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    assert session.config.has_logo
    assert client.get("/health").get_json() == {"level": "OK"}

    client.delete("/logo")

    assert not session.config.has_logo


def test_preview_renders_png_without_logo(client):
    response = client.get("/preview.png")

    assert response.status_code == 200
    assert response.mimetype == "image/png"
    with Image.open(io.BytesIO(response.data)) as strip:
        assert strip.size == SMALL_CANVAS


def test_export_without_logo_is_refused(client):
    response = client.get("/export")

    assert response.status_code == 409
    data = response.get_json()
    assert data["error"] == "logo_required"
    assert data["message"] == "Please upload the RiesBeads logo before downloading"


def test_export_downloads_png(client, session):
    session.set_logo(solid_image((80, 40)))

    response = client.get("/export")

    assert response.status_code == 200
    assert response.mimetype == "image/png"
    disposition = response.headers["Content-Disposition"]
    assert disposition.startswith("attachment")
    assert "RiesBeads-Photostrip-" in disposition
    assert response.data.startswith(b"\x89PNG")


@pytest.mark.parametrize("body", ['{"gap": NaN}', '{"border_radius": Infinity}'])
def test_update_config_rejects_non_finite_numbers(client, session, body):
    response = client.post("/config", data=body, content_type="application/json")

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_config"
    assert session.config.gap == 24
    assert client.get("/preview.png").status_code == 200


def test_logo_upload_rejects_oversized_image_declaration(client, session):
    header = struct.pack(">IIBBBBB", 30000, 30000, 8, 2, 0, 0, 0)
    png = (
        b"\x89PNG\r\n\x1a\n"
        + struct.pack(">I", len(header)) + b"IHDR" + header + struct.pack(">I", zlib.crc32(b"IHDR" + header))
        + struct.pack(">I", 0) + b"IEND" + struct.pack(">I", zlib.crc32(b"IEND"))
    )

    response = client.post(
        "/logo",
        data={"logo": (io.BytesIO(png), "huge.png")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert response.get_json()["error"] == "decode_failed"
    assert not session.config.has_logo
