"""Tests for API endpoints against a temporary blob store."""

from __future__ import annotations

import pygltflib
import pytest
from fastapi.testclient import TestClient

from arforge.config import Settings
from arforge.dependencies import get_settings
from arforge.main import app
from tests.conftest import EMPTY_SVG, PNG_BYTES, TWO_COLOR_SVG


@pytest.fixture
def client(tmp_path):
    cfg = Settings(storage_dir=str(tmp_path / "blobs"), public_base_url="")
    app.dependency_overrides[get_settings] = lambda: cfg
    yield TestClient(app)
    app.dependency_overrides.clear()


def _assert_share(data: dict) -> None:
    asset_id = data["id"]
    assert data["qrCode"].startswith("data:image/png;base64,")
    # TestClient's Host is "testserver", which is not a local host
    assert data["viewUrl"] == f"https://testserver/view/{asset_id}"
    assert data["blobUrl"] == f"https://testserver/api/blobs/models/{asset_id}.glb"


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["extractors_registered"] == 3


def test_generate_text_end_to_end(client):
    response = client.post("/api/generate-text", json={"text": "AR", "color": "#4285f4"})
    assert response.status_code == 200
    data = response.json()
    _assert_share(data)

    blob_path = data["blobUrl"].split("testserver", 1)[1]
    blob = client.get(blob_path)
    assert blob.status_code == 200
    assert blob.headers["content-type"] == "model/gltf-binary"
    assert blob.content[:4] == b"glTF"

    check = client.get("/api/check-model", params={"id": data["id"]})
    assert check.json() == {"exists": True, "src": data["blobUrl"]}

    page = client.get(f"/view/{data['id']}")
    assert page.status_code == 200
    assert "<model-viewer" in page.text
    assert 'ar-modes="webxr scene-viewer quick-look"' in page.text


def test_generate_text_blank(client):
    response = client.post("/api/generate-text", json={"text": "  "})
    assert response.status_code == 400
    assert response.json() == {"error": "No text provided", "stage": "extract"}


def test_generate_text_depth_out_of_range(client):
    response = client.post("/api/generate-text", json={"text": "AR", "depth": 11})
    assert response.status_code == 422


def test_generate_logo_original_colors(client):
    response = client.post(
        "/api/generate-logo",
        files={"svg": ("logo.svg", TWO_COLOR_SVG.encode(), "image/svg+xml")},
        data={"depth": "3", "color": "#ff00ff", "useOriginalColors": "true"},
    )
    assert response.status_code == 200
    data = response.json()
    _assert_share(data)

    blob = client.get(data["blobUrl"].split("testserver", 1)[1])
    gltf = pygltflib.GLTF2.load_from_bytes(blob.content)
    assert len(gltf.meshes[0].primitives) == 2


def test_generate_logo_single_color(client):
    response = client.post(
        "/api/generate-logo",
        files={"svg": ("logo.svg", TWO_COLOR_SVG.encode(), "image/svg+xml")},
        data={"useOriginalColors": "false"},
    )
    assert response.status_code == 200
    blob = client.get(response.json()["blobUrl"].split("testserver", 1)[1])
    gltf = pygltflib.GLTF2.load_from_bytes(blob.content)
    assert len(gltf.meshes[0].primitives) == 1


def test_generate_logo_missing_file(client):
    response = client.post("/api/generate-logo", data={"depth": "3"})
    assert response.status_code == 400
    assert response.json()["error"] == "No SVG uploaded"


def test_generate_logo_without_paths(client):
    response = client.post(
        "/api/generate-logo",
        files={"svg": ("empty.svg", EMPTY_SVG.encode(), "image/svg+xml")},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Could not parse SVG paths", "stage": "extract"}


def test_generate_photo(client):
    response = client.post(
        "/api/generate-photo",
        files={"image": ("photo.png", PNG_BYTES, "image/png")},
    )
    assert response.status_code == 200
    _assert_share(response.json())


def test_generate_photo_wrong_type(client):
    response = client.post(
        "/api/generate-photo",
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["stage"] == "extract"


def test_generate_photo_missing(client):
    response = client.post("/api/generate-photo")
    assert response.status_code == 400
    assert response.json()["error"] == "No image uploaded"


def test_upload_model_verbatim(client):
    payload = b"glTF\x02\x00\x00\x00fake-but-stored-as-is"
    response = client.post(
        "/api/upload",
        files={"model": ("chair.GLB", payload, "model/gltf-binary")},
    )
    assert response.status_code == 200
    data = response.json()
    _assert_share(data)
    blob = client.get(data["blobUrl"].split("testserver", 1)[1])
    assert blob.content == payload


def test_upload_rejects_other_formats(client):
    response = client.post(
        "/api/upload",
        files={"model": ("chair.obj", b"v 0 0 0", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["stage"] == "input"


def test_upload_missing(client):
    response = client.post("/api/upload")
    assert response.status_code == 400
    assert response.json()["error"] == "No file uploaded"


def test_check_model_unknown(client):
    response = client.get("/api/check-model", params={"id": "does-not-exist"})
    assert response.status_code == 200
    assert response.json() == {"exists": False}


def test_view_unknown_model(client):
    response = client.get("/view/does-not-exist")
    assert response.status_code == 404
    assert "Model not found" in response.text


def test_missing_blob(client):
    assert client.get("/api/blobs/models/nothing.glb").status_code == 404
