"""Tests for the local blob store and share links."""

from __future__ import annotations

import base64
import io
import uuid

import pytest
from PIL import Image

from arforge.storage.blob_store import (
    BlobExistsError,
    LocalBlobStore,
    content_type_for,
    model_key,
    new_asset_id,
)
from arforge.storage.share import base_url, blob_url, qr_data_url, view_url


@pytest.fixture
def store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "blobs")


def test_put_and_get(store):
    blob = store.put("models/abc.glb", b"glTF-bytes")
    assert blob.size == 10
    assert blob.content_type == "model/gltf-binary"
    assert store.get("models/abc.glb") == b"glTF-bytes"
    assert store.exists("models/abc.glb")


def test_refuses_overwrite(store):
    store.put("models/abc.glb", b"first")
    with pytest.raises(BlobExistsError):
        store.put("models/abc.glb", b"second")
    assert store.get("models/abc.glb") == b"first"


def test_no_temp_files_left(store):
    store.put("models/abc.glb", b"data")
    assert store.list("") == ["models/abc.glb"]


def test_list_by_prefix(store):
    store.put("models/a1.glb", b"1")
    store.put("models/a2.gltf", b"2")
    store.put("other/a3.glb", b"3")
    assert store.list("models/a") == ["models/a1.glb", "models/a2.gltf"]


def test_find_model_any_extension(store):
    asset_id = new_asset_id()
    store.put(model_key(asset_id, ".gltf"), b"{}")
    assert store.find_model(asset_id) == f"models/{asset_id}.gltf"
    assert store.find_model(asset_id[:8]) is None
    assert store.find_model("") is None
    assert store.find_model("../etc") is None


def test_find_model_only_looks_in_models(store):
    asset_id = new_asset_id()
    store.put(f"other/{asset_id}.glb", b"1")
    store.put(f"models/nested/{asset_id}.glb", b"2")
    store.put(f"models/{asset_id}-copy.glb", b"3")
    assert store.find_model(asset_id) is None
    store.put(model_key(asset_id), b"4")
    assert store.find_model(asset_id) == f"models/{asset_id}.glb"
    assert store.find_model("*") is None


def test_missing_blob(store):
    with pytest.raises(FileNotFoundError):
        store.get("models/nope.glb")
    assert not store.exists("models/nope.glb")


@pytest.mark.parametrize("key", ["", "../escape.glb", "models/../../x"])
def test_invalid_keys(store, key):
    with pytest.raises(ValueError):
        store.put(key, b"x")


def test_asset_ids_are_fresh_uuids():
    ids = {new_asset_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(uuid.UUID(i).version == 4 for i in ids)


def test_content_types():
    assert content_type_for("models/x.glb") == "model/gltf-binary"
    assert content_type_for("models/x.GLTF") == "model/gltf+json"
    assert content_type_for("models/x.png") == "image/png"


def test_base_url_from_host():
    assert base_url("localhost:3000") == "http://localhost:3000"
    assert base_url("127.0.0.1:8000") == "http://127.0.0.1:8000"
    assert base_url("ar.example.com") == "https://ar.example.com"
    assert base_url("anything", public_base_url="https://cdn.example.com/") == "https://cdn.example.com"


def test_share_urls():
    assert view_url("https://x.io", "abc") == "https://x.io/view/abc"
    assert blob_url("https://x.io", "models/abc.glb") == "https://x.io/api/blobs/models/abc.glb"


def test_qr_data_url_is_png_near_requested_size():
    url = qr_data_url("https://ar.example.com/view/" + new_asset_id(), size=512, margin=2)
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    img = Image.open(io.BytesIO(base64.b64decode(url[len(prefix):])))
    assert img.format == "PNG"
    assert img.size[0] == img.size[1]
    assert 256 < img.size[0] <= 512
