"""Local filesystem blob store for generated and uploaded models.

Keys look like ``models/<id>.glb``. Each key is written once: the bytes go to a
temporary file in the target directory and are renamed into place.
"""

from __future__ import annotations

import glob
import logging
import mimetypes
import os
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MODELS_PREFIX = "models/"

CONTENT_TYPES = {
    ".glb": "model/gltf-binary",
    ".gltf": "model/gltf+json",
}


def new_asset_id() -> str:
    return str(uuid.uuid4())


def model_key(asset_id: str, ext: str = ".glb") -> str:
    return f"{MODELS_PREFIX}{asset_id}{ext}"


def content_type_for(key: str) -> str:
    ext = Path(key).suffix.lower()
    if ext in CONTENT_TYPES:
        return CONTENT_TYPES[ext]
    guessed, _ = mimetypes.guess_type(key)
    return guessed or "application/octet-stream"


class BlobExistsError(Exception):
    pass


@dataclass(frozen=True)
class StoredBlob:
    key: str
    size: int
    content_type: str


class LocalBlobStore:
    """Blobs under a root directory, addressed by slash-separated keys."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        parts = [p for p in key.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.root.joinpath(*parts)

    def put(self, key: str, data: bytes, content_type: str | None = None) -> StoredBlob:
        path = self._path(key)
        if path.exists():
            raise BlobExistsError(f"Blob already exists: {key}")
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".upload-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

        blob = StoredBlob(key=key, size=len(data), content_type=content_type or content_type_for(key))
        logger.info("Stored blob %s (%d bytes)", key, len(data))
        return blob

    def get(self, key: str) -> bytes:
        path = self._path(key)
        if not path.is_file():
            raise FileNotFoundError(key)
        return path.read_bytes()

    def exists(self, key: str) -> bool:
        try:
            return self._path(key).is_file()
        except ValueError:
            return False

    def list(self, prefix: str) -> list[str]:
        """Keys starting with prefix, sorted."""
        if not self.root.is_dir():
            return []
        keys = []
        for path in self.root.rglob("*"):
            if not path.is_file() or path.name.startswith(".upload-"):
                continue
            key = path.relative_to(self.root).as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)

    def find_model(self, asset_id: str) -> str | None:
        """Key of the stored model for an asset id, whatever its extension."""
        if not asset_id or "/" in asset_id or "\\" in asset_id or asset_id in (".", ".."):
            return None
        models_dir = self.root / MODELS_PREFIX.rstrip("/")
        if not models_dir.is_dir():
            return None
        matches = sorted(
            path.name
            for path in models_dir.glob(f"{glob.escape(asset_id)}.*")
            if path.is_file() and path.stem == asset_id
        )
        return f"{MODELS_PREFIX}{matches[0]}" if matches else None
