"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    arforge_env: str = "development"
    arforge_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Blob storage (local filesystem)
    storage_dir: str = "data/blobs"

    # Absolute base for viewer/blob URLs; derived from the Host header when empty
    public_base_url: str = ""

    # Glyph outline font for text mode; empty = bundled DejaVu Sans Bold
    font_file: str = ""

    max_upload_bytes: int = 20 * 1024 * 1024

    # QR code rendering
    qr_size: int = 512
    qr_margin: int = 2

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
