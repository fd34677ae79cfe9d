"""FastAPI dependency injection."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Request

from arforge.config import Settings, settings
from arforge.engine.config import PipelineConfig
from arforge.engine.pipeline import Pipeline, create_pipeline
from arforge.storage.blob_store import LocalBlobStore
from arforge.storage.share import base_url


def get_settings() -> Settings:
    return settings


@lru_cache(maxsize=1)
def _pipeline(font_file: str) -> Pipeline:
    return create_pipeline(PipelineConfig(font_file=font_file))


def get_pipeline(cfg: Settings = Depends(get_settings)) -> Pipeline:
    return _pipeline(cfg.font_file)


def get_store(cfg: Settings = Depends(get_settings)) -> LocalBlobStore:
    return LocalBlobStore(cfg.storage_dir)


def get_base_url(request: Request, cfg: Settings = Depends(get_settings)) -> str:
    return base_url(request.headers.get("host"), cfg.public_base_url)
