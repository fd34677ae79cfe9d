"""API response models. Field aliases are the JSON wire names."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    extractors_registered: int = 0


class ShareResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    qr_code: str = Field(..., alias="qrCode", description="PNG QR code as a data URL")
    view_url: str = Field(..., alias="viewUrl")
    id: str
    blob_url: str = Field(..., alias="blobUrl")


class CheckModelResponse(BaseModel):
    exists: bool
    src: str | None = None


class ErrorResponse(BaseModel):
    error: str
    stage: str | None = None
