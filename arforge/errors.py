"""Pipeline error taxonomy.

Every failure inside the generation pipeline is one of four kinds. Each carries
the stage that raised it so callers can tell the user what went wrong and where.
"""

from __future__ import annotations


class AssetPipelineError(Exception):
    """Base class for all request-terminal pipeline failures."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class EmptyGeometry(AssetPipelineError):
    """No usable shapes, paths or glyphs in the input."""


class DegenerateGeometry(AssetPipelineError):
    """Bounding box has zero XY extent, so no scale can be derived."""


class PackagingError(AssetPipelineError):
    """Accessor or buffer-view byte ranges are inconsistent with the buffer."""


class UnsupportedInput(AssetPipelineError):
    """Wrong or missing file, or unparseable SVG, image or font."""
