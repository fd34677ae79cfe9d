"""ARForge mesh generation and GLB packaging engine."""

from arforge.engine.context import (
    GeometryUnit,
    GroupingMode,
    InputKind,
    PhotoInput,
    PipelineContext,
    RenderGroup,
    SvgInput,
    TextInput,
)
from arforge.engine.pipeline import Pipeline, create_pipeline
from arforge.engine.registry import extractor, get_registry

__all__ = [
    "extractor",
    "get_registry",
    "GeometryUnit",
    "GroupingMode",
    "InputKind",
    "PhotoInput",
    "PipelineContext",
    "RenderGroup",
    "SvgInput",
    "TextInput",
    "Pipeline",
    "create_pipeline",
]
