"""Pipeline orchestrator — runs the generation stages in order for one request.

extract → normalize → group → assemble → package

A stage failure ends the request: the error is stamped with the stage name,
logged and re-raised. Nothing partial is returned.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from arforge.engine.assembler import assemble
from arforge.engine.config import MaterialPreset, PipelineConfig
from arforge.engine.context import (
    RGB,
    GenerationInput,
    GroupingMode,
    InputKind,
    PipelineContext,
    SvgInput,
    TextInput,
)
from arforge.engine.grouping import group_units
from arforge.engine.normalizer import normalize
from arforge.engine.packager import PackagedAsset, package
from arforge.engine.registry import ExtractorRegistry, get_registry
from arforge.errors import AssetPipelineError, UnsupportedInput
from arforge.svg.colors import parse_color

logger = logging.getLogger(__name__)

_WHITE: RGB = (1.0, 1.0, 1.0)

# Inclusive ranges of the user-facing 1-10 depth and 0-10 gloss scales
DEPTH_RANGE = (1, 10)
GLOSS_RANGE = (0, 10)


class Pipeline:
    """Orchestrates the generation stages."""

    def __init__(
        self,
        registry: ExtractorRegistry | None = None,
        config: PipelineConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or PipelineConfig()
        self.stages: list[tuple[str, Callable[[PipelineContext], None]]] = [
            ("extract", self._extract),
            ("normalize", self._normalize),
            ("group", self._group),
            ("assemble", self._assemble),
            ("package", self._package),
        ]

    def run(self, ctx: PipelineContext) -> PipelineContext:
        """Run every stage on the given context."""
        start = time.perf_counter()
        for name, stage in self.stages:
            t0 = time.perf_counter()
            try:
                stage(ctx)
            except AssetPipelineError as e:
                if e.stage is None:
                    e.stage = name
                logger.warning("  %s FAILED for %s request: %s", name, ctx.kind.value, e.message)
                raise
            elapsed = (time.perf_counter() - t0) * 1000
            ctx.completed_stages.append(name)
            ctx.timings_ms[name] = round(elapsed, 1)
            logger.debug("  %s completed in %.1fms", name, elapsed)

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Pipeline complete: %s request → %d bytes in %.0fms",
            ctx.kind.value,
            ctx.packaged.byte_length,
            total,
        )
        return ctx

    def generate(self, request: GenerationInput) -> PackagedAsset:
        """Convenience wrapper: input in, GLB out."""
        return self.run(PipelineContext(request=request)).packaged

    # -- stages ------------------------------------------------------------

    def _extract(self, ctx: PipelineContext) -> None:
        self.check_ranges(ctx.request)
        try:
            spec = self.registry.get(ctx.kind)
        except KeyError as e:
            raise UnsupportedInput(str(e.args[0])) from e
        ctx.units = spec.fn(ctx.request, self.config)

    def _normalize(self, ctx: PipelineContext) -> None:
        ctx.normalized, ctx.center, ctx.scale = normalize(ctx.units, self.config.target_size)

    def _group(self, ctx: PipelineContext) -> None:
        ctx.groups = group_units(
            ctx.normalized,
            self.grouping_mode(ctx.request),
            self.fallback_color(ctx.request),
        )

    def _assemble(self, ctx: PipelineContext) -> None:
        ctx.asset = assemble(ctx.groups, self.material(ctx.request), name=ctx.kind.value)

    def _package(self, ctx: PipelineContext) -> None:
        ctx.packaged = package(ctx.asset)

    # -- per-kind policy ---------------------------------------------------

    @staticmethod
    def check_ranges(request: GenerationInput) -> None:
        depth = getattr(request, "depth", None)
        if depth is not None and not DEPTH_RANGE[0] <= depth <= DEPTH_RANGE[1]:
            raise UnsupportedInput(
                f"Depth must be between {DEPTH_RANGE[0]} and {DEPTH_RANGE[1]}, got {depth}"
            )
        if isinstance(request, TextInput) and not GLOSS_RANGE[0] <= request.gloss <= GLOSS_RANGE[1]:
            raise UnsupportedInput(
                f"Gloss must be between {GLOSS_RANGE[0]} and {GLOSS_RANGE[1]}, got {request.gloss}"
            )

    @staticmethod
    def grouping_mode(request: GenerationInput) -> GroupingMode:
        if isinstance(request, SvgInput) and request.use_original_colors:
            return GroupingMode.PER_COLOR
        return GroupingMode.MERGED

    @staticmethod
    def fallback_color(request: GenerationInput) -> RGB:
        if request.kind == InputKind.PHOTO:
            return _WHITE
        rgb = parse_color(request.color)
        if rgb is None:
            raise UnsupportedInput(f"Not a color: {request.color!r}")
        return rgb

    def material(self, request: GenerationInput) -> MaterialPreset:
        if isinstance(request, TextInput):
            self.check_ranges(request)
            return self.config.text_material(request.gloss)
        if isinstance(request, SvgInput):
            return self.config.logo_material
        return self.config.photo_material


def create_pipeline(config: PipelineConfig | None = None) -> Pipeline:
    """Pipeline over the default registry with every extractor registered."""
    import arforge.engine.extractors  # noqa: F401

    return Pipeline(config=config)
