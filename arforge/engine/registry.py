"""Extractor registry — one extractor function per input kind, registered via decorator.

Usage:
    @extractor(kind=InputKind.SVG, description="Extrude SVG shapes")
    def extract_svg(request: SvgInput, config: PipelineConfig) -> list[GeometryUnit]:
        ...

Dispatch is by the request's ``kind`` tag; the set of kinds is closed (InputKind).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from arforge.engine.context import InputKind

if TYPE_CHECKING:
    from arforge.engine.config import PipelineConfig
    from arforge.engine.context import GenerationInput, GeometryUnit

logger = logging.getLogger(__name__)

ExtractorFn = Callable[["GenerationInput", "PipelineConfig"], "list[GeometryUnit]"]


@dataclass
class ExtractorSpec:
    kind: InputKind
    fn: ExtractorFn
    description: str = ""


class ExtractorRegistry:
    """Registry of extractors keyed by input kind."""

    def __init__(self) -> None:
        self._extractors: dict[InputKind, ExtractorSpec] = {}

    def register(self, spec: ExtractorSpec) -> None:
        if spec.kind in self._extractors:
            raise ValueError(f"Duplicate extractor for input kind: {spec.kind.value}")
        self._extractors[spec.kind] = spec
        logger.debug("Registered extractor for %s", spec.kind.value)

    def get(self, kind: InputKind) -> ExtractorSpec:
        try:
            return self._extractors[kind]
        except KeyError:
            raise KeyError(f"No extractor registered for input kind: {kind.value}") from None

    def all(self) -> list[ExtractorSpec]:
        return sorted(self._extractors.values(), key=lambda s: s.kind.value)

    @property
    def count(self) -> int:
        return len(self._extractors)


# Module-level singleton
_registry = ExtractorRegistry()


def get_registry() -> ExtractorRegistry:
    return _registry


def extractor(*, kind: InputKind, description: str = ""):
    """Decorator to register an extractor function."""

    def decorator(fn: ExtractorFn):
        _registry.register(ExtractorSpec(kind=kind, fn=fn, description=description))
        return fn

    return decorator
