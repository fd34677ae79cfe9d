"""Tests for the extractor registry."""

import pytest

import arforge.engine.extractors  # noqa: F401
from arforge.engine.context import InputKind
from arforge.engine.registry import ExtractorRegistry, ExtractorSpec, get_registry


def _noop(request, config):
    return []


def test_register_and_get():
    reg = ExtractorRegistry()
    spec = ExtractorSpec(kind=InputKind.SVG, fn=_noop, description="test")
    reg.register(spec)
    assert reg.get(InputKind.SVG) is spec
    assert reg.count == 1


def test_duplicate_kind_rejected():
    reg = ExtractorRegistry()
    reg.register(ExtractorSpec(kind=InputKind.TEXT, fn=_noop))
    with pytest.raises(ValueError, match="Duplicate"):
        reg.register(ExtractorSpec(kind=InputKind.TEXT, fn=_noop))


def test_missing_kind():
    with pytest.raises(KeyError):
        ExtractorRegistry().get(InputKind.PHOTO)


def test_default_registry_covers_every_input_kind():
    registry = get_registry()
    assert registry.count == len(InputKind)
    assert [s.kind for s in registry.all()] == sorted(InputKind, key=lambda k: k.value)
