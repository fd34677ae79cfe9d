"""Pipeline configuration — extrusion profiles, normalization and material presets."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BevelProfile:
    """Bevel applied around the front and back caps of an extruded shape."""

    thickness: float = 0.0
    size: float = 0.0
    segments: int = 0

    @property
    def enabled(self) -> bool:
        return self.segments > 0 and (self.thickness > 0 or self.size > 0)


@dataclass(frozen=True)
class MaterialPreset:
    """PBR factors applied to every material of a request."""

    metallic: float = 0.0
    roughness: float = 1.0
    double_sided: bool = False


@dataclass
class PipelineConfig:
    """Constants that shape generated geometry."""

    # Larger XY extent after normalization
    target_size: float = 2.0

    # Points per flattened quadratic/cubic/arc segment
    curve_segments: int = 12

    # Depth parameter (1-10 scale) → absolute extrusion depth
    depth_unit: float = 0.1

    # Text: glyphs laid out at font size 1; empty font_file = bundled DejaVu Sans Bold
    font_file: str = ""
    font_size: float = 1.0
    line_spacing: float = 1.2
    text_bevel: BevelProfile = field(
        default_factory=lambda: BevelProfile(thickness=0.03, size=0.02, segments=5)
    )

    # SVG logos: depth is in SVG user units
    logo_bevel: BevelProfile = field(
        default_factory=lambda: BevelProfile(thickness=0.02, size=0.01, segments=3)
    )
    logo_material: MaterialPreset = field(
        default_factory=lambda: MaterialPreset(metallic=0.3, roughness=0.7)
    )

    # Photo: textured flat quad
    photo_quad_size: float = 1.0
    photo_material: MaterialPreset = field(
        default_factory=lambda: MaterialPreset(metallic=0.0, roughness=1.0, double_sided=True)
    )

    # Bevel offset vectors are clamped to this multiple of the bevel size
    miter_limit: float = 2.0

    def text_material(self, gloss: int) -> MaterialPreset:
        """Gloss (0-10) → metallic gloss/10, roughness 1 - metallic."""
        metallic = gloss * 0.1
        return MaterialPreset(metallic=metallic, roughness=1 - metallic)
