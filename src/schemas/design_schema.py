"""Pydantic models for extracted, matched, and aggregated slide designs.

An ExtractedDesign describes one reference slide as a vision model saw it.
An AggregatedDesignSpec merges many of them into one house style. Both carry
a DesignSpec: the single canonical style a renderer applies to a slide.

Attribute names are snake_case; the camelCase aliases are the field names
generative backends read and write.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.utils.color_utils import normalize_palette


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_TITLE_FONT = "Poppins"
DEFAULT_BODY_FONT = "Inter"
DEFAULT_FONT_SIZES = [44, 32, 18, 16]
DEFAULT_FONT_WEIGHTS = ["normal", "bold"]
DEFAULT_LAYOUT = "title-and-bullets"
DEFAULT_MARGINS = [40, 40, 40, 40]
DEFAULT_PADDING = [20, 20, 20, 20]
DEFAULT_QUALITY_SCORE = 70

_LEADING_NUMBER = re.compile(r"^-?\d+(?:\.\d+)?")


def coerce_pixel_value(v) -> Optional[int]:
    """Read 18, 18.5 or "18px" as an integer pixel value; None when not numeric."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return int(round(v))
    if isinstance(v, str):
        match = _LEADING_NUMBER.match(v.strip())
        return int(round(float(match.group(0)))) if match else None
    return None


class _AliasedModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Canonical per-slide style
# ---------------------------------------------------------------------------

class CustomColors(_AliasedModel):
    """Brand colours a renderer uses for accents, shapes and highlights."""

    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None


class DesignSpec(_AliasedModel):
    """Single canonical style for one slide.

    background_color may be a hex code or one of the named gradients the
    renderer understands ('light-blue', 'dark-blue', 'white', 'gray', 'green').
    """

    background_color: str = Field(default="light-blue", description="Hex code or named background")
    text_color: str = Field(default="black", description="Hex code, 'black' or 'white'")
    layout: str = Field(default=DEFAULT_LAYOUT, description="Layout tag, e.g. 'two-column'")
    icon: str = Field(default="none", description="none | book | idea | warning | check")
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    font_size: Optional[int] = Field(default=None, alias="fontSize")
    custom_colors: Optional[CustomColors] = Field(default=None, alias="customColors")

    @field_validator("font_size", mode="before")
    @classmethod
    def _coerce_font_size(cls, v):
        # Models answer "18px" or 18.5 as often as 18
        return coerce_pixel_value(v)


# ---------------------------------------------------------------------------
# Typography / spacing
# ---------------------------------------------------------------------------

class TypographySpec(_AliasedModel):
    """Ordered font names, sizes (px) and weights: title first, then body."""

    fonts: list[str] = Field(default_factory=lambda: [DEFAULT_TITLE_FONT, DEFAULT_BODY_FONT])
    sizes: list[int] = Field(default_factory=lambda: list(DEFAULT_FONT_SIZES))
    weights: list[str] = Field(default_factory=lambda: list(DEFAULT_FONT_WEIGHTS))


class SpacingSpec(_AliasedModel):
    """Margins and padding in pixels: [top, right, bottom, left]."""

    margins: list[int] = Field(default_factory=lambda: list(DEFAULT_MARGINS))
    padding: list[int] = Field(default_factory=lambda: list(DEFAULT_PADDING))


# ---------------------------------------------------------------------------
# Extracted / aggregated / matched designs
# ---------------------------------------------------------------------------

class ExtractedDesign(_AliasedModel):
    """Structured analysis of one reference slide image."""

    color_palette: list[str] = Field(
        default_factory=list,
        alias="colorPalette",
        description="Hex colours ordered by prominence, most used first",
    )
    typography: TypographySpec = Field(default_factory=TypographySpec)
    layout_pattern: str = Field(default=DEFAULT_LAYOUT, alias="layoutPattern")
    spacing: SpacingSpec = Field(default_factory=SpacingSpec)
    style_keywords: list[str] = Field(default_factory=list, alias="styleKeywords")
    quality_score: int = Field(default=DEFAULT_QUALITY_SCORE, ge=0, le=100, alias="qualityScore")
    design_spec: DesignSpec = Field(default_factory=DesignSpec, alias="designSpec")

    @field_validator("color_palette", mode="before")
    @classmethod
    def _normalize_colors(cls, v):
        if isinstance(v, list):
            return normalize_palette(v)
        return v


class AggregatedDesignSpec(_AliasedModel):
    """One composite style merged from a list of ExtractedDesigns."""

    color_palette: list[str] = Field(default_factory=list, alias="colorPalette")
    typography: TypographySpec = Field(default_factory=TypographySpec)
    layout_patterns: list[str] = Field(default_factory=list, alias="layoutPatterns")
    spacing: SpacingSpec = Field(default_factory=SpacingSpec)
    style_keywords: list[str] = Field(default_factory=list, alias="styleKeywords")
    quality_score: int = Field(default=80, alias="qualityScore")
    design_spec: DesignSpec = Field(default_factory=DesignSpec, alias="designSpec")


class MatchedDesign(_AliasedModel):
    """A ranked exemplar returned by the matching engine. Never persisted."""

    design_id: str = Field(alias="designId")
    match_score: float = Field(alias="matchScore", description="0-100, rounded to 2 decimals")
    keywords: list[str] = Field(default_factory=list)
    extracted_design: ExtractedDesign = Field(alias="extractedDesign")
    category: Optional[str] = None
