"""Category design analysis: what stored exemplars of a category have in common.

Recommendations come from frequency counts over the newest exemplars of a
category. A design can then be scored against them:

  colours  (0-40)  share of the design's colours that are recommended
  layouts  (0-30)  share of the design's layouts that are recommended
  fonts    (0-30)  15 each for title and body font matching the top two
"""

import logging
from typing import Union

from pydantic import BaseModel, Field

from src.design_engine.aggregator import round_half_up, top_frequent
from src.design_engine.exemplar_store import ExemplarStore
from src.schemas.design_schema import AggregatedDesignSpec, ExtractedDesign
from src.utils.color_utils import normalize_color

logger = logging.getLogger(__name__)

CATEGORY_SAMPLE_SIZE = 20
TOP_PATTERN_COLORS = 10
RECOMMENDED_COLORS = 5
RECOMMENDED_FONTS = 2

DEFAULT_RECOMMENDED_COLORS = ["#1565C0", "#FFFFFF", "#212121"]
DEFAULT_RECOMMENDED_LAYOUTS = ["title-and-bullets", "title-only"]
DEFAULT_RECOMMENDED_FONTS = ["Poppins", "Inter"]
DEFAULT_STYLE_GUIDANCE = "Professional and clean design"

COLOR_WEIGHT = 40
LAYOUT_WEIGHT = 30
FONT_WEIGHT = 15


class DesignPatterns(BaseModel):
    common_colors: list[str] = Field(default_factory=list, description="Top colours, most frequent first")
    common_layouts: list[str] = Field(default_factory=list)
    common_fonts: list[str] = Field(default_factory=list)
    style_trends: list[str] = Field(default_factory=list, description="Distinct style keywords, first-seen order")


class DesignRecommendations(BaseModel):
    category: str
    recommended_colors: list[str]
    recommended_layouts: list[str]
    recommended_fonts: list[str]
    style_guidance: str
    sample_size: int = 0


class DesignComparison(BaseModel):
    match_score: int = Field(ge=0, le=100)
    recommendations: list[str] = Field(default_factory=list)


def analyze_design_patterns(designs: list[ExtractedDesign]) -> DesignPatterns:
    colors = [c for c in (normalize_color(c) for d in designs for c in d.color_palette) if c]
    keywords = [k for d in designs for k in d.style_keywords]
    return DesignPatterns(
        common_colors=top_frequent(colors, TOP_PATTERN_COLORS),
        common_layouts=top_frequent([d.layout_pattern for d in designs if d.layout_pattern], None),
        common_fonts=top_frequent([f for d in designs for f in d.typography.fonts], None),
        style_trends=list(dict.fromkeys(keywords)),
    )


def style_guidance(patterns: DesignPatterns, category: str) -> str:
    trends = ", ".join(patterns.style_trends)
    layouts = ", ".join(patterns.common_layouts)
    return f"Based on {category} design trends: Use {trends} style. Preferred layouts: {layouts}."


def generate_design_recommendations(
    store: ExemplarStore,
    category: str,
    limit: int = CATEGORY_SAMPLE_SIZE,
) -> DesignRecommendations:
    """Colours, layouts and fonts favoured by the newest exemplars of ``category``.

    Falls back to a neutral professional palette when the category has no
    exemplar with a stored spec.
    """
    members = sorted(store.find_by_category(category), key=lambda e: e.created_at, reverse=True)
    designs = [e.extracted_spec for e in members[:limit] if e.extracted_spec is not None]

    if not designs:
        logger.info(f"No analyzed designs in category {category!r}, using default recommendations")
        return DesignRecommendations(
            category=category,
            recommended_colors=list(DEFAULT_RECOMMENDED_COLORS),
            recommended_layouts=list(DEFAULT_RECOMMENDED_LAYOUTS),
            recommended_fonts=list(DEFAULT_RECOMMENDED_FONTS),
            style_guidance=DEFAULT_STYLE_GUIDANCE,
        )

    patterns = analyze_design_patterns(designs)
    return DesignRecommendations(
        category=category,
        recommended_colors=patterns.common_colors[:RECOMMENDED_COLORS],
        recommended_layouts=patterns.common_layouts,
        recommended_fonts=patterns.common_fonts[:RECOMMENDED_FONTS],
        style_guidance=style_guidance(patterns, category),
        sample_size=len(designs),
    )


def _design_layouts(design: Union[ExtractedDesign, AggregatedDesignSpec]) -> list[str]:
    if isinstance(design, AggregatedDesignSpec):
        return list(design.layout_patterns)
    return [design.layout_pattern] if design.layout_pattern else []


def score_against_recommendations(
    design: Union[ExtractedDesign, AggregatedDesignSpec],
    recommendations: DesignRecommendations,
) -> DesignComparison:
    """Score ``design`` against category recommendations and list suggested changes."""
    colors = [normalize_color(c) for c in design.color_palette if normalize_color(c)]
    layouts = _design_layouts(design)
    fonts = design.typography.fonts
    recommended_fonts = recommendations.recommended_fonts

    color_hits = [c for c in colors if c in recommendations.recommended_colors]
    layout_hits = [layout for layout in layouts if layout in recommendations.recommended_layouts]

    score = 0.0
    if colors:
        score += len(color_hits) / len(colors) * COLOR_WEIGHT
    score += len(layout_hits) / max(len(layouts), 1) * LAYOUT_WEIGHT
    if fonts and recommended_fonts and fonts[0] == recommended_fonts[0]:
        score += FONT_WEIGHT
    if len(fonts) > 1 and len(recommended_fonts) > 1 and fonts[1] == recommended_fonts[1]:
        score += FONT_WEIGHT

    suggestions = []
    if len(color_hits) < len(colors):
        suggestions.append(f"Consider using colors: {', '.join(recommendations.recommended_colors[:3])}")
    if len(layout_hits) < len(layouts):
        suggestions.append(f"Consider using layouts: {', '.join(recommendations.recommended_layouts)}")

    return DesignComparison(match_score=min(100, round_half_up(score)), recommendations=suggestions)


def compare_design_to_category(
    store: ExemplarStore,
    design: Union[ExtractedDesign, AggregatedDesignSpec],
    category: str,
) -> DesignComparison:
    comparison = score_against_recommendations(design, generate_design_recommendations(store, category))
    logger.info(f"Design scored {comparison.match_score} against category {category!r}")
    return comparison
