"""Aggregation Engine: merges many extracted designs into one house style.

Categorical attributes (colours, fonts, weights, layouts, style keywords)
are ranked by frequency; numeric vectors (font sizes, margins, padding) are
averaged position by position. The result is a pure function of the input
list: the same designs always give the same spec.
"""

import logging
import math
from collections import Counter
from typing import Hashable, Optional, Sequence

from src.schemas.design_schema import (
    AggregatedDesignSpec,
    CustomColors,
    DesignSpec,
    ExtractedDesign,
    SpacingSpec,
    TypographySpec,
)
from src.utils.color_utils import normalize_color

logger = logging.getLogger(__name__)

DEFAULT_FONTS = ["Montserrat", "Open Sans"]
DEFAULT_SIZES = [48, 32, 18, 16]
DEFAULT_WEIGHTS = ["normal", "bold"]
DEFAULT_LAYOUT = "title-and-bullets"
DEFAULT_MARGINS = [40, 40, 40, 40]
DEFAULT_PADDING = [20, 20, 20, 20]
DEFAULT_QUALITY = 80

DEFAULT_PRIMARY = "#FF8A00"
DEFAULT_SECONDARY = "#2D3542"
DEFAULT_ACCENT = "#FFFFFF"
# Always white, whatever the background. Not contrast-aware.
AGGREGATE_TEXT_COLOR = "#FFFFFF"
DEFAULT_FONT_SIZE = 32

TOP_COLORS = 8
TOP_LAYOUTS = 4
TOP_FONTS = 4
TOP_WEIGHTS = 4
TOP_KEYWORDS = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def top_frequent(items: Sequence[Hashable], limit: Optional[int]) -> list:
    """Most frequent items, count desc, first-seen order on ties. None keeps all."""
    # Counter keeps insertion order and most_common() sorts stably
    return [item for item, _ in Counter(items).most_common(limit)]


def average_vectors(vectors: list[list[int]], fallback: list[int]) -> list[int]:
    """Position-wise rounded mean over the vectors that have a value there.

    Positions nobody fills take the fallback value at that position, or its
    last element. When no vector has any value, the fallback is returned.
    """
    longest = max((len(v) for v in vectors), default=0)
    if longest == 0:
        return list(fallback)

    result = []
    for i in range(longest):
        values = [v[i] for v in vectors if i < len(v)]
        if values:
            result.append(round_half_up(sum(values) / len(values)))
        else:
            result.append(fallback[i] if i < len(fallback) else (fallback[-1] if fallback else 0))
    return result


def default_aggregated_spec() -> AggregatedDesignSpec:
    """The house style used when there is nothing to aggregate."""
    return AggregatedDesignSpec(
        color_palette=[],
        typography=TypographySpec(
            fonts=list(DEFAULT_FONTS),
            sizes=list(DEFAULT_SIZES),
            weights=list(DEFAULT_WEIGHTS),
        ),
        layout_patterns=[DEFAULT_LAYOUT],
        spacing=SpacingSpec(margins=list(DEFAULT_MARGINS), padding=list(DEFAULT_PADDING)),
        style_keywords=[],
        quality_score=DEFAULT_QUALITY,
        design_spec=DesignSpec(
            background_color=DEFAULT_PRIMARY,
            text_color=AGGREGATE_TEXT_COLOR,
            layout=DEFAULT_LAYOUT,
            icon="none",
            font_family=DEFAULT_FONTS[0],
            font_size=DEFAULT_FONT_SIZE,
            custom_colors=CustomColors(
                primary=DEFAULT_PRIMARY,
                secondary=DEFAULT_SECONDARY,
                accent=DEFAULT_ACCENT,
            ),
        ),
    )


def aggregate_designs(designs: list[ExtractedDesign]) -> AggregatedDesignSpec:
    """Merge a list of extracted designs into one AggregatedDesignSpec."""
    if not designs:
        logger.debug("No designs to aggregate, returning default spec")
        return default_aggregated_spec()

    all_colors = [c for c in (normalize_color(c) for d in designs for c in d.color_palette) if c]
    all_layouts = [d.layout_pattern for d in designs if d.layout_pattern]
    all_fonts = [f for d in designs for f in d.typography.fonts]
    all_weights = [w for d in designs for w in d.typography.weights]
    all_keywords = [k for d in designs for k in d.style_keywords]
    qualities = [d.quality_score for d in designs if d.quality_score is not None]

    palette = top_frequent(all_colors, TOP_COLORS)
    layouts = top_frequent(all_layouts, TOP_LAYOUTS)
    fonts = top_frequent(all_fonts, TOP_FONTS)
    weights = top_frequent(all_weights, TOP_WEIGHTS)
    keywords = top_frequent(all_keywords, TOP_KEYWORDS)

    sizes = average_vectors([d.typography.sizes for d in designs], DEFAULT_SIZES)
    margins = average_vectors([d.spacing.margins for d in designs], DEFAULT_MARGINS)
    padding = average_vectors([d.spacing.padding for d in designs], DEFAULT_PADDING)

    quality = round_half_up(sum(qualities) / len(qualities)) if qualities else DEFAULT_QUALITY

    primary = palette[0] if palette else DEFAULT_PRIMARY

    spec = AggregatedDesignSpec(
        color_palette=palette,
        typography=TypographySpec(
            fonts=fonts or list(DEFAULT_FONTS),
            sizes=sizes,
            weights=weights or list(DEFAULT_WEIGHTS),
        ),
        layout_patterns=layouts or [DEFAULT_LAYOUT],
        spacing=SpacingSpec(margins=margins, padding=padding),
        style_keywords=keywords,
        quality_score=quality,
        design_spec=DesignSpec(
            background_color=primary,
            text_color=AGGREGATE_TEXT_COLOR,
            layout=layouts[0] if layouts else DEFAULT_LAYOUT,
            icon="none",
            font_family=fonts[0] if fonts else DEFAULT_FONTS[0],
            font_size=sizes[0] if sizes else DEFAULT_FONT_SIZE,
            custom_colors=CustomColors(
                primary=primary,
                secondary=palette[1] if len(palette) > 1 else DEFAULT_SECONDARY,
                accent=palette[2] if len(palette) > 2 else DEFAULT_ACCENT,
            ),
        ),
    )
    logger.info(
        f"Aggregated {len(designs)} designs: {len(palette)} colours, "
        f"fonts={spec.typography.fonts}, quality={quality}"
    )
    return spec
