from .design_schema import (
    CustomColors, DesignSpec, TypographySpec, SpacingSpec,
    ExtractedDesign, AggregatedDesignSpec, MatchedDesign,
)
from .exemplar_schema import DesignExemplar, ExemplarRegistry, normalize_keywords
from .outline_schema import (
    SlideSpec, Outline, ManualSlideTemplate, ManualDesignSet,
    DesignSetSummary, ActiveDesignSet,
)

__all__ = [
    "CustomColors",
    "DesignSpec",
    "TypographySpec",
    "SpacingSpec",
    "ExtractedDesign",
    "AggregatedDesignSpec",
    "MatchedDesign",
    "DesignExemplar",
    "ExemplarRegistry",
    "normalize_keywords",
    "SlideSpec",
    "Outline",
    "ManualSlideTemplate",
    "ManualDesignSet",
    "DesignSetSummary",
    "ActiveDesignSet",
]
