"""Tests for category design analysis."""

import pytest

from src.design_engine.aggregator import default_aggregated_spec
from src.design_engine.analyzer import (
    DEFAULT_RECOMMENDED_COLORS,
    compare_design_to_category,
    generate_design_recommendations,
    score_against_recommendations,
)
from src.design_engine.exemplar_store import ExemplarStore
from src.schemas.design_schema import ExtractedDesign, TypographySpec


def _design(palette, layout, fonts, keywords=()):
    return ExtractedDesign(
        color_palette=list(palette),
        layout_pattern=layout,
        typography=TypographySpec(fonts=list(fonts)),
        style_keywords=list(keywords),
    )


@pytest.fixture
def education_store(make_exemplar):
    store = ExemplarStore()
    store.add(make_exemplar(category="education", minutes=3,
                            spec=_design(["#111111", "#222222"], "two-column", ["Georgia", "Lato"], ["calm"])))
    store.add(make_exemplar(category="Education", minutes=2,
                            spec=_design(["#111111"], "two-column", ["Georgia", "Inter"], ["calm", "bright"])))
    store.add(make_exemplar(category="education", minutes=1,
                            spec=_design(["#333333"], "title-only", ["Lato"])))
    store.add(make_exemplar(category="sales", minutes=4,
                            spec=_design(["#999999"], "image-left", ["Arial"], ["loud"])))
    store.add(make_exemplar(category="education", minutes=5, spec=False))
    return store


class TestRecommendations:
    def test_empty_category_uses_defaults(self):
        recs = generate_design_recommendations(ExemplarStore(), "history")
        assert recs.recommended_colors == DEFAULT_RECOMMENDED_COLORS
        assert recs.recommended_layouts == ["title-and-bullets", "title-only"]
        assert recs.recommended_fonts == ["Poppins", "Inter"]
        assert recs.style_guidance == "Professional and clean design"
        assert recs.sample_size == 0

    def test_frequency_ranked_from_category_only(self, education_store):
        recs = generate_design_recommendations(education_store, "education")
        assert recs.sample_size == 3
        assert recs.recommended_colors == ["#111111", "#222222", "#333333"]
        assert recs.recommended_layouts == ["two-column", "title-only"]
        assert recs.recommended_fonts == ["Georgia", "Lato"]
        assert recs.style_guidance == (
            "Based on education design trends: Use calm, bright style. "
            "Preferred layouts: two-column, title-only."
        )

    def test_newest_exemplars_sampled(self, education_store):
        recs = generate_design_recommendations(education_store, "education", limit=2)
        # the newest member has no stored spec, leaving one design
        assert recs.sample_size == 1
        assert recs.recommended_colors == ["#111111", "#222222"]


class TestCompareDesign:
    def test_weighted_score_and_suggestions(self, education_store):
        design = _design(["#111111", "#abcdef"], "two-column", ["Georgia", "Lato"])
        comparison = compare_design_to_category(education_store, design, "education")
        # colours 1/2 * 40 + layout 30 + fonts 15 + 15
        assert comparison.match_score == 80
        assert comparison.recommendations == ["Consider using colors: #111111, #222222, #333333"]

    def test_partial_colour_share_rounded(self, education_store):
        recs = generate_design_recommendations(education_store, "education")
        design = _design(["#111111", "#444444", "#555555"], "image-right", ["Arial", "Lato"])
        comparison = score_against_recommendations(design, recs)
        # 1/3 * 40 = 13.33, plus the body font match
        assert comparison.match_score == 28
        assert "Consider using layouts: two-column, title-only" in comparison.recommendations

    def test_aggregated_spec_against_defaults(self):
        comparison = compare_design_to_category(ExemplarStore(), default_aggregated_spec(), "history")
        # no colours, one recommended layout, no font match
        assert comparison.match_score == 30
        assert comparison.recommendations == []
