"""Tests for Pydantic schema models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from src.schemas.design_schema import DesignSpec, ExtractedDesign, MatchedDesign
from src.schemas.exemplar_schema import DesignExemplar, normalize_keywords
from src.schemas.outline_schema import ManualDesignSet, SlideSpec


class TestDesignSchema:
    def test_design_spec_defaults(self):
        spec = DesignSpec()
        assert spec.background_color == "light-blue"
        assert spec.text_color == "black"
        assert spec.layout == "title-and-bullets"
        assert spec.icon == "none"
        assert spec.custom_colors is None

    def test_aliases_both_ways(self):
        spec = DesignSpec.model_validate({"fontFamily": "Inter", "font_size": "18px"})
        assert spec.font_family == "Inter"
        assert spec.font_size == 18
        dumped = spec.model_dump(by_alias=True)
        assert dumped["fontFamily"] == "Inter"
        assert dumped["fontSize"] == 18

    def test_extracted_design_normalizes_palette(self):
        design = ExtractedDesign.model_validate({"colorPalette": ["#abc123", "def456", "navy", 7, " "]})
        assert design.color_palette == ["#ABC123", "#DEF456", "navy"]

    def test_quality_bounds(self):
        with pytest.raises(ValidationError):
            ExtractedDesign(quality_score=101)

    def test_matched_design_alias_dump(self):
        m = MatchedDesign(design_id="d", match_score=1.5, extracted_design=ExtractedDesign())
        assert m.model_dump(by_alias=True)["designId"] == "d"


class TestExemplarSchema:
    def test_normalize_keywords(self):
        assert normalize_keywords([" Blue", "blue", "", "Red"]) == ["blue", "red"]

    def test_defaults(self):
        e = DesignExemplar()
        assert e.id
        assert e.usage_count == 0
        assert e.keywords == []
        assert e.created_at.tzinfo is not None

    def test_naive_created_at_taken_as_utc(self):
        e = DesignExemplar.model_validate({"created_at": "2026-01-01T00:00:00"})
        assert e.created_at == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_negative_usage_rejected(self):
        with pytest.raises(ValidationError):
            DesignExemplar(usage_count=-1)

    @pytest.mark.parametrize("category, expected", [
        ("user-set:abc", "abc"),
        ("User-Set:ABC", "ABC"),
        ("user-set:", None),
        ("user-uploaded", None),
        (None, None),
    ])
    def test_set_id(self, category, expected):
        assert DesignExemplar(category=category).set_id == expected


class TestOutlineSchema:
    def test_slide_defaults(self):
        slide = SlideSpec.model_validate({"slide_title": " Intro ", "design": {}})
        assert slide.slide_title == "Intro"
        assert slide.bullets == []

    def test_slide_requires_design(self):
        with pytest.raises(ValidationError):
            SlideSpec.model_validate({"slide_title": "Intro"})

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            SlideSpec.model_validate({"slide_title": "   ", "design": {}})

    def test_manual_set_preset_literal(self):
        with pytest.raises(ValidationError):
            ManualDesignSet(id="x", name="X", preset="retro")
