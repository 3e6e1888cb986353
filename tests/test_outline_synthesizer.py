"""Tests for the outline synthesizer agent."""

import json

import pytest

from src.agents.outline_synthesizer import (
    OutlineOptions,
    OutlineSynthesizer,
    build_system_prompt,
    build_user_message,
    parse_outline,
)
from src.design_engine.aggregator import aggregate_designs
from src.design_engine.errors import (
    CredentialError,
    OutlineGenerationFailed,
    OutlineParseError,
    TransientModelError,
)
from src.schemas.design_schema import DesignSpec, ExtractedDesign, MatchedDesign
from src.schemas.outline_schema import SlideSpec

DESIGN = {"background_color": "dark-blue", "text_color": "white", "layout": "title-only", "icon": "none"}
OUTLINE = json.dumps({"slides": [
    {"slide_title": "Welcome", "bullets": ["Hello"], "design": DESIGN},
    {"slide_title": "Wrap up", "design": DESIGN},
]})


def _matched():
    design = ExtractedDesign(color_palette=["#0A84FF"], style_keywords=["clean"])
    return MatchedDesign(design_id="d1", match_score=60.0, keywords=["clean"], extracted_design=design)


class TestParseOutline:
    def test_valid(self):
        outline = parse_outline(OUTLINE, model="m1")
        assert [s.slide_title for s in outline.slides] == ["Welcome", "Wrap up"]
        assert outline.slides[1].bullets == []
        assert outline.model == "m1"

    def test_fenced_json_is_rejected(self):
        with pytest.raises(OutlineParseError):
            parse_outline("```json\n" + OUTLINE + "\n```")

    def test_missing_slides(self):
        with pytest.raises(OutlineParseError):
            parse_outline('{"title": "x"}')

    def test_slide_without_design(self):
        with pytest.raises(OutlineParseError):
            parse_outline('{"slides": [{"slide_title": "A", "bullets": []}]}')

    def test_slide_without_title(self):
        with pytest.raises(OutlineParseError) as exc_info:
            parse_outline(json.dumps({"slides": [{"slide_title": "", "design": DESIGN}]}))
        assert exc_info.value.raw_content is not None


class TestPrompts:
    def test_base_only(self):
        prompt = build_system_prompt(OutlineOptions())
        assert "LAYOUT OPTIONS" in prompt
        assert "5-12 slides" in prompt
        assert "ACTIVE DESIGN SET" not in prompt

    def test_layer_order(self):
        active = aggregate_designs([ExtractedDesign(color_palette=["#FF0000"])])
        prompt = build_system_prompt(OutlineOptions(
            design_preset="business",
            custom_design_prompt="Use lots of whitespace",
            active_design=active,
            matched_designs=[_matched()],
        ))
        positions = [
            prompt.index("LAYOUT OPTIONS"),
            prompt.index("DESIGN PRESET: BUSINESS"),
            prompt.index("Use lots of whitespace"),
            prompt.index("ACTIVE DESIGN SET"),
            prompt.index("REFERENCE DESIGNS"),
            prompt.index("OUTPUT FORMAT"),
        ]
        assert positions == sorted(positions)
        assert "#FF0000" in prompt
        assert "#0A84FF" in prompt
        assert "take priority" in prompt

    def test_no_priority_note_without_active(self):
        prompt = build_system_prompt(OutlineOptions(matched_designs=[_matched()]))
        assert "take priority" not in prompt

    def test_user_message_with_preference(self):
        message = build_user_message("Body text", "make it short", OutlineOptions())
        assert "Body text" in message
        assert "User preference: make it short" in message

    def test_refinement_message(self):
        existing = [SlideSpec(slide_title="Old", design=DesignSpec())]
        options = OutlineOptions(refinement_prompt="Fewer slides", existing_slides=existing)
        message = build_user_message("Source", None, options)
        assert message.startswith("Refine this presentation")
        assert '"slide_title": "Old"' in message
        assert "Source" in message

    def test_user_message_truncated(self):
        assert len(build_user_message("x" * 20000, None, OutlineOptions())) == 12000


class TestOutlineSynthesizer:
    def test_request_settings(self, fake_backend):
        backend = fake_backend(default=OUTLINE)
        outline = OutlineSynthesizer(backend, ["o1"]).synthesize("text", "prompt")
        request = backend.requests[0]
        assert request.temperature == 0.8
        assert request.max_tokens == 4000
        assert request.json_response is True
        assert len(outline.slides) == 2

    def test_falls_back(self, fake_backend):
        backend = fake_backend({"o1": TransientModelError("down"), "o2": OUTLINE})
        outline = OutlineSynthesizer(backend, ["o1", "o2"]).synthesize("text")
        assert outline.model == "o2"

    def test_credential_error_fatal(self, fake_backend):
        backend = fake_backend({"o1": CredentialError("bad"), "o2": OUTLINE})
        with pytest.raises(CredentialError):
            OutlineSynthesizer(backend, ["o1", "o2"]).synthesize("text")
        assert backend.models_called == ["o1"]

    def test_exhausted(self, fake_backend):
        backend = fake_backend(default=TransientModelError("down"))
        with pytest.raises(OutlineGenerationFailed):
            OutlineSynthesizer(backend, ["o1", "o2"]).synthesize("text")
