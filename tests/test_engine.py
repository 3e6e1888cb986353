"""End-to-end tests for the DesignEngine facade with a scripted backend."""

import json

from src.agents.outline_synthesizer import OutlineOptions
from src.design_engine.engine import DesignEngine
from src.design_engine.exemplar_store import ExemplarStore
from src.utils.config import EngineConfig

EXTRACTED = json.dumps({
    "colorPalette": ["#0A84FF", "#FFFFFF"],
    "typography": {"fonts": ["Inter"], "sizes": [40, 18], "weights": ["bold"]},
    "layoutPattern": "two-column",
    "styleKeywords": ["clean", "tech"],
    "qualityScore": 90,
})
OUTLINE = json.dumps({"slides": [
    {"slide_title": "Intro", "bullets": ["a"], "design": {"background_color": "#0A84FF", "text_color": "white",
                                                        "layout": "title-only", "icon": "none"}},
]})


def _engine(fake_backend, tmp_path):
    config = EngineConfig(
        vision_models=["vision"],
        keyword_models=["keywords"],
        outline_models=["outline"],
    )
    backend = fake_backend({
        "vision": EXTRACTED,
        "keywords": '{"keywords": ["technology"]}',
        "outline": OUTLINE,
    })
    return DesignEngine(config, ExemplarStore(tmp_path / "exemplars.json"), backend), backend


class TestDesignEngine:
    def test_extract_match_aggregate_outline(self, fake_backend, tmp_path):
        engine, backend = _engine(fake_backend, tmp_path)

        exemplar = engine.extract_and_store(
            "https://example.com/a.png", set_id="brand", description="Tech brand - cover"
        )
        assert exemplar.keywords == ["clean", "tech"]
        assert exemplar.category == "user-set:brand"

        matches = engine.match_designs("tech launch", "New product", limit=3)
        assert [m.design_id for m in matches] == [exemplar.id]

        active = engine.get_active_aggregated_set()
        assert active.set_id == "brand"
        assert active.spec.color_palette == ["#0A84FF", "#FFFFFF"]

        outline = engine.synthesize_outline(
            "Launch notes", "short",
            OutlineOptions(matched_designs=matches, active_design=active.spec),
        )
        assert outline.slides[0].slide_title == "Intro"
        assert "#0A84FF" in backend.requests[-1].messages[0].content

        assert engine.increment_usage(exemplar.id) == 1
        assert [s.name for s in engine.list_design_sets()] == ["Tech brand"]

    def test_store_persisted(self, fake_backend, tmp_path):
        engine, _ = _engine(fake_backend, tmp_path)
        exemplar = engine.extract_and_store("https://example.com/a.png")
        assert ExemplarStore(tmp_path / "exemplars.json").get(exemplar.id).quality_score == 90
