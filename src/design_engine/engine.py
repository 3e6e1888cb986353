"""DesignEngine: one object wiring the store, the backend and every pipeline step.

Usage:
    with DesignEngine.from_config(load_config()) as engine:
        design = engine.extract_design("slide.png", ["modern"])
        matches = engine.match_designs("modern pitch", content, limit=3)
        active = engine.get_active_aggregated_set()
        outline = engine.synthesize_outline(text, options=OutlineOptions(
            matched_designs=matches,
            active_design=active.spec if active else None,
        ))
"""

import logging
from pathlib import Path
from typing import Optional, Union

from src.agents.outline_synthesizer import OutlineOptions, OutlineSynthesizer
from src.backends.inference_client import InferenceClient
from src.design_engine.active_set import (
    get_active_aggregated_set,
    get_aggregated_design_for_set,
    list_design_sets,
)
from src.design_engine.aggregator import aggregate_designs
from src.design_engine.analyzer import (
    DesignComparison,
    DesignRecommendations,
    compare_design_to_category,
    generate_design_recommendations,
)
from src.design_engine.design_extractor import DesignExtractor
from src.design_engine.exemplar_store import ExemplarStore
from src.design_engine.keyword_extractor import KeywordExtractor
from src.design_engine.matcher import DesignMatcher
from src.schemas.design_schema import AggregatedDesignSpec, ExtractedDesign, MatchedDesign
from src.schemas.exemplar_schema import DesignExemplar
from src.schemas.outline_schema import ActiveDesignSet, DesignSetSummary, Outline
from src.utils.config import EngineConfig

logger = logging.getLogger(__name__)


class DesignEngine:
    """Facade over extraction, matching, aggregation and outline synthesis."""

    def __init__(self, config: EngineConfig, store: ExemplarStore, backend):
        self.config = config
        self.store = store
        self.backend = backend
        self.extractor = DesignExtractor(backend, config.vision_models)
        self.keywords = KeywordExtractor(backend, config.keyword_models)
        self.matcher = DesignMatcher(store, self.keywords, retrieval_cap=config.retrieval_cap)
        self.outliner = OutlineSynthesizer(backend, config.outline_models)

    @classmethod
    def from_config(cls, config: EngineConfig, store_path: str | Path | None = None) -> "DesignEngine":
        """Build an engine with a real HTTP client and a file-backed (or in-memory) store."""
        path = store_path or config.store_path
        store = ExemplarStore(path)
        return cls(config, store, InferenceClient(config))

    def close(self) -> None:
        close = getattr(self.backend, "close", None)
        if close:
            close()

    def __enter__(self) -> "DesignEngine":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # -- extraction -------------------------------------------------------

    def extract_design(self, image_ref: str | Path, keywords: Optional[list[str]] = None) -> ExtractedDesign:
        return self.extractor.extract(image_ref, keywords)

    def extract_and_store(
        self,
        image_ref: str | Path,
        keywords: Optional[list[str]] = None,
        set_id: Optional[str] = None,
        uploaded_by: Optional[str] = None,
        description: Optional[str] = None,
    ) -> DesignExemplar:
        """Extract a design and record it in the store as a new exemplar."""
        design = self.extract_design(image_ref, keywords)
        return self.store.record_extraction(
            design,
            keywords=keywords,
            set_id=set_id,
            uploaded_by=uploaded_by,
            image_url=str(image_ref),
            description=description,
        )

    # -- matching ---------------------------------------------------------

    def match_designs(
        self,
        prompt: Optional[str],
        content: str = "",
        limit: int = 5,
        scope_user_id: Optional[str] = None,
        scope_set_id: Optional[str] = None,
    ) -> list[MatchedDesign]:
        return self.matcher.match_designs(prompt, content, limit, scope_user_id, scope_set_id)

    def increment_usage(self, design_id: str) -> int:
        return self.matcher.increment_usage(design_id)

    # -- aggregation ------------------------------------------------------

    def aggregate(self, designs: list[ExtractedDesign]) -> AggregatedDesignSpec:
        return aggregate_designs(designs)

    def get_active_aggregated_set(self) -> Optional[ActiveDesignSet]:
        return get_active_aggregated_set(self.store)

    def get_aggregated_design_for_set(self, set_id: str) -> Optional[AggregatedDesignSpec]:
        return get_aggregated_design_for_set(self.store, set_id)

    def list_design_sets(self, uploaded_by: Optional[str] = None) -> list[DesignSetSummary]:
        return list_design_sets(self.store, uploaded_by)

    # -- category analysis ------------------------------------------------

    def design_recommendations(self, category: str) -> DesignRecommendations:
        return generate_design_recommendations(self.store, category)

    def compare_design_to_category(
        self, design: Union[ExtractedDesign, AggregatedDesignSpec], category: str
    ) -> DesignComparison:
        return compare_design_to_category(self.store, design, category)

    # -- outline ----------------------------------------------------------

    def synthesize_outline(
        self,
        cleaned_text: str,
        prompt: Optional[str] = None,
        options: Optional[OutlineOptions] = None,
    ) -> Outline:
        return self.outliner.synthesize(cleaned_text, prompt, options)
