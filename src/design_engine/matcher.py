"""Matching Engine: ranks stored exemplars against a search keyword set.

Scoring (0-100):
  keyword  (0-50)  matched search keywords / max(|search|, |candidate|) * 50;
                   a flat 25 when the search set is empty
  quality  (0-30)  quality_score / 100 * 30; 15 when unset
  usage    (0-20)  min(usage_count / 100 * 20, 20)

Keyword matching is case-insensitive symmetric containment: "math" matches
"mathematics" and vice versa. Exemplars that match but carry no stored spec
get a synthesized default design so callers always receive one.
"""

import logging
import math
from typing import Any, Optional, Union

from pydantic import ValidationError

from src.design_engine.errors import ScoringInputError
from src.design_engine.exemplar_store import DEFAULT_RETRIEVAL_CAP, ExemplarStore
from src.design_engine.keyword_extractor import KeywordExtractor
from src.schemas.design_schema import (
    DesignSpec,
    ExtractedDesign,
    MatchedDesign,
    SpacingSpec,
    TypographySpec,
)
from src.schemas.exemplar_schema import DesignExemplar

logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 50.0
EMPTY_SEARCH_KEYWORD_SCORE = 25.0
QUALITY_WEIGHT = 30.0
UNSET_QUALITY_SCORE = 15.0
USAGE_WEIGHT = 20.0

FALLBACK_PALETTE = ["#2563EB", "#1E40AF", "#3B82F6", "#60A5FA", "#93C5FD"]
FALLBACK_FONT_SIZES = [32, 24, 18, 16]
FALLBACK_FONT_WEIGHTS = ["bold", "semibold", "normal"]


# -----------------------------------------------------------------------
# Scoring components
# -----------------------------------------------------------------------

def keywords_match(search_keyword: str, candidate_keyword: str) -> bool:
    """Equal, or either contains the other (case-insensitive)."""
    a = search_keyword.strip().lower()
    b = candidate_keyword.strip().lower()
    if not a or not b:
        return False
    return a == b or a in b or b in a


def count_matched(search: list[str], candidate: list[str]) -> int:
    """Number of search keywords matching at least one candidate keyword."""
    return sum(1 for s in search if any(keywords_match(s, c) for c in candidate))


def _score_keywords(search: list[str], candidate: list[str]) -> float:
    if not search:
        return EMPTY_SEARCH_KEYWORD_SCORE
    denominator = max(len(search), len(candidate))
    if denominator == 0:
        return 0.0
    return count_matched(search, candidate) / denominator * KEYWORD_WEIGHT


def _score_quality(quality: Optional[int]) -> float:
    if quality is None:
        return UNSET_QUALITY_SCORE
    return quality / 100 * QUALITY_WEIGHT


def _score_usage(usage_count: int) -> float:
    return min(usage_count / 100 * USAGE_WEIGHT, USAGE_WEIGHT)


def score_exemplar(search: list[str], exemplar: DesignExemplar) -> float:
    """Total match score for one exemplar (unrounded)."""
    return (
        _score_keywords(search, exemplar.keywords)
        + _score_quality(exemplar.quality_score)
        + _score_usage(exemplar.usage_count)
    )


def round_score(score: float) -> float:
    """Round half-up to 2 decimals."""
    return math.floor(score * 100 + 0.5) / 100


# -----------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------

def synthesize_fallback_design(keywords: list[str], match_score: float) -> ExtractedDesign:
    """Default design for an exemplar that matched but has no stored spec."""
    return ExtractedDesign(
        color_palette=list(FALLBACK_PALETTE),
        typography=TypographySpec(
            fonts=["Poppins", "Inter"],
            sizes=list(FALLBACK_FONT_SIZES),
            weights=list(FALLBACK_FONT_WEIGHTS),
        ),
        layout_pattern="title-and-bullets",
        spacing=SpacingSpec(),
        style_keywords=list(keywords[:5]),
        quality_score=75 if match_score > 50 else 50,
        design_spec=DesignSpec(
            background_color="light-blue",
            text_color="black",
            layout="title-and-bullets",
            icon="none",
        ),
    )


def _coerce_exemplar(record: Union[DesignExemplar, dict[str, Any]]) -> DesignExemplar:
    if isinstance(record, DesignExemplar):
        return record
    record_id = record.get("id") if isinstance(record, dict) else None
    try:
        return DesignExemplar.model_validate(record)
    except ValidationError as e:
        raise ScoringInputError(
            f"Malformed exemplar record ({e.error_count()} validation errors)",
            exemplar_id=record_id,
        ) from e


def _is_eligible(search: list[str], exemplar: DesignExemplar) -> bool:
    if not search:
        # keyword filtering disabled: anything with a stored spec qualifies
        return exemplar.extracted_spec is not None
    if not exemplar.keywords:
        return False
    return count_matched(search, exemplar.keywords) > 0


# -----------------------------------------------------------------------
# Ranking
# -----------------------------------------------------------------------

def rank_exemplars(
    search_keywords: list[str],
    candidates: list[Union[DesignExemplar, dict[str, Any]]],
    limit: int = 5,
) -> list[MatchedDesign]:
    """Filter, score and rank candidates; return the top ``limit``.

    Malformed records are logged and skipped. Ties keep candidate order.
    """
    search = [k.strip().lower() for k in search_keywords if k and k.strip()]

    scored: list[tuple[float, DesignExemplar]] = []
    for record in candidates:
        try:
            exemplar = _coerce_exemplar(record)
        except ScoringInputError as e:
            logger.warning(f"Skipping exemplar: {e}")
            continue
        if not _is_eligible(search, exemplar):
            continue
        scored.append((score_exemplar(search, exemplar), exemplar))

    # sorted() is stable
    scored = sorted(scored, key=lambda pair: pair[0], reverse=True)

    results: list[MatchedDesign] = []
    for score, exemplar in scored[:max(limit, 0)]:
        design = exemplar.extracted_spec
        if design is None:
            logger.debug(f"Synthesizing fallback design for exemplar {exemplar.id}")
            design = synthesize_fallback_design(exemplar.keywords, score)
        results.append(MatchedDesign(
            design_id=exemplar.id,
            match_score=round_score(score),
            keywords=list(exemplar.keywords),
            extracted_design=design,
            category=exemplar.category,
        ))

    if results:
        logger.info(f"Matched {len(results)} designs; top={results[0].design_id} score={results[0].match_score}")
    else:
        logger.info("No matching designs found")
    return results


class DesignMatcher:
    """Keyword extraction + ranking over an ExemplarStore."""

    def __init__(
        self,
        store: ExemplarStore,
        keyword_extractor: Optional[KeywordExtractor] = None,
        retrieval_cap: int = DEFAULT_RETRIEVAL_CAP,
    ):
        self.store = store
        self.keyword_extractor = keyword_extractor or KeywordExtractor()
        self.retrieval_cap = retrieval_cap

    def match_designs(
        self,
        prompt: Optional[str],
        content: str = "",
        limit: int = 5,
        scope_user_id: Optional[str] = None,
        scope_set_id: Optional[str] = None,
    ) -> list[MatchedDesign]:
        keywords = self.keyword_extractor.extract(prompt, content)
        candidates = self.store.retrieve_candidates(
            set_id=scope_set_id,
            user_id=scope_user_id,
            cap=self.retrieval_cap,
        )
        logger.info(f"Ranking {len(candidates)} candidates against {len(keywords)} keywords")
        return rank_exemplars(keywords, candidates, limit)

    def increment_usage(self, design_id: str) -> int:
        return self.store.increment_usage(design_id)
