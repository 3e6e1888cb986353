"""Keyword Extraction: turns a user prompt and content sample into search keywords.

Two strategies, merged by case-folded set union:
  1. AI-assisted: a cheap generative model returns {"keywords": [...]}.
     Any failure here (credentials, quota, timeouts, bad JSON) degrades to
     no AI keywords. It never raises.
  2. Direct tokenization of the prompt: the exact words the user typed, so
     literal matches survive even when the model misses them.
"""

import logging
import re
from typing import Optional

from src.backends.fallback import run_with_fallback
from src.backends.inference_client import ChatMessage, ChatRequest, ChatResponse
from src.design_engine.errors import DesignEngineError
from src.schemas.exemplar_schema import normalize_keywords
from src.utils.json_utils import parse_lenient_json

logger = logging.getLogger(__name__)

KEYWORD_MAX_TOKENS = 500
KEYWORD_TEMPERATURE = 0.3
CONTENT_PREVIEW_CHARS = 500

_STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "for", "with", "from", "to", "of", "in", "on", "at",
})

_TOKEN_SPLIT = re.compile(r"[\s,;]+")

KEYWORD_SYSTEM_PROMPT = """You are a keyword extraction assistant. Extract relevant design-related keywords from the user's prompt and content.

Focus on:
- Design style preferences (e.g., "modern", "minimalist", "corporate", "creative", "bold", "elegant")
- Color preferences (e.g., "blue", "dark", "bright", "pastel")
- Layout preferences (e.g., "simple", "complex", "visual-heavy")
- Industry/context (e.g., "business", "academic", "marketing", "presentation")
- Mood/tone (e.g., "professional", "friendly", "serious", "energetic")

Return a JSON object with this structure:
{
  "keywords": ["keyword1", "keyword2", "keyword3"]
}

Extract 5-15 relevant keywords. Be specific and include synonyms."""


def tokenize_prompt(prompt: Optional[str]) -> list[str]:
    """Lower-case, split on whitespace/comma/semicolon, drop short tokens and stop words."""
    tokens = []
    for token in _TOKEN_SPLIT.split((prompt or "").lower()):
        token = token.strip()
        if len(token) >= 2 and token not in _STOP_WORDS:
            tokens.append(token)
    return tokens


def merge_keywords(*groups: list[str]) -> list[str]:
    """Union of keyword groups, case-folded and trimmed, first-seen order kept."""
    merged: list[str] = []
    for group in groups:
        merged.extend(k for k in group if isinstance(k, str))
    return normalize_keywords(merged)


class KeywordExtractor:
    """Derives the search keyword set for design matching."""

    def __init__(self, backend=None, models: Optional[list[str]] = None):
        self.backend = backend
        self.models = list(models or [])

    def _user_message(self, prompt: Optional[str], content: str) -> str:
        return (
            f'User prompt: "{prompt or "No specific prompt"}"\n'
            f'Content preview: "{(content or "")[:CONTENT_PREVIEW_CHARS]}..."\n\n'
            "Extract design-related keywords."
        )

    def extract_ai_keywords(self, prompt: Optional[str], content: str) -> list[str]:
        """Ask the keyword model chain. Returns [] on any failure."""
        if self.backend is None or not self.models:
            return []

        messages = [
            ChatMessage(role="system", content=KEYWORD_SYSTEM_PROMPT),
            ChatMessage(role="user", content=self._user_message(prompt, content)),
        ]

        def call(model: str) -> ChatResponse:
            return self.backend.complete(ChatRequest(
                model=model,
                messages=messages,
                max_tokens=KEYWORD_MAX_TOKENS,
                temperature=KEYWORD_TEMPERATURE,
                json_response=True,
            ))

        try:
            model, response = run_with_fallback(self.models, call, "KeywordExtractor")
            parsed = parse_lenient_json(response.content)
        except (DesignEngineError, ValueError) as e:
            logger.warning(f"AI keyword extraction unavailable, using prompt tokens only: {e}")
            return []

        raw = parsed.get("keywords")
        if not isinstance(raw, list):
            logger.warning(f"Keyword model {model} returned no keyword list")
            return []
        keywords = normalize_keywords([k for k in raw if isinstance(k, str)])
        logger.info(f"Extracted {len(keywords)} keywords via {model}")
        return keywords

    def extract(self, prompt: Optional[str], content: str = "") -> list[str]:
        """AI keywords first, then direct prompt tokens, de-duplicated."""
        ai_keywords = self.extract_ai_keywords(prompt, content)
        direct = tokenize_prompt(prompt)
        combined = merge_keywords(ai_keywords, direct)
        logger.info(f"Combined keywords (AI + direct): {combined}")
        return combined
