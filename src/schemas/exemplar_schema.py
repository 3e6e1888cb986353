"""Pydantic models for stored design exemplars and their registry file."""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .design_schema import ExtractedDesign

logger = logging.getLogger(__name__)

USER_SET_PREFIX = "user-set:"
USER_UPLOADED_CATEGORY = "user-uploaded"


def normalize_keywords(keywords: list[str]) -> list[str]:
    """Trim, case-fold and de-duplicate keywords, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for kw in keywords:
        norm = kw.strip().lower()
        if norm and norm not in seen:
            seen.add(norm)
            result.append(norm)
    return result


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DesignExemplar(BaseModel):
    """One analyzed reference design stored in the exemplar corpus."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    category: Optional[str] = Field(
        default=None,
        description="Free-form category; 'user-set:<id>' groups exemplars into a curated set",
    )
    keywords: list[str] = Field(default_factory=list, description="Case-folded topic/style keywords")
    extracted_spec: Optional[ExtractedDesign] = None
    quality_score: Optional[int] = Field(default=None, ge=0, le=100)
    usage_count: int = Field(default=0, ge=0)
    uploaded_by: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, v):
        if v is None:
            return []
        if isinstance(v, list) and all(isinstance(k, str) for k in v):
            return normalize_keywords(v)
        return v

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # rows written without an offset are taken as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def set_id(self) -> Optional[str]:
        """The '<id>' part of a 'user-set:<id>' category, if any."""
        category = self.category or ""
        if category.lower().startswith(USER_SET_PREFIX) and len(category) > len(USER_SET_PREFIX):
            return category[len(USER_SET_PREFIX):]
        return None


class ExemplarRegistry(BaseModel):
    """Serializable container for the whole exemplar corpus."""

    exemplars: list[DesignExemplar] = Field(default_factory=list)

    def save(self, path: str | Path) -> None:
        """Serialize the registry to a JSON file."""
        from src.utils.file_utils import write_text_atomic

        write_text_atomic(self.model_dump_json(indent=2), path)

    @classmethod
    def load(cls, path: str | Path) -> "ExemplarRegistry":
        """Load a registry from JSON, skipping records that fail validation."""
        from src.utils.file_utils import load_json

        data = load_json(path)
        raw_records = data.get("exemplars", []) if isinstance(data, dict) else []

        exemplars = []
        for idx, raw in enumerate(raw_records):
            try:
                exemplars.append(DesignExemplar.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed exemplar #{idx} in {path}: {e.error_count()} errors")
        return cls(exemplars=exemplars)
