"""Pydantic models for slide outlines and curated design sets."""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .design_schema import AggregatedDesignSpec, DesignSpec


class SlideSpec(BaseModel):
    """One slide of a generated outline: title, bullets and its style."""

    slide_title: str = Field(min_length=1)
    bullets: list[str] = Field(default_factory=list)
    design: DesignSpec

    @field_validator("slide_title", mode="before")
    @classmethod
    def _strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("bullets", mode="before")
    @classmethod
    def _stringify_bullets(cls, v):
        if v is None:
            return []
        if isinstance(v, list):
            return [str(b) for b in v if b is not None and str(b).strip()]
        return v


class Outline(BaseModel):
    """A structured, styled slide-by-slide plan."""

    slides: list[SlideSpec] = Field(default_factory=list)
    model: Optional[str] = Field(default=None, description="Backend model that produced the outline")


# ---------------------------------------------------------------------------
# Curated design sets
# ---------------------------------------------------------------------------

SlideRole = Literal["title", "agenda", "section", "content", "image", "summary"]


class ManualSlideTemplate(BaseModel):
    """A hand-authored style for one position in a fixed slide sequence."""

    slide_number: int
    role: SlideRole
    design: DesignSpec
    image_query_hint: Optional[str] = None


class ManualDesignSet(BaseModel):
    """Static reference data: a named sequence of per-role slide styles."""

    id: str
    name: str
    preset: Literal["business", "academic", "kids"]
    topic_keywords: list[str] = Field(default_factory=list)
    description: str = ""
    slides: list[ManualSlideTemplate] = Field(default_factory=list)


class DesignSetSummary(BaseModel):
    """A group of stored exemplars sharing one 'user-set:<id>' tag."""

    id: str
    name: str
    count: int
    exemplar_ids: list[str] = Field(default_factory=list)


class ActiveDesignSet(BaseModel):
    """The most recently curated design set and its aggregated style."""

    set_id: str
    spec: AggregatedDesignSpec
