"""Shared fixtures: a scripted inference backend and exemplar builders."""

from datetime import datetime, timedelta, timezone

import pytest

from src.backends.inference_client import ChatResponse
from src.schemas.design_schema import ExtractedDesign
from src.schemas.exemplar_schema import DesignExemplar


class FakeBackend:
    """Answers ChatRequests from a per-model script.

    Each script entry is either a content string or an exception instance to
    raise. Models without an entry answer ``default``.
    """

    def __init__(self, script=None, default=None):
        self.script = dict(script or {})
        self.default = default
        self.requests = []

    @property
    def models_called(self):
        return [r.model for r in self.requests]

    def complete(self, request):
        self.requests.append(request)
        answer = self.script.get(request.model, self.default)
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            raise AssertionError(f"Unscripted model called: {request.model}")
        return ChatResponse(model=request.model, choices=[{"message": {"role": "assistant", "content": answer}}])


@pytest.fixture
def fake_backend():
    return FakeBackend


@pytest.fixture
def make_exemplar():
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _make(keywords=(), quality=None, usage=0, spec=True, minutes=0, **kwargs):
        design = ExtractedDesign() if spec is True else (spec or None)
        return DesignExemplar(
            keywords=list(keywords),
            quality_score=quality,
            usage_count=usage,
            extracted_spec=design,
            created_at=base + timedelta(minutes=minutes),
            **kwargs,
        )

    return _make
