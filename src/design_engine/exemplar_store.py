"""Exemplar Store: the persisted corpus of analyzed reference designs.

Holds DesignExemplar records in memory and, when given a path, mirrors them
to a JSON registry file. Saves replace the whole file atomically. Reads are
unsynchronized; ``increment_usage`` is a plain read-modify-write, so two
concurrent increments of the same record may lose one update. The usage
counter is advisory only.

Records are never deleted.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

from src.design_engine.errors import ExemplarNotFoundError
from src.schemas.design_schema import ExtractedDesign
from src.schemas.exemplar_schema import (
    USER_SET_PREFIX,
    USER_UPLOADED_CATEGORY,
    DesignExemplar,
    ExemplarRegistry,
    normalize_keywords,
)

logger = logging.getLogger(__name__)

DEFAULT_RETRIEVAL_CAP = 100


def _retrieval_order_key(exemplar: DesignExemplar) -> tuple:
    # quality desc with unset last, then usage desc
    quality = exemplar.quality_score
    return (quality is None, -(quality or 0), -exemplar.usage_count)


class ExemplarStore:
    """In-memory exemplar corpus with optional JSON persistence."""

    def __init__(self, path: str | Path | None = None, autosave: bool = True):
        self.path = Path(path) if path else None
        self.autosave = autosave
        self._exemplars: dict[str, DesignExemplar] = {}

        if self.path and self.path.exists():
            self.load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """(Re)load all records from the registry file."""
        if not self.path:
            return
        registry = ExemplarRegistry.load(self.path)
        self._exemplars = {e.id: e for e in registry.exemplars}
        logger.info(f"Loaded {len(self._exemplars)} exemplars from {self.path}")

    def save(self) -> None:
        """Write all records to the registry file. No-op for in-memory stores."""
        if not self.path:
            return
        ExemplarRegistry(exemplars=list(self._exemplars.values())).save(self.path)

    def _persist(self) -> None:
        if self.autosave:
            self.save()

    # ------------------------------------------------------------------
    # Basic access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._exemplars)

    def __iter__(self) -> Iterator[DesignExemplar]:
        return iter(list(self._exemplars.values()))

    def all(self) -> list[DesignExemplar]:
        return list(self._exemplars.values())

    def add(self, exemplar: DesignExemplar) -> DesignExemplar:
        if exemplar.id in self._exemplars:
            raise ValueError(f"Exemplar already exists: {exemplar.id}")
        self._exemplars[exemplar.id] = exemplar
        self._persist()
        logger.debug(f"Added exemplar {exemplar.id} (category={exemplar.category})")
        return exemplar

    def get(self, exemplar_id: str) -> DesignExemplar:
        try:
            return self._exemplars[exemplar_id]
        except KeyError:
            raise ExemplarNotFoundError(exemplar_id) from None

    def update(self, exemplar: DesignExemplar) -> DesignExemplar:
        if exemplar.id not in self._exemplars:
            raise ExemplarNotFoundError(exemplar.id)
        self._exemplars[exemplar.id] = exemplar
        self._persist()
        return exemplar

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def retrieve_candidates(
        self,
        set_id: Optional[str] = None,
        user_id: Optional[str] = None,
        cap: int = DEFAULT_RETRIEVAL_CAP,
    ) -> list[DesignExemplar]:
        """Candidates for matching: quality desc (unset last), usage desc, capped.

        ``set_id`` restricts to category 'user-set:<set_id>'. ``user_id`` is a
        soft preference: that uploader's exemplars are ordered ahead of the
        rest before the cap is applied, nobody is excluded. Exemplars past the
        cap are not visible to the caller.
        """
        candidates = self.all()

        if set_id:
            wanted = f"{USER_SET_PREFIX}{set_id}".lower()
            candidates = [e for e in candidates if (e.category or "").lower() == wanted]

        candidates.sort(key=_retrieval_order_key)

        if user_id:
            own = [e for e in candidates if e.uploaded_by == user_id]
            others = [e for e in candidates if e.uploaded_by != user_id]
            candidates = own + others

        if len(candidates) > cap:
            logger.debug(f"Retrieval cap {cap} hides {len(candidates) - cap} exemplars")
        return candidates[:cap]

    def find_by_category(self, category: str) -> list[DesignExemplar]:
        """Exemplars whose category equals ``category`` (case-insensitive)."""
        wanted = category.lower()
        return [e for e in self._exemplars.values() if (e.category or "").lower() == wanted]

    def find_by_category_prefix(
        self,
        prefix: str,
        newest_first: bool = True,
        limit: Optional[int] = 50,
        uploaded_by: Optional[str] = None,
    ) -> list[DesignExemplar]:
        """Exemplars whose category starts with ``prefix`` (case-insensitive)."""
        wanted = prefix.lower()
        found = [
            e for e in self._exemplars.values()
            if (e.category or "").lower().startswith(wanted)
            and (uploaded_by is None or e.uploaded_by == uploaded_by)
        ]
        found.sort(key=lambda e: e.created_at, reverse=newest_first)
        return found[:limit] if limit is not None else found

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def increment_usage(self, exemplar_id: str) -> int:
        """Add one to an exemplar's usage count and return the new value.

        Not atomic: concurrent callers can lose increments.
        """
        exemplar = self.get(exemplar_id)
        new_count = exemplar.usage_count + 1
        self._exemplars[exemplar_id] = exemplar.model_copy(update={"usage_count": new_count})
        self._persist()
        return new_count

    def record_extraction(
        self,
        design: ExtractedDesign,
        keywords: Optional[list[str]] = None,
        set_id: Optional[str] = None,
        category: Optional[str] = None,
        uploaded_by: Optional[str] = None,
        image_url: Optional[str] = None,
        description: Optional[str] = None,
    ) -> DesignExemplar:
        """Store an extraction result as a new exemplar.

        Keywords default to the design's style keywords. The category is
        'user-set:<set_id>' when a set id is given, else ``category``, else
        'user-uploaded'.
        """
        if set_id:
            resolved_category = f"{USER_SET_PREFIX}{set_id}"
        else:
            resolved_category = category or USER_UPLOADED_CATEGORY

        exemplar = DesignExemplar(
            category=resolved_category,
            keywords=normalize_keywords(keywords if keywords else design.style_keywords),
            extracted_spec=design,
            quality_score=design.quality_score,
            uploaded_by=uploaded_by,
            image_url=image_url,
            description=description,
        )
        self.add(exemplar)
        logger.info(f"Recorded exemplar {exemplar.id} in {resolved_category}")
        return exemplar
