"""Active Set Selector: the most recently curated design set is the house style.

There is no cached "active set": every call queries the store for the newest
exemplar tagged 'user-set:<id>' and aggregates that whole set. The last
curated set wins; sets are never merged with each other.
"""

import logging
from typing import Optional

from src.design_engine.aggregator import aggregate_designs
from src.design_engine.exemplar_store import ExemplarStore
from src.schemas.design_schema import AggregatedDesignSpec
from src.schemas.exemplar_schema import USER_SET_PREFIX, USER_UPLOADED_CATEGORY
from src.schemas.outline_schema import ActiveDesignSet, DesignSetSummary

logger = logging.getLogger(__name__)

ACTIVE_SET_LOOKBACK = 50
DEFAULT_USER_SET_ID = "default-user-designs"
DEFAULT_SET_NAME = "My Design Set"


def get_aggregated_design_for_set(store: ExemplarStore, set_id: str) -> Optional[AggregatedDesignSpec]:
    """Aggregate the stored specs of every exemplar in 'user-set:<set_id>'.

    Returns None when the set holds no exemplar with a stored spec.
    """
    members = store.find_by_category(f"{USER_SET_PREFIX}{set_id}")
    designs = [e.extracted_spec for e in members if e.extracted_spec is not None]
    if not designs:
        logger.warning(f"No extracted designs found for set {set_id}")
        return None
    return aggregate_designs(designs)


def get_active_aggregated_set(store: ExemplarStore) -> Optional[ActiveDesignSet]:
    """Aggregated style of the most recently curated set, or None."""
    recent = store.find_by_category_prefix(USER_SET_PREFIX, newest_first=True, limit=ACTIVE_SET_LOOKBACK)
    if not recent:
        logger.info("No user-set design exemplars found")
        return None

    latest = recent[0]
    set_id = latest.set_id
    if not set_id:
        logger.warning(f"Latest exemplar has unexpected category format: {latest.category!r}")
        return None

    spec = get_aggregated_design_for_set(store, set_id)
    if spec is None:
        return None

    logger.info(f"Active design set: {set_id}")
    return ActiveDesignSet(set_id=set_id, spec=spec)


def list_design_sets(store: ExemplarStore, uploaded_by: Optional[str] = None) -> list[DesignSetSummary]:
    """Group exemplars into design sets, newest exemplar first within each set.

    Single uploads (category 'user-uploaded') are collected under
    'default-user-designs'. A set's name is the first member's description
    up to ' - ', or 'My Design Set'.
    """
    exemplars = sorted(
        (e for e in store.all() if uploaded_by is None or e.uploaded_by == uploaded_by),
        key=lambda e: e.created_at,
        reverse=True,
    )

    groups: dict[str, list] = {}
    for exemplar in exemplars:
        if exemplar.set_id:
            groups.setdefault(exemplar.set_id, []).append(exemplar)
        elif exemplar.category == USER_UPLOADED_CATEGORY:
            groups.setdefault(DEFAULT_USER_SET_ID, []).append(exemplar)

    summaries = []
    for set_id, members in groups.items():
        description = members[0].description or ""
        name = description.split(" - ")[0].strip() or DEFAULT_SET_NAME
        summaries.append(DesignSetSummary(
            id=set_id,
            name=name,
            count=len(members),
            exemplar_ids=[m.id for m in members],
        ))
    return summaries
