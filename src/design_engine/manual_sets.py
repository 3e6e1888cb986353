"""Curated manual design sets, loaded from the bundled YAML reference data."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from src.schemas.outline_schema import ManualDesignSet, SlideSpec
from src.utils.file_utils import load_yaml

logger = logging.getLogger(__name__)

MANUAL_SETS_PATH = Path(__file__).parent / "data" / "manual_sets.yaml"


def load_manual_design_sets(path: str | Path = MANUAL_SETS_PATH) -> dict[str, ManualDesignSet]:
    """Parse a manual-set YAML file into models keyed by set id, file order kept."""
    data = load_yaml(path)
    sets = {}
    for set_id, raw in data.items():
        sets[set_id] = ManualDesignSet.model_validate({"id": set_id, **raw})
    logger.debug(f"Loaded {len(sets)} manual design sets from {path}")
    return sets


@lru_cache(maxsize=1)
def _bundled_sets() -> dict[str, ManualDesignSet]:
    return load_manual_design_sets()


def list_manual_design_sets() -> list[ManualDesignSet]:
    return list(_bundled_sets().values())


def get_manual_design_set(set_id: str) -> Optional[ManualDesignSet]:
    return _bundled_sets().get(set_id)


def find_manual_design_set(keywords: list[str]) -> Optional[ManualDesignSet]:
    """Best manual set for a topic: most keyword hits wins, ties go to the first declared.

    A hit is containment either way ('pitch deck' hits 'pitch'). None when
    nothing hits.
    """
    search = [k.strip().lower() for k in keywords if k and k.strip()]
    best: Optional[ManualDesignSet] = None
    best_hits = 0

    for design_set in _bundled_sets().values():
        topics = [t.lower() for t in design_set.topic_keywords]
        hits = sum(1 for k in search if any(k in t or t in k for t in topics))
        if hits > best_hits:
            best, best_hits = design_set, hits

    return best


def apply_manual_design_set(slides: list[SlideSpec], design_set: ManualDesignSet) -> list[SlideSpec]:
    """Return copies of ``slides`` styled position by position from a manual set.

    The first slide takes the set's first template and the last slide its
    last template; slides in between cycle through the middle templates.
    """
    templates = design_set.slides
    if not templates:
        return list(slides)

    middle = templates[1:-1] or templates
    styled = []
    for index, slide in enumerate(slides):
        if index == 0:
            template = templates[0]
        elif index == len(slides) - 1:
            template = templates[-1]
        else:
            template = middle[(index - 1) % len(middle)]
        styled.append(slide.model_copy(update={"design": template.design.model_copy()}))

    logger.debug(f"Applied manual set {design_set.id} to {len(styled)} slides")
    return styled
