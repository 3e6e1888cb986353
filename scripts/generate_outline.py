#!/usr/bin/env python3
"""Generate a styled slide outline from cleaned source text.

Usage:
    python scripts/generate_outline.py workspace/cleaned.txt -p "investor pitch" \
        --preset business -o workspace/outline.json

    # Use the active design set and the best matching exemplars:
    python scripts/generate_outline.py workspace/cleaned.txt -p "modern" --use-active --match 3

    # Style slide by slide from a curated manual set picked by topic:
    python scripts/generate_outline.py workspace/cleaned.txt -p "investor pitch" --manual-set auto
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.agents.outline_synthesizer import MAX_USER_MESSAGE_CHARS, OutlineOptions
from src.design_engine.engine import DesignEngine
from src.design_engine.errors import DesignEngineError
from src.design_engine.keyword_extractor import tokenize_prompt
from src.design_engine.manual_sets import (
    apply_manual_design_set,
    find_manual_design_set,
    get_manual_design_set,
)
from src.design_engine.presets import DESIGN_PRESETS, apply_design_preset, normalize_presentation
from src.utils.config import load_config
from src.utils.file_utils import save_json
from src.utils.text_utils import chunk_text, normalize_text

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _fit_to_budget(text: str, budget: int) -> str:
    """Keep whole paragraph chunks while they fit in the prompt budget."""
    kept = []
    used = 0
    chunks = chunk_text(text)
    for chunk in chunks:
        if kept and used + len(chunk) > budget:
            break
        kept.append(chunk)
        used += len(chunk) + 2
    if len(kept) < len(chunks):
        logger.warning(f"Source text trimmed to {len(kept)} of {len(chunks)} chunks")
    return "\n\n".join(kept)


def main():
    parser = argparse.ArgumentParser(description="Generate a slide outline with design specs")
    parser.add_argument("source", type=Path, help="Cleaned text file")
    parser.add_argument("-p", "--prompt", type=str, default=None, help="User preference prompt")
    parser.add_argument("--preset", choices=sorted(DESIGN_PRESETS), default=None,
                        help="Design preset to steer and recolour the outline")
    parser.add_argument("--design-prompt", type=str, default=None, help="Custom design direction")
    parser.add_argument("--normalize", action="store_true",
                        help="Replace stock blue/purple/gradient backgrounds with the business palette")
    parser.add_argument("--manual-set", type=str, default=None,
                        help="Manual design set id, or 'auto' to pick one from the prompt")
    parser.add_argument("--use-active", action="store_true",
                        help="Force the active design set's style")
    parser.add_argument("--match", type=int, default=0,
                        help="Include the top N matching exemplars (default: 0)")
    parser.add_argument("--store", type=Path, default=None, help="Exemplar registry JSON")
    parser.add_argument("-o", "--output", type=Path,
                        default=Path("workspace/outline.json"), help="Output outline JSON")
    parser.add_argument("--config", type=Path, default=None, help="Engine config YAML")
    args = parser.parse_args()

    if not args.source.exists():
        print(f"Error: Source not found: {args.source}", file=sys.stderr)
        sys.exit(1)

    manual_set = None
    if args.manual_set == "auto":
        manual_set = find_manual_design_set(tokenize_prompt(args.prompt or ""))
        print(f"Manual design set: {manual_set.id if manual_set else '(no topic match)'}")
    elif args.manual_set:
        manual_set = get_manual_design_set(args.manual_set)
        if manual_set is None:
            print(f"Error: Unknown manual design set: {args.manual_set}", file=sys.stderr)
            sys.exit(1)
    preset = args.preset or (manual_set.preset if manual_set else None)

    text = _fit_to_budget(normalize_text(args.source.read_text(encoding="utf-8")), MAX_USER_MESSAGE_CHARS)
    config = load_config(args.config)

    with DesignEngine.from_config(config, store_path=args.store) as engine:
        options = OutlineOptions(design_preset=preset, custom_design_prompt=args.design_prompt)
        if args.use_active:
            active = engine.get_active_aggregated_set()
            if active:
                print(f"Active design set: {active.set_id}")
                options.active_design = active.spec
            else:
                print("No active design set; continuing without one")
        if args.match > 0:
            options.matched_designs = engine.match_designs(args.prompt, text, args.match)
            print(f"Matched designs: {len(options.matched_designs)}")

        try:
            outline = engine.synthesize_outline(text, args.prompt, options)
        except DesignEngineError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        for m in options.matched_designs:
            engine.increment_usage(m.design_id)

    if manual_set:
        outline.slides = apply_manual_design_set(outline.slides, manual_set)
    elif args.preset:
        outline.slides = apply_design_preset(outline.slides, args.preset)
    elif args.normalize:
        outline.slides = normalize_presentation(outline.slides)

    save_json(outline.model_dump(mode="json", by_alias=True, exclude_none=True), args.output)

    print(f"\nOutline: {len(outline.slides)} slides (model: {outline.model})")
    for i, slide in enumerate(outline.slides, 1):
        print(f"  {i:2d}. [{slide.design.layout}] {slide.slide_title}")
    print(f"Written to: {args.output}")


if __name__ == "__main__":
    main()
