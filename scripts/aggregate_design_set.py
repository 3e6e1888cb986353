#!/usr/bin/env python3
"""Aggregate a curated design set (or the active one) into a single house style.

Usage:
    # Active set (most recently curated):
    python scripts/aggregate_design_set.py -o workspace/active_design.yaml

    # A specific set:
    python scripts/aggregate_design_set.py --set-id q3-brand

    # Compare the active set with a category's stored exemplars:
    python scripts/aggregate_design_set.py --category education

    # List the sets in the store:
    python scripts/aggregate_design_set.py --list
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.design_engine.active_set import (
    get_active_aggregated_set,
    get_aggregated_design_for_set,
    list_design_sets,
)
from src.design_engine.analyzer import generate_design_recommendations, score_against_recommendations
from src.design_engine.exemplar_store import ExemplarStore
from src.utils.config import load_config
from src.utils.file_utils import save_yaml

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


def main():
    parser = argparse.ArgumentParser(description="Aggregate a design set into one style")
    parser.add_argument("--set-id", type=str, default=None,
                        help="Design set id (default: the active set)")
    parser.add_argument("--list", action="store_true", help="List design sets and exit")
    parser.add_argument("--uploaded-by", type=str, default=None,
                        help="With --list, only this uploader's sets")
    parser.add_argument("--category", type=str, default=None,
                        help="Score the aggregated style against this exemplar category")
    parser.add_argument("--store", type=Path, default=None, help="Exemplar registry JSON")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Write the spec as YAML")
    parser.add_argument("--config", type=Path, default=None, help="Engine config YAML")
    args = parser.parse_args()

    config = load_config(args.config)
    store_path = args.store or config.store_path
    if not store_path or not Path(store_path).exists():
        print(f"Error: Exemplar store not found: {store_path}", file=sys.stderr)
        sys.exit(1)
    store = ExemplarStore(store_path)

    if args.list:
        sets = list_design_sets(store, uploaded_by=args.uploaded_by)
        if not sets:
            print("No design sets found")
        for s in sets:
            print(f"  {s.id:30s} {s.count:3d} designs  {s.name}")
        return

    if args.set_id:
        set_id = args.set_id
        spec = get_aggregated_design_for_set(store, set_id)
    else:
        active = get_active_aggregated_set(store)
        set_id, spec = (active.set_id, active.spec) if active else (None, None)

    if spec is None:
        print("No design set with extracted designs found", file=sys.stderr)
        sys.exit(1)

    print(f"Design set: {set_id}")
    print(f"  Palette: {', '.join(spec.color_palette) or '(none)'}")
    print(f"  Fonts: {', '.join(spec.typography.fonts)}  sizes: {spec.typography.sizes}")
    print(f"  Layouts: {', '.join(spec.layout_patterns)}")
    print(f"  Quality: {spec.quality_score}")

    if args.category:
        recommendations = generate_design_recommendations(store, args.category)
        comparison = score_against_recommendations(spec, recommendations)
        print(f"\nCategory '{args.category}' ({recommendations.sample_size} designs analyzed)")
        print(f"  Recommended colours: {', '.join(recommendations.recommended_colors)}")
        print(f"  Recommended fonts: {', '.join(recommendations.recommended_fonts)}")
        print(f"  {recommendations.style_guidance}")
        print(f"  Match score: {comparison.match_score}/100")
        for suggestion in comparison.recommendations:
            print(f"  - {suggestion}")

    if args.output:
        save_yaml(spec.model_dump(by_alias=True, exclude_none=True), args.output)
        print(f"\nSpec saved to: {args.output}")


if __name__ == "__main__":
    main()
