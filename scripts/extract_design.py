#!/usr/bin/env python3
"""Analyze a reference slide image and store it as a design exemplar.

Usage:
    # Print the extracted design only:
    python scripts/extract_design.py slides/pitch_cover.png --keywords modern,orange

    # Extract into a curated design set (becomes the active set):
    python scripts/extract_design.py slides/pitch_cover.png --set-id q3-brand \
        --description "Q3 brand refresh - cover" --store workspace/exemplars.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.design_engine.engine import DesignEngine
from src.design_engine.errors import DesignEngineError
from src.utils.config import load_config

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


def main():
    parser = argparse.ArgumentParser(description="Extract a design spec from a slide image")
    parser.add_argument("image", help="Image URL, data: URL, or local image path")
    parser.add_argument("--keywords", type=str, default="",
                        help="Comma-separated topic keywords for the image")
    parser.add_argument("--set-id", type=str, default=None,
                        help="Design set id; stores the exemplar under 'user-set:<id>'")
    parser.add_argument("--description", type=str, default=None,
                        help="Exemplar description; text before ' - ' names the set")
    parser.add_argument("--uploaded-by", type=str, default=None, help="Uploader id")
    parser.add_argument("--store", type=Path, default=None,
                        help="Exemplar registry JSON (default: config store_path)")
    parser.add_argument("--no-store", action="store_true", help="Print the design without storing it")
    parser.add_argument("--config", type=Path, default=None, help="Engine config YAML")
    args = parser.parse_args()

    keywords = [k.strip() for k in args.keywords.split(",") if k.strip()]
    config = load_config(args.config)

    with DesignEngine.from_config(config, store_path=args.store) as engine:
        try:
            if args.no_store:
                design = engine.extract_design(args.image, keywords)
                print(json.dumps(design.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2))
                return
            exemplar = engine.extract_and_store(
                args.image,
                keywords,
                set_id=args.set_id,
                uploaded_by=args.uploaded_by,
                description=args.description,
            )
        except (DesignEngineError, FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    design = exemplar.extracted_spec
    print(f"\nStored exemplar: {exemplar.id}")
    print(f"  Category: {exemplar.category}")
    print(f"  Keywords: {', '.join(exemplar.keywords) or '(none)'}")
    print(f"  Palette: {', '.join(design.color_palette) or '(none)'}")
    print(f"  Fonts: {', '.join(design.typography.fonts)}")
    print(f"  Layout: {design.layout_pattern}")
    print(f"  Quality: {design.quality_score}")


if __name__ == "__main__":
    main()
