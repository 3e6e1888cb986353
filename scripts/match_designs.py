#!/usr/bin/env python3
"""Rank stored design exemplars against a prompt and content sample.

Usage:
    python scripts/match_designs.py "modern investor pitch" -c workspace/cleaned.txt -n 3
    python scripts/match_designs.py "bold" --set-id q3-brand -o workspace/matches.json
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.design_engine.engine import DesignEngine
from src.utils.config import load_config
from src.utils.file_utils import save_json

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


def main():
    parser = argparse.ArgumentParser(description="Match stored designs to a prompt")
    parser.add_argument("prompt", help="User prompt, e.g. 'modern blue corporate'")
    parser.add_argument("-c", "--content", type=Path, default=None,
                        help="Text file with the deck content (first 500 chars are used)")
    parser.add_argument("-n", "--limit", type=int, default=5, help="Number of matches (default: 5)")
    parser.add_argument("--user-id", type=str, default=None,
                        help="Prefer exemplars uploaded by this user")
    parser.add_argument("--set-id", type=str, default=None,
                        help="Only consider exemplars in 'user-set:<id>'")
    parser.add_argument("--store", type=Path, default=None, help="Exemplar registry JSON")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Write matches JSON here")
    parser.add_argument("--config", type=Path, default=None, help="Engine config YAML")
    args = parser.parse_args()

    content = ""
    if args.content:
        if not args.content.exists():
            print(f"Error: Content file not found: {args.content}", file=sys.stderr)
            sys.exit(1)
        content = args.content.read_text(encoding="utf-8")

    config = load_config(args.config)
    with DesignEngine.from_config(config, store_path=args.store) as engine:
        print(f"Store: {len(engine.store)} exemplars")
        matches = engine.match_designs(
            args.prompt, content, args.limit,
            scope_user_id=args.user_id,
            scope_set_id=args.set_id,
        )

    if not matches:
        print("No matching designs found")
        return

    for m in matches:
        d = m.extracted_design
        print(f"  {m.match_score:6.2f}  {m.design_id}  [{', '.join(m.keywords)}]  "
              f"{', '.join(d.color_palette[:3])} / {', '.join(d.typography.fonts[:2])}")

    if args.output:
        payload = {"matches": [m.model_dump(mode="json", by_alias=True, exclude_none=True) for m in matches]}
        save_json(payload, args.output)
        print(f"Written to: {args.output}")


if __name__ == "__main__":
    main()
