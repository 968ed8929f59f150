"""
simulate_file.py — Simulate a local match JSON at several run counts.

Reads an external match document (``partido`` / ``disparos``), builds the
probability partition once and prints the top-5 scorelines plus the real
final score's hit rate for each size.

Usage
-----
  python scripts/simulate_file.py data/atl-mad.json
  python scripts/simulate_file.py data/atl-mad.json --seed 1234
  python scripts/simulate_file.py data/atl-mad.json --sizes 500 5000 --json

Repeated sizes are simulated once.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure the project root (one level up from scripts/) is on sys.path so that
# `from xgsim.xxx import ...` resolves when the script is run directly.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Monte Carlo scoreline distribution for a match JSON file."
    )
    parser.add_argument("path", help="Path to the match JSON document")
    parser.add_argument("--seed", type=float, default=None, help="Fixed PRNG seed for every size")
    parser.add_argument(
        "--sizes",
        type=int,
        nargs="+",
        default=None,
        help="Run counts to simulate (default: 100 1000 10000)",
    )
    parser.add_argument("--json", action="store_true", help="Print summaries as JSON")
    args = parser.parse_args(argv)

    from xgsim.errors import MalformedMatchJsonError
    from xgsim.services.adapter import adapt_external_document
    from xgsim.services.exporter import DEFAULT_SIZES, format_report, run_sweep

    sizes = args.sizes or list(DEFAULT_SIZES)
    if any(n <= 0 for n in sizes):
        logger.error("--sizes must all be positive integers")
        return 1

    path = Path(args.path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error("Cannot read %s: %s", path, e)
        return 1

    try:
        payload = adapt_external_document(raw)
    except MalformedMatchJsonError as e:
        logger.error("%s: %s", path, e)
        return 1

    sweep = run_sweep(payload, sizes, args.seed)

    if args.json:
        print(json.dumps({str(n): s.to_dict() for n, s in sweep.items()}, indent=2))
    else:
        print(format_report(payload, sweep))
    return 0


if __name__ == "__main__":
    sys.exit(main())
