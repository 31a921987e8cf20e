"""
Entry point for the Trend Signal Scoring & Opportunity Clustering Engine.

Usage:
  # Score, blend and cluster a seeded synthetic dataset:
  python main.py demo
  python main.py demo --mode additive --threshold 0.4 --recluster

  # Run tests:
  python main.py test
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import subprocess
import sys

from config.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("main")


def demo(mode: str, threshold: float, seed: int, recluster: bool, as_json: bool):
    """End-to-end run over synthetic data; prints a report to stdout."""
    from agents.clustering import top_clusters
    from utils.mock_data import build_mock_store
    from utils.pipeline import run_pipeline

    logger.info("=== Trend Signal Engine: Demo Run ===")
    store = build_mock_store(seed=seed)
    result = run_pipeline(
        store,
        composition_mode=mode,
        similarity_threshold=threshold,
        recluster=recluster,
    )

    if as_json:
        print(json.dumps({
            "run_id": result.run_id,
            "composition_mode": result.composition_mode,
            "momentum": [m.to_dict() for m in result.momentum],
            "opportunities": [o.to_dict() for o in result.opportunities],
            "clusters": [c.to_dict() for c in result.clusters],
        }, indent=2))
        return result

    text = {q.id: q.text for q in store.get_all_queries()}

    print("\n" + "=" * 70)
    print("  TREND SIGNAL REPORT")
    print("=" * 70)
    print(f"  Run ID     : {result.run_id}")
    print(f"  Queries    : {result.total_queries}")
    print(f"  Mode       : {result.composition_mode}")
    s = result.scope
    print(f"  Scope      : {s.geo} / {s.language_code} / {s.network} / {s.window}")
    print(f"  Timestamp  : {result.executed_at.isoformat()}")
    print("=" * 70)

    print("\nMOMENTUM")
    print("-" * 70)
    for m in sorted(result.momentum, key=lambda m: m.score, reverse=True):
        b = m.breakdown
        print(
            f"  {m.score:>3}  {m.classification:<9}  {text[m.query_id]:<42} "
            f"s={b.slope:.0f} a={b.acceleration:.0f} c={b.consistency:.0f} b={b.breadth:.0f}"
        )

    print("\nTOP OPPORTUNITIES")
    print("-" * 70)
    for rank, o in enumerate(result.opportunities[:10], 1):
        print(
            f"  #{rank:<2} {text[o.query_id]:<42} opp={o.opportunity_score:>3}  "
            f"eff={o.efficiency_score:>3}  demand={o.demand_score:>3}  cpc={o.cpc_score:>3}"
        )

    print("\nOPPORTUNITY CLUSTERS")
    print("-" * 70)
    for c in top_clusters(store, limit=20):
        print(f"  {c.average_score:>3}  [{c.intent_type:<10}] {c.name}")
        for qid in c.queries:
            print(f"         - {text[qid]}")
    print("=" * 70)
    return result


def run_tests():
    """Run pytest."""
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "-v", "--tb=short"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=settings.APP_NAME)
    parser.add_argument("command", nargs="?", choices=["demo", "test"], default="demo")
    parser.add_argument(
        "--mode",
        choices=["averaged", "additive"],
        default=settings.COMPOSITION_MODE,
        help="Momentum composition mode",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=settings.SIMILARITY_THRESHOLD,
        help="Similarity threshold for clustering",
    )
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--recluster", action="store_true")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    args = parser.parse_args()

    if args.command == "demo":
        demo(args.mode, args.threshold, args.seed, args.recluster, args.json)
    elif args.command == "test":
        run_tests()
