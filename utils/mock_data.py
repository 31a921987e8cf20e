"""
Synthetic queries, interest series and ad-platform metrics for demo runs
and tests. Seeded, so the same seed always yields the same store.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import List, Optional

from agents.intent import RuleBasedIntentClassifier
from config.settings import settings
from db.memory import InMemoryTrendStore
from models.schemas import ExternalMarketMetrics, InterestSample, Query

logger = logging.getLogger(__name__)

# (text, stage, function, pain, asset, trend shape)
MOCK_QUERIES = [
    ("cash flow problems small business", "early", "finance", "cash", None, "rising"),
    ("cash flow issues startup", "early", "finance", "cash", None, "rising"),
    ("customer churn problem saas", "growth", "sales", "churn", None, "spiky"),
    ("best crm software for agencies", "growth", "sales", None, "crm", "breakout"),
    ("invoice automation software", "growth", "finance", None, "invoicing", "rising"),
    ("crm dashboard integration", "growth", "sales", None, "crm", "flat"),
    ("how to scale a consulting business", "mature", "operations", None, None, "flat"),
    ("exit strategy for small business owners", "mature", "finance", None, None, "falling"),
    ("how to learn bookkeeping basics", "early", "finance", None, None, "falling"),
    ("bookkeeping tutorial for beginners", "early", "finance", None, None, "flat"),
    ("hiring burnout stress founders", "growth", "people", "burnout", None, "spiky"),
    ("migrate from spreadsheets to erp", "mature", "operations", None, "erp", "rising"),
]

REGIONS = [
    "US-CA", "US-NY", "US-TX", "US-FL", "US-WA", "US-IL", "US-MA", "US-CO",
    "US-GA", "US-OR", "US-AZ", "US-NC", "US-VA", "US-MN", "US-PA", "US-OH",
    "US-MI", "US-NJ", "US-UT", "US-TN", "US-WI", "US-MO",
]


def _shape_value(shape: str, i: int, n: int, rng: random.Random) -> float:
    t = i / max(n - 1, 1)
    if shape == "breakout":
        base = 10 + 85 * t ** 2
    elif shape == "rising":
        base = 25 + 45 * t
    elif shape == "falling":
        base = 80 - 55 * t
    elif shape == "spiky":
        base = 30 + (60 if rng.random() < 0.15 else 0)
    else:
        base = 45
    return max(0.0, base + rng.uniform(-4, 4))


def make_series(
    shape: str,
    n_points: int = 13,
    start: Optional[datetime] = None,
    region: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> List[InterestSample]:
    """Weekly samples across the 90-day window."""
    rng = rng or random.Random(0)
    start = start or datetime(2024, 1, 1)
    return [
        InterestSample(
            date=start + timedelta(days=7 * i),
            value=round(_shape_value(shape, i, n_points, rng), 2),
            region=region,
            window=settings.SERIES_WINDOW,
        )
        for i in range(n_points)
    ]


def build_mock_store(seed: int = 42, classify_intents: bool = True) -> InMemoryTrendStore:
    rng = random.Random(seed)
    store = InMemoryTrendStore()
    created = datetime(2024, 1, 1)

    for idx, (text, stage, function, pain, asset, shape) in enumerate(MOCK_QUERIES):
        query = store.add_query(Query(
            id=f"q{idx + 1:02d}",
            text=text,
            stage=stage,
            function=function,
            pain=pain,
            asset=asset,
            created_at=created + timedelta(minutes=idx),
        ))

        store.add_samples(query.id, make_series(shape, rng=rng))

        # regional snapshots feed breadth only
        n_regions = rng.randint(0, len(REGIONS))
        for region in rng.sample(REGIONS, n_regions):
            store.add_samples(query.id, [InterestSample(
                date=created,
                value=float(rng.randint(0, 100)),
                region=region,
                window=settings.SERIES_WINDOW,
            )])

        # roughly one query in six has no ad-platform data
        if rng.random() < 0.17:
            continue
        store.set_market_metrics(ExternalMarketMetrics(
            query_id=query.id,
            geo=settings.DEFAULT_GEO,
            language_code=settings.DEFAULT_LANGUAGE,
            network=settings.DEFAULT_NETWORK,
            avg_monthly_searches=float(rng.choice([10, 50, 170, 480, 1300, 5400, 22000])),
            competition=rng.choice(["LOW", "MEDIUM", "HIGH"]),
            competition_index=float(rng.randint(0, 100)),
            top_of_page_bid_low_micros=float(rng.randint(200_000, 2_000_000)),
            top_of_page_bid_high_micros=float(rng.randint(2_000_000, 25_000_000)),
        ))

    if classify_intents:
        classifier = RuleBasedIntentClassifier(store.get_all_queries())
        for c in classifier.classify_all():
            store.set_intent_classification(c)

    logger.info(
        f"Mock store: {len(store.queries)} queries, "
        f"{len(store.metrics)} with market metrics"
    )
    return store
