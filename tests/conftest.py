"""
Shared fixtures. Run with: python -m pytest tests/ -v
"""

import os
import sys
from datetime import datetime, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from db.memory import InMemoryTrendStore
from models.schemas import InterestSample, IntentClassification, Query
from utils.mock_data import build_mock_store


def samples(values, region=None, window="90d", start=datetime(2024, 1, 1)):
    return [
        InterestSample(date=start + timedelta(days=7 * i), value=v, region=region, window=window)
        for i, v in enumerate(values)
    ]


@pytest.fixture
def make_samples():
    return samples


@pytest.fixture
def mock_store():
    return build_mock_store(seed=42)


@pytest.fixture
def empty_store():
    return InMemoryTrendStore()


@pytest.fixture
def small_store():
    """Four queries, two intents, flat series everywhere."""
    store = InMemoryTrendStore()
    rows = [
        ("q1", "cash flow problems", "pain"),
        ("q2", "cash flow issues", "pain"),
        ("q3", "crm software", "tool"),
        ("q4", "cash flow problems", "tool"),
    ]
    for qid, text, intent in rows:
        store.add_query(Query(id=qid, text=text))
        store.add_samples(qid, samples([50.0] * 13))
        store.set_intent_classification(
            IntentClassification(query_id=qid, intent_type=intent, confidence=90)
        )
    return store
