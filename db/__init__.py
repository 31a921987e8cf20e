from .providers import (
    QueryProvider, SeriesProvider, MarketMetricsProvider,
    IntentProvider, ScoreSink, ClusterStore,
)
from .memory import InMemoryTrendStore

__all__ = [
    "QueryProvider", "SeriesProvider", "MarketMetricsProvider",
    "IntentProvider", "ScoreSink", "ClusterStore",
    "InMemoryTrendStore",
]
