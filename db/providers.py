"""
Collaborator interfaces.

The scoring and clustering agents never fetch or persist anything
themselves; they are handed objects implementing these interfaces.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from models.schemas import (
    Query,
    InterestSample,
    ExternalMarketMetrics,
    IntentClassification,
    MomentumScore,
    OpportunityScope,
    OpportunityScore,
    OpportunityCluster,
)


class QueryProvider(ABC):
    @abstractmethod
    def get_all_queries(self) -> List[Query]:
        """All tracked queries in stable (creation) order."""


class SeriesProvider(ABC):
    @abstractmethod
    def get_series(self, query_id: str, window: str) -> List[InterestSample]:
        """Chronological samples for one query within one window."""

    @abstractmethod
    def get_all_samples(self, query_id: str) -> List[InterestSample]:
        """Every sample held for a query, across windows and regions."""


class MarketMetricsProvider(ABC):
    @abstractmethod
    def get_market_metrics(
        self, query_ids: Sequence[str], scope: OpportunityScope
    ) -> Dict[str, ExternalMarketMetrics]:
        """Metrics keyed by query id; queries without data are absent."""


class IntentProvider(ABC):
    @abstractmethod
    def get_intent_classification(self, query_id: str) -> Optional[IntentClassification]:
        ...


class ScoreSink(ABC):
    @abstractmethod
    def upsert_momentum_score(self, score: MomentumScore) -> None:
        ...

    @abstractmethod
    def upsert_opportunity_score(self, row: OpportunityScore) -> None:
        ...

    @abstractmethod
    def top_opportunity_scores(self, limit: int, scope: OpportunityScope) -> List[OpportunityScore]:
        ...


class ClusterStore(ABC):
    @abstractmethod
    def get_all_clusters(self) -> List[OpportunityCluster]:
        ...

    @abstractmethod
    def get_cluster(self, cluster_id: str) -> Optional[OpportunityCluster]:
        ...

    @abstractmethod
    def add_cluster(
        self, name: str, intent_type: str, average_score: int, queries: List[str]
    ) -> OpportunityCluster:
        """Persist a new cluster; the store assigns its id."""

    @abstractmethod
    def remove_cluster(self, cluster_id: str) -> None:
        ...

    @abstractmethod
    def find_existing_cluster_with_queries(
        self, query_ids: Sequence[str], intent_type: Optional[str] = None
    ) -> Optional[str]:
        """
        Id of a cluster whose member set equals `query_ids` exactly, if any.
        When `intent_type` is given the cluster must carry that intent too.
        """
