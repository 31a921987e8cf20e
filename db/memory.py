"""
In-memory implementation of every collaborator interface.

Keys mirror the storage boundary: momentum rows by (query_id, window),
opportunity rows by (query_id, geo, language, network, window).
"""

import logging
import uuid
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

from db.providers import (
    QueryProvider,
    SeriesProvider,
    MarketMetricsProvider,
    IntentProvider,
    ScoreSink,
    ClusterStore,
)
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

logger = logging.getLogger(__name__)


class InMemoryTrendStore(
    QueryProvider,
    SeriesProvider,
    MarketMetricsProvider,
    IntentProvider,
    ScoreSink,
    ClusterStore,
):
    def __init__(self):
        self.queries: "OrderedDict[str, Query]" = OrderedDict()
        self.samples: Dict[str, List[InterestSample]] = {}
        self.metrics: Dict[Tuple[str, str, str, str], ExternalMarketMetrics] = {}
        self.intents: Dict[str, IntentClassification] = {}
        self.momentum_scores: Dict[Tuple[str, str], MomentumScore] = {}
        self.opportunity_scores: "OrderedDict[tuple, OpportunityScore]" = OrderedDict()
        self.clusters: "OrderedDict[str, OpportunityCluster]" = OrderedDict()

    # ── writes used to seed the store ────────────────────────────────────

    def add_query(self, query: Query) -> Query:
        self.queries[query.id] = query
        self.samples.setdefault(query.id, [])
        return query

    def add_samples(self, query_id: str, samples: Sequence[InterestSample]) -> None:
        bucket = self.samples.setdefault(query_id, [])
        bucket.extend(samples)
        bucket.sort(key=lambda s: s.date)

    def set_market_metrics(self, metrics: ExternalMarketMetrics) -> None:
        key = (metrics.query_id, metrics.geo, metrics.language_code, metrics.network)
        self.metrics[key] = metrics

    def set_intent_classification(self, classification: IntentClassification) -> None:
        self.intents[classification.query_id] = classification

    # ── QueryProvider ────────────────────────────────────────────────────

    def get_all_queries(self) -> List[Query]:
        return list(self.queries.values())

    # ── SeriesProvider ───────────────────────────────────────────────────

    def get_series(self, query_id: str, window: str, region: Optional[str] = None) -> List[InterestSample]:
        """Samples for one region tag; the default None is the national series."""
        return [
            s for s in self.samples.get(query_id, [])
            if s.window == window and s.region == region
        ]

    def get_all_samples(self, query_id: str) -> List[InterestSample]:
        return list(self.samples.get(query_id, []))

    # ── MarketMetricsProvider ────────────────────────────────────────────

    def get_market_metrics(
        self, query_ids: Sequence[str], scope: OpportunityScope
    ) -> Dict[str, ExternalMarketMetrics]:
        found = {}
        for qid in query_ids:
            m = self.metrics.get((qid, scope.geo, scope.language_code, scope.network))
            if m is not None:
                found[qid] = m
        return found

    # ── IntentProvider ───────────────────────────────────────────────────

    def get_intent_classification(self, query_id: str) -> Optional[IntentClassification]:
        return self.intents.get(query_id)

    # ── ScoreSink ────────────────────────────────────────────────────────

    def upsert_momentum_score(self, score: MomentumScore) -> None:
        self.momentum_scores[(score.query_id, score.window)] = score

    def get_momentum_score(self, query_id: str, window: str) -> Optional[MomentumScore]:
        return self.momentum_scores.get((query_id, window))

    def upsert_opportunity_score(self, row: OpportunityScore) -> None:
        # overwrite in place so storage order stays stable across refreshes
        self.opportunity_scores[row.key] = row

    def top_opportunity_scores(self, limit: int, scope: OpportunityScope) -> List[OpportunityScore]:
        rows = [r for r in self.opportunity_scores.values() if r.scope == scope]
        rows.sort(key=lambda r: r.opportunity_score, reverse=True)
        return rows[:limit]

    # ── ClusterStore ─────────────────────────────────────────────────────

    def get_all_clusters(self) -> List[OpportunityCluster]:
        return list(self.clusters.values())

    def get_cluster(self, cluster_id: str) -> Optional[OpportunityCluster]:
        return self.clusters.get(cluster_id)

    def add_cluster(
        self, name: str, intent_type: str, average_score: int, queries: List[str]
    ) -> OpportunityCluster:
        cluster = OpportunityCluster(
            id=str(uuid.uuid4()),
            name=name,
            intent_type=intent_type,
            average_score=average_score,
            queries=sorted(queries),
        )
        self.clusters[cluster.id] = cluster
        logger.debug(f"Stored cluster {cluster.id} '{name}' ({len(queries)} queries)")
        return cluster

    def remove_cluster(self, cluster_id: str) -> None:
        self.clusters.pop(cluster_id, None)

    def find_existing_cluster_with_queries(
        self, query_ids: Sequence[str], intent_type: Optional[str] = None
    ) -> Optional[str]:
        wanted = set(query_ids)
        for cluster in self.clusters.values():
            if intent_type is not None and cluster.intent_type != intent_type:
                continue
            if len(cluster.queries) == len(query_ids) and set(cluster.queries) == wanted:
                return cluster.id
        return None
