"""
Opportunity Clustering Agent
-----------------------------
Groups queries into opportunity clusters.

  1. Partition by intent. Queries with different intents never meet.
  2. Greedy pass in input order: a query joins the existing cluster with
     the highest mean similarity to its members if that mean is
     >= threshold (ties go to the earlier cluster), else starts a new one.
  3. sim(a, b) = min(1, jaccard(words_a, words_b) + 0.2 * matching_dimensions)
     where dimensions are stage / function / pain / asset.
  4. Name = Capitalized first word (> 3 chars) shared by every member + intent,
     falling back to a per-intent label.
  5. average_score = round(mean member momentum).

An incremental `cluster_queries` run keeps stored clusters as they are and
only groups queries none of them holds. A group whose exact member set and
intent already exist in the store is reused instead of duplicated.
`recluster_queries` drops every stored cluster and regroups everything.

Input:  List[Query]
Output: ClusteringOutput
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from agents.base import Agent
from agents.momentum import MomentumScorer
from config.settings import settings
from db.providers import ClusterStore, IntentProvider, QueryProvider, SeriesProvider
from models.schemas import OpportunityCluster, Query
from utils.normalization import round_half_up

logger = logging.getLogger(__name__)

INTENT_NAMES = {
    "pain": "Pain Points",
    "tool": "Tool Needs",
    "transition": "Business Transitions",
    "education": "Learning Topics",
}
FALLBACK_NAME = "Opportunity Cluster"

DIMENSIONS = ("stage", "function", "pain", "asset")


# ─── Similarity ──────────────────────────────────────────────────────────────


def tokenize(text: str) -> List[str]:
    return text.lower().split()


def jaccard(words_a, words_b) -> float:
    a, b = set(words_a), set(words_b)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def query_similarity(q1: Query, q2: Query, intent1: str, intent2: str) -> float:
    if intent1 != intent2:
        return 0.0

    score = jaccard(tokenize(q1.text), tokenize(q2.text))
    for dim in DIMENSIONS:
        v1, v2 = getattr(q1, dim), getattr(q2, dim)
        if v1 and v2 and v1 == v2:
            score += settings.DIMENSION_BONUS
    return min(1.0, score)


def cluster_name(queries: Sequence[Query], intent: str) -> str:
    token_lists = [tokenize(q.text) for q in queries]
    if token_lists:
        common = [
            w for w in token_lists[0]
            if len(w) > settings.MIN_NAME_WORD_LENGTH and all(w in t for t in token_lists)
        ]
        if common:
            word = common[0]
            return word[:1].upper() + word[1:] + " " + intent
    return INTENT_NAMES.get(intent, FALLBACK_NAME)


# ─── Greedy partition ────────────────────────────────────────────────────────


def partition_by_intent(
    queries: Sequence[Query], intents: Dict[str, str]
) -> "OrderedDict[str, List[Query]]":
    buckets: "OrderedDict[str, List[Query]]" = OrderedDict()
    for q in queries:
        intent = intents.get(q.id) or settings.DEFAULT_INTENT
        buckets.setdefault(intent, []).append(q)
    return buckets


def greedy_groups(
    queries: Sequence[Query],
    intent: str,
    threshold: float,
) -> List[List[Query]]:
    """Single-intent greedy assignment; order-dependent on purpose."""
    groups: List[List[Query]] = []
    for query in queries:
        best_idx, best_sim = None, -1.0
        for idx, members in enumerate(groups):
            mean_sim = sum(
                query_similarity(query, m, intent, intent) for m in members
            ) / len(members)
            if mean_sim > best_sim:
                best_idx, best_sim = idx, mean_sim

        if best_idx is not None and best_sim >= threshold:
            groups[best_idx].append(query)
        else:
            groups.append([query])
    return groups


def build_groups(
    queries: Sequence[Query],
    intents: Dict[str, str],
    threshold: float = settings.SIMILARITY_THRESHOLD,
) -> List[tuple]:
    """[(intent, [Query, ...]), ...] across all intent buckets, in bucket order."""
    seen = set()
    unique = []
    for q in queries:
        if q.id not in seen:
            seen.add(q.id)
            unique.append(q)

    out = []
    for intent, bucket in partition_by_intent(unique, intents).items():
        for group in greedy_groups(bucket, intent, threshold):
            out.append((intent, group))
    return out


# ─── ClusteringAgent ─────────────────────────────────────────────────────────


@dataclass
class ClusteringOutput:
    clusters: List[OpportunityCluster]
    created: int
    reused: int
    threshold: float

    def summary(self) -> str:
        lines = [
            f"=== OPPORTUNITY CLUSTERS (threshold={self.threshold}) ===",
            f"  created={self.created}  reused={self.reused}",
            "",
        ]
        for c in sorted(self.clusters, key=lambda c: c.average_score, reverse=True)[:10]:
            lines.append(
                f"  {c.average_score:>3}  [{c.intent_type:<10}] {c.name:<30} "
                f"{len(c.queries)} queries"
            )
        return "\n".join(lines)


class ClusteringAgent(Agent):
    """
    Intent-gated greedy clustering with a dedup guard against the store.

    Incremental runs (the default) leave stored clusters untouched: queries
    a stored cluster already holds are skipped, and only the rest are
    grouped into new clusters. With `incremental=False` every query is
    grouped from scratch, and the dedup guard reuses any stored cluster
    with the same members and intent.
    """

    def __init__(
        self,
        intent_provider: IntentProvider,
        series_provider: SeriesProvider,
        store: ClusterStore,
        threshold: Optional[float] = None,
        scorer: Optional[MomentumScorer] = None,
        incremental: bool = True,
    ):
        super().__init__(name="ClusteringAgent")
        self.threshold = threshold if threshold is not None else settings.SIMILARITY_THRESHOLD
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"similarity threshold must be in [0, 1], got {self.threshold}")
        self.intent_provider = intent_provider
        self.series_provider = series_provider
        self.store = store
        self.scorer = scorer or MomentumScorer()
        self.incremental = incremental

    def resolve_intents(self, queries: Sequence[Query]) -> Dict[str, str]:
        intents = {}
        for q in queries:
            c = self.intent_provider.get_intent_classification(q.id)
            intents[q.id] = c.intent_type if c and c.intent_type else settings.DEFAULT_INTENT
        return intents

    def average_score(self, query_ids: Sequence[str]) -> int:
        scores = [s.score for s in self.scorer.score_queries(query_ids, self.series_provider)]
        if not scores:
            return 0
        return round_half_up(sum(scores) / len(scores))

    def stored_clusters_for(self, queries: Sequence[Query]) -> List[OpportunityCluster]:
        """Stored clusters holding at least one of `queries`, in store order."""
        wanted = {q.id for q in queries}
        return [c for c in self.store.get_all_clusters() if wanted.intersection(c.queries)]

    def run(self, queries: Sequence[Query]) -> ClusteringOutput:
        queries = list(queries)
        kept: List[OpportunityCluster] = []
        pending = queries
        if self.incremental:
            kept = self.stored_clusters_for(queries)
            held = {qid for c in kept for qid in c.queries}
            pending = [q for q in queries if q.id not in held]

        intents = self.resolve_intents(pending)
        groups = build_groups(pending, intents, self.threshold)

        self.logger.info(
            f"Clustering {len(pending)} of {len(queries)} queries into {len(groups)} "
            f"new groups (threshold={self.threshold}, kept={len(kept)})"
        )

        clusters: List[OpportunityCluster] = list(kept)
        created, reused = 0, len(kept)
        for intent, members in groups:
            query_ids = sorted(q.id for q in members)

            existing_id = self.store.find_existing_cluster_with_queries(query_ids, intent)
            if existing_id:
                existing = self.store.get_cluster(existing_id)
                if existing is not None:
                    clusters.append(existing)
                    reused += 1
                    continue

            cluster = self.store.add_cluster(
                name=cluster_name(members, intent),
                intent_type=intent,
                average_score=self.average_score(query_ids),
                queries=query_ids,
            )
            self.logger.debug(f"  new cluster '{cluster.name}' {query_ids}")
            clusters.append(cluster)
            created += 1

        self.logger.info(f"Clusters: {created} created, {reused} reused")
        return ClusteringOutput(
            clusters=clusters, created=created, reused=reused, threshold=self.threshold
        )


# ─── Store-level operations ──────────────────────────────────────────────────


def cluster_queries(
    queries: QueryProvider,
    intents: IntentProvider,
    series: SeriesProvider,
    store: ClusterStore,
    threshold: float = settings.SIMILARITY_THRESHOLD,
    scorer: Optional[MomentumScorer] = None,
) -> List[OpportunityCluster]:
    agent = ClusteringAgent(intents, series, store, threshold=threshold, scorer=scorer)
    return agent.run(queries.get_all_queries()).clusters


def recluster_queries(
    queries: QueryProvider,
    intents: IntentProvider,
    series: SeriesProvider,
    store: ClusterStore,
    threshold: float = settings.SIMILARITY_THRESHOLD,
    scorer: Optional[MomentumScorer] = None,
) -> List[OpportunityCluster]:
    """Discard every stored cluster, then cluster from scratch."""
    existing = store.get_all_clusters()
    for c in existing:
        store.remove_cluster(c.id)
    logger.info(f"Removed {len(existing)} clusters before reclustering")
    agent = ClusteringAgent(
        intents, series, store, threshold=threshold, scorer=scorer, incremental=False
    )
    return agent.run(queries.get_all_queries()).clusters


def get_clusters(store: ClusterStore) -> List[OpportunityCluster]:
    return store.get_all_clusters()


def get_cluster(store: ClusterStore, cluster_id: str) -> Optional[OpportunityCluster]:
    return store.get_cluster(cluster_id)


def top_clusters(store: ClusterStore, limit: int = 10) -> List[OpportunityCluster]:
    clusters = store.get_all_clusters()
    return sorted(clusters, key=lambda c: c.average_score, reverse=True)[:limit]
