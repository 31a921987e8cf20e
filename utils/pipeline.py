"""
Pipeline runner: wires the scoring, blending and clustering agents
together and returns a PipelineResult.

Architecture:
  MomentumScoringAgent → OpportunityBlendingAgent
  ClusteringAgent (independent, same query snapshot)
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from agents.base import Orchestrator
from agents.clustering import ClusteringAgent
from agents.momentum import MomentumScorer, MomentumScoringAgent
from agents.opportunity import OpportunityBlendingAgent, OpportunityOutput
from db.memory import InMemoryTrendStore
from models.schemas import OpportunityScope, PipelineResult
from config.settings import settings

logger = logging.getLogger(__name__)


def run_pipeline(
    store: InMemoryTrendStore,
    scope: Optional[OpportunityScope] = None,
    composition_mode: Optional[str] = None,
    similarity_threshold: float = settings.SIMILARITY_THRESHOLD,
    recluster: bool = False,
) -> PipelineResult:
    """
    End-to-end pass over every query in `store`.

    Parameters
    ----------
    store : InMemoryTrendStore
        Any object implementing the provider/sink interfaces works; the
        in-memory store is the one shipped here.
    scope : OpportunityScope, optional
        Market scope for demand/cost lookups. Defaults from settings.
    composition_mode : str, optional
        "averaged" | "additive". Defaults from settings.
    recluster : bool
        Drop stored clusters before clustering instead of adding to them.
    """
    scorer = MomentumScorer(mode=composition_mode, window=scope.window if scope else None)
    queries = store.get_all_queries()

    chain = Orchestrator([
        MomentumScoringAgent(store, sink=store, scorer=scorer),
        OpportunityBlendingAgent(store, sink=store, scope=scope),
    ])
    result = chain.execute(queries)
    if not result.success:
        raise RuntimeError(f"Pipeline failed: {result.error}")
    momentum = result.output("MomentumScoringAgent")
    opportunities: OpportunityOutput = result.output("OpportunityBlendingAgent")

    if recluster:
        for c in store.get_all_clusters():
            store.remove_cluster(c.id)

    clustering = ClusteringAgent(
        store, store, store, threshold=similarity_threshold, scorer=scorer,
        incremental=not recluster,
    ).execute(queries)
    if not clustering.success:
        raise RuntimeError(f"Pipeline failed: {clustering.error}")

    return PipelineResult(
        run_id=str(uuid.uuid4()),
        scope=opportunities.scope,
        total_queries=len(queries),
        momentum=momentum.scores,
        opportunities=opportunities.rows,
        clusters=clustering.data.clusters,
        composition_mode=scorer.mode.value,
        executed_at=datetime.utcnow(),
    )
