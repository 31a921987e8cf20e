"""
Opportunity Blending Agent
---------------------------
Merges momentum with ad-platform demand and cost signals:

  demand_score = LogScale(avg_monthly_searches, population)
  cpc_score    = LogScale(top_of_page_bid_high_micros / 1e6, population)

  opportunity  = clamp100(round(0.45*demand + 0.35*momentum + 0.20*cpc))
  efficiency   = clamp100(round(0.55*demand + 0.45*momentum - 0.20*cpc))

High cost raises opportunity (commercial intent) and lowers efficiency
(expensive to capture). Population bounds are computed once per batch
before any row is blended.

Input:  MomentumOutput
Output: OpportunityOutput
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from agents.base import Agent
from agents.momentum import MomentumOutput, MomentumScorer, MomentumScoringAgent
from config.settings import settings
from db.providers import MarketMetricsProvider, QueryProvider, ScoreSink, SeriesProvider
from models.schemas import (
    ExternalMarketMetrics,
    MomentumScore,
    OpportunityScope,
    OpportunityScore,
)
from utils.normalization import (
    clamp100,
    log_scaled_score,
    micros_to_currency,
    population_bounds,
    round_half_up,
)

logger = logging.getLogger(__name__)


# ─── Population bounds ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class PopulationBounds:
    demand_min: float = 0.0
    demand_max: float = 0.0
    cpc_min: float = 0.0
    cpc_max: float = 0.0

    @classmethod
    def from_metrics(cls, metrics: Iterable[ExternalMarketMetrics]) -> "PopulationBounds":
        metrics = list(metrics)
        d_min, d_max = population_bounds(m.avg_monthly_searches for m in metrics)
        c_min, c_max = population_bounds(
            micros_to_currency(m.top_of_page_bid_high_micros) for m in metrics
        )
        return cls(demand_min=d_min, demand_max=d_max, cpc_min=c_min, cpc_max=c_max)


# ─── Blending ────────────────────────────────────────────────────────────────


def blend_scores(demand_score: float, momentum_score: float, cpc_score: float) -> Tuple[int, int]:
    """(opportunity_score, efficiency_score) from three 0-100 inputs."""
    opportunity = (
        settings.OPP_DEMAND_WEIGHT * demand_score
        + settings.OPP_MOMENTUM_WEIGHT * momentum_score
        + settings.OPP_CPC_WEIGHT * cpc_score
    )
    efficiency = (
        settings.EFF_DEMAND_WEIGHT * demand_score
        + settings.EFF_MOMENTUM_WEIGHT * momentum_score
        - settings.EFF_CPC_WEIGHT * cpc_score
    )
    return (
        int(clamp100(round_half_up(opportunity))),
        int(clamp100(round_half_up(efficiency))),
    )


def blend_opportunity(
    query_id: str,
    momentum: Optional[MomentumScore],
    metrics: Optional[ExternalMarketMetrics],
    bounds: PopulationBounds,
    scope: OpportunityScope,
) -> OpportunityScore:
    demand = metrics.avg_monthly_searches if metrics else None
    cost = micros_to_currency(metrics.top_of_page_bid_high_micros) if metrics else None

    demand_score = log_scaled_score(demand, bounds.demand_min, bounds.demand_max)
    cpc_score = log_scaled_score(cost, bounds.cpc_min, bounds.cpc_max)
    momentum_score = momentum.score if momentum else 0

    opportunity, efficiency = blend_scores(demand_score, momentum_score, cpc_score)

    return OpportunityScore(
        query_id=query_id,
        scope=scope,
        opportunity_score=opportunity,
        efficiency_score=efficiency,
        demand_score=demand_score,
        momentum_score=momentum_score,
        cpc_score=cpc_score,
        slope=momentum.breakdown.slope if momentum else 0.0,
        acceleration=momentum.breakdown.acceleration if momentum else 0.0,
        consistency=momentum.breakdown.consistency if momentum else 0.0,
    )


def rank_opportunities(rows: Sequence[OpportunityScore]) -> List[OpportunityScore]:
    """Stable descending sort on opportunity_score; ties keep input order."""
    return sorted(rows, key=lambda r: r.opportunity_score, reverse=True)


# ─── OpportunityBlendingAgent ────────────────────────────────────────────────


@dataclass
class OpportunityOutput:
    rows: List[OpportunityScore]            # ranked
    scope: OpportunityScope
    bounds: PopulationBounds
    metrics: Dict[str, ExternalMarketMetrics] = field(default_factory=dict)

    @property
    def updated(self) -> int:
        return len(self.rows)

    def top(self, limit: int = 10) -> List[OpportunityScore]:
        return self.rows[:limit]

    def to_dict_list(self) -> List[Dict]:
        return [r.to_dict() for r in self.rows]

    def summary(self) -> str:
        s = self.scope
        lines = [
            f"=== TOP OPPORTUNITIES ({s.geo}/{s.language_code}/{s.network}/{s.window}) ===",
            "",
        ]
        for i, r in enumerate(self.rows[:10], 1):
            lines.append(
                f"  #{i:>2} {r.query_id:<20} opp={r.opportunity_score:>3} "
                f"eff={r.efficiency_score:>3} demand={r.demand_score:>3} "
                f"momentum={r.momentum_score:>3} cpc={r.cpc_score:>3}"
            )
        return "\n".join(lines)


class OpportunityBlendingAgent(Agent):
    """
    Looks up market metrics for every scored query, fixes the population
    bounds for the batch, blends each row and upserts it into the sink.
    """

    def __init__(
        self,
        metrics_provider: MarketMetricsProvider,
        sink: Optional[ScoreSink] = None,
        scope: Optional[OpportunityScope] = None,
    ):
        super().__init__(name="OpportunityBlendingAgent")
        self.metrics_provider = metrics_provider
        self.sink = sink
        self.scope = scope or OpportunityScope(
            geo=settings.DEFAULT_GEO,
            language_code=settings.DEFAULT_LANGUAGE,
            network=settings.DEFAULT_NETWORK,
            window=settings.SERIES_WINDOW,
        )

    def run(self, momentum: MomentumOutput) -> OpportunityOutput:
        if momentum.window != self.scope.window:
            raise ValueError(
                f"momentum window {momentum.window} does not match scope window {self.scope.window}"
            )
        query_ids = [q.id for q in momentum.queries]
        metrics = self.metrics_provider.get_market_metrics(query_ids, self.scope)
        bounds = PopulationBounds.from_metrics(metrics.values())

        self.logger.info(
            f"Blending {len(query_ids)} queries, {len(metrics)} with market metrics "
            f"(demand=[{bounds.demand_min:g}, {bounds.demand_max:g}], "
            f"cpc=[{bounds.cpc_min:g}, {bounds.cpc_max:g}])"
        )

        by_query = momentum.by_query()
        rows = [
            blend_opportunity(qid, by_query.get(qid), metrics.get(qid), bounds, self.scope)
            for qid in query_ids
        ]

        if self.sink is not None:
            for row in rows:
                self.sink.upsert_opportunity_score(row)

        ranked = rank_opportunities(rows)
        for r in ranked[:5]:
            self.logger.debug(
                f"  {r.query_id}: opp={r.opportunity_score} eff={r.efficiency_score}"
            )
        return OpportunityOutput(rows=ranked, scope=self.scope, bounds=bounds, metrics=metrics)


def refresh_opportunity_scores(
    queries: QueryProvider,
    series: SeriesProvider,
    metrics: MarketMetricsProvider,
    sink: ScoreSink,
    scope: Optional[OpportunityScope] = None,
    scorer: Optional[MomentumScorer] = None,
    limit: int = settings.TOP_LIMIT,
) -> Dict:
    """
    Recompute and upsert every opportunity row for one scope, then return
    the persisted top-N for that scope. Momentum is scored over the
    scope's window; a scorer for any other window is rejected.
    """
    all_queries = queries.get_all_queries()
    blender = OpportunityBlendingAgent(metrics, sink=sink, scope=scope)
    window = blender.scope.window
    if scorer is None:
        scorer = MomentumScorer(window=window)
    elif scorer.window != window:
        raise ValueError(f"scorer window {scorer.window} does not match scope window {window}")
    if not all_queries:
        return {"updated": 0, "top": [], "scope": blender.scope}

    momentum = MomentumScoringAgent(series, sink=sink, scorer=scorer).run(all_queries)
    output = blender.run(momentum)
    logger.info(f"Updated opportunity scores for {output.updated} queries")
    return {
        "updated": output.updated,
        "top": sink.top_opportunity_scores(limit, blender.scope),
        "scope": blender.scope,
    }
