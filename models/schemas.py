"""
Core data models / schemas for the trend signal engine.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, Any


class CompositionMode(str, Enum):
    AVERAGED = "averaged"       # four 0-100 sub-scores, mean
    ADDITIVE = "additive"       # four 0-25 sub-scores, sum


CLASSIFICATIONS = ("breakout", "growing", "stable", "declining")
INTENT_TYPES = ("pain", "tool", "transition", "education")
AD_NETWORKS = ("GOOGLE_SEARCH", "GOOGLE_SEARCH_AND_PARTNERS")


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Query:
    id: str
    text: str
    stage: Optional[str] = None
    function: Optional[str] = None
    pain: Optional[str] = None
    asset: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def dimensions(self) -> Dict[str, Optional[str]]:
        return {
            "stage": self.stage,
            "function": self.function,
            "pain": self.pain,
            "asset": self.asset,
        }


@dataclass(frozen=True)
class InterestSample:
    date: datetime
    value: float                    # non-negative interest indicator
    region: Optional[str] = None
    window: str = "90d"


@dataclass
class ExternalMarketMetrics:
    query_id: str
    geo: str = "US"
    language_code: str = "en"
    network: str = "GOOGLE_SEARCH"
    currency_code: str = "USD"
    avg_monthly_searches: Optional[float] = None
    competition: Optional[str] = None          # LOW | MEDIUM | HIGH
    competition_index: Optional[float] = None
    top_of_page_bid_low_micros: Optional[float] = None
    top_of_page_bid_high_micros: Optional[float] = None


@dataclass
class IntentClassification:
    query_id: str
    intent_type: str                # pain | tool | transition | education
    confidence: float               # 0-100


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------

@dataclass
class ScoreBreakdown:
    slope: float
    acceleration: float
    consistency: float
    breadth: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "slope": round(self.slope, 4),
            "acceleration": round(self.acceleration, 4),
            "consistency": round(self.consistency, 4),
            "breadth": round(self.breadth, 4),
        }


@dataclass
class MomentumScore:
    query_id: str
    score: int                      # 0-100
    breakdown: ScoreBreakdown
    classification: str             # breakout | growing | stable | declining
    window: str = "90d"
    calculated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query_id": self.query_id,
            "score": self.score,
            "classification": self.classification,
            "window": self.window,
            "breakdown": self.breakdown.to_dict(),
        }


# ---------------------------------------------------------------------------
# Opportunity scoring
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OpportunityScope:
    geo: str = "US"
    language_code: str = "en"
    network: str = "GOOGLE_SEARCH"
    window: str = "90d"


@dataclass
class OpportunityScore:
    query_id: str
    scope: OpportunityScope
    opportunity_score: int          # 0-100
    efficiency_score: int           # 0-100
    demand_score: int               # 0-100
    momentum_score: int             # 0-100
    cpc_score: int                  # 0-100
    # pass-through from the momentum breakdown
    slope: float = 0.0
    acceleration: float = 0.0
    consistency: float = 0.0
    calculated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def key(self):
        s = self.scope
        return (self.query_id, s.geo, s.language_code, s.network, s.window)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query_id": self.query_id,
            "geo": self.scope.geo,
            "language_code": self.scope.language_code,
            "network": self.scope.network,
            "window": self.scope.window,
            "opportunity_score": self.opportunity_score,
            "efficiency_score": self.efficiency_score,
            "demand_score": self.demand_score,
            "momentum_score": self.momentum_score,
            "cpc_score": self.cpc_score,
            "slope": round(self.slope, 4),
            "acceleration": round(self.acceleration, 4),
            "consistency": round(self.consistency, 4),
        }


# ---------------------------------------------------------------------------
# Clusters
# ---------------------------------------------------------------------------

@dataclass
class OpportunityCluster:
    id: str
    name: str
    intent_type: str
    average_score: int
    queries: List[str]              # member query ids, sorted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "intent_type": self.intent_type,
            "average_score": self.average_score,
            "queries": list(self.queries),
        }


# ---------------------------------------------------------------------------
# Pipeline run summary
# ---------------------------------------------------------------------------

@dataclass
class PipelineResult:
    run_id: str
    scope: OpportunityScope
    total_queries: int
    momentum: List[MomentumScore]
    opportunities: List[OpportunityScore]       # ranked
    clusters: List[OpportunityCluster]
    composition_mode: str
    executed_at: datetime = field(default_factory=datetime.utcnow)
