"""
Core data models for the trend signal engine.
"""

from .schemas import (
    CompositionMode,
    CLASSIFICATIONS,
    INTENT_TYPES,
    AD_NETWORKS,
    Query,
    InterestSample,
    ExternalMarketMetrics,
    IntentClassification,
    ScoreBreakdown,
    MomentumScore,
    OpportunityScope,
    OpportunityScore,
    OpportunityCluster,
    PipelineResult,
)

__all__ = [
    "CompositionMode",
    "CLASSIFICATIONS",
    "INTENT_TYPES",
    "AD_NETWORKS",
    "Query",
    "InterestSample",
    "ExternalMarketMetrics",
    "IntentClassification",
    "ScoreBreakdown",
    "MomentumScore",
    "OpportunityScope",
    "OpportunityScore",
    "OpportunityCluster",
    "PipelineResult",
]
