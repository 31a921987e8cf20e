from .base import Agent, AgentResult, ChainResult, Orchestrator
from .momentum import MomentumScorer, MomentumScoringAgent, classify
from .opportunity import OpportunityBlendingAgent, blend_scores
from .clustering import ClusteringAgent, cluster_queries, recluster_queries
from .intent import RuleBasedIntentClassifier

__all__ = [
    "Agent", "AgentResult", "ChainResult", "Orchestrator",
    "MomentumScorer", "MomentumScoringAgent", "classify",
    "OpportunityBlendingAgent", "blend_scores",
    "ClusteringAgent", "cluster_queries", "recluster_queries",
    "RuleBasedIntentClassifier",
]
