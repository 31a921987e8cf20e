"""
Rule-based intent classification.

Counts keyword hits per intent; the intent with the most hits wins
(ties resolved in INTENT_TYPES order). Confidence is the winner's share
of all hits on a 0-100 scale; with no hits the query falls into the
default intent at confidence 50.
"""

import logging
from typing import Dict, List, Optional, Sequence

from config.settings import settings
from db.providers import IntentProvider
from models.schemas import INTENT_TYPES, IntentClassification, Query
from utils.normalization import round_half_up

logger = logging.getLogger(__name__)

INTENT_KEYWORDS: Dict[str, List[str]] = {
    "pain": [
        "problem", "issue", "struggle", "difficulty", "challenge", "pain",
        "cash flow", "churn", "burnout", "stress", "failing", "losing",
        "can't", "unable", "stuck", "blocked",
    ],
    "tool": [
        "software", "tool", "system", "platform", "app", "solution",
        "crm", "dashboard", "automation", "integration", "plugin",
    ],
    "transition": [
        "exit", "scale", "grow", "expand", "transition", "change",
        "next step", "move to", "upgrade", "migrate", "switch",
    ],
    "education": [
        "how to", "learn", "guide", "tutorial", "best practice",
        "tips", "strategy", "method", "approach", "way to",
    ],
}


def classify_text(text: str) -> Dict[str, float]:
    lower = text.lower()
    hits = {
        intent: sum(1 for kw in INTENT_KEYWORDS[intent] if kw in lower)
        for intent in INTENT_TYPES
    }
    total = sum(hits.values())
    if total == 0:
        return {"intent_type": settings.DEFAULT_INTENT, "confidence": 50}

    best = max(INTENT_TYPES, key=lambda i: hits[i])   # first max wins
    return {
        "intent_type": best,
        "confidence": min(100, round_half_up(hits[best] / total * 100)),
    }


class RuleBasedIntentClassifier(IntentProvider):
    """
    Keyword classifier usable directly as an IntentProvider, or as a
    fallback wrapped around another provider.
    """

    def __init__(self, queries: Sequence[Query], primary: Optional[IntentProvider] = None):
        self.queries = {q.id: q for q in queries}
        self.primary = primary

    def classify(self, query: Query) -> IntentClassification:
        result = classify_text(query.text)
        return IntentClassification(
            query_id=query.id,
            intent_type=result["intent_type"],
            confidence=result["confidence"],
        )

    def classify_all(self) -> List[IntentClassification]:
        return [self.classify(q) for q in self.queries.values()]

    def get_intent_classification(self, query_id: str) -> Optional[IntentClassification]:
        if self.primary is not None:
            found = self.primary.get_intent_classification(query_id)
            if found is not None:
                return found
        query = self.queries.get(query_id)
        if query is None:
            return None
        return self.classify(query)
