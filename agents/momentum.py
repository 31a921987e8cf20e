"""
Momentum Scoring Agent
-----------------------
Turns an interest series into a bounded momentum score:

  averaged mode:  score = round(mean(slope, accel, consistency, breadth))   each 0-100
  additive mode:  score = sum(round(slope), round(accel), ...)              each 0-25

Classification (first match wins):
  score >= 80 breakout | >= 60 growing | >= 40 stable | else declining

An empty series scores 0 / declining with consistency at the mode's
neutral default. Nothing here raises on missing data.

Input:  List[Query]
Output: MomentumOutput
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from agents.base import Agent
from agents import series_stats
from config.settings import settings
from db.providers import QueryProvider, SeriesProvider, ScoreSink
from models.schemas import (
    CompositionMode,
    InterestSample,
    MomentumScore,
    Query,
    ScoreBreakdown,
)
from utils.normalization import clamp, round_half_up

logger = logging.getLogger(__name__)


def classify(score: float) -> str:
    if score >= settings.BREAKOUT_THRESHOLD:
        return "breakout"
    if score >= settings.GROWING_THRESHOLD:
        return "growing"
    if score >= settings.STABLE_THRESHOLD:
        return "stable"
    return "declining"


class MomentumScorer:
    """Composes the four series statistics under one composition mode."""

    def __init__(
        self,
        mode: Union[CompositionMode, str, None] = None,
        window: Optional[str] = None,
        consistency_default: Optional[float] = None,
    ):
        self.mode = CompositionMode(mode if mode is not None else settings.COMPOSITION_MODE)
        self.window = window or settings.SERIES_WINDOW
        if consistency_default is not None:
            self.consistency_default = consistency_default
        elif self.mode is CompositionMode.ADDITIVE:
            self.consistency_default = settings.CONSISTENCY_DEFAULT_ADDITIVE
        else:
            self.consistency_default = settings.CONSISTENCY_DEFAULT_AVERAGED

    @property
    def sub_score_max(self) -> float:
        return 25.0 if self.mode is CompositionMode.ADDITIVE else 100.0

    def breakdown(
        self,
        series: Sequence[InterestSample],
        all_samples: Optional[Sequence[InterestSample]] = None,
    ) -> ScoreBreakdown:
        top = self.sub_score_max
        parts = ScoreBreakdown(
            slope=series_stats.slope_score(series, top),
            acceleration=series_stats.acceleration_score(series, top),
            consistency=series_stats.consistency_score(series, top, self.consistency_default),
            breadth=series_stats.breadth_score(
                all_samples if all_samples is not None else series, top
            ),
        )
        if self.mode is CompositionMode.ADDITIVE:
            parts = ScoreBreakdown(
                slope=round_half_up(parts.slope),
                acceleration=round_half_up(parts.acceleration),
                consistency=round_half_up(parts.consistency),
                breadth=round_half_up(parts.breadth),
            )
        return parts

    def composite(self, parts: ScoreBreakdown) -> int:
        total = parts.slope + parts.acceleration + parts.consistency + parts.breadth
        if self.mode is CompositionMode.AVERAGED:
            total = total / 4.0
        return int(clamp(round_half_up(total), 0, 100))

    def score_series(
        self,
        query_id: str,
        series: Sequence[InterestSample],
        all_samples: Optional[Sequence[InterestSample]] = None,
    ) -> MomentumScore:
        if len(series) == 0:
            return MomentumScore(
                query_id=query_id,
                score=0,
                breakdown=ScoreBreakdown(
                    slope=0.0,
                    acceleration=0.0,
                    consistency=self.consistency_default,
                    breadth=0.0,
                ),
                classification="declining",
                window=self.window,
            )

        parts = self.breakdown(series, all_samples)
        score = self.composite(parts)
        return MomentumScore(
            query_id=query_id,
            score=score,
            breakdown=parts,
            classification=classify(score),
            window=self.window,
        )

    def score_query(self, query_id: str, provider: SeriesProvider) -> MomentumScore:
        series = provider.get_series(query_id, self.window)
        return self.score_series(query_id, series, provider.get_all_samples(query_id))

    def score_queries(self, query_ids: Sequence[str], provider: SeriesProvider) -> List[MomentumScore]:
        return [self.score_query(qid, provider) for qid in query_ids]


def top_queries_by_momentum(
    queries: QueryProvider,
    series: SeriesProvider,
    scorer: Optional[MomentumScorer] = None,
    limit: int = 10,
    min_score: int = 0,
) -> List[MomentumScore]:
    """Score every known query and return the strongest, highest first."""
    scorer = scorer or MomentumScorer()
    ids = [q.id for q in queries.get_all_queries()]
    scores = [s for s in scorer.score_queries(ids, series) if s.score >= min_score]
    scores.sort(key=lambda s: s.score, reverse=True)
    return scores[:limit]


# ─── MomentumScoringAgent ────────────────────────────────────────────────────


@dataclass
class MomentumOutput:
    queries: List[Query]
    scores: List[MomentumScore]
    mode: str
    window: str

    def by_query(self):
        return {s.query_id: s for s in self.scores}

    def classification_counts(self):
        counts = {}
        for s in self.scores:
            counts[s.classification] = counts.get(s.classification, 0) + 1
        return counts

    def summary(self) -> str:
        lines = [f"=== MOMENTUM ({self.mode}, {self.window}) ===", ""]
        ranked = sorted(self.scores, key=lambda s: s.score, reverse=True)
        text = {q.id: q.text for q in self.queries}
        for s in ranked[:10]:
            lines.append(
                f"  {s.score:>3}  {s.classification:<9}  {text.get(s.query_id, s.query_id)}"
            )
        return "\n".join(lines)


class MomentumScoringAgent(Agent):
    """
    Scores a batch of queries from a series provider and, when a sink is
    given, upserts each MomentumScore keyed by (query_id, window).
    """

    def __init__(
        self,
        series_provider: SeriesProvider,
        sink: Optional[ScoreSink] = None,
        scorer: Optional[MomentumScorer] = None,
    ):
        super().__init__(name="MomentumScoringAgent")
        self.series_provider = series_provider
        self.sink = sink
        self.scorer = scorer or MomentumScorer()

    def run(self, queries: Sequence[Query]) -> MomentumOutput:
        queries = list(queries)
        self.logger.info(
            f"Scoring {len(queries)} queries "
            f"(mode={self.scorer.mode.value}, window={self.scorer.window})"
        )
        scores = self.scorer.score_queries([q.id for q in queries], self.series_provider)

        if self.sink is not None:
            for s in scores:
                self.sink.upsert_momentum_score(s)

        output = MomentumOutput(
            queries=queries,
            scores=scores,
            mode=self.scorer.mode.value,
            window=self.scorer.window,
        )
        self.logger.info(f"Classification counts: {output.classification_counts()}")
        return output
