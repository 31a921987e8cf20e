"""
Opportunity blending: weights, clamping, population bounds, ranking, upserts.
"""

import pytest

from agents.momentum import MomentumScorer, MomentumScoringAgent
from agents.opportunity import (
    OpportunityBlendingAgent,
    PopulationBounds,
    blend_opportunity,
    blend_scores,
    rank_opportunities,
    refresh_opportunity_scores,
)
from models.schemas import (
    ExternalMarketMetrics,
    MomentumScore,
    OpportunityScope,
    OpportunityScore,
    ScoreBreakdown,
)


SCOPE = OpportunityScope()


def metrics(qid, searches=None, bid_high_micros=None):
    return ExternalMarketMetrics(
        query_id=qid,
        avg_monthly_searches=searches,
        top_of_page_bid_high_micros=bid_high_micros,
    )


def momentum(qid, score):
    return MomentumScore(
        query_id=qid,
        score=score,
        breakdown=ScoreBreakdown(slope=70.0, acceleration=55.0, consistency=80.0, breadth=10.0),
        classification="growing",
    )


class TestBlendScores:
    def test_reference_weights(self):
        assert blend_scores(80, 60, 40) == (65, 63)

    def test_efficiency_floors_at_zero(self):
        opportunity, efficiency = blend_scores(0, 0, 100)
        assert opportunity == 20
        assert efficiency == 0

    def test_upper_bound(self):
        assert blend_scores(100, 100, 100) == (100, 80)

    def test_cost_moves_scores_in_opposite_directions(self):
        cheap = blend_scores(50, 50, 10)
        pricey = blend_scores(50, 50, 90)
        assert pricey[0] > cheap[0]
        assert pricey[1] < cheap[1]


class TestBlendOpportunity:
    def test_missing_inputs_degrade_to_zero(self):
        row = blend_opportunity("q", None, None, PopulationBounds(), SCOPE)
        assert (row.opportunity_score, row.efficiency_score) == (0, 0)
        assert (row.demand_score, row.cpc_score, row.momentum_score) == (0, 0, 0)
        assert (row.slope, row.acceleration, row.consistency) == (0.0, 0.0, 0.0)

    def test_breakdown_passes_through(self):
        row = blend_opportunity("q", momentum("q", 62), None, PopulationBounds(), SCOPE)
        assert row.momentum_score == 62
        assert row.slope == 70.0
        assert row.acceleration == 55.0
        assert row.consistency == 80.0

    def test_single_metric_population_is_maximal(self):
        m = metrics("q", searches=480, bid_high_micros=3_000_000)
        bounds = PopulationBounds.from_metrics([m])
        row = blend_opportunity("q", momentum("q", 60), m, bounds, SCOPE)
        assert row.demand_score == 100
        assert row.cpc_score == 100
        assert row.opportunity_score == blend_scores(100, 60, 100)[0]

    def test_bounds_ignore_invalid_values(self):
        bounds = PopulationBounds.from_metrics([
            metrics("a", searches=10, bid_high_micros=1_000_000),
            metrics("b", searches=0, bid_high_micros=None),
            metrics("c", searches=1000, bid_high_micros=4_000_000),
        ])
        assert (bounds.demand_min, bounds.demand_max) == (10.0, 1000.0)
        assert (bounds.cpc_min, bounds.cpc_max) == pytest.approx((1.0, 4.0))


class TestRanking:
    def test_stable_descending(self):
        rows = [
            OpportunityScore("a", SCOPE, 40, 0, 0, 0, 0),
            OpportunityScore("b", SCOPE, 70, 0, 0, 0, 0),
            OpportunityScore("c", SCOPE, 40, 0, 0, 0, 0),
            OpportunityScore("d", SCOPE, 70, 0, 0, 0, 0),
        ]
        assert [r.query_id for r in rank_opportunities(rows)] == ["b", "d", "a", "c"]


class TestOpportunityBlendingAgent:
    def _populate(self, store):
        store.set_market_metrics(metrics("q1", searches=10, bid_high_micros=1_000_000))
        store.set_market_metrics(metrics("q2", searches=10_000, bid_high_micros=9_000_000))

    def test_blends_every_query_and_ranks(self, small_store):
        self._populate(small_store)
        scored = MomentumScoringAgent(small_store).run(small_store.get_all_queries())
        output = OpportunityBlendingAgent(small_store, sink=small_store).run(scored)

        assert output.updated == 4
        scores = [r.opportunity_score for r in output.rows]
        assert scores == sorted(scores, reverse=True)
        assert output.rows[0].query_id == "q2"

        by_id = {r.query_id: r for r in output.rows}
        assert by_id["q1"].demand_score == 0        # population minimum
        assert by_id["q2"].demand_score == 100
        assert by_id["q3"].demand_score == 0        # no metrics
        assert by_id["q3"].cpc_score == 0
        for r in output.rows:
            assert 0 <= r.opportunity_score <= 100
            assert 0 <= r.efficiency_score <= 100

    def test_upsert_is_idempotent(self, small_store):
        self._populate(small_store)
        agent = OpportunityBlendingAgent(small_store, sink=small_store)
        scored = MomentumScoringAgent(small_store).run(small_store.get_all_queries())
        agent.run(scored)
        agent.run(scored)
        assert len(small_store.opportunity_scores) == 4

    def test_scope_selects_metrics(self, small_store):
        self._populate(small_store)
        uk = OpportunityScope(geo="GB")
        scored = MomentumScoringAgent(small_store).run(small_store.get_all_queries())
        output = OpportunityBlendingAgent(small_store, scope=uk).run(scored)
        assert all(r.demand_score == 0 for r in output.rows)
        assert all(r.scope == uk for r in output.rows)

    def test_rejects_momentum_from_another_window(self, small_store):
        scored = MomentumScoringAgent(small_store).run(small_store.get_all_queries())
        agent = OpportunityBlendingAgent(small_store, scope=OpportunityScope(window="30d"))
        result = agent.execute(scored)
        assert not result.success
        assert "window" in result.error


class TestRefresh:
    def test_empty_store(self, empty_store):
        result = refresh_opportunity_scores(empty_store, empty_store, empty_store, empty_store)
        assert result["updated"] == 0
        assert result["top"] == []

    def test_returns_persisted_top(self, small_store):
        small_store.set_market_metrics(metrics("q3", searches=500, bid_high_micros=2_000_000))
        result = refresh_opportunity_scores(
            small_store, small_store, small_store, small_store, limit=2
        )
        assert result["updated"] == 4
        assert len(result["top"]) == 2
        assert result["top"][0].query_id == "q3"

    def test_momentum_follows_scope_window(self, small_store, make_samples):
        ramp = [float(v) for v in range(0, 130, 10)]
        small_store.add_samples("q1", make_samples(ramp, window="30d"))
        scope = OpportunityScope(window="30d")

        result = refresh_opportunity_scores(
            small_store, small_store, small_store, small_store, scope=scope
        )
        rows = {r.query_id: r for r in small_store.top_opportunity_scores(10, scope)}
        expected = MomentumScorer(window="30d").score_query("q1", small_store)

        assert result["scope"] == scope
        assert rows["q1"].momentum_score == expected.score
        assert rows["q1"].slope == pytest.approx(100.0)
        assert rows["q2"].momentum_score == 0          # no 30d samples
        assert small_store.get_momentum_score("q1", "30d").score == expected.score

    def test_scorer_window_must_match_scope(self, small_store):
        with pytest.raises(ValueError):
            refresh_opportunity_scores(
                small_store, small_store, small_store, small_store,
                scope=OpportunityScope(window="30d"),
                scorer=MomentumScorer(window="90d"),
            )
