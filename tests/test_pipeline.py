"""
End-to-end runs over the seeded synthetic store.
"""

import pytest

from agents.base import Agent, Orchestrator
from models.schemas import OpportunityScope
from utils.mock_data import MOCK_QUERIES, build_mock_store, make_series
from utils.pipeline import run_pipeline


def membership(clusters):
    return sorted(tuple(c.queries) for c in clusters)


class TestMockData:
    def test_seeded_store_is_reproducible(self):
        a, b = build_mock_store(seed=7), build_mock_store(seed=7)
        assert [q.id for q in a.get_all_queries()] == [q.id for q in b.get_all_queries()]
        assert a.get_all_samples("q01") == b.get_all_samples("q01")

    def test_every_query_classified(self, mock_store):
        assert set(mock_store.intents) == {q.id for q in mock_store.get_all_queries()}

    def test_series_are_chronological(self, mock_store):
        series = mock_store.get_series("q01", "90d")
        dates = [s.date for s in series]
        assert dates == sorted(dates)

    def test_make_series_non_negative(self):
        assert all(s.value >= 0 for s in make_series("falling", n_points=30))


class TestRunPipeline:
    def test_full_run(self, mock_store):
        result = run_pipeline(mock_store)
        assert result.total_queries == len(MOCK_QUERIES)
        assert len(result.momentum) == len(MOCK_QUERIES)
        assert len(result.opportunities) == len(MOCK_QUERIES)

        scores = [o.opportunity_score for o in result.opportunities]
        assert scores == sorted(scores, reverse=True)
        for o in result.opportunities:
            assert 0 <= o.opportunity_score <= 100
            assert 0 <= o.efficiency_score <= 100
        for m in result.momentum:
            assert 0 <= m.score <= 100

    def test_clusters_partition_queries_by_intent(self, mock_store):
        result = run_pipeline(mock_store)
        ids = [qid for c in result.clusters for qid in c.queries]
        assert sorted(ids) == sorted(q.id for q in mock_store.get_all_queries())
        for c in result.clusters:
            intents = {mock_store.intents[qid].intent_type for qid in c.queries}
            assert intents == {c.intent_type}

    def test_results_are_persisted(self, mock_store):
        result = run_pipeline(mock_store)
        assert len(mock_store.momentum_scores) == len(MOCK_QUERIES)
        top = mock_store.top_opportunity_scores(5, result.scope)
        assert [r.query_id for r in top] == [r.query_id for r in result.opportunities[:5]]

    def test_rerun_is_stable(self, mock_store):
        first = run_pipeline(mock_store)
        second = run_pipeline(mock_store)
        assert membership(first.clusters) == membership(second.clusters)
        assert len(mock_store.get_all_clusters()) == len(first.clusters)
        assert [o.to_dict() for o in first.opportunities] == [o.to_dict() for o in second.opportunities]

    def test_recluster_keeps_membership(self, mock_store):
        first = run_pipeline(mock_store)
        again = run_pipeline(mock_store, recluster=True)
        assert membership(first.clusters) == membership(again.clusters)
        assert len(mock_store.get_all_clusters()) == len(again.clusters)

    @pytest.mark.parametrize("mode", ["averaged", "additive"])
    def test_composition_modes(self, mock_store, mode):
        result = run_pipeline(mock_store, composition_mode=mode)
        assert result.composition_mode == mode


class TestOrchestrator:
    class Doubler(Agent):
        def __init__(self, name="Doubler"):
            super().__init__(name=name)

        def run(self, data):
            return data * 2

    class Exploder(Agent):
        def __init__(self):
            super().__init__(name="Exploder")

        def run(self, data):
            raise RuntimeError("boom")

    def test_chains_outputs(self):
        result = Orchestrator([self.Doubler("first"), self.Doubler("second")]).execute(3)
        assert result.success
        assert result.data == 12

    def test_outputs_by_stage_name(self):
        result = Orchestrator([self.Doubler("first"), self.Doubler("second")]).execute(3)
        assert result.output("first") == 6
        assert result.output("second") == 12
        assert list(result.stages) == ["first", "second"]

    def test_stops_on_failure(self):
        chain = Orchestrator([self.Doubler("first"), self.Exploder(), self.Doubler("last")])
        result = chain.execute(1)
        assert not result.success
        assert result.error == "boom"
        assert result.failed.agent_name == "Exploder"
        assert list(result.stages) == ["first", "Exploder"]
        assert result.data == 2

    def test_duplicate_stage_names_rejected(self):
        with pytest.raises(ValueError):
            Orchestrator([self.Doubler(), self.Doubler()])

    def test_empty_chain_is_not_a_success(self):
        assert not Orchestrator([]).execute(1).success


class TestPipelineWindow:
    def test_scope_window_drives_momentum(self, small_store, make_samples):
        ramp = [float(v) for v in range(0, 130, 10)]
        for qid in ("q1", "q2", "q3", "q4"):
            small_store.add_samples(qid, make_samples(ramp, window="30d"))

        result = run_pipeline(small_store, scope=OpportunityScope(window="30d"))
        assert {m.window for m in result.momentum} == {"30d"}
        assert all(o.slope == pytest.approx(100.0) for o in result.opportunities)
        assert small_store.get_momentum_score("q1", "30d") is not None
