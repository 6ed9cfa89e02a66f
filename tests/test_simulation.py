"""Tests for the rank / simulate / learn cycle.

Covers:
    - Weights thread from one cycle into the next
    - Seeded cycles are reproducible
    - Feedback and learning reflect the cycle's own ranking
    - Explanation text and serialization
"""

import logging

import pytest

from logistics_engine.demo import STRATEGIES
from logistics_engine.learning import WeightLearner
from logistics_engine.models import WeightKey, WeightVector
from logistics_engine.scenarios import SCENARIO_PRESETS
from logistics_engine.simulation import run_cycle
from logistics_engine.uncertainty import UncertaintySimulator


class TestRunCycle:
    def test_demo_cycle(self):
        cycle = run_cycle(STRATEGIES, WeightVector(), "Normal", trials=50, seed=1)
        assert cycle.ranking.top.id == "s3"
        assert cycle.monte_carlo.trials == 50
        assert cycle.learning.triggers == [WeightKey.DELIVERY, WeightKey.FRESHNESS]
        assert cycle.next_weights.Wd == pytest.approx(0.37)
        assert cycle.next_weights.Wf == pytest.approx(0.32)

    def test_weights_thread_between_cycles(self):
        weights = WeightVector()
        history = []
        for scenario in ("Normal", "Peak Traffic", "Cold Chain Failure"):
            cycle = run_cycle(STRATEGIES, weights, scenario, trials=20, seed=0)
            assert cycle.ranking.normalized_weights.as_dict() == pytest.approx(
                weights.as_dict()
            )
            weights = cycle.next_weights
            history.append(weights.Wd)
        assert history == sorted(history)
        assert sum(weights.as_dict().values()) == pytest.approx(1.0)

    def test_seeded_cycle_is_reproducible(self):
        first = run_cycle(STRATEGIES, scenario="Demand Surge", trials=40, seed=9)
        second = run_cycle(STRATEGIES, scenario="Demand Surge", trials=40, seed=9)
        assert first.to_dict() == second.to_dict()

    def test_scenario_resolved_once(self):
        cycle = run_cycle(STRATEGIES, scenario="Fuel Cost Spike", trials=5, seed=0)
        assert cycle.scenario == SCENARIO_PRESETS["Fuel Cost Spike"]
        assert cycle.ranking.scenario == cycle.scenario

    def test_custom_threshold_suppresses_delay_trigger(self):
        cycle = run_cycle(STRATEGIES, trials=5, seed=0, delay_threshold=100)
        assert WeightKey.DELIVERY not in cycle.learning.triggers

    def test_injected_components(self):
        cycle = run_cycle(
            STRATEGIES,
            simulator=UncertaintySimulator(trials=3, seed=2),
            learner=WeightLearner(step=0.1),
        )
        assert cycle.monte_carlo.trials == 3
        assert cycle.next_weights.Wd == pytest.approx(0.45)

    def test_explanation_mentions_trials(self):
        cycle = run_cycle(STRATEGIES, trials=25, seed=3)
        assert cycle.explanation.startswith("City Store")
        assert "of 25 simulated trials" in cycle.explanation

    def test_logs_progress(self, caplog):
        with caplog.at_level(logging.INFO, logger="logistics.simulation"):
            run_cycle(STRATEGIES, trials=5, seed=0)
        assert "Top strategy: City Store" in caplog.text

    def test_empty_strategies(self):
        cycle = run_cycle([], trials=5, seed=0)
        assert cycle.ranking.top is None
        assert cycle.monte_carlo.win_frequency == {}
        assert cycle.learning.triggers == []
        assert cycle.explanation == "No strategies to rank."

    def test_to_dict(self):
        data = run_cycle(STRATEGIES, trials=5, seed=0).to_dict()
        assert set(data) == {
            "scenario",
            "ranking",
            "monte_carlo",
            "feedback",
            "learning",
            "next_weights",
            "explanation",
        }
        assert data["feedback"]["avgDelay"] == pytest.approx(48.75)
        assert data["next_weights"] == data["learning"]["after"]
