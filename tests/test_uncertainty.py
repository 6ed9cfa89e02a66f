"""Tests for Monte Carlo ranking uncertainty.

Covers:
    - Seeded reproducibility
    - Win frequencies form a distribution over the input ids
    - Score bands are ordered and bracket the noiseless score
    - Trial count floor and empty input
    - Zero noise reproduces the deterministic ranking
"""

import logging

import numpy as np
import pytest

from logistics_engine.config import EngineSettings
from logistics_engine.demo import STRATEGIES
from logistics_engine.models import Strategy, WeightVector
from logistics_engine.ranking import rank_strategies
from logistics_engine.uncertainty import (
    MonteCarloResult,
    UncertaintySimulator,
    simulate_uncertainty,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def simulator() -> UncertaintySimulator:
    return UncertaintySimulator(trials=200, seed=42)


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------


class TestSimulate:
    def test_same_seed_same_result(self):
        first = simulate_uncertainty(STRATEGIES, trials=100, seed=7)
        second = simulate_uncertainty(STRATEGIES, trials=100, seed=7)
        assert first.win_frequency == second.win_frequency
        assert first.bands == second.bands

    def test_different_seeds_differ(self):
        first = simulate_uncertainty(STRATEGIES, trials=100, seed=1)
        second = simulate_uncertainty(STRATEGIES, trials=100, seed=2)
        assert first.bands != second.bands

    def test_win_frequency_is_distribution(self, simulator):
        result = simulator.simulate(STRATEGIES)
        assert set(result.win_frequency) == {s.id for s in STRATEGIES}
        assert sum(result.win_frequency.values()) == pytest.approx(1.0)
        assert all(0.0 <= f <= 1.0 for f in result.win_frequency.values())

    def test_one_outcome_per_trial(self, simulator):
        result = simulator.simulate(STRATEGIES)
        assert result.trials == 200
        assert len(result.outcomes) == 200

    def test_bands_are_ordered(self, simulator):
        result = simulator.simulate(STRATEGIES)
        for band in result.bands.values():
            assert band.p05 <= band.p50 <= band.p95
            assert band.p05 <= band.mean <= band.p95
            assert band.std >= 0

    def test_bands_bracket_noiseless_score(self, simulator):
        result = simulator.simulate(STRATEGIES, WeightVector(), "Normal")
        baseline = {r.id: r.computed.fds for r in rank_strategies(STRATEGIES).ranked}
        for sid, band in result.bands.items():
            assert band.p05 <= baseline[sid] <= band.p95

    def test_dominant_strategy_usually_wins(self, simulator):
        result = simulator.simulate(STRATEGIES)
        assert result.most_likely_winner == "s3"
        assert result.confidence > 0.5

    def test_zero_noise_matches_deterministic_ranking(self):
        result = UncertaintySimulator(trials=20, noise=0.0, seed=0).simulate(STRATEGIES)
        assert result.win_frequency["s3"] == 1.0
        assert all(b.std == pytest.approx(0.0) for b in result.bands.values())

    def test_inputs_not_mutated(self, simulator):
        before = [s.model_dump() for s in STRATEGIES]
        simulator.simulate(STRATEGIES)
        assert [s.model_dump() for s in STRATEGIES] == before

    def test_perturbed_reliability_stays_in_range(self):
        strategy = Strategy(
            id="x",
            vendor="Edge",
            delivery_time=10,
            max_delivery=60,
            cost=100,
            max_cost=600,
            reliability_pct=100,
        )
        result = UncertaintySimulator(trials=50, noise=0.5, seed=3).simulate([strategy])
        assert result.bands["x"].p95 <= 1.0
        assert result.win_frequency == {"x": 1.0}

    def test_accepts_generator(self):
        rng = np.random.default_rng(5)
        result = UncertaintySimulator(trials=10, seed=rng).simulate(STRATEGIES)
        assert len(result.outcomes) == 10


def _make_strategy(strategy_id: str, delivery_time: float, reliability_pct: float) -> Strategy:
    return Strategy(
        id=strategy_id,
        vendor=f"Vendor {delivery_time}",
        delivery_time=delivery_time,
        max_delivery=60,
        cost=300,
        max_cost=600,
        reliability_pct=reliability_pct,
    )


class TestEdgeCases:
    def test_duplicate_ids_keep_first_strategy(self, caplog):
        fast = _make_strategy("s1", delivery_time=10, reliability_pct=99)
        slow = _make_strategy("s1", delivery_time=58, reliability_pct=40)
        with caplog.at_level(logging.WARNING, logger="logistics.uncertainty"):
            result = UncertaintySimulator(trials=50, seed=1).simulate([fast, slow])

        assert result.win_frequency == {"s1": 1.0}
        expected = rank_strategies([fast]).top.computed.fds
        assert result.bands["s1"].p05 <= expected <= result.bands["s1"].p95
        assert "duplicate ids" in caplog.text

    def test_duplicate_ids_match_unique_run(self):
        fast = _make_strategy("s1", delivery_time=10, reliability_pct=99)
        slow = _make_strategy("s1", delivery_time=58, reliability_pct=40)
        other = _make_strategy("s2", delivery_time=30, reliability_pct=80)
        with_dupes = UncertaintySimulator(trials=30, seed=4).simulate([fast, slow, other])
        unique = UncertaintySimulator(trials=30, seed=4).simulate([fast, other])
        assert with_dupes.win_frequency == unique.win_frequency
        assert with_dupes.bands == unique.bands

    def test_trials_floor_at_one(self):
        assert UncertaintySimulator(trials=0).trials == 1
        assert UncertaintySimulator(trials=-5).trials == 1

    def test_single_trial(self):
        result = simulate_uncertainty(STRATEGIES, trials=1, seed=0)
        assert sorted(result.win_frequency.values()) == [0.0, 0.0, 0.0, 1.0]
        for band in result.bands.values():
            assert band.p05 == band.p50 == band.p95 == band.mean

    def test_empty_strategies(self):
        result = UncertaintySimulator(trials=10, seed=0).simulate([])
        assert result == MonteCarloResult(trials=10, noise=0.10)
        assert result.most_likely_winner is None
        assert result.confidence == 0.0

    def test_from_settings(self):
        settings = EngineSettings(monte_carlo_trials=33, monte_carlo_noise=0.2)
        simulator = UncertaintySimulator.from_settings(settings, seed=1)
        assert simulator.trials == 33
        assert simulator.noise == 0.2

    def test_to_dict(self, simulator):
        data = simulator.simulate(STRATEGIES).to_dict()
        assert data["most_likely_winner"] == "s3"
        assert set(data["bands"]["s1"]) == {"strategy_id", "mean", "std", "p05", "p50", "p95"}
        assert "outcomes" not in data
