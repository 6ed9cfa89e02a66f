"""Monte Carlo uncertainty for strategy rankings.

Each trial perturbs every strategy's delivery time, cost and reliability
with independent multiplicative noise drawn uniformly from
``[1 - noise, 1 + noise]`` (default ±10%), re-ranks the perturbed set with
the strategy ranker, and records the winner and every strategy's score.
Perturbed reliability is clipped to [0, 100].

Aggregates:
    win_frequency  - share of trials each strategy ranked first
    score bands    - mean, standard deviation and 5th/50th/95th percentiles
                     of each strategy's decision score

A seed makes the run reproducible. One trial is the minimum; smaller
requests are raised to one.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np

from .models import ScenarioParams, Strategy, WeightVector
from .ranking import normalize_weights, rank_strategies
from .scenarios import Scenario, resolve_scenario

logger = logging.getLogger("logistics.uncertainty")

DEFAULT_TRIALS = 500
DEFAULT_NOISE = 0.10
BAND_PERCENTILES = (5.0, 50.0, 95.0)


@dataclass(frozen=True)
class ScoreBand:
    """Distribution of one strategy's decision score across trials."""

    strategy_id: str
    mean: float
    std: float
    p05: float
    p50: float
    p95: float

    def to_dict(self) -> dict:
        return {
            "strategy_id": self.strategy_id,
            "mean": round(self.mean, 6),
            "std": round(self.std, 6),
            "p05": round(self.p05, 6),
            "p50": round(self.p50, 6),
            "p95": round(self.p95, 6),
        }


@dataclass(frozen=True)
class TrialOutcome:
    winner_id: str
    winner_score: float


@dataclass(frozen=True)
class MonteCarloResult:
    trials: int
    noise: float
    win_frequency: dict[str, float] = field(default_factory=dict)
    bands: dict[str, ScoreBand] = field(default_factory=dict)
    outcomes: list[TrialOutcome] = field(default_factory=list)

    @property
    def most_likely_winner(self) -> str | None:
        if not self.win_frequency:
            return None
        # Ties resolve to the id listed first.
        return max(self.win_frequency, key=self.win_frequency.__getitem__)

    @property
    def confidence(self) -> float:
        """Win frequency of the most likely winner."""
        winner = self.most_likely_winner
        return self.win_frequency[winner] if winner is not None else 0.0

    def to_dict(self) -> dict:
        return {
            "trials": self.trials,
            "noise": self.noise,
            "most_likely_winner": self.most_likely_winner,
            "confidence": round(self.confidence, 4),
            "win_frequency": {k: round(v, 4) for k, v in self.win_frequency.items()},
            "bands": {k: b.to_dict() for k, b in self.bands.items()},
        }


def _unique_by_id(strategies: Sequence[Strategy]) -> list[Strategy]:
    """Keep the first strategy for each id; results are keyed by id."""
    seen = set()
    unique = []
    for strategy in strategies:
        if strategy.id in seen:
            continue
        seen.add(strategy.id)
        unique.append(strategy)
    if len(unique) < len(strategies):
        logger.warning(
            "Dropped %d strategies with duplicate ids",
            len(strategies) - len(unique),
        )
    return unique


class UncertaintySimulator:
    """Perturb-and-rerank simulation over a strategy set.

    Args:
        trials: Number of Monte Carlo trials (minimum 1).
        noise: Half-width of the multiplicative uniform noise.
        seed: Seed or ``numpy.random.Generator``.
    """

    def __init__(
        self,
        trials: int = DEFAULT_TRIALS,
        noise: float = DEFAULT_NOISE,
        seed: int | np.random.Generator | None = None,
    ):
        self.trials = max(1, int(trials))
        self.noise = max(0.0, float(noise))
        self.seed = seed

    @classmethod
    def from_settings(cls, settings, seed: int | None = None) -> UncertaintySimulator:
        return cls(
            trials=settings.monte_carlo_trials,
            noise=settings.monte_carlo_noise,
            seed=seed,
        )

    def _rng(self) -> np.random.Generator:
        if isinstance(self.seed, np.random.Generator):
            return self.seed
        return np.random.default_rng(self.seed)

    def simulate(
        self,
        strategies: Sequence[Strategy],
        weights: WeightVector | Mapping[str, float] | None = None,
        scenario: str | Scenario | ScenarioParams | None = None,
    ) -> MonteCarloResult:
        """Run the trials and aggregate win frequencies and score bands.

        Strategies sharing an id are simulated once, as the first of them.
        """
        strategies = _unique_by_id(strategies)
        if not strategies:
            return MonteCarloResult(trials=self.trials, noise=self.noise)

        normalized = normalize_weights(weights)
        params = resolve_scenario(scenario)
        rng = self._rng()

        ids = [s.id for s in strategies]
        index_of = {sid: i for i, sid in enumerate(ids)}
        scores = np.zeros((self.trials, len(strategies)))
        wins = np.zeros(len(strategies))
        outcomes = []

        low, high = 1.0 - self.noise, 1.0 + self.noise
        for trial in range(self.trials):
            factors = rng.uniform(low, high, size=(len(strategies), 3))
            perturbed = [
                s.model_copy(
                    update={
                        "delivery_time": s.delivery_time * f[0],
                        "cost": s.cost * f[1],
                        "reliability_pct": min(100.0, max(0.0, s.reliability_pct * f[2])),
                    }
                )
                for s, f in zip(strategies, factors)
            ]
            ranking = rank_strategies(perturbed, normalized, params)
            for ranked in ranking.ranked:
                scores[trial, index_of[ranked.id]] = ranked.computed.fds
            top = ranking.top
            wins[index_of[top.id]] += 1
            outcomes.append(TrialOutcome(winner_id=top.id, winner_score=top.computed.fds))

        win_frequency = {sid: float(wins[i] / self.trials) for i, sid in enumerate(ids)}
        bands = {}
        for i, sid in enumerate(ids):
            column = scores[:, i]
            p05, p50, p95 = np.percentile(column, BAND_PERCENTILES)
            bands[sid] = ScoreBand(
                strategy_id=sid,
                mean=float(column.mean()),
                std=float(column.std()),
                p05=float(p05),
                p50=float(p50),
                p95=float(p95),
            )

        result = MonteCarloResult(
            trials=self.trials,
            noise=self.noise,
            win_frequency=win_frequency,
            bands=bands,
            outcomes=outcomes,
        )
        logger.info(
            "Monte Carlo: %d trials, %s wins %.1f%%",
            self.trials,
            result.most_likely_winner,
            result.confidence * 100,
        )
        return result


def simulate_uncertainty(
    strategies: Sequence[Strategy],
    weights: WeightVector | Mapping[str, float] | None = None,
    scenario: str | Scenario | ScenarioParams | None = None,
    trials: int = DEFAULT_TRIALS,
    seed: int | None = None,
) -> MonteCarloResult:
    """Run the simulator once. Convenience wrapper."""
    return UncertaintySimulator(trials=trials, seed=seed).simulate(
        strategies, weights, scenario
    )
