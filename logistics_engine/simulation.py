"""One decision cycle: rank, stress-test, learn.

The weights are an explicit parameter-and-result pair. A caller passes the
current vector in and threads ``CycleResult.next_weights`` into the next
call; nothing is kept between cycles.

Usage:
    weights = WeightVector()
    for scenario in ("Normal", "Peak Traffic"):
        cycle = run_cycle(strategies, weights, scenario, seed=42)
        print(cycle.explanation)
        weights = cycle.next_weights
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import numpy as np

from .learning import (
    DEFAULT_DELAY_THRESHOLD,
    LearningResult,
    WeightLearner,
    feedback_from_ranking,
)
from .models import LearningFeedback, ScenarioParams, Strategy, WeightVector
from .ranking import RankingResult, rank_strategies
from .scenarios import Scenario, resolve_scenario
from .uncertainty import MonteCarloResult, UncertaintySimulator

logger = logging.getLogger("logistics.simulation")


@dataclass(frozen=True)
class CycleResult:
    scenario: ScenarioParams
    ranking: RankingResult
    monte_carlo: MonteCarloResult
    feedback: LearningFeedback
    learning: LearningResult
    explanation: str

    @property
    def next_weights(self) -> WeightVector:
        return self.learning.after

    def to_dict(self) -> dict:
        return {
            "scenario": self.scenario.model_dump(by_alias=True),
            "ranking": self.ranking.to_dict(),
            "monte_carlo": self.monte_carlo.to_dict(),
            "feedback": self.feedback.model_dump(by_alias=True),
            "learning": self.learning.to_dict(),
            "next_weights": self.next_weights.as_dict(),
            "explanation": self.explanation,
        }


def _explain(ranking: RankingResult, monte_carlo: MonteCarloResult) -> str:
    text = ranking.explain()
    top = ranking.top
    if top is not None and top.id in monte_carlo.win_frequency:
        text += (
            f" It wins {monte_carlo.win_frequency[top.id] * 100:.0f}% of "
            f"{monte_carlo.trials} simulated trials."
        )
    return text


def run_cycle(
    strategies: Sequence[Strategy],
    weights: WeightVector | Mapping[str, float] | None = None,
    scenario: str | Scenario | ScenarioParams | None = None,
    trials: int | None = None,
    seed: int | np.random.Generator | None = None,
    delay_threshold: float = DEFAULT_DELAY_THRESHOLD,
    simulator: UncertaintySimulator | None = None,
    learner: WeightLearner | None = None,
) -> CycleResult:
    """Rank strategies, simulate uncertainty, and adapt the weights.

    Args:
        strategies: Candidate plans.
        weights: Current weights (normalized before use).
        scenario: Preset name or explicit parameters.
        trials: Monte Carlo trials; ignored when ``simulator`` is given.
        seed: Seed for the Monte Carlo run; ignored when ``simulator`` is
            given.
        delay_threshold: Average delay above which delivery is implicated.
        simulator: Preconfigured simulator.
        learner: Preconfigured weight learner.

    Returns:
        CycleResult; ``next_weights`` feeds the next cycle.
    """
    params = resolve_scenario(scenario)
    if simulator is None:
        simulator = (
            UncertaintySimulator(trials=trials, seed=seed)
            if trials is not None
            else UncertaintySimulator(seed=seed)
        )
    learner = learner or WeightLearner()

    logger.info("Aggregating city signals for %d strategies", len(strategies))
    logger.info("Evaluating freshness decay (k=%.3f)", params.k)
    logger.info("Computing delivery efficiency")
    ranking = rank_strategies(strategies, weights, params)
    monte_carlo = simulator.simulate(strategies, ranking.normalized_weights, params)
    top = ranking.top
    logger.info(
        "Optimization complete. Top strategy: %s", top.vendor if top else "N/A"
    )

    feedback = feedback_from_ranking(ranking, strategies, delay_threshold)
    learning = learner.adapt(ranking.normalized_weights, feedback)
    logger.info("Model learning from outcome")

    explanation = _explain(ranking, monte_carlo)
    logger.info("Recommendation generated: %s", explanation)

    return CycleResult(
        scenario=params,
        ranking=ranking,
        monte_carlo=monte_carlo,
        feedback=feedback,
        learning=learning,
        explanation=explanation,
    )
