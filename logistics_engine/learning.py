"""Feedback-driven weight adaptation.

A bounded, step-wise rule that nudges the scoring weights toward whichever
criterion the last outcome implicates:

    avgDelay > delayThreshold            -> raise Wd (delivery)
    spoilageRiskPercent > tolerance      -> raise Wf (freshness)

Each implicated weight gains ``step`` (default 0.02). The same total mass
is taken from the other weights in proportion to their size, so their
ratios are preserved, and the result is renormalized to sum to 1. With no
trigger the weights come back normalized but otherwise unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .models import LearningFeedback, Strategy, WeightKey, WeightVector
from .ranking import RankingResult, normalize_weights

logger = logging.getLogger("logistics.learning")

DEFAULT_STEP = 0.02
DEFAULT_SPOILAGE_TOLERANCE = 10.0
DEFAULT_DELAY_THRESHOLD = 40.0

# Spoilage risk (%) attributed to a fully decayed top strategy.
MAX_SPOILAGE_RISK = 20.0


@dataclass(frozen=True)
class LearningResult:
    before: WeightVector
    after: WeightVector
    delta: dict[str, float]
    triggers: list[WeightKey] = field(default_factory=list)

    @property
    def adjusted(self) -> bool:
        return bool(self.triggers)

    def to_dict(self) -> dict:
        return {
            "before": self.before.as_dict(),
            "after": self.after.as_dict(),
            "delta": {k: round(v, 6) for k, v in self.delta.items()},
            "triggers": [t.value for t in self.triggers],
        }


class WeightLearner:
    """Apply the step rule to a weight vector.

    Args:
        step: Weight gained by each implicated criterion per call.
        spoilage_tolerance: Spoilage risk (%) above which freshness is
            implicated.
    """

    def __init__(
        self,
        step: float = DEFAULT_STEP,
        spoilage_tolerance: float = DEFAULT_SPOILAGE_TOLERANCE,
    ):
        self.step = max(0.0, float(step))
        self.spoilage_tolerance = spoilage_tolerance

    @classmethod
    def from_settings(cls, settings) -> WeightLearner:
        return cls(
            step=settings.learning_step,
            spoilage_tolerance=settings.spoilage_tolerance,
        )

    def triggers(self, feedback: LearningFeedback) -> list[WeightKey]:
        implicated = []
        if feedback.avg_delay > feedback.delay_threshold:
            implicated.append(WeightKey.DELIVERY)
        if feedback.spoilage_risk_percent > self.spoilage_tolerance:
            implicated.append(WeightKey.FRESHNESS)
        return implicated

    def adapt(
        self,
        weights: WeightVector | Mapping[str, float] | None,
        feedback: LearningFeedback,
    ) -> LearningResult:
        """Return the adjusted weights with a per-key audit trail."""
        before = normalize_weights(weights)
        implicated = self.triggers(feedback)

        values = before.as_dict()
        others = [k.value for k in WeightKey if k not in implicated]
        pool = sum(values[k] for k in others)
        transfer = min(self.step * len(implicated), pool)

        if implicated and transfer > 0:
            for key in others:
                values[key] -= transfer * values[key] / pool
            for key in implicated:
                values[key.value] += transfer / len(implicated)

        after = normalize_weights(WeightVector(**values))
        delta = {k: after.as_dict()[k] - before.as_dict()[k] for k in values}

        if implicated:
            logger.info(
                "Weights adapted toward %s: %s",
                ", ".join(k.display_name for k in implicated),
                {k: round(v, 4) for k, v in delta.items()},
            )
        return LearningResult(before=before, after=after, delta=delta, triggers=implicated)


def feedback_from_ranking(
    ranking: RankingResult,
    strategies: Sequence[Strategy],
    delay_threshold: float = DEFAULT_DELAY_THRESHOLD,
) -> LearningFeedback:
    """Derive the outcome signal for a cycle from its own ranking.

    Average delay is the mean delivery time of the candidate strategies;
    spoilage risk scales with how far the winner's freshness has decayed.
    """
    avg_delay = (
        sum(s.delivery_time for s in strategies) / len(strategies) if strategies else 0.0
    )
    top = ranking.top
    freshness = top.computed.freshness if top else 1.0
    return LearningFeedback(
        spoilage_risk_percent=MAX_SPOILAGE_RISK * (1.0 - freshness),
        avg_delay=avg_delay,
        delay_threshold=delay_threshold,
    )


def adapt_weights(
    weights: WeightVector | Mapping[str, float] | None,
    feedback: LearningFeedback,
    step: float = DEFAULT_STEP,
) -> LearningResult:
    """Apply one learning step. Convenience wrapper."""
    return WeightLearner(step=step).adapt(weights, feedback)
