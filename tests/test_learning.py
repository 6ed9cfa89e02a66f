"""Tests for feedback-driven weight adaptation.

Covers:
    - Delay trigger raises Wd, spoilage trigger raises Wf
    - Result always sums to 1 and stays non-negative
    - No trigger leaves weights unchanged
    - Mass taken from the other weights keeps their ratios
    - Feedback derived from a ranking
"""

import pytest

from logistics_engine.config import EngineSettings
from logistics_engine.demo import STRATEGIES
from logistics_engine.learning import (
    MAX_SPOILAGE_RISK,
    WeightLearner,
    adapt_weights,
    feedback_from_ranking,
)
from logistics_engine.models import LearningFeedback, WeightKey, WeightVector
from logistics_engine.ranking import rank_strategies

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _feedback(avg_delay: float = 0.0, spoilage: float = 0.0, threshold: float = 40.0):
    return LearningFeedback(
        avg_delay=avg_delay,
        spoilage_risk_percent=spoilage,
        delay_threshold=threshold,
    )


def _total(weights: WeightVector) -> float:
    return sum(weights.as_dict().values())


# ---------------------------------------------------------------------------
# Step rule
# ---------------------------------------------------------------------------


class TestAdapt:
    def test_delay_raises_delivery_weight(self):
        result = adapt_weights(WeightVector(), _feedback(avg_delay=60))
        assert result.triggers == [WeightKey.DELIVERY]
        assert result.after.Wd > result.before.Wd
        assert result.after.Wd == pytest.approx(0.37)
        assert _total(result.after) == pytest.approx(1.0)

    def test_spoilage_raises_freshness_weight(self):
        result = adapt_weights(WeightVector(), _feedback(spoilage=15))
        assert result.triggers == [WeightKey.FRESHNESS]
        assert result.after.Wf == pytest.approx(0.32)
        assert result.after.Wd < result.before.Wd

    def test_both_triggers(self):
        result = adapt_weights(WeightVector(), _feedback(avg_delay=60, spoilage=15))
        assert result.triggers == [WeightKey.DELIVERY, WeightKey.FRESHNESS]
        assert result.after.Wd == pytest.approx(0.37)
        assert result.after.Wf == pytest.approx(0.32)
        assert _total(result.after) == pytest.approx(1.0)

    def test_other_weights_keep_their_ratio(self):
        result = adapt_weights(WeightVector(), _feedback(avg_delay=60))
        before = result.before.Wc / result.before.Wr
        after = result.after.Wc / result.after.Wr
        assert after == pytest.approx(before)

    def test_no_trigger_leaves_weights_unchanged(self):
        result = adapt_weights(WeightVector(), _feedback(avg_delay=30, spoilage=5))
        assert result.triggers == []
        assert not result.adjusted
        assert result.after.as_dict() == pytest.approx(result.before.as_dict())
        assert all(v == pytest.approx(0.0) for v in result.delta.values())

    def test_threshold_is_strict(self):
        result = adapt_weights(WeightVector(), _feedback(avg_delay=40, spoilage=10))
        assert result.triggers == []

    def test_unnormalized_input_is_normalized_first(self):
        result = adapt_weights(WeightVector(Wd=7, Wf=6, Wc=4, Wr=3), _feedback())
        assert result.before.Wd == pytest.approx(0.35)
        assert _total(result.after) == pytest.approx(1.0)

    def test_delta_is_after_minus_before(self):
        result = adapt_weights(WeightVector(), _feedback(avg_delay=60, spoilage=15))
        for key, value in result.delta.items():
            assert value == pytest.approx(
                result.after.as_dict()[key] - result.before.as_dict()[key]
            )
        assert sum(result.delta.values()) == pytest.approx(0.0, abs=1e-12)

    def test_no_mass_left_to_take(self):
        weights = WeightVector(Wd=1, Wf=0, Wc=0, Wr=0)
        result = adapt_weights(weights, _feedback(avg_delay=60))
        assert result.after.Wd == pytest.approx(1.0)

    def test_repeated_steps_stay_non_negative(self):
        weights = WeightVector()
        learner = WeightLearner(step=0.2)
        for _ in range(20):
            weights = learner.adapt(weights, _feedback(avg_delay=99, spoilage=99)).after
            assert all(v >= 0 for v in weights.as_dict().values())
            assert _total(weights) == pytest.approx(1.0)
        assert weights.Wc == pytest.approx(0.0, abs=1e-9)
        assert weights.Wr == pytest.approx(0.0, abs=1e-9)

    def test_custom_tolerance(self):
        learner = WeightLearner(spoilage_tolerance=20)
        assert learner.triggers(_feedback(spoilage=15)) == []

    def test_from_settings(self):
        learner = WeightLearner.from_settings(
            EngineSettings(learning_step=0.05, spoilage_tolerance=5)
        )
        result = learner.adapt(WeightVector(), _feedback(avg_delay=60))
        assert result.after.Wd == pytest.approx(0.40)
        assert learner.triggers(_feedback(spoilage=6)) == [WeightKey.FRESHNESS]

    def test_to_dict(self):
        data = adapt_weights(WeightVector(), _feedback(avg_delay=60)).to_dict()
        assert data["triggers"] == ["Wd"]
        assert data["delta"]["Wd"] == pytest.approx(0.02)


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------


class TestFeedbackFromRanking:
    def test_demo_ranking(self):
        ranking = rank_strategies(STRATEGIES)
        feedback = feedback_from_ranking(ranking, STRATEGIES)
        assert feedback.avg_delay == pytest.approx((48 + 50 + 42 + 55) / 4)
        expected = MAX_SPOILAGE_RISK * (1 - ranking.top.computed.freshness)
        assert feedback.spoilage_risk_percent == pytest.approx(expected)
        assert feedback.delay_threshold == 40.0

    def test_demo_feedback_triggers_both(self):
        ranking = rank_strategies(STRATEGIES)
        feedback = feedback_from_ranking(ranking, STRATEGIES)
        assert WeightLearner().triggers(feedback) == [
            WeightKey.DELIVERY,
            WeightKey.FRESHNESS,
        ]

    def test_empty_ranking(self):
        feedback = feedback_from_ranking(rank_strategies([]), [])
        assert feedback.avg_delay == 0.0
        assert feedback.spoilage_risk_percent == 0.0
