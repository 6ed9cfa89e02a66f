"""Multi-criteria strategy ranking.

Scores candidate strategies across four criteria, each normalized to [0, 1]:

    DeliveryScore    = 1 - min(1, deliveryTime · deliveryMultiplier / maxDelivery)
    CostScore        = 1 - min(1, cost · costMultiplier / maxCost)
    ReliabilityScore = (reliabilityPct / 100) · reliabilityModifier
    FreshnessScore   = exp(-k · deliveryTime)

The final decision score is the weighted sum

    FDS = Wd·Delivery + Wf·Freshness + Wc·Cost + Wr·Reliability

with weights renormalized to sum to 1 on every call. Strategies are returned
sorted by FDS (descending), then ReliabilityScore (descending), then vendor
name and id (ascending), so identical inputs always produce the same order.

Usage:
    result = rank_strategies(strategies, WeightVector(), "Peak Traffic")
    print(result.top.vendor, result.top.computed.fds)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .models import (
    DEFAULT_WEIGHTS,
    ScenarioParams,
    Strategy,
    WeightKey,
    WeightVector,
)
from .scenarios import Scenario, resolve_scenario

logger = logging.getLogger("logistics.ranking")

UNIFORM_WEIGHTS = WeightVector(Wd=0.25, Wf=0.25, Wc=0.25, Wr=0.25)

DEFAULT_SENSITIVITY_SHIFT = 0.05


# ---------------------------------------------------------------------------
# Result data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StrategyScores:
    """Per-criterion scores and the weighted final decision score."""

    freshness: float
    delivery: float
    cost: float
    reliability: float
    fds: float

    def to_dict(self) -> dict:
        return {
            "FreshnessScore": round(self.freshness, 6),
            "DeliveryScore": round(self.delivery, 6),
            "CostScore": round(self.cost, 6),
            "ReliabilityScore": round(self.reliability, 6),
            "FDS": round(self.fds, 6),
        }


@dataclass(frozen=True)
class RankedStrategy:
    strategy: Strategy
    computed: StrategyScores
    rank: int

    @property
    def id(self) -> str:
        return self.strategy.id

    @property
    def vendor(self) -> str:
        return self.strategy.vendor

    def to_dict(self) -> dict:
        data = self.strategy.model_dump(by_alias=True)
        data["computed"] = self.computed.to_dict()
        data["rank"] = self.rank
        return data


@dataclass(frozen=True)
class RankingResult:
    normalized_weights: WeightVector
    scenario: ScenarioParams
    ranked: list[RankedStrategy] = field(default_factory=list)

    @property
    def top(self) -> RankedStrategy | None:
        return self.ranked[0] if self.ranked else None

    @property
    def score_advantage(self) -> float:
        """FDS gap between the top two strategies (0 with fewer than two)."""
        if len(self.ranked) < 2:
            return 0.0
        return self.ranked[0].computed.fds - self.ranked[1].computed.fds

    def explain(self) -> str:
        top = self.top
        if top is None:
            return "No strategies to rank."
        text = (
            f"{top.vendor} via {top.strategy.supplier or 'direct'} ranks first "
            f"with a decision score of {top.computed.fds * 100:.1f}%"
        )
        if len(self.ranked) > 1:
            text += (
                f", {self.score_advantage * 100:.1f} points ahead of "
                f"{self.ranked[1].vendor}"
            )
        return text + "."

    def to_dict(self) -> dict:
        return {
            "normalized_weights": self.normalized_weights.as_dict(),
            "scenario": self.scenario.model_dump(by_alias=True),
            "ranked": [r.to_dict() for r in self.ranked],
            "score_advantage": round(self.score_advantage, 6),
            "explanation": self.explain(),
        }


@dataclass(frozen=True)
class SensitivityEntry:
    """Winner under a single weight shifted up and down."""

    key: WeightKey
    increased_top: str | None
    decreased_top: str | None
    baseline_top: str | None

    @property
    def stable(self) -> bool:
        return self.increased_top == self.baseline_top == self.decreased_top

    def to_dict(self) -> dict:
        return {
            "key": self.key.value,
            "criterion": self.key.display_name,
            "increased_top": self.increased_top,
            "decreased_top": self.decreased_top,
            "stable": self.stable,
        }


@dataclass(frozen=True)
class SensitivityReport:
    baseline_top: str | None
    shift: float
    entries: list[SensitivityEntry] = field(default_factory=list)

    @property
    def stable(self) -> bool:
        return all(e.stable for e in self.entries)

    def to_dict(self) -> dict:
        return {
            "baseline_top": self.baseline_top,
            "shift": self.shift,
            "stable": self.stable,
            "entries": [e.to_dict() for e in self.entries],
        }


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------


def normalize_weights(
    weights: WeightVector | Mapping[str, float] | None,
) -> WeightVector:
    """Return ``weights`` rescaled to a distribution that sums to 1.

    Negative and non-finite entries count as 0. If nothing positive is
    left, the uniform vector is returned. Idempotent up to float rounding.
    """
    if weights is None:
        weights = DEFAULT_WEIGHTS
    elif not isinstance(weights, WeightVector):
        weights = WeightVector(**dict(weights))

    cleaned = {}
    for key in WeightKey:
        value = weights.get(key)
        cleaned[key.value] = value if math.isfinite(value) and value > 0 else 0.0

    peak = max(cleaned.values())
    if peak <= 0:
        logger.warning("Weights %s have no positive mass, using uniform", weights.as_dict())
        return UNIFORM_WEIGHTS

    # Scale by the largest entry first so huge finite weights cannot overflow the sum.
    scaled = {k: v / peak for k, v in cleaned.items()}
    total = sum(scaled.values())
    return WeightVector(**{k: v / total for k, v in scaled.items()})


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def _clamp01(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return min(1.0, max(0.0, value))


def _saturating_score(value: float, multiplier: float, limit: float) -> float:
    if limit <= 0:
        return 0.0
    return _clamp01(1.0 - min(1.0, value * multiplier / limit))


def score_strategy(
    strategy: Strategy,
    weights: WeightVector,
    scenario: ScenarioParams,
) -> StrategyScores:
    """Score one strategy. ``weights`` must already be normalized."""
    delivery = _saturating_score(
        strategy.delivery_time, scenario.delivery_multiplier, strategy.max_delivery
    )
    cost = _saturating_score(strategy.cost, scenario.cost_multiplier, strategy.max_cost)
    reliability = _clamp01(
        (strategy.reliability_pct / 100.0) * scenario.reliability_modifier
    )

    exponent = -scenario.k * strategy.delivery_time
    freshness = 1.0 if exponent >= 0 else _clamp01(math.exp(exponent))

    fds = (
        weights.Wd * delivery
        + weights.Wf * freshness
        + weights.Wc * cost
        + weights.Wr * reliability
    )
    return StrategyScores(
        freshness=freshness,
        delivery=delivery,
        cost=cost,
        reliability=reliability,
        fds=fds,
    )


def _sort_key(item: tuple[Strategy, StrategyScores]) -> tuple:
    strategy, scores = item
    return (-scores.fds, -scores.reliability, strategy.vendor, strategy.id)


def rank_strategies(
    strategies: Sequence[Strategy],
    weights: WeightVector | Mapping[str, float] | None = None,
    scenario: str | Scenario | ScenarioParams | None = None,
) -> RankingResult:
    """Score and rank ``strategies`` under ``scenario``.

    Args:
        strategies: Candidate plans; may be empty.
        weights: Caller's weights; normalized before use.
        scenario: Preset name or explicit parameters; unknown names fall
            back to the default preset.

    Returns:
        RankingResult with the weights actually used and the ranked list.
    """
    normalized = normalize_weights(weights)
    params = resolve_scenario(scenario)

    scored = sorted(
        ((s, score_strategy(s, normalized, params)) for s in strategies),
        key=_sort_key,
    )
    ranked = [
        RankedStrategy(strategy=s, computed=scores, rank=position)
        for position, (s, scores) in enumerate(scored, start=1)
    ]
    return RankingResult(normalized_weights=normalized, scenario=params, ranked=ranked)


def sensitivity_analysis(
    strategies: Sequence[Strategy],
    weights: WeightVector | Mapping[str, float] | None = None,
    scenario: str | Scenario | ScenarioParams | None = None,
    shift: float = DEFAULT_SENSITIVITY_SHIFT,
) -> SensitivityReport:
    """Check whether the winner survives nudging each weight by ``shift``.

    Each criterion's weight is raised and lowered by ``shift`` (floored at
    0), the vector is renormalized, and the strategies are re-ranked.
    """
    params = resolve_scenario(scenario)
    baseline = rank_strategies(strategies, weights, params)
    baseline_top = baseline.top.id if baseline.top else None
    if not strategies:
        return SensitivityReport(baseline_top=None, shift=shift)

    base = baseline.normalized_weights.as_dict()
    entries = []
    for key in WeightKey:
        tops = []
        for delta in (shift, -shift):
            shifted = dict(base)
            shifted[key.value] = max(0.0, shifted[key.value] + delta)
            top = rank_strategies(strategies, shifted, params).top
            tops.append(top.id if top else None)
        entries.append(
            SensitivityEntry(
                key=key,
                increased_top=tops[0],
                decreased_top=tops[1],
                baseline_top=baseline_top,
            )
        )
    return SensitivityReport(baseline_top=baseline_top, shift=shift, entries=entries)
