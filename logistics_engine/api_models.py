"""API request/response models for the engine sidecar.

Requests carry the engine's input models directly. Responses mirror the
``to_dict()`` output of the corresponding engine result.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .models import (
    LearningFeedback,
    Sample,
    ScenarioParams,
    Strategy,
    Vendor,
    WaitlistCustomer,
    WeightVector,
)

# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    code: str
    message: str
    detail: str | None = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: str = "ok"
    version: str
    dev_mode: bool = False


class ScenarioListResponse(BaseModel):
    """Response for GET /api/v1/scenarios."""

    default: str
    scenarios: dict[str, ScenarioParams]


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


class SeriesRequest(BaseModel):
    """Request body for the analytics endpoints."""

    samples: list[Sample]
    future_points: int = Field(default=5, ge=0, le=365)


class TrendResponse(BaseModel):
    """Response for POST /api/v1/analytics/trend."""

    regression: dict
    trendline: list[dict]
    anomalies: dict
    alerts: list[dict]
    next_value: float | None = None


class AnomalyResponse(BaseModel):
    """Response for POST /api/v1/analytics/anomalies."""

    points: list[dict]
    mean: float
    std_dev: float
    anomaly_count: int
    alerts: list[dict]


# ---------------------------------------------------------------------------
# Sequencing
# ---------------------------------------------------------------------------


class SequenceRequest(BaseModel):
    """Request body for POST /api/v1/sequence/optimize."""

    vendors: list[Vendor]
    generations: int | None = Field(default=None, ge=0, le=1000)
    population_size: int | None = Field(default=None, ge=2, le=1000)
    seed: int | None = None


class SequenceResponse(BaseModel):
    """Response for POST /api/v1/sequence/optimize."""

    ordering: list[int | str]
    fitness: float
    total_delay: float
    baseline_fitness: float
    baseline_total_delay: float
    efficiency_gain: float
    raw_efficiency_gain: float
    generations_run: int
    history: list[float]
    ranked_vendors: list[dict]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class StrategyRequest(BaseModel):
    """Request body for the strategy endpoints."""

    strategies: list[Strategy]
    weights: WeightVector | None = None
    scenario: str | None = None
    trials: int | None = Field(default=None, ge=1, le=20000)
    seed: int | None = None


class RankingResponse(BaseModel):
    """Response for POST /api/v1/strategies/rank."""

    normalized_weights: dict[str, float]
    scenario: dict
    ranked: list[dict]
    score_advantage: float
    explanation: str
    sensitivity: dict | None = None


class MonteCarloResponse(BaseModel):
    """Response for POST /api/v1/strategies/simulate."""

    trials: int
    noise: float
    most_likely_winner: str | None
    confidence: float
    win_frequency: dict[str, float]
    bands: dict[str, dict]


class LearnRequest(BaseModel):
    """Request body for POST /api/v1/strategies/learn."""

    weights: WeightVector
    feedback: LearningFeedback


class LearningResponse(BaseModel):
    """Response for POST /api/v1/strategies/learn."""

    before: dict[str, float]
    after: dict[str, float]
    delta: dict[str, float]
    triggers: list[str]


class CycleResponse(BaseModel):
    """Response for POST /api/v1/simulation/cycle."""

    scenario: dict
    ranking: dict
    monte_carlo: dict
    feedback: dict
    learning: dict
    next_weights: dict[str, float]
    explanation: str


# ---------------------------------------------------------------------------
# Fleet
# ---------------------------------------------------------------------------


class FleetImpactRequest(BaseModel):
    """Request body for POST /api/v1/fleet/impact."""

    volume: float
    location: str
    waitlist: list[WaitlistCustomer] = Field(default_factory=list)


class FleetImpactResponse(BaseModel):
    """Response for POST /api/v1/fleet/impact."""

    impact: dict | None
    waitlist: dict
