"""Pydantic input models for the decision engine.

These are the plain-data shapes a caller (dashboard, CLI, sidecar) hands to
the engine. They are frozen value objects: the engine never mutates its
inputs, it returns new result objects instead.

Result types live beside the component that produces them as dataclasses.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Sample(BaseModel):
    """One (x, y) observation of an operational metric."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    label: str | None = None


class Vendor(BaseModel):
    """A stop in the delivery sequence.

    ``demand`` and ``congestion_level`` are expected in [0, 100]; the cost
    formulas assume that range but do not enforce it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int | str
    name: str
    location: str = ""
    demand: float = 0.0
    congestion_level: float = Field(default=0.0, alias="congestionLevel")
    base_delay: float = Field(default=0.0, alias="baseDelay")


class Strategy(BaseModel):
    """A candidate logistics plan (vendor + supplier pairing)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    vendor: str
    supplier: str = ""
    delivery_time: float = Field(alias="deliveryTime")
    max_delivery: float = Field(alias="maxDelivery")
    cost: float
    max_cost: float = Field(alias="maxCost")
    reliability_pct: float = Field(alias="reliabilityPct")


class WeightKey(str, Enum):
    """Scoring criteria, in the order weights are reported."""

    DELIVERY = "Wd"
    FRESHNESS = "Wf"
    COST = "Wc"
    RELIABILITY = "Wr"

    @property
    def display_name(self) -> str:
        return {
            WeightKey.DELIVERY: "Delivery",
            WeightKey.FRESHNESS: "Freshness",
            WeightKey.COST: "Cost",
            WeightKey.RELIABILITY: "Reliability",
        }[self]


class WeightVector(BaseModel):
    """Criterion weights for the final decision score.

    Values are not required to sum to 1 here; ``ranking.normalize_weights``
    produces the distribution actually used for scoring.
    """

    model_config = ConfigDict(frozen=True)

    Wd: float = 0.35
    Wf: float = 0.30
    Wc: float = 0.20
    Wr: float = 0.15

    def get(self, key: WeightKey) -> float:
        return getattr(self, key.value)

    def as_dict(self) -> dict[str, float]:
        return {key.value: self.get(key) for key in WeightKey}

    @property
    def total(self) -> float:
        return self.Wd + self.Wf + self.Wc + self.Wr


DEFAULT_WEIGHTS = WeightVector()


class ScenarioParams(BaseModel):
    """Multipliers describing an operating condition.

    ``k`` is the freshness decay rate per unit of delivery time.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    k: float = 0.04
    delivery_multiplier: float = Field(default=1.0, alias="deliveryMultiplier")
    cost_multiplier: float = Field(default=1.0, alias="costMultiplier")
    reliability_modifier: float = Field(default=1.0, alias="reliabilityModifier")


class LearningFeedback(BaseModel):
    """Observed outcome of a simulation cycle."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    spoilage_risk_percent: float = Field(default=0.0, alias="spoilageRiskPercent")
    avg_delay: float = Field(default=0.0, alias="avgDelay")
    delay_threshold: float = Field(default=40.0, alias="delayThreshold")


class CustomerStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"


class WaitlistCustomer(BaseModel):
    """A prospective customer waiting for fleet capacity."""

    model_config = ConfigDict(frozen=True)

    id: int | str
    name: str
    location: str
    volume: float
    impact: float = 0.0
    status: CustomerStatus = CustomerStatus.PENDING
