"""Fleet-load impact of onboarding new customers.

    impact = volume / fleet_capacity · district_distance_factor · 100

Warning levels:
    high    impact > 15
    medium  impact > 8
    low     otherwise
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from .models import CustomerStatus, WaitlistCustomer

TOTAL_FLEET_CAPACITY = 5000.0
UNKNOWN_DISTRICT_FACTOR = 1.5

DISTRICT_DISTANCES: Mapping[str, float] = MappingProxyType(
    {
        "Downtown": 1.2,
        "North District": 1.5,
        "East Plaza": 1.8,
        "South Market": 2.0,
        "West End": 1.6,
        "Central Hub": 1.0,
        "Airport Zone": 2.5,
        "Industrial Park": 1.9,
        "Suburban": 2.2,
    }
)

HIGH_IMPACT_THRESHOLD = 15.0
MEDIUM_IMPACT_THRESHOLD = 8.0


class ImpactLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def message(self) -> str:
        return {
            ImpactLevel.LOW: "Minimal fleet load increase",
            ImpactLevel.MEDIUM: "Moderate fleet load increase",
            ImpactLevel.HIGH: "Significant fleet load increase",
        }[self]


@dataclass(frozen=True)
class FleetImpact:
    score: float
    volume: float
    location: str
    distance_factor: float

    @property
    def level(self) -> ImpactLevel:
        if self.score > HIGH_IMPACT_THRESHOLD:
            return ImpactLevel.HIGH
        if self.score > MEDIUM_IMPACT_THRESHOLD:
            return ImpactLevel.MEDIUM
        return ImpactLevel.LOW

    def to_dict(self) -> dict:
        return {
            "score": round(self.score, 4),
            "volume": self.volume,
            "location": self.location,
            "distance_factor": self.distance_factor,
            "level": self.level.value,
            "message": self.level.message,
        }


@dataclass(frozen=True)
class WaitlistSummary:
    pending_count: int
    approved_count: int
    total_pending_volume: float
    total_pending_impact: float

    def to_dict(self) -> dict:
        return {
            "pending_count": self.pending_count,
            "approved_count": self.approved_count,
            "total_pending_volume": self.total_pending_volume,
            "total_pending_impact": round(self.total_pending_impact, 4),
        }


def impact_score(
    volume: float,
    location: str,
    distances: Mapping[str, float] = DISTRICT_DISTANCES,
    capacity: float = TOTAL_FLEET_CAPACITY,
) -> FleetImpact | None:
    """Score the fleet load a new customer would add.

    Returns None when the volume is not positive, the location is empty,
    or the capacity is not positive.
    """
    if not location or volume <= 0 or capacity <= 0:
        return None
    factor = distances.get(location, UNKNOWN_DISTRICT_FACTOR)
    return FleetImpact(
        score=volume / capacity * factor * 100.0,
        volume=volume,
        location=location,
        distance_factor=factor,
    )


def summarize_waitlist(customers: Sequence[WaitlistCustomer]) -> WaitlistSummary:
    pending = [c for c in customers if c.status == CustomerStatus.PENDING]
    return WaitlistSummary(
        pending_count=len(pending),
        approved_count=sum(1 for c in customers if c.status == CustomerStatus.APPROVED),
        total_pending_volume=sum(c.volume for c in pending),
        total_pending_impact=sum(c.impact for c in pending),
    )
