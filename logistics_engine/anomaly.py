"""Z-score anomaly detection over a metric series.

Uses the population mean and standard deviation (divide by n) of the
y-values. A point is anomalous when ``|z| > 2``, roughly outside the 95%
band under a normality assumption. The threshold is a fixed constant.

A constant series has zero spread; every z-score is then 0 and nothing is
flagged. Fewer than two samples yield an empty report.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from .models import Sample

logger = logging.getLogger("logistics.anomaly")

Z_SCORE_THRESHOLD = 2.0
MIN_SAMPLES = 2


@dataclass(frozen=True)
class AnomalyPoint:
    x: float
    y: float
    z_score: float
    is_anomaly: bool
    index: int
    label: str | None = None

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "z_score": round(self.z_score, 4),
            "is_anomaly": self.is_anomaly,
            "index": self.index,
            "label": self.label,
        }


@dataclass(frozen=True)
class AnomalyAlert:
    x: float
    y: float
    z_score: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z_score": round(self.z_score, 4)}


@dataclass(frozen=True)
class AnomalyReport:
    points: list[AnomalyPoint] = field(default_factory=list)
    mean: float = 0.0
    std_dev: float = 0.0

    @property
    def anomaly_count(self) -> int:
        return sum(1 for p in self.points if p.is_anomaly)

    def to_dict(self) -> dict:
        return {
            "points": [p.to_dict() for p in self.points],
            "mean": round(self.mean, 4),
            "std_dev": round(self.std_dev, 4),
            "anomaly_count": self.anomaly_count,
        }


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def std_dev(values: Sequence[float], center: float | None = None) -> float:
    """Population standard deviation; 0 for fewer than two values."""
    if len(values) < MIN_SAMPLES:
        return 0.0
    arr = np.asarray(values, dtype=float)
    if center is None:
        center = float(arr.mean())
    return float(np.sqrt(np.mean((arr - center) ** 2)))


def detect(samples: Sequence[Sample]) -> AnomalyReport:
    """Annotate every sample with its z-score and anomaly flag."""
    if len(samples) < MIN_SAMPLES:
        logger.debug("Anomaly detection skipped: %d sample(s)", len(samples))
        return AnomalyReport()

    values = [s.y for s in samples]
    mu = mean(values)
    sigma = std_dev(values, mu)
    # A spread within rounding error of the mean is no spread at all.
    spread = float(np.ptp(np.asarray(values, dtype=float)))
    if spread == 0 or spread <= np.finfo(float).eps * abs(mu):
        sigma = 0.0

    points = []
    for index, sample in enumerate(samples):
        z = 0.0 if sigma == 0 else (sample.y - mu) / sigma
        points.append(
            AnomalyPoint(
                x=sample.x,
                y=sample.y,
                z_score=z,
                is_anomaly=abs(z) > Z_SCORE_THRESHOLD,
                index=index,
                label=sample.label,
            )
        )

    report = AnomalyReport(points=points, mean=mu, std_dev=sigma)
    if report.anomaly_count:
        logger.info(
            "Detected %d anomal%s in %d samples (mean=%.2f, std=%.2f)",
            report.anomaly_count,
            "y" if report.anomaly_count == 1 else "ies",
            len(samples),
            mu,
            sigma,
        )
    return report


def get_alerts(report: AnomalyReport | Sequence[AnomalyPoint]) -> list[AnomalyAlert]:
    """Project the anomalous points of a report to ``(x, y, z_score)``."""
    points = report.points if isinstance(report, AnomalyReport) else report
    return [
        AnomalyAlert(x=p.x, y=p.y, z_score=p.z_score)
        for p in points
        if p.is_anomaly
    ]
