"""Trend fitting for operational time series.

Ordinary least-squares line fit over (x, y) samples, with an extrapolated
trend line for the forecast chart.

Algorithm:
    slope     = Σ(x - x̄)(y - ȳ) / Σ(x - x̄)²
    intercept = ȳ - slope · x̄
    r²        = 1 - SS_residual / SS_total      (0 when SS_total == 0)

The centred form is algebraically identical to
``(nΣxy - ΣxΣy) / (nΣx² - (Σx)²)`` but loses less precision on large x.

Degenerate input never raises: fewer than two samples, or samples that all
share one x value, produce a model with ``is_valid=False`` and zero
coefficients.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .models import Sample

logger = logging.getLogger("logistics.trend")

MIN_SAMPLES = 2
DEFAULT_FUTURE_POINTS = 5


class TrendPointKind(str, Enum):
    HISTORICAL = "historical"
    PREDICTED = "predicted"


@dataclass(frozen=True)
class TrendPoint:
    x: float
    y: float
    kind: TrendPointKind

    def to_dict(self) -> dict:
        return {"x": self.x, "y": round(self.y, 4), "type": self.kind.value}


@dataclass(frozen=True)
class RegressionModel:
    """Result of a least-squares fit. Immutable once produced by ``fit``."""

    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = 0.0
    is_valid: bool = False
    n_samples: int = 0

    def predict(self, x: float) -> float:
        """Evaluate the fitted line at ``x``.

        Defined for invalid models too (returns the intercept of the default
        state, 0); callers should check ``is_valid`` first.
        """
        return self.slope * x + self.intercept

    def generate_trendline(
        self,
        samples: Sequence[Sample],
        future_points: int = DEFAULT_FUTURE_POINTS,
    ) -> list[TrendPoint]:
        """Fitted values for ``samples`` followed by extrapolated points.

        Future points are spaced one x-unit apart beyond ``max(x)``.
        Returns an empty list for invalid models.
        """
        if not self.is_valid or not samples:
            return []

        points = [
            TrendPoint(x=s.x, y=self.predict(s.x), kind=TrendPointKind.HISTORICAL)
            for s in samples
        ]
        max_x = max(s.x for s in samples)
        for step in range(1, max(0, future_points) + 1):
            future_x = max_x + step
            points.append(
                TrendPoint(
                    x=future_x,
                    y=self.predict(future_x),
                    kind=TrendPointKind.PREDICTED,
                )
            )
        return points

    @property
    def direction(self) -> str:
        if not self.is_valid or self.slope == 0:
            return "flat"
        return "rising" if self.slope > 0 else "falling"

    def to_dict(self) -> dict:
        return {
            "slope": round(self.slope, 6),
            "intercept": round(self.intercept, 6),
            "r_squared": round(self.r_squared, 6),
            "is_valid": self.is_valid,
            "n_samples": self.n_samples,
            "direction": self.direction,
        }


def fit(samples: Sequence[Sample]) -> RegressionModel:
    """Fit a least-squares line to ``samples``.

    Args:
        samples: Observations; x need not be sorted.

    Returns:
        RegressionModel. ``is_valid`` is False for fewer than two samples or
        zero variance in x.
    """
    n = len(samples)
    if n < MIN_SAMPLES:
        logger.debug("Trend fit skipped: %d sample(s)", n)
        return RegressionModel(n_samples=n)

    xs = np.fromiter((s.x for s in samples), dtype=float, count=n)
    ys = np.fromiter((s.y for s in samples), dtype=float, count=n)

    if np.ptp(xs) == 0:
        logger.debug("Trend fit skipped: all %d samples share x=%s", n, xs[0])
        return RegressionModel(n_samples=n)

    x_mean = xs.mean()
    y_mean = ys.mean()
    dx = xs - x_mean
    sxx = float(np.dot(dx, dx))
    if sxx == 0:
        return RegressionModel(n_samples=n)

    slope = float(np.dot(dx, ys - y_mean)) / sxx
    intercept = float(y_mean - slope * x_mean)

    r_squared = 0.0
    if np.ptp(ys) > 0:
        ss_total = float(np.sum((ys - y_mean) ** 2))
        residuals = ys - (slope * xs + intercept)
        ss_residual = float(np.dot(residuals, residuals))
        r_squared = 1.0 - ss_residual / ss_total if ss_total > 0 else 0.0

    return RegressionModel(
        slope=slope,
        intercept=intercept,
        r_squared=r_squared,
        is_valid=True,
        n_samples=n,
    )


def generate_trendline(
    samples: Sequence[Sample],
    future_points: int = DEFAULT_FUTURE_POINTS,
) -> list[TrendPoint]:
    """Fit ``samples`` and return the trend line. Convenience wrapper."""
    return fit(samples).generate_trendline(samples, future_points)
