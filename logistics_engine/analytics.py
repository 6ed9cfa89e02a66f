"""Series analysis for the analytics view: trend fit plus anomaly scan."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from . import anomaly, trend
from .models import Sample


@dataclass(frozen=True)
class SeriesAnalysis:
    regression: trend.RegressionModel
    trendline: list[trend.TrendPoint]
    anomalies: anomaly.AnomalyReport
    alerts: list[anomaly.AnomalyAlert] = field(default_factory=list)

    @property
    def next_value(self) -> float | None:
        """First extrapolated value, if the trend is valid."""
        for point in self.trendline:
            if point.kind == trend.TrendPointKind.PREDICTED:
                return point.y
        return None

    def to_dict(self) -> dict:
        return {
            "regression": self.regression.to_dict(),
            "trendline": [p.to_dict() for p in self.trendline],
            "anomalies": self.anomalies.to_dict(),
            "alerts": [a.to_dict() for a in self.alerts],
            "next_value": self.next_value,
        }


def analyze_series(
    samples: Sequence[Sample],
    future_points: int = trend.DEFAULT_FUTURE_POINTS,
) -> SeriesAnalysis:
    model = trend.fit(samples)
    report = anomaly.detect(samples)
    return SeriesAnalysis(
        regression=model,
        trendline=model.generate_trendline(samples, future_points),
        anomalies=report,
        alerts=anomaly.get_alerts(report),
    )
