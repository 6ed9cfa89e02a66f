"""Tests for the combined series analysis."""

import pytest

from logistics_engine.analytics import analyze_series
from logistics_engine.demo import HOURLY_DELIVERIES
from logistics_engine.models import Sample


class TestAnalyzeSeries:
    def test_demo_series(self):
        analysis = analyze_series(HOURLY_DELIVERIES, future_points=3)
        assert analysis.regression.is_valid
        assert analysis.regression.direction == "rising"
        assert len(analysis.trendline) == len(HOURLY_DELIVERIES) + 3
        assert analysis.next_value == pytest.approx(analysis.regression.predict(11))
        assert analysis.alerts == []

    def test_spike_raises_alert(self):
        values = [100, 110] * 10
        values[7] = 400
        samples = [Sample(x=i, y=v) for i, v in enumerate(values)]
        analysis = analyze_series(samples)
        assert [a.x for a in analysis.alerts] == [7]

    def test_short_series(self):
        analysis = analyze_series([Sample(x=1, y=5)])
        assert not analysis.regression.is_valid
        assert analysis.trendline == []
        assert analysis.next_value is None
        assert analysis.alerts == []

    def test_to_dict(self):
        data = analyze_series(HOURLY_DELIVERIES).to_dict()
        assert set(data) == {"regression", "trendline", "anomalies", "alerts", "next_value"}
        assert data["trendline"][-1]["type"] == "predicted"
