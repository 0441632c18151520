"""Tests for trend summaries, forecasting and anomaly detection."""

from datetime import timedelta

import numpy as np
import pytest

from categories import CATEGORY_BANDS
from forecast import detect_anomalies, forecast_aqi, load_models, summarize_trend, train_models
from snapshot import resolve_snapshot
from synthetic import PollutantSynthesizer


def _history(start, hours, name="Springfield", lat=3.0, lng=3.0):
    rows = []
    for h in range(hours):
        now = start + timedelta(hours=h)
        snap = resolve_snapshot(lat, lng, name, None, synthesizer=PollutantSynthesizer(clock=lambda now=now: now))
        row = snap.reading.as_dict()
        row["ts_unix"] = int(now.timestamp())
        row["aqi"] = snap.aqi
        rows.append(row)
    return rows


@pytest.fixture
def history(fixed_now):
    return _history(fixed_now, 120)


class TestSummarizeTrend:
    def test_summary(self):
        rows = [{"ts_unix": i, "aqi": a} for i, a in enumerate([10, 20, 31])]
        summary = summarize_trend(rows)
        assert summary.count == 3
        assert summary.average == 20
        assert summary.maximum == 31
        assert summary.minimum == 10
        assert summary.category == "Good"

    def test_empty(self):
        summary = summarize_trend([])
        assert (summary.count, summary.average, summary.maximum, summary.minimum) == (0, 0, 0, 0)

    def test_missing_timestamp(self):
        with pytest.raises(ValueError):
            summarize_trend([{"aqi": 10}])


class TestModels:
    def test_train_needs_history(self, fixed_now, tmp_path):
        with pytest.raises(ValueError, match="Not enough data"):
            train_models(_history(fixed_now, 10), model_dir=tmp_path)

    def test_forecast_without_model(self, history, tmp_path):
        with pytest.raises(FileNotFoundError):
            forecast_aqi(history, model_dir=tmp_path / "empty")
        assert not (tmp_path / "empty").exists()

    def test_anomalies_without_model(self, history, tmp_path):
        with pytest.raises(FileNotFoundError):
            detect_anomalies(history, model_dir=tmp_path / "empty")
        assert not (tmp_path / "empty").exists()

    def test_load_models_does_not_create_directory(self, tmp_path):
        """Looking up models leaves the filesystem untouched."""
        forecast, anomaly, meta = load_models(tmp_path / "missing")
        assert (forecast, anomaly, meta) == (None, None, {})
        assert not (tmp_path / "missing").exists()

    def test_train_creates_model_directory(self, history, tmp_path):
        model_dir = tmp_path / "nested" / "models"
        train_models(history, model_dir=model_dir, n_estimators=10)
        assert (model_dir / "aqi_forecast_rf.joblib").exists()

    def test_train_and_forecast(self, history, tmp_path):
        report = train_models(history, model_dir=tmp_path, n_estimators=20)
        assert report.rows_used > 0
        assert report.mae >= 0

        forecast, anomaly, meta = load_models(tmp_path)
        assert forecast is not None and anomaly is not None
        assert meta["mae"] == pytest.approx(report.mae)

        pred = forecast_aqi(history, horizon_hours=6, step_minutes=60, model_dir=tmp_path)
        assert len(pred) == 6
        assert pred["pred_aqi"].between(0, 500).all()
        assert pred["confidence"].between(70, 100).all()
        assert (np.diff(pred["confidence"].to_numpy()) <= 0).all()
        assert set(pred["category"]) <= {b.label for b in CATEGORY_BANDS}
        assert pred["ts"].is_monotonic_increasing
        assert list(pred.columns) == ["ts", "pred_aqi", "confidence", "category"]

    def test_detect_anomalies(self, history, tmp_path):
        train_models(history, model_dir=tmp_path, n_estimators=20)
        labeled = detect_anomalies(history, model_dir=tmp_path)
        assert len(labeled) == len(history)
        assert labeled["anomaly"].dtype == bool
        assert "anomaly_score" in labeled.columns
