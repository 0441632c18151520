"""Tests for provider payload normalisation and live/synthetic selection."""

import pytest

from aqi import PollutantReading
from snapshot import (
    SOURCE_API,
    SOURCE_FALLBACK,
    SOURCE_OVERRIDE,
    SOURCE_SIMULATED,
    UNKNOWN_LOCATION,
    fallback_snapshot,
    reading_from_components,
    resolve_snapshot,
)
from synthetic import PollutantSynthesizer


@pytest.fixture
def synthesizer(fixed_now):
    return PollutantSynthesizer(clock=lambda: fixed_now)


class TestReadingFromComponents:
    def test_openweather_components(self):
        """CO is converted from ug/m3 to mg/m3; the rest are rounded."""
        reading = reading_from_components(
            {"co": 250.0, "no": 0.1, "no2": 14.6, "o3": 60.2, "so2": 3.4, "pm2_5": 12.4, "pm10": 20.5, "nh3": 1.2}
        )
        assert reading == PollutantReading(pm25=12, pm10=21, no2=15, so2=3, co=0.25, o3=60)

    def test_missing_values_are_zero(self):
        reading = reading_from_components({"pm2_5": None})
        assert reading == PollutantReading()


class TestResolveSnapshot:
    def test_provider_failure_uses_simulated(self, synthesizer, fixed_now):
        snap = resolve_snapshot(40.7, -74.0, "New York", None, synthesizer=synthesizer)
        assert snap.source == SOURCE_SIMULATED
        assert snap.ts_utc == fixed_now
        assert snap.reading == synthesizer.synthesize(40.7, -74.0, "New York")

    def test_clean_reading_for_polluted_city_is_overridden(self, synthesizer):
        api = PollutantReading(pm25=5, pm10=10)
        snap = resolve_snapshot(28.6, 77.2, "Delhi", api, synthesizer=synthesizer)
        assert snap.source == SOURCE_OVERRIDE
        assert snap.reading != api
        assert snap.reading == synthesizer.synthesize(28.6, 77.2, "Delhi")

    def test_plausible_reading_is_kept(self, synthesizer):
        api = PollutantReading(pm25=5, pm10=10)
        snap = resolve_snapshot(48.85, 2.35, "Paris", api, synthesizer=synthesizer)
        assert snap.source == SOURCE_API
        assert snap.reading is api
        assert snap.aqi == snap.result.aqi == 21
        assert snap.location == "Paris"

    def test_fallback_snapshot(self, synthesizer):
        snap = fallback_snapshot(None, None, synthesizer=synthesizer)
        assert snap.source == SOURCE_FALLBACK
        assert snap.location == UNKNOWN_LOCATION
        assert (snap.latitude, snap.longitude) == (0.0, 0.0)
        assert snap.aqi > 0
