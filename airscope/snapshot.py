"""
Turn a provider payload (or its absence) into an AQI snapshot.

Decision order mirrors the dashboard's data flow:
- provider failed        -> synthetic reading, "Simulated (EPA Standards)"
- provider looks too low -> synthetic reading, "Realistic Override (API values too low)"
- otherwise              -> provider reading, "OpenWeather API"
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Mapping, Optional

from aqi import AQIResult, PollutantReading, compute_aqi, round_half_up
from synthetic import PollutantSynthesizer, should_override

_LOGGER = logging.getLogger(__name__)

SOURCE_API = "OpenWeather API"
SOURCE_OVERRIDE = "Realistic Override (API values too low)"
SOURCE_SIMULATED = "Simulated (EPA Standards)"
SOURCE_FALLBACK = "Fallback System"

UNKNOWN_LOCATION = "Unknown Location"


@dataclass(frozen=True)
class AQISnapshot:
    ts_utc: datetime
    location: str
    latitude: float
    longitude: float
    reading: PollutantReading
    result: AQIResult
    source: str

    @property
    def aqi(self) -> int:
        return self.result.aqi


def reading_from_components(components: Mapping[str, Optional[float]]) -> PollutantReading:
    """
    Build a reading from an OpenWeather `components` block.

    CO arrives in ug/m3 and is converted to mg/m3; missing values count as 0.
    """

    def value(key: str) -> float:
        return float(components.get(key) or 0)

    return PollutantReading(
        pm25=round_half_up(value("pm2_5")),
        pm10=round_half_up(value("pm10")),
        no2=round_half_up(value("no2")),
        so2=round_half_up(value("so2")),
        co=round_half_up(value("co") / 1000, 2),
        o3=round_half_up(value("o3")),
    )


def resolve_snapshot(
    lat: float,
    lng: float,
    location_name: str,
    api_reading: Optional[PollutantReading],
    *,
    synthesizer: Optional[PollutantSynthesizer] = None,
    now_utc: Optional[datetime] = None,
) -> AQISnapshot:
    synthesizer = synthesizer or PollutantSynthesizer()
    if now_utc is None:
        now_utc = synthesizer.now()

    if api_reading is None:
        _LOGGER.warning("No provider data for %s; using simulated pollutants", location_name)
        reading = synthesizer.synthesize(lat, lng, location_name, now_utc=now_utc)
        source = SOURCE_SIMULATED
    elif should_override(location_name, api_reading, profiles=synthesizer.profiles):
        reading = synthesizer.synthesize(lat, lng, location_name, now_utc=now_utc)
        source = SOURCE_OVERRIDE
    else:
        reading = api_reading
        source = SOURCE_API

    return AQISnapshot(
        ts_utc=now_utc,
        location=location_name,
        latitude=lat,
        longitude=lng,
        reading=reading,
        result=compute_aqi(reading),
        source=source,
    )


def fallback_snapshot(
    lat: Optional[float],
    lng: Optional[float],
    *,
    synthesizer: Optional[PollutantSynthesizer] = None,
    now_utc: Optional[datetime] = None,
) -> AQISnapshot:
    """
    Last-resort snapshot when even the location lookup failed.
    """
    synthesizer = synthesizer or PollutantSynthesizer()
    if now_utc is None:
        now_utc = synthesizer.now()

    lat = lat or 0.0
    lng = lng or 0.0
    reading = synthesizer.synthesize(lat, lng, UNKNOWN_LOCATION, now_utc=now_utc)
    return AQISnapshot(
        ts_utc=now_utc,
        location=UNKNOWN_LOCATION,
        latitude=lat,
        longitude=lng,
        reading=reading,
        result=compute_aqi(reading),
        source=SOURCE_FALLBACK,
    )
