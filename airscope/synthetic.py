"""
Synthetic pollutant readings.

Used when the live provider fails, or when it reports suspiciously clean air
for a city known to be polluted. Values are deterministic for a location
within the same clock hour:
- Known cities: a point inside the city's recorded range
- Elsewhere: urban/rural base levels with a slow hourly drift and a small jitter
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import math
from typing import Callable, Iterable, Optional

from aqi import PollutantReading, compute_aqi, round_half_up
from city_profiles import CityProfile, find_profile, get_profiles
from settings import get_settings

_LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]

MS_PER_HOUR = 60 * 60 * 1000

# (urban base, urban slope, rural base, rural slope) per pollutant
_BASE_LEVELS = {
    "pm25": (25.0, 5.0, 10.0, 2.0),
    "pm10": (45.0, 10.0, 20.0, 5.0),
    "no2": (25.0, 4.0, 10.0, 2.0),
    "so2": (8.0, 2.0, 3.0, 1.0),
    "co": (1.2, 0.2, 0.5, 0.1),
    "o3": (35.0, 5.0, 25.0, 3.0),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def hour_bucket(now_utc: datetime) -> int:
    # naive datetimes are UTC, not host-local time
    if now_utc.tzinfo is None:
        now_utc = now_utc.replace(tzinfo=timezone.utc)
    return math.floor(now_utc.timestamp() * 1000 / MS_PER_HOUR)


def combined_seed(lat: float, lng: float, bucket: int) -> float:
    location_seed = abs(math.sin(lat * lng * 1000) * 10000)
    return (location_seed + bucket) % 10000


def is_known_polluted_location(location_name: str, profiles: Optional[Iterable[CityProfile]] = None) -> bool:
    return find_profile(location_name, profiles) is not None


def should_override(
    location_name: str,
    api_reading: PollutantReading,
    *,
    profiles: Optional[Iterable[CityProfile]] = None,
    ratio: Optional[float] = None,
) -> bool:
    """
    True when a known-polluted city reports an AQI below `ratio` (default 60%)
    of its expected minimum.
    """
    if profiles is None:
        profiles = get_profiles()
    if ratio is None:
        ratio = get_settings().OVERRIDE_RATIO

    matching = [p for p in profiles if p.matches(location_name)]
    if not matching:
        return False

    calculated = compute_aqi(api_reading).aqi
    for profile in matching:
        min_expected = profile.expected_aqi[0]
        if calculated < min_expected * ratio:
            _LOGGER.info(
                "API AQI %d too low for %s (expected min: %s); using synthetic data",
                calculated,
                profile.name,
                min_expected,
            )
            return True
    return False


class PollutantSynthesizer:
    """
    Produces plausible pollutant readings for a location.

    The clock only feeds the hourly seed bucket; inject one to pin the output.
    """

    def __init__(
        self,
        *,
        clock: Optional[Clock] = None,
        profiles: Optional[Iterable[CityProfile]] = None,
    ) -> None:
        self._clock = clock or _utcnow
        self._profiles = tuple(profiles) if profiles is not None else None

    @property
    def profiles(self) -> Optional[tuple]:
        return self._profiles

    def now(self) -> datetime:
        return self._clock()

    def _from_profile(self, profile: CityProfile, seed: float) -> PollutantReading:
        variation = (seed % 100) / 100

        def pick(bounds):
            lo, hi = bounds
            return lo + (hi - lo) * variation

        reading = PollutantReading(
            pm25=round_half_up(pick(profile.pm25)),
            pm10=round_half_up(pick(profile.pm10)),
            no2=round_half_up(pick(profile.no2)),
            so2=round_half_up(pick(profile.so2)),
            co=round_half_up(pick(profile.co), 1),
            o3=round_half_up(pick(profile.o3)),
        )
        _LOGGER.debug("%s synthetic pollutants: %s", profile.name, reading)
        return reading

    def _generic(self, lat: float, lng: float, bucket: int, seed: float) -> PollutantReading:
        urban_factor = abs(lat + lng) % 10
        is_urban = urban_factor > 5

        time_variation = math.sin(bucket * 0.1) * 0.2
        random_variation = (seed % 100 - 50) / 500
        total_variation = 1 + time_variation + random_variation

        values = {}
        for name, (urban_base, urban_slope, rural_base, rural_slope) in _BASE_LEVELS.items():
            if is_urban:
                base = urban_base + urban_factor * urban_slope
            else:
                base = rural_base + urban_factor * rural_slope
            if name == "co":
                values[name] = max(0.1, round_half_up(base * total_variation, 1))
            else:
                values[name] = max(1.0, round_half_up(base * total_variation))
        return PollutantReading(**values)

    def synthesize(
        self,
        lat: float,
        lng: float,
        location_name: str,
        now_utc: Optional[datetime] = None,
    ) -> PollutantReading:
        if now_utc is None:
            now_utc = self._clock()

        bucket = hour_bucket(now_utc)
        seed = combined_seed(lat, lng, bucket)

        profile = find_profile(location_name, self._profiles)
        if profile is not None:
            return self._from_profile(profile, seed)
        return self._generic(lat, lng, bucket, seed)


def synthesize(
    lat: float,
    lng: float,
    location_name: str,
    now_utc: Optional[datetime] = None,
) -> PollutantReading:
    return PollutantSynthesizer().synthesize(lat, lng, location_name, now_utc=now_utc)
