"""
AQI (Air Quality Index) calculation utilities.

Each pollutant concentration is mapped through its US EPA breakpoint table by
piecewise linear interpolation; the overall AQI is the worst sub-index.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
import math
from typing import Dict, Optional

from breakpoints import AQI_CEILING, BREAKPOINT_TABLES, BreakpointTable
from categories import CategoryBand, classify
from settings import get_settings

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollutantReading:
    """Concentrations in ug/m3, except co which is mg/m3."""

    pm25: float = 0.0
    pm10: float = 0.0
    no2: float = 0.0
    so2: float = 0.0
    co: float = 0.0
    o3: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class AQIResult:
    aqi: int
    sub_indices: Dict[str, int]
    dominant: str
    category: CategoryBand


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round half away from zero; Python's round() rounds half to even.
    """
    factor = 10 ** ndigits
    return math.copysign(math.floor(abs(value) * factor + 0.5), value) / factor


def sanitize_concentration(value: float) -> float:
    c = float(value)
    if not math.isfinite(c) or c < 0:
        _LOGGER.debug("out-of-domain concentration %s clamped to 0", value)
        return 0.0
    return c


def interpolate(concentration: float, table: BreakpointTable) -> int:
    """
    Convert a concentration to a sub-index via piecewise linear interpolation.

    Values between two rows of the table snap to the upper row's lower bound;
    values above the last row return the 500 ceiling.
    """
    c = sanitize_concentration(concentration)
    for bp in table:
        if c <= bp.conc_high:
            c = max(c, bp.conc_low)
            aqi = (bp.aqi_high - bp.aqi_low) / (bp.conc_high - bp.conc_low) * (c - bp.conc_low) + bp.aqi_low
            return int(round_half_up(aqi))
    return AQI_CEILING


def sub_index(pollutant: str, concentration: float) -> int:
    if pollutant not in BREAKPOINT_TABLES:
        raise KeyError(f"Unknown pollutant: {pollutant}")
    return interpolate(concentration, BREAKPOINT_TABLES[pollutant])


def compute_aqi(reading: PollutantReading, *, trace: Optional[bool] = None) -> AQIResult:
    """
    Compute the six sub-indices and report the highest as the overall AQI.
    """
    if trace is None:
        trace = get_settings().TRACE

    values = reading.as_dict()
    sub_indices = {name: interpolate(values[name], table) for name, table in BREAKPOINT_TABLES.items()}
    dominant = max(sub_indices, key=sub_indices.get)
    aqi = sub_indices[dominant]

    if trace:
        for name, value in sub_indices.items():
            _LOGGER.debug("%s: %s -> AQI %d", name, values[name], value)
        _LOGGER.debug("overall AQI %d (dominant: %s)", aqi, dominant)

    return AQIResult(aqi=aqi, sub_indices=sub_indices, dominant=dominant, category=classify(aqi))
