"""
US EPA concentration -> AQI breakpoint tables.

One table per pollutant, keyed by the field name used on PollutantReading.
Rows are ascending and non-overlapping; the tables are never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Breakpoint:
    conc_low: float
    conc_high: float
    aqi_low: int
    aqi_high: int


BreakpointTable = Tuple[Breakpoint, ...]


def _table(*rows: Tuple[float, float, int, int]) -> BreakpointTable:
    return tuple(Breakpoint(*row) for row in rows)


# PM2.5 (ug/m3)
PM25_BREAKPOINTS = _table(
    (0.0, 12.0, 0, 50),
    (12.1, 35.4, 51, 100),
    (35.5, 55.4, 101, 150),
    (55.5, 150.4, 151, 200),
    (150.5, 250.4, 201, 300),
    (250.5, 350.4, 301, 400),
    (350.5, 500.4, 401, 500),
)

# PM10 (ug/m3)
PM10_BREAKPOINTS = _table(
    (0, 54, 0, 50),
    (55, 154, 51, 100),
    (155, 254, 101, 150),
    (255, 354, 151, 200),
    (355, 424, 201, 300),
    (425, 504, 301, 400),
    (505, 604, 401, 500),
)

# NO2 (ug/m3, ppb-scaled)
NO2_BREAKPOINTS = _table(
    (0, 53, 0, 50),
    (54, 100, 51, 100),
    (101, 360, 101, 150),
    (361, 649, 151, 200),
    (650, 1249, 201, 300),
    (1250, 1649, 301, 400),
    (1650, 2049, 401, 500),
)

# SO2 (ug/m3)
SO2_BREAKPOINTS = _table(
    (0, 35, 0, 50),
    (36, 75, 51, 100),
    (76, 185, 101, 150),
    (186, 304, 151, 200),
    (305, 604, 201, 300),
    (605, 804, 301, 400),
    (805, 1004, 401, 500),
)

# CO (mg/m3)
CO_BREAKPOINTS = _table(
    (0.0, 4.4, 0, 50),
    (4.5, 9.4, 51, 100),
    (9.5, 12.4, 101, 150),
    (12.5, 15.4, 151, 200),
    (15.5, 30.4, 201, 300),
    (30.5, 40.4, 301, 400),
    (40.5, 50.4, 401, 500),
)

# O3 (ug/m3); the 8-hour table stops at 300
O3_BREAKPOINTS = _table(
    (0, 54, 0, 50),
    (55, 70, 51, 100),
    (71, 85, 101, 150),
    (86, 105, 151, 200),
    (106, 200, 201, 300),
)

# Insertion order is the order sub-indices are reported in.
BREAKPOINT_TABLES: Dict[str, BreakpointTable] = {
    "pm25": PM25_BREAKPOINTS,
    "pm10": PM10_BREAKPOINTS,
    "no2": NO2_BREAKPOINTS,
    "so2": SO2_BREAKPOINTS,
    "co": CO_BREAKPOINTS,
    "o3": O3_BREAKPOINTS,
}

POLLUTANTS: Tuple[str, ...] = tuple(BREAKPOINT_TABLES)

AQI_CEILING = 500


@dataclass(frozen=True)
class PollutantInfo:
    name: str
    unit: str
    description: str


POLLUTANT_INFO: Dict[str, PollutantInfo] = {
    "pm25": PollutantInfo("PM2.5", "ug/m3", "Fine Particulate Matter"),
    "pm10": PollutantInfo("PM10", "ug/m3", "Coarse Particulate Matter"),
    "no2": PollutantInfo("NO2", "ug/m3", "Nitrogen Dioxide"),
    "so2": PollutantInfo("SO2", "ug/m3", "Sulfur Dioxide"),
    "co": PollutantInfo("CO", "mg/m3", "Carbon Monoxide"),
    "o3": PollutantInfo("O3", "ug/m3", "Ground-level Ozone"),
}
