"""
AQI category bands (EPA convention).

The bands are contiguous over 0..500; anything above 500 is still Hazardous.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CategoryBand:
    min_aqi: int
    max_aqi: int
    label: str
    color: str
    description: str
    advice: str


CATEGORY_BANDS: Tuple[CategoryBand, ...] = (
    CategoryBand(
        0, 50, "Good", "#00E400",
        "Air quality is satisfactory",
        "Perfect for outdoor activities",
    ),
    CategoryBand(
        51, 100, "Moderate", "#FFFF00",
        "Air quality is acceptable",
        "Moderate outdoor activities recommended",
    ),
    CategoryBand(
        101, 150, "Unhealthy for Sensitive Groups", "#FF7E00",
        "Members of sensitive groups may experience health effects",
        "Sensitive groups should stay indoors",
    ),
    CategoryBand(
        151, 200, "Unhealthy", "#FF0000",
        "Everyone may begin to experience health effects",
        "Avoid outdoor activities",
    ),
    CategoryBand(
        201, 300, "Very Unhealthy", "#8F3F97",
        "Health warnings of emergency conditions",
        "Emergency measures recommended",
    ),
    CategoryBand(
        301, 500, "Hazardous", "#7E0023",
        "Health alert: everyone may experience serious health effects",
        "Emergency measures recommended",
    ),
)


def classify(aqi: int) -> CategoryBand:
    """
    Return the band containing the given AQI.
    """
    a = int(aqi)
    for band in CATEGORY_BANDS:
        if a <= band.max_aqi:
            return band
    return CATEGORY_BANDS[-1]
