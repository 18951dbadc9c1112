"""
Domain service: soil composition estimates from location and climate.

The heuristic model stands in for a soil-grid lookup. Each latitude band
has its own soil-type candidates and pH/NPK ranges; base values are drawn
from a generator seeded by the coordinates, then adjusted for rainfall
(nitrogen) and longitude (pH and phosphorus).
"""
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
import numpy as np

from agroenv.domain.models import SoilSummary, SoilType, WeatherSummary
from agroenv.utils.numeric import round_2dp

logger = logging.getLogger(__name__)

TROPICAL_LATITUDE_LIMIT = 23.0
TEMPERATE_LATITUDE_LIMIT = 50.0

# Coordinates are rounded to this many decimals (~11 m) before seeding
SEED_PRECISION = 4


class LatitudeBand(str, Enum):
    """Climatic latitude band."""
    TROPICAL = "tropical"
    TEMPERATE = "temperate"
    POLAR = "polar"


def latitude_band(latitude: float) -> LatitudeBand:
    """
    Classify a latitude.

    |lat| < 23 is tropical, 23 <= |lat| < 50 is temperate, anything
    further from the equator is polar.

    Raises:
        ValueError: If latitude is NaN or infinite
    """
    if not math.isfinite(latitude):
        raise ValueError(f"Latitude must be finite, got {latitude}")
    abs_lat = abs(latitude)
    if abs_lat < TROPICAL_LATITUDE_LIMIT:
        return LatitudeBand.TROPICAL
    if abs_lat < TEMPERATE_LATITUDE_LIMIT:
        return LatitudeBand.TEMPERATE
    return LatitudeBand.POLAR


@dataclass(frozen=True)
class BandProfile:
    """Soil candidates and base value ranges for one latitude band."""
    soil_types: Tuple[SoilType, ...]
    soil_type_weights: Tuple[float, ...]
    ph_range: Tuple[float, float]
    nitrogen_range: Tuple[float, float]
    phosphorus_range: Tuple[float, float]
    potassium_range: Tuple[float, float]


BAND_PROFILES = {
    LatitudeBand.TROPICAL: BandProfile(
        soil_types=(SoilType.CLAY, SoilType.LOAMY),
        soil_type_weights=(0.5, 0.5),
        ph_range=(5.5, 7.0),  # slightly acidic
        nitrogen_range=(15.0, 35.0),
        phosphorus_range=(10.0, 25.0),
        potassium_range=(100.0, 180.0),
    ),
    LatitudeBand.TEMPERATE: BandProfile(
        soil_types=(SoilType.LOAMY, SoilType.SILTY, SoilType.SANDY),
        soil_type_weights=(0.4, 0.3, 0.3),
        ph_range=(6.0, 8.0),  # near neutral
        nitrogen_range=(25.0, 55.0),
        phosphorus_range=(15.0, 40.0),
        potassium_range=(150.0, 250.0),
    ),
    LatitudeBand.POLAR: BandProfile(
        soil_types=(SoilType.SANDY, SoilType.SILTY),
        soil_type_weights=(0.5, 0.5),
        ph_range=(5.0, 6.5),  # more acidic
        nitrogen_range=(10.0, 25.0),
        phosphorus_range=(8.0, 20.0),
        potassium_range=(80.0, 140.0),
    ),
}

RAINFALL_NITROGEN_BASE = 0.8
RAINFALL_NITROGEN_SLOPE = 0.4
RAINFALL_NORMALISER_MM = 1000.0
LONGITUDE_PH_AMPLITUDE = 0.2
LONGITUDE_PHOSPHORUS_FACTOR = 5.0


def rainfall_nitrogen_factor(avg_annual_rainfall_mm: float) -> float:
    """Multiplier applied to base nitrogen; more rain, more nitrogen."""
    return RAINFALL_NITROGEN_BASE + RAINFALL_NITROGEN_SLOPE * (
        avg_annual_rainfall_mm / RAINFALL_NORMALISER_MM
    )


def longitude_variation(longitude: float) -> float:
    """Smooth perturbation so neighbouring longitudes differ slightly."""
    return math.sin(math.radians(longitude)) * LONGITUDE_PH_AMPLITUDE


class SoilModel(ABC):
    """Strategy for estimating soil composition at a point."""

    @abstractmethod
    def derive(
        self,
        latitude: float,
        longitude: float,
        weather: WeatherSummary,
    ) -> SoilSummary:
        """Estimate soil metrics for a coordinate and its climate."""


class HeuristicSoilModel(SoilModel):
    """
    Band-based soil estimate.

    Deterministic per location: the generator is seeded from the rounded
    coordinates, so only the rainfall adjustment depends on the weather.
    """

    def __init__(self, profiles: Optional[dict] = None):
        self.profiles = profiles or BAND_PROFILES

    @staticmethod
    def _rng_for(latitude: float, longitude: float) -> np.random.Generator:
        lat_key = int(round((latitude + 90.0) * 10 ** SEED_PRECISION))
        lon_key = int(round((longitude + 180.0) * 10 ** SEED_PRECISION))
        return np.random.default_rng([abs(lat_key), abs(lon_key)])

    def derive(
        self,
        latitude: float,
        longitude: float,
        weather: WeatherSummary,
    ) -> SoilSummary:
        """
        Estimate soil metrics.

        Args:
            latitude: Latitude in degrees
            longitude: Longitude in degrees
            weather: Weather summary (only average annual rainfall is used)

        Returns:
            SoilSummary rounded to 2 decimals

        Raises:
            ValueError: If a coordinate is not finite
        """
        if not math.isfinite(longitude):
            raise ValueError(f"Longitude must be finite, got {longitude}")
        band = latitude_band(latitude)
        profile = self.profiles[band]
        rng = self._rng_for(latitude, longitude)

        soil_type = profile.soil_types[
            rng.choice(len(profile.soil_types), p=profile.soil_type_weights)
        ]
        ph = rng.uniform(*profile.ph_range)
        nitrogen = rng.uniform(*profile.nitrogen_range)
        phosphorus = rng.uniform(*profile.phosphorus_range)
        potassium = rng.uniform(*profile.potassium_range)

        nitrogen *= rainfall_nitrogen_factor(weather.avg_annual_rainfall_mm)

        variation = longitude_variation(longitude)
        ph += variation
        phosphorus += variation * LONGITUDE_PHOSPHORUS_FACTOR

        summary = SoilSummary(
            ph=round_2dp(float(ph)),
            nitrogen_mg_kg=round_2dp(float(nitrogen)),
            phosphorus_mg_kg=round_2dp(float(phosphorus)),
            potassium_mg_kg=round_2dp(float(potassium)),
            soil_type=soil_type,
        )
        logger.debug(f"Derived {band.value} soil for ({latitude:.4f}, {longitude:.4f}): {summary}")
        return summary
