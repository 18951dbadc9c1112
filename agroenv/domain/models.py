"""
Domain models for location, weather and soil data.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, HTTP, streaming).
Field names are snake_case in Python and camelCase on the wire.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model serialised with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SoilType(str, Enum):
    """Dominant soil texture class."""
    CLAY = "Clay"
    LOAMY = "Loamy"
    SILTY = "Silty"
    SANDY = "Sandy"


class GeoResult(WireModel):
    """A resolved place. Immutable once produced by the geocoder."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    latitude: float
    longitude: float
    display_name: str = ""
    bounding_box: Optional[List[float]] = Field(
        default=None,
        description="[south, north, west, east] in degrees"
    )
    polygon: Optional[dict] = Field(
        default=None,
        description="GeoJSON boundary geometry of the place"
    )


class DailyWeatherSeries(BaseModel):
    """Raw daily series returned by the weather archive."""
    time: List[str] = Field(default_factory=list)
    precipitation_sum: List[Optional[float]] = Field(default_factory=list)
    temperature_2m_mean: List[Optional[float]] = Field(default_factory=list)
    relative_humidity_2m_mean: List[Optional[float]] = Field(default_factory=list)


class WeatherSummary(WireModel):
    """Scalar weather summaries over the history window."""
    avg_temperature_c: float = Field(default=0.0, description="Mean daily temperature in °C")
    avg_humidity_pct: float = Field(default=0.0, description="Mean relative humidity in %")
    prev_year_rainfall_mm: float = Field(default=0.0, description="Rainfall over the last 365 valid days")
    avg_annual_rainfall_mm: float = Field(default=0.0, description="Window rainfall total divided by window years")


class SoilSummary(WireModel):
    """Soil pH, macro-nutrients and texture class."""
    ph: float = 0.0
    nitrogen_mg_kg: float = 0.0
    phosphorus_mg_kg: float = 0.0
    potassium_mg_kg: float = 0.0
    soil_type: Optional[SoilType] = None


class EnvironmentalRecord(WireModel):
    """
    Aggregate assembled for one search.

    Starts as an all-placeholder record and is filled in field by field.
    """
    location: str
    coordinates: GeoResult
    weather: WeatherSummary = Field(default_factory=WeatherSummary)
    soil: SoilSummary = Field(default_factory=SoilSummary)

    @classmethod
    def placeholder(cls, location: str) -> "EnvironmentalRecord":
        """Create the empty record shown while a search is in progress."""
        return cls(
            location=location,
            coordinates=GeoResult(latitude=0.0, longitude=0.0),
        )
