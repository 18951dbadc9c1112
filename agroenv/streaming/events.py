"""
Stream event types and payloads exchanged between the analysis endpoint
and its consumers.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from agroenv.domain.models import GeoResult


class EventType(str, Enum):
    """Named SSE event types."""
    STATUS = "status"
    COORDINATES = "coordinates"
    WEATHER = "weather"
    SOIL = "soil"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class MetricSpec:
    """How one scalar metric is labelled on the wire and stored in the record."""
    metric: str
    field: str
    label: str
    unit: Optional[str] = None


# Emission order matters: weather fields are streamed in this order
WEATHER_METRICS = (
    MetricSpec("temperature", "avg_temperature_c", "Average Temperature", "°C"),
    MetricSpec("humidity", "avg_humidity_pct", "Average Humidity", "%"),
    MetricSpec("prevRainfall", "prev_year_rainfall_mm", "Previous Year Rainfall", "mm"),
    MetricSpec("avgRainfall", "avg_annual_rainfall_mm", "Average Annual Rainfall", "mm"),
)

SOIL_METRICS = (
    MetricSpec("type", "soil_type", "Soil Type"),
    MetricSpec("ph", "ph", "pH Level"),
    MetricSpec("nitrogen", "nitrogen_mg_kg", "Nitrogen (N)", "mg/kg"),
    MetricSpec("phosphorus", "phosphorus_mg_kg", "Phosphorus (P)", "mg/kg"),
    MetricSpec("potassium", "potassium_mg_kg", "Potassium (K)", "mg/kg"),
)

WEATHER_METRICS_BY_TAG = {m.metric: m for m in WEATHER_METRICS}
SOIL_METRICS_BY_TAG = {m.metric: m for m in SOIL_METRICS}


class StatusPayload(BaseModel):
    stage: Literal["geocoding", "weather", "soil"]
    message: str


class CoordinatesPayload(BaseModel):
    """Resolved location; ``location`` carries the display name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    latitude: float
    longitude: float
    location: str
    display_name: Optional[str] = None
    bounding_box: Optional[list[float]] = None
    polygon: Optional[dict] = None

    @classmethod
    def from_geo_result(cls, geo: GeoResult, query: str) -> "CoordinatesPayload":
        return cls(
            latitude=geo.latitude,
            longitude=geo.longitude,
            location=geo.display_name or query,
            display_name=geo.display_name or None,
            bounding_box=geo.bounding_box,
            polygon=geo.polygon,
        )

    def to_geo_result(self) -> GeoResult:
        return GeoResult(
            latitude=self.latitude,
            longitude=self.longitude,
            display_name=self.display_name or self.location,
            bounding_box=self.bounding_box,
            polygon=self.polygon,
        )


class MetricPayload(BaseModel):
    metric: str
    value: Union[float, str]
    label: str = ""
    unit: Optional[str] = None


class CompletePayload(BaseModel):
    message: str = "Analysis complete"
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class ErrorPayload(BaseModel):
    error: str
    kind: Optional[str] = None


@dataclass(frozen=True)
class StreamEvent:
    """One framed event: its type name and JSON-ready data."""
    event: str
    data: dict = field(default_factory=dict)

    @classmethod
    def of(cls, event_type: EventType, payload: BaseModel) -> "StreamEvent":
        return cls(
            event=event_type.value,
            data=payload.model_dump(mode="json", by_alias=True, exclude_none=True),
        )

    @classmethod
    def status(cls, stage: str, message: str) -> "StreamEvent":
        return cls.of(EventType.STATUS, StatusPayload(stage=stage, message=message))

    @classmethod
    def coordinates(cls, geo: GeoResult, query: str) -> "StreamEvent":
        return cls.of(EventType.COORDINATES, CoordinatesPayload.from_geo_result(geo, query))

    @classmethod
    def metric(cls, event_type: EventType, definition: MetricSpec, value) -> "StreamEvent":
        if isinstance(value, Enum):
            value = value.value
        return cls.of(
            event_type,
            MetricPayload(metric=definition.metric, value=value, label=definition.label, unit=definition.unit),
        )

    @classmethod
    def complete(cls) -> "StreamEvent":
        return cls.of(EventType.COMPLETE, CompletePayload())

    @classmethod
    def error(cls, message: str, kind: Optional[str] = None) -> "StreamEvent":
        return cls.of(EventType.ERROR, ErrorPayload(error=message, kind=kind))
