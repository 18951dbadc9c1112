"""
Application service: orchestration of the geocode -> weather -> soil pipeline.
"""
import logging
from enum import Enum
from typing import AsyncIterator

from agroenv.domain.models import EnvironmentalRecord, GeoResult, WeatherSummary
from agroenv.infrastructure.external_api_client import ExternalAPIError
from agroenv.infrastructure.geocoder_client import GeocoderClient
from agroenv.services.domain.soil_model import SoilModel
from agroenv.services.domain.weather_aggregator import WeatherAggregator
from agroenv.streaming.events import (
    EventType,
    SOIL_METRICS,
    StreamEvent,
    WEATHER_METRICS,
)

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """Stages of one analysis run."""
    IDLE = "idle"
    GEOCODING = "geocoding"
    WEATHER_FETCHING = "weather"
    SOIL_DERIVING = "soil"
    COMPLETE = "complete"
    ERROR = "error"


STAGE_MESSAGES = {
    PipelineStage.GEOCODING: "Finding location coordinates...",
    PipelineStage.WEATHER_FETCHING: "Fetching 5-year weather history...",
    PipelineStage.SOIL_DERIVING: "Analyzing soil composition...",
}

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while processing the request"


class EnvironmentalDataService:
    """
    Application service for location analysis.

    Sequences the three stages and reports results either as a stream of
    per-metric events or as one aggregate record. Holds no per-request state,
    so a single instance can serve concurrent requests.
    """

    def __init__(
        self,
        geocoder: GeocoderClient,
        weather_aggregator: WeatherAggregator,
        soil_model: SoilModel,
    ):
        """
        Initialize the service with dependencies.

        Args:
            geocoder: Place-name geocoding client
            weather_aggregator: Weather history fetcher and reducer
            soil_model: Soil estimation strategy
        """
        self.geocoder = geocoder
        self.weather_aggregator = weather_aggregator
        self.soil_model = soil_model

    async def stream_events(self, location: str) -> AsyncIterator[StreamEvent]:
        """
        Run the pipeline, yielding events as each result becomes known.

        A successful run yields three status events, one coordinates event,
        four weather events, five soil events and a final complete event.
        A failure yields a single error event and ends the stream.

        Args:
            location: Place name to analyse
        """
        stage = PipelineStage.IDLE
        logger.info(f"Starting analysis stream for '{location}'")

        try:
            stage = PipelineStage.GEOCODING
            yield StreamEvent.status(stage.value, STAGE_MESSAGES[stage])
            geo = await self.geocoder.geocode(location)
            logger.info(f"Coordinates found: {geo.latitude}, {geo.longitude}")
            yield StreamEvent.coordinates(geo, location)

            stage = PipelineStage.WEATHER_FETCHING
            yield StreamEvent.status(stage.value, STAGE_MESSAGES[stage])
            weather = await self.weather_aggregator.summarize(geo.latitude, geo.longitude)
            for definition in WEATHER_METRICS:
                yield StreamEvent.metric(EventType.WEATHER, definition, getattr(weather, definition.field))

            stage = PipelineStage.SOIL_DERIVING
            yield StreamEvent.status(stage.value, STAGE_MESSAGES[stage])
            soil = self.soil_model.derive(geo.latitude, geo.longitude, weather)
            for definition in SOIL_METRICS:
                yield StreamEvent.metric(EventType.SOIL, definition, getattr(soil, definition.field))

        except ExternalAPIError as e:
            failed_stage, stage = stage, PipelineStage.ERROR
            logger.warning(
                f"Analysis for '{location}' failed during {failed_stage.value}, "
                f"entering {stage.value}: {e.message}"
            )
            yield StreamEvent.error(e.message, e.kind)
            return
        except Exception as e:
            failed_stage, stage = stage, PipelineStage.ERROR
            logger.exception(
                f"Unhandled exception during {failed_stage.value} for '{location}', "
                f"entering {stage.value}: {str(e)}"
            )
            yield StreamEvent.error(UNEXPECTED_ERROR_MESSAGE, "internal_error")
            return

        stage = PipelineStage.COMPLETE
        logger.info(f"Analysis stream for '{location}' reached {stage.value}")
        yield StreamEvent.complete()

    async def fetch_record(self, location: str) -> EnvironmentalRecord:
        """
        Run the pipeline and return the aggregate record in one piece.

        Raises:
            LocationNotFound: The place could not be geocoded
            WeatherFetchFailed: The weather archive failed
            MalformedUpstreamResponse: An upstream answered with an unexpected shape
        """
        geo: GeoResult = await self.geocoder.geocode(location)
        weather: WeatherSummary = await self.weather_aggregator.summarize(
            geo.latitude, geo.longitude
        )
        soil = self.soil_model.derive(geo.latitude, geo.longitude, weather)
        return EnvironmentalRecord(
            location=geo.display_name or location,
            coordinates=geo,
            weather=weather,
            soil=soil,
        )
