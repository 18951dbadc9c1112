"""
Dependency injection for FastAPI.
"""
from typing import Annotated
from fastapi import Depends

from agroenv.infrastructure.geocoder_client import (
    GeocoderClient,
    get_geocoder_client,
)
from agroenv.infrastructure.weather_archive_client import (
    WeatherArchiveClient,
    get_weather_archive_client,
)
from agroenv.services.application.environmental_service import EnvironmentalDataService
from agroenv.services.domain.soil_model import HeuristicSoilModel, SoilModel
from agroenv.services.domain.weather_aggregator import WeatherAggregator


def get_weather_aggregator(
    archive_client: Annotated[WeatherArchiveClient, Depends(get_weather_archive_client)],
) -> WeatherAggregator:
    """
    Dependency factory for WeatherAggregator.

    Args:
        archive_client: Weather archive client (injected)

    Returns:
        WeatherAggregator instance
    """
    return WeatherAggregator(archive_client=archive_client)


def get_soil_model() -> SoilModel:
    """
    Dependency factory for the soil estimation strategy.

    Returns:
        SoilModel instance
    """
    return HeuristicSoilModel()


def get_environmental_service(
    geocoder: Annotated[GeocoderClient, Depends(get_geocoder_client)],
    weather_aggregator: Annotated[WeatherAggregator, Depends(get_weather_aggregator)],
    soil_model: Annotated[SoilModel, Depends(get_soil_model)],
) -> EnvironmentalDataService:
    """
    Dependency factory for EnvironmentalDataService.

    Args:
        geocoder: Geocoding client (injected)
        weather_aggregator: Weather aggregator (injected)
        soil_model: Soil model (injected)

    Returns:
        EnvironmentalDataService instance
    """
    return EnvironmentalDataService(
        geocoder=geocoder,
        weather_aggregator=weather_aggregator,
        soil_model=soil_model,
    )


# Type aliases for cleaner route signatures
EnvironmentalServiceDep = Annotated[EnvironmentalDataService, Depends(get_environmental_service)]
