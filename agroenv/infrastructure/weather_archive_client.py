"""
Infrastructure layer: historical daily weather client (Open-Meteo archive).
"""
from datetime import date
from typing import Optional
from pydantic import ValidationError

from agroenv.config import settings
from agroenv.domain.models import DailyWeatherSeries
from agroenv.infrastructure.api_constants import WeatherArchiveEndpoints
from agroenv.infrastructure.external_api_client import (
    ExternalAPIClient,
    MalformedUpstreamResponse,
)


class WeatherArchiveClient(ExternalAPIClient):
    """Client for the daily weather archive, keyed by coordinate and date range."""

    def __init__(self, base_url: Optional[str] = None):
        super().__init__(base_url=base_url or settings.weather_archive_base_url)

    async def fetch_daily_series(
        self,
        latitude: float,
        longitude: float,
        start: date,
        end: date,
    ) -> DailyWeatherSeries:
        """
        Fetch precipitation, mean temperature and mean humidity per day.

        Args:
            latitude: Latitude in degrees
            longitude: Longitude in degrees
            start: First day of the window (inclusive)
            end: Last day of the window (inclusive)

        Returns:
            DailyWeatherSeries with one entry per day (entries may be null)

        Raises:
            TransportFailure: Non-2xx response or connection failure
            MalformedUpstreamResponse: Response has no daily block
        """
        data = await self._make_request(
            "GET",
            WeatherArchiveEndpoints.ARCHIVE,
            params={
                "latitude": latitude,
                "longitude": longitude,
                "start_date": start.strftime(WeatherArchiveEndpoints.DATE_FORMAT),
                "end_date": end.strftime(WeatherArchiveEndpoints.DATE_FORMAT),
                "daily": ",".join(WeatherArchiveEndpoints.DAILY_VARIABLES),
                "timezone": "auto",
            },
        )

        daily = data.get("daily") if isinstance(data, dict) else None
        if not isinstance(daily, dict):
            raise MalformedUpstreamResponse("Weather archive response has no daily data")

        try:
            return DailyWeatherSeries(**daily)
        except ValidationError:
            raise MalformedUpstreamResponse("Weather archive returned malformed daily data")


# Singleton instance
_weather_client: Optional[WeatherArchiveClient] = None


def get_weather_archive_client() -> WeatherArchiveClient:
    """
    Get or create the singleton weather archive client instance.

    Returns:
        WeatherArchiveClient instance
    """
    global _weather_client
    if _weather_client is None:
        _weather_client = WeatherArchiveClient()
    return _weather_client


async def close_weather_archive_client():
    """Close the singleton weather archive client, if any, so the next call creates a fresh one."""
    global _weather_client
    if _weather_client is not None:
        await _weather_client.close()
        _weather_client = None
