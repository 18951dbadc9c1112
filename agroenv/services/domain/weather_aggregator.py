"""
Domain service: reduce a multi-year daily weather series to scalar summaries.
"""
import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional, Sequence, Tuple
import numpy as np

from agroenv.config import settings
from agroenv.domain.models import DailyWeatherSeries, WeatherSummary
from agroenv.infrastructure.external_api_client import (
    TransportFailure,
    WeatherFetchFailed,
)
from agroenv.infrastructure.weather_archive_client import WeatherArchiveClient
from agroenv.utils.numeric import round_2dp

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365


def history_window(today: date, years: int) -> Tuple[date, date]:
    """
    Trailing window of whole years ending today.

    Args:
        today: Last day of the window
        years: Window length in years

    Returns:
        (start, end) dates
    """
    try:
        start = today.replace(year=today.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        start = today.replace(year=today.year - years, day=28)
    return start, today


def valid_samples(values: Sequence[Optional[float]]) -> np.ndarray:
    """Drop null samples from a daily series."""
    return np.array([v for v in values if v is not None], dtype=float)


def _mean_or_zero(samples: np.ndarray) -> float:
    return float(samples.mean()) if samples.size else 0.0


def summarize_daily_series(
    series: DailyWeatherSeries,
    years: int = 5,
) -> WeatherSummary:
    """
    Reduce a daily series to four summaries.

    Temperature and humidity are means of the non-null samples. Previous-year
    rainfall is the sum of the most recent 365 valid samples; average annual
    rainfall is the total of all valid samples divided by ``years``, whether
    or not that many years of data are present. Empty series yield 0.

    Args:
        series: Raw daily series
        years: Number of years the window was requested for

    Returns:
        WeatherSummary rounded to 2 decimals
    """
    temperature = valid_samples(series.temperature_2m_mean)
    humidity = valid_samples(series.relative_humidity_2m_mean)
    rainfall = valid_samples(series.precipitation_sum)

    prev_year_rainfall = float(rainfall[-DAYS_PER_YEAR:].sum()) if rainfall.size else 0.0
    avg_annual_rainfall = float(rainfall.sum()) / years if rainfall.size else 0.0

    return WeatherSummary(
        avg_temperature_c=round_2dp(_mean_or_zero(temperature)),
        avg_humidity_pct=round_2dp(_mean_or_zero(humidity)),
        prev_year_rainfall_mm=round_2dp(prev_year_rainfall),
        avg_annual_rainfall_mm=round_2dp(avg_annual_rainfall),
    )


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class WeatherAggregator:
    """Fetches the trailing weather window for a point and summarises it."""

    def __init__(
        self,
        archive_client: WeatherArchiveClient,
        years: Optional[int] = None,
        today: Callable[[], date] = _utc_today,
    ):
        self.archive_client = archive_client
        self.years = years or settings.weather_history_years
        self.today = today

    async def summarize(self, latitude: float, longitude: float) -> WeatherSummary:
        """
        Fetch and summarise the weather history for a coordinate.

        Raises:
            WeatherFetchFailed: The archive answered non-2xx or was unreachable
            MalformedUpstreamResponse: The archive body had an unexpected shape
        """
        start, end = history_window(self.today(), self.years)
        logger.info(f"Fetching daily weather {start}..{end} for ({latitude:.4f}, {longitude:.4f})")

        try:
            series = await self.archive_client.fetch_daily_series(
                latitude, longitude, start, end
            )
        except TransportFailure as e:
            logger.error(f"Weather archive request failed: {e.message}")
            raise WeatherFetchFailed(
                "Failed to fetch weather data",
                upstream_status=e.upstream_status,
            )

        summary = summarize_daily_series(series, self.years)
        logger.info(
            f"Weather summary from {len(series.time)} days: "
            f"temp={summary.avg_temperature_c}, humidity={summary.avg_humidity_pct}, "
            f"rain_prev={summary.prev_year_rainfall_mm}, rain_avg={summary.avg_annual_rainfall_mm}"
        )
        return summary
