"""
Unit tests for weather summarisation.

Tests cover:
- Null filtering and means
- Rainfall windows (last 365 samples, total / 5)
- Empty and all-null series
- History window computation
- Aggregator error mapping
"""
from datetime import date
from unittest.mock import AsyncMock
import pytest

from agroenv.domain.models import DailyWeatherSeries, WeatherSummary
from agroenv.infrastructure.external_api_client import (
    MalformedUpstreamResponse,
    TransportFailure,
    WeatherFetchFailed,
)
from agroenv.infrastructure.weather_archive_client import WeatherArchiveClient
from agroenv.services.domain.weather_aggregator import (
    WeatherAggregator,
    history_window,
    summarize_daily_series,
)
from agroenv.utils.numeric import round_2dp


# ============================================================
# Summary Tests
# ============================================================

class TestSummarizeDailySeries:
    """Tests for the pure reduction of a daily series."""

    def test_means_ignore_null_samples(self, sample_series):
        """Temperature and humidity should be means of non-null samples."""
        summary = summarize_daily_series(sample_series)

        assert summary.avg_temperature_c == 22.0
        assert summary.avg_humidity_pct == 70.0

    def test_rainfall_totals_ignore_null_samples(self, sample_series):
        """Rainfall sums should skip nulls; annual average divides by 5."""
        summary = summarize_daily_series(sample_series)

        assert summary.prev_year_rainfall_mm == 17.5
        assert summary.avg_annual_rainfall_mm == 3.5

    def test_all_null_series_yield_zero(self):
        """All-null inputs should produce 0 rather than NaN or an error."""
        series = DailyWeatherSeries(
            precipitation_sum=[None, None],
            temperature_2m_mean=[None, None],
            relative_humidity_2m_mean=[None],
        )

        summary = summarize_daily_series(series)

        assert summary == WeatherSummary()

    def test_empty_series_yield_zero(self):
        """Empty inputs should produce an all-zero summary."""
        summary = summarize_daily_series(DailyWeatherSeries())

        assert summary.avg_temperature_c == 0
        assert summary.avg_humidity_pct == 0
        assert summary.prev_year_rainfall_mm == 0
        assert summary.avg_annual_rainfall_mm == 0

    def test_previous_year_uses_last_365_valid_samples(self):
        """Only the most recent 365 valid samples count as previous year."""
        series = DailyWeatherSeries(precipitation_sum=[1.0] * 400 + [None] * 10 + [2.0] * 300)

        summary = summarize_daily_series(series)

        # 300 samples of 2.0 plus the last 65 samples of 1.0
        assert summary.prev_year_rainfall_mm == 665.0

    def test_short_series_previous_year_sums_everything(self):
        """Fewer than 365 samples should all count toward previous year."""
        series = DailyWeatherSeries(precipitation_sum=[3.0] * 100)

        summary = summarize_daily_series(series)

        assert summary.prev_year_rainfall_mm == 300.0

    def test_annual_average_divides_by_five_regardless_of_length(self):
        """Average annual rainfall is total / 5 even with two years of data."""
        series = DailyWeatherSeries(precipitation_sum=[1.0] * 365 + [2.0] * 365)

        summary = summarize_daily_series(series)

        assert summary.avg_annual_rainfall_mm == 219.0
        assert summary.prev_year_rainfall_mm == 730.0

    def test_outputs_rounded_to_two_decimals(self):
        """Every output should be rounded to 2 decimal places."""
        series = DailyWeatherSeries(
            temperature_2m_mean=[20.0, 21.0, 21.0],
            relative_humidity_2m_mean=[1.0, 2.0, 2.0],
            precipitation_sum=[0.111, 0.222],
        )

        summary = summarize_daily_series(series)

        assert summary.avg_temperature_c == 20.67
        assert summary.avg_humidity_pct == 1.67
        assert summary.prev_year_rainfall_mm == 0.33
        assert summary.avg_annual_rainfall_mm == 0.07

    def test_exact_halves_round_up(self):
        """Values exactly halfway between hundredths should round up."""
        series = DailyWeatherSeries(
            temperature_2m_mean=[20.0, 20.25],
            relative_humidity_2m_mean=[70.0, 70.25],
            precipitation_sum=[0.125],
        )

        summary = summarize_daily_series(series)

        assert summary.avg_temperature_c == 20.13
        assert summary.avg_humidity_pct == 70.13
        assert summary.prev_year_rainfall_mm == 0.13


class TestRound2dp:
    """Tests for the shared rounding helper."""

    @pytest.mark.parametrize("value,expected", [
        (20.125, 20.13),
        (0.125, 0.13),
        (-0.125, -0.12),
        (20.6666, 20.67),
        (1800.0, 1800.0),
    ])
    def test_ties_round_up(self, value, expected):
        """Ties should go up rather than to the even digit."""
        assert round_2dp(value) == expected


# ============================================================
# History Window Tests
# ============================================================

class TestHistoryWindow:
    """Tests for the trailing window."""

    def test_five_year_window(self):
        """Window should end today and start five years earlier."""
        start, end = history_window(date(2024, 10, 19), 5)

        assert start == date(2019, 10, 19)
        assert end == date(2024, 10, 19)

    def test_leap_day_falls_back_to_28th(self):
        """29 February should map to 28 February in a non-leap year."""
        start, _ = history_window(date(2024, 2, 29), 5)

        assert start == date(2019, 2, 28)


# ============================================================
# Aggregator Tests
# ============================================================

class TestWeatherAggregator:
    """Tests for fetching and summarising a coordinate."""

    @pytest.mark.asyncio
    async def test_summarize_requests_window_and_reduces(self, daily_archive_payload):
        """Aggregator should request the trailing window and summarise it."""
        archive = AsyncMock(spec=WeatherArchiveClient)
        archive.fetch_daily_series.return_value = DailyWeatherSeries(
            **daily_archive_payload["daily"]
        )
        aggregator = WeatherAggregator(archive, years=5, today=lambda: date(2024, 1, 15))

        summary = await aggregator.summarize(19.07, 72.87)

        archive.fetch_daily_series.assert_awaited_once_with(
            19.07, 72.87, date(2019, 1, 15), date(2024, 1, 15)
        )
        assert summary.avg_temperature_c == 25.0
        assert summary.avg_humidity_pct == 70.0
        assert summary.prev_year_rainfall_mm == 730.0
        assert summary.avg_annual_rainfall_mm == 219.0

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_weather_fetch_failed(self):
        """Archive transport failures should raise WeatherFetchFailed."""
        archive = AsyncMock(spec=WeatherArchiveClient)
        archive.fetch_daily_series.side_effect = TransportFailure(
            "API request failed: 503", upstream_status=503
        )
        aggregator = WeatherAggregator(archive)

        with pytest.raises(WeatherFetchFailed, match="Failed to fetch weather data") as exc_info:
            await aggregator.summarize(0.0, 0.0)

        assert exc_info.value.upstream_status == 503

    @pytest.mark.asyncio
    async def test_malformed_response_propagates(self):
        """Malformed archive responses should propagate unchanged."""
        archive = AsyncMock(spec=WeatherArchiveClient)
        archive.fetch_daily_series.side_effect = MalformedUpstreamResponse("no daily data")
        aggregator = WeatherAggregator(archive)

        with pytest.raises(MalformedUpstreamResponse):
            await aggregator.summarize(0.0, 0.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
