"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample geocoder and weather archive payloads
- Sample domain objects
- Mock collaborators for the environmental service
- FastAPI test client
"""
import pytest
from datetime import date, timedelta
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from agroenv.main import app
from agroenv.api.rate_limit import limiter
from agroenv.domain.models import (
    DailyWeatherSeries,
    GeoResult,
    SoilSummary,
    SoilType,
    WeatherSummary,
)
from agroenv.infrastructure.geocoder_client import GeocoderClient
from agroenv.services.application.environmental_service import EnvironmentalDataService
from agroenv.services.domain.soil_model import HeuristicSoilModel
from agroenv.services.domain.weather_aggregator import WeatherAggregator


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def nominatim_mumbai() -> list[dict]:
    """Single Nominatim search hit with a square boundary."""
    return [{
        "lat": "19.0760",
        "lon": "72.8777",
        "display_name": "Mumbai, Maharashtra, India",
        "boundingbox": ["18.8928", "19.2705", "72.7758", "72.9866"],
        "geojson": {
            "type": "Polygon",
            "coordinates": [[
                [72.78, 18.90], [72.98, 18.90], [72.98, 19.27],
                [72.78, 19.27], [72.78, 18.90],
            ]],
        },
    }]


@pytest.fixture
def daily_archive_payload() -> dict:
    """Open-Meteo archive body with two years of simple daily values."""
    start = date(2022, 1, 1)
    days = 730
    return {
        "latitude": 19.07,
        "longitude": 72.87,
        "daily": {
            "time": [(start + timedelta(days=i)).isoformat() for i in range(days)],
            "precipitation_sum": [1.0] * 365 + [2.0] * 365,
            "temperature_2m_mean": [25.0] * (days - 1) + [None],
            "relative_humidity_2m_mean": [70.0] * days,
        },
    }


@pytest.fixture
def sample_geo_result() -> GeoResult:
    """Resolved location for Mumbai."""
    return GeoResult(
        latitude=19.07,
        longitude=72.87,
        display_name="Mumbai",
        bounding_box=[18.89, 19.27, 72.77, 72.98],
    )


@pytest.fixture
def sample_weather() -> WeatherSummary:
    """Weather summary for Mumbai."""
    return WeatherSummary(
        avg_temperature_c=25.3,
        avg_humidity_pct=68.0,
        prev_year_rainfall_mm=1800.0,
        avg_annual_rainfall_mm=2200.0,
    )


@pytest.fixture
def sample_soil() -> SoilSummary:
    """Soil summary for Mumbai."""
    return SoilSummary(
        ph=6.1,
        nitrogen_mg_kg=22.0,
        phosphorus_mg_kg=14.0,
        potassium_mg_kg=140.0,
        soil_type=SoilType.CLAY,
    )


@pytest.fixture
def sample_series() -> DailyWeatherSeries:
    """Short daily series with missing samples."""
    return DailyWeatherSeries(
        time=["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"],
        precipitation_sum=[10.0, None, 5.0, 2.5],
        temperature_2m_mean=[20.0, 22.0, None, 24.0],
        relative_humidity_2m_mean=[None, 60.0, 70.0, 80.0],
    )


# ============================================================
# Mock Collaborator Fixtures
# ============================================================

@pytest.fixture
def mock_geocoder(sample_geo_result):
    """Create a mock geocoding client."""
    mock_client = AsyncMock(spec=GeocoderClient)
    mock_client.geocode.return_value = sample_geo_result
    return mock_client


@pytest.fixture
def mock_weather_aggregator(sample_weather):
    """Create a mock weather aggregator."""
    mock_aggregator = AsyncMock(spec=WeatherAggregator)
    mock_aggregator.summarize.return_value = sample_weather
    return mock_aggregator


@pytest.fixture
def environmental_service(mock_geocoder, mock_weather_aggregator):
    """Environmental service wired to mocked upstreams and the real soil model."""
    return EnvironmentalDataService(
        geocoder=mock_geocoder,
        weather_aggregator=mock_weather_aggregator,
        soil_model=HeuristicSoilModel(),
    )


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    limiter.reset()
    return TestClient(app)
