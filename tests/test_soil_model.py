"""
Unit tests for the heuristic soil model.

Tests cover:
- Latitude band partition
- Per-band value ranges and soil types
- Rainfall and longitude adjustments
- Determinism per location
"""
import math
import pytest
import numpy as np

from agroenv.domain.models import SoilType, WeatherSummary
from agroenv.services.domain.soil_model import (
    BAND_PROFILES,
    HeuristicSoilModel,
    LatitudeBand,
    SoilModel,
    latitude_band,
    longitude_variation,
    rainfall_nitrogen_factor,
)


def weather_with_rainfall(rainfall_mm: float) -> WeatherSummary:
    return WeatherSummary(avg_annual_rainfall_mm=rainfall_mm)


# ============================================================
# Latitude Band Tests
# ============================================================

class TestLatitudeBand:
    """Tests for latitude classification."""

    @pytest.mark.parametrize("latitude,expected", [
        (0.0, LatitudeBand.TROPICAL),
        (22.999, LatitudeBand.TROPICAL),
        (-22.999, LatitudeBand.TROPICAL),
        (23.0, LatitudeBand.TEMPERATE),
        (-23.0, LatitudeBand.TEMPERATE),
        (49.999, LatitudeBand.TEMPERATE),
        (50.0, LatitudeBand.POLAR),
        (-90.0, LatitudeBand.POLAR),
    ])
    def test_band_boundaries(self, latitude, expected):
        """Band edges should follow |lat| < 23, < 50, otherwise polar."""
        assert latitude_band(latitude) == expected

    def test_partition_is_total(self):
        """Every latitude on a fine grid should map to exactly one band."""
        for latitude in np.linspace(-90, 90, 3601):
            band = latitude_band(float(latitude))
            abs_lat = abs(latitude)
            matches = [
                abs_lat < 23,
                23 <= abs_lat < 50,
                abs_lat >= 50,
            ]
            assert sum(matches) == 1
            assert band == [LatitudeBand.TROPICAL, LatitudeBand.TEMPERATE, LatitudeBand.POLAR][matches.index(True)]

    @pytest.mark.parametrize("latitude", [math.nan, math.inf, -math.inf])
    def test_non_finite_latitude_rejected(self, latitude):
        """Non-finite latitudes should raise ValueError."""
        with pytest.raises(ValueError):
            latitude_band(latitude)


# ============================================================
# Heuristic Model Tests
# ============================================================

class TestHeuristicSoilModel:
    """Tests for soil derivation."""

    @pytest.fixture
    def model(self) -> HeuristicSoilModel:
        return HeuristicSoilModel()

    def test_is_a_soil_model(self, model):
        """HeuristicSoilModel should implement the SoilModel strategy."""
        assert isinstance(model, SoilModel)

    def test_default_profiles(self):
        """Omitting profiles should fall back to the built-in band table."""
        assert HeuristicSoilModel(profiles=None).profiles is BAND_PROFILES

    @pytest.mark.parametrize("latitude,band", [
        (19.07, LatitudeBand.TROPICAL),
        (-8.5, LatitudeBand.TROPICAL),
        (28.61, LatitudeBand.TEMPERATE),
        (-34.6, LatitudeBand.TEMPERATE),
        (60.17, LatitudeBand.POLAR),
    ])
    def test_values_within_band_ranges(self, model, latitude, band):
        """Values should fall within the band ranges after adjustments."""
        profile = BAND_PROFILES[band]
        rainfall = 1000.0  # nitrogen multiplier of exactly 1.2

        for longitude in (-120.0, 0.0, 45.5, 72.87, 179.9):
            soil = model.derive(latitude, longitude, weather_with_rainfall(rainfall))
            variation = longitude_variation(longitude)

            assert soil.soil_type in profile.soil_types
            assert profile.ph_range[0] + variation - 0.01 <= soil.ph <= profile.ph_range[1] + variation + 0.01
            assert profile.nitrogen_range[0] * 1.2 - 0.01 <= soil.nitrogen_mg_kg <= profile.nitrogen_range[1] * 1.2 + 0.01
            assert (
                profile.phosphorus_range[0] + variation * 5 - 0.01
                <= soil.phosphorus_mg_kg
                <= profile.phosphorus_range[1] + variation * 5 + 0.01
            )
            assert profile.potassium_range[0] - 0.01 <= soil.potassium_mg_kg <= profile.potassium_range[1] + 0.01

    def test_tropical_soil_types(self, model):
        """Tropical locations should only produce Clay or Loamy soils."""
        types = {
            model.derive(10.0 + i * 0.1, 75.0 + i * 0.1, weather_with_rainfall(800)).soil_type
            for i in range(50)
        }

        assert types <= {SoilType.CLAY, SoilType.LOAMY}

    def test_same_location_is_deterministic(self, model):
        """Repeated derivations for one place should be identical."""
        weather = weather_with_rainfall(1200)

        first = model.derive(19.07, 72.87, weather)
        second = HeuristicSoilModel().derive(19.07, 72.87, weather)

        assert first == second

    def test_nitrogen_increases_with_rainfall(self, model):
        """Nitrogen should strictly increase with average annual rainfall."""
        nitrogen = [
            model.derive(19.07, 72.87, weather_with_rainfall(rainfall)).nitrogen_mg_kg
            for rainfall in (0, 250, 500, 1000, 2000, 4000)
        ]

        assert all(a < b for a, b in zip(nitrogen, nitrogen[1:]))

    def test_rainfall_only_affects_nitrogen(self, model):
        """pH, P, K and soil type should not depend on rainfall."""
        dry = model.derive(28.61, 77.20, weather_with_rainfall(100))
        wet = model.derive(28.61, 77.20, weather_with_rainfall(3000))

        assert dry.ph == wet.ph
        assert dry.phosphorus_mg_kg == wet.phosphorus_mg_kg
        assert dry.potassium_mg_kg == wet.potassium_mg_kg
        assert dry.soil_type == wet.soil_type

    def test_outputs_rounded_to_two_decimals(self, model):
        """All numeric outputs should have at most two decimals."""
        soil = model.derive(45.0, 7.5, weather_with_rainfall(987.65))

        for value in (soil.ph, soil.nitrogen_mg_kg, soil.phosphorus_mg_kg, soil.potassium_mg_kg):
            assert round(value, 2) == value

    def test_non_finite_longitude_rejected(self, model):
        """Non-finite longitudes should raise ValueError."""
        with pytest.raises(ValueError):
            model.derive(10.0, math.nan, weather_with_rainfall(1000))


# ============================================================
# Adjustment Helper Tests
# ============================================================

class TestAdjustments:
    """Tests for the rainfall and longitude terms."""

    def test_rainfall_factor(self):
        """Factor should be 0.8 + 0.4 * rainfall / 1000."""
        assert rainfall_nitrogen_factor(0) == pytest.approx(0.8)
        assert rainfall_nitrogen_factor(1000) == pytest.approx(1.2)
        assert rainfall_nitrogen_factor(2500) == pytest.approx(1.8)

    def test_longitude_variation(self):
        """Variation should be sin(longitude) * 0.2."""
        assert longitude_variation(0) == pytest.approx(0.0)
        assert longitude_variation(90) == pytest.approx(0.2)
        assert longitude_variation(-90) == pytest.approx(-0.2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
