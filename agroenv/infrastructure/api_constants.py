"""
API endpoint constants and configuration.

This module contains all external API endpoint paths and related constants.
Centralizing these values makes it easy to swap out endpoints or update API versions.
"""

# Nominatim (OpenStreetMap) geocoding endpoints
class GeocoderEndpoints:
    """Geocoding service endpoint paths."""

    SEARCH = "/search"

    # Geometry types accepted as a place boundary
    BOUNDARY_GEOMETRY_TYPES = ("Polygon", "MultiPolygon")

    @classmethod
    def search_params(cls, query: str, include_boundary: bool = True) -> dict:
        """
        Build query parameters for a single-result place search.

        Args:
            query: Free-text place name
            include_boundary: Whether to ask for the GeoJSON boundary

        Returns:
            Query parameter mapping
        """
        params = {"q": query, "format": "json", "limit": 1}
        if include_boundary:
            params["polygon_geojson"] = 1
        return params


# Open-Meteo historical weather endpoints
class WeatherArchiveEndpoints:
    """Weather archive endpoint paths."""

    ARCHIVE = "/v1/archive"

    # Daily variables requested from the archive
    PRECIPITATION_SUM = "precipitation_sum"
    TEMPERATURE_MEAN = "temperature_2m_mean"
    HUMIDITY_MEAN = "relative_humidity_2m_mean"
    DAILY_VARIABLES = (PRECIPITATION_SUM, TEMPERATURE_MEAN, HUMIDITY_MEAN)

    DATE_FORMAT = "%Y-%m-%d"


# API Configuration Constants
class APIConstants:
    """General API configuration constants."""

    # HTTP Headers
    CONTENT_TYPE_EVENT_STREAM = "text/event-stream"

    # Headers sent with every Server-Sent Events response
    SSE_HEADERS = {
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no",
    }
