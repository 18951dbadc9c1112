"""
Infrastructure layer: place-name geocoding client (Nominatim).
"""
import logging
from typing import List, Optional
from pydantic import BaseModel, ValidationError

from agroenv.config import settings
from agroenv.domain.models import GeoResult
from agroenv.infrastructure.api_constants import GeocoderEndpoints
from agroenv.infrastructure.external_api_client import (
    ExternalAPIClient,
    LocationNotFound,
    MalformedUpstreamResponse,
    TransportFailure,
)
from agroenv.utils.geometry import (
    bounding_box_of,
    load_boundary,
    parse_bounding_box,
    simplify_boundary,
)

logger = logging.getLogger(__name__)


class PlaceCandidate(BaseModel):
    """Single search hit from the geocoder."""
    lat: float
    lon: float
    display_name: str = ""
    boundingbox: Optional[List[str]] = None
    geojson: Optional[dict] = None


class GeocoderClient(ExternalAPIClient):
    """
    Resolves free-text place names to coordinates.

    A single round trip per query; the first candidate wins.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        include_boundary: Optional[bool] = None,
        simplify_tolerance: Optional[float] = None,
    ):
        super().__init__(
            base_url=base_url or settings.geocoder_base_url,
            headers={"User-Agent": user_agent or settings.geocoder_user_agent},
        )
        self.include_boundary = (
            settings.geocoder_include_boundary
            if include_boundary is None else include_boundary
        )
        self.simplify_tolerance = (
            settings.boundary_simplify_tolerance
            if simplify_tolerance is None else simplify_tolerance
        )

    async def geocode(self, query: str) -> GeoResult:
        """
        Resolve a place name.

        Args:
            query: Non-empty place name

        Returns:
            GeoResult for the first match

        Raises:
            LocationNotFound: Upstream returned non-2xx or no candidates
            TransportFailure: Upstream could not be reached
            MalformedUpstreamResponse: Unexpected response shape
        """
        not_found = f"Could not find coordinates for {query}"
        try:
            data = await self._make_request(
                "GET",
                GeocoderEndpoints.SEARCH,
                params=GeocoderEndpoints.search_params(query, self.include_boundary),
            )
        except TransportFailure as e:
            if e.upstream_status is None:
                raise
            logger.warning(f"Geocoding failed for '{query}': {e.upstream_status}")
            raise LocationNotFound(not_found)

        if not isinstance(data, list):
            raise MalformedUpstreamResponse("Geocoder returned an unexpected payload")
        if not data:
            logger.info(f"No geocoding candidates for '{query}'")
            raise LocationNotFound(not_found)

        try:
            candidate = PlaceCandidate(**data[0])
        except (ValidationError, TypeError):
            raise MalformedUpstreamResponse("Geocoder returned an unexpected candidate")

        return self._to_geo_result(candidate)

    def _to_geo_result(self, candidate: PlaceCandidate) -> GeoResult:
        """Convert a raw candidate into a GeoResult with a normalised boundary."""
        bounding_box = parse_bounding_box(candidate.boundingbox)
        polygon = None

        boundary = load_boundary(candidate.geojson)
        if boundary is not None:
            polygon = simplify_boundary(boundary, self.simplify_tolerance)
            if bounding_box is None:
                bounding_box = bounding_box_of(boundary)

        return GeoResult(
            latitude=candidate.lat,
            longitude=candidate.lon,
            display_name=candidate.display_name,
            bounding_box=bounding_box,
            polygon=polygon,
        )


# Singleton instance
_geocoder_client: Optional[GeocoderClient] = None


def get_geocoder_client() -> GeocoderClient:
    """
    Get or create the singleton geocoder client instance.

    Returns:
        GeocoderClient instance
    """
    global _geocoder_client
    if _geocoder_client is None:
        _geocoder_client = GeocoderClient()
    return _geocoder_client


async def close_geocoder_client():
    """Close the singleton geocoder client, if any, so the next call creates a fresh one."""
    global _geocoder_client
    if _geocoder_client is not None:
        await _geocoder_client.close()
        _geocoder_client = None
