"""
Geometry helpers for geocoder boundaries.
"""
import json
from typing import List, Optional, Sequence

from shapely import to_geojson
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from agroenv.infrastructure.api_constants import GeocoderEndpoints


def parse_bounding_box(raw: Optional[Sequence]) -> Optional[List[float]]:
    """
    Parse a Nominatim bounding box.

    Args:
        raw: Four values ordered [south, north, west, east], usually strings

    Returns:
        List of four floats, or None if the value is missing or invalid
    """
    if not raw or len(raw) != 4:
        return None
    try:
        return [float(value) for value in raw]
    except (TypeError, ValueError):
        return None


def load_boundary(geojson: Optional[dict]) -> Optional[BaseGeometry]:
    """
    Build a shapely geometry from a GeoJSON boundary.

    Only areal geometries are kept; points and lines (returned for
    nodes and roads) yield None.
    """
    if not geojson or geojson.get("type") not in GeocoderEndpoints.BOUNDARY_GEOMETRY_TYPES:
        return None
    try:
        geometry = shape(geojson)
    except (ValueError, TypeError, KeyError, IndexError):
        return None
    if geometry.is_empty:
        return None
    if not geometry.is_valid:
        geometry = geometry.buffer(0)
    return geometry


def simplify_boundary(geometry: BaseGeometry, tolerance: float) -> dict:
    """
    Simplify a boundary and return it as a plain GeoJSON mapping.

    Args:
        geometry: Areal geometry
        tolerance: Maximum deviation in degrees (0 disables simplification)

    Returns:
        GeoJSON dict with list coordinates
    """
    if tolerance > 0:
        geometry = geometry.simplify(tolerance, preserve_topology=True)
    return json.loads(to_geojson(geometry))


def bounding_box_of(geometry: BaseGeometry) -> List[float]:
    """Bounding box of a geometry as [south, north, west, east]."""
    west, south, east, north = geometry.bounds
    return [south, north, west, east]
