"""
Conversion WGS84 (EPSG:4326) -> SWEREF99TM (EPSG:3006).

Les appelants fournissent latitude/longitude ; les services SGU attendent des
coordonnées SWEREF99TM. SWEREF99TM est une projection UTM zone 33 sur
l'ellipsoïde GRS80, sans décalage de datum.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from pyproj import Transformer

from sgu_errors import ValidationError
from sgu_geometry import CRS_SWEREF99TM, BoundingBox, Sweref99Point


CRS_WGS84 = "EPSG:4326"

WGS84_BOUNDS = {
    "min_lat": 55.0,
    "max_lat": 69.0,
    "min_lon": 11.0,
    "max_lon": 24.0,
}

# always_xy : pyproj attend (longitude, latitude) en entrée
_TRANSFORMER = Transformer.from_crs(CRS_WGS84, CRS_SWEREF99TM, always_xy=True)


@dataclass(frozen=True)
class Wgs84Point:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Wgs84BoundingBox:
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float


def is_valid_wgs84_coordinate(latitude: float, longitude: float) -> bool:
    return (
        WGS84_BOUNDS["min_lat"] <= latitude <= WGS84_BOUNDS["max_lat"]
        and WGS84_BOUNDS["min_lon"] <= longitude <= WGS84_BOUNDS["max_lon"]
    )


def _check_in_sweden(latitude: float, longitude: float, field: str) -> None:
    if not is_valid_wgs84_coordinate(latitude, longitude):
        raise ValidationError(
            f"WGS84 coordinates ({latitude}, {longitude}) are outside valid range for Sweden (55-69°N, 11-24°E)",
            field,
        )


def wgs84_to_sweref99(point: Wgs84Point) -> Sweref99Point:
    _check_in_sweden(point.latitude, point.longitude, "coordinates")
    x, y = _TRANSFORMER.transform(point.longitude, point.latitude)
    return Sweref99Point(x=x, y=y)


def wgs84_bbox_to_sweref99(bbox: Wgs84BoundingBox) -> BoundingBox:
    _check_in_sweden(bbox.min_lat, bbox.min_lon, "bbox")
    _check_in_sweden(bbox.max_lat, bbox.max_lon, "bbox")
    if bbox.min_lat >= bbox.max_lat:
        raise ValidationError("minLat must be less than maxLat", "bbox")
    if bbox.min_lon >= bbox.max_lon:
        raise ValidationError("minLon must be less than maxLon", "bbox")

    min_corner = wgs84_to_sweref99(Wgs84Point(latitude=bbox.min_lat, longitude=bbox.min_lon))
    max_corner = wgs84_to_sweref99(Wgs84Point(latitude=bbox.max_lat, longitude=bbox.max_lon))
    return BoundingBox(
        min_x=min_corner.x,
        min_y=min_corner.y,
        max_x=max_corner.x,
        max_y=max_corner.y,
    )


def wgs84_coordinates_to_sweref99(points: Sequence[Wgs84Point]) -> List[Sweref99Point]:
    if len(points) < 2:
        raise ValidationError("Corridor must have at least 2 coordinate points", "coordinates")
    return [wgs84_to_sweref99(p) for p in points]
