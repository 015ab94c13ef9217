"""
Géométries SWEREF99TM (EPSG:3006) pour les requêtes SGU.

Emprises (bbox) et corridors (ligne + tampon latéral) :
- validation contre l'emprise approximative de la Suède ;
- sérialisation en chaîne bbox OGC et en polygone WKT ;
- conversion corridor -> emprise (rapide) ou corridor -> polygone (précis).

Notes :
- Le polygone d'un corridor est une approximation par bissectrice des angles,
  pas un vrai décalage mitré ; il peut s'auto-intersecter sur un tracé très coudé.
- Les coordonnées entières sont écrites sans partie décimale (670000, pas 670000.0).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from sgu_errors import ValidationError


CRS_SWEREF99TM = "EPSG:3006"

# Emprise approximative de la Suède en SWEREF99TM
SWEREF99TM_BOUNDS = {
    "min_x": 200000,
    "max_x": 1000000,
    "min_y": 6100000,
    "max_y": 7700000,
}


@dataclass(frozen=True)
class Sweref99Point:
    """Point SWEREF99TM : x = est, y = nord (mètres)."""

    x: float
    y: float


@dataclass(frozen=True)
class BoundingBox:
    """Emprise SWEREF99TM."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float


@dataclass(frozen=True)
class Corridor:
    """Tracé linéaire (route, conduite, câble) avec une tolérance latérale en mètres."""

    coordinates: Tuple[Sweref99Point, ...]
    buffer_meters: float

    def __post_init__(self):
        object.__setattr__(self, "coordinates", tuple(self.coordinates))


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def is_valid_swedish_coordinate(x: float, y: float) -> bool:
    return (
        SWEREF99TM_BOUNDS["min_x"] <= x <= SWEREF99TM_BOUNDS["max_x"]
        and SWEREF99TM_BOUNDS["min_y"] <= y <= SWEREF99TM_BOUNDS["max_y"]
    )


def validate_bbox(bbox: BoundingBox) -> None:
    if bbox.min_x >= bbox.max_x:
        raise ValidationError("minX must be less than maxX", "bbox")
    if bbox.min_y >= bbox.max_y:
        raise ValidationError("minY must be less than maxY", "bbox")
    for x, y in ((bbox.min_x, bbox.min_y), (bbox.max_x, bbox.max_y)):
        if not is_valid_swedish_coordinate(x, y):
            raise ValidationError(
                f"Coordinates ({format_number(x)}, {format_number(y)}) are outside valid SWEREF99TM range for Sweden",
                "bbox",
            )


def validate_point(point: Sweref99Point) -> None:
    if not is_valid_swedish_coordinate(point.x, point.y):
        raise ValidationError(
            f"Coordinates ({format_number(point.x)}, {format_number(point.y)}) are outside valid SWEREF99TM range for Sweden",
            "point",
        )


def bbox_to_wkt(bbox: BoundingBox) -> str:
    corners = [
        (bbox.min_x, bbox.min_y),
        (bbox.max_x, bbox.min_y),
        (bbox.max_x, bbox.max_y),
        (bbox.min_x, bbox.max_y),
        (bbox.min_x, bbox.min_y),
    ]
    return _polygon_wkt(corners)


def bbox_to_string(bbox: BoundingBox) -> str:
    """Convention OGC du paramètre bbox : minX,minY,maxX,maxY"""
    return ",".join(format_number(v) for v in (bbox.min_x, bbox.min_y, bbox.max_x, bbox.max_y))


def bbox_to_dict(bbox: BoundingBox) -> Dict[str, float]:
    return {
        "minX": bbox.min_x,
        "minY": bbox.min_y,
        "maxX": bbox.max_x,
        "maxY": bbox.max_y,
    }


def bbox_dimensions(bbox: BoundingBox) -> Dict[str, float]:
    """Largeur et hauteur de l'emprise en mètres"""
    return {
        "width": bbox.max_x - bbox.min_x,
        "height": bbox.max_y - bbox.min_y,
    }


def bbox_center(bbox: BoundingBox) -> Sweref99Point:
    return Sweref99Point(
        x=(bbox.min_x + bbox.max_x) / 2,
        y=(bbox.min_y + bbox.max_y) / 2,
    )


def bbox_around_point(point: Sweref99Point, buffer_meters: float) -> BoundingBox:
    return BoundingBox(
        min_x=point.x - buffer_meters,
        min_y=point.y - buffer_meters,
        max_x=point.x + buffer_meters,
        max_y=point.y + buffer_meters,
    )


def _require_corridor(corridor: Corridor) -> None:
    if len(corridor.coordinates) < 2:
        raise ValidationError("Corridor must have at least 2 coordinate pairs", "corridor")
    if corridor.buffer_meters <= 0:
        raise ValidationError("bufferMeters must be greater than 0", "corridor")


def corridor_to_bounding_box(corridor: Corridor) -> BoundingBox:
    """Emprise des sommets du corridor, élargie du tampon sur chaque côté."""
    _require_corridor(corridor)

    xs = [p.x for p in corridor.coordinates]
    ys = [p.y for p in corridor.coordinates]
    buffer = corridor.buffer_meters
    return BoundingBox(
        min_x=min(xs) - buffer,
        min_y=min(ys) - buffer,
        max_x=max(xs) + buffer,
        max_y=max(ys) + buffer,
    )


def corridor_to_wkt_polygon(corridor: Corridor) -> str:
    """
    Polygone approché du corridor par décalage perpendiculaire des deux côtés.

    Direction en chaque sommet : différence avant au premier, arrière au dernier,
    somme des différences entrante et sortante aux sommets intermédiaires.
    Les sommets de direction nulle sont ignorés.
    """
    _require_corridor(corridor)

    coords = corridor.coordinates
    buffer = corridor.buffer_meters
    left_side: List[Tuple[float, float]] = []
    right_side: List[Tuple[float, float]] = []

    for i, point in enumerate(coords):
        if i == 0:
            dx = coords[1].x - point.x
            dy = coords[1].y - point.y
        elif i == len(coords) - 1:
            dx = point.x - coords[i - 1].x
            dy = point.y - coords[i - 1].y
        else:
            dx = (point.x - coords[i - 1].x) + (coords[i + 1].x - point.x)
            dy = (point.y - coords[i - 1].y) + (coords[i + 1].y - point.y)

        length = math.hypot(dx, dy)
        if length == 0:
            continue

        perp_x = -dy / length
        perp_y = dx / length
        left_side.append((point.x + perp_x * buffer, point.y + perp_y * buffer))
        right_side.append((point.x - perp_x * buffer, point.y - perp_y * buffer))

    if not left_side:
        raise ValidationError("Corridor points are all identical, cannot build a polygon", "corridor")

    return _polygon_wkt(left_side + right_side[::-1] + [left_side[0]])


def _polygon_wkt(points: Sequence[Tuple[float, float]]) -> str:
    ring = ", ".join(f"{format_number(x)} {format_number(y)}" for x, y in points)
    return f"POLYGON(({ring}))"
