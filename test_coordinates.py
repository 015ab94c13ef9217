import pytest

from sgu_coordinates import (
    Wgs84BoundingBox,
    Wgs84Point,
    is_valid_wgs84_coordinate,
    wgs84_bbox_to_sweref99,
    wgs84_coordinates_to_sweref99,
    wgs84_to_sweref99,
)
from sgu_errors import ValidationError
from sgu_geometry import is_valid_swedish_coordinate


STOCKHOLM = Wgs84Point(latitude=59.33, longitude=18.07)
GOTHENBURG = Wgs84Point(latitude=57.71, longitude=11.97)

CITIES = [
    STOCKHOLM,
    GOTHENBURG,
    Wgs84Point(latitude=55.61, longitude=13.00),  # Malmö
    Wgs84Point(latitude=67.86, longitude=20.23),  # Kiruna
    Wgs84Point(latitude=65.58, longitude=22.15),  # Luleå
    Wgs84Point(latitude=63.83, longitude=20.26),  # Umeå
    Wgs84Point(latitude=57.64, longitude=18.30),  # Visby
]


def test_stockholm():
    point = wgs84_to_sweref99(STOCKHOLM)
    assert 670000 < point.x < 680000
    assert 6575000 < point.y < 6585000


def test_gothenburg():
    point = wgs84_to_sweref99(GOTHENBURG)
    assert 315000 < point.x < 325000
    assert 6395000 < point.y < 6405000


@pytest.mark.parametrize("city", CITIES)
def test_cities_land_inside_sweref99_envelope(city):
    point = wgs84_to_sweref99(city)
    assert is_valid_swedish_coordinate(point.x, point.y)


def test_north_moves_y_up_and_east_moves_x_up():
    base = wgs84_to_sweref99(STOCKHOLM)
    north = wgs84_to_sweref99(Wgs84Point(latitude=59.43, longitude=18.07))
    east = wgs84_to_sweref99(Wgs84Point(latitude=59.33, longitude=18.17))
    assert north.y > base.y
    assert east.x > base.x


def test_wgs84_range():
    assert is_valid_wgs84_coordinate(55.0, 11.0)
    assert is_valid_wgs84_coordinate(69.0, 24.0)
    assert not is_valid_wgs84_coordinate(48.85, 2.35)  # Paris


@pytest.mark.parametrize(
    "latitude, longitude",
    [(48.85, 2.35), (70.5, 18.0), (59.33, 25.0), (54.9, 13.0)],
)
def test_outside_sweden_rejected(latitude, longitude):
    with pytest.raises(ValidationError) as excinfo:
        wgs84_to_sweref99(Wgs84Point(latitude=latitude, longitude=longitude))
    assert "outside valid range for Sweden" in excinfo.value.message


def test_bbox_conversion():
    bbox = wgs84_bbox_to_sweref99(
        Wgs84BoundingBox(min_lat=59.30, min_lon=18.00, max_lat=59.35, max_lon=18.10)
    )
    assert bbox.min_x < bbox.max_x
    assert bbox.min_y < bbox.max_y
    assert 660000 < bbox.min_x < 690000
    assert 6570000 < bbox.min_y < 6590000


@pytest.mark.parametrize(
    "bbox, message",
    [
        (Wgs84BoundingBox(59.35, 18.00, 59.30, 18.10), "minLat must be less than maxLat"),
        (Wgs84BoundingBox(59.30, 18.10, 59.35, 18.00), "minLon must be less than maxLon"),
        (Wgs84BoundingBox(48.80, 2.30, 59.35, 18.10), "outside valid range for Sweden"),
    ],
)
def test_bbox_conversion_rejects(bbox, message):
    with pytest.raises(ValidationError) as excinfo:
        wgs84_bbox_to_sweref99(bbox)
    assert message in excinfo.value.message


def test_coordinates_conversion_keeps_order():
    points = wgs84_coordinates_to_sweref99([STOCKHOLM, GOTHENBURG])
    assert len(points) == 2
    assert points[0].x > points[1].x


def test_coordinates_conversion_needs_two_points():
    with pytest.raises(ValidationError) as excinfo:
        wgs84_coordinates_to_sweref99([STOCKHOLM])
    assert "at least 2" in excinfo.value.message
