import pytest

from sgu_errors import ValidationError
from sgu_geometry import (
    BoundingBox,
    Corridor,
    Sweref99Point,
    bbox_around_point,
    bbox_center,
    bbox_dimensions,
    bbox_to_dict,
    bbox_to_string,
    bbox_to_wkt,
    corridor_to_bounding_box,
    corridor_to_wkt_polygon,
    format_number,
    is_valid_swedish_coordinate,
    validate_bbox,
    validate_point,
)


@pytest.fixture(scope="module")
def stockholm_bbox() -> BoundingBox:
    return BoundingBox(min_x=670000, min_y=6570000, max_x=680000, max_y=6580000)


@pytest.fixture(scope="module")
def north_corridor() -> Corridor:
    return Corridor(
        coordinates=[Sweref99Point(670000, 6570000), Sweref99Point(670000, 6580000)],
        buffer_meters=100,
    )


def _ring(wkt: str):
    assert wkt.startswith("POLYGON((") and wkt.endswith("))")
    return [
        tuple(float(v) for v in pair.split())
        for pair in wkt[len("POLYGON(("):-2].split(", ")
    ]


def test_format_number():
    assert format_number(670000.0) == "670000"
    assert format_number(670000) == "670000"
    assert format_number(670000.5) == "670000.5"
    assert format_number(-12.25) == "-12.25"


def test_swedish_coordinate_range():
    assert is_valid_swedish_coordinate(674000, 6580000)
    assert is_valid_swedish_coordinate(200000, 6100000)  # bornes incluses
    assert not is_valid_swedish_coordinate(100000, 6580000)
    assert not is_valid_swedish_coordinate(674000, 7800000)


def test_validate_bbox_accepts_valid(stockholm_bbox):
    validate_bbox(stockholm_bbox)


@pytest.mark.parametrize(
    "bbox, message",
    [
        (BoundingBox(680000, 6570000, 670000, 6580000), "minX must be less than maxX"),
        (BoundingBox(670000, 6570000, 670000, 6580000), "minX must be less than maxX"),
        (BoundingBox(670000, 6580000, 680000, 6570000), "minY must be less than maxY"),
        (BoundingBox(100000, 6570000, 680000, 6580000), "outside valid SWEREF99TM range"),
        (BoundingBox(670000, 6570000, 680000, 7800000), "outside valid SWEREF99TM range"),
    ],
)
def test_validate_bbox_rejects(bbox, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_bbox(bbox)
    assert message in excinfo.value.message
    assert excinfo.value.code == "VALIDATION_ERROR"


def test_validate_bbox_message_names_coordinates():
    with pytest.raises(ValidationError) as excinfo:
        validate_bbox(BoundingBox(100000, 6570000, 680000, 6580000))
    assert "(100000, 6570000)" in excinfo.value.message


def test_validate_point():
    validate_point(Sweref99Point(674000, 6580000))
    with pytest.raises(ValidationError):
        validate_point(Sweref99Point(0, 0))


def test_bbox_to_wkt(stockholm_bbox):
    assert bbox_to_wkt(stockholm_bbox) == (
        "POLYGON((670000 6570000, 680000 6570000, 680000 6580000, "
        "670000 6580000, 670000 6570000))"
    )


def test_bbox_to_wkt_tall_box():
    bbox = BoundingBox(min_x=670000, min_y=6570000, max_x=680000, max_y=6590000)
    assert bbox_to_wkt(bbox) == (
        "POLYGON((670000 6570000, 680000 6570000, 680000 6590000, "
        "670000 6590000, 670000 6570000))"
    )


def test_bbox_to_string(stockholm_bbox):
    assert bbox_to_string(stockholm_bbox) == "670000,6570000,680000,6580000"


def test_bbox_helpers(stockholm_bbox):
    assert bbox_to_dict(stockholm_bbox) == {
        "minX": 670000,
        "minY": 6570000,
        "maxX": 680000,
        "maxY": 6580000,
    }
    assert bbox_dimensions(stockholm_bbox) == {"width": 10000, "height": 10000}
    assert bbox_center(stockholm_bbox) == Sweref99Point(675000, 6575000)


def test_bbox_around_point():
    bbox = bbox_around_point(Sweref99Point(674000, 6580000), 100)
    assert bbox == BoundingBox(673900, 6579900, 674100, 6580100)


def test_corridor_to_bounding_box(north_corridor):
    bbox = corridor_to_bounding_box(north_corridor)
    assert bbox == BoundingBox(669900, 6569900, 670100, 6580100)


def test_diagonal_corridor_to_bounding_box():
    corridor = Corridor(
        coordinates=[Sweref99Point(670000, 6570000), Sweref99Point(680000, 6580000)],
        buffer_meters=100,
    )
    assert corridor_to_bounding_box(corridor) == BoundingBox(669900, 6569900, 680100, 6580100)


def test_corridor_bbox_contains_every_vertex():
    corridor = Corridor(
        coordinates=[
            Sweref99Point(670000, 6570000),
            Sweref99Point(675000, 6572000),
            Sweref99Point(672000, 6578000),
        ],
        buffer_meters=250,
    )
    bbox = corridor_to_bounding_box(corridor)
    for p in corridor.coordinates:
        assert bbox.min_x + 250 <= p.x <= bbox.max_x - 250
        assert bbox.min_y + 250 <= p.y <= bbox.max_y - 250


def test_corridor_bbox_grows_with_buffer():
    points = [Sweref99Point(670000, 6570000), Sweref99Point(671000, 6571000)]
    previous = None
    for buffer in (10, 100, 500, 2000):
        bbox = corridor_to_bounding_box(Corridor(points, buffer))
        if previous is not None:
            assert bbox.min_x < previous.min_x and bbox.min_y < previous.min_y
            assert bbox.max_x > previous.max_x and bbox.max_y > previous.max_y
            size, previous_size = bbox_dimensions(bbox), bbox_dimensions(previous)
            assert size["width"] > previous_size["width"]
            assert size["height"] > previous_size["height"]
        previous = bbox


def test_corridor_to_wkt_polygon_straight_line(north_corridor):
    assert corridor_to_wkt_polygon(north_corridor) == (
        "POLYGON((669900 6570000, 669900 6580000, 670100 6580000, "
        "670100 6570000, 669900 6570000))"
    )


def test_corridor_polygon_is_closed():
    corridor = Corridor(
        coordinates=[
            Sweref99Point(670000, 6570000),
            Sweref99Point(675000, 6572000),
            Sweref99Point(672000, 6578000),
        ],
        buffer_meters=300,
    )
    ring = _ring(corridor_to_wkt_polygon(corridor))
    assert ring[0] == ring[-1]
    # deux côtés de trois sommets, plus le point de fermeture
    assert len(ring) == 7


def test_corridor_polygon_offsets_by_buffer_at_ends():
    corridor = Corridor(
        coordinates=[Sweref99Point(670000, 6570000), Sweref99Point(680000, 6570000)],
        buffer_meters=50,
    )
    ring = _ring(corridor_to_wkt_polygon(corridor))
    assert ring[0] == (670000, 6570050)
    assert ring[1] == (680000, 6570050)
    assert ring[2] == (680000, 6569950)
    assert ring[3] == (670000, 6569950)


def test_corridor_polygon_skips_duplicate_vertex():
    corridor = Corridor(
        coordinates=[
            Sweref99Point(670000, 6570000),
            Sweref99Point(670000, 6570000),
            Sweref99Point(670000, 6580000),
        ],
        buffer_meters=100,
    )
    ring = _ring(corridor_to_wkt_polygon(corridor))
    assert ring[0] == ring[-1]
    # le premier sommet, de direction nulle, est ignoré
    assert len(ring) == 5


def test_corridor_polygon_identical_points():
    corridor = Corridor(
        coordinates=[Sweref99Point(670000, 6570000), Sweref99Point(670000, 6570000)],
        buffer_meters=100,
    )
    with pytest.raises(ValidationError):
        corridor_to_wkt_polygon(corridor)


@pytest.mark.parametrize("convert", [corridor_to_bounding_box, corridor_to_wkt_polygon])
def test_corridor_needs_two_points(convert):
    corridor = Corridor(coordinates=[Sweref99Point(670000, 6570000)], buffer_meters=100)
    with pytest.raises(ValidationError) as excinfo:
        convert(corridor)
    assert "at least 2" in excinfo.value.message


@pytest.mark.parametrize("convert", [corridor_to_bounding_box, corridor_to_wkt_polygon])
def test_corridor_needs_positive_buffer(convert):
    corridor = Corridor(
        coordinates=[Sweref99Point(670000, 6570000), Sweref99Point(670000, 6580000)],
        buffer_meters=0,
    )
    with pytest.raises(ValidationError) as excinfo:
        convert(corridor)
    assert "bufferMeters" in excinfo.value.message


def test_corridor_coordinates_are_a_tuple():
    corridor = Corridor(
        coordinates=[Sweref99Point(670000, 6570000), Sweref99Point(670000, 6580000)],
        buffer_meters=100,
    )
    assert isinstance(corridor.coordinates, tuple)
