import pytest
from coachly.services.geometry import GeometryError, calculate_angle, point_above, segment_ratio


def test_right_angle():
    """Test perpendicular rays give 90 degrees."""
    assert calculate_angle((1, 0), (0, 0), (0, 1)) == pytest.approx(90.0)


def test_straight_line_is_180():
    """Test collinear points on opposite sides of the vertex."""
    assert calculate_angle((100, 500), (100, 400), (100, 300)) == pytest.approx(180.0)


def test_same_direction_is_zero():
    """Test rays pointing the same way, including float drift near cos=1."""
    assert calculate_angle((0, 1e-3), (0, 0), (0, 3.0000001e8)) == pytest.approx(0.0, abs=1e-4)


def test_angle_is_symmetric_in_endpoints():
    """Test swapping the endpoints leaves the angle unchanged."""
    a = calculate_angle((3, 1), (0, 0), (-2, 5))
    b = calculate_angle((-2, 5), (0, 0), (3, 1))
    assert a == pytest.approx(b)
    assert 0.0 <= a <= 180.0


def test_forty_five_degrees():
    assert calculate_angle((1, 1), (0, 0), (1, 0)) == pytest.approx(45.0)


def test_degenerate_angle_raises():
    """Test a zero-length ray is rejected instead of producing NaN."""
    with pytest.raises(GeometryError):
        calculate_angle((5, 5), (5, 5), (10, 0))
    with pytest.raises(GeometryError):
        calculate_angle((0, 0), (5, 5), (5, 5))


def test_point_above_moves_up_in_image_space():
    assert point_above((100, 300), 100) == (100, 200)


def test_segment_ratio():
    assert segment_ratio(-150, -50) == pytest.approx(3.0)
    with pytest.raises(GeometryError):
        segment_ratio(10, 0)


def test_geometry_error_is_value_error():
    assert issubclass(GeometryError, ValueError)


@pytest.mark.parametrize("p1, p2, p3", [
    ((float("nan"), 0), (0, 0), (0, 1)),
    ((1, 0), (0, float("nan")), (0, 1)),
    ((float("inf"), 0), (0, 0), (0, 1)),
])
def test_non_finite_coordinates_raise(p1, p2, p3):
    """Test NaN or infinite coordinates never yield an angle."""
    with pytest.raises(GeometryError):
        calculate_angle(p1, p2, p3)


def test_segment_ratio_non_finite_raises():
    with pytest.raises(GeometryError):
        segment_ratio(float("nan"), 10)
    with pytest.raises(GeometryError):
        segment_ratio(10, float("nan"))
