import pytest
from PySide6.QtCore import QPointF

from holemark.core.statistics import angular_size, bearing_degrees, compute_group_statistics
from holemark.core.units import LinearUnit
from holemark.editor.annotations import ShotGroup


def make_group(points, scale=100.0, aim=None):
    group = ShotGroup(1)
    for x, y in points:
        group.add_hole(QPointF(x, y), scale)
    if aim is not None:
        group.set_aiming_point(QPointF(*aim), scale)
    return group


def compute(group, scale=100.0, distance=100.0):
    return compute_group_statistics(
        group, scale, LinearUnit.INCHES, distance, LinearUnit.YARDS
    )


def test_two_hole_scenario():
    results = compute(make_group([(0, 0), (300, 400)]))
    assert results.hole_count == 2
    assert results.max_spread == pytest.approx(5.0)
    assert results.mean_radius == pytest.approx(2.5)
    assert results.centroid.x() == pytest.approx(1.5)
    assert results.centroid.y() == pytest.approx(2.0)
    assert results.centroid_pixel.x() == pytest.approx(150)
    assert results.centroid_pixel.y() == pytest.approx(200)


def test_single_hole_has_no_spread():
    results = compute(make_group([(120, 80)]))
    assert results.mean_radius == pytest.approx(0.0)
    assert results.max_spread is None
    assert results.max_spread_angle is None


def test_nothing_to_compute():
    assert compute(make_group([])) is None
    assert compute(make_group([(1, 1)]), scale=None) is None


def test_max_spread_is_largest_pair():
    results = compute(make_group([(0, 0), (100, 0), (0, 700), (50, 50)]))
    assert results.max_spread == pytest.approx(7.0712, rel=1e-4)


def test_angular_size_one_inch_at_100_yards():
    size = angular_size(1.0, LinearUnit.INCHES, 100.0, LinearUnit.YARDS)
    assert size.mrad == pytest.approx(0.27778, rel=1e-4)
    assert size.moa == pytest.approx(0.955, rel=1e-3)


def test_angular_size_requires_distance():
    assert angular_size(1.0, LinearUnit.INCHES, 0.0, LinearUnit.YARDS) is None
    results = compute(make_group([(0, 0), (300, 400)]), distance=0.0)
    assert results.mean_radius_angle is None
    assert results.max_spread_angle is None


def test_angular_size_decreases_with_distance():
    near = angular_size(2.0, LinearUnit.INCHES, 50.0, LinearUnit.YARDS)
    far = angular_size(2.0, LinearUnit.INCHES, 200.0, LinearUnit.YARDS)
    assert far.moa < near.moa


def test_offset_from_aiming_point():
    # Centroid at (1.5, 2.0) in, aim at (1.5, 4.0) in: 2 in straight up
    results = compute(make_group([(0, 0), (300, 400)], aim=(150, 400)))
    assert results.offset_distance == pytest.approx(2.0)
    assert results.offset_bearing == pytest.approx(90.0)


def test_no_offset_without_aim():
    results = compute(make_group([(0, 0)]))
    assert results.offset_distance is None
    assert results.offset_bearing is None


@pytest.mark.parametrize("dx, dy, expected", [
    (1, 0, 0.0),
    (0, -1, 90.0),
    (-1, 0, 180.0),
    (0, 1, 270.0),
    (1, 1, 315.0),
])
def test_bearing_degrees(dx, dy, expected):
    assert bearing_degrees(dx, dy) == pytest.approx(expected)
