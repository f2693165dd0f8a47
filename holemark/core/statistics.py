"""
Group statistics for HoleMark.

Pure computation over the holes of one shot group. All linear results are
in the calibration (reference) unit; angular results are derived with the
small-angle approximation (angle in radians = size / distance), which is the
convention for group sizes at shooting distances.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np
from PySide6.QtCore import QPointF

from holemark.core.units import DEFAULT_CONVERTER, LinearUnit, UnitConverter

if TYPE_CHECKING:
    from holemark.editor.annotations import ShotGroup


@dataclass(frozen=True)
class AngularSize:
    """An angle kept in both display units."""
    mrad: float
    moa: float


@dataclass(frozen=True)
class GroupResults:
    """
    Derived measurements for a shot group.

    Fields that do not apply are None, never zero: max_spread needs two
    holes, angular sizes need a positive target distance, the offset needs
    an aiming point.
    """
    hole_count: int
    centroid: QPointF            # reference units
    centroid_pixel: QPointF      # image pixels
    mean_radius: float
    max_spread: Optional[float] = None
    mean_radius_angle: Optional[AngularSize] = None
    max_spread_angle: Optional[AngularSize] = None
    offset_distance: Optional[float] = None
    offset_bearing: Optional[float] = None   # degrees, 0 = right, 90 = up


def angular_size(
    length: float,
    length_unit: LinearUnit,
    target_distance: float,
    target_distance_unit: LinearUnit,
    converter: UnitConverter = DEFAULT_CONVERTER,
) -> Optional[AngularSize]:
    """Angle subtended by length at target_distance, None if distance <= 0."""
    if target_distance <= 0:
        return None
    length_m = converter.convert(length, length_unit, LinearUnit.METERS)
    distance_m = converter.convert(target_distance, target_distance_unit, LinearUnit.METERS)
    mrad = length_m / distance_m * 1000.0
    return AngularSize(mrad=mrad, moa=converter.mrad_to_moa(mrad))


def bearing_degrees(dx: float, dy: float) -> float:
    """
    Bearing of an image-space vector in degrees.

    0 is right/East and 90 is up/North; image Y grows downward so dy is
    negated. Normalized to [0, 360).
    """
    angle = math.atan2(-dy, dx)
    if angle < 0:
        angle += 2 * math.pi
    return math.degrees(angle) % 360.0


def compute_group_statistics(
    group: "ShotGroup",
    scale: Optional[float],
    reference_unit: LinearUnit,
    target_distance: float,
    target_distance_unit: LinearUnit,
    converter: UnitConverter = DEFAULT_CONVERTER,
) -> Optional[GroupResults]:
    """
    Compute results for a group.

    Returns None when there is nothing to compute (no holes or no scale);
    callers treat that as "results cleared".
    """
    holes = group.holes
    if not holes or not scale or scale <= 0:
        return None

    real = np.array([[p.real.x(), p.real.y()] for p in holes], dtype=float)
    pixel = np.array([[p.pixel.x(), p.pixel.y()] for p in holes], dtype=float)

    centroid = real.mean(axis=0)
    centroid_pixel = pixel.mean(axis=0)
    mean_radius = float(np.hypot(*(real - centroid).T).mean())

    max_spread = None
    if len(holes) >= 2:
        deltas = real[:, None, :] - real[None, :, :]
        max_spread = float(np.sqrt((deltas ** 2).sum(axis=-1)).max())

    mean_radius_angle = angular_size(
        mean_radius, reference_unit, target_distance, target_distance_unit, converter
    )
    max_spread_angle = None
    if max_spread is not None:
        max_spread_angle = angular_size(
            max_spread, reference_unit, target_distance, target_distance_unit, converter
        )

    offset_distance = None
    offset_bearing = None
    aim = group.aiming_point
    if aim is not None and aim.real is not None:
        dx = float(centroid[0]) - aim.real.x()
        dy = float(centroid[1]) - aim.real.y()
        offset_distance = math.hypot(dx, dy)
        offset_bearing = bearing_degrees(dx, dy)

    return GroupResults(
        hole_count=len(holes),
        centroid=QPointF(float(centroid[0]), float(centroid[1])),
        centroid_pixel=QPointF(float(centroid_pixel[0]), float(centroid_pixel[1])),
        mean_radius=mean_radius,
        max_spread=max_spread,
        mean_radius_angle=mean_radius_angle,
        max_spread_angle=max_spread_angle,
        offset_distance=offset_distance,
        offset_bearing=offset_bearing,
    )
