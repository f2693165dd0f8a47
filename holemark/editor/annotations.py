"""
Annotation models for HoleMark editor.

This module provides the data models for everything drawn over the target
photo. Each annotation knows how to:
- Paint itself on a QPainter through a RenderContext
- Keep its real-unit coordinates in step with the calibration scale

Annotation Types:
- ShotPoint: A bullet hole or aiming point (pixel + real coordinates)
- ReferenceLine: The calibration line of known real-world length
- ShotGroup: A set of holes with an optional aiming point and results

Pixel coordinates are the source of truth. Real coordinates are a cached
projection (pixel / scale) that only the owning annotation updates.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from PySide6.QtCore import QLineF, QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QPainter, QPen

from holemark.core.statistics import GroupResults


# ─── Style ────────────────────────────────────────────────────────────────────

def _default_palette() -> List[QColor]:
    return [
        QColor(255, 80, 80),
        QColor(80, 200, 255),
        QColor(255, 210, 60),
        QColor(120, 230, 120),
        QColor(230, 120, 255),
        QColor(255, 150, 60),
    ]


@dataclass
class AnnotationStyle:
    """
    Style properties for overlays.

    Sizes are in surface pixels before the stroke scale is applied.
    """
    palette: List[QColor] = field(default_factory=_default_palette)
    reference_color: QColor = field(default_factory=lambda: QColor(255, 220, 0))
    selection_color: QColor = field(default_factory=lambda: QColor(255, 255, 255))
    info_background: QColor = field(default_factory=lambda: QColor(0, 0, 0, 180))
    info_text_color: QColor = field(default_factory=lambda: QColor(255, 255, 255))
    background_color: QColor = field(default_factory=lambda: QColor(26, 26, 26))
    stroke_width: float = 2.0
    fallback_hole_radius: float = 6.0
    centroid_size: float = 9.0
    aim_size: float = 12.0
    endpoint_radius: float = 4.0
    font_size: int = 13
    info_padding: float = 6.0
    info_offset: float = 24.0
    inactive_alpha: int = 110

    def color_for(self, group: "ShotGroup", active: bool) -> QColor:
        """Group color, translucent unless the group is active."""
        color = QColor(self.palette[group.color_index % len(self.palette)])
        if not active:
            color.setAlpha(self.inactive_alpha)
        return color

    def clone(self) -> "AnnotationStyle":
        return AnnotationStyle(
            palette=[QColor(c) for c in self.palette],
            reference_color=QColor(self.reference_color),
            selection_color=QColor(self.selection_color),
            info_background=QColor(self.info_background),
            info_text_color=QColor(self.info_text_color),
            background_color=QColor(self.background_color),
            stroke_width=self.stroke_width,
            fallback_hole_radius=self.fallback_hole_radius,
            centroid_size=self.centroid_size,
            aim_size=self.aim_size,
            endpoint_radius=self.endpoint_radius,
            font_size=self.font_size,
            info_padding=self.info_padding,
            info_offset=self.info_offset,
            inactive_alpha=self.inactive_alpha,
        )


@dataclass
class RenderContext:
    """
    Everything an annotation needs to draw itself onto a surface.

    Live rendering maps through the viewport and scales strokes by the
    buffer/display ratio; export maps image pixels 1:1 with fixed strokes.
    """
    to_surface: Callable[[QPointF], Optional[QPointF]]
    surface_per_image_pixel: float
    stroke_scale: float
    style: AnnotationStyle
    hole_radius_image: Optional[float] = None   # bullet radius in image pixels

    def pen(self, color: QColor, width: Optional[float] = None) -> QPen:
        pen = QPen(color)
        pen.setWidthF((width if width is not None else self.style.stroke_width) * self.stroke_scale)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        return pen

    def scaled(self, size: float) -> float:
        return size * self.stroke_scale

    @property
    def hole_radius_surface(self) -> float:
        if self.hole_radius_image and self.hole_radius_image > 0:
            return self.hole_radius_image * self.surface_per_image_pixel
        return self.scaled(self.style.fallback_hole_radius)


# ─── Points ───────────────────────────────────────────────────────────────────

class ShotPoint:
    """A marked position in image pixels with its projection into real units."""

    __slots__ = ("_pixel", "_real")

    def __init__(self, pixel: QPointF, scale: Optional[float] = None) -> None:
        self._pixel = QPointF(pixel)
        self._real: Optional[QPointF] = None
        self.project(scale)

    @property
    def pixel(self) -> QPointF:
        return QPointF(self._pixel)

    @property
    def real(self) -> Optional[QPointF]:
        """Position in reference units, None while uncalibrated."""
        return QPointF(self._real) if self._real is not None else None

    def project(self, scale: Optional[float]) -> None:
        """Recompute the real-unit projection for a (new) scale."""
        if scale and scale > 0:
            self._real = QPointF(self._pixel.x() / scale, self._pixel.y() / scale)
        else:
            self._real = None

    def move_to(self, pixel: QPointF, scale: Optional[float]) -> None:
        self._pixel = QPointF(pixel)
        self.project(scale)

    def __repr__(self) -> str:
        return f"ShotPoint(pixel=({self._pixel.x():.1f}, {self._pixel.y():.1f}))"


class ReferenceLine:
    """
    Calibration line drawn by the user.

    Shows a line between two image points with endpoint markers.
    """

    def __init__(self, start: QPointF, end: Optional[QPointF] = None) -> None:
        self._start = QPointF(start)
        self._end = QPointF(end) if end is not None else QPointF(start)

    @property
    def start(self) -> QPointF:
        return QPointF(self._start)

    @start.setter
    def start(self, point: QPointF) -> None:
        self._start = QPointF(point)

    @property
    def end(self) -> QPointF:
        return QPointF(self._end)

    @end.setter
    def end(self, point: QPointF) -> None:
        self._end = QPointF(point)

    @property
    def pixel_length(self) -> float:
        """Length of the line in image pixels."""
        return QLineF(self._start, self._end).length()

    def paint(self, painter: QPainter, ctx: RenderContext) -> None:
        start = ctx.to_surface(self._start)
        end = ctx.to_surface(self._end)
        if start is None or end is None:
            return

        color = ctx.style.reference_color
        painter.setPen(ctx.pen(color))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawLine(start, end)

        painter.setBrush(color)
        radius = ctx.scaled(ctx.style.endpoint_radius)
        painter.drawEllipse(start, radius, radius)
        painter.drawEllipse(end, radius, radius)


# ─── Shot Group ───────────────────────────────────────────────────────────────

class ShotGroup:
    """
    A group of bullet holes with an optional aiming point.

    Mutating operations take the current scale so the real-unit projection
    of each point is updated together with its pixel position. Results are
    owned by the session, which recomputes them after every edit.
    """

    def __init__(self, group_id: int, color_index: Optional[int] = None) -> None:
        self.id: int = group_id
        self.color_index: int = color_index if color_index is not None else group_id - 1
        self._holes: List[ShotPoint] = []
        self._aiming_point: Optional[ShotPoint] = None
        self._results: Optional[GroupResults] = None

        # Info box anchor in image pixels (top-left of the box). Set lazily the
        # first time results are drawn, then kept until cleared or dragged.
        self.info_box_anchor: Optional[QPointF] = None
        # Last drawn info box in surface pixels, used for hit-testing
        self.info_box_rect: Optional[QRectF] = None

    # ─── Points ───────────────────────────────────────────────────────────

    @property
    def holes(self) -> Tuple[ShotPoint, ...]:
        return tuple(self._holes)

    @property
    def hole_count(self) -> int:
        return len(self._holes)

    def has_hole(self, index: Optional[int]) -> bool:
        return index is not None and 0 <= index < len(self._holes)

    @property
    def aiming_point(self) -> Optional[ShotPoint]:
        return self._aiming_point

    def add_hole(self, pixel: QPointF, scale: Optional[float]) -> int:
        """Append a hole and return its index."""
        self._holes.append(ShotPoint(pixel, scale))
        self.invalidate()
        return len(self._holes) - 1

    def move_hole(self, index: int, pixel: QPointF, scale: Optional[float]) -> bool:
        if not self.has_hole(index):
            return False
        self._holes[index].move_to(pixel, scale)
        self.invalidate()
        return True

    def remove_hole(self, index: int) -> bool:
        if not self.has_hole(index):
            return False
        del self._holes[index]
        self.invalidate()
        return True

    def set_aiming_point(self, pixel: QPointF, scale: Optional[float]) -> None:
        self._aiming_point = ShotPoint(pixel, scale)
        self.invalidate()

    def clear_aiming_point(self) -> None:
        self._aiming_point = None
        self.invalidate()

    def reproject(self, scale: Optional[float]) -> None:
        """Recompute every real-unit coordinate from pixels."""
        for hole in self._holes:
            hole.project(scale)
        if self._aiming_point is not None:
            self._aiming_point.project(scale)

    # ─── Results ──────────────────────────────────────────────────────────

    @property
    def results(self) -> Optional[GroupResults]:
        return self._results

    @property
    def results_valid(self) -> bool:
        return self._results is not None

    def invalidate(self) -> None:
        """Drop derived results; they must be recomputed before display."""
        self._results = None

    def apply_results(self, results: Optional[GroupResults]) -> None:
        self._results = results

    def clear_info_box(self) -> None:
        self.info_box_anchor = None
        self.info_box_rect = None

    # ─── Painting ─────────────────────────────────────────────────────────

    def paint(
        self,
        painter: QPainter,
        ctx: RenderContext,
        active: bool,
        selected_index: Optional[int] = None,
    ) -> None:
        """Paint holes, aiming point, offset line and centroid (not the info box)."""
        color = ctx.style.color_for(self, active)
        fill = QColor(color)
        fill.setAlpha(min(color.alpha(), 70))

        # Offset line first so markers sit on top of it
        results = self._results
        if self._aiming_point is not None and results is not None:
            aim = ctx.to_surface(self._aiming_point.pixel)
            centroid = ctx.to_surface(results.centroid_pixel)
            if aim is not None and centroid is not None:
                pen = ctx.pen(color)
                pen.setStyle(Qt.PenStyle.DashLine)
                painter.setPen(pen)
                painter.drawLine(aim, centroid)

        radius = ctx.hole_radius_surface
        painter.setPen(ctx.pen(color))
        painter.setBrush(fill)
        for hole in self._holes:
            center = ctx.to_surface(hole.pixel)
            if center is not None:
                painter.drawEllipse(center, radius, radius)

        if active and self.has_hole(selected_index):
            center = ctx.to_surface(self._holes[selected_index].pixel)
            if center is not None:
                ring = radius + ctx.scaled(4)
                painter.setPen(ctx.pen(ctx.style.selection_color))
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.drawEllipse(center, ring, ring)

        if self._aiming_point is not None:
            self._paint_aim(painter, ctx, color)

        if results is not None:
            self._paint_centroid(painter, ctx, color, results.centroid_pixel)

    def _paint_aim(self, painter: QPainter, ctx: RenderContext, color: QColor) -> None:
        center = ctx.to_surface(self._aiming_point.pixel)
        if center is None:
            return
        size = ctx.scaled(ctx.style.aim_size)
        painter.setPen(ctx.pen(color))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawEllipse(center, size / 2, size / 2)
        painter.drawLine(QPointF(center.x() - size, center.y()), QPointF(center.x() + size, center.y()))
        painter.drawLine(QPointF(center.x(), center.y() - size), QPointF(center.x(), center.y() + size))

    def _paint_centroid(
        self, painter: QPainter, ctx: RenderContext, color: QColor, centroid_pixel: QPointF
    ) -> None:
        center = ctx.to_surface(centroid_pixel)
        if center is None:
            return
        size = ctx.scaled(ctx.style.centroid_size)
        painter.setPen(ctx.pen(color, ctx.style.stroke_width * 1.5))
        painter.drawLine(
            QPointF(center.x() - size, center.y() - size),
            QPointF(center.x() + size, center.y() + size),
        )
        painter.drawLine(
            QPointF(center.x() - size, center.y() + size),
            QPointF(center.x() + size, center.y() - size),
        )

    def __repr__(self) -> str:
        return f"ShotGroup(id={self.id}, holes={len(self._holes)}, valid={self.results_valid})"
