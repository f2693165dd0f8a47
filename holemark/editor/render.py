"""
Render pipeline for HoleMark editor.

Draws one frame of the annotated target:
background -> image -> reference line -> group overlays -> info boxes.

Info boxes are drawn last so other groups never cover them. Their text
comes from format_info_lines(), which is pure, so the live view and the
exported image show the same numbers.
"""

from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF, QSizeF, Qt
from PySide6.QtGui import QColor, QFont, QFontMetricsF, QImage, QPainter

from holemark.core.units import DEFAULT_CONVERTER, AngularUnit, UnitConverter
from holemark.core.viewport import ViewportTransform
from holemark.editor.annotations import AnnotationStyle, RenderContext, ShotGroup
from holemark.editor.session import MeasurementSettings, Session


def format_info_lines(
    group: ShotGroup,
    settings: MeasurementSettings,
    converter: UnitConverter = DEFAULT_CONVERTER,
) -> List[str]:
    """
    Text lines for a group's info box.

    Linear values are shown in the result unit, angles in the angular unit.
    Returns an empty list while the group has no valid results.
    """
    results = group.results
    if results is None:
        return []

    unit = settings.result_unit
    angular_unit = settings.angular_unit

    def length(value: float) -> str:
        converted = converter.convert(value, settings.reference_unit, unit)
        return f"{converted:.2f} {unit.abbreviation}"

    def angle(size) -> str:
        if size is None:
            return ""
        value = converter.angular(size.mrad, angular_unit)
        return f" ({value:.2f} {angular_unit.abbreviation})"

    lines = [
        f"Group {group.id}",
        f"Shots: {results.hole_count}",
        f"Mean radius: {length(results.mean_radius)}{angle(results.mean_radius_angle)}",
    ]
    if results.max_spread is not None:
        lines.append(
            f"Extreme spread: {length(results.max_spread)}{angle(results.max_spread_angle)}"
        )
    if results.offset_distance is not None:
        lines.append(
            f"Offset: {length(results.offset_distance)} @ {results.offset_bearing:.0f}°"
        )
    return lines


class RenderPipeline:
    """
    Paints the session onto a surface.

    Holds the per-group info box size cache, so one pipeline should be used
    per surface (the live canvas, an export).
    """

    def __init__(self, style: Optional[AnnotationStyle] = None) -> None:
        self._style = style or AnnotationStyle()
        # group id -> ((lines, pixel size), measured box size)
        self._info_sizes: Dict[int, Tuple[Tuple, QSizeF]] = {}

    @property
    def style(self) -> AnnotationStyle:
        return self._style

    def clear_cache(self) -> None:
        self._info_sizes.clear()

    # ─── Live ─────────────────────────────────────────────────────────────

    def render(
        self,
        painter: QPainter,
        session: Session,
        viewport: ViewportTransform,
        selected_hole: Optional[int] = None,
    ) -> None:
        """Draw a live frame into a buffer of viewport.buffer_size."""
        buffer_rect = QRectF(
            0, 0, viewport.buffer_size.width(), viewport.buffer_size.height()
        )
        painter.fillRect(buffer_rect, self._style.background_color)

        if not session.has_image or not viewport.is_ready:
            return

        # Nearest-neighbour when magnified so individual pixels stay crisp
        painter.setRenderHint(
            QPainter.RenderHint.SmoothPixmapTransform,
            viewport.surface_per_image_pixel <= 1.0,
        )
        painter.drawImage(viewport.dest_rect, session.image, viewport.source_rect)

        ctx = RenderContext(
            to_surface=viewport.image_to_surface,
            surface_per_image_pixel=viewport.surface_per_image_pixel,
            stroke_scale=viewport.buffer_per_display_pixel,
            style=self._style,
            hole_radius_image=session.hole_radius_pixels,
        )
        self._paint_overlays(painter, session, ctx, buffer_rect, selected_hole, live=True)

    # ─── Export ───────────────────────────────────────────────────────────

    def render_full_resolution(
        self, painter: QPainter, session: Session, stroke_scale: float = 1.0
    ) -> None:
        """
        Draw the image 1:1 with overlays, strokes fixed at stroke_scale.

        Info box anchors are used if set but never created or changed here.
        """
        if not session.has_image:
            return
        image = session.image
        bounds = QRectF(0, 0, image.width(), image.height())
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, False)
        painter.drawImage(QPointF(0, 0), image)

        ctx = RenderContext(
            to_surface=QPointF,
            surface_per_image_pixel=1.0,
            stroke_scale=stroke_scale,
            style=self._style,
            hole_radius_image=session.hole_radius_pixels,
        )
        self._paint_overlays(painter, session, ctx, bounds, None, live=False)

    # ─── Overlays ─────────────────────────────────────────────────────────

    def _paint_overlays(
        self,
        painter: QPainter,
        session: Session,
        ctx: RenderContext,
        bounds: QRectF,
        selected_hole: Optional[int],
        live: bool,
    ) -> None:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)

        if session.reference_line is not None:
            session.reference_line.paint(painter, ctx)

        active_id = session.active_group_id
        for group in session.groups:
            active = group.id == active_id
            group.paint(painter, ctx, active, selected_hole if active else None)

        font = QFont()
        font.setPixelSize(max(1, round(ctx.scaled(self._style.font_size))))
        painter.setFont(font)
        for group in session.groups:
            if not group.results_valid:
                if live:
                    group.info_box_rect = None
                continue
            lines = format_info_lines(group, session.settings, session.converter)
            rect = self._paint_info_box(painter, group, lines, font, ctx, bounds, live)
            if live:
                group.info_box_rect = rect

    def _paint_info_box(
        self,
        painter: QPainter,
        group: ShotGroup,
        lines: List[str],
        font: QFont,
        ctx: RenderContext,
        bounds: QRectF,
        live: bool,
    ) -> Optional[QRectF]:
        """Draw one info box and return its rectangle in surface pixels."""
        anchor = group.info_box_anchor
        if anchor is None:
            # Default position: a fixed on-screen offset from the centroid
            offset = ctx.scaled(self._style.info_offset) / ctx.surface_per_image_pixel
            centroid = group.results.centroid_pixel
            anchor = QPointF(centroid.x() + offset, centroid.y() + offset)
            if live:
                group.info_box_anchor = QPointF(anchor)

        top_left = ctx.to_surface(anchor)
        if top_left is None:
            return None

        size = self.info_box_size(group.id, lines, font, ctx.scaled(self._style.info_padding))
        rect = clamp_rect(QRectF(top_left, size), bounds)

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(self._style.info_background)
        painter.drawRect(rect)

        color = QColor(self._style.color_for(group, True))
        painter.setPen(ctx.pen(color, 1.0))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(rect)

        metrics = QFontMetricsF(font)
        padding = ctx.scaled(self._style.info_padding)
        painter.setPen(self._style.info_text_color)
        y = rect.top() + padding + metrics.ascent()
        for line in lines:
            painter.drawText(QPointF(rect.left() + padding, y), line)
            y += metrics.lineSpacing()

        return rect

    def info_box_size(
        self, group_id: int, lines: List[str], font: QFont, padding: float
    ) -> QSizeF:
        """Measured box size for the lines, cached per group until the text changes."""
        key = (tuple(lines), font.pixelSize(), padding)
        cached = self._info_sizes.get(group_id)
        if cached is not None and cached[0] == key:
            return QSizeF(cached[1])

        metrics = QFontMetricsF(font)
        width = max((metrics.horizontalAdvance(line) for line in lines), default=0.0)
        height = metrics.lineSpacing() * len(lines)
        size = QSizeF(width + 2 * padding, height + 2 * padding)
        self._info_sizes[group_id] = (key, size)
        return QSizeF(size)


def clamp_rect(rect: QRectF, bounds: QRectF) -> QRectF:
    """Move rect so it lies entirely within bounds (top-left wins if too big)."""
    x = min(max(rect.left(), bounds.left()), max(bounds.right() - rect.width(), bounds.left()))
    y = min(max(rect.top(), bounds.top()), max(bounds.bottom() - rect.height(), bounds.top()))
    return QRectF(x, y, rect.width(), rect.height())


def render_to_image(
    pipeline: RenderPipeline,
    session: Session,
    viewport: ViewportTransform,
    selected_hole: Optional[int] = None,
) -> QImage:
    """Render a live frame into a new buffer image (used by the canvas and tests)."""
    size = viewport.buffer_size
    image = QImage(max(size.width(), 1), max(size.height(), 1), QImage.Format.Format_ARGB32_Premultiplied)
    image.fill(pipeline.style.background_color)
    painter = QPainter(image)
    try:
        pipeline.render(painter, session, viewport, selected_hole)
    finally:
        painter.end()
    return image
