"""
Viewport transform for HoleMark.

Three coordinate spaces are involved:

- image space: pixels of the original photo
- display space: logical widget pixels, where pointer events arrive
- surface (buffer) space: pixels of the offscreen render buffer, which is
  the display size times the device pixel ratio, capped to a maximum
  dimension

The viewport is a pan/zoom window (the source rectangle) into the image.
The source rectangle is drawn letterboxed into the buffer so the image is
never stretched. Both rectangles are cached and every mapping in either
direction goes through the cached pair, so drawing and hit-testing agree.
"""

from typing import Optional, Tuple

from PySide6.QtCore import QPointF, QRectF, QSize, QSizeF


# ─── Pure Geometry ────────────────────────────────────────────────────────────

def compute_source_rect(
    view_center: QPointF,
    view_scale: float,
    display_size: QSizeF,
    image_size: QSizeF,
) -> QRectF:
    """
    Compute the visible sub-rectangle of the image.

    Width and height are display size / view scale, clamped to the image,
    centred on view_center and pushed back inside the image if needed.
    Zero sizes are forced to one pixel.
    """
    img_w = image_size.width()
    img_h = image_size.height()

    width = min(display_size.width() / view_scale, img_w)
    height = min(display_size.height() / view_scale, img_h)
    width = max(width, 1.0)
    height = max(height, 1.0)

    x = view_center.x() - width / 2
    y = view_center.y() - height / 2
    x = min(max(x, 0.0), max(img_w - width, 0.0))
    y = min(max(y, 0.0), max(img_h - height, 0.0))

    return QRectF(x, y, width, height)


def compute_letterbox(source_rect: QRectF, buffer_size: QSize) -> QRectF:
    """
    Compute the destination rectangle for drawing source_rect into the buffer.

    The aspect ratio of the source is preserved; the result is centred and
    the remaining buffer area is padding.
    """
    buf_w = buffer_size.width()
    buf_h = buffer_size.height()
    factor = min(buf_w / source_rect.width(), buf_h / source_rect.height())

    dest_w = source_rect.width() * factor
    dest_h = source_rect.height() * factor
    return QRectF((buf_w - dest_w) / 2, (buf_h - dest_h) / 2, dest_w, dest_h)


def compute_buffer_size(
    display_size: QSizeF, device_pixel_ratio: float, max_dimension: int
) -> QSize:
    """Display size times device pixel ratio, capped to max_dimension."""
    width = display_size.width() * device_pixel_ratio
    height = display_size.height() * device_pixel_ratio

    largest = max(width, height)
    if largest > max_dimension:
        factor = max_dimension / largest
        width *= factor
        height *= factor

    if display_size.width() <= 0 or display_size.height() <= 0:
        return QSize(0, 0)
    return QSize(max(1, round(width)), max(1, round(height)))


def image_to_surface(
    point: QPointF, source_rect: Optional[QRectF], dest_rect: Optional[QRectF]
) -> Optional[QPointF]:
    """Map an image point into the buffer; None until rectangles exist."""
    if source_rect is None or dest_rect is None:
        return None
    return QPointF(
        dest_rect.x() + (point.x() - source_rect.x()) / source_rect.width() * dest_rect.width(),
        dest_rect.y() + (point.y() - source_rect.y()) / source_rect.height() * dest_rect.height(),
    )


def surface_to_image(
    point: QPointF,
    source_rect: Optional[QRectF],
    dest_rect: Optional[QRectF],
    display_size: QSizeF,
    buffer_size: QSize,
) -> Optional[QPointF]:
    """
    Map a display-space pointer position to image space.

    Returns None if no rectangles exist yet or the pointer is over the
    letterbox padding.
    """
    if source_rect is None or dest_rect is None:
        return None
    if display_size.width() <= 0 or display_size.height() <= 0:
        return None

    buffer_point = QPointF(
        point.x() * buffer_size.width() / display_size.width(),
        point.y() * buffer_size.height() / display_size.height(),
    )
    # QRectF.contains excludes the right/bottom edge for degenerate cases only
    if not (
        dest_rect.left() <= buffer_point.x() <= dest_rect.right()
        and dest_rect.top() <= buffer_point.y() <= dest_rect.bottom()
    ):
        return None
    return _buffer_to_image(buffer_point, source_rect, dest_rect)


def _buffer_to_image(point: QPointF, source_rect: QRectF, dest_rect: QRectF) -> QPointF:
    return QPointF(
        source_rect.x() + (point.x() - dest_rect.x()) / dest_rect.width() * source_rect.width(),
        source_rect.y() + (point.y() - dest_rect.y()) / dest_rect.height() * source_rect.height(),
    )


# ─── Viewport ─────────────────────────────────────────────────────────────────

class ViewportTransform:
    """
    Pan/zoom state plus the cached source and letterbox rectangles.

    view_scale is display pixels per image pixel. Its lower bound is the
    fit scale, so the whole image is the furthest the user can zoom out.
    """

    MIN_ZOOM = 0.01
    MAX_ZOOM = 40.0
    DEFAULT_MAX_BUFFER_DIMENSION = 4096

    def __init__(self, max_buffer_dimension: int = DEFAULT_MAX_BUFFER_DIMENSION) -> None:
        self._max_buffer_dimension = max_buffer_dimension
        self._image_size = QSizeF(0, 0)
        self._display_size = QSizeF(0, 0)
        self._device_pixel_ratio: float = 1.0
        self._buffer_size = QSize(0, 0)

        self._view_center = QPointF(0, 0)
        self._view_scale: float = 1.0

        self._source_rect: Optional[QRectF] = None
        self._dest_rect: Optional[QRectF] = None

    # ─── State ────────────────────────────────────────────────────────────

    @property
    def image_size(self) -> QSizeF:
        return self._image_size

    @property
    def display_size(self) -> QSizeF:
        return self._display_size

    @property
    def device_pixel_ratio(self) -> float:
        return self._device_pixel_ratio

    @property
    def buffer_size(self) -> QSize:
        return self._buffer_size

    @property
    def view_center(self) -> QPointF:
        return QPointF(self._view_center)

    @property
    def view_scale(self) -> float:
        return self._view_scale

    @property
    def source_rect(self) -> Optional[QRectF]:
        return QRectF(self._source_rect) if self._source_rect is not None else None

    @property
    def dest_rect(self) -> Optional[QRectF]:
        return QRectF(self._dest_rect) if self._dest_rect is not None else None

    @property
    def is_ready(self) -> bool:
        return self._source_rect is not None and self._dest_rect is not None

    @property
    def fit_scale(self) -> float:
        """View scale at which the whole image fits the display."""
        img_w, img_h = self._image_size.width(), self._image_size.height()
        disp_w, disp_h = self._display_size.width(), self._display_size.height()
        if img_w <= 0 or img_h <= 0 or disp_w <= 0 or disp_h <= 0:
            return 1.0
        return min(disp_w / img_w, disp_h / img_h)

    @property
    def min_zoom(self) -> float:
        return max(self.MIN_ZOOM, self.fit_scale)

    @property
    def max_zoom(self) -> float:
        return max(self.MAX_ZOOM, self.fit_scale)

    # ─── Setup ────────────────────────────────────────────────────────────

    def set_image_size(self, width: float, height: float) -> None:
        """Attach a new image and reset the view to fit."""
        self._image_size = QSizeF(width, height)
        self.reset_to_fit()

    def resize(self, width: float, height: float, device_pixel_ratio: float = 1.0) -> None:
        """
        Handle a display size change.

        Recomputes the render buffer and resets the view to fit.
        """
        self._display_size = QSizeF(width, height)
        self._device_pixel_ratio = device_pixel_ratio
        self._buffer_size = compute_buffer_size(
            self._display_size, device_pixel_ratio, self._max_buffer_dimension
        )
        self.reset_to_fit()

    def reset_to_fit(self) -> None:
        """Center the image and zoom so it is fully visible."""
        self._view_center = QPointF(self._image_size.width() / 2, self._image_size.height() / 2)
        self._view_scale = self.fit_scale
        self.refresh()

    def refresh(self) -> None:
        """Recompute and cache the source and letterbox rectangles."""
        if (
            self._image_size.isEmpty()
            or self._display_size.isEmpty()
            or self._buffer_size.isEmpty()
        ):
            self._source_rect = None
            self._dest_rect = None
            return

        self._source_rect = compute_source_rect(
            self._view_center, self._view_scale, self._display_size, self._image_size
        )
        self._dest_rect = compute_letterbox(self._source_rect, self._buffer_size)

    # ─── Pan and Zoom ─────────────────────────────────────────────────────

    def set_view(self, center: QPointF, scale: Optional[float] = None) -> None:
        """Set center (and optionally scale), clamped to valid values."""
        if scale is not None:
            self._view_scale = self._clamp_scale(scale)
        self._view_center = self._clamp_center(center)
        self.refresh()

    def zoom_at(self, display_point: Optional[QPointF], factor: float) -> bool:
        """
        Zoom by factor keeping the image point under display_point fixed.

        Falls back to zooming around the view center when the pointer is
        outside the image. Returns True if the scale changed.
        """
        old_scale = self._view_scale
        new_scale = self._clamp_scale(old_scale * factor)
        if new_scale == old_scale:
            return False

        anchor = self.surface_to_image(display_point) if display_point is not None else None
        if anchor is None:
            anchor = QPointF(self._view_center)

        # anchor - (anchor - old_center) * (old_scale / new_scale)
        ratio = old_scale / new_scale
        new_center = QPointF(
            anchor.x() - (anchor.x() - self._view_center.x()) * ratio,
            anchor.y() - (anchor.y() - self._view_center.y()) * ratio,
        )
        self._view_scale = new_scale
        self._view_center = self._clamp_center(new_center)
        self.refresh()
        return True

    def _clamp_scale(self, scale: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, scale))

    def _clamp_center(self, center: QPointF) -> QPointF:
        """Keep the center where the visible rectangle stays inside the image."""
        img_w, img_h = self._image_size.width(), self._image_size.height()
        if self._view_scale <= 0 or self._display_size.isEmpty():
            return QPointF(
                min(max(center.x(), 0.0), img_w), min(max(center.y(), 0.0), img_h)
            )
        half_w = min(self._display_size.width() / self._view_scale, img_w) / 2
        half_h = min(self._display_size.height() / self._view_scale, img_h) / 2
        return QPointF(
            min(max(center.x(), half_w), img_w - half_w),
            min(max(center.y(), half_h), img_h - half_h),
        )

    # ─── Mapping ──────────────────────────────────────────────────────────

    def display_to_buffer(self, point: QPointF) -> QPointF:
        sx, sy = self._display_to_buffer_ratio()
        return QPointF(point.x() * sx, point.y() * sy)

    def buffer_to_display(self, point: QPointF) -> QPointF:
        sx, sy = self._display_to_buffer_ratio()
        return QPointF(point.x() / sx, point.y() / sy)

    def _display_to_buffer_ratio(self) -> Tuple[float, float]:
        disp_w, disp_h = self._display_size.width(), self._display_size.height()
        if disp_w <= 0 or disp_h <= 0:
            return 1.0, 1.0
        return self._buffer_size.width() / disp_w, self._buffer_size.height() / disp_h

    def image_to_surface(self, point: QPointF) -> Optional[QPointF]:
        """Image point to buffer point, None until the view is ready."""
        return image_to_surface(point, self._source_rect, self._dest_rect)

    def surface_to_image(self, display_point: QPointF) -> Optional[QPointF]:
        """Display point to image point, None over the letterbox padding."""
        return surface_to_image(
            display_point,
            self._source_rect,
            self._dest_rect,
            self._display_size,
            self._buffer_size,
        )

    def surface_to_image_clamped(self, display_point: QPointF) -> Optional[QPointF]:
        """
        Display point to image point, clamped to the image bounds.

        Used while dragging, where the pointer may wander over the padding
        or outside the widget.
        """
        if not self.is_ready:
            return None
        image_point = _buffer_to_image(
            self.display_to_buffer(display_point), self._source_rect, self._dest_rect
        )
        return self.clamp_to_image(image_point)

    def buffer_to_image(self, point: QPointF) -> Optional[QPointF]:
        """Buffer point to image point without bounds checks."""
        if not self.is_ready:
            return None
        return _buffer_to_image(point, self._source_rect, self._dest_rect)

    def clamp_to_image(self, point: QPointF) -> QPointF:
        return QPointF(
            min(max(point.x(), 0.0), self._image_size.width()),
            min(max(point.y(), 0.0), self._image_size.height()),
        )

    # ─── Scale Factors ────────────────────────────────────────────────────

    @property
    def surface_per_image_pixel(self) -> float:
        """Buffer pixels per image pixel in the current view."""
        if not self.is_ready:
            return 1.0
        return self._dest_rect.width() / self._source_rect.width()

    @property
    def buffer_per_display_pixel(self) -> float:
        """Stroke scale for live drawing (device pixel ratio after the cap)."""
        return self._display_to_buffer_ratio()[0]

    def image_distance_for_buffer_pixels(self, buffer_pixels: float) -> float:
        """Convert a buffer-pixel radius to image pixels (for hit tolerance)."""
        return buffer_pixels / self.surface_per_image_pixel

    def image_distance_for_display_pixels(self, display_pixels: float) -> float:
        """Convert a display-pixel distance to image pixels (for nudging, panning)."""
        return display_pixels * self.buffer_per_display_pixel / self.surface_per_image_pixel
