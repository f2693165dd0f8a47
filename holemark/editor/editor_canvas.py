"""
Editor canvas widget for HoleMark.

The EditorCanvas is the drawing area that displays:
- The target photo through the pan/zoom viewport
- The reference line and every shot group overlay
- Info boxes with each group's results

Supports:
- Zoom toward the pointer (mouse wheel, Ctrl+plus/minus)
- Pan (panning mode, or hold Space and drag)
- Mode-based interaction (delegated to the InteractionController)

Frames are rendered into an offscreen buffer sized by the viewport
(display size times device pixel ratio, capped) and then blitted to the
widget. Redraws go through update(), so many pointer moves between two
frames produce a single repaint.
"""

from typing import Optional

from PySide6.QtCore import QEvent, QPointF, QRectF, Qt, Signal, Slot
from PySide6.QtGui import (
    QColor,
    QFocusEvent,
    QImage,
    QKeyEvent,
    QMouseEvent,
    QPainter,
    QWheelEvent,
)
from PySide6.QtWidgets import QWidget

from holemark.core.viewport import ViewportTransform
from holemark.editor.interaction import InteractionController, Mode
from holemark.editor.render import RenderPipeline
from holemark.editor.session import MeasurementSettings, Session
from holemark.services.logging_service import get_logger


_MODE_CURSORS = {
    Mode.LOADING: Qt.CursorShape.ArrowCursor,
    Mode.SCALING: Qt.CursorShape.CrossCursor,
    Mode.PLACING_HOLES: Qt.CursorShape.CrossCursor,
    Mode.PLACING_AIM: Qt.CursorShape.CrossCursor,
    Mode.SELECTING_HOLE: Qt.CursorShape.ArrowCursor,
    Mode.PANNING: Qt.CursorShape.OpenHandCursor,
}


class EditorCanvas(QWidget):
    """
    Canvas widget for calibrating a target photo and marking shots.

    Signals:
        zoom_changed: Emitted with the view scale when zoom/pan/fit changes.
        mode_changed: Emitted with the new Mode.
        selection_changed: Emitted with the selected hole index or None.
        model_changed: Emitted when groups, holes or calibration change.
        image_changed: Emitted when a new image is loaded.
        calibration_failed: Emitted with a user-facing message.
    """

    zoom_changed = Signal(float)
    mode_changed = Signal(object)
    selection_changed = Signal(object)
    model_changed = Signal()
    image_changed = Signal()
    calibration_failed = Signal(str)

    def __init__(
        self,
        settings: Optional[MeasurementSettings] = None,
        max_buffer_dimension: int = ViewportTransform.DEFAULT_MAX_BUFFER_DIMENSION,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._session = Session(settings)
        self._viewport = ViewportTransform(max_buffer_dimension)
        self._controller = InteractionController(self._session, self._viewport, self)
        self._pipeline = RenderPipeline()

        # Offscreen frame, reallocated when the buffer size changes
        self._buffer: Optional[QImage] = None

        # Mode to restore when the Space key is released
        self._space_restore_mode: Optional[Mode] = None

        self._setup_widget()
        self._connect_signals()

    def _setup_widget(self) -> None:
        """Configure widget properties."""
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(200, 200)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent)

    def _connect_signals(self) -> None:
        controller = self._controller
        controller.redraw_requested.connect(self.update)
        controller.capture_changed.connect(self._on_capture_changed)
        controller.mode_changed.connect(self._on_mode_changed)
        controller.view_changed.connect(self.zoom_changed)
        controller.selection_changed.connect(self.selection_changed)
        controller.model_changed.connect(self.model_changed)
        controller.calibration_failed.connect(self.calibration_failed)

    # ─── Accessors ────────────────────────────────────────────────────────

    @property
    def session(self) -> Session:
        return self._session

    @property
    def viewport(self) -> ViewportTransform:
        return self._viewport

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def pipeline(self) -> RenderPipeline:
        return self._pipeline

    @property
    def image(self) -> Optional[QImage]:
        return self._session.image

    @property
    def mode(self) -> Mode:
        return self._controller.mode

    # ─── Image Management ─────────────────────────────────────────────────

    def set_image(self, image: QImage) -> None:
        """
        Load a new image into the canvas.

        Clears groups and calibration, fits the view and enters scaling mode.
        """
        self._pipeline.clear_cache()
        self._space_restore_mode = None
        self._sync_viewport_size()
        self._controller.load_image(image)
        self.image_changed.emit()

    # ─── Modes and View ───────────────────────────────────────────────────

    def set_mode(self, mode: Mode) -> bool:
        return self._controller.set_mode(mode)

    def zoom_in(self) -> None:
        self._controller.zoom_in()

    def zoom_out(self) -> None:
        self._controller.zoom_out()

    def zoom_to_fit(self) -> None:
        self._controller.fit_view()

    def _sync_viewport_size(self) -> None:
        self._controller.resize(self.width(), self.height(), self.devicePixelRatioF())

    @Slot(object)
    def _on_mode_changed(self, mode: Mode) -> None:
        self.setCursor(_MODE_CURSORS.get(mode, Qt.CursorShape.ArrowCursor))
        self.mode_changed.emit(mode)

    @Slot(bool)
    def _on_capture_changed(self, captured: bool) -> None:
        if captured:
            self.grabMouse()
            if self._controller.mode == Mode.PANNING:
                self.setCursor(Qt.CursorShape.ClosedHandCursor)
        else:
            self.releaseMouse()
            self.setCursor(_MODE_CURSORS.get(self._controller.mode, Qt.CursorShape.ArrowCursor))

    # ─── Rendering ────────────────────────────────────────────────────────

    def render_frame(self) -> QImage:
        """Render the current view into the offscreen buffer and return it."""
        size = self._viewport.buffer_size
        if size.isEmpty():
            return QImage()

        if self._buffer is None or self._buffer.size() != size:
            self._buffer = QImage(size, QImage.Format.Format_ARGB32_Premultiplied)

        painter = QPainter(self._buffer)
        try:
            self._pipeline.render(
                painter, self._session, self._viewport, self._controller.selected_hole
            )
        finally:
            painter.end()
        return self._buffer

    # ─── Event Handlers ───────────────────────────────────────────────────

    def paintEvent(self, event) -> None:
        """Render the frame offscreen and blit it to the widget."""
        painter = QPainter(self)
        painter.fillRect(self.rect(), self._pipeline.style.background_color)

        if not self._session.has_image:
            painter.setPen(QColor(100, 100, 100))
            painter.drawText(
                self.rect(),
                Qt.AlignmentFlag.AlignCenter,
                "Open a target photo to begin (Ctrl+O)",
            )
            painter.end()
            return

        frame = self.render_frame()
        if not frame.isNull():
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
            painter.drawImage(QRectF(self.rect()), frame)
        painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._controller.on_pointer_press(event.position())
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._controller.is_dragging and not (event.buttons() & Qt.MouseButton.LeftButton):
            # The release went somewhere else
            self._controller.on_capture_lost()
            return
        self._controller.on_pointer_move(event.position())

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._controller.on_pointer_release(event.position())
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Zoom toward the pointer."""
        delta = event.angleDelta().y()
        if delta and self._controller.on_wheel(event.position(), delta):
            event.accept()
        else:
            event.ignore()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = event.key()
        modifiers = event.modifiers()

        # Hold Space to pan temporarily
        if key == Qt.Key.Key_Space and not event.isAutoRepeat():
            if self._controller.mode != Mode.PANNING and self._session.has_image:
                previous = self._controller.mode
                if self._controller.set_mode(Mode.PANNING):
                    self._space_restore_mode = previous
            return

        if modifiers & Qt.KeyboardModifier.ControlModifier:
            if key in (Qt.Key.Key_Plus, Qt.Key.Key_Equal):
                self.zoom_in()
                return
            if key == Qt.Key.Key_Minus:
                self.zoom_out()
                return
            if key == Qt.Key.Key_0:
                self.zoom_to_fit()
                return

        if self._controller.on_key_press(key):
            return

        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:
        if event.key() == Qt.Key.Key_Space and not event.isAutoRepeat():
            if self._space_restore_mode is not None:
                restore = self._space_restore_mode
                self._space_restore_mode = None
                self._controller.set_mode(restore)
            return
        super().keyReleaseEvent(event)

    def focusOutEvent(self, event: QFocusEvent) -> None:
        if self._controller.is_dragging:
            self._controller.on_capture_lost()
        super().focusOutEvent(event)

    def event(self, event: QEvent) -> bool:
        if event.type() == QEvent.Type.UngrabMouse:
            self._controller.on_capture_lost()
            return True
        return super().event(event)

    def resizeEvent(self, event) -> None:
        """Rebuild the buffer geometry for the new size and refit the view."""
        super().resizeEvent(event)
        self._sync_viewport_size()
