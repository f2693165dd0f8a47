"""
Pointer and keyboard interaction for HoleMark editor.

The InteractionController turns canvas input into edits of the Session.
It owns exactly one Mode (what a click means) and exactly one DragKind
(what a pointer move means right now), so panning, reference-line
drawing, hole dragging and info-box dragging can never overlap.

Pointer positions arrive in display (widget) coordinates and are mapped
through the ViewportTransform. Every edit is followed by recomputation of
the affected group before the redraw is requested, so results on screen
are never stale.

Modes:
- LOADING: no image yet
- SCALING: drag to draw the reference line; release calibrates
- PLACING_HOLES: click adds a hole to the active group
- PLACING_AIM: click sets the aiming point, then back to PLACING_HOLES
- SELECTING_HOLE: click selects, drag moves, arrows nudge, Delete removes
- PANNING: drag moves the view
"""

from enum import Enum, auto
from typing import Optional

from PySide6.QtCore import QLineF, QObject, QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QImage

from holemark.core.viewport import ViewportTransform
from holemark.editor.annotations import ReferenceLine, ShotGroup
from holemark.editor.session import Session
from holemark.services.logging_service import get_logger


class Mode(Enum):
    """Global interaction mode."""
    LOADING = auto()
    SCALING = auto()
    PLACING_HOLES = auto()
    PLACING_AIM = auto()
    SELECTING_HOLE = auto()
    PANNING = auto()


# Modes that only make sense once a scale exists
CALIBRATED_MODES = frozenset({Mode.PLACING_HOLES, Mode.PLACING_AIM, Mode.SELECTING_HOLE})


class DragKind(Enum):
    """The drag operation in progress, if any."""
    NONE = auto()
    PAN = auto()
    REFERENCE_LINE = auto()
    HOLE = auto()
    INFO_BOX = auto()


_NUDGE_DIRECTIONS = {
    Qt.Key.Key_Left: (-1, 0),
    Qt.Key.Key_Right: (1, 0),
    Qt.Key.Key_Up: (0, -1),
    Qt.Key.Key_Down: (0, 1),
}


class InteractionController(QObject):
    """
    State machine mapping pointer/keyboard input to session edits.

    Signals:
        mode_changed: Emitted with the new Mode.
        selection_changed: Emitted with the selected hole index or None.
        model_changed: Emitted after groups, holes or calibration change.
        view_changed: Emitted with the new view scale after pan/zoom/resize.
        redraw_requested: The canvas should repaint (coalesced by Qt).
        capture_changed: True when a drag starts (grab the pointer),
            False when it ends.
        calibration_failed: Emitted with a user-facing message.
        scale_changed: Emitted with the new px-per-unit scale.
    """

    mode_changed = Signal(object)
    selection_changed = Signal(object)
    model_changed = Signal()
    view_changed = Signal(float)
    redraw_requested = Signal()
    capture_changed = Signal(bool)
    calibration_failed = Signal(str)
    scale_changed = Signal(float)

    # Hit radius in buffer pixels, so the target size is constant on screen
    HIT_RADIUS = 12.0
    # Arrow-key nudge in display pixels
    NUDGE_STEP = 1.0
    # Pointer travel (display pixels) that turns a press into a drag
    DRAG_THRESHOLD = 4.0
    # Shortest reference line (image pixels) accepted for calibration
    MIN_REFERENCE_PIXELS = 5.0
    ZOOM_STEP = 1.1

    def __init__(
        self,
        session: Session,
        viewport: ViewportTransform,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._session = session
        self._viewport = viewport

        self._mode: Mode = Mode.LOADING
        self._selected_hole: Optional[int] = None

        # Transient pointer state
        self._drag: DragKind = DragKind.NONE
        self._press_pos: Optional[QPointF] = None
        self._suppress_click: bool = False
        self._pan_origin: Optional[QPointF] = None
        self._pan_center: Optional[QPointF] = None
        self._pan_factor: float = 1.0
        self._info_box_grab: Optional[QPointF] = None

    # ─── State ────────────────────────────────────────────────────────────

    @property
    def session(self) -> Session:
        return self._session

    @property
    def viewport(self) -> ViewportTransform:
        return self._viewport

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def drag(self) -> DragKind:
        return self._drag

    @property
    def is_dragging(self) -> bool:
        return self._drag != DragKind.NONE

    @property
    def selected_hole(self) -> Optional[int]:
        """Selected hole index in the active group, None if stale or unset."""
        group = self._session.active_group
        if group is None or not group.has_hole(self._selected_hole):
            return None
        return self._selected_hole

    def set_mode(self, mode: Mode) -> bool:
        """
        Switch interaction mode.

        Hole, aim and selection modes need a calibrated scale; without one
        the request is ignored and False is returned.
        """
        if mode != Mode.LOADING and not self._session.has_image:
            return False
        if mode in CALIBRATED_MODES and not self._session.is_calibrated:
            self._logger.debug(f"Ignoring {mode.name}: no scale yet")
            return False
        if self.is_dragging:
            self._cancel_drag()
        if mode == self._mode:
            return True

        self._mode = mode
        self._logger.debug(f"Mode changed to {mode.name}")
        self.mode_changed.emit(mode)
        self.redraw_requested.emit()
        return True

    def begin_scaling(self) -> bool:
        """Explicitly (re-)enter calibration; the current scale stays until replaced."""
        return self.set_mode(Mode.SCALING)

    def _set_selection(self, index: Optional[int]) -> None:
        if index == self._selected_hole:
            return
        self._selected_hole = index
        self.selection_changed.emit(index)

    # ─── Image ────────────────────────────────────────────────────────────

    def load_image(self, image: QImage) -> None:
        """Start a session on a decoded image and enter calibration."""
        self._cancel_drag()
        self._session.load_image(image)
        self._viewport.set_image_size(image.width(), image.height())
        self._set_selection(None)
        self._mode = Mode.LOADING
        self.set_mode(Mode.SCALING)
        self.model_changed.emit()
        self.view_changed.emit(self._viewport.view_scale)
        self.redraw_requested.emit()

    # ─── Pointer Input ────────────────────────────────────────────────────

    def on_pointer_press(self, pos: QPointF) -> bool:
        """
        Handle a primary-button press in display coordinates.

        Checked in priority order: the active group's info box, the
        selected hole (selection mode), panning, reference line (scaling).
        Returns True if a drag started.
        """
        if not self._session.has_image or self._mode == Mode.LOADING:
            return False

        self._press_pos = QPointF(pos)
        self._suppress_click = False

        group = self._session.active_group
        buffer_pos = self._viewport.display_to_buffer(pos)
        if (
            group is not None
            and group.results_valid
            and group.info_box_rect is not None
            and group.info_box_rect.contains(buffer_pos)
        ):
            self._info_box_grab = buffer_pos - group.info_box_rect.topLeft()
            return self._begin_drag(DragKind.INFO_BOX)

        if self._mode == Mode.SELECTING_HOLE and self._is_over_selected_hole(pos):
            return self._begin_drag(DragKind.HOLE)

        if self._mode == Mode.PANNING:
            self._pan_origin = QPointF(pos)
            self._pan_center = self._viewport.view_center
            self._pan_factor = self._viewport.image_distance_for_display_pixels(1.0)
            return self._begin_drag(DragKind.PAN)

        if self._mode == Mode.SCALING:
            start = self._viewport.surface_to_image(pos)
            if start is None:
                return False
            self._session.reference_line = ReferenceLine(start)
            return self._begin_drag(DragKind.REFERENCE_LINE)

        return False

    def on_pointer_move(self, pos: QPointF) -> None:
        """Handle pointer motion; state updates on every event, redraws coalesce."""
        if self._press_pos is not None and not self._suppress_click:
            if QLineF(self._press_pos, pos).length() > self.DRAG_THRESHOLD:
                self._suppress_click = True

        if self._drag == DragKind.PAN:
            delta = pos - self._pan_origin
            self._viewport.set_view(self._pan_center - delta * self._pan_factor)
            self.view_changed.emit(self._viewport.view_scale)
            self.redraw_requested.emit()

        elif self._drag == DragKind.REFERENCE_LINE:
            line = self._session.reference_line
            end = self._viewport.surface_to_image_clamped(pos)
            if line is not None and end is not None:
                line.end = end
                self.redraw_requested.emit()

        elif self._drag == DragKind.HOLE:
            self._drag_hole(pos)

        elif self._drag == DragKind.INFO_BOX:
            self._drag_info_box(pos)

    def on_pointer_release(self, pos: QPointF) -> None:
        """
        Finish any drag, then treat the press/release as a click unless a
        drag happened in between.
        """
        if self._drag != DragKind.NONE:
            self._finish_drag()

        is_click = self._press_pos is not None and not self._suppress_click
        self._press_pos = None
        self._suppress_click = False

        if is_click:
            self.handle_click(pos)

    def on_capture_lost(self) -> None:
        """Pointer capture was lost: an implicit release without a click."""
        if self._drag != DragKind.NONE:
            self._logger.debug(f"Pointer capture lost during {self._drag.name} drag")
            self._finish_drag()
        self._press_pos = None
        self._suppress_click = False

    def on_wheel(self, pos: QPointF, delta: float) -> bool:
        """Zoom toward the pointer; positive delta zooms in."""
        if not self._session.has_image or delta == 0:
            return False
        factor = self.ZOOM_STEP if delta > 0 else 1 / self.ZOOM_STEP
        return self.zoom_at(pos, factor)

    # ─── Drags ────────────────────────────────────────────────────────────

    def _begin_drag(self, kind: DragKind) -> bool:
        self._drag = kind
        self._suppress_click = True
        self.capture_changed.emit(True)
        self.redraw_requested.emit()
        return True

    def _finish_drag(self) -> None:
        kind = self._drag
        self._drag = DragKind.NONE
        self._info_box_grab = None
        self._pan_origin = None
        self._pan_center = None
        self.capture_changed.emit(False)

        if kind == DragKind.REFERENCE_LINE:
            self.calculate_scale()
        elif kind == DragKind.HOLE:
            self.model_changed.emit()
        self.redraw_requested.emit()

    def _cancel_drag(self) -> None:
        """Abandon a drag without finishing it (mode switch, new image)."""
        if self._drag == DragKind.NONE:
            return
        if self._drag == DragKind.REFERENCE_LINE:
            self._session.discard_draft_line()
        self._drag = DragKind.NONE
        self._info_box_grab = None
        self._pan_origin = None
        self._pan_center = None
        self._press_pos = None
        self._suppress_click = False
        self.capture_changed.emit(False)

    def _is_over_selected_hole(self, pos: QPointF) -> bool:
        group = self._session.active_group
        index = self.selected_hole
        if group is None or index is None:
            return False
        point = self._viewport.surface_to_image(pos)
        if point is None:
            return False
        hole = group.holes[index].pixel
        tolerance = self._viewport.image_distance_for_buffer_pixels(self.HIT_RADIUS)
        dx = point.x() - hole.x()
        dy = point.y() - hole.y()
        return dx * dx + dy * dy <= tolerance * tolerance

    def _drag_hole(self, pos: QPointF) -> None:
        group = self._session.active_group
        index = self.selected_hole
        if group is None or index is None:
            self._cancel_drag()
            return
        point = self._viewport.surface_to_image_clamped(pos)
        if point is None:
            return
        group.move_hole(index, point, self._session.scale)
        self._session.recompute(group)
        self.redraw_requested.emit()

    def _drag_info_box(self, pos: QPointF) -> None:
        group = self._session.active_group
        if group is None or group.info_box_rect is None or self._info_box_grab is None:
            self._cancel_drag()
            return

        size = group.info_box_rect.size()
        buffer = self._viewport.buffer_size
        top_left = self._viewport.display_to_buffer(pos) - self._info_box_grab
        top_left = QPointF(
            min(max(top_left.x(), 0.0), max(buffer.width() - size.width(), 0.0)),
            min(max(top_left.y(), 0.0), max(buffer.height() - size.height(), 0.0)),
        )
        anchor = self._viewport.buffer_to_image(top_left)
        if anchor is None:
            return
        group.info_box_anchor = anchor
        group.info_box_rect = QRectF(top_left, size)
        self.redraw_requested.emit()

    # ─── Clicks ───────────────────────────────────────────────────────────

    def handle_click(self, pos: QPointF) -> bool:
        """Apply a click (display coordinates) according to the current mode."""
        point = self._viewport.surface_to_image(pos)
        if point is None:
            return False

        if self._mode == Mode.PLACING_HOLES:
            return self.place_hole(point)
        if self._mode == Mode.PLACING_AIM:
            return self.place_aiming_point(point)
        if self._mode == Mode.SELECTING_HOLE:
            self.select_hole_at(point)
            return True
        return False

    def place_hole(self, point: QPointF) -> bool:
        """Append a hole (image coordinates) to the active group and select it."""
        group = self._session.active_group
        if group is None or not self._session.is_calibrated:
            return False
        index = group.add_hole(point, self._session.scale)
        self._session.recompute(group)
        self._set_selection(index)
        self.model_changed.emit()
        self.redraw_requested.emit()
        return True

    def place_aiming_point(self, point: QPointF) -> bool:
        """Set or replace the active group's aiming point, then resume hole placement."""
        group = self._session.active_group
        if group is None or not self._session.is_calibrated:
            return False
        group.set_aiming_point(point, self._session.scale)
        self._session.recompute(group)
        self.model_changed.emit()
        self.set_mode(Mode.PLACING_HOLES)
        self.redraw_requested.emit()
        return True

    def select_hole_at(self, point: QPointF) -> Optional[int]:
        """
        Select the hole nearest to an image point within the hit radius.

        Ties go to the most recently placed hole. No hit clears the selection.
        """
        group = self._session.active_group
        best: Optional[int] = None
        if group is not None:
            tolerance = self._viewport.image_distance_for_buffer_pixels(self.HIT_RADIUS)
            best_distance = tolerance * tolerance
            for index, hole in enumerate(group.holes):
                pixel = hole.pixel
                dx = point.x() - pixel.x()
                dy = point.y() - pixel.y()
                distance = dx * dx + dy * dy
                if distance <= best_distance:
                    best = index
                    best_distance = distance

        self._set_selection(best)
        self.redraw_requested.emit()
        return best

    # ─── Keyboard ─────────────────────────────────────────────────────────

    def on_key_press(self, key: Qt.Key) -> bool:
        """
        Handle keys for the selected hole.

        Returns True if the event was handled.
        """
        if self._mode != Mode.SELECTING_HOLE:
            return False
        if self.selected_hole is None:
            self._set_selection(None)
            return False

        if key in _NUDGE_DIRECTIONS:
            dx, dy = _NUDGE_DIRECTIONS[key]
            return self.nudge_selected_hole(dx, dy)

        if key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            return self.delete_selected_hole()

        return False

    def nudge_selected_hole(self, dx: int, dy: int) -> bool:
        """Move the selected hole by NUDGE_STEP display pixels per unit of dx/dy."""
        group = self._session.active_group
        index = self.selected_hole
        if group is None or index is None:
            return False

        step = self._viewport.image_distance_for_display_pixels(self.NUDGE_STEP)
        pixel = group.holes[index].pixel
        target = self._viewport.clamp_to_image(
            QPointF(pixel.x() + dx * step, pixel.y() + dy * step)
        )
        group.move_hole(index, target, self._session.scale)
        self._session.recompute(group)
        self.model_changed.emit()
        self.redraw_requested.emit()
        return True

    def delete_selected_hole(self) -> bool:
        group = self._session.active_group
        index = self.selected_hole
        if group is None or index is None:
            return False

        group.remove_hole(index)
        self._session.recompute(group)
        if group.hole_count == 0:
            self._set_selection(None)
        else:
            self._set_selection(min(index, group.hole_count - 1))
        self.model_changed.emit()
        self.redraw_requested.emit()
        return True

    # ─── Calibration ──────────────────────────────────────────────────────

    def calculate_scale(self) -> bool:
        """
        Derive the scale from the reference line and reference length.

        On failure the rejected line is discarded, the previous calibrated
        line and scale (if any) stay in place and the controller stays in
        SCALING.
        """
        line = self._session.reference_line
        length = self._session.settings.reference_length

        error = None
        if line is None:
            error = "Draw a reference line across a known length first."
        elif length <= 0:
            error = "Reference length must be greater than zero."
        elif line.pixel_length < self.MIN_REFERENCE_PIXELS:
            error = (
                f"Reference line is too short ({line.pixel_length:.1f} px); "
                f"draw at least {self.MIN_REFERENCE_PIXELS:.0f} px."
            )

        if error is not None:
            self._session.discard_draft_line()
            self._logger.warning(f"Calibration rejected: {error}")
            self.calibration_failed.emit(error)
            self.set_mode(Mode.SCALING)
            self.redraw_requested.emit()
            return False

        scale = line.pixel_length / length
        self._session.apply_scale(scale)
        self.scale_changed.emit(scale)
        self.model_changed.emit()
        self.set_mode(Mode.PLACING_HOLES)
        self.redraw_requested.emit()
        return True

    def update_settings(self, **changes) -> None:
        """
        Apply measurement settings.

        Reference changes clear the calibration and return to SCALING;
        anything else recomputes all groups.
        """
        if self._session.update_settings(**changes):
            self._set_selection(None)
            if self._session.has_image:
                self.set_mode(Mode.SCALING)
        self.model_changed.emit()
        self.redraw_requested.emit()

    # ─── Groups ───────────────────────────────────────────────────────────

    def add_group(self) -> Optional[ShotGroup]:
        if not self._session.has_image:
            return None
        group = self._session.add_group()
        self._set_selection(None)
        self.model_changed.emit()
        self.redraw_requested.emit()
        return group

    def delete_group(self, group_id: Optional[int] = None) -> Optional[ShotGroup]:
        """Delete a group (the active one by default); returns the new active group."""
        if not self._session.has_image:
            return None
        if group_id is None:
            group_id = self._session.active_group_id
        active = self._session.delete_group(group_id)
        self._set_selection(None)
        self.model_changed.emit()
        self.redraw_requested.emit()
        return active

    def set_active_group(self, group_id: int) -> None:
        if group_id == self._session.active_group_id:
            return
        self._session.set_active_group(group_id)
        self._set_selection(None)
        self.model_changed.emit()
        self.redraw_requested.emit()

    # ─── View ─────────────────────────────────────────────────────────────

    def zoom_at(self, pos: Optional[QPointF], factor: float) -> bool:
        if not self._viewport.zoom_at(pos, factor):
            return False
        self.view_changed.emit(self._viewport.view_scale)
        self.redraw_requested.emit()
        return True

    def set_zoom(self, scale: float) -> None:
        """Set an absolute view scale around the current center."""
        self._viewport.set_view(self._viewport.view_center, scale)
        self.view_changed.emit(self._viewport.view_scale)
        self.redraw_requested.emit()

    def zoom_in(self) -> bool:
        return self.zoom_at(None, self.ZOOM_STEP * self.ZOOM_STEP)

    def zoom_out(self) -> bool:
        return self.zoom_at(None, 1 / (self.ZOOM_STEP * self.ZOOM_STEP))

    def fit_view(self) -> None:
        self._viewport.reset_to_fit()
        self.view_changed.emit(self._viewport.view_scale)
        self.redraw_requested.emit()

    def resize(self, width: float, height: float, device_pixel_ratio: float) -> None:
        """Display size changed: rebuild the buffer geometry and refit."""
        self._viewport.resize(width, height, device_pixel_ratio)
        self.view_changed.emit(self._viewport.view_scale)
        self.redraw_requested.emit()
