"""
Controller tests run on a 1000x800 image in a 500x400 display at DPR 1,
so display (x, y) maps to image (2x, 2y).
"""

import pytest
from PySide6.QtCore import QPointF, Qt

from holemark.editor.interaction import DragKind, Mode
from holemark.editor.render import RenderPipeline, render_to_image


def click(ctrl, x, y):
    ctrl.on_pointer_press(QPointF(x, y))
    ctrl.on_pointer_release(QPointF(x, y))


def drag(ctrl, start, end):
    ctrl.on_pointer_press(QPointF(*start))
    ctrl.on_pointer_move(QPointF(*end))
    ctrl.on_pointer_release(QPointF(*end))


def record(signal):
    received = []
    signal.connect(lambda *args: received.append(args[0] if args else None))
    return received


@pytest.fixture
def calibrated(controller):
    """2 in reference drawn as a 200 px line: 100 px/in."""
    controller.update_settings(reference_length=2.0)
    drag(controller, (10, 10), (110, 10))
    assert controller.session.scale == pytest.approx(100.0)
    return controller


# ─── Modes ────────────────────────────────────────────────────────────────────

def test_new_image_starts_in_scaling(controller):
    assert controller.mode == Mode.SCALING
    assert controller.drag == DragKind.NONE


def test_hole_modes_need_a_scale(controller):
    assert controller.set_mode(Mode.PLACING_HOLES) is False
    assert controller.set_mode(Mode.SELECTING_HOLE) is False
    assert controller.mode == Mode.SCALING
    assert controller.set_mode(Mode.PANNING) is True


def test_mode_change_is_signalled(calibrated):
    modes = record(calibrated.mode_changed)
    calibrated.set_mode(Mode.SELECTING_HOLE)
    calibrated.set_mode(Mode.SELECTING_HOLE)
    assert modes == [Mode.SELECTING_HOLE]


# ─── Calibration ──────────────────────────────────────────────────────────────

def test_calibration_success(controller):
    scales = record(controller.scale_changed)
    controller.update_settings(reference_length=2.0)
    drag(controller, (10, 10), (110, 10))

    assert scales == [pytest.approx(100.0)]
    assert controller.mode == Mode.PLACING_HOLES
    # The release that ended the drag is not a placement click
    assert controller.session.active_group.hole_count == 0


def test_short_reference_line_is_rejected(controller):
    errors = record(controller.calibration_failed)
    drag(controller, (10, 10), (11, 10))

    assert len(errors) == 1
    assert controller.session.scale is None
    assert controller.session.reference_line is None
    assert controller.mode == Mode.SCALING


def test_failed_recalibration_keeps_previous_scale(calibrated):
    assert calibrated.begin_scaling()
    drag(calibrated, (10, 10), (10, 11))
    assert calibrated.session.scale == pytest.approx(100.0)
    assert calibrated.mode == Mode.SCALING


def test_failed_recalibration_restores_calibrated_line(calibrated):
    committed = calibrated.session.reference_line
    calibrated.begin_scaling()
    drag(calibrated, (10, 50), (11, 50))

    line = calibrated.session.reference_line
    assert line is committed
    assert line.pixel_length / calibrated.session.scale == pytest.approx(2.0)


def test_mode_switch_mid_recalibration_restores_calibrated_line(calibrated):
    committed = calibrated.session.reference_line
    calibrated.begin_scaling()
    calibrated.on_pointer_press(QPointF(10, 50))
    calibrated.on_pointer_move(QPointF(60, 50))
    assert calibrated.session.reference_line is not committed

    calibrated.set_mode(Mode.PANNING)

    session = calibrated.session
    assert calibrated.drag == DragKind.NONE
    assert session.reference_line is committed
    assert session.reference_line.pixel_length / session.scale == pytest.approx(2.0)


def test_abandoned_first_calibration_leaves_no_line(controller):
    controller.on_pointer_press(QPointF(10, 10))
    controller.on_pointer_move(QPointF(110, 10))
    controller.set_mode(Mode.PANNING)
    assert controller.session.reference_line is None
    assert not controller.session.is_calibrated


def test_reference_drag_starts_only_on_image(controller):
    controller.viewport.set_image_size(1000, 500)  # letterboxed, padding at top
    assert controller.on_pointer_press(QPointF(10, 10)) is False
    assert controller.drag == DragKind.NONE


def test_reference_length_change_requires_recalibration(calibrated):
    calibrated.update_settings(reference_length=3.0)
    assert not calibrated.session.is_calibrated
    assert calibrated.mode == Mode.SCALING


def test_distance_change_keeps_mode_and_scale(calibrated):
    calibrated.update_settings(target_distance=50.0)
    assert calibrated.session.scale == pytest.approx(100.0)
    assert calibrated.mode == Mode.PLACING_HOLES


# ─── Placement ────────────────────────────────────────────────────────────────

def test_click_places_and_selects_hole(calibrated):
    click(calibrated, 50, 50)
    group = calibrated.session.active_group
    assert group.hole_count == 1
    assert group.holes[0].pixel == QPointF(100, 100)
    assert calibrated.selected_hole == 0
    assert group.results_valid


def test_moving_press_is_not_a_click(calibrated):
    drag(calibrated, (50, 50), (60, 50))
    assert calibrated.session.active_group.hole_count == 0


def test_jitter_below_threshold_still_clicks(calibrated):
    drag(calibrated, (50, 50), (51, 50))
    group = calibrated.session.active_group
    assert group.hole_count == 1
    assert group.holes[0].pixel == QPointF(102, 100)


def test_click_over_padding_is_ignored(calibrated):
    calibrated.viewport.set_image_size(1000, 500)
    click(calibrated, 10, 10)
    assert calibrated.session.active_group.hole_count == 0


def test_aiming_point_then_back_to_holes(calibrated):
    click(calibrated, 50, 50)
    assert calibrated.set_mode(Mode.PLACING_AIM)
    click(calibrated, 50, 100)

    group = calibrated.session.active_group
    assert group.aiming_point.pixel == QPointF(100, 200)
    assert calibrated.mode == Mode.PLACING_HOLES
    assert group.results.offset_distance == pytest.approx(1.0)


def test_second_aim_replaces_first(calibrated):
    calibrated.set_mode(Mode.PLACING_AIM)
    click(calibrated, 50, 100)
    calibrated.set_mode(Mode.PLACING_AIM)
    click(calibrated, 70, 100)
    assert calibrated.session.active_group.aiming_point.pixel == QPointF(140, 200)


# ─── Selection ────────────────────────────────────────────────────────────────

def test_selection_tie_goes_to_latest_hole(calibrated):
    click(calibrated, 50, 50)
    click(calibrated, 50, 50)
    calibrated.set_mode(Mode.SELECTING_HOLE)

    click(calibrated, 200, 200)
    assert calibrated.selected_hole is None

    click(calibrated, 50, 50)
    assert calibrated.selected_hole == 1


def test_selection_uses_hit_radius(calibrated):
    click(calibrated, 50, 50)
    calibrated.set_mode(Mode.SELECTING_HOLE)
    # 12 buffer px = 24 image px at this zoom
    assert calibrated.select_hole_at(QPointF(120, 100)) == 0
    assert calibrated.select_hole_at(QPointF(130, 100)) is None


def test_drag_selected_hole(calibrated):
    click(calibrated, 50, 50)
    calibrated.set_mode(Mode.SELECTING_HOLE)
    captures = record(calibrated.capture_changed)

    assert calibrated.on_pointer_press(QPointF(50, 50))
    assert calibrated.drag == DragKind.HOLE
    calibrated.on_pointer_move(QPointF(75, 60))
    calibrated.on_pointer_release(QPointF(75, 60))

    group = calibrated.session.active_group
    assert group.holes[0].pixel == QPointF(150, 120)
    assert group.results.centroid_pixel == QPointF(150, 120)
    assert calibrated.selected_hole == 0
    assert captures == [True, False]


def test_arrow_keys_nudge_selected_hole(calibrated):
    click(calibrated, 50, 50)
    calibrated.set_mode(Mode.SELECTING_HOLE)

    assert calibrated.on_key_press(Qt.Key.Key_Right)
    assert calibrated.on_key_press(Qt.Key.Key_Up)
    assert calibrated.session.active_group.holes[0].pixel == QPointF(102, 98)


def test_nudge_is_clamped_to_image(calibrated):
    click(calibrated, 0, 0)
    calibrated.set_mode(Mode.SELECTING_HOLE)
    calibrated.on_key_press(Qt.Key.Key_Left)
    assert calibrated.session.active_group.holes[0].pixel == QPointF(0, 0)


def test_keys_ignored_outside_selection_mode(calibrated):
    click(calibrated, 50, 50)
    assert calibrated.on_key_press(Qt.Key.Key_Delete) is False
    assert calibrated.session.active_group.hole_count == 1


def test_delete_clamps_then_clears_selection(calibrated):
    click(calibrated, 50, 50)
    click(calibrated, 100, 100)
    calibrated.set_mode(Mode.SELECTING_HOLE)
    assert calibrated.selected_hole == 1

    assert calibrated.on_key_press(Qt.Key.Key_Delete)
    assert calibrated.session.active_group.hole_count == 1
    assert calibrated.selected_hole == 0

    assert calibrated.on_key_press(Qt.Key.Key_Backspace)
    group = calibrated.session.active_group
    assert group.hole_count == 0
    assert calibrated.selected_hole is None
    assert not group.results_valid


# ─── Drags and capture ────────────────────────────────────────────────────────

def test_capture_loss_finishes_drag_without_click(controller):
    controller.update_settings(reference_length=2.0)
    controller.on_pointer_press(QPointF(10, 10))
    controller.on_pointer_move(QPointF(110, 10))

    controller.on_capture_lost()

    assert controller.drag == DragKind.NONE
    assert controller.session.scale == pytest.approx(100.0)
    # A late release must not turn into a placement click
    controller.on_pointer_release(QPointF(110, 10))
    assert controller.session.active_group.hole_count == 0


def test_pan_moves_view(controller):
    controller.zoom_at(QPointF(250, 200), 2.0)
    assert controller.viewport.view_center == QPointF(500, 400)
    controller.set_mode(Mode.PANNING)

    controller.on_pointer_press(QPointF(250, 200))
    assert controller.drag == DragKind.PAN
    controller.on_pointer_move(QPointF(200, 200))
    controller.on_pointer_release(QPointF(200, 200))

    assert controller.viewport.view_center.x() == pytest.approx(550)
    assert controller.viewport.view_center.y() == pytest.approx(400)


def test_wheel_zooms_toward_pointer(controller):
    before = controller.viewport.surface_to_image(QPointF(100, 100))
    assert controller.on_wheel(QPointF(100, 100), 120)
    after = controller.viewport.surface_to_image(QPointF(100, 100))
    assert after.x() == pytest.approx(before.x())
    assert after.y() == pytest.approx(before.y())
    assert controller.viewport.view_scale > controller.viewport.fit_scale


def test_info_box_drag(calibrated):
    click(calibrated, 250, 200)
    group = calibrated.session.active_group
    render_to_image(RenderPipeline(), calibrated.session, calibrated.viewport, calibrated.selected_hole)
    rect = group.info_box_rect
    assert rect is not None
    start = rect.topLeft() + QPointF(2, 2)
    anchor = group.info_box_anchor

    assert calibrated.on_pointer_press(start)
    assert calibrated.drag == DragKind.INFO_BOX
    calibrated.on_pointer_move(start - QPointF(10, 0))
    calibrated.on_pointer_release(start - QPointF(10, 0))

    assert group.info_box_anchor.x() == pytest.approx(anchor.x() - 20)
    assert group.info_box_anchor.y() == pytest.approx(anchor.y())
    # The drag must not place a hole
    assert group.hole_count == 1


# ─── Groups ───────────────────────────────────────────────────────────────────

def test_groups_keep_their_own_holes(calibrated):
    click(calibrated, 50, 50)
    first = calibrated.session.active_group
    second = calibrated.add_group()
    click(calibrated, 100, 100)

    assert first.hole_count == 1
    assert second.hole_count == 1
    assert calibrated.session.active_group is second


def test_delete_only_group_through_controller(calibrated):
    click(calibrated, 50, 50)
    replacement = calibrated.delete_group()
    assert len(calibrated.session.groups) == 1
    assert replacement.hole_count == 0
    assert calibrated.selected_hole is None


def test_switching_group_clears_selection(calibrated):
    first = calibrated.session.active_group
    calibrated.add_group()
    click(calibrated, 50, 50)
    assert calibrated.selected_hole == 0
    calibrated.set_active_group(first.id)
    assert calibrated.selected_hole is None
