import pytest
from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QColor

from holemark.core.units import AngularUnit, LinearUnit
from holemark.editor.render import RenderPipeline, clamp_rect, format_info_lines, render_to_image


@pytest.fixture
def scored(controller):
    """Scenario group: holes 5 in apart at 100 px/in, 100 yd."""
    session = controller.session
    session.apply_scale(100.0)
    group = session.active_group
    group.add_hole(QPointF(0, 0), session.scale)
    group.add_hole(QPointF(300, 400), session.scale)
    session.recompute(group)
    return controller


def test_info_lines_in_reference_units(scored):
    session = scored.session
    lines = format_info_lines(session.active_group, session.settings)
    assert lines == [
        "Group 1",
        "Shots: 2",
        "Mean radius: 2.50 in (2.39 MOA)",
        "Extreme spread: 5.00 in (4.77 MOA)",
    ]


def test_info_lines_follow_result_and_angular_units(scored):
    scored.update_settings(result_unit=LinearUnit.CENTIMETERS, angular_unit=AngularUnit.MRAD)
    session = scored.session
    lines = format_info_lines(session.active_group, session.settings)
    assert "Extreme spread: 12.70 cm (1.39 mrad)" in lines


def test_info_lines_include_offset(scored):
    session = scored.session
    group = session.active_group
    group.set_aiming_point(QPointF(150, 400), session.scale)
    session.recompute(group)
    lines = format_info_lines(group, session.settings)
    assert lines[-1] == "Offset: 2.00 in @ 90°"


def test_no_lines_without_results(controller):
    session = controller.session
    assert format_info_lines(session.active_group, session.settings) == []


def test_clamp_rect_moves_inside_bounds():
    bounds = QRectF(0, 0, 100, 100)
    assert clamp_rect(QRectF(90, -5, 20, 20), bounds) == QRectF(80, 0, 20, 20)
    assert clamp_rect(QRectF(10, 10, 20, 20), bounds) == QRectF(10, 10, 20, 20)


def test_letterbox_padding_uses_background(controller):
    controller.viewport.set_image_size(1000, 500)
    frame = render_to_image(RenderPipeline(), controller.session, controller.viewport)
    assert frame.width() == 500
    assert frame.height() == 400
    assert frame.pixelColor(5, 5) == QColor(26, 26, 26)
    assert frame.pixelColor(250, 200) == QColor(220, 220, 220)


def test_live_render_records_info_box(scored):
    session = scored.session
    group = session.active_group
    render_to_image(RenderPipeline(), session, scored.viewport)

    rect = group.info_box_rect
    assert rect is not None
    assert QRectF(0, 0, 500, 400).contains(rect)
    anchor = QPointF(group.info_box_anchor)

    # Anchor is created once and then stays put
    render_to_image(RenderPipeline(), session, scored.viewport)
    assert group.info_box_anchor == anchor


def test_info_box_cleared_when_results_invalid(scored):
    session = scored.session
    group = session.active_group
    pipeline = RenderPipeline()
    render_to_image(pipeline, session, scored.viewport)
    assert group.info_box_rect is not None

    group.invalidate()
    render_to_image(pipeline, session, scored.viewport)
    assert group.info_box_rect is None


def test_info_box_size_is_cached_per_text(qapp):
    from PySide6.QtGui import QFont

    pipeline = RenderPipeline()
    font = QFont()
    font.setPixelSize(13)
    first = pipeline.info_box_size(1, ["Group 1"], font, 6.0)
    again = pipeline.info_box_size(1, ["Group 1"], font, 6.0)
    longer = pipeline.info_box_size(1, ["Group 1", "Shots: 2"], font, 6.0)
    assert first == again
    assert longer.height() > first.height()
