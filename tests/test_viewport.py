import pytest
from PySide6.QtCore import QPointF, QRectF, QSize, QSizeF

from holemark.core.viewport import (
    ViewportTransform,
    compute_buffer_size,
    compute_letterbox,
    compute_source_rect,
)


def make_viewport(image=(1000, 800), display=(500, 400), dpr=1.0, max_dim=4096):
    viewport = ViewportTransform(max_dim)
    viewport.resize(display[0], display[1], dpr)
    viewport.set_image_size(*image)
    return viewport


def assert_point(point, x, y):
    assert point is not None
    assert point.x() == pytest.approx(x)
    assert point.y() == pytest.approx(y)


# ─── Pure geometry ────────────────────────────────────────────────────────────

def test_buffer_size_is_display_times_dpr():
    assert compute_buffer_size(QSizeF(500, 400), 2.0, 4096) == QSize(1000, 800)


def test_buffer_size_is_capped_keeping_aspect():
    size = compute_buffer_size(QSizeF(3000, 1000), 2.0, 4096)
    assert size.width() == 4096
    assert size.height() == 1365


def test_buffer_size_empty_display():
    assert compute_buffer_size(QSizeF(0, 400), 1.0, 4096) == QSize(0, 0)


def test_letterbox_centres_source_in_buffer():
    dest = compute_letterbox(QRectF(0, 0, 100, 100), QSize(200, 100))
    assert dest == QRectF(50, 0, 100, 100)


def test_source_rect_is_pushed_inside_image():
    rect = compute_source_rect(QPointF(0, 0), 1.0, QSizeF(200, 100), QSizeF(1000, 800))
    assert rect == QRectF(0, 0, 200, 100)


def test_source_rect_never_larger_than_image():
    rect = compute_source_rect(QPointF(50, 50), 0.01, QSizeF(500, 400), QSizeF(100, 100))
    assert rect == QRectF(0, 0, 100, 100)


# ─── Viewport ─────────────────────────────────────────────────────────────────

def test_not_ready_without_image():
    viewport = ViewportTransform()
    viewport.resize(500, 400, 1.0)
    assert not viewport.is_ready
    assert viewport.image_to_surface(QPointF(1, 1)) is None
    assert viewport.surface_to_image(QPointF(1, 1)) is None


def test_fit_shows_whole_image():
    viewport = make_viewport()
    assert viewport.view_scale == pytest.approx(0.5)
    assert viewport.source_rect == QRectF(0, 0, 1000, 800)
    assert viewport.dest_rect == QRectF(0, 0, 500, 400)


def test_mapping_round_trip():
    viewport = make_viewport()
    assert_point(viewport.image_to_surface(QPointF(100, 200)), 50, 100)
    assert_point(viewport.surface_to_image(QPointF(50, 100)), 100, 200)


def test_padding_maps_to_nothing():
    viewport = make_viewport(image=(1000, 500))
    # 1000x500 letterboxed into 500x400 leaves 75px above and below
    assert viewport.dest_rect == QRectF(0, 75, 500, 250)
    assert viewport.surface_to_image(QPointF(10, 10)) is None
    assert_point(viewport.surface_to_image(QPointF(10, 100)), 20, 50)


def test_zoom_keeps_point_under_pointer():
    viewport = make_viewport()
    before = viewport.surface_to_image(QPointF(100, 100))
    assert viewport.zoom_at(QPointF(100, 100), 2.0)
    assert viewport.view_scale == pytest.approx(1.0)
    after = viewport.surface_to_image(QPointF(100, 100))
    assert_point(after, before.x(), before.y())


def test_cannot_zoom_out_past_fit():
    viewport = make_viewport()
    assert not viewport.zoom_at(None, 0.5)
    assert viewport.view_scale == pytest.approx(viewport.fit_scale)


def test_zoom_is_capped():
    viewport = make_viewport()
    viewport.zoom_at(None, 1000.0)
    assert viewport.view_scale == pytest.approx(ViewportTransform.MAX_ZOOM)


def test_set_view_clamps_center():
    viewport = make_viewport()
    viewport.set_view(QPointF(-100, -100), 2.0)
    assert_point(viewport.view_center, 125, 100)
    assert viewport.source_rect == QRectF(0, 0, 250, 200)


def test_clamped_mapping_for_drags_outside_widget():
    viewport = make_viewport()
    assert_point(viewport.surface_to_image_clamped(QPointF(600, -10)), 1000, 0)


def test_resize_resets_to_fit():
    viewport = make_viewport()
    viewport.zoom_at(None, 4.0)
    viewport.resize(250, 200, 1.0)
    assert viewport.view_scale == pytest.approx(0.25)
    assert viewport.source_rect == QRectF(0, 0, 1000, 800)


def test_high_dpi_buffer():
    viewport = make_viewport(dpr=2.0)
    assert viewport.buffer_size == QSize(1000, 800)
    assert viewport.buffer_per_display_pixel == pytest.approx(2.0)
    assert viewport.surface_per_image_pixel == pytest.approx(1.0)
    assert_point(viewport.image_to_surface(QPointF(100, 200)), 100, 200)
    assert_point(viewport.surface_to_image(QPointF(50, 100)), 100, 200)
    assert viewport.image_distance_for_display_pixels(1.0) == pytest.approx(2.0)


def test_buffer_tolerance_in_image_pixels():
    viewport = make_viewport()
    assert viewport.image_distance_for_buffer_pixels(12) == pytest.approx(24)
    viewport.zoom_at(None, 4.0)
    assert viewport.image_distance_for_buffer_pixels(12) == pytest.approx(6)
