import pytest
from PySide6.QtCore import QPointF
from PySide6.QtWidgets import QMessageBox

from holemark.core.units import LinearUnit
from holemark.editor.editor_canvas import EditorCanvas
from holemark.editor.editor_widget import EditorWidget
from holemark.editor.interaction import Mode


@pytest.fixture
def canvas(qapp, image):
    widget = EditorCanvas()
    widget.resize(500, 400)
    widget.set_image(image)
    yield widget
    widget.deleteLater()


def test_canvas_fits_new_image(canvas):
    assert canvas.mode == Mode.SCALING
    assert canvas.viewport.view_scale == pytest.approx(canvas.viewport.fit_scale)
    assert canvas.session.image_size == (1000, 800)


def test_canvas_frame_matches_buffer(canvas):
    frame = canvas.render_frame()
    assert frame.size() == canvas.viewport.buffer_size


def test_canvas_relays_controller_signals(canvas):
    modes = []
    canvas.mode_changed.connect(modes.append)
    canvas.controller.set_mode(Mode.PANNING)
    assert modes == [Mode.PANNING]


def test_capture_loss_ends_drag(canvas):
    canvas.controller.on_pointer_press(QPointF(10, 10))
    assert canvas.controller.is_dragging
    canvas.controller.on_capture_lost()
    assert not canvas.controller.is_dragging


def test_widget_reads_measurement_from_config(qapp, config_service):
    values = dict(config_service.measurement, reference_unit="cm", target_distance=25.0)
    config_service.set_measurement(values)

    widget = EditorWidget(config_service)
    settings = widget.measurement_settings
    assert settings.reference_unit is LinearUnit.CENTIMETERS
    assert settings.target_distance == 25.0
    widget.deleteLater()


def test_widget_reports_unreadable_image(qapp, tmp_path, monkeypatch):
    warnings = []
    monkeypatch.setattr(QMessageBox, "warning", lambda *args: warnings.append(args))
    path = tmp_path / "broken.jpg"
    path.write_bytes(b"not an image")

    widget = EditorWidget()
    assert widget.open_image(path) is False
    assert len(warnings) == 1
    assert not widget.canvas.session.has_image
    widget.deleteLater()


def test_widget_opens_image(qapp, image, tmp_path):
    path = tmp_path / "target.png"
    assert image.save(str(path))

    widget = EditorWidget()
    loaded = []
    widget.image_loaded.connect(loaded.append)
    assert widget.open_image(path)
    assert loaded == [str(path)]
    assert widget.canvas.mode == Mode.SCALING
    widget.deleteLater()
