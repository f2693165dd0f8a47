"""Shared fixtures: an offscreen QApplication and isolated configuration."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtGui import QColor, QImage
from PySide6.QtWidgets import QApplication

from holemark.core.viewport import ViewportTransform
from holemark.editor.interaction import InteractionController
from holemark.editor.session import Session
from holemark.services.config_service import ConfigService


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def config_service(tmp_path):
    return ConfigService(tmp_path / "config.json")


@pytest.fixture
def image(qapp):
    """A 1000x800 light grey target photo."""
    img = QImage(1000, 800, QImage.Format.Format_RGB32)
    img.fill(QColor(220, 220, 220))
    return img


@pytest.fixture
def controller(qapp, image):
    """
    Controller on a loaded image with a 500x400 display at DPR 1.

    The whole image fits exactly, so display = image / 2.
    """
    session = Session()
    viewport = ViewportTransform()
    ctrl = InteractionController(session, viewport)
    ctrl.resize(500, 400, 1.0)
    ctrl.load_image(image)
    return ctrl
