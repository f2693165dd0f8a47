"""
Main window for HoleMark application.

This module contains the main application window with the editor widget,
menu bar and window title handling.
"""

from pathlib import Path
from typing import Optional

from PySide6.QtGui import QAction, QImage, QKeySequence
from PySide6.QtWidgets import (
    QMainWindow,
    QMessageBox,
    QWidget,
)

from holemark import __version__
from holemark.editor.editor_widget import EditorWidget
from holemark.services.config_service import ConfigService
from holemark.services.logging_service import get_logger


class MainWindow(QMainWindow):
    """
    Main application window for HoleMark.

    Features:
    - Menu bar with File, View and Help menus
    - Editor widget for calibrating photos and marking shot groups

    Measurement settings are written back to the config on close.
    """

    def __init__(
        self,
        config_service: Optional[ConfigService] = None,
        parent: Optional[QWidget] = None
    ) -> None:
        """
        Initialize the MainWindow.

        Args:
            config_service: Optional config service for settings and export folder.
            parent: Optional parent widget.
        """
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service
        self._editor: Optional[EditorWidget] = None

        self._setup_window()
        self._setup_central_widget()
        self._setup_menu_bar()

        self._logger.info("MainWindow initialized")

    def _setup_window(self) -> None:
        """Configure main window properties."""
        self.setWindowTitle("HoleMark - Shot Group Analyzer")
        self.setMinimumSize(800, 600)
        self.resize(1280, 860)

    def _setup_central_widget(self) -> None:
        """Set up the central widget (editor)."""
        self._editor = EditorWidget(self._config, self)
        self._editor.image_loaded.connect(self._on_image_loaded)
        self.setCentralWidget(self._editor)

    def _setup_menu_bar(self) -> None:
        """Create and configure the menu bar."""
        menu_bar = self.menuBar()

        # ─── File Menu ────────────────────────────────────────────────
        file_menu = menu_bar.addMenu("&File")

        open_action = QAction("&Open Image...", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.setStatusTip("Open a target photo")
        open_action.triggered.connect(self._on_open)
        file_menu.addAction(open_action)

        file_menu.addSeparator()

        export_image_action = QAction("Export &Image...", self)
        export_image_action.setShortcut(QKeySequence.StandardKey.Save)
        export_image_action.triggered.connect(self._on_export_image)
        file_menu.addAction(export_image_action)

        export_csv_action = QAction("Export &Results (CSV)...", self)
        export_csv_action.setShortcut("Ctrl+E")
        export_csv_action.triggered.connect(self._on_export_results)
        file_menu.addAction(export_csv_action)

        file_menu.addSeparator()

        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.setStatusTip("Exit the application")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        # ─── View Menu ────────────────────────────────────────────────
        view_menu = menu_bar.addMenu("&View")

        zoom_in_action = QAction("Zoom &In", self)
        zoom_in_action.setShortcut("Ctrl++")
        zoom_in_action.triggered.connect(self._on_zoom_in)
        view_menu.addAction(zoom_in_action)

        zoom_out_action = QAction("Zoom &Out", self)
        zoom_out_action.setShortcut("Ctrl+-")
        zoom_out_action.triggered.connect(self._on_zoom_out)
        view_menu.addAction(zoom_out_action)

        zoom_fit_action = QAction("Zoom to &Fit", self)
        zoom_fit_action.setShortcut("Ctrl+0")
        zoom_fit_action.triggered.connect(self._on_zoom_fit)
        view_menu.addAction(zoom_fit_action)

        # ─── Help Menu ────────────────────────────────────────────────
        help_menu = menu_bar.addMenu("&Help")

        about_action = QAction("&About", self)
        about_action.setStatusTip("About HoleMark")
        about_action.triggered.connect(self._show_about_dialog)
        help_menu.addAction(about_action)

    # ─── Public Methods ───────────────────────────────────────────────────

    @property
    def editor(self) -> Optional[EditorWidget]:
        return self._editor

    def set_image(self, image: QImage) -> None:
        """
        Load an already decoded image into the editor.

        Args:
            image: The QImage to calibrate and annotate.
        """
        if self._editor:
            self._editor.set_image(image)
            self._update_title(f"{image.width()}×{image.height()}")

    def open_image(self, path: Path) -> bool:
        """Open an image file in the editor."""
        if self._editor:
            return self._editor.open_image(path)
        return False

    def _update_title(self, detail: str) -> None:
        self.setWindowTitle(f"HoleMark - {detail}")

    def _on_image_loaded(self, path: str) -> None:
        self._update_title(Path(path).name)

    # ─── Menu Actions ─────────────────────────────────────────────────────

    def _on_open(self) -> None:
        """Handle File > Open Image."""
        if self._editor:
            self._editor.open_image_dialog()

    def _on_export_image(self) -> None:
        if self._editor:
            self._editor.export_image()

    def _on_export_results(self) -> None:
        if self._editor:
            self._editor.export_results()

    def _on_zoom_in(self) -> None:
        if self._editor:
            self._editor.canvas.zoom_in()

    def _on_zoom_out(self) -> None:
        if self._editor:
            self._editor.canvas.zoom_out()

    def _on_zoom_fit(self) -> None:
        if self._editor:
            self._editor.canvas.zoom_to_fit()

    def _show_about_dialog(self) -> None:
        """Display the About dialog."""
        about_text = (
            "<h2>HoleMark</h2>"
            "<p>Shot group analysis from target photos</p>"
            f"<p><b>Version:</b> {__version__}</p>"
            "<hr>"
            "<p><b>Workflow:</b></p>"
            "<ol>"
            "<li>Open a photo of the target</li>"
            "<li>Drag across a known length to calibrate</li>"
            "<li>Click each bullet hole, then set the aiming point</li>"
            "</ol>"
            "<p><b>Keyboard Shortcuts:</b></p>"
            "<ul>"
            "<li>S - Calibrate</li>"
            "<li>H - Place holes</li>"
            "<li>A - Aiming point</li>"
            "<li>V - Select / move holes (arrows nudge, Delete removes)</li>"
            "<li>P or hold Space - Pan</li>"
            "<li>G - New group</li>"
            "<li>F - Fit to view</li>"
            "</ul>"
        )

        QMessageBox.about(self, "About HoleMark", about_text)

    def closeEvent(self, event) -> None:
        """Persist measurement settings, then close."""
        self._logger.info("MainWindow closing")

        if self._config and self._editor:
            self._config.set_measurement(self._editor.measurement_settings.to_dict())
            self._config.save()

        super().closeEvent(event)
