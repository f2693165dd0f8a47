"""
Application core for HoleMark.

This module contains the AppCore class which is responsible for:
- Initializing services (config, logging)
- Applying global styling (dark theme)
- Creating and showing the main window
- Opening an image passed on the command line
"""

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, Slot
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

from holemark.services.config_service import ConfigService
from holemark.services.logging_service import get_logger, set_log_level, setup_logging
from holemark.ui.main_window import MainWindow


class AppCore(QObject):
    """
    Central application core that wires together all components.

    Responsibilities:
    - Initialize services
    - Apply global dark theme
    - Create and show the MainWindow
    - Save configuration on quit
    """

    def __init__(
        self,
        app: QApplication,
        config_path: Optional[Path] = None,
        image_path: Optional[Path] = None,
    ) -> None:
        """
        Initialize the application core.

        Args:
            app: The QApplication instance.
            config_path: Optional config file location (defaults to the XDG path).
            image_path: Optional image to open on startup.
        """
        super().__init__()
        self._app = app

        self._config_service: Optional[ConfigService] = None
        self._main_window: Optional[MainWindow] = None

        self._init_services(config_path)
        self._apply_theme()
        self._init_ui()
        self._connect_signals()

        if image_path is not None:
            self._main_window.open_image(image_path)

    def _init_services(self, config_path: Optional[Path]) -> None:
        """Initialize application services."""
        setup_logging()
        self._logger = get_logger(__name__)
        self._logger.info("Initializing HoleMark application core...")

        self._config_service = ConfigService(config_path)
        level = set_log_level(self._config_service.log_level)
        self._logger.info(f"Log level: {logging.getLevelName(level)}")
        self._logger.info(f"Theme from config: {self._config_service.theme}")

    def _apply_theme(self) -> None:
        if self._config_service.theme != "dark":
            self._logger.info("Using the platform theme")
            return
        self._apply_dark_theme()

    def _apply_dark_theme(self) -> None:
        """
        Apply a dark color palette to the application.

        Uses Qt's QPalette for a native-looking dark theme.
        """
        self._logger.debug("Applying dark theme...")

        palette = QPalette()

        # Window and base colors
        palette.setColor(QPalette.ColorRole.Window, QColor(45, 45, 45))
        palette.setColor(QPalette.ColorRole.WindowText, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.Base, QColor(35, 35, 35))
        palette.setColor(QPalette.ColorRole.AlternateBase, QColor(50, 50, 50))

        # Text colors
        palette.setColor(QPalette.ColorRole.Text, QColor(220, 220, 220))
        palette.setColor(QPalette.ColorRole.BrightText, QColor(255, 255, 255))

        # Button colors
        palette.setColor(QPalette.ColorRole.Button, QColor(55, 55, 55))
        palette.setColor(QPalette.ColorRole.ButtonText, QColor(220, 220, 220))

        # Highlight colors
        palette.setColor(QPalette.ColorRole.Highlight, QColor(80, 120, 180))
        palette.setColor(QPalette.ColorRole.HighlightedText, QColor(255, 255, 255))

        palette.setColor(QPalette.ColorRole.ToolTipBase, QColor(60, 60, 60))
        palette.setColor(QPalette.ColorRole.ToolTipText, QColor(220, 220, 220))

        # Disabled state colors
        for role in (
            QPalette.ColorRole.WindowText,
            QPalette.ColorRole.Text,
            QPalette.ColorRole.ButtonText,
        ):
            palette.setColor(QPalette.ColorGroup.Disabled, role, QColor(127, 127, 127))

        self._app.setPalette(palette)

        self._app.setStyleSheet("""
            QToolTip {
                background-color: #3d3d3d;
                color: #dcdcdc;
                border: 1px solid #5a5a5a;
                padding: 4px;
            }
            QMenuBar {
                background-color: #2d2d2d;
                padding: 2px;
            }
            QMenuBar::item {
                padding: 4px 8px;
                background-color: transparent;
            }
            QMenuBar::item:selected {
                background-color: #4a4a4a;
            }
            QMenu {
                background-color: #2d2d2d;
                border: 1px solid #3a3a3a;
            }
            QMenu::item {
                padding: 6px 20px;
            }
            QMenu::item:selected {
                background-color: #4a6a9a;
            }
        """)

        self._logger.info("Dark theme applied")

    def _init_ui(self) -> None:
        """Create and show the main window."""
        self._main_window = MainWindow(self._config_service)
        self._main_window.show()
        self._logger.info("Main window shown")

    def _connect_signals(self) -> None:
        self._app.aboutToQuit.connect(self._on_about_to_quit)

    # ─── Application Lifecycle ────────────────────────────────────────────

    @Slot()
    def _on_about_to_quit(self) -> None:
        """Persist configuration before the event loop exits."""
        self._logger.info("Shutting down HoleMark...")
        if self._config_service:
            self._config_service.save()

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def config(self) -> ConfigService:
        """Get the configuration service."""
        if self._config_service is None:
            raise RuntimeError("ConfigService not initialized")
        return self._config_service

    @property
    def main_window(self) -> MainWindow:
        """Get the main window."""
        if self._main_window is None:
            raise RuntimeError("MainWindow not initialized")
        return self._main_window
