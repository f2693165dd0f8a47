"""
HoleMark - shot group analysis from target photos.

This is the main entry point for the application.
Run with: python -m holemark.app [IMAGE]
"""

import signal
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from holemark import __version__
from holemark.core.app_core import AppCore
from holemark.services.logging_service import get_logger, setup_logging


# Global app reference for signal handlers
_app: Optional[QApplication] = None
_app_core: Optional[AppCore] = None
_should_quit = False


def request_quit(signum, frame):
    """Handle termination signals; the quit itself happens on the Qt side."""
    global _should_quit
    _should_quit = True


def check_for_quit():
    """Timer callback to check if we should quit."""
    if _should_quit and _app:
        get_logger(__name__).info("Signal received, quitting...")
        _app.quit()


def _image_argument(argv: List[str]) -> Optional[Path]:
    """First non-option argument after the program name, if any."""
    for arg in argv[1:]:
        if not arg.startswith("-"):
            return Path(arg)
    return None


def main() -> int:
    """
    Main entry point for HoleMark application.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    global _app, _app_core

    # Initialize basic logging first to catch early errors
    setup_logging()
    logger = get_logger(__name__)

    try:
        logger.info("Starting HoleMark application...")

        _app = QApplication(sys.argv)
        _app.setApplicationName("HoleMark")
        _app.setOrganizationName("HoleMark")
        _app.setApplicationVersion(__version__)

        signal.signal(signal.SIGINT, request_quit)
        signal.signal(signal.SIGTERM, request_quit)

        # Timer to poll for quit signal (Qt event loop blocks Python signals)
        quit_timer = QTimer()
        quit_timer.timeout.connect(check_for_quit)
        quit_timer.start(100)

        _app_core = AppCore(_app, image_path=_image_argument(_app.arguments()))

        logger.info("HoleMark initialization complete. Entering event loop...")

        exit_code = _app.exec()

        logger.info(f"HoleMark exiting with code {exit_code}")
        return exit_code

    except Exception as e:
        logger.critical(f"Fatal error during startup: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
