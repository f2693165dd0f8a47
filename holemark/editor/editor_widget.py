"""
Editor widget for HoleMark - the main editor UI component.

This widget composes the complete editor interface:
- Top toolbar with mode buttons, group controls and export actions
- Center canvas for the target photo and shot overlays
- Right settings panel with measurement inputs and group results
- Bottom status bar with zoom, dimensions, scale and mode
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtGui import QColor, QIcon, QImage, QPainter, QPixmap
from PySide6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QDoubleSpinBox,
    QFileDialog,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QSizePolicy,
    QToolBar,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from holemark.core.units import AngularUnit, LinearUnit
from holemark.editor.editor_canvas import EditorCanvas
from holemark.editor.export import (
    default_export_name,
    save_annotated_image,
    write_results_csv,
)
from holemark.editor.interaction import CALIBRATED_MODES, Mode
from holemark.editor.render import format_info_lines
from holemark.editor.session import MeasurementSettings
from holemark.services.config_service import ConfigService
from holemark.services.logging_service import get_logger


IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.bmp *.tif *.tiff *.webp)"

MODE_LABELS = {
    Mode.LOADING: "No image",
    Mode.SCALING: "Calibrate: drag across a known length",
    Mode.PLACING_HOLES: "Place holes",
    Mode.PLACING_AIM: "Place aiming point",
    Mode.SELECTING_HOLE: "Select / move holes",
    Mode.PANNING: "Pan",
}


class SettingsPanel(QFrame):
    """
    Right panel with the measurement inputs and the active group's results.

    Emits settings_changed with a single {field: value} change so the
    controller can decide whether calibration has to be redone.
    """

    settings_changed = Signal(dict)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._updating = False
        self._setup_ui()

    def _setup_ui(self) -> None:
        self.setFrameStyle(QFrame.Shape.StyledPanel)
        self.setFixedWidth(240)
        self.setStyleSheet("""
            QFrame {
                background-color: #2d2d2d;
                border-left: 1px solid #3a3a3a;
            }
            QLabel {
                color: #ddd;
                font-size: 11px;
            }
            QDoubleSpinBox, QComboBox {
                background-color: #3a3a3a;
                color: #ddd;
                border: 1px solid #555;
                padding: 4px;
            }
        """)

        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(12, 12, 12, 12)
        self._layout.setSpacing(8)

        title = QLabel("Measurement")
        title.setStyleSheet("font-weight: bold; font-size: 13px;")
        self._layout.addWidget(title)

        self._reference_length, self._reference_unit = self._add_length_row(
            "Reference Length", "reference_length", "reference_unit", 0.001, 10000.0
        )
        self._bullet_diameter, self._bullet_unit = self._add_length_row(
            "Bullet Diameter", "bullet_diameter", "bullet_unit", 0.0, 100.0
        )
        self._target_distance, self._target_distance_unit = self._add_length_row(
            "Target Distance", "target_distance", "target_distance_unit", 0.0, 100000.0
        )

        self._layout.addWidget(QLabel("Result Unit"))
        self._result_unit = self._unit_combo("result_unit")
        self._layout.addWidget(self._result_unit)

        self._layout.addWidget(QLabel("Angular Unit"))
        self._angular_unit = QComboBox()
        for unit in AngularUnit:
            self._angular_unit.addItem(unit.abbreviation)
        self._angular_unit.currentIndexChanged.connect(
            lambda _: self._emit_change(
                "angular_unit", AngularUnit.parse(self._angular_unit.currentText())
            )
        )
        self._layout.addWidget(self._angular_unit)

        results_title = QLabel("Results")
        results_title.setStyleSheet("font-weight: bold; font-size: 13px; margin-top: 12px;")
        self._layout.addWidget(results_title)

        self._results = QLabel("No results yet")
        self._results.setWordWrap(True)
        self._results.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        self._layout.addWidget(self._results)

        self._layout.addStretch()

    def _add_length_row(self, label: str, value_key: str, unit_key: str, minimum: float, maximum: float):
        self._layout.addWidget(QLabel(label))
        row = QHBoxLayout()
        row.setSpacing(6)

        spin = QDoubleSpinBox()
        spin.setDecimals(3)
        spin.setRange(minimum, maximum)
        spin.valueChanged.connect(lambda value: self._emit_change(value_key, value))
        row.addWidget(spin, 1)

        combo = self._unit_combo(unit_key)
        row.addWidget(combo)

        self._layout.addLayout(row)
        return spin, combo

    def _unit_combo(self, key: str) -> QComboBox:
        combo = QComboBox()
        for unit in LinearUnit:
            combo.addItem(unit.abbreviation)
        combo.currentIndexChanged.connect(
            lambda _: self._emit_change(key, LinearUnit.parse(combo.currentText()))
        )
        return combo

    def set_settings(self, settings: MeasurementSettings) -> None:
        """Update the controls without emitting changes."""
        self._updating = True
        self._reference_length.setValue(settings.reference_length)
        self._bullet_diameter.setValue(settings.bullet_diameter)
        self._target_distance.setValue(settings.target_distance)
        for combo, unit in (
            (self._reference_unit, settings.reference_unit),
            (self._bullet_unit, settings.bullet_unit),
            (self._target_distance_unit, settings.target_distance_unit),
            (self._result_unit, settings.result_unit),
            (self._angular_unit, settings.angular_unit),
        ):
            combo.setCurrentIndex(max(combo.findText(unit.abbreviation), 0))
        self._updating = False

    def set_results(self, lines: List[str]) -> None:
        self._results.setText("\n".join(lines) if lines else "No results yet")

    def _emit_change(self, key: str, value: Any) -> None:
        if not self._updating:
            self.settings_changed.emit({key: value})


class StatusBar(QFrame):
    """
    Bottom status bar showing zoom, image dimensions, scale and mode.
    """

    zoom_selected = Signal(float)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._setup_ui()

    def _setup_ui(self) -> None:
        self.setFrameStyle(QFrame.Shape.StyledPanel)
        self.setFixedHeight(32)
        self.setStyleSheet("""
            QFrame {
                background-color: #2a2a2a;
                border-top: 1px solid #3a3a3a;
            }
            QLabel {
                color: #aaa;
                font-size: 11px;
            }
            QComboBox {
                background-color: #3a3a3a;
                color: #ddd;
                border: 1px solid #555;
                padding: 2px 8px;
                min-width: 70px;
            }
        """)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 0, 12, 0)
        layout.setSpacing(20)

        zoom_layout = QHBoxLayout()
        zoom_layout.setSpacing(6)
        zoom_layout.addWidget(QLabel("Zoom:"))

        self._zoom_combo = QComboBox()
        self._zoom_combo.setEditable(True)
        self._zoom_combo.addItems(["Fit", "50%", "100%", "200%", "400%", "800%"])
        self._zoom_combo.setCurrentText("Fit")
        self._zoom_combo.textActivated.connect(self._on_zoom_selected)
        zoom_layout.addWidget(self._zoom_combo)
        layout.addLayout(zoom_layout)

        self._dimensions = QLabel("0 × 0")
        layout.addWidget(self._dimensions)

        self._scale = QLabel("Not calibrated")
        layout.addWidget(self._scale)

        self._mode = QLabel(MODE_LABELS[Mode.LOADING])
        layout.addWidget(self._mode)

        layout.addStretch()

        self._message = QLabel("")
        self._message.setStyleSheet("color: #e0a040;")
        layout.addWidget(self._message)

    def set_zoom(self, zoom: float) -> None:
        self._zoom_combo.blockSignals(True)
        self._zoom_combo.setEditText(f"{zoom * 100:.0f}%")
        self._zoom_combo.blockSignals(False)

    def set_dimensions(self, width: int, height: int) -> None:
        self._dimensions.setText(f"{width} × {height}")

    def set_scale(self, scale: Optional[float], unit: LinearUnit) -> None:
        if scale is None:
            self._scale.setText("Not calibrated")
        else:
            self._scale.setText(f"{scale:.2f} px/{unit.abbreviation}")

    def set_mode(self, mode: Mode) -> None:
        self._mode.setText(MODE_LABELS.get(mode, mode.name))

    def show_message(self, text: str) -> None:
        self._message.setText(text)

    def _on_zoom_selected(self, text: str) -> None:
        if text == "Fit":
            self.zoom_selected.emit(-1)  # Special value for fit
        else:
            try:
                percent = float(text.replace("%", "").strip())
                self.zoom_selected.emit(percent / 100.0)
            except ValueError:
                pass


def _create_tool_icon(shape: str, color: QColor = QColor(220, 220, 220)) -> QIcon:
    """Draw a toolbar icon programmatically."""
    size = 24
    pixmap = QPixmap(size, size)
    pixmap.fill(Qt.GlobalColor.transparent)

    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setPen(color)
    painter.setBrush(Qt.BrushStyle.NoBrush)

    if shape == "scale":
        # Ruler with ticks
        painter.drawLine(4, 18, 20, 6)
        painter.drawLine(4, 18, 7, 15)
        painter.drawLine(20, 6, 17, 9)
        painter.drawLine(8, 14, 9, 13)
        painter.drawLine(12, 12, 13, 11)
        painter.drawLine(16, 10, 17, 9)

    elif shape == "hole":
        painter.drawEllipse(6, 6, 12, 12)
        painter.setBrush(color)
        painter.drawEllipse(10, 10, 4, 4)

    elif shape == "aim":
        painter.drawEllipse(7, 7, 10, 10)
        painter.drawLine(12, 2, 12, 22)
        painter.drawLine(2, 12, 22, 12)

    elif shape == "select":
        from PySide6.QtCore import QPoint
        from PySide6.QtGui import QPolygon
        painter.setBrush(color)
        points = [
            QPoint(6, 4),
            QPoint(6, 18),
            QPoint(10, 14),
            QPoint(14, 20),
            QPoint(16, 18),
            QPoint(12, 12),
            QPoint(18, 12),
        ]
        painter.drawPolygon(QPolygon(points))

    elif shape == "pan":
        # Four-way arrows
        painter.drawLine(12, 3, 12, 21)
        painter.drawLine(3, 12, 21, 12)
        painter.drawLine(12, 3, 9, 6)
        painter.drawLine(12, 3, 15, 6)
        painter.drawLine(12, 21, 9, 18)
        painter.drawLine(12, 21, 15, 18)
        painter.drawLine(3, 12, 6, 9)
        painter.drawLine(3, 12, 6, 15)
        painter.drawLine(21, 12, 18, 9)
        painter.drawLine(21, 12, 18, 15)

    elif shape == "add_group":
        painter.drawLine(12, 5, 12, 19)
        painter.drawLine(5, 12, 19, 12)

    elif shape == "delete_group":
        painter.drawLine(6, 6, 18, 18)
        painter.drawLine(6, 18, 18, 6)

    elif shape == "fit":
        # Corner brackets
        painter.drawLine(4, 4, 10, 4)
        painter.drawLine(4, 4, 4, 10)
        painter.drawLine(14, 4, 20, 4)
        painter.drawLine(20, 4, 20, 10)
        painter.drawLine(4, 14, 4, 20)
        painter.drawLine(4, 20, 10, 20)
        painter.drawLine(14, 20, 20, 20)
        painter.drawLine(20, 14, 20, 20)

    elif shape == "save":
        # Floppy disk
        painter.drawRect(4, 4, 16, 16)
        painter.drawRect(7, 4, 10, 6)
        painter.drawRect(7, 12, 10, 6)

    elif shape == "csv":
        painter.drawRect(5, 3, 14, 18)
        painter.drawLine(8, 8, 16, 8)
        painter.drawLine(8, 12, 16, 12)
        painter.drawLine(8, 16, 16, 16)

    painter.end()
    return QIcon(pixmap)


class EditorWidget(QWidget):
    """
    Main editor widget composing toolbar, canvas, settings and status bar.
    """

    image_loaded = Signal(str)

    def __init__(self, config_service: Optional[ConfigService] = None, parent=None):
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service

        settings = MeasurementSettings()
        max_buffer = 4096
        if self._config:
            settings = MeasurementSettings.from_dict(self._config.measurement)
            max_buffer = self._config.max_buffer_dimension
        self._settings = settings
        self._max_buffer = max_buffer

        self._mode_buttons: Dict[Mode, QToolButton] = {}

        self._setup_ui()
        self._connect_signals()
        self._refresh_controls()

    def _setup_ui(self) -> None:
        """Build the UI layout."""
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # ─── Top Toolbar ──────────────────────────────────────────────
        self._toolbar = QToolBar()
        self._toolbar.setMovable(False)
        self._toolbar.setStyleSheet("""
            QToolBar {
                background-color: #2a2a2a;
                border-bottom: 1px solid #3a3a3a;
                padding: 6px 8px;
                spacing: 4px;
            }
            QToolBar::separator {
                background-color: #444;
                width: 1px;
                margin: 4px 6px;
            }
            QToolButton {
                background-color: transparent;
                border: none;
                border-radius: 8px;
                padding: 6px 8px;
                margin: 2px;
                min-width: 32px;
                min-height: 32px;
            }
            QToolButton:hover {
                background-color: rgba(255, 255, 255, 0.1);
            }
            QToolButton:checked {
                background-color: rgba(74, 144, 226, 0.3);
            }
            QToolButton:disabled {
                background-color: transparent;
            }
            QComboBox {
                background-color: #3a3a3a;
                color: #ddd;
                border: 1px solid #555;
                padding: 2px 8px;
                min-width: 90px;
            }
        """)

        self._mode_group = QButtonGroup(self)
        self._mode_group.setExclusive(True)

        mode_configs = [
            (Mode.SCALING, "Calibrate", "scale", "S"),
            (Mode.PLACING_HOLES, "Place Holes", "hole", "H"),
            (Mode.PLACING_AIM, "Aiming Point", "aim", "A"),
            (Mode.SELECTING_HOLE, "Select / Move Hole", "select", "V"),
            (Mode.PANNING, "Pan", "pan", "P"),
        ]

        for mode, tooltip, icon_shape, shortcut in mode_configs:
            btn = QToolButton()
            btn.setIcon(_create_tool_icon(icon_shape))
            btn.setToolTip(f"{tooltip} ({shortcut})")
            btn.setCheckable(True)
            btn.clicked.connect(lambda checked, m=mode: self._select_mode(m))
            self._mode_group.addButton(btn)
            self._toolbar.addWidget(btn)
            self._mode_buttons[mode] = btn

        self._toolbar.addSeparator()

        self._group_combo = QComboBox()
        self._group_combo.setToolTip("Active shot group")
        self._toolbar.addWidget(self._group_combo)

        self._add_group_btn = QToolButton()
        self._add_group_btn.setIcon(_create_tool_icon("add_group"))
        self._add_group_btn.setToolTip("New Group (G)")
        self._add_group_btn.clicked.connect(self._add_group)
        self._toolbar.addWidget(self._add_group_btn)

        self._delete_group_btn = QToolButton()
        self._delete_group_btn.setIcon(_create_tool_icon("delete_group"))
        self._delete_group_btn.setToolTip("Delete Group")
        self._delete_group_btn.clicked.connect(self._delete_group)
        self._toolbar.addWidget(self._delete_group_btn)

        self._toolbar.addSeparator()

        fit_btn = QToolButton()
        fit_btn.setIcon(_create_tool_icon("fit"))
        fit_btn.setToolTip("Fit to View (F)")
        fit_btn.clicked.connect(lambda: self._canvas.zoom_to_fit())
        self._toolbar.addWidget(fit_btn)

        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        self._toolbar.addWidget(spacer)

        csv_btn = QToolButton()
        csv_btn.setIcon(_create_tool_icon("csv"))
        csv_btn.setToolTip("Export Results CSV (Ctrl+E)")
        csv_btn.clicked.connect(self.export_results)
        self._toolbar.addWidget(csv_btn)

        save_btn = QToolButton()
        save_btn.setIcon(_create_tool_icon("save"))
        save_btn.setToolTip("Export Annotated Image (Ctrl+S)")
        save_btn.clicked.connect(self.export_image)
        self._toolbar.addWidget(save_btn)

        main_layout.addWidget(self._toolbar)

        # ─── Center Content ───────────────────────────────────────────
        content = QHBoxLayout()
        content.setContentsMargins(0, 0, 0, 0)
        content.setSpacing(0)

        self._canvas = EditorCanvas(self._settings, self._max_buffer)
        content.addWidget(self._canvas, 1)

        self._settings_panel = SettingsPanel()
        self._settings_panel.set_settings(self._settings)
        content.addWidget(self._settings_panel)

        main_layout.addLayout(content, 1)

        # ─── Bottom Status Bar ────────────────────────────────────────
        self._status = StatusBar()
        main_layout.addWidget(self._status)

    def _connect_signals(self) -> None:
        """Connect widget signals."""
        self._canvas.zoom_changed.connect(self._on_zoom_changed)
        self._canvas.mode_changed.connect(self._on_mode_changed)
        self._canvas.model_changed.connect(self._refresh_controls)
        self._canvas.image_changed.connect(self._on_image_changed)
        self._canvas.calibration_failed.connect(self._on_calibration_failed)
        self._canvas.controller.scale_changed.connect(self._on_scale_changed)
        self._settings_panel.settings_changed.connect(self._on_settings_changed)
        self._status.zoom_selected.connect(self._on_zoom_selected)
        self._group_combo.activated.connect(self._on_group_selected)

    # ─── Accessors ────────────────────────────────────────────────────────

    @property
    def canvas(self) -> EditorCanvas:
        return self._canvas

    @property
    def measurement_settings(self) -> MeasurementSettings:
        return self._canvas.session.settings

    # ─── Modes and Groups ─────────────────────────────────────────────────

    def _select_mode(self, mode: Mode) -> None:
        if not self._canvas.set_mode(mode):
            self._status.show_message("Calibrate the image first")
        self._sync_mode_buttons(self._canvas.mode)

    def _sync_mode_buttons(self, mode: Mode) -> None:
        btn = self._mode_buttons.get(mode)
        if btn is not None:
            btn.setChecked(True)
        else:
            # LOADING has no button; clear the exclusive group
            self._mode_group.setExclusive(False)
            for b in self._mode_buttons.values():
                b.setChecked(False)
            self._mode_group.setExclusive(True)

    def _add_group(self) -> None:
        self._canvas.controller.add_group()

    def _delete_group(self) -> None:
        self._canvas.controller.delete_group()

    @Slot(int)
    def _on_group_selected(self, index: int) -> None:
        group_id = self._group_combo.itemData(index)
        if group_id is not None:
            self._canvas.controller.set_active_group(group_id)

    @Slot()
    def _refresh_controls(self) -> None:
        """Sync toolbar, group list, results and status with the session."""
        session = self._canvas.session
        has_image = session.has_image
        calibrated = session.is_calibrated

        for mode, btn in self._mode_buttons.items():
            btn.setEnabled(has_image and (calibrated or mode not in CALIBRATED_MODES))
        self._add_group_btn.setEnabled(has_image)
        self._delete_group_btn.setEnabled(has_image)

        self._group_combo.blockSignals(True)
        self._group_combo.clear()
        for group in session.groups:
            self._group_combo.addItem(f"Group {group.id}", group.id)
        index = self._group_combo.findData(session.active_group_id)
        if index >= 0:
            self._group_combo.setCurrentIndex(index)
        self._group_combo.blockSignals(False)

        group = session.active_group
        lines = format_info_lines(group, session.settings, session.converter) if group else []
        self._settings_panel.set_results(lines)
        self._status.set_scale(session.scale, session.settings.reference_unit)

    # ─── Signal Handlers ──────────────────────────────────────────────────

    @Slot(float)
    def _on_zoom_changed(self, zoom: float) -> None:
        self._status.set_zoom(zoom)

    @Slot(float)
    def _on_zoom_selected(self, zoom: float) -> None:
        if zoom < 0:
            self._canvas.zoom_to_fit()
        else:
            self._canvas.controller.set_zoom(zoom)

    @Slot(object)
    def _on_mode_changed(self, mode: Mode) -> None:
        self._sync_mode_buttons(mode)
        self._status.set_mode(mode)
        self._refresh_controls()

    @Slot()
    def _on_image_changed(self) -> None:
        width, height = self._canvas.session.image_size
        self._status.set_dimensions(width, height)
        self._status.show_message("")
        self._refresh_controls()

    @Slot(str)
    def _on_calibration_failed(self, message: str) -> None:
        self._status.show_message(message)

    @Slot(float)
    def _on_scale_changed(self, scale: float) -> None:
        self._status.show_message("")

    @Slot(dict)
    def _on_settings_changed(self, change: Dict[str, Any]) -> None:
        self._canvas.controller.update_settings(**change)
        if self._config:
            self._config.set_measurement(self._canvas.session.settings.to_dict())

    # ─── Image Management ─────────────────────────────────────────────────

    def set_image(self, image: QImage) -> None:
        """Load an image into the editor."""
        self._canvas.set_image(image)
        self._canvas.setFocus()

    def open_image(self, path: Path) -> bool:
        """
        Decode and load an image file.

        Unreadable files are reported to the user and leave the current
        session untouched.
        """
        image = QImage(str(path))
        if image.isNull():
            self._logger.warning(f"Could not read image: {path}")
            QMessageBox.warning(self, "Open Image", f"Could not read image:\n{path}")
            return False

        self.set_image(image)
        self._logger.info(f"Opened {path}")
        self.image_loaded.emit(str(path))
        return True

    def open_image_dialog(self) -> bool:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Target Photo", str(Path.home()), IMAGE_FILTER
        )
        if not path:
            return False
        return self.open_image(Path(path))

    # ─── Export ───────────────────────────────────────────────────────────

    def _export_folder(self) -> Path:
        if self._config:
            return Path(self._config.default_export_folder)
        return Path.home() / "Pictures" / "HoleMark"

    def export_image(self) -> bool:
        """Ask for a path and save the annotated image."""
        session = self._canvas.session
        if not session.has_image:
            return False

        suggested = self._export_folder() / default_export_name(".jpg")
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Annotated Image", str(suggested), "JPEG (*.jpg *.jpeg);;PNG (*.png)"
        )
        if not path:
            return False

        quality = self._config.jpeg_quality if self._config else 92
        try:
            saved = save_annotated_image(session, Path(path), quality)
        except ValueError as e:
            QMessageBox.warning(self, "Export Image", str(e))
            return False
        if not saved:
            QMessageBox.warning(self, "Export Image", f"Could not save image to:\n{path}")
        return saved

    def export_results(self) -> bool:
        """Ask for a path and write group results as CSV."""
        session = self._canvas.session
        if not session.has_image:
            return False

        suggested = self._export_folder() / default_export_name(".csv")
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Results", str(suggested), "CSV files (*.csv)"
        )
        if not path:
            return False

        if not write_results_csv(session, Path(path)):
            QMessageBox.warning(self, "Export Results", f"Could not write results to:\n{path}")
            return False
        return True

    # ─── Key Events ───────────────────────────────────────────────────────

    def keyPressEvent(self, event) -> None:
        """Handle keyboard shortcuts."""
        key = event.key()
        modifiers = event.modifiers()

        mode_shortcuts = {
            Qt.Key.Key_S: Mode.SCALING,
            Qt.Key.Key_H: Mode.PLACING_HOLES,
            Qt.Key.Key_A: Mode.PLACING_AIM,
            Qt.Key.Key_V: Mode.SELECTING_HOLE,
            Qt.Key.Key_P: Mode.PANNING,
        }

        if key in mode_shortcuts and not modifiers:
            self._select_mode(mode_shortcuts[key])
            return

        if key == Qt.Key.Key_G and not modifiers:
            self._add_group()
            return

        if key == Qt.Key.Key_F and not modifiers:
            self._canvas.zoom_to_fit()
            return

        super().keyPressEvent(event)
