"""
Export helpers for HoleMark.

- render_annotated_image: the full-resolution photo with overlays flattened
- save_annotated_image: write that image as JPEG or PNG
- write_results_csv: one row of statistics per shot group
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPainter

from holemark.editor.annotations import AnnotationStyle
from holemark.editor.render import RenderPipeline
from holemark.editor.session import Session
from holemark.services.logging_service import get_logger

logger = get_logger(__name__)

IMAGE_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
}

CSV_FIELDS = [
    "Group ID",
    "Shots",
    "Centroid X",
    "Centroid Y",
    "Mean Radius",
    "Extreme Spread",
    "Mean Radius (angular)",
    "Extreme Spread (angular)",
    "Offset",
    "Offset Bearing (deg)",
    "Unit",
    "Angular Unit",
]


def default_export_name(suffix: str) -> str:
    """Timestamped file name, e.g. holemark_20240101_120000.jpg."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"holemark_{timestamp}{suffix}"


def render_annotated_image(
    session: Session,
    style: Optional[AnnotationStyle] = None,
    stroke_scale: float = 1.0,
) -> QImage:
    """
    Render the image at full resolution with every overlay drawn on top.

    Returns a null QImage if no image is loaded.
    """
    if not session.has_image:
        return QImage()

    result = QImage(session.image.size(), QImage.Format.Format_ARGB32_Premultiplied)
    result.fill(Qt.GlobalColor.transparent)
    painter = QPainter(result)
    try:
        RenderPipeline(style).render_full_resolution(painter, session, stroke_scale)
    finally:
        painter.end()
    return result


def save_annotated_image(
    session: Session,
    path: Path,
    quality: int = 92,
    style: Optional[AnnotationStyle] = None,
) -> bool:
    """
    Save the annotated image; the format follows the file suffix.

    Raises:
        ValueError: If the suffix is not a supported image format.
    """
    path = Path(path)
    image_format = IMAGE_FORMATS.get(path.suffix.lower())
    if image_format is None:
        raise ValueError(f"Unsupported export format: {path.suffix or '(none)'}")

    image = render_annotated_image(session, style)
    if image.isNull():
        logger.warning("Nothing to export: no image loaded")
        return False

    if image_format == "JPEG":
        # JPEG has no alpha channel
        image = image.convertToFormat(QImage.Format.Format_RGB32)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Could not create export folder {path.parent}: {e}")
        return False

    quality = max(0, min(100, int(quality)))
    if image.save(str(path), image_format, quality):
        logger.info(f"Exported annotated image to {path}")
        return True

    logger.error(f"Failed to save image to {path}")
    return False


def write_results_csv(session: Session, path: Path) -> bool:
    """
    Write group results to CSV in the configured result and angular units.

    Groups without valid results are written with their id and shot count
    only.
    """
    settings = session.settings
    converter = session.converter
    unit = settings.result_unit
    angular_unit = settings.angular_unit

    def length(value):
        if value is None:
            return ""
        return round(converter.convert(value, settings.reference_unit, unit), 4)

    def angle(size):
        if size is None:
            return ""
        return round(converter.angular(size.mrad, angular_unit), 4)

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for group in session.groups:
                results = group.results
                row = {field: "" for field in CSV_FIELDS}
                row["Group ID"] = group.id
                row["Shots"] = group.hole_count
                row["Unit"] = unit.abbreviation
                row["Angular Unit"] = angular_unit.abbreviation
                if results is not None:
                    row.update({
                        "Centroid X": length(results.centroid.x()),
                        "Centroid Y": length(results.centroid.y()),
                        "Mean Radius": length(results.mean_radius),
                        "Extreme Spread": length(results.max_spread),
                        "Mean Radius (angular)": angle(results.mean_radius_angle),
                        "Extreme Spread (angular)": angle(results.max_spread_angle),
                        "Offset": length(results.offset_distance),
                        "Offset Bearing (deg)": (
                            round(results.offset_bearing, 1)
                            if results.offset_bearing is not None else ""
                        ),
                    })
                writer.writerow(row)
    except OSError as e:
        logger.error(f"Could not write results to {path}: {e}")
        return False

    logger.info(f"Exported results for {len(session.groups)} group(s) to {path}")
    return True
