"""
Annotation session for HoleMark.

The Session is the annotation model for one loaded photo: the image, the
shot groups, the calibration (reference line and scale) and the measurement
settings. It is mutated by the InteractionController and read by the
render pipeline.

Invariants:
- while an image is loaded there is always at least one group
- group ids come from a counter and are never reused
- whenever the scale changes, every group is reprojected and its results
  recomputed before anything is drawn again
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional, Tuple

from PySide6.QtGui import QImage

from holemark.core.statistics import compute_group_statistics
from holemark.core.units import DEFAULT_CONVERTER, AngularUnit, LinearUnit, UnitConverter
from holemark.editor.annotations import ReferenceLine, ShotGroup
from holemark.services.logging_service import get_logger


@dataclass
class MeasurementSettings:
    """User-facing measurement inputs read on every recompute."""
    reference_length: float = 1.0
    reference_unit: LinearUnit = LinearUnit.INCHES
    bullet_diameter: float = 0.308
    bullet_unit: LinearUnit = LinearUnit.INCHES
    target_distance: float = 100.0
    target_distance_unit: LinearUnit = LinearUnit.YARDS
    result_unit: LinearUnit = LinearUnit.INCHES
    angular_unit: AngularUnit = AngularUnit.MOA

    # Changing any of these invalidates the calibration
    CALIBRATION_FIELDS = ("reference_length", "reference_unit")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "MeasurementSettings":
        """Build settings from config values, ignoring unknown or bad entries."""
        settings = cls()
        for key, value in values.items():
            if key not in _setting_names():
                continue
            try:
                setattr(settings, key, cls._coerce(key, value))
            except (KeyError, TypeError, ValueError):
                get_logger(__name__).warning(f"Ignoring invalid setting {key}={value!r}")
        return settings

    @staticmethod
    def _coerce(key: str, value: Any) -> Any:
        if key == "angular_unit":
            return value if isinstance(value, AngularUnit) else AngularUnit.parse(str(value))
        if key.endswith("_unit"):
            return value if isinstance(value, LinearUnit) else LinearUnit.parse(str(value))
        return float(value)

    def to_dict(self) -> Dict[str, Any]:
        values = asdict(self)
        for key, value in values.items():
            if isinstance(value, (LinearUnit, AngularUnit)):
                values[key] = value.value
        return values


def _setting_names() -> Tuple[str, ...]:
    return tuple(f.name for f in fields(MeasurementSettings))


class Session:
    """
    The annotation model for one image.

    Group results are only ever set through recompute(), which reads the
    current scale and settings.
    """

    def __init__(
        self,
        settings: Optional[MeasurementSettings] = None,
        converter: UnitConverter = DEFAULT_CONVERTER,
    ) -> None:
        self._logger = get_logger(__name__)
        self._converter = converter
        self.settings = settings or MeasurementSettings()

        self._image: Optional[QImage] = None
        self._groups: List[ShotGroup] = []
        self._active_group_id: Optional[int] = None
        self._next_group_id: int = 1

        self._reference_line: Optional[ReferenceLine] = None
        self._calibrated_line: Optional[ReferenceLine] = None
        self._scale: Optional[float] = None

    # ─── Image ────────────────────────────────────────────────────────────

    def load_image(self, image: QImage) -> None:
        """
        Start a new session on a decoded image.

        Clears groups and calibration; one empty group is created and made
        active.
        """
        self._image = image
        self._groups.clear()
        self._active_group_id = None
        self._reference_line = None
        self._calibrated_line = None
        self._scale = None
        self.add_group()
        self._logger.info(f"Image loaded: {image.width()}x{image.height()}")

    @property
    def image(self) -> Optional[QImage]:
        return self._image

    @property
    def has_image(self) -> bool:
        return self._image is not None and not self._image.isNull()

    @property
    def image_size(self) -> Tuple[int, int]:
        """Return (width, height) of the image."""
        if self._image is not None:
            return (self._image.width(), self._image.height())
        return (0, 0)

    @property
    def converter(self) -> UnitConverter:
        return self._converter

    # ─── Groups ───────────────────────────────────────────────────────────

    @property
    def groups(self) -> Tuple[ShotGroup, ...]:
        return tuple(self._groups)

    @property
    def active_group_id(self) -> Optional[int]:
        return self._active_group_id

    @property
    def active_group(self) -> Optional[ShotGroup]:
        for group in self._groups:
            if group.id == self._active_group_id:
                return group
        return None

    def get_group(self, group_id: int) -> ShotGroup:
        for group in self._groups:
            if group.id == group_id:
                return group
        raise KeyError(f"No shot group with id {group_id}")

    def add_group(self) -> ShotGroup:
        """Create a new empty group and make it active."""
        group = ShotGroup(self._next_group_id)
        self._next_group_id += 1
        self._groups.append(group)
        self._active_group_id = group.id
        self._logger.info(f"Added shot group {group.id}")
        return group

    def delete_group(self, group_id: int) -> ShotGroup:
        """
        Remove a group and return the group that is active afterwards.

        Deleting the last group immediately creates a fresh empty one.
        """
        group = self.get_group(group_id)
        index = self._groups.index(group)
        self._groups.remove(group)
        self._logger.info(f"Deleted shot group {group_id}")

        if not self._groups:
            return self.add_group()

        if self._active_group_id == group_id:
            self._active_group_id = self._groups[min(index, len(self._groups) - 1)].id
        return self.active_group

    def set_active_group(self, group_id: int) -> ShotGroup:
        group = self.get_group(group_id)
        self._active_group_id = group.id
        return group

    # ─── Calibration ──────────────────────────────────────────────────────

    @property
    def reference_line(self) -> Optional[ReferenceLine]:
        """The line on screen: a draft while one is being drawn, else the calibrated one."""
        return self._reference_line

    @reference_line.setter
    def reference_line(self, line: Optional[ReferenceLine]) -> None:
        self._reference_line = line

    @property
    def calibrated_line(self) -> Optional[ReferenceLine]:
        """The line the current scale was derived from."""
        return self._calibrated_line

    def discard_draft_line(self) -> None:
        """Drop an uncommitted line and show the calibrated one again."""
        self._reference_line = self._calibrated_line

    @property
    def scale(self) -> Optional[float]:
        """Pixels per reference unit, None until calibrated."""
        return self._scale

    @property
    def is_calibrated(self) -> bool:
        return self._scale is not None

    def apply_scale(self, scale: float) -> None:
        """
        Install a new scale.

        The current reference line becomes the calibrated line. Every group
        is reprojected, loses its results and info box anchor, and is then
        recomputed.
        """
        self._scale = scale
        self._calibrated_line = self._reference_line
        for group in self._groups:
            group.reproject(scale)
            group.invalidate()
            group.clear_info_box()
        self.recompute_all()
        self._logger.info(
            f"Scale set to {scale:.4f} px/{self.settings.reference_unit.abbreviation}"
        )

    def clear_calibration(self) -> None:
        """Forget the reference line and scale; all results become invalid."""
        self._reference_line = None
        self._calibrated_line = None
        self._scale = None
        for group in self._groups:
            group.reproject(None)
            group.invalidate()
            group.clear_info_box()

    # ─── Results ──────────────────────────────────────────────────────────

    def recompute(self, group: ShotGroup) -> None:
        group.apply_results(
            compute_group_statistics(
                group,
                self._scale,
                self.settings.reference_unit,
                self.settings.target_distance,
                self.settings.target_distance_unit,
                self._converter,
            )
        )

    def recompute_all(self) -> None:
        for group in self._groups:
            self.recompute(group)

    def update_settings(self, **changes: Any) -> bool:
        """
        Apply settings changes.

        Reference length/unit changes clear the calibration and return True.
        Any other change recomputes every group's results.
        """
        calibration_changed = False
        for key, value in changes.items():
            if key not in _setting_names():
                raise KeyError(f"Unknown measurement setting: {key}")
            if getattr(self.settings, key) == value:
                continue
            setattr(self.settings, key, value)
            if key in MeasurementSettings.CALIBRATION_FIELDS:
                calibration_changed = True

        if calibration_changed:
            self.clear_calibration()
            self._logger.info("Calibration inputs changed; scale cleared")
        else:
            self.recompute_all()
        return calibration_changed

    @property
    def hole_radius_pixels(self) -> Optional[float]:
        """Bullet radius in image pixels, None while uncalibrated."""
        if self._scale is None or self.settings.bullet_diameter <= 0:
            return None
        diameter = self._converter.convert(
            self.settings.bullet_diameter,
            self.settings.bullet_unit,
            self.settings.reference_unit,
        )
        return diameter * self._scale / 2
