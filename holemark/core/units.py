"""
Unit conversion for HoleMark.

Linear units convert through meters as the common base unit. Angular
sizes are carried in milliradians and converted to minutes of angle on
demand.
"""

import math
from enum import Enum


class LinearUnit(Enum):
    """Supported linear units. Values are the short names used in config."""
    INCHES = "in"
    CENTIMETERS = "cm"
    MILLIMETERS = "mm"
    METERS = "m"
    YARDS = "yd"
    FEET = "ft"
    MILES = "mi"
    KILOMETERS = "km"

    @property
    def abbreviation(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> "LinearUnit":
        """Accept either the short value ("in") or the member name ("INCHES")."""
        try:
            return cls(name)
        except ValueError:
            return cls[name.upper()]


class AngularUnit(Enum):
    """Angular display units."""
    MOA = "MOA"
    MRAD = "mrad"

    @property
    def abbreviation(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> "AngularUnit":
        for unit in cls:
            if unit.value.lower() == name.lower():
                return unit
        return cls[name.upper()]


# Conversion factors to meters (base unit)
_TO_METERS = {
    LinearUnit.INCHES: 0.0254,
    LinearUnit.CENTIMETERS: 0.01,
    LinearUnit.MILLIMETERS: 0.001,
    LinearUnit.METERS: 1.0,
    LinearUnit.YARDS: 0.9144,
    LinearUnit.FEET: 0.3048,
    LinearUnit.MILES: 1609.344,
    LinearUnit.KILOMETERS: 1000.0,
}

# MOA per milliradian: (180 / pi * 60) / 1000
MOA_PER_MRAD = (180.0 / math.pi * 60.0) / 1000.0


class UnitConverter:
    """
    Stateless converter between linear units and between angular units.

    Statistics and formatting take a converter as a parameter so another
    implementation can be swapped in.
    """

    def convert(self, value: float, from_unit: LinearUnit, to_unit: LinearUnit) -> float:
        """Convert a length between units."""
        if from_unit == to_unit:
            return value
        meters = value * _TO_METERS[from_unit]
        return meters / _TO_METERS[to_unit]

    def mrad_to_moa(self, mrad: float) -> float:
        return mrad * MOA_PER_MRAD

    def moa_to_mrad(self, moa: float) -> float:
        return moa / MOA_PER_MRAD

    def angular(self, mrad: float, unit: AngularUnit) -> float:
        """Express an angle given in milliradians in the requested unit."""
        if unit == AngularUnit.MOA:
            return self.mrad_to_moa(mrad)
        return mrad


DEFAULT_CONVERTER = UnitConverter()
