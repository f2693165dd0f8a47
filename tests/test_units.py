import math

import pytest

from holemark.core.units import (
    DEFAULT_CONVERTER,
    MOA_PER_MRAD,
    AngularUnit,
    LinearUnit,
    UnitConverter,
)


def test_inches_to_centimeters():
    assert DEFAULT_CONVERTER.convert(1.0, LinearUnit.INCHES, LinearUnit.CENTIMETERS) == pytest.approx(2.54)


def test_yards_to_meters():
    assert DEFAULT_CONVERTER.convert(100.0, LinearUnit.YARDS, LinearUnit.METERS) == pytest.approx(91.44)


def test_miles_to_kilometers():
    assert DEFAULT_CONVERTER.convert(1.0, LinearUnit.MILES, LinearUnit.KILOMETERS) == pytest.approx(1.609344)


def test_same_unit_is_identity():
    assert DEFAULT_CONVERTER.convert(3.7, LinearUnit.FEET, LinearUnit.FEET) == 3.7


def test_conversion_through_base_unit_is_reversible():
    converter = UnitConverter()
    value = converter.convert(12.5, LinearUnit.MILLIMETERS, LinearUnit.FEET)
    assert converter.convert(value, LinearUnit.FEET, LinearUnit.MILLIMETERS) == pytest.approx(12.5)


def test_mrad_to_moa_ratio():
    assert MOA_PER_MRAD == pytest.approx(180 / math.pi * 60 / 1000)
    assert DEFAULT_CONVERTER.mrad_to_moa(1.0) == pytest.approx(3.43775, rel=1e-5)
    assert DEFAULT_CONVERTER.moa_to_mrad(3.43775) == pytest.approx(1.0, rel=1e-5)


def test_angular_selects_unit():
    assert DEFAULT_CONVERTER.angular(2.0, AngularUnit.MRAD) == 2.0
    assert DEFAULT_CONVERTER.angular(2.0, AngularUnit.MOA) == pytest.approx(2.0 * MOA_PER_MRAD)


def test_linear_unit_parse_accepts_value_and_name():
    assert LinearUnit.parse("in") is LinearUnit.INCHES
    assert LinearUnit.parse("yards") is LinearUnit.YARDS
    with pytest.raises(KeyError):
        LinearUnit.parse("furlong")


def test_angular_unit_parse_is_case_insensitive():
    assert AngularUnit.parse("moa") is AngularUnit.MOA
    assert AngularUnit.parse("MRAD") is AngularUnit.MRAD
