import pytest

from anesrec.dosing.calc import dose_total, format_total, needs_weight, total_unit


@pytest.mark.parametrize("unit, expected", [
    ("mg/kg", True),
    ("mcg/m^2", True),
    ("mg/animal", False),
    ("", False),
])
def test_needs_weight(unit, expected):
    assert needs_weight(unit) is expected


def test_total_unit():
    assert total_unit("mg/kg") == "mg"
    assert total_unit("mcg/animal") == "mcg"
    assert total_unit("ml") == ""


def test_weight_based_total():
    assert dose_total("0.2", "mg/kg", "12.5") == pytest.approx(2.5)
    assert format_total("0.2", "mg/kg", "12.5") == "2.500 mg"


def test_per_animal_ignores_weight():
    assert dose_total("5", "mcg/animal", "30") == 5.0


def test_missing_weight_counts_as_one():
    assert dose_total("4", "mg/kg", "") == 4.0
    assert dose_total("4", "mg/kg", None) == 4.0


def test_missing_dose_shows_placeholder():
    assert format_total("", "mg/kg", "10") == "--"
    assert format_total("abc", "mg/kg", "10") == "--"
