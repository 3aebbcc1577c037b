from datetime import datetime

import pytest

from core.meal_type import extract_meal_type, meal_type_for_hour, meal_type_for_time


@pytest.mark.parametrize(
    "hour,expected",
    [
        (6, "breakfast"),
        (13, "lunch"),
        (19, "dinner"),
        (2, "snack"),
        # band edges
        (4, "snack"),
        (5, "breakfast"),
        (10, "breakfast"),
        (11, "lunch"),
        (15, "lunch"),
        (16, "dinner"),
        (21, "dinner"),
        (22, "snack"),
        (23, "snack"),
        (0, "snack"),
    ],
)
def test_meal_type_bands(hour, expected):
    assert meal_type_for_hour(hour) == expected


def test_from_datetime():
    assert meal_type_for_time(datetime(2026, 1, 5, 12, 45)) == "lunch"


@pytest.mark.parametrize("hour", [-1, 24])
def test_rejects_invalid_hour(hour):
    with pytest.raises(ValueError):
        meal_type_for_hour(hour)


def test_extract_from_text():
    assert extract_meal_type("lets add tuna for Breakfast") == "breakfast"
    assert extract_meal_type("i had banana bread") is None
