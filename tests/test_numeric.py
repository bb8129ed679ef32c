import math

import pytest

from shopmaster.numeric import safe_number


@pytest.mark.parametrize(
    "value, expected",
    [
        (12, 12.0),
        (12.5, 12.5),
        (-3, -3.0),
        ("7", 7.0),
        (" 2.25 ", 2.25),
        (0, 0.0),
    ],
)
def test_safe_number_numeric_values(value, expected):
    assert safe_number(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        None, "", "abc", "12abc", True, False, [], {}, object(),
        math.nan, math.inf, "nan", "1_000", "_1",
    ],
)
def test_safe_number_coerces_to_zero(value):
    assert safe_number(value) == 0.0


def test_safe_number_huge_int_does_not_raise():
    assert safe_number(10**400) == 0.0
