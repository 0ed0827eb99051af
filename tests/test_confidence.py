"""
Tests for confidence clamping, calibration and field construction.
"""

import math

import pytest

from invoice_ocr.extraction.confidence import calibrate, clamp_confidence, to_field
from invoice_ocr.extraction.result import OcrField


@pytest.mark.parametrize("value, expected", [
    (50, 50),
    (-3, 0),
    (140, 100),
    (math.nan, 0),
    (math.inf, 0),
    (None, 0),
    ("high", 0),
])
def test_clamp_confidence(value, expected):
    assert clamp_confidence(value) == expected


def test_calibrate_centers_on_75():
    assert calibrate(82, 90) == 97
    assert calibrate(75, 88) == 88
    assert calibrate(100, 95) == 100
    assert calibrate(10, 50) == 0


def test_to_field_keeps_value_only_with_positive_confidence():
    assert to_field("INV-1", 83) == OcrField("INV-1", 83)
    assert to_field("INV-1", 150) == OcrField("INV-1", 100)
    assert to_field("INV-1", 0) == OcrField()
    assert to_field("INV-1", -20) == OcrField()
    assert to_field(None, 90) == OcrField()
