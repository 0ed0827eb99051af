"""
Confidence Calibrator.

Blends the caller's base confidence (normally the OCR engine's overall
recognition confidence) with a field extractor's own confidence:

    final = clamp(base + extractor - 75, 0, 100)

A weak OCR pass therefore drags down even a top-tier keyword match, and a
strong pass lifts a middling one.
"""

import math
from typing import Optional

from .result import OcrField

DEFAULT_BASE_CONFIDENCE = 75
CONFIDENCE_CENTER = 75
MIN_CONFIDENCE = 0
MAX_CONFIDENCE = 100


def clamp_confidence(value: float) -> float:
    """Clamp to [0, 100]; NaN and infinities become 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return MIN_CONFIDENCE
    if not math.isfinite(number):
        return MIN_CONFIDENCE
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, number))


def calibrate(base_confidence: float, extractor_confidence: float) -> float:
    """
    Example:
        >>> calibrate(82, 90)
        97.0
    """
    return clamp_confidence(base_confidence + extractor_confidence - CONFIDENCE_CENTER)


def to_field(value: Optional[str], confidence: float) -> OcrField:
    """
    Build an OcrField, keeping value None exactly when confidence is 0.

    A value whose clamped confidence is 0 is reported as a miss.
    """
    if value is None:
        return OcrField()
    clamped = clamp_confidence(confidence)
    if clamped <= MIN_CONFIDENCE:
        return OcrField()
    return OcrField(value, clamped)
