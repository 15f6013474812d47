"""Unit conversion helpers for page geometry."""
from __future__ import annotations

POINTS_PER_INCH = 72
CSS_PX_PER_INCH = 96
MM_PER_INCH = 25.4


def px_to_points(value: float) -> float:
    """Convert CSS pixels to typographic points."""
    return value * POINTS_PER_INCH / CSS_PX_PER_INCH


def mm_to_points(value: float) -> float:
    """Convert millimetres to typographic points."""
    return value / MM_PER_INCH * POINTS_PER_INCH
