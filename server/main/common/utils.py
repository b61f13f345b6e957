"""Numeric and settings helpers shared by the quiz and analytics code."""
from __future__ import annotations
import math
from decimal import Decimal
from fractions import Fraction
from typing import Iterable

from django.conf import settings

LMS_DEFAULTS = {
    "PASS_PERCENTAGE": 60,
    "QUIZ_SUBMIT_GRACE_SECONDS": 30,
    "DEFAULT_TIME_LIMIT": 30,
    "TOP_PERFORMERS": 5,
    "MIN_PASSWORD_LENGTH": 6,
    "AUTH_COOKIE": "session",
    "AUTH_COOKIE_MAX_AGE": 7 * 24 * 60 * 60,
    "AUTH_COOKIE_SECURE": False,
}


def lms_setting(name: str):
    """Read a key from settings.LMS, falling back to LMS_DEFAULTS."""
    overrides = getattr(settings, "LMS", {}) or {}
    if name in overrides:
        return overrides[name]
    return LMS_DEFAULTS[name]


def round_half_up(value) -> int:
    """Round to the nearest integer with .5 going up (Python's round() is banker's).

    Fractions are rounded exactly; anything else goes through its decimal
    string so 2.5 stays 2.5 rather than its binary approximation.
    """
    if not isinstance(value, Fraction):
        value = Fraction(Decimal(str(value)))
    return math.floor(value + Fraction(1, 2))


def safe_percentage(part, whole) -> Fraction:
    """part/whole*100 as an exact fraction, or 0 when whole is 0."""
    if not whole:
        return Fraction(0)
    return Fraction(part * 100, whole)


def percent(part, whole) -> int:
    return round_half_up(safe_percentage(part, whole))


def mean(values: Iterable) -> Fraction:
    """Exact arithmetic mean; 0 for no values."""
    values = [Fraction(v) for v in values]
    if not values:
        return Fraction(0)
    return sum(values, Fraction(0)) / len(values)
