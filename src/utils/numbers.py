# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Numeric helpers shared by the statistics code."""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero instead of Python's banker's rounding.

    Args:
        value: Number to round.
        digits: Decimal places to keep.

    Returns:
        Rounded value. Callers wanting an int should wrap it in int().

    Example:
        >>> round_half_up(12.5)
        13.0
        >>> round_half_up(81.66666, 2)
        81.67
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """Integer percentage of part over whole, 0 when whole is 0.

    Args:
        part: Numerator.
        whole: Denominator.

    Returns:
        Percentage rounded half-up.
    """
    if whole <= 0:
        return 0
    return int(round_half_up(part / whole * 100))


def mean(values: list[float], digits: int = 2) -> float:
    """Arithmetic mean rounded half-up, 0 for an empty list.

    Args:
        values: Numbers to average.
        digits: Decimal places to keep.

    Returns:
        Rounded mean.
    """
    if not values:
        return 0
    return round_half_up(sum(values) / len(values), digits)
