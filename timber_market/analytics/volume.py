"""
Timber volume arithmetic.

Log volume is approximated as a cylinder whose diameter is the midpoint of the
declared diameter range. Inputs come straight from partially filled forms, so
every helper here is forgiving: anything that cannot be read as a number makes
the result zero rather than raising.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union

Number = Union[int, float]

# Leading numeric prefix, e.g. "12.5cm" -> "12.5"
_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_decimal(value: Any) -> Optional[float]:
    """
    Read a decimal number from a form value.

    Numbers pass through. Strings are read up to the first non-numeric
    character, so "12cm" gives 12.0. Blank, missing, non-finite or
    unreadable values give None, as do ints too large for a float.

    Args:
        value: Raw form value

    Returns:
        Parsed float or None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return None
        value = match.group(1)
    elif not isinstance(value, (int, float, Decimal)):
        return None

    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_integer(value: Any) -> Optional[int]:
    """
    Read a whole number from a form value, truncating any fraction.

    Args:
        value: Raw form value

    Returns:
        Parsed int or None
    """
    number = parse_decimal(value)
    if number is None:
        return None
    return int(number)


def round_half_up(value: Number, places: int) -> float:
    """
    Round to a fixed number of decimal places, halves away from zero.

    Python's round() uses banker's rounding (6.25 -> 6.2); figures shown to
    traders are rounded the conventional way (6.25 -> 6.3).

    Args:
        value: Number to round
        places: Decimal places to keep

    Returns:
        Rounded float
    """
    try:
        quantum = Decimal(1).scaleb(-places)
        return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))
    except (InvalidOperation, OverflowError, ValueError, TypeError):
        return 0.0


def calculate_cubic_meters(
    diameter_from: Any,
    diameter_to: Any,
    length: Any,
    quantity: Any,
) -> float:
    """
    Calculate the total volume of a batch of logs.

    Args:
        diameter_from: Lower bound of the diameter range in cm
        diameter_to: Upper bound of the diameter range in cm
        length: Length of one piece in m
        quantity: Number of pieces

    Returns:
        Total volume in m³ rounded to 3 decimals, or 0.0 when the inputs are
        incomplete or not physically meaningful
    """
    d_from = parse_decimal(diameter_from)
    d_to = parse_decimal(diameter_to)
    piece_length = parse_decimal(length)
    pieces = parse_integer(quantity)

    if d_from is None or d_to is None or piece_length is None or pieces is None:
        return 0.0

    avg_radius_m = ((d_from + d_to) / 2 / 100) / 2
    if avg_radius_m <= 0 or piece_length <= 0 or pieces <= 0:
        return 0.0

    volume_per_piece = math.pi * avg_radius_m ** 2 * piece_length
    return round_half_up(volume_per_piece * pieces, 3)
