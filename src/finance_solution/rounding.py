# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

__version__ = "0.1.0"

# =============================================================================
# Display rounding
# =============================================================================
#
# Used only by display layers and tests. Solver math never rounds.

CENT_PLACES: int = 2
FRACTION_OF_CENT_PLACES: int = 4


def round_to(value: float, decimal_places: int) -> float:
    """
    Round half away from zero to a fixed number of decimal places.

    The built-in round() rounds half to even on the binary value, so 2.675
    becomes 2.67. Going through the shortest decimal repr keeps the result
    in line with what a reader sees printed.

    Args:
        value: Number to round
        decimal_places: Digits to keep after the decimal point (>= 0)

    Returns:
        Rounded float

    Raises:
        ValueError: If decimal_places is negative
    """
    if decimal_places < 0:
        raise ValueError(f"decimal_places must be non-negative, got {decimal_places}")
    if value != value or value in (float("inf"), float("-inf")):
        return value
    quantum = Decimal(1).scaleb(-decimal_places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_to_cent(value: float) -> float:
    """Round a money amount to whole cents."""
    return round_to(value, CENT_PLACES)


def round_to_fraction_of_cent(value: float) -> float:
    """Round a money amount to hundredths of a cent, the formula display precision."""
    return round_to(value, FRACTION_OF_CENT_PLACES)
