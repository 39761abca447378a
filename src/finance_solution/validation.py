# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
import numbers
import warnings
from collections.abc import Callable
from decimal import Decimal

from .errors import InvalidPeriods, InvalidRate

__version__ = "0.1.0"

# =============================================================================
# Advisory thresholds
# =============================================================================

PERIODS_PRECISION_THRESHOLD: int = 2000  # above this, (1 + r)^n loses precision
RATE_MAGNITUDE_THRESHOLD: float = 1.0  # |rate| above 100% per period is suspicious
COMPOUNDING_PERIODS_THRESHOLD: int = 366  # more than daily compounding

WarningSink = Callable[[str], None]


class TvmAdvisoryWarning(UserWarning):
    """Category used by the default sink for precision-risk advisories."""


def default_sink(message: str) -> None:
    """Emit an advisory through the warnings module."""
    warnings.warn(message, TvmAdvisoryWarning, stacklevel=3)


def resolve_sink(sink: WarningSink | None) -> WarningSink:
    return default_sink if sink is None else sink


# =============================================================================
# Numeric coercion
# =============================================================================
#
# Public solver entry points pass every argument through one of these before
# doing any math. Accepted: int, float, Decimal, Fraction and numpy scalars.
# bool is rejected even though it subclasses int.

def _to_float(value, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise TypeError(f"{name} must be a real number, got {type(value).__name__}")
    return float(value)


def to_money(value, name: str = "value") -> float:
    """
    Normalize a money amount to float.

    Raises:
        TypeError: If value is not a real number
        ValueError: If value is NaN or infinite
    """
    result = _to_float(value, name)
    if not math.isfinite(result):
        raise ValueError(f"{name} must be finite, got {result}")
    return result


def to_rate(value, name: str = "rate") -> float:
    """
    Normalize a periodic rate to float.

    Only finiteness is checked here; the rate > -1 domain is enforced by the
    operations that raise (1 + rate) to a power.

    Raises:
        TypeError: If value is not a real number
        InvalidRate: If value is NaN or infinite
    """
    result = _to_float(value, name)
    if not math.isfinite(result):
        raise InvalidRate(f"{name} must be finite, got {result}")
    return result


def to_periods(value, name: str = "periods") -> int:
    """
    Normalize a period count to a non-negative int.

    Integral floats such as 3.0 are accepted; 3.5 is not.

    Raises:
        TypeError: If value is not a real number
        InvalidPeriods: If value is negative, non-finite or not a whole number
    """
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise TypeError(f"{name} must be a whole number, got {type(value).__name__}")
    if isinstance(value, numbers.Integral):
        result = int(value)
    else:
        as_float = float(value)
        if not math.isfinite(as_float) or as_float != math.floor(as_float):
            raise InvalidPeriods(f"{name} must be a whole number, got {value}")
        result = int(as_float)
    if result < 0:
        raise InvalidPeriods(f"{name} must be non-negative, got {result}")
    return result


def to_fractional_periods(value, name: str = "periods") -> float:
    """
    Normalize a possibly fractional period count to a non-negative float.

    Raises:
        TypeError: If value is not a real number
        InvalidPeriods: If value is negative or non-finite
    """
    result = _to_float(value, name)
    if not math.isfinite(result) or result < 0:
        raise InvalidPeriods(f"{name} must be finite and non-negative, got {result}")
    return result


# =============================================================================
# Advisory checks (never raise)
# =============================================================================

def check_periods(periods: float, sink: WarningSink | None = None) -> None:
    if periods > PERIODS_PRECISION_THRESHOLD:
        resolve_sink(sink)(
            f"periods is {periods}, above {PERIODS_PRECISION_THRESHOLD}; "
            f"results may lose floating-point precision"
        )


def check_rate(rate: float, sink: WarningSink | None = None) -> None:
    if abs(rate) > RATE_MAGNITUDE_THRESHOLD:
        resolve_sink(sink)(
            f"rate is {rate}, magnitude above {RATE_MAGNITUDE_THRESHOLD}; "
            f"rates are decimals, so 0.05 means 5%"
        )


def check_compounding_periods(compounding_periods_per_year: int, sink: WarningSink | None = None) -> None:
    if compounding_periods_per_year > COMPOUNDING_PERIODS_THRESHOLD:
        resolve_sink(sink)(
            f"compounding_periods_per_year is {compounding_periods_per_year}, "
            f"above {COMPOUNDING_PERIODS_THRESHOLD}; consider continuous compounding"
        )
