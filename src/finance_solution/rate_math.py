# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from .errors import InvalidPeriods, InvalidRate, NumericOverflow
from .validation import (
    WarningSink,
    check_compounding_periods,
    check_rate,
    to_fractional_periods,
    to_periods,
    to_rate,
)

__version__ = "0.1.0"

# =============================================================================
# Growth factors
# =============================================================================

def require_rate_above_minus_one(rate: float, name: str = "rate") -> None:
    """Raise InvalidRate unless (1 + rate) is strictly positive."""
    if rate <= -1.0:
        raise InvalidRate(f"{name} must be greater than -1, got {rate}")


def discount_factor(rate: float, periods: float) -> float:
    """
    Calculate the compounding factor relating present and future values.

    Formula:
        factor = (1 + r)^n

    Present value divides by this factor, future value multiplies by it.
    Periods may be fractional.

    Args:
        rate: Periodic rate as decimal (e.g., 0.05 for 5%)
        periods: Number of periods (>= 0)

    Returns:
        (1 + rate) ** periods

    Raises:
        InvalidRate: If rate <= -1
        InvalidPeriods: If periods is negative
        NumericOverflow: If the factor is beyond the float range

    Example:
        >>> discount_factor(0.05, 3)
        1.157625
    """
    rate = to_rate(rate)
    periods = to_fractional_periods(periods)
    require_rate_above_minus_one(rate)
    try:
        return (1.0 + rate) ** periods
    except OverflowError as e:
        raise NumericOverflow(f"(1 + {rate}) ** {periods} is beyond the float range") from e


def continuous_growth_factor(rate: float, periods: float) -> float:
    """
    Growth factor under continuous compounding, e^(r * n).

    Raises:
        InvalidPeriods: If periods is negative
        NumericOverflow: If the factor is beyond the float range
    """
    rate = to_rate(rate)
    periods = to_fractional_periods(periods)
    try:
        return math.exp(rate * periods)
    except OverflowError as e:
        raise NumericOverflow(f"e ** ({rate} * {periods}) is beyond the float range") from e


# =============================================================================
# Rate convention conversions (APR, EPR, EAR)
# =============================================================================
#
# m = compounding periods per year
#   EPR = APR / m
#   EAR = (1 + EPR)^m - 1
# Continuous compounding:
#   EAR = e^APR - 1
#   APR = ln(1 + EAR)

def _compounding_periods(compounding_periods_per_year, sink: WarningSink | None) -> int:
    m = to_periods(compounding_periods_per_year, name="compounding_periods_per_year")
    if m < 1:
        raise InvalidPeriods(f"compounding_periods_per_year must be at least 1, got {m}")
    check_compounding_periods(m, sink)
    return m


def apr_to_ear(apr: float, compounding_periods_per_year: int, *, sink: WarningSink | None = None) -> float:
    """
    Convert a nominal annual rate to the effective annual rate.

    Formula:
        EAR = (1 + APR / m)^m - 1

    Args:
        apr: Annual percentage rate as decimal
        compounding_periods_per_year: m, e.g. 12 for monthly
        sink: Optional advisory warning sink

    Returns:
        Effective annual rate as decimal

    Raises:
        InvalidRate: If APR / m <= -1
        InvalidPeriods: If m < 1

    Example:
        >>> apr_to_ear(0.12, 12)
        0.12682503013196977
    """
    apr = to_rate(apr, name="apr")
    m = _compounding_periods(compounding_periods_per_year, sink)
    check_rate(apr, sink)
    require_rate_above_minus_one(apr / m, name="apr / compounding_periods_per_year")
    return (1.0 + apr / m) ** m - 1.0


def ear_to_apr(ear: float, compounding_periods_per_year: int, *, sink: WarningSink | None = None) -> float:
    """
    Convert an effective annual rate to the nominal annual rate.

    Formula:
        APR = ((1 + EAR)^(1/m) - 1) * m

    Raises:
        InvalidRate: If EAR <= -1
        InvalidPeriods: If m < 1
    """
    ear = to_rate(ear, name="ear")
    m = _compounding_periods(compounding_periods_per_year, sink)
    check_rate(ear, sink)
    require_rate_above_minus_one(ear, name="ear")
    return ((1.0 + ear) ** (1.0 / m) - 1.0) * m


def apr_to_epr(apr: float, compounding_periods_per_year: int, *, sink: WarningSink | None = None) -> float:
    """Periodic rate from a nominal annual rate: EPR = APR / m."""
    apr = to_rate(apr, name="apr")
    m = _compounding_periods(compounding_periods_per_year, sink)
    check_rate(apr, sink)
    return apr / m


def epr_to_apr(epr: float, compounding_periods_per_year: int, *, sink: WarningSink | None = None) -> float:
    """Nominal annual rate from a periodic rate: APR = EPR * m."""
    epr = to_rate(epr, name="epr")
    m = _compounding_periods(compounding_periods_per_year, sink)
    check_rate(epr, sink)
    return epr * m


def ear_to_epr(ear: float, compounding_periods_per_year: int, *, sink: WarningSink | None = None) -> float:
    """
    Periodic rate from an effective annual rate: EPR = (1 + EAR)^(1/m) - 1.

    Raises:
        InvalidRate: If EAR <= -1
    """
    ear = to_rate(ear, name="ear")
    m = _compounding_periods(compounding_periods_per_year, sink)
    check_rate(ear, sink)
    require_rate_above_minus_one(ear, name="ear")
    return (1.0 + ear) ** (1.0 / m) - 1.0


def epr_to_ear(epr: float, compounding_periods_per_year: int, *, sink: WarningSink | None = None) -> float:
    """
    Effective annual rate from a periodic rate: EAR = (1 + EPR)^m - 1.

    Raises:
        InvalidRate: If EPR <= -1
    """
    epr = to_rate(epr, name="epr")
    m = _compounding_periods(compounding_periods_per_year, sink)
    check_rate(epr, sink)
    require_rate_above_minus_one(epr, name="epr")
    return (1.0 + epr) ** m - 1.0


def apr_continuous_to_ear(apr: float, *, sink: WarningSink | None = None) -> float:
    """Effective annual rate under continuous compounding: EAR = e^APR - 1."""
    apr = to_rate(apr, name="apr")
    check_rate(apr, sink)
    return math.expm1(apr)


def ear_to_apr_continuous(ear: float, *, sink: WarningSink | None = None) -> float:
    """
    Continuously compounded annual rate from an effective annual rate.

    Formula:
        APR = ln(1 + EAR)

    Raises:
        InvalidRate: If EAR <= -1 (logarithm undefined)
    """
    ear = to_rate(ear, name="ear")
    check_rate(ear, sink)
    require_rate_above_minus_one(ear, name="ear")
    return math.log1p(ear)


# -----------------------------------------------------------------------------
# Vector versions
# -----------------------------------------------------------------------------

def apr_to_ear_vector(apr: np.ndarray, compounding_periods_per_year: int) -> np.ndarray:
    """
    Vector version of apr_to_ear. Out-of-domain entries come back as NaN.

    Args:
        apr: Array (or list) of annual percentage rates as decimals
        compounding_periods_per_year: m, shared by every entry

    Returns:
        Array of effective annual rates, same shape as input
    """
    if not isinstance(apr, np.ndarray):
        apr = np.array(apr, dtype=np.float64)
    m = to_periods(compounding_periods_per_year, name="compounding_periods_per_year")
    if m < 1:
        raise InvalidPeriods(f"compounding_periods_per_year must be at least 1, got {m}")
    base = np.where(apr / m > -1.0, 1.0 + apr / m, np.nan)
    return np.power(base, m) - 1.0


def ear_to_apr_vector(ear: np.ndarray, compounding_periods_per_year: int) -> np.ndarray:
    """Vector version of ear_to_apr. Entries with EAR <= -1 come back as NaN."""
    if not isinstance(ear, np.ndarray):
        ear = np.array(ear, dtype=np.float64)
    m = to_periods(compounding_periods_per_year, name="compounding_periods_per_year")
    if m < 1:
        raise InvalidPeriods(f"compounding_periods_per_year must be at least 1, got {m}")
    base = np.where(ear > -1.0, 1.0 + ear, np.nan)
    return (np.power(base, 1.0 / m) - 1.0) * m


# =============================================================================
# Full conversion record
# =============================================================================

class RateKind(Enum):
    """Convention of the rate passed to convert_rate."""
    APR = "APR"
    EPR = "EPR"
    EAR = "EAR"
    APR_CONTINUOUS = "APR (continuous)"
    EAR_CONTINUOUS = "EAR (continuous)"

    @property
    def is_continuous(self) -> bool:
        return self in (RateKind.APR_CONTINUOUS, RateKind.EAR_CONTINUOUS)


@dataclass(frozen=True)
class RateConversion:
    """One rate expressed in all three conventions, with the formula for each."""
    input_kind: RateKind
    input_rate: float
    compounding_periods_per_year: int | None  # None for continuous compounding
    apr: float
    epr: float  # NaN for continuous compounding
    ear: float
    apr_formula: str
    epr_formula: str
    ear_formula: str


def convert_rate(
        rate: float,
        kind: RateKind,
        compounding_periods_per_year: int = 1,
        *,
        sink: WarningSink | None = None,
) -> RateConversion:
    """
    Express a rate in APR, EPR and EAR form at once.

    For continuous kinds compounding_periods_per_year is ignored and EPR is
    NaN, since a continuously compounded rate has no discrete period.

    Args:
        rate: Rate as decimal, in the convention named by kind
        kind: Which convention rate is quoted in
        compounding_periods_per_year: m for the discrete kinds
        sink: Optional advisory warning sink

    Returns:
        RateConversion record

    Example:
        >>> convert_rate(0.12, RateKind.APR, 12).epr
        0.01
    """
    rate = to_rate(rate)
    if kind.is_continuous:
        if kind is RateKind.APR_CONTINUOUS:
            apr = rate
            ear = apr_continuous_to_ear(apr, sink=sink)
            apr_formula = f"{apr:.6f}"
            ear_formula = f"{ear:.6f} = {math.e:.6f}^{apr:.6f} - 1"
        else:
            ear = rate
            apr = ear_to_apr_continuous(ear, sink=sink)
            ear_formula = f"{ear:.6f}"
            apr_formula = f"{apr:.6f} = ln(1 + {ear:.6f})"
        return RateConversion(
            input_kind=kind,
            input_rate=rate,
            compounding_periods_per_year=None,
            apr=apr,
            epr=math.nan,
            ear=ear,
            apr_formula=apr_formula,
            epr_formula="",
            ear_formula=ear_formula,
        )

    m = _compounding_periods(compounding_periods_per_year, sink)
    if kind is RateKind.APR:
        apr = rate
        epr = apr_to_epr(apr, m, sink=sink)
        ear = apr_to_ear(apr, m, sink=sink)
        apr_formula = f"{apr:.6f}"
        epr_formula = f"{epr:.6f} = {apr:.6f} / {m}"
        ear_formula = f"{ear:.6f} = (1 + ({apr:.6f} / {m}))^{m} - 1"
    elif kind is RateKind.EPR:
        epr = rate
        apr = epr_to_apr(epr, m, sink=sink)
        ear = epr_to_ear(epr, m, sink=sink)
        epr_formula = f"{epr:.6f}"
        apr_formula = f"{apr:.6f} = {epr:.6f} * {m}"
        ear_formula = f"{ear:.6f} = (1 + {epr:.6f})^{m} - 1"
    else:
        ear = rate
        epr = ear_to_epr(ear, m, sink=sink)
        apr = ear_to_apr(ear, m, sink=sink)
        ear_formula = f"{ear:.6f}"
        epr_formula = f"{epr:.6f} = (1 + {ear:.6f})^(1 / {m}) - 1"
        apr_formula = f"{apr:.6f} = ((1 + {ear:.6f})^(1 / {m}) - 1) * {m}"
    return RateConversion(
        input_kind=kind,
        input_rate=rate,
        compounding_periods_per_year=m,
        apr=apr,
        epr=epr,
        ear=ear,
        apr_formula=apr_formula,
        epr_formula=epr_formula,
        ear_formula=ear_formula,
    )
