# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .errors import DegenerateInput, InvalidPeriods, NumericOverflow, UndefinedPeriods, UndefinedRate
from .rate_math import require_rate_above_minus_one
from .solution import TvmSolution, TvmVariable, build_tvm_solution
from .validation import (
    WarningSink,
    check_periods,
    check_rate,
    to_fractional_periods,
    to_money,
    to_periods,
    to_rate,
)

__version__ = "0.1.0"

# =============================================================================
# Lump-sum time value of money
# =============================================================================
#
# One equation, four unknowns:
#
#     fv = pv * (1 + r)^n          (periodic compounding)
#     fv = pv * e^(r * n)          (continuous compounding)
#
# pv and fv carry the same sign: this is a value growing over time, not a pair
# of opposing cashflows.

def _growth(rate: float, periods: float, continuous_compounding: bool) -> float:
    """Growth multiplier; math.inf once it passes the float range."""
    if not continuous_compounding:
        require_rate_above_minus_one(rate)
    try:
        if continuous_compounding:
            return math.exp(rate * periods)
        return (1.0 + rate) ** periods
    except OverflowError:
        return math.inf


def _solve_present_value(rate: float, periods: float, future_value: float,
                         continuous_compounding: bool) -> float:
    growth = _growth(rate, periods, continuous_compounding)
    # An overflowing multiplier discounts to 0.0; one that underflows to zero
    # would need an unrepresentable present value.
    if growth == 0.0:
        raise NumericOverflow(
            f"present_value of {future_value} at rate {rate} over {periods} periods "
            f"is too large to represent"
        )
    return future_value / growth


def _solve_future_value(rate: float, periods: float, present_value: float,
                        continuous_compounding: bool) -> float:
    if present_value == 0.0:
        return 0.0
    value = present_value * _growth(rate, periods, continuous_compounding)
    if math.isinf(value):
        raise NumericOverflow(
            f"future_value of {present_value} at rate {rate} over {periods} periods "
            f"is too large to represent"
        )
    return value


def _solve_rate(periods: float, present_value: float, future_value: float,
                continuous_compounding: bool) -> float:
    if present_value == 0.0 and future_value == 0.0:
        raise DegenerateInput("present_value and future_value are both zero, any rate fits")
    if present_value == 0.0:
        raise DegenerateInput(
            f"present_value is zero, no rate grows it to future_value {future_value}"
        )
    if future_value == 0.0:
        raise DegenerateInput(
            f"future_value is zero, no rate shrinks present_value {present_value} to it"
        )
    ratio = future_value / present_value
    if ratio < 0.0:
        raise UndefinedRate(
            f"present_value and future_value must have the same sign, "
            f"got {present_value} and {future_value}"
        )
    if periods == 0:
        raise UndefinedRate("periods is zero, rate is undefined")
    if continuous_compounding:
        return math.log(ratio) / periods
    try:
        return ratio ** (1.0 / periods) - 1.0
    except OverflowError as e:
        raise NumericOverflow(
            f"rate growing {present_value} to {future_value} in {periods} periods "
            f"is too large to represent"
        ) from e


def _solve_periods(rate: float, present_value: float, future_value: float,
                   continuous_compounding: bool) -> float:
    if not continuous_compounding:
        require_rate_above_minus_one(rate)
    if present_value == 0.0 or future_value == 0.0:
        raise DegenerateInput(
            f"periods needs non-zero present_value and future_value, "
            f"got {present_value} and {future_value}"
        )
    ratio = future_value / present_value
    if ratio < 0.0:
        raise UndefinedPeriods(
            f"present_value and future_value must have the same sign, "
            f"got {present_value} and {future_value}"
        )
    if rate == 0.0:
        if present_value == future_value:
            raise UndefinedPeriods(
                "rate is zero and present_value equals future_value, "
                "every period count fits so the answer is ambiguous"
            )
        raise UndefinedPeriods(
            f"rate is zero, present_value {present_value} never reaches future_value {future_value}"
        )
    if continuous_compounding:
        fractional_periods = math.log(ratio) / rate
    else:
        fractional_periods = math.log(ratio) / math.log1p(rate)
    if fractional_periods < 0.0:
        raise UndefinedPeriods(
            f"rate {rate} moves present_value {present_value} away from "
            f"future_value {future_value}"
        )
    return abs(fractional_periods)


# =============================================================================
# Public operations
# =============================================================================

def present_value(
        rate: float,
        periods: int,
        future_value: float,
        continuous_compounding: bool = False,
        *,
        sink: WarningSink | None = None,
) -> float:
    """
    Discount a future value back to period 0.

    Formula:
        pv = fv / (1 + r)^n
        pv = fv / e^(r * n)        (continuous_compounding)

    Args:
        rate: Periodic rate as decimal (e.g., 0.05 for 5%), > -1
        periods: Number of periods (non-negative whole number)
        future_value: Value at the final period
        continuous_compounding: Use e^(rt) growth instead of (1 + r)^n
        sink: Optional advisory warning sink (defaults to warnings.warn)

    Returns:
        Present value, same sign as future_value

    Raises:
        InvalidRate: If rate <= -1 with periodic compounding
        InvalidPeriods: If periods is negative or fractional
        NumericOverflow: If a shrinking rate needs a present value beyond the float range

    Example:
        >>> present_value(0.05, 3, 4000)
        3455.350394125904
    """
    rate = to_rate(rate)
    periods = to_periods(periods)
    future_value = to_money(future_value, name="future_value")
    check_rate(rate, sink)
    check_periods(periods, sink)
    return _solve_present_value(rate, periods, future_value, continuous_compounding)


def future_value(
        rate: float,
        periods: int,
        present_value: float,
        continuous_compounding: bool = False,
        *,
        sink: WarningSink | None = None,
) -> float:
    """
    Grow a present value forward to the final period.

    Formula:
        fv = pv * (1 + r)^n
        fv = pv * e^(r * n)        (continuous_compounding)

    Raises:
        InvalidRate: If rate <= -1 with periodic compounding
        InvalidPeriods: If periods is negative or fractional
        NumericOverflow: If the future value is beyond the float range

    Example:
        >>> future_value(0.11, 9, 247_000)
        631835.1228...
    """
    rate = to_rate(rate)
    periods = to_periods(periods)
    present_value = to_money(present_value, name="present_value")
    check_rate(rate, sink)
    check_periods(periods, sink)
    return _solve_future_value(rate, periods, present_value, continuous_compounding)


def rate(
        periods: int,
        present_value: float,
        future_value: float,
        continuous_compounding: bool = False,
        *,
        sink: WarningSink | None = None,
) -> float:
    """
    Periodic rate that grows present_value into future_value.

    Formula:
        r = (fv / pv)^(1 / n) - 1
        r = ln(fv / pv) / n        (continuous_compounding)

    Args:
        periods: Number of periods (> 0)
        present_value: Starting value (non-zero)
        future_value: Ending value (non-zero, same sign as present_value)
        continuous_compounding: Solve for a continuously compounded rate
        sink: Optional advisory warning sink

    Returns:
        Rate as decimal

    Raises:
        DegenerateInput: If present_value or future_value is zero
        UndefinedRate: If the values differ in sign or periods is zero
        InvalidPeriods: If periods is negative or fractional
        NumericOverflow: If the implied rate is beyond the float range
    """
    periods = to_periods(periods)
    present_value = to_money(present_value, name="present_value")
    future_value = to_money(future_value, name="future_value")
    check_periods(periods, sink)
    result = _solve_rate(periods, present_value, future_value, continuous_compounding)
    check_rate(result, sink)
    return result


def periods(
        rate: float,
        present_value: float,
        future_value: float,
        continuous_compounding: bool = False,
        *,
        sink: WarningSink | None = None,
) -> float:
    """
    Number of periods for present_value to grow into future_value.

    Formula:
        n = ln(fv / pv) / ln(1 + r)
        n = ln(fv / pv) / r        (continuous_compounding)

    The result is usually fractional. The whole number of periods needed is
    available on the solution record from periods_solution().

    Raises:
        InvalidRate: If rate <= -1 with periodic compounding
        DegenerateInput: If present_value or future_value is zero
        UndefinedPeriods: If rate is zero, the values differ in sign, or the
            rate moves present_value away from future_value
    """
    rate = to_rate(rate)
    present_value = to_money(present_value, name="present_value")
    future_value = to_money(future_value, name="future_value")
    check_rate(rate, sink)
    result = _solve_periods(rate, present_value, future_value, continuous_compounding)
    check_periods(result, sink)
    return result


# -----------------------------------------------------------------------------
# Solution variants
# -----------------------------------------------------------------------------

def present_value_solution(
        rate: float,
        periods: int,
        future_value: float,
        continuous_compounding: bool = False,
        *,
        sink: WarningSink | None = None,
) -> TvmSolution:
    """present_value() wrapped in a TvmSolution with its formulas."""
    pv = present_value(rate, periods, future_value, continuous_compounding, sink=sink)
    return build_tvm_solution(TvmVariable.PRESENT_VALUE, continuous_compounding,
                              to_rate(rate), to_periods(periods), pv, to_money(future_value))


def future_value_solution(
        rate: float,
        periods: int,
        present_value: float,
        continuous_compounding: bool = False,
        *,
        sink: WarningSink | None = None,
) -> TvmSolution:
    """future_value() wrapped in a TvmSolution with its formulas."""
    fv = future_value(rate, periods, present_value, continuous_compounding, sink=sink)
    return build_tvm_solution(TvmVariable.FUTURE_VALUE, continuous_compounding,
                              to_rate(rate), to_periods(periods), to_money(present_value), fv)


def rate_solution(
        periods: int,
        present_value: float,
        future_value: float,
        continuous_compounding: bool = False,
        *,
        sink: WarningSink | None = None,
) -> TvmSolution:
    """rate() wrapped in a TvmSolution with its formulas."""
    r = rate(periods, present_value, future_value, continuous_compounding, sink=sink)
    return build_tvm_solution(TvmVariable.RATE, continuous_compounding, r,
                              to_periods(periods), to_money(present_value), to_money(future_value))


def periods_solution(
        rate: float,
        present_value: float,
        future_value: float,
        continuous_compounding: bool = False,
        *,
        sink: WarningSink | None = None,
) -> TvmSolution:
    """
    periods() wrapped in a TvmSolution.

    solution.fractional_periods holds the exact answer and solution.periods
    the whole number of periods needed to reach future_value.
    """
    n = periods(rate, present_value, future_value, continuous_compounding, sink=sink)
    return build_tvm_solution(TvmVariable.PERIODS, continuous_compounding, to_rate(rate),
                              n, to_money(present_value), to_money(future_value))


def recalculate(
        solution: TvmSolution,
        calculated_field: TvmVariable,
        continuous_compounding: bool | None = None,
        *,
        sink: WarningSink | None = None,
) -> TvmSolution:
    """
    Solve a record again for a different field, keeping the other three.

    Useful for checking a solution from another direction, or for switching
    between periodic and continuous compounding. The fractional period count
    is carried over, so a periods solve recalculated for future value lands
    on the record's future value.

    Args:
        solution: Record to start from
        calculated_field: Field to solve for this time
        continuous_compounding: New compounding mode, or None to keep the record's
        sink: Optional advisory warning sink

    Returns:
        New TvmSolution
    """
    continuous = solution.continuous_compounding if continuous_compounding is None else continuous_compounding
    r = solution.rate
    n = solution.fractional_periods
    pv = solution.present_value
    fv = solution.future_value
    match calculated_field:
        case TvmVariable.PRESENT_VALUE:
            check_rate(r, sink)
            pv = _solve_present_value(r, n, fv, continuous)
        case TvmVariable.FUTURE_VALUE:
            check_rate(r, sink)
            fv = _solve_future_value(r, n, pv, continuous)
        case TvmVariable.RATE:
            r = _solve_rate(n, pv, fv, continuous)
            check_rate(r, sink)
        case TvmVariable.PERIODS:
            check_rate(r, sink)
            n = _solve_periods(r, pv, fv, continuous)
    check_periods(n, sink)
    return build_tvm_solution(calculated_field, continuous, r, n, pv, fv)


# =============================================================================
# What-if tables: vary the compounding frequency
# =============================================================================

@dataclass(frozen=True)
class ScenarioList:
    """
    A one-input, one-output what-if table.

    entries holds (input, output) pairs in the order requested. For the
    compounding tables the input is the number of compounding periods, with
    math.inf standing for continuous compounding.
    """
    setup: str
    input_variable: TvmVariable
    output_variable: TvmVariable
    entries: tuple[tuple[float, float], ...]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


def _compounding_entries(
        total_rate: float,
        compounding_periods: Sequence[int],
        include_continuous_compounding: bool,
        value_at: Callable[[float, int, bool], float],
) -> tuple[tuple[float, float], ...]:
    entries: list[tuple[float, float]] = []
    for count in compounding_periods:
        m = to_periods(count, name="compounding_periods")
        if m == 0:
            raise InvalidPeriods("compounding_periods entries must be at least 1, got 0")
        entries.append((float(m), value_at(total_rate / m, m, False)))
    if include_continuous_compounding:
        entries.append((math.inf, value_at(total_rate, 1, True)))
    return tuple(entries)


def future_value_vary_compounding_periods(
        solution: TvmSolution,
        compounding_periods: Sequence[int],
        include_continuous_compounding: bool = False,
) -> ScenarioList:
    """
    Future value of the record's present value under different compounding.

    The record's total growth rate, rate * fractional_periods, is held fixed
    and split into m equal sub-periods for each m in compounding_periods:

        fv_m = pv * (1 + R / m)^m,    R = rate * fractional_periods

    Example:
        Quarterly versus monthly compounding of 10% a year over one year:
        >>> s = future_value_solution(0.10, 1, 100.0)
        >>> future_value_vary_compounding_periods(s, [4, 12]).entries
        ((4.0, 110.3812890625), (12.0, 110.4713...))
    """
    total_rate = solution.rate * solution.fractional_periods
    pv = solution.present_value
    entries = _compounding_entries(total_rate, compounding_periods,
                                   include_continuous_compounding,
                                   lambda r, n, continuous: _solve_future_value(r, n, pv, continuous))
    setup = (f"Compare future values with different compounding periods where the rate is "
             f"{total_rate:.6f} and the present value is {pv:.4f}.")
    return ScenarioList(setup=setup, input_variable=TvmVariable.PERIODS,
                        output_variable=TvmVariable.FUTURE_VALUE, entries=entries)


def present_value_vary_compounding_periods(
        solution: TvmSolution,
        compounding_periods: Sequence[int],
        include_continuous_compounding: bool = False,
) -> ScenarioList:
    """
    Present value of the record's future value under different compounding.

        pv_m = fv / (1 + R / m)^m,    R = rate * fractional_periods
    """
    total_rate = solution.rate * solution.fractional_periods
    fv = solution.future_value
    entries = _compounding_entries(total_rate, compounding_periods,
                                   include_continuous_compounding,
                                   lambda r, n, continuous: _solve_present_value(r, n, fv, continuous))
    setup = (f"Compare present values with different compounding periods where the rate is "
             f"{total_rate:.6f} and the future value is {fv:.4f}.")
    return ScenarioList(setup=setup, input_variable=TvmVariable.PERIODS,
                        output_variable=TvmVariable.PRESENT_VALUE, entries=entries)
