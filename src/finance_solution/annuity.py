# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math

import numpy as np
from scipy.optimize import brentq

from .errors import DegenerateInput, NoConvergence, NumericOverflow, UndefinedPeriods, UndefinedRate
from .rate_math import require_rate_above_minus_one
from .solution import CashflowSolution, CashflowVariable, build_cashflow_solution
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
# Rate search parameters
# =============================================================================

DEFAULT_TOLERANCE: float = 1e-10  # max scaled residual accepted from the rate search
DEFAULT_MAX_ITERATIONS: int = 100
RATE_SEARCH_XTOL: float = 1e-14

# Candidate rates scanned for a sign change before handing a bracket to brentq.
# Dense around ordinary rates, sparse out to 100,000% per period.
RATE_SEARCH_GRID: np.ndarray = np.concatenate([
    np.linspace(-0.99, 1.0, 400),
    np.geomspace(1.0, 1000.0, 61)[1:],
])

# =============================================================================
# Annuity factors
# =============================================================================

def _annuity_factor(rate: float, periods: float) -> float:
    if rate == 0.0:
        return float(periods)
    # 1 - (1 + r)^-n, via expm1/log1p so that tiny rates keep their precision
    try:
        return -math.expm1(-periods * math.log1p(rate)) / rate
    except OverflowError as e:
        raise NumericOverflow(
            f"annuity factor at rate {rate} over {periods} periods is beyond the float range"
        ) from e


def _accumulation_factor(rate: float, periods: float) -> float:
    if rate == 0.0:
        return float(periods)
    try:
        return math.expm1(periods * math.log1p(rate)) / rate
    except OverflowError as e:
        raise NumericOverflow(
            f"accumulation factor at rate {rate} over {periods} periods is beyond the float range"
        ) from e


def annuity_factor(rate: float, periods: float) -> float:
    """
    Present value of 1 paid at the end of each of n periods.

    Formula:
        a(n, r) = (1 - (1 + r)^-n) / r
        a(n, 0) = n

    The zero-rate case is its own branch rather than the limit of a division
    by a near-zero rate.

    Args:
        rate: Periodic rate as decimal, > -1
        periods: Number of periods (>= 0)

    Returns:
        Annuity factor

    Raises:
        InvalidRate: If rate <= -1
        InvalidPeriods: If periods is negative
        NumericOverflow: If a shrinking rate over many periods leaves the float range

    Example:
        >>> annuity_factor(0.08, 5)
        3.9927100370...
    """
    rate = to_rate(rate)
    periods = to_fractional_periods(periods)
    require_rate_above_minus_one(rate)
    return _annuity_factor(rate, periods)


def present_value_annuity(
        rate: float,
        periods: int,
        payment: float,
        due_at_beginning: bool = False,
        *,
        sink: WarningSink | None = None,
) -> float:
    """
    Value at period 0 of a stream of equal payments.

    Formula:
        PV = pmt * (1 - (1 + r)^-n) / r
        PV = pmt * (1 - (1 + r)^-n) / r * (1 + r)     (due_at_beginning)

    The result has the same sign as payment.

    Raises:
        InvalidRate: If rate <= -1
        InvalidPeriods: If periods is negative or fractional
        NumericOverflow: If the value is beyond the float range
    """
    rate = to_rate(rate)
    periods = to_periods(periods)
    payment = to_money(payment, name="payment")
    require_rate_above_minus_one(rate)
    check_rate(rate, sink)
    check_periods(periods, sink)
    value = payment * _annuity_factor(rate, periods)
    if due_at_beginning:
        value *= 1.0 + rate
    return value


def future_value_annuity(
        rate: float,
        periods: int,
        payment: float,
        due_at_beginning: bool = False,
        *,
        sink: WarningSink | None = None,
) -> float:
    """
    Value at the final period of a stream of equal payments.

    Formula:
        FV = pmt * (1 - (1 + r)^-n) / r * (1 + r)^n = pmt * ((1 + r)^n - 1) / r
        FV = pmt * ((1 + r)^n - 1) / r * (1 + r)      (due_at_beginning)

    Raises:
        InvalidRate: If rate <= -1
        InvalidPeriods: If periods is negative or fractional
        NumericOverflow: If the value is beyond the float range
    """
    rate = to_rate(rate)
    periods = to_periods(periods)
    payment = to_money(payment, name="payment")
    require_rate_above_minus_one(rate)
    check_rate(rate, sink)
    check_periods(periods, sink)
    value = payment * _accumulation_factor(rate, periods)
    if due_at_beginning:
        value *= 1.0 + rate
    return value


# =============================================================================
# Payment (loan amortization)
# =============================================================================

def _solve_payment(rate: float, periods: int, present_value: float, future_value: float,
                   due_at_beginning: bool) -> float:
    if periods == 0:
        if present_value + future_value == 0.0:
            return 0.0
        raise UndefinedPeriods(
            f"periods is zero, no payment settles present_value {present_value} "
            f"against future_value {future_value}"
        )
    if rate == 0.0:
        return -(present_value + future_value) / periods
    due_factor = 1.0 + rate if due_at_beginning else 1.0
    try:
        growth_less_one = math.expm1(periods * math.log1p(rate))
    except OverflowError:
        growth_less_one = math.inf
    if math.isinf(growth_less_one) or math.isinf(present_value * growth_less_one):
        # (1 + r)^n past the float range: the payment is the interest on pv alone
        return -present_value * rate / due_factor
    numerator = -(present_value * (growth_less_one + 1.0) + future_value) * rate
    denominator = growth_less_one * due_factor
    return numerator / denominator


def payment(
        rate: float,
        periods: int,
        present_value: float,
        future_value: float = 0.0,
        due_at_beginning: bool = False,
        *,
        sink: WarningSink | None = None,
) -> float:
    """
    Constant payment that carries present_value to future_value.

    Cashflow sign convention: money received is positive, money paid out is
    negative. Borrowing 13,000 (pv = +13000) gives a negative payment.

    Formula:
        pmt = -(pv * (1 + r)^n + fv) * r / ((1 + r)^n - 1)
        denominator multiplied by (1 + r) when due_at_beginning
        pmt = -(pv + fv) / n                                  (r = 0)

    With fv = 0 this is the textbook loan payment pv * r / (1 - (1 + r)^-n)
    with the sign flipped. Once (1 + r)^n passes the float range the payment
    takes its limit, -pv * r (divided by 1 + r when due_at_beginning).

    Args:
        rate: Periodic rate as decimal, > -1
        periods: Number of payments (non-negative whole number)
        present_value: Amount at period 0 (e.g., loan principal received)
        future_value: Balance left at the final period (default 0)
        due_at_beginning: Payments at the start of each period (annuity due)
        sink: Optional advisory warning sink

    Returns:
        Payment per period

    Raises:
        InvalidRate: If rate <= -1
        InvalidPeriods: If periods is negative or fractional
        UndefinedPeriods: If periods is zero and pv + fv is not zero

    Example:
        >>> payment(0.08, 5, 13_000)
        -3255.9339...
    """
    rate = to_rate(rate)
    periods = to_periods(periods)
    present_value = to_money(present_value, name="present_value")
    future_value = to_money(future_value, name="future_value")
    require_rate_above_minus_one(rate)
    check_rate(rate, sink)
    check_periods(periods, sink)
    return _solve_payment(rate, periods, present_value, future_value, due_at_beginning)


# =============================================================================
# Rate from payment (iterative)
# =============================================================================

def _rate_residual_vector(
        rates: np.ndarray, periods: int, payment: float, present_value: float,
        future_value: float, due_at_beginning: bool,
) -> np.ndarray:
    """Scaled cashflow residual at each candidate rate; overflow comes back non-finite."""
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        discount = np.power(1.0 + rates, -float(periods))
        safe_rates = np.where(rates == 0.0, 1.0, rates)
        factor = np.where(rates == 0.0, float(periods), (1.0 - discount) / safe_rates)
        due = 1.0 + rates if due_at_beginning else 1.0
        return present_value + payment * due * factor + future_value * discount


def annuity_rate(
        periods: int,
        payment: float,
        present_value: float,
        future_value: float = 0.0,
        due_at_beginning: bool = False,
        tolerance: float = DEFAULT_TOLERANCE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        *,
        sink: WarningSink | None = None,
) -> float:
    """
    Periodic rate implied by a payment stream, by root finding.

    No closed form exists, so the rate is the root of the cashflow residual
    expressed at period 0:

        f(r) = pv + pmt * (1 + r * due) * (1 - (1 + r)^-n) / r + fv * (1 + r)^-n

    ALGORITHM:
    ----------
    1. Evaluate f on RATE_SEARCH_GRID with numpy and keep the finite values
    2. Pick the sign change closest to a zero rate as the bracket
    3. Refine with Brent's method (scipy.optimize.brentq), bounded by
       max_iterations
    4. Accept the root only if |f(r)| / scale <= tolerance, where
       scale = max(1, |pv|, |fv|, |pmt| * n)

    Args:
        periods: Number of payments (> 0)
        payment: Payment per period, cashflow sign convention
        present_value: Amount at period 0
        future_value: Amount at the final period (default 0)
        due_at_beginning: Payments at the start of each period
        tolerance: Largest scaled residual accepted (default 1e-10)
        max_iterations: Iteration bound for Brent's method (default 100)
        sink: Optional advisory warning sink

    Returns:
        Rate as decimal

    Raises:
        DegenerateInput: If payment, present_value and future_value are all zero
        UndefinedRate: If periods is zero or no rate in (-1, 1000] balances the cashflows
        NoConvergence: If the search exceeds max_iterations or misses the tolerance
        NumericOverflow: If the search leaves the float range inside its bracket

    Example:
        >>> annuity_rate(5, -3255.933926, 13_000)
        0.0800000...
    """
    periods = to_periods(periods)
    payment = to_money(payment, name="payment")
    present_value = to_money(present_value, name="present_value")
    future_value = to_money(future_value, name="future_value")
    check_periods(periods, sink)
    if payment == 0.0 and present_value == 0.0 and future_value == 0.0:
        raise DegenerateInput("payment, present_value and future_value are all zero, any rate fits")
    if periods == 0:
        raise UndefinedRate("periods is zero, rate is undefined")

    scale = max(1.0, abs(present_value), abs(future_value), abs(payment) * periods)

    def objective(
            rate: float,
            periods: int,
            payment: float,
            present_value: float,
            future_value: float,
            due_at_beginning: bool,
            scale: float,
    ) -> float:
        """Objective: scaled cashflow residual at period 0. All dependencies explicit."""
        due = 1.0 + rate if due_at_beginning else 1.0
        discount = math.exp(-periods * math.log1p(rate))
        return (present_value + payment * due * _annuity_factor(rate, periods)
                + future_value * discount) / scale

    residuals = _rate_residual_vector(
        RATE_SEARCH_GRID, periods, payment, present_value, future_value, due_at_beginning
    )
    finite = np.isfinite(residuals)
    signs = np.sign(residuals)
    brackets = np.flatnonzero(finite[:-1] & finite[1:] & (signs[:-1] * signs[1:] <= 0))
    if brackets.size == 0:
        raise UndefinedRate(
            f"no rate in (-1, {RATE_SEARCH_GRID[-1]:g}] balances payment {payment} "
            f"over {periods} periods with present_value {present_value} "
            f"and future_value {future_value}"
        )
    closest = brackets[np.argmin(np.minimum(np.abs(RATE_SEARCH_GRID[brackets]),
                                            np.abs(RATE_SEARCH_GRID[brackets + 1])))]
    lo = float(RATE_SEARCH_GRID[closest])
    hi = float(RATE_SEARCH_GRID[closest + 1])
    args = (periods, payment, present_value, future_value, due_at_beginning, scale)

    try:
        root = brentq(objective, lo, hi, args=args, xtol=RATE_SEARCH_XTOL, maxiter=max_iterations)
    except RuntimeError as e:
        # brentq raises RuntimeError when maxiter is reached
        raise NoConvergence(
            f"rate search did not converge within {max_iterations} iterations "
            f"in bracket [{lo:.6f}, {hi:.6f}]. Original error: {e}"
        ) from e
    except (OverflowError, NumericOverflow) as e:
        raise NumericOverflow(
            f"rate search in bracket [{lo:.6f}, {hi:.6f}] left the float range. "
            f"Original error: {e}"
        ) from e
    except ValueError as e:
        raise UndefinedRate(
            f"rate search bracket [{lo:.6f}, {hi:.6f}] does not contain a root. "
            f"Original error: {e}"
        ) from e

    residual = abs(objective(root, *args))
    if residual > tolerance:
        raise NoConvergence(
            f"rate search stopped at {root:.10f} with scaled residual {residual:.3e}, "
            f"above tolerance {tolerance:.1e}"
        )
    check_rate(root, sink)
    return root


# =============================================================================
# Periods from payment (closed form)
# =============================================================================

def _solve_annuity_periods(rate: float, payment: float, present_value: float, future_value: float,
                           due_at_beginning: bool) -> float:
    if rate == 0.0:
        if payment == 0.0:
            raise UndefinedPeriods("rate and payment are both zero, periods is undefined")
        fractional_periods = -(present_value + future_value) / payment
    else:
        effective_payment = payment * (1.0 + rate) if due_at_beginning else payment
        numerator = effective_payment - future_value * rate
        denominator = effective_payment + present_value * rate
        if denominator == 0.0 or numerator / denominator <= 0.0:
            raise UndefinedPeriods(
                f"payment {payment} never carries present_value {present_value} "
                f"to future_value {future_value} at rate {rate}"
            )
        fractional_periods = math.log(numerator / denominator) / math.log1p(rate)
    if fractional_periods < 0.0:
        raise UndefinedPeriods(
            f"payment {payment} moves present_value {present_value} away from "
            f"future_value {future_value} at rate {rate}"
        )
    return abs(fractional_periods)


def annuity_periods(
        rate: float,
        payment: float,
        present_value: float,
        future_value: float = 0.0,
        due_at_beginning: bool = False,
        *,
        sink: WarningSink | None = None,
) -> float:
    """
    Number of payments needed to carry present_value to future_value.

    Formula (same as the spreadsheet NPER function):
        n = ln((p - fv * r) / (p + pv * r)) / ln(1 + r),   p = pmt * (1 + r * due)
        n = -(pv + fv) / pmt                                (r = 0)

    Raises:
        InvalidRate: If rate <= -1
        UndefinedPeriods: If the payment never settles the balance
    """
    rate = to_rate(rate)
    payment = to_money(payment, name="payment")
    present_value = to_money(present_value, name="present_value")
    future_value = to_money(future_value, name="future_value")
    require_rate_above_minus_one(rate)
    check_rate(rate, sink)
    result = _solve_annuity_periods(rate, payment, present_value, future_value, due_at_beginning)
    check_periods(result, sink)
    return result


# =============================================================================
# Solution variants
# =============================================================================

def present_value_annuity_solution(
        rate: float,
        periods: int,
        payment: float,
        due_at_beginning: bool = False,
        *,
        sink: WarningSink | None = None,
) -> CashflowSolution:
    """present_value_annuity() wrapped in a CashflowSolution."""
    value = present_value_annuity(rate, periods, payment, due_at_beginning, sink=sink)
    return build_cashflow_solution(
        CashflowVariable.PRESENT_VALUE_ANNUITY, to_rate(rate), to_periods(periods),
        value, 0.0, to_money(payment), due_at_beginning,
    )


def future_value_annuity_solution(
        rate: float,
        periods: int,
        payment: float,
        due_at_beginning: bool = False,
        *,
        sink: WarningSink | None = None,
) -> CashflowSolution:
    """future_value_annuity() wrapped in a CashflowSolution."""
    value = future_value_annuity(rate, periods, payment, due_at_beginning, sink=sink)
    return build_cashflow_solution(
        CashflowVariable.FUTURE_VALUE_ANNUITY, to_rate(rate), to_periods(periods),
        0.0, value, to_money(payment), due_at_beginning,
    )


def payment_solution(
        rate: float,
        periods: int,
        present_value: float,
        future_value: float = 0.0,
        due_at_beginning: bool = False,
        *,
        sink: WarningSink | None = None,
) -> CashflowSolution:
    """
    payment() wrapped in a CashflowSolution with loan totals.

    Example:
        >>> s = payment_solution(0.08, 5, 13_000)
        >>> s.formula_symbolic
        'pmt = ((pv * (1 + r)^n) * -r) / ((1 + r)^n - 1)'
    """
    pmt = payment(rate, periods, present_value, future_value, due_at_beginning, sink=sink)
    return build_cashflow_solution(
        CashflowVariable.PAYMENT, to_rate(rate), to_periods(periods),
        to_money(present_value), to_money(future_value), pmt, due_at_beginning,
    )


def annuity_rate_solution(
        periods: int,
        payment: float,
        present_value: float,
        future_value: float = 0.0,
        due_at_beginning: bool = False,
        tolerance: float = DEFAULT_TOLERANCE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        *,
        sink: WarningSink | None = None,
) -> CashflowSolution:
    """annuity_rate() wrapped in a CashflowSolution."""
    r = annuity_rate(periods, payment, present_value, future_value, due_at_beginning,
                     tolerance, max_iterations, sink=sink)
    return build_cashflow_solution(
        CashflowVariable.RATE, r, to_periods(periods),
        to_money(present_value), to_money(future_value), to_money(payment), due_at_beginning,
    )


def annuity_periods_solution(
        rate: float,
        payment: float,
        present_value: float,
        future_value: float = 0.0,
        due_at_beginning: bool = False,
        *,
        sink: WarningSink | None = None,
) -> CashflowSolution:
    """annuity_periods() wrapped in a CashflowSolution; periods is the whole-number ceiling."""
    n = annuity_periods(rate, payment, present_value, future_value, due_at_beginning, sink=sink)
    return build_cashflow_solution(
        CashflowVariable.PERIODS, to_rate(rate), n,
        to_money(present_value), to_money(future_value), to_money(payment), due_at_beginning,
    )
