# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .rounding import round_to

__version__ = "0.1.0"

# =============================================================================
# Solution records
# =============================================================================
#
# A solution record is immutable and holds everything needed to rebuild its
# per-period series. Formula strings render money with 4 decimals, rates and
# growth multipliers with 6, and solved fractional periods with 2.

MONEY_PLACES: int = 4
RATE_PLACES: int = 6
FRACTIONAL_PERIODS_PLACES: int = 2
PERIODS_ROUNDING_PLACES: int = 4  # fractional periods are rounded here before ceil()


class TvmVariable(Enum):
    """Field solved for in a lump-sum calculation."""
    RATE = "Rate"
    PERIODS = "Periods"
    PRESENT_VALUE = "Present Value"
    FUTURE_VALUE = "Future Value"

    def __str__(self) -> str:
        return self.value


class CashflowVariable(Enum):
    """Field solved for in a fixed-payment annuity calculation."""
    PRESENT_VALUE_ANNUITY = "Present Value Annuity"
    FUTURE_VALUE_ANNUITY = "Future Value Annuity"
    PAYMENT = "Payment"
    RATE = "Rate"
    PERIODS = "Periods"

    def __str__(self) -> str:
        return self.value

    @property
    def is_valuation(self) -> bool:
        """True when the record values a payment stream rather than a loan."""
        return self in (CashflowVariable.PRESENT_VALUE_ANNUITY, CashflowVariable.FUTURE_VALUE_ANNUITY)


@dataclass(frozen=True)
class TvmSolution:
    """Lump-sum calculation: pv and fv share a sign."""
    calculated_field: TvmVariable
    continuous_compounding: bool
    rate: float
    periods: int
    fractional_periods: float
    present_value: float
    future_value: float
    formula: str
    formula_symbolic: str


@dataclass(frozen=True)
class CashflowSolution:
    """
    Fixed-payment annuity calculation.

    For PAYMENT, RATE and PERIODS records present_value, future_value and
    payment follow the cashflow sign convention: money received is positive,
    money paid is negative, and pv * (1 + r)^n + pmt * annuity + fv = 0.

    For PRESENT_VALUE_ANNUITY and FUTURE_VALUE_ANNUITY records the computed
    value carries the payment's sign (it is the worth of the payments) and the
    other value is zero.

    The sum_of_* fields describe the equivalent loan: principal is the balance
    change the payments achieve, interest is the rest.
    """
    calculated_field: CashflowVariable
    rate: float
    periods: int
    fractional_periods: float
    present_value: float
    future_value: float
    payment: float
    due_at_beginning: bool
    sum_of_payments: float
    sum_of_principal: float
    sum_of_interest: float
    formula: str
    formula_symbolic: str


# =============================================================================
# Builder helpers
# =============================================================================

def periods_from_fractional(fractional_periods: float) -> int:
    """
    Whole periods needed to cover a fractional count.

    Rounds to 4 places before taking the ceiling so that 16.000000001 is
    treated as 16 rather than 17.
    """
    return math.ceil(round_to(fractional_periods, PERIODS_ROUNDING_PLACES))


def _require_finite(**values: float) -> None:
    for name, value in values.items():
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValueError(f"{name} must be a finite number, got {value}")


def _require_formulas(formula: str, formula_symbolic: str) -> None:
    if not formula or not formula_symbolic:
        raise ValueError("formula and formula_symbolic must be non-empty strings")


def _to_cashflow_signs(calculated_field: CashflowVariable, present_value: float,
                       future_value: float) -> tuple[float, float]:
    if calculated_field.is_valuation:
        return -present_value, -future_value
    return present_value, future_value


def cashflow_view(solution: CashflowSolution) -> tuple[float, float]:
    """
    Present and future value of the record in the cashflow sign convention.

    Valuation records store the worth of the payments, which is the negative
    of the loan that the same payments would retire.
    """
    return _to_cashflow_signs(solution.calculated_field, solution.present_value, solution.future_value)


# -----------------------------------------------------------------------------
# Lump-sum formulas
# -----------------------------------------------------------------------------

def tvm_formulas(
        calculated_field: TvmVariable,
        continuous_compounding: bool,
        rate: float,
        periods: int,
        fractional_periods: float,
        present_value: float,
        future_value: float,
) -> tuple[str, str]:
    """Numeric and symbolic formula strings for a lump-sum solution."""
    pv, fv, r = present_value, future_value, rate
    multiplier = 1.0 + r
    if calculated_field is TvmVariable.PRESENT_VALUE:
        if continuous_compounding:
            return (f"{pv:.4f} = {fv:.4f} / {math.e:.6f}^({r:.6f} * {periods})",
                    "pv = fv / e^(rt)")
        return (f"{pv:.4f} = {fv:.4f} / ({multiplier:.6f} ^ {periods})",
                "pv = fv / (1 + r)^n")
    if calculated_field is TvmVariable.FUTURE_VALUE:
        if continuous_compounding:
            return (f"{fv:.4f} = {pv:.4f} * {math.e:.6f}^({r:.6f} * {periods})",
                    "fv = pv * e^(rt)")
        return (f"{fv:.4f} = {pv:.4f} * ({multiplier:.6f} ^ {periods})",
                "fv = pv * (1 + r)^n")
    if calculated_field is TvmVariable.RATE:
        if continuous_compounding:
            return (f"{r:.6f} = ln({fv:.4f} / {pv:.4f}) / {periods}",
                    "r = ln(fv / pv) / t")
        return (f"{r:.6f} = (({fv:.4f} / {pv:.4f}) ^ (1 / {periods})) - 1",
                "r = ((fv / pv) ^ (1 / n)) - 1")
    if continuous_compounding:
        return (f"{fractional_periods:.2f} = ln({fv:.4f} / {pv:.4f}) / {r:.6f}",
                "n = ln(fv / pv) / r")
    return (f"{fractional_periods:.2f} = log({fv:.4f} / {pv:.4f}, base {multiplier:.6f})",
            "n = log(fv / pv, base (1 + r))")


def build_tvm_solution(
        calculated_field: TvmVariable,
        continuous_compounding: bool,
        rate: float,
        fractional_periods: float,
        present_value: float,
        future_value: float,
) -> TvmSolution:
    """
    Assemble a TvmSolution from already computed values.

    Args:
        calculated_field: Which of the four values was solved for
        continuous_compounding: Whether e^(rt) growth was used
        rate: Periodic rate as decimal
        fractional_periods: Period count, possibly fractional for a periods solve
        present_value: Value at period 0
        future_value: Value at the final period

    Returns:
        TvmSolution with rendered formulas

    Raises:
        ValueError: If any number is not finite
    """
    _require_finite(rate=rate, fractional_periods=fractional_periods,
                    present_value=present_value, future_value=future_value)
    periods = periods_from_fractional(fractional_periods)
    formula, formula_symbolic = tvm_formulas(
        calculated_field, continuous_compounding, rate, periods,
        fractional_periods, present_value, future_value,
    )
    _require_formulas(formula, formula_symbolic)
    return TvmSolution(
        calculated_field=calculated_field,
        continuous_compounding=continuous_compounding,
        rate=rate,
        periods=periods,
        fractional_periods=fractional_periods,
        present_value=present_value,
        future_value=future_value,
        formula=formula,
        formula_symbolic=formula_symbolic,
    )


# -----------------------------------------------------------------------------
# Annuity formulas
# -----------------------------------------------------------------------------

def payment_formulas(
        rate: float,
        periods: int,
        present_value: float,
        future_value: float,
        payment: float,
        due_at_beginning: bool,
) -> tuple[str, str]:
    """Numeric and symbolic formula strings for a payment solve."""
    pv, fv, r = present_value, future_value, rate
    multiplier = 1.0 + r
    if periods == 0:
        formula, symbolic = f"{0.0:.4f}", "0"
    elif r == 0.0:
        if fv == 0.0:
            formula, symbolic = f"{-pv:.4f} / {periods}", "-pv / n"
        elif pv == 0.0:
            formula, symbolic = f"{-fv:.4f} / {periods}", "-fv / n"
        else:
            add_fv = f" - {fv:.4f}" if fv > 0.0 else f" + {-fv:.4f}"
            formula, symbolic = f"({-pv:.4f}{add_fv}) / {periods}", "(-pv - fv) / n"
    else:
        if fv == 0.0:
            numerator = f"({pv:.4f} * {multiplier:.6f}^{periods} * {-r:.6f})"
            symbolic_numerator = "((pv * (1 + r)^n) * -r)"
        elif pv == 0.0:
            numerator = f"({fv:.4f} * {-r:.6f})"
            symbolic_numerator = "(fv * -r)"
        else:
            add_fv = f" + {fv:.4f}" if fv > 0.0 else f" - {-fv:.4f}"
            numerator = f"((({pv:.4f} * {multiplier:.6f}^{periods}){add_fv}) * {-r:.6f})"
            symbolic_numerator = "(((pv * (1 + r)^n) + fv) * -r)"
        denominator = f"({multiplier:.6f}^{periods} - 1)"
        symbolic_denominator = "((1 + r)^n - 1)"
        if due_at_beginning:
            denominator = f"({denominator} * {multiplier:.6f})"
            symbolic_denominator = f"({symbolic_denominator} * (1 + r))"
        formula = f"{numerator} / {denominator}"
        symbolic = f"{symbolic_numerator} / {symbolic_denominator}"
    return f"{payment:.4f} = {formula}", f"pmt = {symbolic}"


def present_value_annuity_formulas(
        rate: float, periods: int, payment: float, present_value: float, due_at_beginning: bool
) -> tuple[str, str]:
    multiplier = 1.0 + rate
    if rate == 0.0:
        return f"{present_value:.4f} = {payment:.4f} * {periods}", "pv = pmt * n"
    formula = f"{present_value:.4f} = {payment:.4f} * ((1 - (1 / {multiplier:.6f})^{periods}) / {rate:.6f})"
    symbolic = "pv = pmt * ((1 - (1 / (1 + r))^n) / r)"
    if due_at_beginning:
        formula += f" * {multiplier:.6f}"
        symbolic += " * (1 + r)"
    return formula, symbolic


def future_value_annuity_formulas(
        rate: float, periods: int, payment: float, future_value: float, due_at_beginning: bool
) -> tuple[str, str]:
    multiplier = 1.0 + rate
    if rate == 0.0:
        return f"{future_value:.4f} = {payment:.4f} * {periods}", "fv = pmt * n"
    formula = f"{future_value:.4f} = {payment:.4f} * (({multiplier:.6f}^{periods} - 1) / {rate:.6f})"
    symbolic = "fv = pmt * (((1 + r)^n - 1) / r)"
    if due_at_beginning:
        formula += f" * {multiplier:.6f}"
        symbolic += " * (1 + r)"
    return formula, symbolic


def annuity_rate_formulas(
        rate: float, periods: int, present_value: float, future_value: float,
        payment: float, due_at_beginning: bool
) -> tuple[str, str]:
    multiplier = 1.0 + rate
    due = f" * {multiplier:.6f}" if due_at_beginning else ""
    symbolic_due = " * (1 + r)" if due_at_beginning else ""
    if rate == 0.0:
        formula = f"{rate:.6f} solves {present_value:.4f} + {payment:.4f} * {periods} + {future_value:.4f} = 0"
    else:
        formula = (
            f"{rate:.6f} solves {present_value:.4f} + {payment:.4f}{due} * "
            f"((1 - {multiplier:.6f}^-{periods}) / {rate:.6f}) + "
            f"{future_value:.4f} / {multiplier:.6f}^{periods} = 0"
        )
    symbolic = f"pv + pmt{symbolic_due} * ((1 - (1 + r)^-n) / r) + fv / (1 + r)^n = 0"
    return formula, symbolic


def annuity_periods_formulas(
        rate: float, fractional_periods: float, present_value: float, future_value: float,
        payment: float, due_at_beginning: bool
) -> tuple[str, str]:
    n = f"{fractional_periods:.2f}"
    if rate == 0.0:
        return (f"{n} = -({present_value:.4f} + {future_value:.4f}) / {payment:.4f}",
                "n = -(pv + fv) / pmt")
    multiplier = 1.0 + rate
    if due_at_beginning:
        pmt = f"{payment:.4f} * {multiplier:.6f}"
        symbolic_pmt = "pmt * (1 + r)"
    else:
        pmt = f"{payment:.4f}"
        symbolic_pmt = "pmt"
    formula = (
        f"{n} = ln(({pmt} - {future_value:.4f} * {rate:.6f}) / "
        f"({pmt} + {present_value:.4f} * {rate:.6f})) / ln({multiplier:.6f})"
    )
    symbolic = f"n = ln(({symbolic_pmt} - fv * r) / ({symbolic_pmt} + pv * r)) / ln(1 + r)"
    return formula, symbolic


def build_cashflow_solution(
        calculated_field: CashflowVariable,
        rate: float,
        fractional_periods: float,
        present_value: float,
        future_value: float,
        payment: float,
        due_at_beginning: bool,
) -> CashflowSolution:
    """
    Assemble a CashflowSolution and its loan totals from computed values.

    Totals (cashflow convention pv_cf, fv_cf):
        sum_of_payments  = pmt * n
        sum_of_principal = -(pv_cf + fv_cf)             ordinary annuity
                         = -(pv_cf + fv_cf / (1 + r))   annuity due
        sum_of_interest  = sum_of_payments - sum_of_principal

    For an annuity due the last payment falls one period before the future
    value date, so only fv / (1 + r) of the future value is retired by it.

    Raises:
        ValueError: If any number is not finite
    """
    _require_finite(rate=rate, fractional_periods=fractional_periods, present_value=present_value,
                    future_value=future_value, payment=payment)
    periods = periods_from_fractional(fractional_periods)
    pv, fv, pmt, r = present_value, future_value, payment, rate

    match calculated_field:
        case CashflowVariable.PAYMENT:
            formula, symbolic = payment_formulas(r, periods, pv, fv, pmt, due_at_beginning)
        case CashflowVariable.PRESENT_VALUE_ANNUITY:
            formula, symbolic = present_value_annuity_formulas(r, periods, pmt, pv, due_at_beginning)
        case CashflowVariable.FUTURE_VALUE_ANNUITY:
            formula, symbolic = future_value_annuity_formulas(r, periods, pmt, fv, due_at_beginning)
        case CashflowVariable.RATE:
            formula, symbolic = annuity_rate_formulas(r, periods, pv, fv, pmt, due_at_beginning)
        case _:
            formula, symbolic = annuity_periods_formulas(r, fractional_periods, pv, fv, pmt, due_at_beginning)
    _require_formulas(formula, symbolic)

    pv_cf, fv_cf = _to_cashflow_signs(calculated_field, pv, fv)
    sum_of_payments = pmt * fractional_periods
    if due_at_beginning:
        sum_of_principal = -(pv_cf + fv_cf / (1.0 + r))
    else:
        sum_of_principal = -(pv_cf + fv_cf)
    sum_of_interest = sum_of_payments - sum_of_principal

    return CashflowSolution(
        calculated_field=calculated_field,
        rate=rate,
        periods=periods,
        fractional_periods=fractional_periods,
        present_value=present_value,
        future_value=future_value,
        payment=payment,
        due_at_beginning=due_at_beginning,
        sum_of_payments=sum_of_payments,
        sum_of_principal=sum_of_principal,
        sum_of_interest=sum_of_interest,
        formula=formula,
        formula_symbolic=symbolic,
    )
