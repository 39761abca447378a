# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, fields

import numpy as np

from .solution import CashflowSolution, TvmSolution, TvmVariable, cashflow_view

__version__ = "0.1.0"

# =============================================================================
# Per-period records
# =============================================================================

@dataclass(frozen=True)
class TvmPeriod:
    """Value of a lump sum at one period. Period 0 carries rate 0."""
    period: int
    rate: float
    value: float
    formula: str
    formula_symbolic: str


@dataclass(frozen=True)
class PaymentPeriod:
    """
    One row of an amortization schedule.

    Signs follow the cashflow convention of the solution: on a loan received
    as a positive present value the payment, principal and interest are all
    negative. The *_remaining fields are the solution's totals minus *_to_date,
    so principal_remaining at the last period is the closure check.
    """
    period: int
    rate: float
    due_at_beginning: bool
    payment: float
    payments_to_date: float
    payments_remaining: float
    principal: float
    principal_to_date: float
    principal_remaining: float
    interest: float
    interest_to_date: float
    interest_remaining: float
    formula: str
    formula_symbolic: str


# =============================================================================
# Series containers
# =============================================================================

class _PeriodSeries(Sequence):
    """
    Fully materialized, read-only sequence of period records (0 .. N).

    Columns are exposed by field name for table renderers; numeric columns
    come back as float64 arrays.
    """
    record_type: type = object
    COLUMNS: tuple[str, ...] = ()

    def __init__(self, entries):
        self._entries: tuple = tuple(entries)
        for entry in self._entries:
            if not isinstance(entry, self.record_type):
                raise TypeError(
                    f"{type(self).__name__} holds {self.record_type.__name__} entries, "
                    f"got {type(entry).__name__}"
                )

    def __getitem__(self, index):
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self._entries)} periods)"

    def filter(self, predicate: Callable[[object], bool]):
        """New series holding only the periods for which predicate is true."""
        return type(self)(entry for entry in self._entries if predicate(entry))

    def column(self, name: str) -> np.ndarray:
        """
        One field across all periods.

        Raises:
            KeyError: If name is not one of COLUMNS
        """
        if name not in self.COLUMNS:
            raise KeyError(f"unknown column {name!r}, expected one of {self.COLUMNS}")
        values = [getattr(entry, name) for entry in self._entries]
        if name == "period":
            return np.array(values, dtype=np.int64)
        if name == "due_at_beginning":
            return np.array(values, dtype=bool)
        if name.startswith("formula"):
            return np.array(values, dtype=object)
        return np.array(values, dtype=np.float64)

    def to_arrays(self) -> dict[str, np.ndarray]:
        """Every column, in COLUMNS order."""
        return {name: self.column(name) for name in self.COLUMNS}


class TvmSeries(_PeriodSeries):
    record_type = TvmPeriod
    COLUMNS = tuple(f.name for f in fields(TvmPeriod))


class PaymentSeries(_PeriodSeries):
    record_type = PaymentPeriod
    COLUMNS = tuple(f.name for f in fields(PaymentPeriod))


# =============================================================================
# Lump-sum expansion
# =============================================================================

def tvm_series(solution: TvmSolution) -> TvmSeries:
    """
    Replay a lump-sum solution one period at a time.

    A present value solve walks backward from the future value, dividing by
    the one-period growth factor; every other solve walks forward from the
    present value. When the period count is fractional (a periods solve, or a
    record recalculated from one) the partial last period is pinned to the
    solution's future value, or the first to its present value when walking
    backward.

    Args:
        solution: Any TvmSolution

    Returns:
        TvmSeries with solution.periods + 1 entries
    """
    r = solution.rate
    n = solution.periods
    fractional = solution.fractional_periods != n
    if solution.continuous_compounding:
        growth = math.exp(r)
        growth_text = f"({math.e:.6f} ^ {r:.6f})"
        growth_symbol = "e^r"
    else:
        growth = 1.0 + r
        growth_text = f"{growth:.6f}"
        growth_symbol = "(1 + r)"

    entries: list[TvmPeriod] = []
    if solution.calculated_field is TvmVariable.PRESENT_VALUE:
        value = solution.future_value
        entries.append(TvmPeriod(n, r if n > 0 else 0.0, value, f"{value:.4f}", "value = fv"))
        for period in range(n - 1, -1, -1):
            next_value = value
            if period == 0 and fractional:
                value = solution.present_value
                entries.append(TvmPeriod(0, 0.0, value, f"{value:.4f}", "value = pv"))
                continue
            value = next_value / growth
            entries.append(TvmPeriod(
                period, r if period > 0 else 0.0, value,
                f"{value:.4f} = {next_value:.4f} / {growth_text}",
                f"value = {{next period value}} / {growth_symbol}",
            ))
        entries.reverse()
        return TvmSeries(entries)

    value = solution.present_value
    entries.append(TvmPeriod(0, 0.0, value, f"{value:.4f}", "value = pv"))
    for period in range(1, n + 1):
        previous_value = value
        if period == n and (fractional or solution.calculated_field is TvmVariable.PERIODS):
            value = solution.future_value
            entries.append(TvmPeriod(period, r, value, f"{value:.4f}", "value = fv"))
            continue
        value = previous_value * growth
        entries.append(TvmPeriod(
            period, r, value,
            f"{value:.4f} = {previous_value:.4f} * {growth_text}",
            f"value = {{previous period value}} * {growth_symbol}",
        ))
    return TvmSeries(entries)


# =============================================================================
# Payment (amortization) expansion
# =============================================================================

def payment_series(solution: CashflowSolution) -> PaymentSeries:
    """
    Amortization schedule for any annuity solution.

    RECURRENCE (periods i = 1 .. N):
    --------------------------------
        balance_(i-1) = pv + principal_to_date_(i-1)
        interest_i    = -(balance_(i-1) * r)       (0 in period 1 of an annuity due)
        principal_i   = payment - interest_i

    Present and future value annuity records are replayed as the loan the
    same payments would retire (pv -> -pv, fv -> -fv).

    When the period count is fractional the last payment is the closing
    amount that brings the balance to its target, -fv (or -fv / (1 + r) for
    an annuity due, whose last payment is one period before the fv date).

    The *_remaining fields are measured against the solution's own totals
    (sum_of_payments, sum_of_principal, sum_of_interest), so principal_remaining
    is the distance from the running balance to the target. It reaches zero
    at the last period only when the record's payment actually retires the
    balance.

    Args:
        solution: Any CashflowSolution

    Returns:
        PaymentSeries with solution.periods + 1 entries, period 0 first
    """
    present_value, future_value = cashflow_view(solution)
    r = solution.rate
    n = solution.periods
    due = solution.due_at_beginning
    settle_final = solution.fractional_periods != n
    target_balance = -(future_value / (1.0 + r)) if due else -future_value

    entries: list[PaymentPeriod] = [PaymentPeriod(
        period=0,
        rate=r,
        due_at_beginning=due,
        payment=0.0,
        payments_to_date=0.0,
        payments_remaining=solution.sum_of_payments,
        principal=0.0,
        principal_to_date=0.0,
        principal_remaining=solution.sum_of_principal,
        interest=0.0,
        interest_to_date=0.0,
        interest_remaining=solution.sum_of_interest,
        formula=f"{0.0:.4f}",
        formula_symbolic="interest = 0",
    )]
    payments_to_date = principal_to_date = interest_to_date = 0.0
    for period in range(1, n + 1):
        balance = present_value + principal_to_date
        if due and period == 1:
            interest = 0.0
            formula, symbolic = f"{interest:.4f}", "interest = 0"
        else:
            interest = -(balance * r)
            formula = f"{interest:.4f} = -({balance:.4f} * {r:.6f})"
            symbolic = "interest = -(principal * rate)"
        if settle_final and period == n:
            principal = target_balance - balance
            pmt = principal + interest
        else:
            pmt = solution.payment
            principal = pmt - interest
        payments_to_date += pmt
        principal_to_date += principal
        interest_to_date += interest
        entries.append(PaymentPeriod(
            period=period,
            rate=r,
            due_at_beginning=due,
            payment=pmt,
            payments_to_date=payments_to_date,
            payments_remaining=solution.sum_of_payments - payments_to_date,
            principal=principal,
            principal_to_date=principal_to_date,
            principal_remaining=solution.sum_of_principal - principal_to_date,
            interest=interest,
            interest_to_date=interest_to_date,
            interest_remaining=solution.sum_of_interest - interest_to_date,
            formula=formula,
            formula_symbolic=symbolic,
        ))
    return PaymentSeries(entries)
