"""
Finance Solution - Worked Examples

**Version**: 0.1.0
**Last Updated**: 2026-10-19
**Status**: Active

Textbook time-value-of-money word problems with their published answers.
Each problem names the field to solve for and carries only the inputs that
problem states. Rates quoted as APR with a compounding frequency are turned
into a periodic rate with convert_rate(), and years into periods, exactly as
the problem would be worked by hand.

Structure:
  (1) RateQuote   - a rate as quoted in the problem (APR / EAR / EPR)
  (2) WordProblem - question, inputs, field solved for and expected answer
  (3) WORD_PROBLEMS - registry, verified by tests/test_examples_verification.py

Answer units:
  "value"  - the solved field itself (money, rate or periods)
  "years"  - solved periods divided by compounding periods per year
  "apr"    - solved periodic rate times compounding periods per year
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from . import annuity as tvm_annuity
from . import tvm
from .rate_math import RateKind, convert_rate
from .solution import CashflowSolution, CashflowVariable, TvmSolution, TvmVariable


# =============================================================================
# ENUMS
# =============================================================================

class AnswerUnit(Enum):
    """How the published answer relates to the solved field."""
    VALUE = "value"
    YEARS = "years"
    APR = "apr"


# =============================================================================
# (1) RATE QUOTE
# =============================================================================

@dataclass(frozen=True)
class RateQuote:
    """Rate as the problem quotes it."""
    kind: RateKind
    rate: float
    compounding_periods_per_year: int = 1

    def periodic_rate(self) -> float:
        return convert_rate(self.rate, self.kind, self.compounding_periods_per_year).epr


# =============================================================================
# (2) WORD PROBLEM
# =============================================================================

@dataclass(frozen=True)
class WordProblem:
    """One worked problem. Unused inputs stay None."""
    name: str
    question: str
    solve_for: TvmVariable | CashflowVariable
    expected: float
    places: int                                  # decimal places the answer is published to
    answer_unit: AnswerUnit = AnswerUnit.VALUE
    rate: float | None = None                    # periodic rate, if stated directly
    rate_quote: RateQuote | None = None          # annual quote, if stated that way
    periods: int | None = None
    years: int | None = None                     # with rate_quote, periods = years * m
    present_value: float | None = None
    future_value: float | None = None
    payment: float | None = None
    due_at_beginning: bool = False
    expected_periods: int | None = None          # whole periods on the solution record

    @property
    def compounding_periods_per_year(self) -> int:
        return 1 if self.rate_quote is None else self.rate_quote.compounding_periods_per_year

    def periodic_rate(self) -> float | None:
        if self.rate_quote is not None:
            return self.rate_quote.periodic_rate()
        return self.rate

    def period_count(self) -> int | None:
        if self.years is not None:
            return self.years * self.compounding_periods_per_year
        return self.periods


def solve(problem: WordProblem) -> TvmSolution | CashflowSolution:
    """Route a word problem to the matching *_solution operation."""
    r = problem.periodic_rate()
    n = problem.period_count()
    pv = problem.present_value
    fv = problem.future_value
    match problem.solve_for:
        case TvmVariable.PRESENT_VALUE:
            return tvm.present_value_solution(r, n, fv)
        case TvmVariable.FUTURE_VALUE:
            return tvm.future_value_solution(r, n, pv)
        case TvmVariable.RATE:
            return tvm.rate_solution(n, pv, fv)
        case TvmVariable.PERIODS:
            return tvm.periods_solution(r, pv, fv)
        case CashflowVariable.PAYMENT:
            return tvm_annuity.payment_solution(r, n, pv, fv or 0.0, problem.due_at_beginning)
        case CashflowVariable.PRESENT_VALUE_ANNUITY:
            return tvm_annuity.present_value_annuity_solution(r, n, problem.payment, problem.due_at_beginning)
        case CashflowVariable.FUTURE_VALUE_ANNUITY:
            return tvm_annuity.future_value_annuity_solution(r, n, problem.payment, problem.due_at_beginning)
        case CashflowVariable.RATE:
            return tvm_annuity.annuity_rate_solution(n, problem.payment, pv, fv or 0.0, problem.due_at_beginning)
        case CashflowVariable.PERIODS:
            return tvm_annuity.annuity_periods_solution(r, problem.payment, pv, fv or 0.0,
                                                        problem.due_at_beginning)
    raise ValueError(f"unsupported solve_for {problem.solve_for!r}")


def answer(problem: WordProblem, solution: TvmSolution | CashflowSolution) -> float:
    """The number the problem asks for, in the problem's answer unit."""
    field = problem.solve_for
    if field in (TvmVariable.PERIODS, CashflowVariable.PERIODS):
        value = solution.fractional_periods
    elif field in (TvmVariable.RATE, CashflowVariable.RATE):
        value = solution.rate
    elif field is TvmVariable.PRESENT_VALUE or field is CashflowVariable.PRESENT_VALUE_ANNUITY:
        value = solution.present_value
    elif field is TvmVariable.FUTURE_VALUE or field is CashflowVariable.FUTURE_VALUE_ANNUITY:
        value = solution.future_value
    else:
        value = solution.payment
    if problem.answer_unit is AnswerUnit.YEARS:
        return value / problem.compounding_periods_per_year
    if problem.answer_unit is AnswerUnit.APR:
        return value * problem.compounding_periods_per_year
    return value


# =============================================================================
# (3) REGISTRY
# =============================================================================

PV_LUMP_SUM = WordProblem(
    name="pv_lump_sum",
    question="How much must be invested today at 5% to have 4,000 in three years?",
    solve_for=TvmVariable.PRESENT_VALUE,
    rate=0.05, periods=3, future_value=4_000.0,
    expected=3455.350394125904, places=9,
)

RATE_LUMP_SUM = WordProblem(
    name="rate_lump_sum",
    question="What rate grows 3,455.350394125904 into 4,000 over three periods?",
    solve_for=TvmVariable.RATE,
    periods=3, present_value=3455.350394125904, future_value=4_000.0,
    expected=0.05, places=6,
)

LOAN_PAYMENT = WordProblem(
    name="loan_payment",
    question="What is the annual payment on a 13,000 loan at 8% over five years?",
    solve_for=CashflowVariable.PAYMENT,
    rate=0.08, periods=5, present_value=13_000.0, future_value=0.0,
    expected=-3255.93, places=2,
)

WORD_PROBLEMS: list[WordProblem] = [
    PV_LUMP_SUM,
    RATE_LUMP_SUM,
    LOAN_PAYMENT,
    WordProblem(
        name="pv_retirement_target",
        question=("If you want 140,000 in 13 years and can earn 14% a year, "
                  "how much must you invest now?"),
        solve_for=TvmVariable.PRESENT_VALUE,
        rate=0.14, periods=13, future_value=140_000.0,
        expected=25_489.71, places=2,
    ),
    WordProblem(
        name="fv_nine_years",
        question="What will 247,000 invested at 11% a year be worth after 9 years?",
        solve_for=TvmVariable.FUTURE_VALUE,
        rate=0.11, periods=9, present_value=247_000.0,
        expected=631_835.12, places=2,
    ),
    WordProblem(
        name="periods_to_target",
        question="How many years until 136,000 grows to 468,000 at 8% a year?",
        solve_for=TvmVariable.PERIODS,
        rate=0.08, present_value=136_000.0, future_value=468_000.0,
        expected=16.06, places=2, expected_periods=17,
    ),
    WordProblem(
        name="rate_to_target",
        question="What annual rate turns 137,000 into 475,000 in 14 years?",
        solve_for=TvmVariable.RATE,
        periods=14, present_value=137_000.0, future_value=475_000.0,
        expected=0.0929, places=4,
    ),
    WordProblem(
        name="pv_semiannual_apr",
        question=("How much must be set aside now to have 197,000 in 5 years "
                  "at an APR of 13% compounded semiannually?"),
        solve_for=TvmVariable.PRESENT_VALUE,
        rate_quote=RateQuote(RateKind.APR, 0.13, 2), years=5, future_value=197_000.0,
        expected=104_947.03, places=2,
    ),
    WordProblem(
        name="fv_monthly_apr",
        question="What will 153,000 be worth after 13 years at an APR of 10% compounded monthly?",
        solve_for=TvmVariable.FUTURE_VALUE,
        rate_quote=RateQuote(RateKind.APR, 0.10, 12), years=13, present_value=153_000.0,
        expected=558_386.38, places=2,
    ),
    WordProblem(
        name="years_monthly_apr",
        question=("How many years until 197,000 grows to 554,000 at an APR of 8% "
                  "compounded monthly?"),
        solve_for=TvmVariable.PERIODS,
        rate_quote=RateQuote(RateKind.APR, 0.08, 12), present_value=197_000.0, future_value=554_000.0,
        expected=12.97, places=2, answer_unit=AnswerUnit.YEARS,
    ),
    WordProblem(
        name="apr_weekly",
        question=("What APR, compounded weekly, turns 134,000 into 459,000 "
                  "in 15 years?"),
        solve_for=TvmVariable.RATE,
        rate_quote=RateQuote(RateKind.APR, 0.0, 52), years=15,  # only the frequency is given
        present_value=134_000.0, future_value=459_000.0,
        expected=0.0821, places=4, answer_unit=AnswerUnit.APR,
    ),
]

WORD_PROBLEMS_BY_NAME: dict[str, WordProblem] = {p.name: p for p in WORD_PROBLEMS}
