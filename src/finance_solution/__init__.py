# Requires Python 3.12+
"""
Finance Solution — time value of money with formulas and per-period series.

Every calculation is available as a plain number and as an immutable
solution record carrying its inputs and formula strings. Records expand into
per-period series with tvm_series() and payment_series().
"""

from __future__ import annotations

__version__ = "0.1.0"

# Errors
from finance_solution.errors import (
    TvmError,
    InvalidRate,
    InvalidPeriods,
    UndefinedRate,
    UndefinedPeriods,
    DegenerateInput,
    NoConvergence,
    NumericOverflow,
)

# Boundary coercion and advisory warnings
from finance_solution.validation import (
    TvmAdvisoryWarning,
    PERIODS_PRECISION_THRESHOLD,
    RATE_MAGNITUDE_THRESHOLD,
    COMPOUNDING_PERIODS_THRESHOLD,
    to_money,
    to_rate,
    to_periods,
    to_fractional_periods,
)

# Rounding helpers
from finance_solution.rounding import (
    round_to,
    round_to_cent,
    round_to_fraction_of_cent,
)

# Rate math
from finance_solution.rate_math import (
    discount_factor,
    continuous_growth_factor,
    apr_to_ear,
    ear_to_apr,
    apr_to_epr,
    epr_to_apr,
    ear_to_epr,
    epr_to_ear,
    apr_continuous_to_ear,
    ear_to_apr_continuous,
    apr_to_ear_vector,
    ear_to_apr_vector,
    RateKind,
    RateConversion,
    convert_rate,
)

# Solution records
from finance_solution.solution import (
    TvmVariable,
    CashflowVariable,
    TvmSolution,
    CashflowSolution,
)

# Lump sums
from finance_solution.tvm import (
    present_value,
    future_value,
    rate,
    periods,
    present_value_solution,
    future_value_solution,
    rate_solution,
    periods_solution,
    recalculate,
    ScenarioList,
    future_value_vary_compounding_periods,
    present_value_vary_compounding_periods,
)

# Annuities
from finance_solution.annuity import (
    annuity_factor,
    present_value_annuity,
    future_value_annuity,
    payment,
    annuity_rate,
    annuity_periods,
    present_value_annuity_solution,
    future_value_annuity_solution,
    payment_solution,
    annuity_rate_solution,
    annuity_periods_solution,
)

# Series
from finance_solution.series import (
    TvmPeriod,
    PaymentPeriod,
    TvmSeries,
    PaymentSeries,
    tvm_series,
    payment_series,
)

__all__ = [
    "__version__",
    # Errors
    "TvmError",
    "InvalidRate",
    "InvalidPeriods",
    "UndefinedRate",
    "UndefinedPeriods",
    "DegenerateInput",
    "NoConvergence",
    "NumericOverflow",
    # Boundary
    "TvmAdvisoryWarning",
    "PERIODS_PRECISION_THRESHOLD",
    "RATE_MAGNITUDE_THRESHOLD",
    "COMPOUNDING_PERIODS_THRESHOLD",
    "to_money",
    "to_rate",
    "to_periods",
    "to_fractional_periods",
    # Rounding
    "round_to",
    "round_to_cent",
    "round_to_fraction_of_cent",
    # Rate math
    "discount_factor",
    "continuous_growth_factor",
    "apr_to_ear",
    "ear_to_apr",
    "apr_to_epr",
    "epr_to_apr",
    "ear_to_epr",
    "epr_to_ear",
    "apr_continuous_to_ear",
    "ear_to_apr_continuous",
    "apr_to_ear_vector",
    "ear_to_apr_vector",
    "RateKind",
    "RateConversion",
    "convert_rate",
    # Solutions
    "TvmVariable",
    "CashflowVariable",
    "TvmSolution",
    "CashflowSolution",
    # Lump sums
    "present_value",
    "future_value",
    "rate",
    "periods",
    "present_value_solution",
    "future_value_solution",
    "rate_solution",
    "periods_solution",
    "recalculate",
    "ScenarioList",
    "future_value_vary_compounding_periods",
    "present_value_vary_compounding_periods",
    # Annuities
    "annuity_factor",
    "present_value_annuity",
    "future_value_annuity",
    "payment",
    "annuity_rate",
    "annuity_periods",
    "present_value_annuity_solution",
    "future_value_annuity_solution",
    "payment_solution",
    "annuity_rate_solution",
    "annuity_periods_solution",
    # Series
    "TvmPeriod",
    "PaymentPeriod",
    "TvmSeries",
    "PaymentSeries",
    "tvm_series",
    "payment_series",
]
