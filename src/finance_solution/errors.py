# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

__version__ = "0.1.0"

# =============================================================================
# Error kinds raised by the solvers
# =============================================================================
#
# Every kind derives from ValueError so callers that already guard numeric
# input with `except ValueError` keep working.
#
#   TvmError
#   ├── InvalidRate        rate makes (1 + rate) non-positive
#   ├── InvalidPeriods     negative or non-integral period count
#   ├── UndefinedRate      closed-form or iterative rate solve has no answer
#   ├── UndefinedPeriods   closed-form periods solve has no answer
#   ├── DegenerateInput    zero value collapses the fv / pv ratio
#   ├── NoConvergence      iterative solver hit its iteration bound
#   └── NumericOverflow    result is too large for a float


class TvmError(ValueError):
    """Base class for all time-value-of-money failures."""


class InvalidRate(TvmError):
    """Rate is outside the domain of the growth factor (rate <= -1)."""


class InvalidPeriods(TvmError):
    """Period count is negative or not a whole number."""


class UndefinedRate(TvmError):
    """No rate satisfies the supplied values."""


class UndefinedPeriods(TvmError):
    """No finite period count satisfies the supplied values."""


class DegenerateInput(UndefinedRate, UndefinedPeriods):
    """
    A zero present or future value makes the ratio fv / pv meaningless.

    Raised by the rate and periods solves, so it is catchable as either
    UndefinedRate or UndefinedPeriods.
    """


class NoConvergence(TvmError):
    """Iterative rate solve failed to meet its tolerance within the iteration bound."""


class NumericOverflow(TvmError):
    """Result magnitude is beyond the float range (growth over very many periods)."""
