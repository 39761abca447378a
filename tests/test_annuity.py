"""
Unit tests for the annuity solver.

Version: 0.1.0
Last Updated: 2026-10-19
Status: Active

================================================================================
FUNCTIONS UNDER TEST:
================================================================================
- annuity_factor: (1 - (1 + r)^-n) / r, n at r = 0
- present_value_annuity / future_value_annuity (ordinary and due)
- payment: cashflow sign convention
- annuity_rate: numpy bracket scan + scipy brentq
- annuity_periods: closed-form NPER
- *_solution variants
- Long horizons: payment limit -pv * r once (1 + r)^n leaves the float range

================================================================================
TEST DATA SOURCES:
================================================================================
- 13,000 loan at 8% over 5 years: payment -3255.9339
- Seeded random loans from tests/utilities.py for round trips

================================================================================
"""

import math
import unittest

from finance_solution.annuity import (
    annuity_factor,
    annuity_periods,
    annuity_periods_solution,
    annuity_rate,
    annuity_rate_solution,
    future_value_annuity,
    future_value_annuity_solution,
    payment,
    payment_solution,
    present_value_annuity,
    present_value_annuity_solution,
)
from finance_solution.errors import (
    DegenerateInput,
    InvalidRate,
    NoConvergence,
    NumericOverflow,
    UndefinedPeriods,
    UndefinedRate,
)
from finance_solution.solution import CashflowVariable
from tests.utilities import RecordingSink, generate_loan_scenarios

# =============================================================================
# Test Parameters
# =============================================================================

DECIMAL_PLACES_FOR_ASSERTIONS: int = 9
PAYMENT_TOLERANCE: float = 1e-4
RELATIVE_TOLERANCE: float = 1e-6
NUM_RANDOM_LOANS: int = 40

# Module-level test data (populated by setUpModule)
LOAN_SCENARIOS: list = []


# =============================================================================
# Module Setup/Teardown
# =============================================================================

def setUpModule():
    """Generate random loans."""
    global LOAN_SCENARIOS
    LOAN_SCENARIOS = generate_loan_scenarios(NUM_RANDOM_LOANS)
    if not LOAN_SCENARIOS:
        raise RuntimeError("setUpModule failed: No loan scenarios were created")


def tearDownModule():
    """Clean up module-level data."""
    LOAN_SCENARIOS.clear()


def cashflow_residual(rate, periods, present_value, future_value, pmt, due_at_beginning=False):
    """pv * (1 + r)^n + pmt * (1 + r * due) * ((1 + r)^n - 1) / r + fv, which is zero for a balanced annuity."""
    growth = (1 + rate) ** periods
    factor = periods if rate == 0 else (growth - 1) / rate
    due = 1 + rate if due_at_beginning else 1
    return present_value * growth + pmt * due * factor + future_value


# =============================================================================
# Test Classes
# =============================================================================

class TestAnnuityFactor(unittest.TestCase):
    """Annuity factor and its zero-rate limit."""

    def test_known_value(self):
        expected = (1 - 1.08 ** -5) / 0.08
        self.assertAlmostEqual(annuity_factor(0.08, 5), expected, places=12)

    def test_zero_rate_is_periods(self):
        for n in (0, 1, 12, 360):
            with self.subTest(periods=n):
                self.assertEqual(annuity_factor(0.0, n), n)

    def test_tiny_rate_approaches_periods(self):
        for n in (1, 12, 360):
            with self.subTest(periods=n):
                self.assertTrue(math.isclose(annuity_factor(1e-9, n), n, rel_tol=1e-6))

    def test_invalid_rate(self):
        with self.assertRaises(InvalidRate):
            annuity_factor(-1.0, 5)


class TestAnnuityValues(unittest.TestCase):
    """Present and future value of a payment stream."""

    def test_present_value_retires_loan(self):
        self.assertAlmostEqual(present_value_annuity(0.08, 5, 3255.933909), 13_000.0, places=3)

    def test_present_value_carries_payment_sign(self):
        self.assertLess(present_value_annuity(0.05, 10, -100.0), 0.0)

    def test_due_is_ordinary_times_one_plus_rate(self):
        ordinary = present_value_annuity(0.034, 10, 500.0)
        due = present_value_annuity(0.034, 10, 500.0, due_at_beginning=True)
        self.assertAlmostEqual(due, ordinary * 1.034, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_future_value_is_grown_present_value(self):
        for due in (False, True):
            with self.subTest(due=due):
                pv = present_value_annuity(0.06, 20, 250.0, due)
                fv = future_value_annuity(0.06, 20, 250.0, due)
                self.assertAlmostEqual(fv, pv * 1.06 ** 20, places=6)

    def test_zero_rate(self):
        self.assertEqual(present_value_annuity(0.0, 12, 100.0), 1200.0)
        self.assertEqual(future_value_annuity(0.0, 12, 100.0), 1200.0)


class TestPayment(unittest.TestCase):
    """Payment that carries pv to fv."""

    def test_known_loan(self):
        self.assertAlmostEqual(payment(0.08, 5, 13_000), -3255.9339, delta=PAYMENT_TOLERANCE)

    def test_textbook_formula_for_zero_future_value(self):
        pv, r, n = 250_000.0, 0.005, 360
        self.assertAlmostEqual(payment(r, n, pv), -pv * r / (1 - (1 + r) ** -n), places=8)

    def test_zero_rate(self):
        self.assertEqual(payment(0.0, 10, 1000.0), -100.0)
        self.assertEqual(payment(0.0, 10, 1000.0, -200.0), -80.0)

    def test_zero_periods(self):
        self.assertEqual(payment(0.05, 0, 100.0, -100.0), 0.0)
        with self.assertRaises(UndefinedPeriods):
            payment(0.05, 0, 100.0, 0.0)

    def test_due_is_ordinary_over_one_plus_rate(self):
        ordinary = payment(0.01, 24, 5000.0)
        due = payment(0.01, 24, 5000.0, due_at_beginning=True)
        self.assertAlmostEqual(due, ordinary / 1.01, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_random_loans_balance(self):
        for loan in LOAN_SCENARIOS:
            with self.subTest(scenario_id=loan.scenario_id):
                pmt = payment(loan.rate, loan.periods, loan.present_value, loan.future_value,
                              loan.due_at_beginning)
                residual = cashflow_residual(loan.rate, loan.periods, loan.present_value,
                                             loan.future_value, pmt, loan.due_at_beginning)
                self.assertLess(abs(residual), 1e-6 * max(1.0, loan.present_value * (1 + loan.rate) ** loan.periods))


class TestAnnuityRate(unittest.TestCase):
    """Iterative rate solve."""

    def test_known_loan(self):
        self.assertAlmostEqual(annuity_rate(5, -3255.933909, 13_000), 0.08, places=7)

    def test_zero_rate_loan(self):
        self.assertAlmostEqual(annuity_rate(10, -100.0, 1000.0), 0.0, places=10)

    def test_savings_toward_future_value(self):
        fv = future_value_annuity(0.004, 120, 200.0)
        self.assertAlmostEqual(annuity_rate(120, -200.0, 0.0, fv), 0.004, places=9)

    def test_round_trip_random_loans(self):
        for loan in LOAN_SCENARIOS:
            if loan.due_at_beginning and loan.periods == 1 and loan.future_value == 0.0:
                continue  # payment equals pv for every rate
            with self.subTest(scenario_id=loan.scenario_id):
                pmt = payment(loan.rate, loan.periods, loan.present_value, loan.future_value,
                              loan.due_at_beginning)
                r = annuity_rate(loan.periods, pmt, loan.present_value, loan.future_value,
                                 loan.due_at_beginning)
                self.assertTrue(math.isclose(r, loan.rate, rel_tol=RELATIVE_TOLERANCE))

    def test_degenerate_and_undefined(self):
        with self.assertRaises(DegenerateInput):
            annuity_rate(10, 0.0, 0.0, 0.0)
        with self.assertRaises(UndefinedRate):
            annuity_rate(0, -100.0, 1000.0)
        with self.assertRaises(UndefinedRate):
            annuity_rate(10, 100.0, 1000.0)

    def test_iteration_bound(self):
        with self.assertRaises(NoConvergence):
            annuity_rate(5, -3255.933909, 13_000, max_iterations=1)

    def test_tolerance_is_enforced(self):
        with self.assertRaises(NoConvergence):
            annuity_rate(5, -3255.933909, 13_000, tolerance=-1.0)


class TestAnnuityPeriods(unittest.TestCase):
    """Closed-form NPER."""

    def test_known_loan(self):
        self.assertAlmostEqual(annuity_periods(0.08, -3255.933909, 13_000), 5.0, places=6)

    def test_zero_rate(self):
        self.assertEqual(annuity_periods(0.0, -100.0, 1000.0), 10.0)
        with self.assertRaises(UndefinedPeriods):
            annuity_periods(0.0, 0.0, 1000.0)

    def test_payment_below_interest_never_repays(self):
        with self.assertRaises(UndefinedPeriods):
            annuity_periods(0.1, -50.0, 1000.0)

    def test_round_trip_random_loans(self):
        for loan in LOAN_SCENARIOS:
            with self.subTest(scenario_id=loan.scenario_id):
                pmt = payment(loan.rate, loan.periods, loan.present_value, loan.future_value,
                              loan.due_at_beginning)
                n = annuity_periods(loan.rate, pmt, loan.present_value, loan.future_value,
                                    loan.due_at_beginning)
                self.assertTrue(math.isclose(n, loan.periods, rel_tol=RELATIVE_TOLERANCE))

    def test_solution_rounds_up_partial_period(self):
        solution = annuity_periods_solution(0.01, -500.0, 10_000.0)
        self.assertIs(solution.calculated_field, CashflowVariable.PERIODS)
        self.assertGreater(solution.fractional_periods, 22.0)
        self.assertEqual(solution.periods, math.ceil(solution.fractional_periods))
        self.assertEqual(solution.formula_symbolic, "n = ln((pmt - fv * r) / (pmt + pv * r)) / ln(1 + r)")


class TestCashflowSolutions(unittest.TestCase):
    """Solution records and their loan totals."""

    def test_payment_solution(self):
        solution = payment_solution(0.08, 5, 13_000)
        self.assertIs(solution.calculated_field, CashflowVariable.PAYMENT)
        self.assertEqual(solution.periods, 5)
        self.assertFalse(solution.due_at_beginning)
        self.assertAlmostEqual(solution.sum_of_payments, solution.payment * 5, places=9)
        self.assertAlmostEqual(solution.sum_of_principal, -13_000.0, places=9)
        self.assertAlmostEqual(solution.sum_of_interest, solution.sum_of_payments + 13_000.0, places=9)
        self.assertEqual(solution.formula,
                         "-3255.9339 = (13000.0000 * 1.080000^5 * -0.080000) / (1.080000^5 - 1)")
        self.assertEqual(solution.formula_symbolic, "pmt = ((pv * (1 + r)^n) * -r) / ((1 + r)^n - 1)")

    def test_payment_solution_with_balloon_due(self):
        solution = payment_solution(0.01, 12, 1000.0, -500.0, due_at_beginning=True)
        self.assertEqual(solution.formula_symbolic,
                         "pmt = (((pv * (1 + r)^n) + fv) * -r) / (((1 + r)^n - 1) * (1 + r))")
        self.assertAlmostEqual(solution.sum_of_principal, -(1000.0 - 500.0 / 1.01), places=9)

    def test_zero_rate_payment_formula(self):
        solution = payment_solution(0.0, 10, 1000.0, -200.0)
        self.assertEqual(solution.formula, "-80.0000 = (-1000.0000 + 200.0000) / 10")
        self.assertEqual(solution.formula_symbolic, "pmt = (-pv - fv) / n")

    def test_present_value_annuity_solution(self):
        solution = present_value_annuity_solution(0.034, 10, 500.0)
        self.assertIs(solution.calculated_field, CashflowVariable.PRESENT_VALUE_ANNUITY)
        self.assertEqual(solution.future_value, 0.0)
        self.assertAlmostEqual(solution.sum_of_payments, 5000.0, places=9)
        self.assertAlmostEqual(solution.sum_of_principal, solution.present_value, places=9)
        self.assertEqual(solution.formula_symbolic, "pv = pmt * ((1 - (1 / (1 + r))^n) / r)")

    def test_future_value_annuity_solution_due(self):
        solution = future_value_annuity_solution(0.05, 3, 100.0, due_at_beginning=True)
        self.assertAlmostEqual(solution.future_value, 100.0 * (1.05 ** 3 - 1) / 0.05 * 1.05, places=9)
        self.assertEqual(solution.formula_symbolic, "fv = pmt * (((1 + r)^n - 1) / r) * (1 + r)")

    def test_rate_solution(self):
        solution = annuity_rate_solution(5, -3255.933909, 13_000)
        self.assertIs(solution.calculated_field, CashflowVariable.RATE)
        self.assertAlmostEqual(solution.rate, 0.08, places=7)
        self.assertTrue(solution.formula.startswith("0.080000 solves 13000.0000 + -3255.9339"))

    def test_advisories_reach_sink(self):
        sink = RecordingSink()
        payment_solution(0.001, 2400, 100_000.0, sink=sink)
        self.assertEqual(len(sink.messages), 1)


class TestLongHorizons(unittest.TestCase):
    """2000 periods at 50%: (1 + r)^n is beyond the float range."""

    def test_payment_takes_interest_only_limit(self):
        self.assertAlmostEqual(payment(0.5, 2000, 1000.0), -500.0, places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertAlmostEqual(payment(0.5, 2000, 1000.0, due_at_beginning=True), -500.0 / 1.5,
                               places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertAlmostEqual(payment(0.5, 2000, 1000.0, -250.0), -500.0, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_payment_solution_builds(self):
        solution = payment_solution(0.5, 2000, 1000.0)
        self.assertEqual(solution.periods, 2000)
        self.assertAlmostEqual(solution.sum_of_payments, -1_000_000.0, delta=PAYMENT_TOLERANCE)
        self.assertAlmostEqual(solution.sum_of_principal, -1000.0, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_present_value_annuity_converges(self):
        self.assertAlmostEqual(present_value_annuity(0.5, 2000, -100.0), -200.0,
                               places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_overflowing_values_are_named(self):
        with self.assertRaises(NumericOverflow):
            future_value_annuity(0.5, 2000, -100.0)
        with self.assertRaises(NumericOverflow):
            future_value_annuity_solution(0.5, 2000, -100.0)
        with self.assertRaises(NumericOverflow):
            present_value_annuity(-0.5, 2000, -100.0)


if __name__ == '__main__':
    unittest.main()
