"""
Unit tests for rate math: growth factors and APR / EPR / EAR conversions.

Version: 0.1.0
Last Updated: 2026-10-19
Status: Active

================================================================================
FUNCTIONS UNDER TEST:
================================================================================
- discount_factor: (1 + r)^n
- continuous_growth_factor: e^(r * n)
- apr_to_ear / ear_to_apr, apr_to_epr / epr_to_apr, ear_to_epr / epr_to_ear
- apr_continuous_to_ear / ear_to_apr_continuous
- apr_to_ear_vector / ear_to_apr_vector
- convert_rate: all three conventions at once

================================================================================
"""

import math
import unittest
import warnings

import numpy as np

from finance_solution.errors import InvalidPeriods, InvalidRate, NumericOverflow
from finance_solution.rate_math import (
    RateKind,
    apr_continuous_to_ear,
    apr_to_ear,
    apr_to_ear_vector,
    apr_to_epr,
    continuous_growth_factor,
    convert_rate,
    discount_factor,
    ear_to_apr,
    ear_to_apr_continuous,
    ear_to_apr_vector,
    ear_to_epr,
    epr_to_apr,
    epr_to_ear,
)
from finance_solution.validation import TvmAdvisoryWarning
from tests.utilities import RecordingSink, get_random_state

# =============================================================================
# Test Parameters
# =============================================================================

DECIMAL_PLACES_FOR_ASSERTIONS: int = 12
RELATIVE_TOLERANCE: float = 1e-9

COMPOUNDING_FREQUENCIES: list[int] = [1, 2, 4, 12, 52, 365]

# Module-level test data (populated by setUpModule)
RATE_SAMPLES: list[float] = []


# =============================================================================
# Module Setup/Teardown
# =============================================================================

def setUpModule():
    """Draw reproducible rate samples, including negative rates."""
    global RATE_SAMPLES
    rng = get_random_state()
    RATE_SAMPLES = [0.0, 0.05, 0.12, -0.03] + list(rng.uniform(-0.2, 0.6, 20))


def tearDownModule():
    """Clean up module-level data."""
    RATE_SAMPLES.clear()


# =============================================================================
# Test Classes
# =============================================================================

class TestGrowthFactors(unittest.TestCase):
    """(1 + r)^n and e^(rn)."""

    def test_discount_factor_known_value(self):
        self.assertAlmostEqual(discount_factor(0.05, 3), 1.157625, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_discount_factor_zero_periods_is_one(self):
        self.assertEqual(discount_factor(0.07, 0), 1.0)

    def test_discount_factor_accepts_fractional_periods(self):
        self.assertAlmostEqual(discount_factor(0.21, 0.5), 1.1, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_discount_factor_rejects_rate_at_or_below_minus_one(self):
        for rate in (-1.0, -1.5):
            with self.subTest(rate=rate):
                with self.assertRaises(InvalidRate):
                    discount_factor(rate, 2)

    def test_discount_factor_rejects_negative_periods(self):
        with self.assertRaises(InvalidPeriods):
            discount_factor(0.05, -1)

    def test_continuous_growth_factor(self):
        self.assertAlmostEqual(continuous_growth_factor(0.1, 2), math.exp(0.2),
                               places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertEqual(continuous_growth_factor(0.0, 10), 1.0)

    def test_factors_beyond_float_range(self):
        with self.assertRaises(NumericOverflow):
            discount_factor(0.5, 2000)
        with self.assertRaises(NumericOverflow):
            continuous_growth_factor(1.0, 2000)
        self.assertEqual(discount_factor(-0.5, 2000), 0.0)


class TestRateConversions(unittest.TestCase):
    """Closed-form conversions and their inverses."""

    def test_apr_to_ear_monthly(self):
        self.assertAlmostEqual(apr_to_ear(0.12, 12), 1.01 ** 12 - 1, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_apr_to_epr_and_back(self):
        self.assertAlmostEqual(apr_to_epr(0.12, 12), 0.01, places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertAlmostEqual(epr_to_apr(0.01, 12), 0.12, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_ear_to_epr_known_value(self):
        self.assertAlmostEqual(ear_to_epr(0.1025, 2), 0.05, places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertAlmostEqual(epr_to_ear(0.05, 2), 0.1025, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_apr_ear_round_trip(self):
        for m in COMPOUNDING_FREQUENCIES:
            for x in RATE_SAMPLES:
                with self.subTest(rate=x, m=m):
                    self.assertTrue(math.isclose(apr_to_ear(ear_to_apr(x, m), m), x,
                                                 rel_tol=RELATIVE_TOLERANCE, abs_tol=1e-12))
                    self.assertTrue(math.isclose(ear_to_apr(apr_to_ear(x, m), m), x,
                                                 rel_tol=RELATIVE_TOLERANCE, abs_tol=1e-12))

    def test_epr_ear_round_trip(self):
        for m in COMPOUNDING_FREQUENCIES:
            for x in RATE_SAMPLES:
                with self.subTest(rate=x, m=m):
                    self.assertTrue(math.isclose(epr_to_ear(ear_to_epr(x, m), m), x,
                                                 rel_tol=RELATIVE_TOLERANCE, abs_tol=1e-12))

    def test_continuous_round_trip(self):
        for x in RATE_SAMPLES:
            with self.subTest(rate=x):
                self.assertTrue(math.isclose(ear_to_apr_continuous(apr_continuous_to_ear(x)), x,
                                             rel_tol=RELATIVE_TOLERANCE, abs_tol=1e-12))

    def test_continuous_is_limit_of_frequent_compounding(self):
        self.assertAlmostEqual(apr_to_ear(0.08, 100_000, sink=RecordingSink()),
                               apr_continuous_to_ear(0.08), places=6)

    def test_ear_at_minus_one_is_invalid(self):
        for func in (lambda: ear_to_apr(-1.0, 12), lambda: ear_to_epr(-1.0, 12),
                     lambda: ear_to_apr_continuous(-1.0), lambda: epr_to_ear(-1.2, 4)):
            with self.subTest(func=func):
                with self.assertRaises(InvalidRate):
                    func()

    def test_zero_compounding_periods_is_invalid(self):
        with self.assertRaises(InvalidPeriods):
            apr_to_ear(0.05, 0)


class TestRateAdvisories(unittest.TestCase):
    """Large rates and frequent compounding warn but still convert."""

    def test_large_rate_reaches_sink(self):
        sink = RecordingSink()
        ear = apr_to_ear(1.5, 12, sink=sink)
        self.assertGreater(ear, 1.5)
        self.assertEqual(len(sink.messages), 1)
        self.assertIn("rate", sink.messages[0])

    def test_daily_plus_compounding_reaches_sink(self):
        sink = RecordingSink()
        apr_to_ear(0.05, 8760, sink=sink)
        self.assertEqual(len(sink.messages), 1)
        self.assertIn("compounding_periods_per_year", sink.messages[0])

    def test_default_sink_uses_warnings(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            ear_to_apr(2.0, 4)
        self.assertTrue(any(issubclass(w.category, TvmAdvisoryWarning) for w in caught))


class TestVectorConversions(unittest.TestCase):
    """numpy versions agree with the scalar functions."""

    def test_apr_to_ear_vector_matches_scalar(self):
        aprs = np.array([0.0, 0.03, 0.12, -0.05])
        result = apr_to_ear_vector(aprs, 12)
        expected = np.array([apr_to_ear(x, 12) for x in aprs])
        np.testing.assert_allclose(result, expected, rtol=1e-12, atol=1e-15)

    def test_vector_accepts_lists_and_round_trips(self):
        ears = [0.01, 0.05, 0.2]
        np.testing.assert_allclose(apr_to_ear_vector(ear_to_apr_vector(ears, 4), 4), ears, rtol=1e-12)

    def test_out_of_domain_entries_are_nan(self):
        result = ear_to_apr_vector([-1.5, 0.1], 12)
        self.assertTrue(np.isnan(result[0]))
        self.assertFalse(np.isnan(result[1]))
        self.assertTrue(np.isnan(apr_to_ear_vector([-24.0], 12)[0]))


class TestConvertRate(unittest.TestCase):
    """convert_rate gives all conventions with formulas."""

    def test_from_apr(self):
        conversion = convert_rate(0.12, RateKind.APR, 12)
        self.assertEqual(conversion.compounding_periods_per_year, 12)
        self.assertAlmostEqual(conversion.epr, 0.01, places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertAlmostEqual(conversion.ear, 1.01 ** 12 - 1, places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertEqual(conversion.epr_formula, "0.010000 = 0.120000 / 12")

    def test_from_ear_and_epr_agree(self):
        from_ear = convert_rate(0.1025, RateKind.EAR, 2)
        from_epr = convert_rate(0.05, RateKind.EPR, 2)
        self.assertAlmostEqual(from_ear.apr, from_epr.apr, places=DECIMAL_PLACES_FOR_ASSERTIONS)
        self.assertAlmostEqual(from_ear.apr, 0.10, places=DECIMAL_PLACES_FOR_ASSERTIONS)

    def test_continuous_has_no_periodic_rate(self):
        conversion = convert_rate(0.05, RateKind.APR_CONTINUOUS)
        self.assertIsNone(conversion.compounding_periods_per_year)
        self.assertTrue(math.isnan(conversion.epr))
        self.assertAlmostEqual(conversion.ear, math.exp(0.05) - 1, places=DECIMAL_PLACES_FOR_ASSERTIONS)
        back = convert_rate(conversion.ear, RateKind.EAR_CONTINUOUS)
        self.assertAlmostEqual(back.apr, 0.05, places=DECIMAL_PLACES_FOR_ASSERTIONS)


if __name__ == '__main__':
    unittest.main()
