"""Unit tests for account health normalization."""

from __future__ import annotations

import unittest

from rbank.common.health import SIGMOID_HIGH, SIGMOID_LOW, normalize_health, round_half_up, sigmoid


MANTISSA = 1_000_000


class TestNoDebt(unittest.TestCase):
    """Accounts without borrows are always fully healthy."""

    def test_zero_health_without_debt(self) -> None:
        self.assertEqual(normalize_health(0, MANTISSA, has_outstanding_debt=False), 1)

    def test_raw_health_is_ignored_without_debt(self) -> None:
        for raw in (-10**30, -1, 0, 1, 10**30):
            self.assertEqual(normalize_health(raw, MANTISSA, has_outstanding_debt=False), 1)

    def test_other_mantissas(self) -> None:
        for mantissa in (1, 10**6, 10**18):
            self.assertEqual(normalize_health(0, mantissa, has_outstanding_debt=False), 1)


class TestWithDebt(unittest.TestCase):
    """Verify the calibrated sigmoid window."""

    def test_calibration_constants(self) -> None:
        self.assertEqual(SIGMOID_LOW, 0.731059)
        self.assertEqual(SIGMOID_HIGH, 0.999999)

    def test_two_market_reference_case(self) -> None:
        """Collateral factor 1, liquidation factor 0.5, x = 10/3 -> 0.871926."""
        self.assertEqual(normalize_health(3_333_333, MANTISSA, True), 0.871926)

    def test_health_of_two(self) -> None:
        # sigmoid(2) = 0.880797 -> (0.880797 - 0.731059) / 0.26894
        self.assertAlmostEqual(normalize_health(2 * MANTISSA, MANTISSA, True), 0.557, places=3)

    def test_zero_health_with_debt_is_clamped(self) -> None:
        # sigmoid(0) = 0.5 is below the calibrated floor.
        self.assertEqual(normalize_health(0, MANTISSA, True), 0)

    def test_negative_health_is_clamped(self) -> None:
        self.assertEqual(normalize_health(-5 * MANTISSA, MANTISSA, True), 0)

    def test_extreme_negative_does_not_overflow(self) -> None:
        self.assertEqual(normalize_health(-(10**30), MANTISSA, True), 0)

    def test_extreme_positive_is_capped(self) -> None:
        self.assertEqual(normalize_health(10**30, MANTISSA, True), 1)

    def test_rounded_to_six_decimals(self) -> None:
        result = normalize_health(2_718_281, MANTISSA, True)
        self.assertEqual(result, round(result, 6))

    def test_bounded_and_monotonic(self) -> None:
        previous = -1.0
        for raw in range(-3 * MANTISSA, 20 * MANTISSA, MANTISSA // 4):
            result = normalize_health(raw, MANTISSA, True)
            self.assertGreaterEqual(result, 0.0)
            self.assertLessEqual(result, 1.0)
            self.assertGreaterEqual(result, previous)
            previous = result


class TestRounding(unittest.TestCase):
    """Six-decimal rounding sends exact ties up."""

    def test_exact_tie_rounds_up(self) -> None:
        # 2 ** -7 is exactly representable; builtin round would give 0.007812.
        self.assertEqual(round_half_up(0.0078125), 0.007813)

    def test_non_ties_round_to_nearest(self) -> None:
        self.assertEqual(round_half_up(0.12345649), 0.123456)
        self.assertEqual(round_half_up(0.12345651), 0.123457)

    def test_other_precision(self) -> None:
        self.assertEqual(round_half_up(0.125, 2), 0.13)


class TestSigmoid(unittest.TestCase):
    """Both branches of the stable sigmoid agree with the textbook form."""

    def test_midpoint(self) -> None:
        self.assertEqual(sigmoid(0), 0.5)

    def test_symmetry(self) -> None:
        for x in (0.5, 1.0, 3.0, 7.5):
            self.assertAlmostEqual(sigmoid(x) + sigmoid(-x), 1.0, places=12)

    def test_limits(self) -> None:
        self.assertEqual(sigmoid(-1000.0), 0.0)
        self.assertEqual(sigmoid(1000.0), 1.0)


if __name__ == "__main__":
    unittest.main()
