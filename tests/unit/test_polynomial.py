import math
import unittest

from mathchart.engine.polynomial import (
    analyze_polynomial,
    derivative_coefficients,
    evaluate_polynomial,
    format_polynomial,
    rational_root_candidates,
    real_roots,
    solve_quadratic,
    synthetic_division,
)


class PolynomialAnalyzerTestCase(unittest.TestCase):
    def test_quadratic_with_two_real_zeros(self) -> None:
        analysis = analyze_polynomial([1, -5, 6])

        self.assertEqual(analysis.degree, 2)
        self.assertEqual(analysis.leading_coefficient, 1.0)
        self.assertEqual([zero.x for zero in analysis.zeros], [2.0, 3.0])
        self.assertTrue(all(zero.behavior == "crosses" for zero in analysis.zeros))
        self.assertEqual(analysis.y_intercept, 6.0)
        self.assertEqual((analysis.end_behavior.left, analysis.end_behavior.right), ("up", "up"))
        self.assertEqual(analysis.factored_form, "(x - 2)(x - 3)")
        self.assertEqual(analysis.expanded_form, "x^2 - 5x + 6")

        self.assertEqual(len(analysis.critical_points), 1)
        self.assertAlmostEqual(analysis.critical_points[0].x, 2.5)
        self.assertAlmostEqual(analysis.critical_points[0].y, -0.25)
        self.assertEqual(analysis.turning_points, analysis.critical_points)

    def test_quadratic_without_real_zeros(self) -> None:
        analysis = analyze_polynomial([1, 0, 1])
        self.assertEqual(analysis.zeros, [])
        self.assertIsNone(analysis.factored_form)

    def test_double_root_touches(self) -> None:
        analysis = analyze_polynomial([1, -2, 1])
        self.assertEqual(len(analysis.zeros), 1)
        self.assertEqual(analysis.zeros[0].multiplicity, 2)
        self.assertEqual(analysis.zeros[0].behavior, "touches")
        self.assertEqual(analysis.factored_form, "(x - 1)^2")

    def test_cubic_through_origin(self) -> None:
        analysis = analyze_polynomial([-2, 0, 2, 0])
        self.assertEqual([zero.x for zero in analysis.zeros], [-1.0, 0.0, 1.0])
        self.assertEqual((analysis.end_behavior.left, analysis.end_behavior.right), ("up", "down"))
        self.assertEqual(analysis.factored_form, "-2(x + 1)x(x - 1)")
        self.assertEqual(len(analysis.turning_points), 2)

    def test_pure_power_has_critical_point_but_no_turning_point(self) -> None:
        analysis = analyze_polynomial([1, 0, 0, 0])
        self.assertEqual(analysis.zeros[0].multiplicity, 3)
        self.assertEqual(analysis.zeros[0].behavior, "crosses")
        self.assertEqual(analysis.factored_form, "x^3")
        self.assertEqual(len(analysis.critical_points), 1)
        self.assertEqual(analysis.turning_points, [])

    def test_irrational_roots_of_quartic_use_numeric_scan(self) -> None:
        analysis = analyze_polynomial([1, 0, -3, 0, 1])
        expected = sorted(
            sign * math.sqrt((3 + offset) / 2.0) for sign in (1, -1) for offset in (math.sqrt(5), -math.sqrt(5))
        )
        self.assertEqual(len(analysis.zeros), 4)
        for zero, value in zip(analysis.zeros, expected):
            self.assertAlmostEqual(zero.x, value, places=6)

    def test_leading_zeros_and_constants(self) -> None:
        self.assertEqual(analyze_polynomial([0, 0, 2, -4]).degree, 1)
        constant = analyze_polynomial([5])
        self.assertEqual(constant.degree, 0)
        self.assertEqual(constant.zeros, [])
        zero = analyze_polynomial([])
        self.assertEqual(zero.degree, 0)
        self.assertEqual(zero.expanded_form, "0")
        self.assertEqual(zero.end_behavior.right, "down")

    def test_non_finite_coefficients_are_treated_as_zero(self) -> None:
        with self.assertLogs("mathchart.engine.polynomial", level="WARNING"):
            analysis = analyze_polynomial([1, float("nan"), -4])
        self.assertEqual(analysis.coefficients, [1.0, 0.0, -4.0])
        self.assertEqual([zero.x for zero in analysis.zeros], [-2.0, 2.0])

    def test_solve_quadratic_vieta(self) -> None:
        a, b, c = 3.0, -7.0, 2.0
        roots = solve_quadratic(a, b, c)
        self.assertEqual(len(roots), 2)
        self.assertLessEqual(roots[0], roots[1])
        self.assertAlmostEqual(roots[0] + roots[1], -b / a, delta=1e-9)
        self.assertAlmostEqual(roots[0] * roots[1], c / a, delta=1e-9)
        self.assertEqual(solve_quadratic(1, 2, 5), [])
        self.assertEqual(solve_quadratic(1, -2, 1), [1.0, 1.0])

    def test_synthetic_division(self) -> None:
        quotient, remainder = synthetic_division([1, -6, 11, -6], 1)
        self.assertEqual(quotient, [1, -5, 6])
        self.assertEqual(remainder, 0)
        _, remainder = synthetic_division([1, 0, 1], 2)
        self.assertEqual(remainder, 5)

    def test_rational_root_candidates(self) -> None:
        candidates = rational_root_candidates([2, -3, -2])
        self.assertIn(2.0, candidates)
        self.assertIn(-0.5, candidates)
        self.assertEqual(rational_root_candidates([1.5, 1, 1]), [])

    def test_helpers(self) -> None:
        self.assertEqual(evaluate_polynomial([2, -3, 1], 2), 3)
        self.assertEqual(derivative_coefficients([1, -5, 6]), [2, -5])
        self.assertEqual(format_polynomial([-1, 0, 1.5, -2]), "-x^3 + 1.5x - 2")
        self.assertEqual(real_roots([1, -6, 11, -6]), [(1.0, 1), (2.0, 1), (3.0, 1)])


if __name__ == "__main__":
    unittest.main()
