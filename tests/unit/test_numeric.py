import math
import unittest

from mathchart.engine.numeric import (
    bisection,
    derivative,
    find_roots,
    is_finite,
    sample_grid,
    scan_sign_changes,
    second_derivative,
)


class NumericCalculusTestCase(unittest.TestCase):
    def test_derivatives_of_cubic(self) -> None:
        def cube(x: float) -> float:
            return x ** 3

        self.assertAlmostEqual(derivative(cube, 2.0), 12.0, places=5)
        self.assertAlmostEqual(second_derivative(cube, 2.0), 12.0, places=3)

    def test_bisection_finds_sqrt_two(self) -> None:
        root = bisection(lambda x: x * x - 2.0, 0.0, 2.0)
        self.assertIsNotNone(root)
        self.assertAlmostEqual(root, math.sqrt(2.0), places=5)

    def test_bisection_returns_none_on_non_finite_start(self) -> None:
        self.assertIsNone(bisection(lambda x: math.nan if x < 0 else x - 1.0, -1.0, 2.0))

    def test_bisection_returns_none_when_iterations_exhausted(self) -> None:
        self.assertIsNone(bisection(lambda x: x - 0.3, 0.0, 1.0, tol=1e-12, max_iter=3))

    def test_sample_grid_reaches_upper_bound_without_drift(self) -> None:
        grid = sample_grid(0.0, 1.0, 0.1)
        self.assertEqual(len(grid), 11)
        self.assertAlmostEqual(grid[-1], 1.0)
        self.assertEqual(len(sample_grid(0.0, 1.0, 0.1, include_end=False)), 10)
        self.assertEqual(sample_grid(1.0, 0.0, 0.1), [])

    def test_scan_reports_direct_hits_as_degenerate_brackets(self) -> None:
        brackets = scan_sign_changes(lambda x: x * x, -1.0, 1.0, 0.5)
        self.assertIn((0.0, 0.0), brackets)

    def test_scan_resets_on_non_finite_samples(self) -> None:
        brackets = scan_sign_changes(lambda x: 1.0 / x if x != 0 else math.nan, -1.0, 1.0, 0.5)
        self.assertEqual(brackets, [])

    def test_find_roots_rejects_poles(self) -> None:
        roots = find_roots(lambda x: 1.0 / (x - 0.05), -1.0, 1.0, 0.1)
        self.assertEqual(roots, [])

    def test_find_roots_sorted_and_deduplicated(self) -> None:
        roots = find_roots(lambda x: (x - 1.0) * (x + 2.0), -5.0, 5.0, 0.01)
        self.assertEqual(len(roots), 2)
        self.assertAlmostEqual(roots[0], -2.0, places=5)
        self.assertAlmostEqual(roots[1], 1.0, places=5)

    def test_is_finite(self) -> None:
        self.assertTrue(is_finite(1.0))
        self.assertFalse(is_finite(math.inf))
        self.assertFalse(is_finite(math.nan))
        self.assertFalse(is_finite(None))


if __name__ == "__main__":
    unittest.main()
