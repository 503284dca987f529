import math
import unittest

from mathchart.engine.function_analyzer import (
    FunctionAnalysisOptions,
    analyze_function,
    describe_domain,
)


class FunctionAnalyzerTestCase(unittest.TestCase):
    def test_parabola(self) -> None:
        properties = analyze_function("x**2")

        self.assertEqual(properties.domain, "ℝ (all real numbers)")
        self.assertEqual(properties.range, "[0.00, 100.00]")
        self.assertEqual(properties.intercepts.x, [0.0])
        self.assertEqual(properties.intercepts.y, 0.0)

        self.assertEqual(len(properties.extrema), 1)
        minimum = properties.extrema[0]
        self.assertEqual(minimum.kind, "minimum")
        self.assertAlmostEqual(minimum.x, 0.0, places=6)
        self.assertTrue(minimum.is_local)

        self.assertEqual(properties.monotonicity[0].direction, "decreasing")
        self.assertEqual(properties.monotonicity[-1].direction, "increasing")
        self.assertEqual([segment.kind for segment in properties.concavity], ["concave_up"])
        self.assertEqual(properties.inflection_points, [])
        self.assertEqual(properties.symmetry.kind, "even")
        self.assertFalse(properties.periodicity.is_periodic)
        self.assertTrue(properties.continuity[0].is_continuous)

    def test_sine_is_odd_and_periodic(self) -> None:
        properties = analyze_function("Math.sin(x)")
        self.assertEqual(properties.symmetry.kind, "odd")
        self.assertEqual(properties.symmetry.axis, "origin")
        self.assertTrue(properties.periodicity.is_periodic)
        self.assertAlmostEqual(properties.periodicity.period, 2 * math.pi)

    def test_cosine_fast_path_and_tangent_period(self) -> None:
        self.assertEqual(analyze_function("cos(2*x)").symmetry.kind, "even")
        self.assertAlmostEqual(analyze_function("tan(x)", domain=(-1, 1)).periodicity.period, math.pi)

    def test_double_root_intercept(self) -> None:
        properties = analyze_function("x**2 - 2*x + 1")
        self.assertEqual(len(properties.intercepts.x), 1)
        self.assertAlmostEqual(properties.intercepts.x[0], 1.0, places=4)
        self.assertEqual(properties.intercepts.y, 1.0)

    def test_two_intercepts(self) -> None:
        properties = analyze_function("x^2 - 4")
        self.assertEqual(len(properties.intercepts.x), 2)
        self.assertAlmostEqual(properties.intercepts.x[0], -2.0, places=4)
        self.assertAlmostEqual(properties.intercepts.x[1], 2.0, places=4)
        self.assertEqual(properties.intercepts.y, -4.0)

    def test_vertical_asymptote_without_spurious_intercepts(self) -> None:
        properties = analyze_function("1/(x - 1)")
        vertical = [item for item in properties.asymptotes if item.kind == "vertical"]
        self.assertEqual(len(vertical), 1)
        self.assertAlmostEqual(vertical[0].value, 1.0, places=4)
        self.assertEqual(properties.intercepts.x, [])
        self.assertEqual(properties.domain, "Denominator must be nonzero")
        self.assertFalse(properties.continuity[0].is_continuous)

    def test_horizontal_asymptote(self) -> None:
        properties = analyze_function("1/x^2")
        horizontal = [item for item in properties.asymptotes if item.kind == "horizontal"]
        self.assertEqual(len(horizontal), 1)
        self.assertEqual(horizontal[0].equation, "y = 0.00")

    def test_oblique_asymptote(self) -> None:
        properties = analyze_function("x + 1/x")
        oblique = [item for item in properties.asymptotes if item.kind == "oblique"]
        self.assertEqual(len(oblique), 1)
        self.assertAlmostEqual(oblique[0].value, 1.0, places=3)
        self.assertEqual(oblique[0].equation, "y = 1.00x + 0.00")

    def test_line_has_no_asymptotes(self) -> None:
        self.assertEqual(analyze_function("2*x + 1").asymptotes, [])

    def test_domain_gaps_are_not_asymptotes(self) -> None:
        properties = analyze_function("sqrt(x)")
        self.assertEqual([item for item in properties.asymptotes if item.kind == "vertical"], [])
        self.assertEqual(properties.domain, "Requires the radicand to be ≥ 0")

    def test_cubic_inflection(self) -> None:
        properties = analyze_function("x^3")
        self.assertEqual(properties.extrema, [])
        self.assertEqual(len(properties.inflection_points), 1)
        self.assertAlmostEqual(properties.inflection_points[0].x, 0.0, places=3)
        self.assertEqual([segment.kind for segment in properties.concavity], ["concave_down", "concave_up"])
        self.assertEqual(properties.symmetry.kind, "odd")

    def test_curvature_flip_across_pole_is_not_inflection(self) -> None:
        self.assertEqual(analyze_function("1/x").inflection_points, [])
        self.assertEqual(analyze_function("1/(x - 0.05)").inflection_points, [])
        self.assertEqual(analyze_function("tan(x)", domain=(0.5, 2.5)).inflection_points, [])

    def test_window_endpoints_are_not_extrema(self) -> None:
        self.assertEqual(analyze_function("x^2", domain=(0, 5)).extrema, [])
        interior = analyze_function("x^2", domain=(-1, 5)).extrema
        self.assertEqual([(item.x, item.kind) for item in interior], [(0.0, "minimum")])

    def test_step_function_is_discontinuous(self) -> None:
        properties = analyze_function("floor(x)", domain=(0, 3))
        continuity = properties.continuity[0]
        self.assertFalse(continuity.is_continuous)
        self.assertGreaterEqual(len(continuity.discontinuities), 2)

    def test_options_disable_optional_fields(self) -> None:
        options = FunctionAnalysisOptions(
            domain=(-2, 2),
            analyze_range=False,
            find_extrema=False,
            find_asymptotes=False,
            find_inflection=False,
        )
        properties = analyze_function("1/x + x^3", options=options)
        self.assertIsNone(properties.range)
        self.assertEqual(properties.extrema, [])
        self.assertEqual(properties.asymptotes, [])
        self.assertEqual(properties.inflection_points, [])

    def test_reversed_domain_is_swapped(self) -> None:
        properties = analyze_function("x", domain=(5, -5))
        self.assertEqual(properties.range, "[-5.00, 5.00]")

    def test_invalid_expression_degrades_to_zero_function(self) -> None:
        with self.assertLogs("mathchart.engine.function_analyzer", level="WARNING"):
            properties = analyze_function("import os", domain=(-1, 1))
        self.assertEqual(properties.range, "[0.00, 0.00]")
        self.assertEqual([segment.direction for segment in properties.monotonicity], ["constant"])

    def test_deeply_nested_expression_degrades_to_zero_function(self) -> None:
        with self.assertLogs("mathchart.engine.function_analyzer", level="WARNING"):
            properties = analyze_function("(" * 190 + "x" + ")" * 190, domain=(-1, 1))
        self.assertEqual(properties.range, "[0.00, 0.00]")

    def test_domain_heuristic(self) -> None:
        self.assertEqual(describe_domain("ln(x)"), "Logarithm argument must be > 0")
        self.assertEqual(describe_domain("x^2"), "ℝ (all real numbers)")

    def test_to_dict_is_serializable(self) -> None:
        payload = analyze_function("x^2 - 1", domain=(-3, 3)).to_dict()
        self.assertIn("intercepts", payload)
        self.assertIsInstance(payload["extrema"], list)
        self.assertEqual(payload["extrema"][0]["kind"], "minimum")


if __name__ == "__main__":
    unittest.main()
