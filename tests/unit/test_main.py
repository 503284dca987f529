import contextlib
import io
import json
import logging
import unittest

from mathchart.main import build_parser, main, parse_coefficients


class MainTestCase(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.handlers = self._handlers
        root.setLevel(self._level)

    def _run(self, argv):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(io.StringIO()):
            code = main(argv)
        return code, json.loads(stdout.getvalue())

    def test_parser_defaults(self) -> None:
        args = build_parser().parse_args([])
        self.assertEqual(args.mode, "function")
        self.assertIsNone(args.expression)
        self.assertIsNone(args.domain)

    def test_inequality_mode(self) -> None:
        code, payload = self._run(["--mode", "inequality", "--expression", "x > 2"])
        self.assertEqual(code, 0)
        self.assertEqual(payload["result"]["interval_notation"], "(2, +∞)")

    def test_polynomial_mode_with_coefficients(self) -> None:
        code, payload = self._run(["--mode", "polynomial", "--coefficients", "1, -5, 6"])
        self.assertEqual(code, 0)
        self.assertEqual(payload["result"]["degree"], 2)

    def test_function_mode_with_domain_and_config(self) -> None:
        code, payload = self._run(
            ["--expression", "x^2", "--domain", "-2", "2", "--config", "configs/engine_config.yml"]
        )
        self.assertEqual(code, 0)
        self.assertEqual(payload["result"]["range"], "[0.00, 4.00]")

    def test_repeated_expressions_run_as_batch(self) -> None:
        code, payload = self._run(["--expression", "x", "--expression", "x^2", "--domain", "-1", "1"])
        self.assertEqual(code, 0)
        self.assertEqual([item["metadata"]["expression"] for item in payload], ["x", "x^2"])

    def test_missing_expression_exits_with_usage_error(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as context:
                main(["--mode", "inequality"])
        self.assertEqual(context.exception.code, 2)

    def test_parse_coefficients(self) -> None:
        self.assertEqual(parse_coefficients("1, -5,6"), [1.0, -5.0, 6.0])
        with self.assertRaises(ValueError):
            parse_coefficients(" , ")


if __name__ == "__main__":
    unittest.main()
