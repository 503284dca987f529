import io
import json
import logging
import unittest

from mathchart.utils.logger import configure_logging, get_logger, log_event


class LoggerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._handlers = list(root.handlers)
        self._level = root.level

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.handlers = self._handlers
        root.setLevel(self._level)

    def test_records_are_json_with_fields(self) -> None:
        stream = io.StringIO()
        configure_logging("debug", stream=stream)

        log_event(get_logger("mathchart.test"), logging.WARNING, "degraded", field="range", error="boom")

        payload = json.loads(stream.getvalue().strip())
        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["logger"], "mathchart.test")
        self.assertEqual(payload["message"], "degraded")
        self.assertEqual(payload["field"], "range")
        self.assertEqual(payload["error"], "boom")
        self.assertTrue(payload["timestamp"].endswith("Z"))

    def test_reserved_keys_are_not_overwritten(self) -> None:
        stream = io.StringIO()
        configure_logging("INFO", stream=stream)

        log_event(get_logger("mathchart.test"), logging.INFO, "kept", timestamp="ignored")

        payload = json.loads(stream.getvalue().strip())
        self.assertEqual(payload["message"], "kept")
        self.assertNotEqual(payload["timestamp"], "ignored")

    def test_level_filters_records(self) -> None:
        stream = io.StringIO()
        configure_logging("ERROR", stream=stream)

        get_logger("mathchart.test").warning("hidden")

        self.assertEqual(stream.getvalue(), "")


if __name__ == "__main__":
    unittest.main()
