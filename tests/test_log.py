"""
Issue Log and Config Tests.
"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from phpsema.config import Config
from phpsema.log import Category, Issue, Log, Severity


class TestLog(unittest.TestCase):

    def setUp(self):
        self.log = Log()

    def test_emit_records_issue(self):
        self.log.emit(Category.EUNDEF, "call to undeclared class \\Foo", "src/a.php", 12)
        issue = self.log.issues[0]
        self.assertIsInstance(issue, Issue)
        self.assertEqual(issue.category, Category.EUNDEF)
        self.assertEqual(issue.severity, Severity.CRITICAL)
        self.assertEqual(str(issue), "src/a.php:12 EUNDEF call to undeclared class \\Foo")

    def test_emission_order_is_kept(self):
        self.log.emit(Category.EPARAM, "required arg follows optional", "a.php", 7)
        self.log.emit(Category.ETYPE, "Cannot instantiate interface I", "a.php", 3)
        self.assertEqual([i.line for i in self.log.issues], [7, 3])

    def test_accepts_category_text(self):
        self.log.emit("ETYPE", "x", "a.php", 1)
        self.assertEqual(self.log.count(Category.ETYPE), 1)

    def test_queries(self):
        self.log.emit(Category.ETYPE, "a", "a.php", 1)
        self.log.emit(Category.EUNDEF, "b", "a.php", 2)
        self.log.emit(Category.ETYPE, "c", "a.php", 3)
        self.assertEqual(self.log.count(), 3)
        self.assertEqual([i.message for i in self.log.by_category(Category.ETYPE)], ["a", "c"])
        self.assertTrue(self.log.has_issues())
        self.log.clear()
        self.assertFalse(self.log.has_issues())

    def test_issues_is_a_copy(self):
        self.log.emit(Category.ETYPE, "a", "a.php", 1)
        self.log.issues.clear()
        self.assertEqual(self.log.count(), 1)

    def test_to_dicts(self):
        self.log.emit(Category.EPARAM, "required arg follows optional", "a.php", 7)
        self.assertEqual(self.log.to_dicts(), [{
            "category": "EPARAM",
            "severity": 5,
            "message": "required arg follows optional",
            "file": "a.php",
            "line": 7,
        }])

    def test_mirrored_to_logger(self):
        with self.assertLogs("phpsema.log", level="INFO") as captured:
            self.log.emit(Category.ETYPE, "Cannot instantiate abstract class Shape", "a.php", 8)
        self.assertIn("a.php:8 ETYPE Cannot instantiate abstract class Shape", captured.output[0])


class TestFiltering(unittest.TestCase):

    def test_suppressed_category(self):
        log = Log(Config(suppress_categories={"EPARAM"}))
        log.emit(Category.EPARAM, "required arg follows optional", "a.php", 7)
        log.emit(Category.ETYPE, "x", "a.php", 8)
        self.assertEqual([i.category for i in log.issues], [Category.ETYPE])

    def test_minimum_severity(self):
        log = Log(Config(minimum_severity="critical"))
        log.emit(Category.ETYPE, "x", "a.php", 1)
        log.emit(Category.EUNDEF, "y", "a.php", 2)
        self.assertEqual([i.category for i in log.issues], [Category.EUNDEF])


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        config = Config()
        self.assertEqual(config.minimum_severity, "low")
        self.assertIn(".php", config.file_extensions)
        self.assertIn("vendor", config.exclude_dirs)

    def test_from_dict_normalises(self):
        config = Config.from_dict({
            "suppress_categories": ["eparam"],
            "minimum_severity": "NORMAL",
            "file_extensions": [".php"],
        })
        self.assertEqual(config.suppress_categories, {"EPARAM"})
        self.assertEqual(config.minimum_severity, "normal")
        self.assertEqual(config.file_extensions, (".php",))

    def test_unknown_key_is_ignored_with_warning(self):
        with self.assertLogs("phpsema.config", level="WARNING"):
            config = Config.from_dict({"colour": "always"})
        self.assertEqual(config, Config())

    def test_none(self):
        self.assertEqual(Config.from_dict(None), Config())


if __name__ == "__main__":
    unittest.main()
