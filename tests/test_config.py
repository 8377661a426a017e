#!/usr/bin/env python3
"""
Tests for configuration loading and validation.

Run with: python tests/test_config.py
"""

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import config as config_module
from config import Config, Thresholds, DEFAULT_THRESHOLDS


class TestThresholds(unittest.TestCase):
    """Tests for detector policy constants."""

    def test_defaults(self):
        self.assertEqual(DEFAULT_THRESHOLDS.fringe_local_min_share, 0.05)
        self.assertEqual(DEFAULT_THRESHOLDS.fringe_national_max_share, 0.01)
        self.assertEqual(DEFAULT_THRESHOLDS.major_national_min_share, 0.2)
        self.assertEqual(DEFAULT_THRESHOLDS.major_local_max_share, 0.001)
        self.assertEqual(DEFAULT_THRESHOLDS.min_settlement_ballots, 5)
        self.assertEqual(DEFAULT_THRESHOLDS.distance_alert, 0.5)

    @patch.dict(os.environ, {"DISTANCE_ALERT": "0.7", "MIN_SETTLEMENT_BALLOTS": "3"})
    def test_from_env(self):
        thresholds = Thresholds.from_env()
        self.assertEqual(thresholds.distance_alert, 0.7)
        self.assertEqual(thresholds.min_settlement_ballots, 3)
        self.assertEqual(thresholds.fringe_local_min_share, 0.05)


class TestConfig(unittest.TestCase):
    """Tests for the application configuration."""

    @patch.dict(os.environ, {"BALLOTS_ENCODING": "utf-8", "HTTP_TIMEOUT": "5", "WEB_UI_PORT": "8000"})
    def test_from_env(self):
        config = Config.from_env()
        self.assertEqual(config.ballots_encoding, "utf-8")
        self.assertEqual(config.http_timeout, 5)
        self.assertEqual(config.web_ui_port, 8000)

    def test_defaults_are_valid(self):
        self.assertEqual(Config().validate(), [])
        self.assertEqual(Config().ballots_encoding, "ISO-8859-8")

    def test_validate(self):
        config = Config(
            thresholds=Thresholds(fringe_local_min_share=1.5, min_settlement_ballots=0, distance_alert=-1),
            http_timeout=0,
        )
        issues = config.validate()
        self.assertEqual(len(issues), 4)
        self.assertTrue(any("FRINGE_LOCAL_MIN_SHARE" in issue for issue in issues))

    def test_fringe_below_major(self):
        config = Config(thresholds=Thresholds(fringe_national_max_share=0.3))
        self.assertEqual(len(config.validate()), 1)

    def test_to_dict(self):
        data = Config().to_dict()
        self.assertEqual(data["thresholds"]["distance_alert"], 0.5)
        self.assertEqual(data["report_dir"], "analysis")

    def test_reload_config(self):
        with patch.dict(os.environ, {"REPORT_DIR": "elsewhere"}):
            self.assertEqual(config_module.reload_config().report_dir, "elsewhere")
            self.assertEqual(config_module.get_config().report_dir, "elsewhere")
        config_module.reload_config()


if __name__ == "__main__":
    unittest.main(verbosity=2)
