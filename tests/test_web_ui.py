#!/usr/bin/env python3
"""
Tests for the web UI handlers (the Gradio app itself is not launched).

Run with: python tests/test_web_ui.py
"""

import sys
import tempfile
import unittest
from pathlib import Path

import gradio as gr

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import web_ui

PARTIES_CSV = "Party,Ballot\nEx,X\nWhy,Y\n"
BALLOTS_CSV = (
    "settlement,symbol,box,suffrage,total,disqualified,valid,X,Y\n"
    "Town,100,1,200,150,10,140,100,40\n"
    "Town,100,2,80,90,5,85,50,35\n"
    "Village,200,1,50,40,0,40,10,30\n"
)


class TestWebHandlers(unittest.TestCase):
    """Tests for upload validation, analysis and exports."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.parties = self.tmp / "parties.csv"
        self.parties.write_text(PARTIES_CSV, encoding="utf-8")
        self.ballots = self.tmp / "expb.csv"
        self.ballots.write_text(BALLOTS_CSV, encoding="utf-8")

    def tearDown(self):
        self._tmp.cleanup()

    def test_app_builds(self):
        self.assertIsInstance(web_ui.demo, gr.Blocks)

    def test_validate_file(self):
        self.assertEqual(web_ui.validate_file(str(self.parties)), (True, "OK"))
        self.assertFalse(web_ui.validate_file(None)[0])
        self.assertFalse(web_ui.validate_file(str(self.tmp / "missing.csv"))[0])

        empty = self.tmp / "empty.csv"
        empty.write_text("")
        self.assertEqual(web_ui.validate_file(str(empty)), (False, "File is empty"))

        image = self.tmp / "ballot.png"
        image.write_bytes(b"\x89PNG")
        self.assertFalse(web_ui.validate_file(str(image))[0])

    def test_run_audit(self):
        table, status, result = web_ui.run_audit(str(self.parties), str(self.ballots), "utf-8")
        self.assertIsNotNone(result)
        self.assertEqual(table["headers"][-2:], ["Ex - X", "Why - Y"])
        # National row first, then the flagged box
        self.assertEqual(table["data"][0][:3], ["*", "*", "*"])
        self.assertEqual(table["data"][1][2], "2")
        self.assertEqual(len(table["data"]), 4)
        self.assertIn("3 ballot boxes analyzed, 1 with issues", status)

    def test_run_audit_error(self):
        self.ballots.write_text("settlement,symbol,box,suffrage,total,disqualified,valid,Q\n", encoding="utf-8")
        table, status, result = web_ui.run_audit(str(self.parties), str(self.ballots), "utf-8")
        self.assertIsNone(result)
        self.assertTrue(status.startswith("Error:"))
        self.assertEqual(table["data"], [])

    def test_run_audit_missing_upload(self):
        _, status, result = web_ui.run_audit(None, str(self.ballots), "utf-8")
        self.assertIsNone(result)
        self.assertTrue(status.startswith("Parties file"))

    def test_exports(self):
        _, _, result = web_ui.run_audit(str(self.parties), str(self.ballots), "utf-8")
        csv_path = web_ui.export_csv(result)
        md_path = web_ui.export_markdown(result)
        pdf_path = web_ui.export_pdf(result)
        self.assertTrue(Path(csv_path).exists())
        self.assertIn("Ballot Boxes for Review", Path(md_path).read_text(encoding="utf-8"))
        self.assertTrue(Path(pdf_path).read_bytes().startswith(b"%PDF"))

    def test_exports_without_result(self):
        self.assertIsNone(web_ui.export_csv(None))
        self.assertIsNone(web_ui.export_markdown(None))
        self.assertIsNone(web_ui.export_pdf(None))


if __name__ == "__main__":
    unittest.main(verbosity=2)
