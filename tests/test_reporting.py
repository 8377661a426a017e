#!/usr/bin/env python3
"""
Tests for the analysis pipeline and report assembly.

Run with: python tests/test_reporting.py
"""

import sys
import unittest
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ballot_analysis import run_analysis
from ballot_reporting import (
    REPORT_COLUMNS,
    assemble_report,
    build_party_order,
    format_distance,
    format_invalid_percent,
    format_vote_summary,
    generate_analysis_report,
    rank_suspicious,
    report_header,
    to_report_row,
)
from ballot_types import AnalyzedRecord, BallotRecord
from config import Thresholds
from party_registry import load_parties


def make_record(box, symbol="100", settlement="Town", suffrage=0, total=None,
                disqualified=0, valid=None, votes=None) -> BallotRecord:
    votes = votes or {}
    if valid is None:
        valid = sum(votes.values())
    if total is None:
        total = valid + disqualified
    return BallotRecord(
        settlement=settlement,
        symbol=symbol,
        ballot_box_id=box,
        suffrage_size=suffrage,
        total_votes=total,
        disqualified_votes=disqualified,
        valid_votes=valid,
        votes_by_party=votes,
    )


class TestPartyOrder(unittest.TestCase):
    """Tests for report column ordering."""

    def test_descending_with_stable_ties(self):
        registry = load_parties([("Alpha", "A"), ("Beta", "B"), ("Gamma", "C")])
        national = make_record("*", votes={"A": 10, "B": 20, "C": 10})
        order = build_party_order(registry, national)
        self.assertEqual([p.code for p in order], ["B", "A", "C"])

    def test_header(self):
        registry = load_parties([("Alpha", "A"), ("Beta", "B")])
        header = report_header(list(registry.values()))
        self.assertEqual(header[:len(REPORT_COLUMNS)], REPORT_COLUMNS)
        self.assertEqual(header[len(REPORT_COLUMNS):], ["Alpha - A", "Beta - B"])
        self.assertEqual(header[0], "Settlement")
        self.assertEqual(header[9], "Issues")


class TestReportRow(unittest.TestCase):
    """Tests for a single report row."""

    def setUp(self):
        self.registry = load_parties([("Alpha", "A"), ("Beta", "B")])
        self.order = list(self.registry.values())

    def test_row_layout(self):
        record = make_record("3", suffrage=200, total=100, disqualified=10, valid=90, votes={"A": 90})
        analyzed = AnalyzedRecord(
            record=record,
            issues=("first", "second"),
            valid_percent=record.valid_percent,
            settlement_distance=0.12345,
        )
        row = to_report_row(analyzed, self.order)
        self.assertEqual(row, ["Town", "100", "3", 200, 100, 10, 90, "10.00%", "0.123", "first\nsecond", 90, 0])

    def test_ties_round_half_up(self):
        record = make_record("4", total=160, disqualified=1, valid=159, votes={"A": 159})
        analyzed = AnalyzedRecord(record=record, valid_percent=record.valid_percent, settlement_distance=0.0625)
        row = to_report_row(analyzed, self.order)
        self.assertEqual(row[7], "0.63%")
        self.assertEqual(row[8], "0.063")
        self.assertEqual(format_distance(0.0), "0.000")
        self.assertEqual(format_invalid_percent(AnalyzedRecord(record=record, valid_percent=100.0)), "0.00%")

    def test_undefined_values_are_empty(self):
        record = make_record("3", suffrage=0, total=0, valid=0)
        row = to_report_row(AnalyzedRecord(record=record, valid_percent=record.valid_percent), self.order)
        self.assertEqual(row[7], "")
        self.assertEqual(row[8], "")
        self.assertEqual(row[9], "")


class TestRunAnalysis(unittest.TestCase):
    """Tests for the end-to-end pipeline over in-memory records."""

    def setUp(self):
        self.registry = load_parties([("Alpha", "A"), ("Beta", "B"), ("Fringe", "F")])
        self.records = [make_record(str(i), votes={"A": 6000, "B": 4000, "F": 0}) for i in range(5)]
        # Turnout above suffrage
        self.records.append(make_record("6", symbol="200", settlement="Village", suffrage=10, votes={"A": 6, "B": 6}))
        # All of B's votes look switched to the fringe party
        self.records.append(make_record("7", symbol="200", settlement="Village", votes={"A": 50, "B": 0, "F": 50}))

    def test_national_and_alignment(self):
        result = run_analysis(self.registry, self.records, Thresholds())
        self.assertEqual(result.national.valid_votes, 50000 + 12 + 100)
        self.assertEqual(result.national.votes_by_party["A"], 30056)
        self.assertEqual(len(result.analyzed), len(self.records))
        self.assertEqual([a.record for a in result.analyzed], self.records)
        self.assertEqual(result.national_analysis.issues, ())
        self.assertEqual([p.code for p in result.party_order], ["A", "B", "F"])

    def test_issues(self):
        result = run_analysis(self.registry, self.records, Thresholds())
        turnout = result.analyzed[5]
        self.assertEqual(len(turnout.issues), 1)
        self.assertTrue(turnout.issues[0].startswith("Turnout exceeds suffrage"))
        switched = result.analyzed[6]
        self.assertEqual(switched.issues, ("Fringe=50 ; Beta=0 ; ",))
        self.assertEqual(len(result.flagged), 2)

    def test_settlement_scores(self):
        result = run_analysis(self.registry, self.records, Thresholds())
        self.assertAlmostEqual(result.analyzed[0].settlement_distance, 0.0)
        self.assertIsNone(result.analyzed[5].settlement_distance)
        self.assertEqual(result.alerts, [])

    def test_assemble_report(self):
        result = run_analysis(self.registry, self.records, Thresholds())
        rows = assemble_report(result)
        self.assertEqual(len(rows), 2 + len(self.records))
        self.assertEqual(rows[0], report_header(result.party_order))
        self.assertEqual(rows[1][:3], ["*", "*", "*"])
        self.assertEqual(rows[1][10:], [30056, 20006, 50])
        self.assertEqual([row[2] for row in rows[2:]], ["0", "1", "2", "3", "4", "6", "7"])

    def test_rank_suspicious(self):
        result = run_analysis(self.registry, self.records, Thresholds())
        ranked = rank_suspicious(result.analyzed)
        self.assertEqual(ranked[0].record.ballot_box_id, "6")
        self.assertEqual(ranked[1].record.ballot_box_id, "7")
        self.assertEqual(len(ranked), 7)
        self.assertEqual(len(rank_suspicious(result.analyzed, limit=1)), 1)

    def test_markdown_report(self):
        result = run_analysis(self.registry, self.records, Thresholds())
        report = generate_analysis_report(result)
        self.assertIn("# Ballot Box Anomaly Report", report)
        self.assertIn("| Alpha | A | 30,056 |", report)
        self.assertIn("Fringe=50 ; Beta=0 ; ", report)
        self.assertIn("Turnout exceeds suffrage", report)

    def test_vote_summary(self):
        national = make_record("*", settlement="*", symbol="*", votes={"A": 1000, "B": 2000})
        lines = format_vote_summary(national, self.registry)
        self.assertEqual(lines[0], f"{'Settlement':<20}: * (*)")
        self.assertIn("Votes by party:", lines)
        self.assertEqual(lines[-2], f"{'Beta':<30}: 2,000")
        self.assertEqual(lines[-1], f"{'Alpha':<30}: 1,000")


if __name__ == "__main__":
    unittest.main(verbosity=2)
