#!/usr/bin/env python3
"""
End-to-end ballot analysis pipeline.

Contains: AnalysisResult dataclass, run_analysis, analyze_files.

Data flow: registry + records -> national total -> per-record consistency
and switch checks -> settlement scoring -> AnalyzedRecord per ballot box.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ballot_aggregation import count_matching
from ballot_io import read_ballots_csv, read_parties_csv
from ballot_types import AnalyzedRecord, BallotRecord, Party
from ballot_reporting import build_party_order, format_vote_summary
from ballot_validation import check_consistency
from config import Config, Thresholds, get_config
from logging_config import LogContext, get_logger, log_ballot_issues
from party_registry import party_manifest
from settlement_outliers import HighDistanceAlert, score_settlements
from switch_detection import detect_switches

logger = get_logger(__name__)


@dataclass
class AnalysisResult:
    """Everything produced by one analysis run."""
    registry: dict[str, Party]
    records: list[BallotRecord]  # Primary records, input order
    national: BallotRecord
    analyzed: list[AnalyzedRecord]  # Aligned with <records>
    national_analysis: AnalyzedRecord
    party_order: list[Party]  # Descending national votes
    alerts: list[HighDistanceAlert] = field(default_factory=list)
    thresholds: Thresholds = field(default_factory=Thresholds)

    @property
    def flagged(self) -> list[AnalyzedRecord]:
        """Analyzed records that carry at least one issue."""
        return [a for a in self.analyzed if a.has_issues]


def run_analysis(
    registry: Mapping[str, Party],
    records: Sequence[BallotRecord],
    thresholds: Optional[Thresholds] = None,
) -> AnalysisResult:
    """
    Run every check over a batch of ballot records.

    Args:
        registry: Party registry (letter code -> Party)
        records: Primary ballot records
        thresholds: Detector policy constants (defaults to the global configuration)

    Returns:
        AnalysisResult with one AnalyzedRecord per input record and the national summary
    """
    if thresholds is None:
        thresholds = get_config().thresholds
    registry = dict(registry)
    records = list(records)

    for line in party_manifest(registry):
        logger.info(line)
    logger.info(f"Ballots size: {len(records):,}")

    with LogContext(logger, "Counting national votes", unit="ballot boxes") as stage:
        national = count_matching(records, "*", "*", settlement="*")
        stage.count = len(records)

    for line in format_vote_summary(national, registry):
        logger.info(line)

    issues: list[list[str]] = []
    with LogContext(logger, "Checking ballot boxes", unit="ballot boxes") as stage:
        for record in records:
            found = check_consistency(record)
            found.extend(detect_switches(record, national, registry, thresholds))
            issues.append(found)
        stage.count = len(issues)

    with LogContext(logger, "Scoring settlements", unit="ballot boxes") as stage:
        scores = score_settlements(records, thresholds)
        stage.count = len(records)

    analyzed = []
    for record, found, extra, distance in zip(records, issues, scores.issues, scores.distances):
        all_issues = tuple(found + extra)
        log_ballot_issues(logger, record.ballot_box_id, record.settlement, all_issues)
        analyzed.append(AnalyzedRecord(
            record=record,
            issues=all_issues,
            valid_percent=record.valid_percent,
            settlement_distance=distance,
        ))

    national_analysis = AnalyzedRecord(record=national, issues=(), valid_percent=national.valid_percent)

    flagged = sum(1 for a in analyzed if a.has_issues)
    logger.info(
        f"Analyzed {len(analyzed):,} ballot boxes: {flagged:,} with issues, "
        f"{len(scores.alerts):,} far from their settlement average, "
        f"{len(scores.skipped):,} settlements too small to score"
    )

    return AnalysisResult(
        registry=registry,
        records=records,
        national=national,
        analyzed=analyzed,
        national_analysis=national_analysis,
        party_order=build_party_order(registry, national),
        alerts=scores.alerts,
        thresholds=thresholds,
    )


def analyze_files(parties_source: str, ballots_source: str, config: Optional[Config] = None) -> AnalysisResult:
    """
    Load the party registry and ballot file, then run the analysis.

    Args:
        parties_source: Path or URL of the parties CSV
        ballots_source: Path or URL of the ballots CSV
        config: Configuration (defaults to the global configuration)

    Returns:
        AnalysisResult

    Raises:
        BallotAnalysisError: On any fatal registry, schema or parsing error
    """
    config = config or get_config()
    with LogContext(logger, f"Loading {parties_source} and {ballots_source}", unit="ballot boxes") as stage:
        registry = read_parties_csv(parties_source, timeout=config.http_timeout)
        records = read_ballots_csv(
            ballots_source,
            registry,
            encoding=config.ballots_encoding,
            timeout=config.http_timeout,
        )
        stage.count = len(records)
    return run_analysis(registry, records, config.thresholds)
