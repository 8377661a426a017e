#!/usr/bin/env python3
"""
Settlement outlier scoring.

Each ballot box is compared with the aggregate of its own settlement: the
score is the sum of squared differences between the box's party shares and
the settlement's party shares. It is a dimensionless spread, not a
probability.

Contains: HighDistanceAlert, SettlementScores, sum_square_distance,
score_settlements.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ballot_aggregation import aggregate, group_indices_by_settlement
from ballot_types import BallotRecord
from config import Thresholds, DEFAULT_THRESHOLDS
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class HighDistanceAlert:
    """A ballot box whose distance from its settlement average exceeds the alert threshold."""
    index: int  # Position in the primary record list
    record: BallotRecord
    distance: float


@dataclass
class SettlementScores:
    """
    Scores for a list of primary records.

    Attributes:
        distances: One entry per input record, None where the record was not scored
        issues: One list of advisory issues per input record
        settlements: Settlement symbol -> aggregate record, for scored settlements only
        skipped: Symbols of settlements with too few ballot boxes to score
        alerts: Ballot boxes above the distance alert threshold, in input order
    """
    distances: list[Optional[float]] = field(default_factory=list)
    issues: list[list[str]] = field(default_factory=list)
    settlements: dict[str, BallotRecord] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    alerts: list[HighDistanceAlert] = field(default_factory=list)


def sum_square_distance(
    record_shares: Mapping[str, float],
    settlement_shares: Mapping[str, float],
) -> tuple[Optional[float], list[str]]:
    """
    Sum of squared share differences over the settlement's parties.

    Parties present in the settlement vector but missing from the record
    vector have an undefined share and are left out of the sum.

    Args:
        record_shares: Normalized vote vector of the ballot box
        settlement_shares: Normalized vote vector of the settlement aggregate

    Returns:
        (distance, missing codes). Distance is None when the vectors share no party.
    """
    missing = [code for code in settlement_shares if code not in record_shares]
    shared = [code for code in settlement_shares if code in record_shares]
    if not shared:
        return None, missing
    distance = sum((record_shares[code] - settlement_shares[code]) ** 2 for code in shared)
    return distance, missing


def score_settlements(
    records: Sequence[BallotRecord],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> SettlementScores:
    """
    Score every primary record against its settlement aggregate.

    Settlements with fewer than thresholds.min_settlement_ballots ballot boxes
    are skipped; their records keep a None score.

    Args:
        records: Primary ballot records (no aggregates)
        thresholds: Detector policy constants

    Returns:
        SettlementScores aligned with <records>
    """
    scores = SettlementScores(
        distances=[None] * len(records),
        issues=[[] for _ in records],
    )

    for symbol, indices in group_indices_by_settlement(records).items():
        if len(indices) < thresholds.min_settlement_ballots:
            scores.skipped.append(symbol)
            continue

        members = [records[i] for i in indices]
        settlement_total = aggregate(members, settlement=members[0].settlement, symbol=symbol)
        scores.settlements[symbol] = settlement_total
        settlement_shares = settlement_total.normalized_votes

        for index, record in zip(indices, members):
            distance, missing = sum_square_distance(record.normalized_votes, settlement_shares)

            if missing:
                logger.warning(
                    f"Mismatching keys between {record.settlement} and its ballot {record.ballot_box_id}: "
                    f"no share for {', '.join(missing)}"
                )
                if distance is None:
                    scores.issues[index].append(
                        "Settlement distance undefined (no votes by party in this ballot box)"
                    )
                else:
                    scores.issues[index].append(
                        f"Settlement distance computed without parties {', '.join(missing)}"
                    )

            scores.distances[index] = distance
            if distance is not None and distance > thresholds.distance_alert:
                logger.warning(
                    f"{record.settlement} {record.ballot_box_id} - Dist from settlement average is {distance:.3f}"
                )
                scores.alerts.append(HighDistanceAlert(index=index, record=record, distance=distance))

    scores.alerts.sort(key=lambda alert: alert.index)
    return scores
