#!/usr/bin/env python3
"""
Internal consistency checks for a single ballot box.

Contains: check_consistency.
"""

from ballot_types import BallotRecord


def check_consistency(record: BallotRecord) -> list[str]:
    """
    Check the voting data for obvious incongruities.

    Checks run in a fixed order and are independent, so a record can carry
    any number of the three issues. Comparisons are exact.

    Args:
        record: Ballot record to check

    Returns:
        List of issue descriptions (empty if all is fine)
    """
    issues = []

    # Double envelope boxes have no suffrage size
    if record.suffrage_size > 0 and record.total_votes > record.suffrage_size:
        issues.append(
            f"Turnout exceeds suffrage. Suffrage size: {record.suffrage_size:,} ; "
            f"Total votes: {record.total_votes:,}"
        )

    if record.total_votes != record.disqualified_votes + record.valid_votes:
        issues.append(
            f"Total/valid/disqualified mismatch. Valid + Disqualified != Total: "
            f"{record.valid_votes:,} + {record.disqualified_votes:,} != {record.total_votes:,}"
        )

    party_total = record.party_votes_total
    if party_total != record.valid_votes:
        issues.append(
            f"Party-sum/valid mismatch. Total by party != valid votes "
            f"({party_total:,} != {record.valid_votes:,})"
        )

    return issues
