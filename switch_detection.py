#!/usr/bin/env python3
"""
Detection of suspicious vote switches between fringe and major parties.

A ballot box where a party that is irrelevant nationally gets a real share
of the votes, while a nationally major party gets almost nothing, usually
means the votes were written down against the wrong party.

Contains: classify_parties, find_switches, detect_switches.
"""

from typing import Mapping, Optional

from ballot_types import BallotRecord, Party
from config import Thresholds, DEFAULT_THRESHOLDS


def classify_parties(
    record_shares: Mapping[str, float],
    national_shares: Mapping[str, float],
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> tuple[list[str], list[str]]:
    """
    Split a record's parties into "high fringe" and "low major" sets.

    A party with no national share (the national vector is empty) is
    undefined and never classified.

    Args:
        record_shares: Normalized vote vector of the ballot box
        national_shares: Normalized national vote vector
        thresholds: Detector policy constants

    Returns:
        (high_fringe, low_major) lists of letter codes, in record order
    """
    high_fringe = []
    low_major = []
    for code, share in record_shares.items():
        national = national_shares.get(code)
        if national is None:
            continue
        if share > thresholds.fringe_local_min_share and national < thresholds.fringe_national_max_share:
            high_fringe.append(code)
        if share < thresholds.major_local_max_share and national > thresholds.major_national_min_share:
            low_major.append(code)
    return high_fringe, low_major


def find_switches(
    record_shares: Mapping[str, float],
    national_shares: Mapping[str, float],
    raw_votes: Mapping[str, int],
    registry: Optional[Mapping[str, Party]] = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> list[str]:
    """
    Build the switch issue from precomputed share vectors.

    Each flagged party is written as "<name>=<raw votes> ; ", high fringe
    parties first, then low major ones. The trailing separator is part of
    the published report format.

    Returns:
        List with one combined issue, or an empty list when either set is empty
    """
    high_fringe, low_major = classify_parties(record_shares, national_shares, thresholds)
    if not high_fringe or not low_major:
        return []

    registry = registry or {}
    parts = []
    for code in high_fringe + low_major:
        party = registry.get(code)
        name = party.name if party else code
        parts.append(f"{name}={raw_votes.get(code, 0)} ; ")
    return ["".join(parts)]


def detect_switches(
    record: BallotRecord,
    national: BallotRecord,
    registry: Optional[Mapping[str, Party]] = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> list[str]:
    """
    Check for suspicious switches of all votes tallied to a party with another.

    Args:
        record: Ballot box to check
        national: National aggregate record
        registry: Party registry used for display names (codes are shown when absent)
        thresholds: Detector policy constants

    Returns:
        List with one combined issue, or an empty list
    """
    return find_switches(
        record.normalized_votes,
        national.normalized_votes,
        record.votes_by_party,
        registry,
        thresholds,
    )
