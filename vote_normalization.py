#!/usr/bin/env python3
"""
Vote normalization (share-of-total vectors).

Contains: normalize_votes, normalize.

A normalized vector maps each party letter code to its share of all party
votes in a record. When the party votes sum to 0 the vector is empty: a
party that is absent from the vector has an undefined share, which callers
must not read as 0.
"""

from typing import Mapping


def normalize_votes(votes: Mapping[str, int]) -> dict[str, float]:
    """
    Convert raw party vote counts into shares of the total.

    Args:
        votes: Mapping of party letter code -> vote count

    Returns:
        Mapping of party letter code -> share (shares sum to 1.0), or an
        empty dict when the counts sum to 0
    """
    total = sum(votes.values())
    if total <= 0:
        return {}
    return {code: count / total for code, count in votes.items()}


def normalize(record) -> dict[str, float]:
    """Normalized vote vector of a BallotRecord (or anything exposing votes_by_party)."""
    return normalize_votes(record.votes_by_party)
