#!/usr/bin/env python3
"""
Ballot record aggregation.

Contains: combine, zero_record, aggregate, wildcard_to_regex,
count_matching, group_indices_by_settlement, group_by_settlement.

Aggregation is a pure fold: records are never mutated, each combine step
builds a new BallotRecord, so the result does not depend on the order in
which records are folded.
"""

import re
from functools import reduce
from typing import Iterable, Optional, Sequence

from ballot_types import BallotRecord


def combine(a: BallotRecord, b: BallotRecord) -> BallotRecord:
    """
    Combine two records into a new one.

    Counts are summed field by field and party votes are summed per letter
    code (a party missing from one side contributes 0). Settlement name,
    symbol and ballot box id are taken from <a>, so a labelled zero record
    used as the base of a fold names the result.

    Args:
        a: Left operand (provides the labels)
        b: Right operand

    Returns:
        New BallotRecord with the summed values
    """
    votes = dict(a.votes_by_party)
    for code, count in b.votes_by_party.items():
        votes[code] = votes.get(code, 0) + count

    return BallotRecord(
        settlement=a.settlement,
        symbol=a.symbol,
        ballot_box_id=a.ballot_box_id,
        suffrage_size=a.suffrage_size + b.suffrage_size,
        total_votes=a.total_votes + b.total_votes,
        disqualified_votes=a.disqualified_votes + b.disqualified_votes,
        valid_votes=a.valid_votes + b.valid_votes,
        votes_by_party=votes,
    )


def zero_record(settlement: str = "*", symbol: str = "*", ballot_box_id: str = "*") -> BallotRecord:
    """An all-zero record carrying the given labels, used as the base of a fold."""
    return BallotRecord(settlement=settlement, symbol=symbol, ballot_box_id=ballot_box_id)


def aggregate(
    records: Iterable[BallotRecord],
    settlement: str = "*",
    symbol: str = "*",
    ballot_box_id: str = "*",
) -> BallotRecord:
    """
    Fold records into a single labelled total.

    Args:
        records: Records to add up
        settlement, symbol, ballot_box_id: Labels of the resulting record

    Returns:
        BallotRecord with the summed counts and party votes
    """
    return reduce(combine, records, zero_record(settlement, symbol, ballot_box_id))


def wildcard_to_regex(pattern: str) -> re.Pattern:
    """
    Compile a wildcard pattern into an anchored regular expression.

    "*" matches any sequence (including empty), "?" matches exactly one
    character, everything else is literal.
    """
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def count_matching(
    records: Iterable[BallotRecord],
    settlement_symbol_pattern: Optional[str] = None,
    ballot_box_pattern: Optional[str] = None,
    settlement: str = "*",
) -> BallotRecord:
    """
    Count the total voting data of all records matching optional filters.

    Note: both patterns are matched against the ballot box id, including the
    settlement symbol pattern.

    Args:
        records: Records to filter and add up
        settlement_symbol_pattern: Wildcard filter, None for no filter
        ballot_box_pattern: Wildcard filter, None for no filter
        settlement: Settlement name label of the result

    Returns:
        Aggregate BallotRecord labelled (settlement, symbol pattern, ballot box pattern)
    """
    filters = [
        wildcard_to_regex(pattern)
        for pattern in (settlement_symbol_pattern, ballot_box_pattern)
        if pattern is not None
    ]
    matching = (
        record for record in records
        if all(regex.fullmatch(record.ballot_box_id) for regex in filters)
    )
    return aggregate(
        matching,
        settlement=settlement,
        symbol="*" if settlement_symbol_pattern is None else settlement_symbol_pattern,
        ballot_box_id="*" if ballot_box_pattern is None else ballot_box_pattern,
    )


def group_indices_by_settlement(records: Sequence[BallotRecord]) -> dict[str, list[int]]:
    """
    Group record positions by settlement symbol.

    Args:
        records: Primary ballot records

    Returns:
        Dictionary mapping settlement symbol to the indices of its records, in input order
    """
    grouped: dict[str, list[int]] = {}
    for index, record in enumerate(records):
        grouped.setdefault(record.symbol, []).append(index)
    return grouped


def group_by_settlement(records: Sequence[BallotRecord]) -> dict[str, list[BallotRecord]]:
    """Group records by settlement symbol, keeping input order inside each group."""
    return {
        symbol: [records[i] for i in indices]
        for symbol, indices in group_indices_by_settlement(records).items()
    }
