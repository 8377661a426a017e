#!/usr/bin/env python3
"""
Party registry: ballot letter code -> Party.

Contains: load_parties, validate_coverage, party_manifest, order_by_votes.
"""

from typing import Iterable, Mapping

from ballot_types import Party, DuplicateKeyError, MissingPartyError, ReportSourceError


def load_parties(rows: Iterable[tuple[str, str]]) -> dict[str, Party]:
    """
    Build the party registry from (party name, letter code) pairs.

    Args:
        rows: Iterable of (name, letter code) pairs, in display order

    Returns:
        Dictionary mapping letter code to Party, in source order

    Raises:
        DuplicateKeyError: If the same letter code appears twice
        ReportSourceError: If a party has a blank letter code
    """
    registry: dict[str, Party] = {}
    for name, code in rows:
        name = name.strip()
        code = code.strip()
        if not code:
            raise ReportSourceError(f"Party '{name}' has no ballot letter")
        if code in registry:
            raise DuplicateKeyError(code)
        registry[code] = Party(name=name, code=code)
    return registry


def validate_coverage(registry: Mapping[str, Party], observed_codes: Iterable[str]) -> None:
    """
    Ensure every letter code found in the ballot data is a registered party.

    Must run before any aggregation so schema drift fails fast.

    Raises:
        MissingPartyError: Naming the first unknown code
    """
    for code in observed_codes:
        if code not in registry:
            raise MissingPartyError(code)


def party_manifest(registry: Mapping[str, Party]) -> list[str]:
    """Console lines listing the registered parties."""
    lines = [f"Our {len(registry):,} parties are:"]
    lines.extend(str(party) for party in registry.values())
    return lines


def order_by_votes(registry: Mapping[str, Party], votes: Mapping[str, int]) -> list[Party]:
    """
    Parties sorted by descending vote count.

    Ties keep registry order, since sorted() is stable. Parties missing from
    <votes> count as 0.
    """
    return sorted(registry.values(), key=lambda p: votes.get(p.code, 0), reverse=True)
