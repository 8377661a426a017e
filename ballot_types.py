#!/usr/bin/env python3
"""
Data types and errors for ballot-box anomaly analysis.

Contains: error classes (BallotAnalysisError and subclasses), Party,
BallotRecord and AnalyzedRecord dataclasses, FIXED_FIELDS, and integer
field parsing.
"""

from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Mapping, Optional

from vote_normalization import normalize_votes


class BallotAnalysisError(Exception):
    """Base class for fatal errors that abort an analysis run."""


class DuplicateKeyError(BallotAnalysisError):
    """The party registry lists the same ballot letter code twice."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Duplicate parties with ballot letter '{code}'")


class MissingPartyError(BallotAnalysisError):
    """A ballot data column has no matching party in the registry."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Missing party with letter '{code}'. Please update the party registry")


class MalformedFieldError(BallotAnalysisError, ValueError):
    """A required numeric field could not be parsed as an integer."""

    def __init__(self, column: str, value: object, line: Optional[int] = None):
        self.column = column
        self.value = value
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"Malformed integer in column '{column}'{where}: {value!r}")


class ReportSourceError(BallotAnalysisError):
    """An input file or URL could not be read."""


# Fixed (non-party) fields of a ballot row, in source column order
FIXED_FIELDS = (
    "settlement",
    "symbol",
    "ballot_box_id",
    "suffrage_size",
    "total_votes",
    "disqualified_votes",
    "valid_votes",
)

COUNT_FIELDS = FIXED_FIELDS[3:]


def parse_count(value: object, column: str, line: Optional[int] = None) -> int:
    """
    Parse a non-negative integer count from a text field.

    Args:
        value: Raw field value (usually text from a CSV cell)
        column: Column name, used in the error message
        line: Optional source line number, used in the error message

    Returns:
        The parsed integer

    Raises:
        MalformedFieldError: If the value is not a non-negative integer
    """
    if isinstance(value, bool):
        raise MalformedFieldError(column, value, line)
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip() if value is not None else ""
        try:
            number = int(text)
        except ValueError:
            raise MalformedFieldError(column, value, line) from None
    if number < 0:
        raise MalformedFieldError(column, value, line)
    return number


@dataclass(frozen=True)
class Party:
    """A party on the ballot, identified by its ballot letter code."""
    name: str
    code: str  # Ballot letter(s), unique

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


@dataclass(frozen=True)
class BallotRecord:
    """
    Tally of one ballot box, or the aggregate of several.

    Aggregates have exactly the same shape as primary records, so national,
    settlement and single-box totals are handled uniformly. Party votes are
    keyed by ballot letter code.
    """
    settlement: str
    symbol: str  # Settlement symbol
    ballot_box_id: str
    suffrage_size: int = 0  # 0 for boxes without a voter list (double envelopes)
    total_votes: int = 0
    disqualified_votes: int = 0
    valid_votes: int = 0
    votes_by_party: Mapping[str, int] = field(default_factory=dict)  # letter code -> votes

    def __post_init__(self):
        object.__setattr__(self, "votes_by_party", MappingProxyType(dict(self.votes_by_party)))

    @cached_property
    def normalized_votes(self) -> Mapping[str, float]:
        """Share of each party in this record's party votes (empty if they sum to 0)."""
        return MappingProxyType(normalize_votes(self.votes_by_party))

    @property
    def party_votes_total(self) -> int:
        """Sum of the per-party vote counts."""
        return sum(self.votes_by_party.values())

    @property
    def valid_percent(self) -> Optional[float]:
        """Valid votes as a percentage of total votes, None when no votes were cast."""
        if self.total_votes == 0:
            return None
        return 100.0 * self.valid_votes / self.total_votes

    @property
    def label(self) -> str:
        return f"{self.ballot_box_id} ({self.settlement})"

    @classmethod
    def from_row(cls, row: Mapping[str, object], party_codes, line: Optional[int] = None) -> "BallotRecord":
        """
        Build a record from one parsed input row.

        Args:
            row: Mapping with the FIXED_FIELDS keys plus one key per party letter code
            party_codes: Letter codes of all registered parties; a code with no
                value in the row counts as 0 votes
            line: Optional source line number for error messages

        Returns:
            BallotRecord

        Raises:
            MalformedFieldError: If a count field is not a non-negative integer
        """
        counts = {name: parse_count(row.get(name), name, line) for name in COUNT_FIELDS}
        votes = {}
        for code in party_codes:
            value = row.get(code)
            votes[code] = 0 if value is None else parse_count(value, code, line)
        return cls(
            settlement=str(row.get("settlement", "")).strip(),
            symbol=str(row.get("symbol", "")).strip(),
            ballot_box_id=str(row.get("ballot_box_id", "")).strip(),
            votes_by_party=votes,
            **counts,
        )


@dataclass(frozen=True)
class AnalyzedRecord:
    """A BallotRecord together with the results of all per-record checks."""
    record: BallotRecord
    issues: tuple[str, ...] = ()  # Empty when the record is clean
    valid_percent: Optional[float] = None
    settlement_distance: Optional[float] = None  # None when the settlement was too small to score

    @property
    def invalid_percent(self) -> Optional[float]:
        if self.valid_percent is None:
            return None
        return 100.0 - self.valid_percent

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)
