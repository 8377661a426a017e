#!/usr/bin/env python3
"""
Input and output adapters for ballot analysis.

Contains: read_text, fetch_url, read_parties_csv, read_ballots_csv,
write_report_csv.

Sources can be local paths or http(s) URLs. Remote files are fetched with
requests and retried with exponential backoff.

Usage:
    from ballot_io import read_parties_csv, read_ballots_csv

    registry = read_parties_csv("parties.csv")
    records = read_ballots_csv("expb.csv", registry)
"""

import csv
import io
from pathlib import Path
from typing import Iterable, Mapping, Sequence, Union

import requests
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)

from ballot_types import (
    FIXED_FIELDS,
    BallotRecord,
    Party,
    ReportSourceError,
)
from logging_config import get_logger
from party_registry import load_parties, validate_coverage

logger = get_logger(__name__)

# Encoding of the party registry file (a byte order mark is tolerated)
PARTIES_ENCODING = "utf-8-sig"

# Report files are opened by spreadsheet users, so they carry a BOM
REPORT_ENCODING = "utf-8-sig"


def is_url(source: Union[str, Path]) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=4, max=10),
    retry=retry_if_exception_type((requests.HTTPError, requests.ConnectionError)),
    reraise=True
)
def fetch_url(url: str, timeout: int = 60) -> bytes:
    """
    Download a remote file.

    Args:
        url: http(s) URL
        timeout: Request timeout in seconds

    Returns:
        Response body

    Raises:
        requests.HTTPError: After 3 failed attempts
        requests.ConnectionError: After 3 failed attempts
    """
    logger.debug(f"Fetching {url}")
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def read_text(source: Union[str, Path], encoding: str = "utf-8", timeout: int = 60) -> str:
    """
    Read a local file or a URL as text.

    Args:
        source: Local path or http(s) URL
        encoding: Text encoding of the source
        timeout: Request timeout in seconds for URLs

    Returns:
        Decoded text

    Raises:
        ReportSourceError: If the source cannot be read or decoded
    """
    try:
        if is_url(source):
            data = fetch_url(str(source), timeout=timeout)
        else:
            data = Path(source).read_bytes()
        return data.decode(encoding)
    except requests.RequestException as e:
        raise ReportSourceError(f"Cannot fetch {source}: {e}") from e
    except OSError as e:
        raise ReportSourceError(f"Cannot read {source}: {e}") from e
    except (UnicodeDecodeError, LookupError) as e:
        raise ReportSourceError(f"Cannot decode {source} as {encoding}: {e}") from e


def read_parties_csv(source: Union[str, Path], timeout: int = 60) -> dict[str, Party]:
    """
    Load the party registry from a CSV with "Party" and "Ballot" columns.

    Args:
        source: Local path or URL of the parties CSV
        timeout: Request timeout in seconds for URLs

    Returns:
        Dictionary mapping letter code to Party, in file order

    Raises:
        ReportSourceError: If the file cannot be read or lacks the required columns
        DuplicateKeyError: If a letter code repeats
    """
    text = read_text(source, encoding=PARTIES_ENCODING, timeout=timeout)
    reader = csv.DictReader(io.StringIO(text))
    fieldnames = [name.strip() for name in (reader.fieldnames or [])]
    missing = [name for name in ("Party", "Ballot") if name not in fieldnames]
    if missing:
        raise ReportSourceError(f"{source}: missing column(s) {', '.join(missing)}")
    reader.fieldnames = fieldnames

    registry = load_parties((row["Party"] or "", row["Ballot"] or "") for row in reader)
    logger.debug(f"Loaded {len(registry)} parties from {source}")
    return registry


def party_columns(header: Sequence[str]) -> list[str]:
    """
    Letter codes named by a ballot header row (everything after the fixed fields).

    Raises:
        ReportSourceError: If a letter code heads more than one column
    """
    codes = [name.strip() for name in header[len(FIXED_FIELDS):] if name.strip()]
    seen = set()
    for code in codes:
        if code in seen:
            raise ReportSourceError(f"Ballot letter '{code}' heads more than one column")
        seen.add(code)
    return codes


def read_ballots_csv(
    source: Union[str, Path],
    registry: Mapping[str, Party],
    encoding: str = "ISO-8859-8",
    timeout: int = 60,
) -> list[BallotRecord]:
    """
    Load ballot box tallies.

    The first seven columns are, by position: settlement name, settlement
    symbol, ballot box id, suffrage size, total votes, disqualified votes and
    valid votes. Every further column is headed by a party letter code.

    Args:
        source: Local path or URL of the ballots CSV
        registry: Party registry; every data column must be registered
        encoding: Text encoding of the file
        timeout: Request timeout in seconds for URLs

    Returns:
        List of BallotRecord in file order

    Raises:
        ReportSourceError: If the file cannot be read or has no header, or a letter code repeats
        MissingPartyError: If a data column has no registered party
        MalformedFieldError: If a count is not a non-negative integer
    """
    text = read_text(source, encoding=encoding, timeout=timeout)
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if header is None or len(header) < len(FIXED_FIELDS):
        raise ReportSourceError(
            f"{source}: expected a header with at least {len(FIXED_FIELDS)} columns"
        )

    codes = party_columns(header)
    validate_coverage(registry, codes)

    absent = [code for code in registry if code not in codes]
    if absent:
        logger.warning(f"No ballot column for parties {', '.join(absent)}; counting 0 votes")

    positions = [
        (index, name.strip())
        for index, name in enumerate(header)
        if index >= len(FIXED_FIELDS) and name.strip()
    ]

    records = []
    # Line 1 is the header
    for line, cells in enumerate(reader, start=2):
        if not any(cell.strip() for cell in cells):
            continue
        row = {name: cells[i] if i < len(cells) else "" for i, name in enumerate(FIXED_FIELDS)}
        for index, code in positions:
            row[code] = cells[index] if index < len(cells) else ""
        records.append(BallotRecord.from_row(row, registry.keys(), line=line))

    logger.debug(f"Loaded {len(records):,} ballot boxes from {source}")
    return records


def write_report_csv(rows: Iterable[Sequence], path: Union[str, Path]) -> Path:
    """
    Write report rows to a CSV file.

    Args:
        rows: Header followed by data rows
        path: Output file path (parent directories are created)

    Returns:
        The output path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding=REPORT_ENCODING, newline="") as fp:
        writer = csv.writer(fp, dialect="excel")
        writer.writerows(rows)
    logger.info(f"Saved report to {path}")
    return path

