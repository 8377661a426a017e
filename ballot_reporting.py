#!/usr/bin/env python3
"""
Ballot analysis report assembly.

Contains: REPORT_COLUMNS, build_party_order, report_header, to_report_row,
assemble_report, rank_suspicious, format_vote_summary,
generate_analysis_report.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Mapping, Optional, Sequence

from ballot_types import AnalyzedRecord, BallotRecord, Party
from party_registry import order_by_votes

if TYPE_CHECKING:
    from ballot_analysis import AnalysisResult


# Fixed leading columns of the report, before one column per party
REPORT_COLUMNS = [
    "Settlement",
    "Symbol",
    "Ballot Box",
    "Suffrage Size",
    "Total Votes",
    "Disqualified Votes",
    "Valid Votes",
    "Invalid Percentage",
    "Settlement Distance",
    "Issues",
]


def build_party_order(registry: Mapping[str, Party], national: BallotRecord) -> list[Party]:
    """Party columns, descending by national votes (ties keep registry order)."""
    return order_by_votes(registry, national.votes_by_party)


def report_header(party_order: Sequence[Party]) -> list[str]:
    """Header row: the fixed columns, then "<name> - <code>" per party."""
    return REPORT_COLUMNS + [f"{party.name} - {party.code}" for party in party_order]


def round_half_up(value: float, places: int) -> str:
    """Fixed-point text of <value>, with ties rounded away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_invalid_percent(analysis: AnalyzedRecord) -> str:
    invalid = analysis.invalid_percent
    return "" if invalid is None else f"{round_half_up(invalid, 2)}%"


def format_distance(distance: Optional[float]) -> str:
    return "" if distance is None else round_half_up(distance, 3)


def to_report_row(analysis: AnalyzedRecord, party_order: Sequence[Party]) -> list:
    """
    Convert one analyzed record into a report row.

    Args:
        analysis: AnalyzedRecord to convert
        party_order: Parties in column order

    Returns:
        List of cell values, in REPORT_COLUMNS order followed by party votes
    """
    data = analysis.record
    row = [
        data.settlement,
        data.symbol,
        data.ballot_box_id,
        data.suffrage_size,
        data.total_votes,
        data.disqualified_votes,
        data.valid_votes,
        format_invalid_percent(analysis),
        format_distance(analysis.settlement_distance),
        "\n".join(analysis.issues),
    ]
    row.extend(data.votes_by_party.get(party.code, 0) for party in party_order)
    return row


def assemble_report(result: "AnalysisResult") -> list[list]:
    """
    Build the full report table.

    Returns:
        Header row, national summary row, then one row per ballot box in input order
    """
    rows = [report_header(result.party_order)]
    rows.append(to_report_row(result.national_analysis, result.party_order))
    rows.extend(to_report_row(analysis, result.party_order) for analysis in result.analyzed)
    return rows


def rank_suspicious(analyzed: Sequence[AnalyzedRecord], limit: Optional[int] = None) -> list[AnalyzedRecord]:
    """
    Rank ballot boxes for manual review.

    Only boxes with at least one issue or a settlement distance are ranked.
    Order: more issues first, then larger distance, then input order.

    Args:
        analyzed: Analyzed records
        limit: Maximum number of records to return (None for all)

    Returns:
        Ranked list of AnalyzedRecord
    """
    candidates = [
        (i, a) for i, a in enumerate(analyzed)
        if a.has_issues or a.settlement_distance is not None
    ]
    candidates.sort(key=lambda item: (
        -len(item[1].issues),
        -(item[1].settlement_distance or 0.0),
        item[0],
    ))
    ranked = [a for _, a in candidates]
    return ranked if limit is None else ranked[:limit]


def format_vote_summary(data: BallotRecord, registry: Mapping[str, Party]) -> list[str]:
    """
    Console lines describing one (usually aggregate) record.

    Args:
        data: Record to display
        registry: Party registry for display names

    Returns:
        List of text lines
    """
    lines = [
        f"{'Settlement':<20}: {data.settlement} ({data.symbol})",
        f"{'Ballot':<20}: {data.ballot_box_id}",
        f"{'Suffrage Size':<20}: {data.suffrage_size:,}",
        f"{'Total Votes':<20}: {data.total_votes:,}",
        f"{'Disqualified Votes':<20}: {data.disqualified_votes:,}",
        f"{'Valid Votes':<20}: {data.valid_votes:,}",
        "Votes by party:",
        "========================",
    ]
    by_votes = sorted(data.votes_by_party.items(), key=lambda item: item[1], reverse=True)
    for code, votes in by_votes:
        party = registry.get(code)
        name = party.name if party else code
        lines.append(f"{name:<30}: {votes:,}")
    return lines


def generate_analysis_report(result: "AnalysisResult", top: int = 25) -> str:
    """
    Generate a markdown summary of an analysis run.

    Args:
        result: AnalysisResult from run_analysis()
        top: Number of ranked ballot boxes to list

    Returns:
        Formatted markdown report string
    """
    national = result.national
    lines = []
    lines.append("# Ballot Box Anomaly Report")
    lines.append("")
    lines.append(f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append("")

    # National totals
    lines.append("## National Totals")
    lines.append("")
    lines.append("| Metric | Count |")
    lines.append("|--------|-------|")
    lines.append(f"| Ballot Boxes | {len(result.records):,} |")
    lines.append(f"| Suffrage Size | {national.suffrage_size:,} |")
    lines.append(f"| Total Votes | {national.total_votes:,} |")
    lines.append(f"| Disqualified Votes | {national.disqualified_votes:,} |")
    lines.append(f"| Valid Votes | {national.valid_votes:,} |")
    lines.append(f"| Invalid Percentage | {format_invalid_percent(result.national_analysis) or 'N/A'} |")
    lines.append("")

    # Party results
    lines.append("## Votes by Party")
    lines.append("")
    lines.append("| Party | Letter | Votes | Share |")
    lines.append("|-------|--------|-------|-------|")
    shares = national.normalized_votes
    for party in result.party_order:
        votes = national.votes_by_party.get(party.code, 0)
        share = shares.get(party.code)
        share_text = f"{share:.2%}" if share is not None else "N/A"
        lines.append(f"| {party.name} | {party.code} | {votes:,} | {share_text} |")
    lines.append("")

    # Overall statistics
    flagged = result.flagged
    total = len(result.analyzed)
    scored = sum(1 for a in result.analyzed if a.settlement_distance is not None)
    lines.append("## Overall Statistics")
    lines.append("")
    lines.append("| Category | Count | Percentage |")
    lines.append("|----------|-------|-----------|")
    if total:
        lines.append(f"| Ballot Boxes with Issues | {len(flagged):,} | {len(flagged)/total*100:.1f}% |")
        lines.append(f"| Scored Against Settlement | {scored:,} | {scored/total*100:.1f}% |")
        lines.append(f"| Far from Settlement Average | {len(result.alerts):,} | {len(result.alerts)/total*100:.1f}% |")
    else:
        lines.append("| Ballot Boxes | 0 | N/A |")
    lines.append("")

    # Ranked ballot boxes
    ranked = [a for a in rank_suspicious(result.analyzed, top) if a.has_issues]
    lines.append("## Ballot Boxes for Review")
    lines.append("")
    if ranked:
        lines.append("| # | Settlement | Ballot Box | Invalid % | Distance | Issues |")
        lines.append("|---|------------|------------|-----------|----------|--------|")
        for rank, analysis in enumerate(ranked, 1):
            data = analysis.record
            issues = "<br>".join(issue.replace("|", "\\|") for issue in analysis.issues)
            lines.append(
                f"| {rank} | {data.settlement} ({data.symbol}) | {data.ballot_box_id} | "
                f"{format_invalid_percent(analysis) or 'N/A'} | "
                f"{format_distance(analysis.settlement_distance) or 'N/A'} | {issues} |"
            )
    else:
        lines.append("✓ No ballot box has consistency or switch issues.")
    lines.append("")

    # Distance alerts
    lines.append("## Far from Settlement Average")
    lines.append("")
    if result.alerts:
        lines.append(f"> ⚠ **{len(result.alerts)} ballot box(es) with distance above {result.thresholds.distance_alert}**")
        lines.append("")
        for alert in sorted(result.alerts, key=lambda a: a.distance, reverse=True):
            lines.append(f"- {alert.record.settlement} {alert.record.ballot_box_id}: {alert.distance:.3f}")
    else:
        lines.append(f"✓ No ballot box is further than {result.thresholds.distance_alert} from its settlement average.")
    lines.append("")
    lines.append("---")
    lines.append("")

    return "\n".join(lines)
