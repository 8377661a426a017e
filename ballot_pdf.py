#!/usr/bin/env python3
"""
PDF summary of a ballot analysis run.

Contains: HEADER_STYLE, _create_stats_table, _create_issue_summary,
_create_top_parties_chart, _create_review_table, generate_analysis_pdf.
"""

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.graphics.shapes import Drawing, String
from reportlab.graphics.charts.barcharts import HorizontalBarChart

from ballot_reporting import format_distance, format_invalid_percent, rank_suspicious
from logging_config import get_logger

if TYPE_CHECKING:
    from ballot_analysis import AnalysisResult

logger = get_logger(__name__)

# Table style shared by every tabular section (dark header row)
HEADER_STYLE = [
    ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#1f4788')),
    ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
    ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
    ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
    ('FONTSIZE', (0, 0), (-1, 0), 10),
    ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
    ('GRID', (0, 0), (-1, -1), 1, colors.grey),
    ('FONTSIZE', (0, 1), (-1, -1), 8),
    ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F5F5F5')]),
]


def _create_stats_table(result: "AnalysisResult") -> Table:
    """Compact 2-column table with the national totals."""
    national = result.national
    stats_data = [
        ['Ballot Boxes', f"{len(result.records):,}", 'Suffrage Size', f"{national.suffrage_size:,}"],
        ['Total Votes', f"{national.total_votes:,}", 'Valid Votes', f"{national.valid_votes:,}"],
        ['Disqualified', f"{national.disqualified_votes:,}", 'Invalid %',
         format_invalid_percent(result.national_analysis) or 'N/A'],
    ]

    table = Table(stats_data, colWidths=[1.3*inch, 1.2*inch, 1.3*inch, 1.2*inch])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (0, -1), colors.HexColor('#f0f0f0')),
        ('BACKGROUND', (2, 0), (2, -1), colors.HexColor('#f0f0f0')),
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('ALIGN', (3, 0), (3, -1), 'RIGHT'),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#cccccc')),
    ]))
    return table


def _create_issue_summary(result: "AnalysisResult") -> Paragraph:
    """Color-coded counts of flagged, far and clean ballot boxes."""
    flagged = len(result.flagged)
    far = len(result.alerts)
    clean = len(result.analyzed) - flagged
    text = (
        f"<font color='#e74c3c'><b>WITH ISSUES: {flagged:,}</b></font> | "
        f"<font color='#f39c12'><b>FAR FROM SETTLEMENT: {far:,}</b></font> | "
        f"<font color='#2ecc71'><b>CLEAN: {clean:,}</b></font>"
    )
    return Paragraph(f"Ballot Box Summary: {text}", ParagraphStyle(
        'IssueStyle',
        fontSize=9,
        spaceAfter=6,
        spaceBefore=6
    ))


def _create_top_parties_chart(result: "AnalysisResult", top: int = 5, width: float = None, height: float = None) -> Drawing:
    """
    Create a compact horizontal bar chart of the top parties by national votes.

    Args:
        result: AnalysisResult with the national aggregate
        top: Number of parties to show
        width: Chart width (default 5 inches)
        height: Chart height (default 2 inches)

    Returns:
        Drawing with horizontal bar chart, or None if no party has votes
    """
    if width is None:
        width = 5*inch
    if height is None:
        height = 2*inch

    votes = result.national.votes_by_party
    leaders = [(p, votes.get(p.code, 0)) for p in result.party_order[:top]]
    leaders = [(p, v) for p, v in leaders if v > 0]
    if not leaders:
        return None

    drawing = Drawing(width, height)

    bc = HorizontalBarChart()
    bc.x = 80  # Space for labels
    bc.y = 20
    bc.height = height - 40
    bc.width = width - 100
    bc.data = [[v for _, v in leaders]]
    bc.strokeColor = colors.black
    bc.valueAxis.valueMin = 0
    bc.valueAxis.valueMax = max(v for _, v in leaders) * 1.1
    bc.categoryAxis.categoryNames = [f"Party {p.code}" for p, _ in leaders]
    bc.bars[0].fillColor = colors.HexColor('#1f4788')

    drawing.add(bc)

    title = String(width / 2, height - 10, f'Top {len(leaders)} Parties by National Votes',
                   fontSize=10, fillColor=colors.black, textAnchor='middle')
    drawing.add(title)

    return drawing


def _create_review_table(result: "AnalysisResult", limit: int, cell_style: ParagraphStyle) -> Table:
    """Ranked ballot boxes with their issues, or None when nothing needs review."""
    ranked = [a for a in rank_suspicious(result.analyzed, limit) if a.has_issues]
    if not ranked:
        return None

    data = [['#', 'Ballot Box', 'Invalid %', 'Distance', 'Issues']]
    for rank, analysis in enumerate(ranked, 1):
        record = analysis.record
        issues = "<br/>".join(escape(issue) for issue in analysis.issues)
        data.append([
            str(rank),
            Paragraph(escape(f"{record.ballot_box_id} ({record.symbol})"), cell_style),
            format_invalid_percent(analysis) or 'N/A',
            format_distance(analysis.settlement_distance) or 'N/A',
            Paragraph(issues, cell_style),
        ])

    table = Table(data, colWidths=[0.4*inch, 1.4*inch, 0.8*inch, 0.8*inch, 3.6*inch], repeatRows=1)
    table.setStyle(TableStyle(HEADER_STYLE))
    return table


def generate_analysis_pdf(result: "AnalysisResult", output_path: str, limit: int = 50) -> bool:
    """
    Generate a PDF summary of an analysis run.

    The document holds the national totals, a color-coded issue summary,
    a top parties chart, the ranked ballot boxes for review and the list of
    boxes far from their settlement average.

    Args:
        result: AnalysisResult from run_analysis()
        output_path: Path to save PDF
        limit: Maximum number of ranked ballot boxes to list

    Returns:
        True if successful, False otherwise
    """
    try:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        doc = SimpleDocTemplate(
            str(output_path),
            pagesize=A4,
            leftMargin=0.5*inch,
            rightMargin=0.5*inch,
            topMargin=0.5*inch,
            bottomMargin=0.5*inch
        )
        styles = getSampleStyleSheet()
        story = []

        title_style = ParagraphStyle(
            'CustomTitle',
            parent=styles['Heading1'],
            fontSize=18,
            textColor=colors.HexColor('#1f4788'),
            spaceAfter=12,
            alignment=TA_CENTER,
        )
        cell_style = ParagraphStyle('Cell', parent=styles['Normal'], fontSize=7, leading=9)

        story.append(Paragraph("Ballot Box Anomaly Report", title_style))
        story.append(Paragraph(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}", styles['Normal']))
        story.append(Spacer(1, 0.2*inch))

        story.append(Paragraph("National Totals", styles['Heading2']))
        story.append(_create_stats_table(result))
        story.append(_create_issue_summary(result))
        story.append(Spacer(1, 0.1*inch))

        chart = _create_top_parties_chart(result)
        if chart:
            story.append(chart)
        else:
            story.append(Paragraph("(No party votes recorded)", styles['Normal']))
        story.append(Spacer(1, 0.2*inch))

        story.append(Paragraph("Ballot Boxes for Review", styles['Heading2']))
        review_table = _create_review_table(result, limit, cell_style)
        if review_table:
            story.append(review_table)
        else:
            story.append(Paragraph("No ballot box has consistency or switch issues.", styles['Normal']))
        story.append(Spacer(1, 0.2*inch))

        story.append(Paragraph("Far from Settlement Average", styles['Heading2']))
        if result.alerts:
            alert_data = [['Settlement', 'Ballot Box', 'Distance']]
            for alert in sorted(result.alerts, key=lambda a: a.distance, reverse=True):
                alert_data.append([
                    Paragraph(escape(alert.record.settlement), cell_style),
                    alert.record.ballot_box_id,
                    f"{alert.distance:.3f}",
                ])
            alert_table = Table(alert_data, colWidths=[3*inch, 2*inch, 1.5*inch], repeatRows=1)
            alert_table.setStyle(TableStyle(HEADER_STYLE))
            story.append(alert_table)
        else:
            story.append(Paragraph(
                f"No ballot box is further than {result.thresholds.distance_alert} from its settlement average.",
                styles['Normal'],
            ))

        doc.build(story)
        logger.info(f"PDF report saved to: {output_path}")
        return True

    except Exception as e:
        logger.error(f"Error generating PDF report: {e}")
        return False
