"""
Gradio Web UI for ballot-box anomaly analysis.

Provides a web interface to upload a parties file and a ballots file, run
every anomaly check and download the resulting reports.

Usage:
    python web_ui.py

Then open http://localhost:7860 in your browser.

Features:
- Upload of the parties CSV and the ballots CSV
- Choice of the ballots file encoding (Hebrew exports default to ISO-8859-8)
- Flagged ballot boxes shown first, limited to 200 for display
- CSV, markdown and PDF downloads of the full report
"""

import dataclasses
import os
import tempfile
from pathlib import Path
from typing import Optional

import gradio as gr

from ballot_analysis import AnalysisResult, analyze_files
from ballot_io import write_report_csv
from ballot_pdf import generate_analysis_pdf
from ballot_reporting import assemble_report, generate_analysis_report, rank_suspicious, report_header, to_report_row
from ballot_types import BallotAnalysisError
from config import get_config
from logging_config import get_logger

logger = get_logger(__name__)

# Maximum number of ballot boxes to display (to avoid UI overload)
MAX_DISPLAY_RESULTS = 200

# File upload validation settings
MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB per file
ALLOWED_EXTENSIONS = {'.csv', '.txt'}

ENCODINGS = ["ISO-8859-8", "cp1255", "utf-8", "utf-8-sig"]


def upload_path(file) -> Optional[str]:
    """Path of an uploaded file (gradio passes either a path or a file wrapper)."""
    if file is None:
        return None
    return getattr(file, "name", file)


def validate_file(file_path: Optional[str]) -> tuple[bool, str]:
    """
    Validate an uploaded file for type and size constraints.

    Args:
        file_path: Path to the uploaded file

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not file_path:
        return False, "No file provided"

    if not os.path.isfile(file_path):
        return False, "File not found"

    ext = Path(file_path).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        return False, f"Invalid file type: {ext}. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"

    try:
        size = os.path.getsize(file_path)
        if size > MAX_FILE_SIZE:
            return False, f"File too large: {size // (1024*1024)}MB (max {MAX_FILE_SIZE // (1024*1024)}MB)"
        if size == 0:
            return False, "File is empty"
    except OSError as e:
        return False, f"Cannot read file: {e}"

    return True, "OK"


def format_results(result: AnalysisResult) -> tuple[dict, str]:
    """
    Format an analysis result for Gradio Dataframe display.

    The national row comes first, then ballot boxes with issues (most
    suspicious first), then the rest in input order.

    Args:
        result: AnalysisResult from run_analysis()

    Returns:
        Tuple of ({"headers", "data"} for gr.Dataframe, status message)
    """
    header = report_header(result.party_order)

    ranked = [a for a in rank_suspicious(result.analyzed) if a.has_issues]
    ranked_ids = {id(a) for a in ranked}
    ordered = ranked + [a for a in result.analyzed if id(a) not in ranked_ids]

    shown = ordered[:MAX_DISPLAY_RESULTS]
    rows = [to_report_row(result.national_analysis, result.party_order)]
    rows.extend(to_report_row(a, result.party_order) for a in shown)
    data = [[str(cell) for cell in row] for row in rows]

    status_msg = (
        f"{len(result.records):,} ballot boxes analyzed, {len(ranked):,} with issues, "
        f"{len(result.alerts):,} far from their settlement average"
    )
    if len(ordered) > MAX_DISPLAY_RESULTS:
        status_msg += f". Showing {MAX_DISPLAY_RESULTS} of {len(ordered):,}; download the CSV for all rows"
        logger.info(f"Results truncated: {len(ordered)} total, showing {MAX_DISPLAY_RESULTS}")

    return {"headers": header, "data": data}, status_msg


def run_audit(parties_file, ballots_file, encoding: str) -> tuple[dict, str, Optional[AnalysisResult]]:
    """
    Analyze the uploaded files.

    Args:
        parties_file: Uploaded parties CSV
        ballots_file: Uploaded ballots CSV
        encoding: Encoding of the ballots file

    Returns:
        Tuple of (results_dataframe, status message, AnalysisResult for downloads)
    """
    empty = {"headers": [], "data": []}
    parties_path = upload_path(parties_file)
    ballots_path = upload_path(ballots_file)

    for label, path in (("Parties file", parties_path), ("Ballots file", ballots_path)):
        is_valid, error_msg = validate_file(path)
        if not is_valid:
            logger.warning(f"{label} rejected: {error_msg}")
            return empty, f"{label}: {error_msg}", None

    config = get_config()
    if encoding:
        config = dataclasses.replace(config, ballots_encoding=encoding)

    try:
        logger.info(f"Analyzing {os.path.basename(ballots_path)} ({config.ballots_encoding})")
        result = analyze_files(parties_path, ballots_path, config)
    except BallotAnalysisError as e:
        logger.error(f"Analysis failed: {e}")
        return empty, f"Error: {e}", None

    table, status_msg = format_results(result)
    return table, status_msg, result


def export_csv(result: Optional[AnalysisResult]) -> Optional[str]:
    """
    Export the full report to a CSV file.

    Returns:
        Path to CSV file or None if no results
    """
    if result is None:
        logger.warning("No analysis available for CSV export")
        return None

    csv_path = os.path.join(tempfile.mkdtemp(prefix="ballot_audit_"), "all_ballot_places.csv")
    write_report_csv(assemble_report(result), csv_path)
    return csv_path


def export_markdown(result: Optional[AnalysisResult]) -> Optional[str]:
    """
    Export the markdown summary.

    Returns:
        Path to markdown file or None if no results
    """
    if result is None:
        logger.warning("No analysis available for markdown export")
        return None

    md_path = os.path.join(tempfile.mkdtemp(prefix="ballot_audit_"), "analysis_report.md")
    with open(md_path, "w", encoding="utf-8") as f:
        f.write(generate_analysis_report(result))
    logger.info(f"Exported markdown to: {md_path}")
    return md_path


def export_pdf(result: Optional[AnalysisResult]) -> Optional[str]:
    """
    Export the PDF summary.

    Returns:
        Path to PDF file or None if no results or generation failed
    """
    if result is None:
        logger.warning("No analysis available for PDF export")
        return None

    pdf_path = os.path.join(tempfile.mkdtemp(prefix="ballot_audit_"), "analysis_report.pdf")
    if generate_analysis_pdf(result, pdf_path):
        return pdf_path
    return None


def clear_results():
    """
    Clear all results and reset the interface.

    Returns:
        Tuple of empty values for all outputs
    """
    logger.info("Clearing results")
    return {"headers": [], "data": []}, "", None, None, None, None, None, None


with gr.Blocks(title="Ballot Box Anomaly Analysis") as demo:
    gr.Markdown("# Ballot Box Anomaly Analysis")
    gr.Markdown("""
Upload the party registry and the per-ballot-box results to flag suspicious ballot boxes.

**Instructions:**
1. Upload the parties CSV (columns `Party` and `Ballot`)
2. Upload the ballots CSV (settlement, symbol, ballot box, suffrage, total, disqualified, valid, then one column per party letter)
3. Click "Analyze" and review the flagged ballot boxes
4. Download the full report as CSV, markdown or PDF
""")

    with gr.Row():
        parties_input = gr.File(label="Parties CSV", file_types=[".csv"])
        ballots_input = gr.File(label="Ballots CSV", file_types=[".csv"])
        encoding_input = gr.Dropdown(
            choices=ENCODINGS,
            value=get_config().ballots_encoding,
            allow_custom_value=True,
            label="Ballots file encoding",
        )

    with gr.Row():
        analyze_btn = gr.Button("Analyze", variant="primary", size="lg")
        clear_btn = gr.Button("Clear", variant="secondary", size="lg")

    with gr.Row():
        status_output = gr.Textbox(label="Status", lines=2, placeholder="Analysis status will appear here...")

    with gr.Row():
        results_table = gr.Dataframe(label="Ballot boxes (national total first)", wrap=True)

    gr.Markdown("### Download Reports")

    with gr.Row():
        csv_btn = gr.Button("Full Report CSV", variant="secondary")
        md_btn = gr.Button("Markdown Summary", variant="secondary")
        pdf_btn = gr.Button("PDF Summary", variant="secondary")

    with gr.Row():
        csv_output = gr.File(label="Full Report CSV", visible=True)
        md_output = gr.File(label="Markdown Summary", visible=True)
        pdf_output = gr.File(label="PDF Summary", visible=True)

    # State to store the analysis for downloads
    analysis_state = gr.State(value=None)

    analyze_btn.click(
        fn=run_audit,
        inputs=[parties_input, ballots_input, encoding_input],
        outputs=[results_table, status_output, analysis_state]
    )

    csv_btn.click(fn=export_csv, inputs=[analysis_state], outputs=[csv_output])
    md_btn.click(fn=export_markdown, inputs=[analysis_state], outputs=[md_output])
    pdf_btn.click(fn=export_pdf, inputs=[analysis_state], outputs=[pdf_output])

    clear_btn.click(
        fn=clear_results,
        inputs=[],
        outputs=[results_table, status_output, analysis_state, csv_output, md_output, pdf_output, parties_input, ballots_input]
    )


if __name__ == "__main__":
    config = get_config()

    # Default to localhost. Set WEB_UI_HOST=0.0.0.0 to allow external access.
    server_name = config.web_ui_host
    server_port = config.web_ui_port

    if server_name == "0.0.0.0":
        logger.warning("Web UI binding to all network interfaces. This may expose the application.")
        logger.warning("Set WEB_UI_HOST=127.0.0.1 for local-only access.")

    logger.info(f"Starting web UI on http://{server_name}:{server_port}")
    demo.launch(server_name=server_name, server_port=server_port)
