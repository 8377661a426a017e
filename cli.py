#!/usr/bin/env python3
"""
Command-line interface for ballot-box anomaly analysis.

This module provides the `ballot-audit` entry point with comprehensive help
text and argument validation.

Usage:
    python cli.py --help
    python cli.py analyze parties.csv expb.csv [options]
    python cli.py config
    python cli.py --version
"""

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import Optional

from ballot_types import BallotAnalysisError
from config import get_config
from logging_config import setup_logging, get_logger
from version import __version__

logger = get_logger(__name__)

# Name of the per-ballot-box report inside REPORT_DIR
DEFAULT_REPORT_NAME = "all_ballot_places.csv"


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ballot-audit",
        description="""
Ballot-box anomaly analysis - flag suspicious ballot boxes in published tallies.

Every ballot box is checked for internal arithmetic consistency, for votes
apparently switched between a fringe and a major party, and for its distance
from the average of its own settlement.

Examples:
  %(prog)s analyze parties.csv expb.csv                      # Write analysis/all_ballot_places.csv
  %(prog)s analyze parties.csv expb.csv --markdown r.md --pdf r.pdf
  %(prog)s analyze parties.csv https://example.org/expb.csv  # Fetch the ballots file
  %(prog)s config                                            # Show effective configuration
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a ballots file",
        description="Run every anomaly check and write the per-ballot-box report."
    )
    analyze_parser.add_argument(
        "parties",
        help="Parties CSV (columns Party and Ballot), path or URL"
    )
    analyze_parser.add_argument(
        "ballots",
        help="Ballots CSV (7 fixed columns then one column per party letter), path or URL"
    )
    analyze_parser.add_argument(
        "--output", "-o",
        default=None,
        help=f"Output CSV report (default: REPORT_DIR/{DEFAULT_REPORT_NAME})"
    )
    analyze_parser.add_argument(
        "--encoding", "-e",
        default=None,
        help="Encoding of the ballots file (default: BALLOTS_ENCODING or ISO-8859-8)"
    )
    analyze_parser.add_argument(
        "--markdown", "-m",
        default=None,
        help="Also write a markdown summary to this path"
    )
    analyze_parser.add_argument(
        "--pdf", "-p",
        default=None,
        help="Also write a PDF summary to this path"
    )
    analyze_parser.add_argument(
        "--log-file",
        default=None,
        help="Also write the log to this file"
    )
    analyze_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    # Config command
    subparsers.add_parser(
        "config",
        help="Show configuration",
        description="Print the effective configuration (environment variables applied) as JSON."
    )

    return parser


def run_analyze(args: argparse.Namespace) -> int:
    """Run the analyze command. Returns the process exit status."""
    # Imported here so `--help` and `config` stay fast
    from ballot_analysis import analyze_files
    from ballot_io import write_report_csv
    from ballot_reporting import assemble_report, generate_analysis_report

    config = get_config()
    if args.encoding:
        config = dataclasses.replace(config, ballots_encoding=args.encoding)

    setup_logging(level="DEBUG" if args.verbose else config.log_level, log_file=args.log_file)

    issues = config.validate()
    if issues:
        for issue in issues:
            print(f"Configuration error: {issue}", file=sys.stderr)
        return 2

    try:
        result = analyze_files(args.parties, args.ballots, config)
        output = Path(args.output) if args.output else Path(config.report_dir) / DEFAULT_REPORT_NAME
        write_report_csv(assemble_report(result), output)

        if args.markdown:
            markdown_path = Path(args.markdown)
            markdown_path.parent.mkdir(parents=True, exist_ok=True)
            markdown_path.write_text(generate_analysis_report(result), encoding="utf-8")
            logger.info(f"Saved markdown summary to {markdown_path}")
    except (BallotAnalysisError, OSError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.pdf:
        from ballot_pdf import generate_analysis_pdf
        if not generate_analysis_pdf(result, args.pdf):
            print(f"Error: could not write PDF report {args.pdf}", file=sys.stderr)
            return 1

    print(f"✓ Analyzed {len(result.records):,} ballot boxes, {len(result.flagged):,} with issues")
    print(f"  Report: {output}")
    return 0


def run_config() -> int:
    """Print the effective configuration and any validation problems."""
    config = get_config()
    print(json.dumps(config.to_dict(), indent=2))
    issues = config.validate()
    for issue in issues:
        print(f"Configuration error: {issue}", file=sys.stderr)
    return 2 if issues else 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "analyze":
        return run_analyze(args)
    elif args.command == "config":
        return run_config()
    return 1


if __name__ == "__main__":
    sys.exit(main())
