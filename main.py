"""CLI entrypoint: check a document for duplicate projects, or serve the HTTP API."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from detector import STRATEGIES, EmptySubmissionError, run_detection
from project_store import load_projects
from text_extractor import EXTRACTORS, ExtractionError, document_kind, extract_text


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Student project duplicate checker")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check one abstract against the project corpus")
    source = check.add_mutually_exclusive_group(required=True)
    source.add_argument("path", nargs="?", help="PDF, DOCX or plain-text file with the abstract")
    source.add_argument("--text", help="Abstract text given inline")
    check.add_argument("--projects", default=None, help="Project corpus CSV (default: PROJECTS_CSV_PATH)")
    check.add_argument(
        "--strategy",
        choices=STRATEGIES,
        default=os.getenv("DUPLICATE_STRATEGY", "ai"),
        help="'ai' (default, or DUPLICATE_STRATEGY): oracle scoring. 'keywords': keyword overlap only. "
        "'auto': oracle when a credential is configured, keywords otherwise.",
    )
    check.add_argument("--threshold", type=int, default=None, help="Minimum similarity to report (AI path)")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT or 5171)")
    serve.add_argument("--debug", action="store_true")

    return parser.parse_args(argv)


def read_submission(path: str) -> str:
    """Extract the submission text from a document or plain-text file."""
    file_path = Path(path)
    kind = document_kind(file_path.name)
    if kind in EXTRACTORS:
        return extract_text(file_path, kind)
    if kind in ("txt", "md", ""):
        return file_path.read_text(encoding="utf-8")
    raise ExtractionError(f"Unsupported document type: {file_path.name}")


def run_check(args: argparse.Namespace) -> int:
    """Run one duplicate check and print the JSON result."""
    try:
        text = args.text if args.text is not None else read_submission(args.path)
    except (ExtractionError, OSError) as exc:
        logging.error("Cannot read submission: %s", exc)
        return 2

    projects = load_projects(args.projects)
    try:
        result = run_detection(text, projects, args.strategy, threshold=args.threshold)
    except EmptySubmissionError as exc:
        logging.error("%s", exc)
        return 2

    print(json.dumps(result.to_dict(), indent=2))
    logging.info(
        "Check complete. is_duplicate=%s matches=%s checked=%s",
        result.is_duplicate,
        len(result.similar_projects),
        result.total_checked,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute the requested command."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args(argv)

    if args.command == "serve":
        from server import run_server  # noqa: PLC0415

        run_server(host=args.host, port=args.port, debug=args.debug)
        return 0

    return run_check(args)


if __name__ == "__main__":
    sys.exit(main())
