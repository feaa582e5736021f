"""HTTP API for duplicate-project checks and student design guidance."""

from __future__ import annotations

import base64
import binascii
import logging
import os

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from detector import STRATEGIES, EmptySubmissionError, detect_by_keywords, run_detection
from guidance import chat, generate_dfd_guidance
from llm_client import active_provider, oracle_configured
from project_store import comparison_candidates, load_projects
from text_extractor import EXTRACTORS, ExtractionError, document_kind, extract_text

LOGGER = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)


class SubmissionError(ValueError):
    """The request did not carry a usable document or text."""


@app.errorhandler(SubmissionError)
@app.errorhandler(EmptySubmissionError)
def handle_bad_submission(exc: ValueError):
    return jsonify({"error": str(exc)}), 400


@app.errorhandler(ExtractionError)
def handle_extraction_error(exc: ExtractionError):
    LOGGER.warning("Document extraction failed: %s", exc)
    return jsonify({"error": str(exc)}), 400


@app.errorhandler(Exception)
def handle_unexpected(exc: Exception):
    if isinstance(exc, HTTPException):
        return jsonify({"error": exc.description}), exc.code
    LOGGER.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"error": "Internal server error"}), 500


def _text_from_upload() -> str:
    """Extract text from the multipart "file" field."""
    upload = request.files["file"]
    if not upload.filename:
        raise SubmissionError("No file uploaded")

    kind = document_kind(upload.filename)
    if kind not in EXTRACTORS:
        raise SubmissionError(f"Unsupported file type: {upload.filename}. Upload a PDF or DOCX file")

    LOGGER.info("Processing uploaded file %s", upload.filename)
    text = extract_text(upload.stream, kind)
    if not text.strip():
        raise SubmissionError("Could not extract text from file")
    return text


def _text_from_json(data: dict) -> str:
    raw = data.get("abstract") or data.get("text")
    if not isinstance(raw, str) or not raw.strip():
        raise SubmissionError("Abstract text is required")

    if not data.get("isBase64"):
        return raw

    try:
        decoded = base64.b64decode(raw.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise SubmissionError("Abstract is not valid base64-encoded UTF-8 text") from exc
    if not decoded.strip():
        raise SubmissionError("Decoded abstract text is empty")
    return decoded


def _submission_text() -> tuple[str, dict]:
    """Return (submission text, JSON options) from either request shape."""
    if "file" in request.files:
        return _text_from_upload(), dict(request.form)

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise SubmissionError("Upload a file or send a JSON body with an abstract")
    return _text_from_json(data), data


@app.route("/api/projects/check-duplicate", methods=["POST"])
def check_duplicate():
    """
    Check an uploaded PDF/DOCX or a JSON abstract against stored projects.
    JSON body: { abstract | text, isBase64?, strategy? }
    """
    text, options = _submission_text()
    strategy = options.get("strategy") or None
    if strategy is not None and str(strategy).strip().lower() not in STRATEGIES:
        raise SubmissionError(f"Unknown strategy: {strategy}. Use one of: {', '.join(STRATEGIES)}")

    result = run_detection(text, load_projects(), strategy=strategy)

    LOGGER.info(
        "Duplicate check: is_duplicate=%s matches=%s checked=%s",
        result.is_duplicate,
        len(result.similar_projects),
        result.total_checked,
    )
    return jsonify(result.to_dict())


@app.route("/api/projects/check-duplicate/keywords", methods=["POST"])
def check_duplicate_keywords():
    """Keyword-overlap check; never calls the oracle."""
    text, _ = _submission_text()
    result = detect_by_keywords(text, load_projects())
    return jsonify(result.to_dict())


@app.route("/api/projects", methods=["GET"])
def list_projects():
    projects = load_projects()
    return jsonify({
        "count": len(projects),
        "projects": [p.to_dict() for p in projects],
    })


@app.route("/api/ai/dfd-guidance", methods=["POST"])
def dfd_guidance():
    """DFD guidance for an uploaded abstract document."""
    if "file" not in request.files:
        raise SubmissionError("No file uploaded")
    text = _text_from_upload()

    guidance = generate_dfd_guidance(text)
    if guidance is None:
        return jsonify({"error": "Failed to generate DFD guidance"}), 502
    return jsonify({"guidance": guidance})


@app.route("/api/ai/chat", methods=["POST"])
def ai_chat():
    data = request.get_json(silent=True) or {}
    message = data.get("message") if isinstance(data, dict) else None
    if not isinstance(message, str) or not message.strip():
        raise SubmissionError("Message is required")

    reply = chat(message)
    if reply is None:
        return jsonify({"error": "Failed to get response from AI"}), 502
    return jsonify({"response": reply})


@app.route("/api/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({
        "status": "ok",
        "oracleProvider": active_provider(),
        "oracleConfigured": oracle_configured(),
        "projectsWithAbstracts": len(comparison_candidates(load_projects())),
    })


def run_server(host: str = "0.0.0.0", port: int | None = None, debug: bool = False) -> None:
    port = port or int(os.getenv("PORT", "5171"))
    LOGGER.info("Starting duplicate-check API on %s:%s", host, port)
    app.run(host=host, port=port, debug=debug)
