"""Tests for the CLI entrypoint (main.py)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

import main
from models import ProjectRecord

CORPUS = [ProjectRecord(project_id="1", title="Smart Attendance", abstract="Face recognition based attendance system.")]


def test_check_inline_text_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    with patch("main.load_projects", return_value=CORPUS), patch("main.load_dotenv"):
        exit_code = main.main(["check", "--text", "Face recognition based attendance system"])

    assert exit_code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["isDuplicate"] is True
    assert body["similarProjects"][0]["similarity"] == 100


def test_check_reads_plain_text_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "abstract.txt"
    path.write_text("Blockchain voting for student elections", encoding="utf-8")

    with patch("main.load_projects", return_value=CORPUS), patch("main.load_dotenv"):
        exit_code = main.main(["check", str(path), "--strategy", "keywords"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)["isDuplicate"] is False


def test_check_passes_threshold_to_pipeline() -> None:
    with patch("main.load_projects", return_value=CORPUS), \
         patch("main.load_dotenv"), \
         patch("detector.detect_duplicates") as mock_detect:
        mock_detect.return_value.to_dict.return_value = {}
        main.main(["check", "--text", "anything", "--strategy", "ai", "--threshold", "40"])

    assert mock_detect.call_args.kwargs == {"threshold": 40}


def test_check_auto_strategy_without_credential_uses_keywords() -> None:
    with patch("main.load_projects", return_value=CORPUS), \
         patch("main.load_dotenv"), \
         patch.dict("os.environ", {}, clear=True), \
         patch("detector.detect_duplicates") as mock_ai, \
         patch("detector.detect_by_keywords") as mock_keywords:
        mock_keywords.return_value.to_dict.return_value = {}
        main.main(["check", "--text", "anything", "--strategy", "auto"])

    mock_keywords.assert_called_once()
    mock_ai.assert_not_called()


def test_check_unreadable_document_exits_with_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"garbage")

    with patch("main.load_projects", return_value=CORPUS), patch("main.load_dotenv"):
        assert main.main(["check", str(path)]) == 2


def test_check_blank_text_exits_with_error() -> None:
    with patch("main.load_projects", return_value=CORPUS), patch("main.load_dotenv"):
        assert main.main(["check", "--text", "   "]) == 2


def test_serve_runs_server() -> None:
    with patch("main.load_dotenv"), patch("server.run_server") as mock_run:
        assert main.main(["serve", "--port", "8080"]) == 0

    mock_run.assert_called_once_with(host="0.0.0.0", port=8080, debug=False)
