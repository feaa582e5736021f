from __future__ import annotations

import csv
from datetime import date
from pathlib import Path

import pytest

import project_store
from project_store import CSV_COLUMNS, comparison_candidates, load_projects


def _write_corpus(path: Path, rows: list[dict[str, str]]) -> None:
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for row in rows:
            writer.writerow({column: row.get(column, "") for column in CSV_COLUMNS})


@pytest.fixture
def corpus_path(tmp_path: Path) -> Path:
    path = tmp_path / "projects.csv"
    _write_corpus(path, [
        {
            "project_id": "101",
            "title": " Smart Attendance ",
            "abstract": "Face recognition based attendance system.",
            "batch": "2023-2027",
            "created_by": "Dr. Rao",
            "team_members": "REG001, REG002,",
            "date_completed": "2025-04-30T10:15:00Z",
        },
        {"project_id": "102", "title": "Voting Portal", "abstract": "   ", "date_completed": "not a date"},
        {"project_id": "", "title": "Orphan row"},
    ])
    return path


def test_load_projects_parses_rows(corpus_path: Path) -> None:
    projects = load_projects(str(corpus_path))

    assert [p.project_id for p in projects] == ["101", "102"]
    first = projects[0]
    assert first.title == "Smart Attendance"
    assert first.batch == "2023-2027"
    assert first.created_by == "Dr. Rao"
    assert first.member_list() == ["REG001", "REG002"]
    assert first.date_completed == date(2025, 4, 30)


def test_blank_abstract_and_bad_date_become_none(corpus_path: Path) -> None:
    second = load_projects(str(corpus_path))[1]
    assert second.abstract is None
    assert second.date_completed is None
    assert second.has_abstract() is False


def test_comparison_candidates_keeps_only_usable_abstracts(corpus_path: Path) -> None:
    candidates = comparison_candidates(load_projects(str(corpus_path)))
    assert [p.project_id for p in candidates] == ["101"]


def test_missing_corpus_is_empty(tmp_path: Path) -> None:
    assert load_projects(str(tmp_path / "absent.csv")) == []


def test_default_path_comes_from_module_setting(corpus_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(project_store, "PROJECTS_CSV_PATH", str(corpus_path))
    assert len(load_projects()) == 2


def test_load_projects_does_not_modify_file(corpus_path: Path) -> None:
    before = corpus_path.read_bytes()
    load_projects(str(corpus_path))
    assert corpus_path.read_bytes() == before


def test_load_projects_reads_csv_with_byte_order_mark(tmp_path: Path) -> None:
    path = tmp_path / "export.csv"
    with path.open("w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.DictWriter(fh, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        writer.writerow({column: "" for column in CSV_COLUMNS} | {
            "project_id": "201",
            "title": "Smart Attendance",
            "abstract": "Face recognition based attendance system.",
        })

    projects = load_projects(str(path))

    assert [p.project_id for p in projects] == ["201"]
    assert projects[0].title == "Smart Attendance"
