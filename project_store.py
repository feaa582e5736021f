"""Read-only project corpus loaded from a CSV export of the projects table."""

from __future__ import annotations

import csv
import logging
import os
from datetime import date, datetime
from pathlib import Path

from models import ProjectRecord

PROJECTS_CSV_PATH = os.getenv("PROJECTS_CSV_PATH", "projects.csv")

LOGGER = logging.getLogger(__name__)

CSV_COLUMNS = [
    "project_id",
    "title",
    "abstract",
    "description",
    "batch",
    "created_by",
    "team_members",     # comma-separated register numbers or names
    "date_completed",   # ISO date or datetime; empty while ongoing
]


def load_projects(csv_path: str | None = None) -> list[ProjectRecord]:
    """Return every project row in the CSV as a ProjectRecord snapshot."""
    path = Path(csv_path or PROJECTS_CSV_PATH)
    if not path.exists():
        LOGGER.warning("Project corpus %s not found; treating it as empty", path)
        return []

    projects: list[ProjectRecord] = []
    skipped = 0
    with path.open(newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        for row in reader:
            project_id = _as_text(row.get("project_id"))
            if not project_id:
                skipped += 1
                continue
            projects.append(
                ProjectRecord(
                    project_id=project_id,
                    title=_as_text(row.get("title")),
                    abstract=_as_text(row.get("abstract")) or None,
                    description=_as_text(row.get("description")),
                    batch=_as_text(row.get("batch")),
                    created_by=_as_text(row.get("created_by")),
                    team_members=_as_text(row.get("team_members")),
                    date_completed=_parse_date(row.get("date_completed")),
                )
            )

    LOGGER.info("Loaded %s projects from %s (skipped=%s)", len(projects), path, skipped)
    return projects


def comparison_candidates(projects: list[ProjectRecord]) -> list[ProjectRecord]:
    """Projects with a usable abstract."""
    return [p for p in projects if p.has_abstract()]


def _parse_date(raw: str | None) -> date | None:
    value = _as_text(raw)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        LOGGER.debug("Ignoring malformed date_completed=%r", value)
        return None


def _as_text(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""
