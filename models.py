"""Shared typed models for duplicate-project detection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(frozen=True, slots=True)
class ProjectRecord:
    """Stored project as read from the corpus. Never mutated by detection."""

    project_id: str
    title: str
    abstract: str | None
    description: str = ""
    batch: str = ""
    created_by: str = ""
    team_members: str = ""
    date_completed: date | None = None

    def has_abstract(self) -> bool:
        return bool(self.abstract and self.abstract.strip())

    def member_list(self) -> list[str]:
        return [m.strip() for m in self.team_members.split(",") if m.strip()]

    def comparison_text(self) -> str:
        """Title + abstract block sent to the oracle."""
        return f"Title: {self.title}\nAbstract: {self.abstract or ''}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.project_id,
            "title": self.title,
            "abstract": self.abstract or "",
            "description": self.description,
            "batch": self.batch,
            "createdBy": self.created_by,
            "teamMembers": self.member_list(),
            "dateCompleted": self.date_completed.isoformat() if self.date_completed else None,
        }


@dataclass(frozen=True, slots=True)
class SimilarityVerdict:
    """One candidate's outcome: score in [0, 100] plus a short rationale."""

    score: int
    reason: str


@dataclass(frozen=True, slots=True)
class SimilarProject:
    project: ProjectRecord
    verdict: SimilarityVerdict

    def to_dict(self) -> dict[str, Any]:
        completed = self.project.date_completed
        return {
            "name": self.project.title,
            "batch": self.project.batch,
            "group": self.project.team_members,
            "createdBy": self.project.created_by,
            "similarity": self.verdict.score,
            "reason": self.verdict.reason,
            "dateCompleted": completed.isoformat() if completed else None,
        }


@dataclass(frozen=True, slots=True)
class FeatureDiff:
    """What the submission adds over its closest matches."""

    new_features: list[str] = field(default_factory=list)
    summary: str = ""
    recommendation: str = ""


@dataclass(frozen=True, slots=True)
class DetectionResult:
    is_duplicate: bool
    similar_projects: list[SimilarProject]
    analysis: str
    new_features: list[str] = field(default_factory=list)
    recommendation: str = ""
    total_checked: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "isDuplicate": self.is_duplicate,
            "similarProjects": [match.to_dict() for match in self.similar_projects],
            "newFeatures": list(self.new_features),
            "recommendation": self.recommendation,
            "analysis": self.analysis,
            "totalChecked": self.total_checked,
        }
