"""Duplicate-project detection pipeline.

AI path (detect_duplicates):
  1. no comparable projects  -> unique by default, oracle never called
  2. exact match after strict normalization -> single 100% match, no oracle calls
  3. oracle scores every candidate (bounded thread pool, no retries)
  4. keep scores >= threshold, rank by score descending (ties keep corpus order)
  5. ask the oracle for a feature diff against the top matches

Keyword path (detect_by_keywords) is the degraded mode used when the oracle is
not wanted or not configured.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed

from llm_client import oracle_configured
from models import DetectionResult, FeatureDiff, ProjectRecord, SimilarityVerdict, SimilarProject
from similarity_oracle import score_similarity, summarize_feature_diff, truncate_excerpt
from text_utils import extract_keywords, is_exact_match, keyword_similarity, matched_keywords

SIMILARITY_THRESHOLD = int(os.getenv("SIMILARITY_THRESHOLD", "25"))
ORACLE_MAX_WORKERS = int(os.getenv("ORACLE_MAX_WORKERS", "4"))
MAX_SUMMARY_MATCHES = 5
EXACT_MATCH_REASON = "exact match"
STRATEGIES = ("ai", "keywords", "auto")

LOGGER = logging.getLogger(__name__)

ScoreFn = Callable[[str, str, str], SimilarityVerdict | None]
SummarizeFn = Callable[[str, list[str]], FeatureDiff]


class EmptySubmissionError(ValueError):
    """Submission text is blank, so there is nothing to compare."""


def detect_duplicates(
    submission_text: str,
    projects: list[ProjectRecord],
    *,
    threshold: int | None = None,
    max_workers: int | None = None,
    score_fn: ScoreFn | None = None,
    summarize_fn: SummarizeFn | None = None,
) -> DetectionResult:
    """Decide whether submission_text duplicates any project, using the oracle."""
    _require_text(submission_text)
    threshold = SIMILARITY_THRESHOLD if threshold is None else threshold
    max_workers = ORACLE_MAX_WORKERS if max_workers is None else max_workers
    score_fn = score_fn or score_similarity
    summarize_fn = summarize_fn or summarize_feature_diff

    candidates = [p for p in projects if p.has_abstract()]
    if not candidates:
        LOGGER.info("No projects with abstracts to compare; submission is unique by default")
        return _unique_by_default()

    exact = next((p for p in candidates if is_exact_match(submission_text, p.abstract or "")), None)
    if exact is not None:
        LOGGER.info("Exact match with project_id=%s; skipping oracle", exact.project_id)
        return DetectionResult(
            is_duplicate=True,
            similar_projects=[SimilarProject(exact, SimilarityVerdict(100, EXACT_MATCH_REASON))],
            analysis=f"The submission is identical to the existing project \"{exact.title}\".",
            recommendation=(
                "This abstract has already been submitted. Choose a different topic "
                "or substantially change the scope before resubmitting."
            ),
            total_checked=len(candidates),
        )

    excerpt = truncate_excerpt(submission_text)
    matches = _score_candidates(excerpt, candidates, threshold, max_workers, score_fn)
    LOGGER.info(
        "Oracle scoring: candidates=%s retained=%s threshold=%s",
        len(candidates),
        len(matches),
        threshold,
    )

    if not matches:
        return DetectionResult(
            is_duplicate=False,
            similar_projects=[],
            analysis=(
                f"No similar projects found among {len(candidates)} existing projects. "
                "The submission appears to be unique."
            ),
            total_checked=len(candidates),
        )

    blocks = [m.project.comparison_text() for m in matches[:MAX_SUMMARY_MATCHES]]
    try:
        diff = summarize_fn(excerpt, blocks)
    except Exception as exc:  # broad: summary is advisory
        LOGGER.warning("Feature-diff summary failed: %s", exc)
        diff = FeatureDiff()

    return DetectionResult(
        is_duplicate=True,
        similar_projects=matches,
        analysis=diff.summary or _match_count_analysis(len(matches), len(candidates)),
        new_features=list(diff.new_features),
        recommendation=diff.recommendation,
        total_checked=len(candidates),
    )


def detect_by_keywords(submission_text: str, projects: list[ProjectRecord]) -> DetectionResult:
    """Keyword-overlap duplicate check: one shared keyword makes a project similar."""
    _require_text(submission_text)
    candidates = [p for p in projects if p.has_abstract()]
    if not candidates:
        return _unique_by_default()

    keywords = extract_keywords(submission_text)
    ranked: list[tuple[int, int, SimilarProject]] = []
    for index, project in enumerate(candidates):
        matched = matched_keywords(keywords, project)
        if not matched:
            continue
        verdict = SimilarityVerdict(
            score=keyword_similarity(len(matched), len(keywords)),
            reason=f"Shared keywords: {', '.join(matched)}",
        )
        ranked.append((verdict.score, index, SimilarProject(project, verdict)))

    ranked.sort(key=lambda item: (-item[0], item[1]))
    matches = [match for _, _, match in ranked]
    LOGGER.info(
        "Keyword check: keywords=%s candidates=%s matched=%s",
        len(keywords),
        len(candidates),
        len(matches),
    )

    if not matches:
        return DetectionResult(
            is_duplicate=False,
            similar_projects=[],
            analysis=(
                f"No keyword overlap with {len(candidates)} existing projects. "
                "The submission appears to be unique."
            ),
            total_checked=len(candidates),
        )

    return DetectionResult(
        is_duplicate=True,
        similar_projects=matches,
        analysis=_match_count_analysis(len(matches), len(candidates)),
        recommendation="Review the matching projects and make clear what your proposal adds.",
        total_checked=len(candidates),
    )


def run_detection(
    submission_text: str,
    projects: list[ProjectRecord],
    strategy: str | None = None,
    *,
    threshold: int | None = None,
) -> DetectionResult:
    """Dispatch to the AI or keyword path.

    strategy defaults to DUPLICATE_STRATEGY ("ai"). "auto" uses the AI path
    only when an oracle credential is configured. threshold applies to the AI
    path only.
    """
    strategy = (strategy or os.getenv("DUPLICATE_STRATEGY", "ai")).strip().lower()
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown detection strategy: {strategy!r}")

    if strategy == "auto":
        strategy = "ai" if oracle_configured() else "keywords"
        LOGGER.info("Auto strategy resolved to %s", strategy)

    if strategy == "keywords":
        return detect_by_keywords(submission_text, projects)
    return detect_duplicates(submission_text, projects, threshold=threshold)


def _score_candidates(
    excerpt: str,
    candidates: list[ProjectRecord],
    threshold: int,
    max_workers: int,
    score_fn: ScoreFn,
) -> list[SimilarProject]:
    retained: list[tuple[int, int, SimilarProject]] = []
    dropped = 0

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {
            executor.submit(score_fn, excerpt, project.comparison_text(), project.title): (index, project)
            for index, project in enumerate(candidates)
        }
        for future in as_completed(futures):
            index, project = futures[future]
            try:
                verdict = future.result()
            except Exception as exc:
                LOGGER.warning("Scoring failed for project_id=%s: %s", project.project_id, exc)
                verdict = None

            if verdict is None:
                dropped += 1
                continue
            if verdict.score >= threshold:
                retained.append((verdict.score, index, SimilarProject(project, verdict)))

    if dropped:
        LOGGER.warning("No verdict for %s of %s candidates", dropped, len(candidates))

    retained.sort(key=lambda item: (-item[0], item[1]))
    return [match for _, _, match in retained]


def _require_text(submission_text: str) -> None:
    if not submission_text or not submission_text.strip():
        raise EmptySubmissionError("Submission text is empty; nothing to compare")


def _unique_by_default() -> DetectionResult:
    return DetectionResult(
        is_duplicate=False,
        similar_projects=[],
        analysis=(
            "There are no existing projects with abstracts to compare against, "
            "so the submission is unique by default."
        ),
        total_checked=0,
    )


def _match_count_analysis(match_count: int, total: int) -> str:
    noun = "project" if match_count == 1 else "projects"
    return f"Found {match_count} similar {noun} among {total} existing projects."
