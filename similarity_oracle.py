"""Similarity and feature-diff prompts against the oracle, plus reply parsing.

Both public calls never raise: a transport failure, a missing credential or an
unparsable reply is logged and turned into "no verdict" (None) or an empty
FeatureDiff, so one bad candidate never fails a whole detection request.
"""

from __future__ import annotations

import json
import logging
from json import JSONDecodeError
from typing import Any

from llm_client import chat_completion
from models import FeatureDiff, SimilarityVerdict

MAX_EXCERPT_CHARS = 3000

LOGGER = logging.getLogger(__name__)

SIMILARITY_SYSTEM_PROMPT = """You compare student project abstracts for a university project review board.
Judge how much the NEW submission overlaps with the EXISTING project in problem, approach and features.
Respond ONLY with valid JSON, no markdown, following this schema:
{"similarity": <int 0-100>, "reason": "<one sentence>"}"""

FEATURE_DIFF_SYSTEM_PROMPT = """You advise students whose project idea resembles earlier projects.
Compare the NEW submission with the EXISTING projects listed.
Respond ONLY with valid JSON, no markdown, following this schema:
{
  "newFeatures": ["<feature present in the submission but absent from the existing projects>"],
  "summary": "<2-3 sentences on how the submission relates to the existing projects>",
  "recommendation": "<1-2 sentences on how to make the submission distinct>"
}"""


def truncate_excerpt(text: str, limit: int = MAX_EXCERPT_CHARS) -> str:
    """Cap submission text to bound request size."""
    text = text.strip()
    return text if len(text) <= limit else text[:limit]


def extract_first_json_object(content: str) -> dict[str, Any] | None:
    """Return the first decodable JSON object in content, or None.

    Handles replies wrapped in prose or ``` fences.
    """
    try:
        parsed = json.loads(content)
    except JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    decoder = json.JSONDecoder()
    for index, char in enumerate(content):
        if char != "{":
            continue
        try:
            candidate, _ = decoder.raw_decode(content[index:])
        except JSONDecodeError:
            continue
        if isinstance(candidate, dict):
            return candidate
    return None


def parse_similarity_verdict(content: str) -> SimilarityVerdict | None:
    """Parse {"similarity": int, "reason": str}; None if the shape is wrong."""
    parsed = extract_first_json_object(content)
    if parsed is None or "similarity" not in parsed:
        return None

    raw_score = parsed["similarity"]
    if isinstance(raw_score, bool):
        return None
    try:
        score = int(round(float(raw_score)))
    except (TypeError, ValueError, OverflowError):
        return None

    reason = parsed.get("reason")
    return SimilarityVerdict(
        score=max(0, min(100, score)),
        reason=reason.strip() if isinstance(reason, str) else "",
    )


def parse_feature_diff(content: str) -> FeatureDiff:
    """Parse the feature-diff reply; missing or mistyped keys become empty."""
    parsed = extract_first_json_object(content)
    if parsed is None:
        return FeatureDiff()

    raw_features = parsed.get("newFeatures")
    features = (
        [f.strip() for f in raw_features if isinstance(f, str) and f.strip()]
        if isinstance(raw_features, list)
        else []
    )
    summary = parsed.get("summary")
    recommendation = parsed.get("recommendation")
    return FeatureDiff(
        new_features=features,
        summary=summary.strip() if isinstance(summary, str) else "",
        recommendation=recommendation.strip() if isinstance(recommendation, str) else "",
    )


def score_similarity(
    submission_excerpt: str,
    candidate_text: str,
    candidate_title: str,
) -> SimilarityVerdict | None:
    """Ask the oracle how similar the submission is to one existing project."""
    user_prompt = (
        f"NEW submission:\n{truncate_excerpt(submission_excerpt)}\n\n"
        f"EXISTING project \"{candidate_title}\":\n{candidate_text}\n"
    )
    try:
        content = chat_completion(SIMILARITY_SYSTEM_PROMPT, user_prompt, max_tokens=200)
    except Exception as exc:  # broad: any oracle failure means "no verdict"
        LOGGER.warning("Similarity oracle failed for project=%r: %s", candidate_title, exc)
        return None

    verdict = parse_similarity_verdict(content)
    if verdict is None:
        LOGGER.warning(
            "Discarding unparsable similarity reply for project=%r: %.200s",
            candidate_title,
            content,
        )
        return None

    LOGGER.info("Similarity for project=%r: %s", candidate_title, verdict.score)
    return verdict


def summarize_feature_diff(submission_excerpt: str, match_blocks: list[str]) -> FeatureDiff:
    """Ask the oracle what the submission adds over its closest matches."""
    existing = "\n\n".join(match_blocks)
    user_prompt = (
        f"NEW submission:\n{truncate_excerpt(submission_excerpt)}\n\n"
        f"EXISTING projects:\n{existing}\n"
    )
    try:
        content = chat_completion(FEATURE_DIFF_SYSTEM_PROMPT, user_prompt, max_tokens=700)
    except Exception as exc:  # broad: summary is advisory
        LOGGER.warning("Feature-diff oracle failed: %s", exc)
        return FeatureDiff()

    diff = parse_feature_diff(content)
    if not (diff.new_features or diff.summary or diff.recommendation):
        LOGGER.warning("Feature-diff reply had no usable fields: %.200s", content)
    return diff
