import pytest

from models import ProjectRecord
from text_utils import (
    extract_keywords,
    is_exact_match,
    keyword_similarity,
    matched_keywords,
    strict_normalize,
)


@pytest.mark.parametrize("text", [
    "Face recognition based attendance system.",
    "  Mixed CASE, punctuation!!! and   spaces\n\tnewlines ",
    "Ünïcödé letters and digits 2024",
    "",
    "...,,,;;;",
])
def test_strict_normalize_is_idempotent(text: str) -> None:
    once = strict_normalize(text)
    assert strict_normalize(once) == once


def test_strict_normalize_keeps_only_lowercase_alphanumerics() -> None:
    assert strict_normalize("Smart Attendance v2.0 — IoT!") == "smartattendancev20iot"


def test_is_exact_match_ignores_case_spacing_and_punctuation() -> None:
    assert is_exact_match(
        "Face recognition based attendance system.",
        "face-recognition  BASED attendance system",
    ) is True


def test_is_exact_match_false_for_different_text() -> None:
    assert is_exact_match("Blockchain voting system", "Face recognition attendance system") is False


def test_is_exact_match_false_when_both_normalize_to_empty() -> None:
    """Punctuation-only texts must not count as identical submissions."""
    assert is_exact_match("!!!", "...") is False


def test_extract_keywords_drops_short_tokens_and_stop_words() -> None:
    keywords = extract_keywords(
        "This is a Proposed New Student Attendance project using Face Recognition"
    )
    assert set(keywords) == {"student", "attendance", "face", "recognition"}


def test_extract_keywords_splits_on_punctuation_and_deduplicates() -> None:
    keywords = extract_keywords("Drone delivery; drone routing!\nDelivery: optimisation?")
    assert keywords == ["drone", "delivery", "routing", "optimisation"]


def test_extract_keywords_with_custom_stop_words() -> None:
    assert extract_keywords("library management portal", frozenset({"portal"})) == [
        "library",
        "management",
    ]


def test_matched_keywords_searches_title_abstract_and_description() -> None:
    project = ProjectRecord(
        project_id="1",
        title="Smart Attendance",
        abstract="Uses cameras in classrooms.",
        description="Built with face detection models.",
    )
    assert matched_keywords(["attendance", "face", "blockchain", "classroom"], project) == [
        "attendance",
        "face",
        "classroom",
    ]


def test_matched_keywords_handles_missing_abstract() -> None:
    project = ProjectRecord(project_id="2", title="Voting Portal", abstract=None)
    assert matched_keywords(["voting"], project) == ["voting"]


@pytest.mark.parametrize("matched,total,expected", [
    (1, 3, 33),
    (2, 3, 66),
    (4, 4, 100),
    (0, 5, 0),
    (0, 0, 0),
])
def test_keyword_similarity_rounds_down(matched: int, total: int, expected: int) -> None:
    assert keyword_similarity(matched, total) == expected
