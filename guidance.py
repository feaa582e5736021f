"""Design guidance and free-form chat for students, served by the same oracle."""

from __future__ import annotations

import logging
from typing import Any

from llm_client import chat_completion
from similarity_oracle import extract_first_json_object, truncate_excerpt

LOGGER = logging.getLogger(__name__)

DFD_SYSTEM_PROMPT = """You are a software design expert.
Analyze the project abstract you are given and return data flow diagram (DFD) guidance.
Respond ONLY with valid JSON, no markdown, following this schema:
{
  "dfd_level": "<0, 1 or 2, with a one-line justification>",
  "external_entities": ["<entity>"],
  "processes": ["<process>"],
  "data_stores": ["<store>"],
  "data_flows": ["<source> -> <target>: <data>"]
}"""

CHAT_SYSTEM_PROMPT = (
    "You are a helpful mentor for university students working on software projects. "
    "Answer concisely and practically."
)

DFD_KEYS = ("dfd_level", "external_entities", "processes", "data_stores", "data_flows")


def generate_dfd_guidance(abstract_text: str) -> dict[str, Any] | None:
    """Return DFD guidance for an abstract, or None if the oracle failed.

    Replies that are not JSON come back as {"raw": <text>} so nothing the
    model said is lost.
    """
    try:
        content = chat_completion(
            DFD_SYSTEM_PROMPT,
            f"Abstract:\n{truncate_excerpt(abstract_text)}",
            max_tokens=1200,
        )
    except Exception as exc:  # broad: caller reports a generic failure
        LOGGER.warning("DFD guidance request failed: %s", exc)
        return None

    parsed = extract_first_json_object(content)
    if parsed is None:
        LOGGER.info("DFD guidance reply was not JSON; returning raw text")
        return {"raw": content.strip()}

    return {key: parsed.get(key, "" if key == "dfd_level" else []) for key in DFD_KEYS}


def chat(message: str) -> str | None:
    """Single-turn chat reply, or None if the oracle failed."""
    try:
        reply = chat_completion(CHAT_SYSTEM_PROMPT, message, max_tokens=800)
    except Exception as exc:  # broad: caller reports a generic failure
        LOGGER.warning("Chat request failed: %s", exc)
        return None
    return reply.strip() or None
