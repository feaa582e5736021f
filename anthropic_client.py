"""Anthropic provider for the similarity oracle and guidance prompts."""

from __future__ import annotations

import logging
import os
from typing import Any

import anthropic

DEFAULT_CLAUDE_MODEL = "claude-haiku-4-5"

LOGGER = logging.getLogger(__name__)


def _split_system(messages: list[dict[str, str]]) -> tuple[str | None, list[dict[str, Any]]]:
    """Anthropic takes the system prompt as a separate parameter, not a message."""
    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    turns = [{"role": m["role"], "content": m["content"]} for m in messages if m["role"] != "system"]
    return ("\n\n".join(system_parts) or None), turns


def claude_chat(
    messages: list[dict[str, str]],
    max_tokens: int = 512,
    timeout: float = 60.0,
    temperature: float | None = None,
) -> str:
    """Send an OpenAI-style message list to Claude and return the reply text.

    Raises RuntimeError when ANTHROPIC_API_KEY is unset or the reply has no text.
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError("ANTHROPIC_API_KEY environment variable is required")

    model = os.getenv("CLAUDE_MODEL", DEFAULT_CLAUDE_MODEL)
    system, turns = _split_system(messages)

    request: dict[str, Any] = {"model": model, "max_tokens": max_tokens, "messages": turns}
    if system:
        request["system"] = system
    if temperature is not None:
        request["temperature"] = temperature

    LOGGER.debug("Claude request model=%s turns=%s timeout=%s", model, len(turns), timeout)
    client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
    response = client.messages.create(**request)

    text = "".join(getattr(block, "text", "") for block in response.content)
    if not text:
        raise RuntimeError("Claude returned an empty response")
    return text
