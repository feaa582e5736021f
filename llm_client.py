"""Chat-completion transport for the similarity oracle.

Supports three providers, picked with ORACLE_PROVIDER:

  groq       (default) OpenAI-compatible HTTP endpoint, called with requests
  openai     OpenAI SDK
  anthropic  Anthropic SDK (see anthropic_client.py)

Every call carries an explicit timeout and is attempted exactly once; callers
decide how to degrade when it fails.
"""

from __future__ import annotations

import logging
import os

import requests
from openai import OpenAI

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
ORACLE_TEMPERATURE = float(os.getenv("ORACLE_TEMPERATURE", "0.3"))
REQUEST_TIMEOUT_SECONDS = float(os.getenv("ORACLE_TIMEOUT_SECONDS", "30"))
DEFAULT_PROVIDER = "groq"

_API_KEY_ENV: dict[str, str] = {
    "groq": "GROQ_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

LOGGER = logging.getLogger(__name__)


class OracleUnavailableError(RuntimeError):
    """The oracle cannot be called at all (unknown provider or missing credential)."""


def active_provider() -> str:
    return os.getenv("ORACLE_PROVIDER", DEFAULT_PROVIDER).strip().lower()


def oracle_configured(provider: str | None = None) -> bool:
    """Return True if the credential for provider (default: active) is set."""
    env_name = _API_KEY_ENV.get(provider or active_provider())
    return bool(env_name and os.getenv(env_name))


def chat_completion(
    system_prompt: str,
    user_prompt: str,
    *,
    max_tokens: int = 512,
    provider: str | None = None,
    timeout: float | None = None,
) -> str:
    """Send one system+user exchange to the oracle and return the reply text.

    Raises:
        OracleUnavailableError: unknown provider or missing API key.
        requests.HTTPError: Groq answered with a non-success status.
        RuntimeError: the reply was empty or had an unexpected shape.
    """
    provider = provider or active_provider()
    env_name = _API_KEY_ENV.get(provider)
    if env_name is None:
        raise OracleUnavailableError(f"Unknown oracle provider: {provider!r}")

    api_key = os.getenv(env_name)
    if not api_key:
        raise OracleUnavailableError(f"{env_name} environment variable is required")

    timeout = REQUEST_TIMEOUT_SECONDS if timeout is None else timeout
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]

    LOGGER.debug("Oracle call provider=%s max_tokens=%s timeout=%s", provider, max_tokens, timeout)
    if provider == "groq":
        return _call_groq(api_key, messages, max_tokens=max_tokens, timeout=timeout)
    if provider == "openai":
        return _call_openai(api_key, messages, max_tokens=max_tokens, timeout=timeout)

    from anthropic_client import claude_chat  # noqa: PLC0415

    return claude_chat(messages, max_tokens=max_tokens, timeout=timeout, temperature=ORACLE_TEMPERATURE)


def _call_groq(
    api_key: str,
    messages: list[dict[str, str]],
    *,
    max_tokens: int,
    timeout: float,
) -> str:
    payload = {
        "model": GROQ_MODEL,
        "temperature": ORACLE_TEMPERATURE,
        "max_tokens": max_tokens,
        "messages": messages,
    }
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    response = requests.post(GROQ_API_URL, headers=headers, json=payload, timeout=timeout)
    response.raise_for_status()
    body = response.json()

    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise RuntimeError(f"Unexpected Groq response shape: {body}") from exc
    if not content:
        raise RuntimeError("Groq returned an empty response")
    return content


def _call_openai(
    api_key: str,
    messages: list[dict[str, str]],
    *,
    max_tokens: int,
    timeout: float,
) -> str:
    client = OpenAI(api_key=api_key, timeout=timeout)
    response = client.chat.completions.create(
        model=OPENAI_MODEL,
        temperature=ORACLE_TEMPERATURE,
        max_completion_tokens=max_tokens,
        messages=messages,
    )

    content = response.choices[0].message.content
    if not content:
        raise RuntimeError("OpenAI returned an empty response")
    return content
