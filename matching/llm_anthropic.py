import logging

import requests

from config import SETTINGS

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


class CompletionError(RuntimeError):
    """The provider call could not produce a completion."""


class NonTextResponse(CompletionError):
    """The provider answered, but the first content part is not text."""


def complete(prompt: str, max_tokens: int = 1024) -> str:
    """Send one user-role prompt to the Anthropic Messages API and return the text part.

    No retries: transport errors and non-2xx responses propagate to the caller.
    """
    if not SETTINGS.anthropic_api_key:
        raise CompletionError("ANTHROPIC_API_KEY missing")

    headers = {
        "x-api-key": SETTINGS.anthropic_api_key,
        "anthropic-version": ANTHROPIC_VERSION,
        "content-type": "application/json",
    }
    payload = {
        "model": SETTINGS.anthropic_model,
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }

    logger.debug("Calling %s (model=%s, max_tokens=%d)", SETTINGS.anthropic_api_url, SETTINGS.anthropic_model, max_tokens)
    response = requests.post(
        SETTINGS.anthropic_api_url, headers=headers, json=payload, timeout=SETTINGS.llm_timeout
    )
    response.raise_for_status()
    data = response.json()

    parts = data.get("content") or []
    if not parts or parts[0].get("type") != "text":
        raise NonTextResponse("Unexpected response type")
    return parts[0].get("text", "")
