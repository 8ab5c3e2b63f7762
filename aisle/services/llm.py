"""
LLM client.

One call per chat turn: system prompt + ordered history in, text out.
  - Anthropic Messages API (default) or any OpenAI-compatible endpoint
  - Reusable client (connection pooling)
  - No retry and no provider fallback: a failed call fails the request
  - Structured logging of latency and token usage
"""

import logging
import time
from typing import Any, Optional

import httpx

from ..core.config import get_settings
from ..core.flags import get_flags

logger = logging.getLogger(__name__)

# ── Reusable client (connection pool) ────────────────────────────────

_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=10, read=120, write=30, pool=10),
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
        )
    return _client


async def close_client():
    """Close the shared HTTP client. Call on app shutdown."""
    global _client
    if _client and not _client.is_closed:
        await _client.aclose()
        _client = None


# ── Provider config ──────────────────────────────────────────────────

def _get_provider_config(provider: Optional[str] = None) -> tuple[str, str, str]:
    """Returns (provider, base_url, api_key) for the active provider."""
    settings = get_settings()
    p = (provider or get_flags().llm_provider).lower()

    if p == "anthropic":
        return p, settings.anthropic_base_url, settings.anthropic_api_key
    if p == "gemini":
        return (
            p,
            "https://generativelanguage.googleapis.com/v1beta/openai",
            settings.gemini_api_key,
        )
    return "openai", settings.openai_base_url, settings.openai_api_key


def _build_anthropic_request(
    base_url: str, api_key: str, system: str, messages: list[dict], model: str, max_tokens: int,
) -> tuple[str, dict, dict]:
    settings = get_settings()
    url = f"{base_url.rstrip('/')}/v1/messages"
    headers = {
        "x-api-key": api_key,
        "anthropic-version": settings.anthropic_version,
        "content-type": "application/json",
    }
    payload = {
        "model": model,
        "max_tokens": max_tokens,
        "system": system,
        "messages": messages,
        "temperature": settings.default_llm_temperature,
    }
    return url, headers, payload


def _build_openai_request(
    base_url: str, api_key: str, system: str, messages: list[dict], model: str, max_tokens: int,
) -> tuple[str, dict, dict]:
    settings = get_settings()
    url = f"{base_url.rstrip('/')}/chat/completions"
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload = {
        "model": model,
        "max_tokens": max_tokens,
        "messages": [{"role": "system", "content": system}, *messages],
        "temperature": settings.default_llm_temperature,
    }
    return url, headers, payload


def _extract_text(provider: str, data: dict) -> tuple[str, int, int]:
    """Returns (text, input_tokens, output_tokens) from a provider response."""
    if provider == "anthropic":
        text = "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )
        usage = data.get("usage", {})
        return text, usage.get("input_tokens", 0), usage.get("output_tokens", 0)

    text = data.get("choices", [{}])[0].get("message", {}).get("content") or ""
    usage = data.get("usage", {})
    return text, usage.get("prompt_tokens", 0), usage.get("completion_tokens", 0)


# ── Main completion function ─────────────────────────────────────────

async def complete(
    system: str,
    messages: list[dict],
    max_tokens: Optional[int] = None,
    model: Optional[str] = None,
    provider: Optional[str] = None,
) -> str:
    """
    Send the system prompt and history, return the generated text.

    Raises ValueError when the provider has no API key (before any I/O),
    httpx errors when the call fails.
    """
    settings = get_settings()
    active_provider, base_url, api_key = _get_provider_config(provider)

    if not api_key:
        raise ValueError(
            f"No API key for LLM provider '{active_provider}'. "
            "Set ANTHROPIC_API_KEY, OPENAI_API_KEY, or GEMINI_API_KEY."
        )

    resolved_model = model or settings.default_llm_model
    resolved_max = max_tokens or settings.default_llm_max_tokens
    build = _build_anthropic_request if active_provider == "anthropic" else _build_openai_request
    url, headers, payload = build(base_url, api_key, system, messages, resolved_model, resolved_max)

    start = time.monotonic()
    client = _get_client()

    try:
        resp = await client.post(url, json=payload, headers=headers)
        if resp.status_code >= 400:
            logger.error("LLM API error %d: %s", resp.status_code, resp.text[:500])
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()
    except Exception as e:
        logger.error("LLM failed after %.1fs: %s", time.monotonic() - start, e)
        raise

    text, tokens_in, tokens_out = _extract_text(active_provider, data)
    logger.info(
        "LLM %s: %dms | in=%d out=%d tokens | model=%s",
        active_provider,
        int((time.monotonic() - start) * 1000),
        tokens_in,
        tokens_out,
        resolved_model,
    )
    return text
