"""
Production-grade LLM client.

Features:
  - Retry with exponential backoff + jitter (handles 429, 500, 502, 503, 504)
  - Provider fallback (primary → fallback)
  - Reusable client (connection pooling)
  - Text-to-speech passthrough
  - Structured logging
"""

import asyncio
import logging
import random
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
    """Returns (base_url, api_key, default_model) for a provider."""
    settings = get_settings()
    p = (provider or get_flags().llm_provider).lower()

    if p == "aiml":
        return settings.aiml_base_url, settings.aiml_api_key, settings.default_llm_model
    return settings.openai_base_url, settings.openai_api_key, settings.default_llm_model


def _headers(api_key: str) -> dict:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


# ── Retry logic ──────────────────────────────────────────────────────

RETRYABLE_STATUS = {429, 500, 502, 503, 504}
MAX_RETRIES = 3
BASE_DELAY = 1.0
MAX_DELAY = 16.0


async def _retry_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs,
) -> httpx.Response:
    """Execute request with exponential backoff + jitter."""
    last_exc = None

    for attempt in range(MAX_RETRIES + 1):
        try:
            resp = await client.request(method, url, **kwargs)

            if resp.status_code not in RETRYABLE_STATUS:
                if resp.status_code >= 400:
                    logger.error("LLM API error %d: %s", resp.status_code, resp.text[:500])
                resp.raise_for_status()
                return resp

            # Retryable error
            retry_after = resp.headers.get("retry-after")
            delay = float(retry_after) if retry_after else min(
                MAX_DELAY, BASE_DELAY * (2 ** attempt) + random.uniform(0, 1)
            )
            logger.warning(
                "LLM %d (attempt %d/%d) — retrying in %.1fs",
                resp.status_code, attempt + 1, MAX_RETRIES + 1, delay,
            )
            last_exc = httpx.HTTPStatusError(
                f"{resp.status_code}", request=resp.request, response=resp
            )
            await asyncio.sleep(delay)

        except httpx.TimeoutException as e:
            delay = min(MAX_DELAY, BASE_DELAY * (2 ** attempt) + random.uniform(0, 1))
            logger.warning(
                "LLM timeout (attempt %d/%d) — retrying in %.1fs",
                attempt + 1, MAX_RETRIES + 1, delay,
            )
            last_exc = e
            await asyncio.sleep(delay)

        except httpx.HTTPStatusError:
            raise  # Non-retryable HTTP errors
        except Exception as e:
            last_exc = e
            if attempt < MAX_RETRIES:
                delay = min(MAX_DELAY, BASE_DELAY * (2 ** attempt))
                await asyncio.sleep(delay)
            continue

    raise last_exc or RuntimeError("LLM request failed after retries")


# ── Main chat function ───────────────────────────────────────────────

async def chat(
    messages: list[dict],
    model: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    presence_penalty: Optional[float] = None,
    frequency_penalty: Optional[float] = None,
    provider: Optional[str] = None,
) -> dict:
    """
    Chat completion with retry + optional provider fallback.
    Returns the full API response as dict.
    """
    settings = get_settings()
    active_provider = (provider or get_flags().llm_provider).lower()
    base_url, api_key, default_model = _get_provider_config(provider)

    if not api_key:
        raise ValueError(
            f"No API key for LLM provider '{active_provider}'. "
            "Set OPENAI_API_KEY or AIML_API_KEY."
        )

    payload: dict[str, Any] = {
        "model": model or default_model,
        "messages": messages,
        "temperature": temperature if temperature is not None else settings.default_llm_temperature,
        "max_tokens": max_tokens or settings.default_llm_max_tokens,
    }
    if presence_penalty is not None:
        payload["presence_penalty"] = presence_penalty
    if frequency_penalty is not None:
        payload["frequency_penalty"] = frequency_penalty

    url = f"{base_url.rstrip('/')}/chat/completions"

    start = time.monotonic()
    client = _get_client()

    try:
        resp = await _retry_request(client, "POST", url, json=payload, headers=_headers(api_key))
        data = resp.json()
        elapsed = time.monotonic() - start

        usage = data.get("usage", {})
        logger.info(
            "LLM chat: %dms | in=%d out=%d tokens | model=%s",
            int(elapsed * 1000),
            usage.get("prompt_tokens", 0),
            usage.get("completion_tokens", 0),
            payload["model"],
        )
        return data

    except Exception as e:
        elapsed = time.monotonic() - start
        logger.error("LLM failed after %.1fs: %s", elapsed, e)

        # Try fallback provider if primary failed
        fallback = _get_fallback_provider(active_provider)
        if fallback and not provider:  # Only fallback once
            logger.info("Falling back to %s", fallback)
            return await chat(
                messages=messages, model=model, temperature=temperature,
                max_tokens=max_tokens, presence_penalty=presence_penalty,
                frequency_penalty=frequency_penalty, provider=fallback,
            )
        raise


def _get_fallback_provider(primary: str) -> Optional[str]:
    """Get fallback provider. Returns None if no fallback available."""
    settings = get_settings()
    if primary != "aiml" and settings.aiml_api_key:
        return "aiml"
    if primary != "openai" and settings.openai_api_key:
        return "openai"
    return None


# ── Convenience functions ────────────────────────────────────────────

async def complete(
    messages: list[dict],
    *,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    presence_penalty: Optional[float] = None,
    frequency_penalty: Optional[float] = None,
) -> str:
    """Chat completion that returns only the generated text."""
    response = await chat(
        messages=messages,
        temperature=temperature,
        max_tokens=max_tokens,
        presence_penalty=presence_penalty,
        frequency_penalty=frequency_penalty,
    )
    return response["choices"][0]["message"]["content"] or ""


# ── Text-to-speech ───────────────────────────────────────────────────

async def speech(text: str, voice: str, model: Optional[str] = None) -> bytes:
    """
    Synthesize speech. Returns MP3 bytes.
    Always uses the OpenAI endpoint; the AIML proxy has no speech route.
    """
    settings = get_settings()
    if not settings.openai_api_key:
        raise ValueError("No API key for speech. Set OPENAI_API_KEY.")

    url = f"{settings.openai_base_url.rstrip('/')}/audio/speech"
    payload = {
        "model": model or settings.tts_model,
        "voice": voice,
        "input": text,
        "response_format": "mp3",
    }

    start = time.monotonic()
    resp = await _retry_request(
        _get_client(), "POST", url, json=payload, headers=_headers(settings.openai_api_key),
    )
    logger.info(
        "TTS: %dms | voice=%s chars=%d",
        int((time.monotonic() - start) * 1000), voice, len(text),
    )
    return resp.content
