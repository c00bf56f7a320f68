import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from .config import Settings
from .errors import ServiceError
from .security import mask_api_key

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic", "gemini")


# =========================
# Helpers
# =========================
def _raise_for_provider_error(resp: httpx.Response, provider_label: str):
    try:
        body = resp.text[:500]
    except Exception:
        body = "<no body>"
    raise ServiceError(
        f"{provider_label} HTTP {resp.status_code}: {body}",
        provider=provider_label,
        status=resp.status_code,
    )


async def _post_json(
    url: str,
    provider_label: str,
    settings: Settings,
    *,
    json: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    try:
        async with httpx.AsyncClient(timeout=settings.llm_timeout, transport=transport) as client:
            r = await client.post(url, headers=headers, json=json)
    except httpx.HTTPError as e:
        raise ServiceError(f"{provider_label} request failed: {e}", provider=provider_label) from e
    if r.status_code >= 400:
        _raise_for_provider_error(r, provider_label)
    try:
        return r.json()
    except ValueError as e:
        raise ServiceError(f"{provider_label} returned a non-JSON body", provider=provider_label) from e


# =========================
# Entry point with retries
# =========================
async def invoke(
    system: str,
    user: str,
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """Send one system+user prompt to the configured provider and return its text.

    ``ServiceError`` is retried sequentially up to ``settings.llm_max_attempts``
    times in total; anything else propagates immediately.
    """
    settings = settings or Settings.from_env()
    provider = (settings.llm_provider or "").strip().lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ServiceError("Unsupported provider. Use openai|anthropic|gemini.", provider=provider)
    if not settings.llm_api_key:
        raise ServiceError(f"No API key configured for {provider}", provider=provider)

    call = {
        "openai": _call_openai,
        "anthropic": _call_anthropic,
        "gemini": _call_gemini,
    }[provider]

    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(settings.llm_max_attempts),
        wait=wait_exponential_jitter(initial=1, max=8),
        retry=retry_if_exception_type(ServiceError),
        reraise=True,
    ):
        with attempt:
            n = attempt.retry_state.attempt_number
            logger.info(
                "Calling %s (%s), attempt %d (key=%s)",
                provider, settings.model, n, mask_api_key(settings.llm_api_key),
            )
            return await call(settings, system, user, transport=transport)
    raise ServiceError("Generative service retries exhausted", provider=provider)


# =========================
# OpenAI-compatible
# =========================
async def _call_openai(settings: Settings, system: str, user: str, *, transport=None) -> str:
    """
    Works with api.openai.com and OpenAI-compatible gateways.
    Set OPENAI_BASE to your gateway URL.
    """
    base = settings.openai_base
    # accept either full /chat/completions or just /v1
    url = base if base.endswith("/chat/completions") else base.rstrip("/") + "/chat/completions"

    headers = {"Authorization": f"Bearer {settings.llm_api_key}"}
    data = {
        "model": settings.model,
        "temperature": 0.7,
        "max_tokens": 4000,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
    }
    j = await _post_json(url, "OpenAI-compatible", settings, json=data, headers=headers, transport=transport)
    try:
        return j["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError) as e:
        raise ServiceError(f"OpenAI-compatible returned no choices: {str(j)[:200]}", provider="openai") from e


# =========================
# Anthropic
# =========================
async def _call_anthropic(settings: Settings, system: str, user: str, *, transport=None) -> str:
    url = "https://api.anthropic.com/v1/messages"
    headers = {
        "x-api-key": settings.llm_api_key,
        "anthropic-version": "2023-06-01",
    }
    data = {
        "model": settings.model,
        "max_tokens": 4096,
        "temperature": 0.7,
        "system": system,
        "messages": [{"role": "user", "content": user}],
    }
    j = await _post_json(url, "Anthropic", settings, json=data, headers=headers, transport=transport)
    try:
        return "".join([blk.get("text", "") for blk in j.get("content", [])])
    except (AttributeError, KeyError, IndexError, TypeError) as e:
        raise ServiceError(f"Anthropic returned an unexpected body: {str(j)[:200]}", provider="anthropic") from e


# =========================
# Gemini (native)
# =========================
async def _call_gemini(settings: Settings, system: str, user: str, *, transport=None) -> str:
    url = f"https://generativelanguage.googleapis.com/v1beta/models/{settings.model}:generateContent"
    data = {
        "systemInstruction": {"parts": [{"text": system}]},
        "contents": [{"role": "user", "parts": [{"text": user}]}],
        "generationConfig": {
            "temperature": 0.7,
            "topP": 0.95,
            "maxOutputTokens": 8192,
        },
    }
    headers = {"x-goog-api-key": settings.llm_api_key}
    j = await _post_json(url, "Gemini", settings, json=data, headers=headers, transport=transport)
    try:
        candidates = j.get("candidates")
        if not candidates:
            raise ServiceError(f"Gemini returned no candidates: {str(j)[:200]}", provider="gemini")
        parts = candidates[0].get("content", {}).get("parts", [])
        if not parts:
            raise ServiceError(f"Gemini returned empty parts: {str(j)[:200]}", provider="gemini")
        text = parts[0].get("text", "")
    except (AttributeError, KeyError, IndexError, TypeError) as e:
        raise ServiceError(f"Gemini returned an unexpected body: {str(j)[:200]}", provider="gemini") from e
    if not isinstance(text, str):
        raise ServiceError(f"Gemini returned non-text content: {str(j)[:200]}", provider="gemini")
    return text
