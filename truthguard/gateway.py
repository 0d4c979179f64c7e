from typing import Any, Dict, List

import httpx
from loguru import logger

from .config import Settings
from .errors import ConfigurationError, CreditsExhaustedError, GatewayError, RateLimitError
from .prompts import SYSTEM_PROMPT


def _raise_for_gateway_status(r: httpx.Response) -> None:
    if r.is_success:
        return
    body = r.text
    logger.error("AI Gateway error: {} {}", r.status_code, body)
    if r.status_code == 429:
        raise RateLimitError(body)
    if r.status_code == 402:
        raise CreditsExhaustedError(body)
    raise GatewayError(r.status_code, body)


async def call_gateway(client: httpx.AsyncClient, settings: Settings, content: List[Dict[str, Any]]) -> str:
    """
    Send one chat completion (system role + multimodal user message) and
    return the model's free-text reply, or "" if the reply carries none.
    """
    if not settings.api_key:
        raise ConfigurationError("LOVABLE_API_KEY is not configured")

    payload = {
        "model": settings.model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": content},
        ],
        "temperature": settings.temperature,
    }
    headers = {"Authorization": f"Bearer {settings.api_key}"}
    r = await client.post(settings.gateway_url, json=payload, headers=headers, timeout=settings.request_timeout)
    _raise_for_gateway_status(r)
    j = r.json()
    # openai-compatible response path
    choices = j.get("choices") or [{}]
    message = choices[0].get("message") or {}
    return message.get("content") or ""
