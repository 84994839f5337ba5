"""
OpenAI Client — wraps the chat completions endpoint for lesson and topic
generation.

Any OpenAI-compatible server works; point OPENAI_BASE_URL at it and set
OPENAI_API_KEY.
"""
from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

OPENAI_BASE = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_MAX_CONCURRENCY = int(os.environ.get("OPENAI_MAX_CONCURRENCY", "4"))


class OpenAIClientError(Exception):
    pass


@dataclass
class PromptRequest:
    prompt: str
    model: str = OPENAI_MODEL
    temperature: float = 0.7
    max_tokens: int = 1000
    system_prompt: str | None = None

    def payload(self) -> dict:
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": self.prompt})
        return {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "n": 1,
        }


async def send_prompt(request: PromptRequest, timeout: float = 300.0) -> str:
    async with httpx.AsyncClient(timeout=timeout) as client:
        return await _chat(client, request)


async def send_batch_prompts(
    requests: list[PromptRequest],
    timeout: float = 300.0,
    max_concurrency: int | None = None,
) -> list[str | Exception]:
    """
    Send every request concurrently (bounded) and return the responses in
    the same order. A failed request does not stop the others: its slot
    holds the exception instead of the response text. All requests have
    finished before the client is closed.
    """
    if not requests:
        return []
    semaphore = asyncio.Semaphore(max_concurrency or OPENAI_MAX_CONCURRENCY)

    async with httpx.AsyncClient(timeout=timeout) as client:
        async def run(request: PromptRequest) -> str:
            async with semaphore:
                return await _chat(client, request)

        logger.info(f"Sending {len(requests)} prompts to {OPENAI_BASE}")
        results = await asyncio.gather(*(run(r) for r in requests), return_exceptions=True)

    failed = sum(1 for r in results if isinstance(r, BaseException))
    if failed:
        logger.warning(f"{failed}/{len(requests)} prompts failed")
    # Cancellation and other non-Exception errors are not per-request failures.
    for r in results:
        if isinstance(r, BaseException) and not isinstance(r, Exception):
            raise r
    return list(results)


async def _chat(client: httpx.AsyncClient, request: PromptRequest) -> str:
    resp = await client.post(
        f"{OPENAI_BASE}/chat/completions",
        json=request.payload(),
        headers=_headers(),
    )
    resp.raise_for_status()
    data = resp.json()
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError) as e:
        raise OpenAIClientError(f"Unexpected chat completion payload: {data!r}") from e


async def check_health() -> bool:
    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            resp = await client.get(f"{OPENAI_BASE}/models", headers=_headers())
            return resp.status_code == 200
    except (httpx.HTTPError, OpenAIClientError):
        return False


def _headers() -> dict[str, str]:
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise OpenAIClientError("OPENAI_API_KEY is not set")
    return {"Authorization": f"Bearer {api_key}"}
