"""Streaming chat transport for OpenAI-compatible providers (OpenRouter)."""

import json
import logging
from typing import Any, AsyncIterator, Optional

import httpx

from finder.chat.prompt import build_messages
from finder.models import ChatRequest

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-3-flash-preview"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TIMEOUT = 60.0


class TransportError(RuntimeError):
    """Raised when the streaming exchange fails."""
    pass


class CredentialError(TransportError):
    """Raised when no API key is configured."""
    pass


def parse_sse_line(line: str) -> Optional[str]:
    """Extract the text increment carried by one Server-Sent-Events line.

    Returns the increment (possibly empty), or None for lines that carry no
    content: blanks, comments, other fields and malformed chunks.
    """
    line = line.strip()
    if not line or line.startswith(":") or not line.startswith("data:"):
        return None
    data = line[len("data:"):].strip()
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError:
        logger.debug(f"Skipping malformed stream chunk: {data[:80]}")
        return None
    if not isinstance(parsed, dict):
        return None
    if "error" in parsed:
        error = parsed["error"]
        message = error.get("message") if isinstance(error, dict) else error
        raise TransportError(f"Provider error: {message}")
    choices = parsed.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get("delta") or {}
    content = delta.get("content")
    return content if isinstance(content, str) else None


def _is_done(line: str) -> bool:
    line = line.strip()
    return line.startswith("data:") and line[len("data:"):].strip() == "[DONE]"


class OpenRouterTransport:
    """Streams chat completions over HTTP with httpx."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key or None
        self.model = model
        self.api_url = api_url
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client = client

    @property
    def available(self) -> bool:
        return self.api_key is not None

    def payload(self, request: ChatRequest) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": build_messages(request),
            "stream": True,
            "max_tokens": self.max_tokens,
        }

    async def stream(self, request: ChatRequest) -> AsyncIterator[str]:
        """Yield reply increments until the provider signals the end.

        Raises:
            CredentialError: if no API key is configured
            TransportError: on HTTP failures or a non-2xx status
        """
        if self.api_key is None:
            raise CredentialError("No API key configured (set OPENROUTER_API_KEY)")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        client = self._client or httpx.AsyncClient(timeout=self.timeout)
        try:
            async with client.stream(
                "POST", self.api_url, json=self.payload(request), headers=headers
            ) as response:
                if response.is_error:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise TransportError(
                        f"API error {response.status_code}: {body.strip()[:500]}"
                    )
                async for line in response.aiter_lines():
                    if _is_done(line):
                        return
                    increment = parse_sse_line(line)
                    if increment:
                        yield increment
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
        finally:
            if self._client is None:
                await client.aclose()
