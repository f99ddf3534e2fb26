"""Text-completion client for an OpenAI-compatible chat API.

When no real key is configured the client reports ``is_configured = False``
and callers are expected to use their own deterministic fallback.
"""

from __future__ import annotations

from typing import Any

import httpx

from litejira.common.exceptions import ExternalServiceError
from litejira.config import settings
from litejira.integrations.base import BaseIntegration

DEFAULT_SYSTEM_PROMPT = "You are a helpful project management assistant."


class AIClient(BaseIntegration):
    """Chat-completions client. ``complete()`` raises ExternalServiceError on any failure."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__("ai")
        self._api_key = settings.AI_API_KEY if api_key is None else api_key
        self._base_url = (base_url or settings.AI_BASE_URL).rstrip("/")
        self._model = model or settings.AI_MODEL
        self._timeout = timeout or settings.AI_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key) and not self._api_key.startswith("mock_")

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def health_check(self) -> bool:
        if not self.is_configured:
            self.logger.info("AI client health check: not configured (fallback summaries only)")
            return False
        try:
            async with self._client(timeout=10) as client:
                resp = await client.get(f"{self._base_url}/models", headers=self._headers())
                return resp.status_code == 200
        except httpx.HTTPError as e:
            self.logger.error("AI health check failed: %s", e)
            return False

    async def complete(
        self,
        prompt: str,
        system: str = DEFAULT_SYSTEM_PROMPT,
        temperature: float = 0.7,
    ) -> str:
        if not self.is_configured:
            raise ExternalServiceError("ai", "completion provider is not configured")

        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
        }

        try:
            async with self._client(timeout=self._timeout) as client:
                resp = await client.post(
                    f"{self._base_url}/chat/completions",
                    headers=self._headers(),
                    json=payload,
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            raise ExternalServiceError("ai", str(e)) from e
        except ValueError as e:
            raise ExternalServiceError("ai", "response was not valid JSON") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("ai", "malformed completion response") from e

        if not isinstance(content, str) or not content.strip():
            raise ExternalServiceError("ai", "empty completion")

        self.logger.info("Completion received (%d chars)", len(content))
        return content.strip()
