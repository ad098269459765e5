"""Provider for self-hosted or third-party OpenAI-compatible endpoints."""

import httpx
import structlog

from cli.retry import llm_retry

from ..base import LLMAuthError, LLMError, LLMProvider, LLMRateLimitError

logger = structlog.get_logger()


class CustomProvider(LLMProvider):
    """POSTs to ``{base_url}/chat/completions`` with plain httpx."""

    provider_name = "custom"

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
    ):
        if not base_url:
            raise LLMError("Custom provider requires a base URL")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model or "default"
        self.client = client or httpx.Client(timeout=timeout)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @llm_retry(max_attempts=3, min_wait=1.0, max_wait=10.0, exceptions=(httpx.TransportError,))
    def _post(self, payload: dict) -> httpx.Response:
        return self.client.post(
            f"{self.base_url}/chat/completions", json=payload, headers=self._headers()
        )

    def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> str:
        full_messages = []
        if system:
            full_messages.append({"role": "system", "content": system})
        full_messages.extend({"role": m["role"], "content": m["content"]} for m in messages)

        payload = {
            "model": self.model,
            "messages": full_messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            response = self._post(payload)
        except httpx.TransportError as e:
            raise LLMError(f"Custom API unreachable: {e}") from e

        if response.status_code in (401, 403):
            raise LLMAuthError(f"Custom API auth failed: {response.status_code}")
        if response.status_code == 429:
            raise LLMRateLimitError("Custom API rate limit")
        if response.status_code >= 400:
            raise LLMError(f"Custom API error: {response.status_code} - {response.text}")

        try:
            data = response.json()
        except ValueError as e:
            raise LLMError(f"Custom API returned invalid JSON: {e}") from e

        choices = data.get("choices") or []
        if choices:
            return (choices[0].get("message") or {}).get("content") or ""
        # Anthropic-style body from some proxies
        content = data.get("content") or []
        if content and isinstance(content[0], dict):
            return content[0].get("text") or ""
        logger.warning("custom_llm_empty_response", model=self.model)
        return ""
