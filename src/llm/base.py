"""Base LLM provider abstraction."""

from abc import ABC, abstractmethod


class LLMError(Exception):
    """Base LLM error."""


class LLMRateLimitError(LLMError):
    """Rate limit hit."""


class LLMAuthError(LLMError):
    """Authentication failure."""


class LLMProvider(ABC):
    """Abstract LLM provider interface.

    The assistant only needs one call: a system prompt plus chat messages in,
    reply text out.
    """

    provider_name: str = "base"

    @abstractmethod
    def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ) -> str:
        """Generate a response from messages.

        Args:
            messages: List of {"role": ..., "content": ...} dicts
            system: Optional system prompt
            max_tokens: Max response tokens
            temperature: Sampling temperature

        Returns:
            Generated text
        """
        ...

    def test_connection(self) -> bool:
        """Send a tiny request; True if the provider answered."""
        try:
            return bool(self.generate([{"role": "user", "content": "Hello"}], max_tokens=10))
        except LLMError:
            return False
