"""Chat orchestration: intent detection, fact retrieval, prompt, LLM call."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

import structlog

from knowledge.intent import Intent, IntentResult, detect_intent
from knowledge.search import KnowledgeSearch
from llm import LLMProvider

from .pregnancy import PregnancyContext
from .prompts import KbPayload, build_context_summary, build_kb_augmented_prompt

logger = structlog.get_logger()

MAX_MESSAGE_CHARS = 2000


@dataclass
class AssistantReply:
    content: str
    intent: IntentResult
    payload: KbPayload
    context_summary: str
    system_prompt: str = field(repr=False, default="")


class KnowledgeAssistant:
    """Answers one user message with knowledge-base facts in the prompt."""

    def __init__(
        self,
        search: KnowledgeSearch,
        provider: Optional[LLMProvider] = None,
        history_limit: int = 10,
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ):
        self.search = search
        self.provider = provider
        self.history_limit = history_limit
        self.max_tokens = max_tokens
        self.temperature = temperature

    @staticmethod
    def _search_terms(search_fn, message: str, keywords: Sequence[str], limit: int) -> list:
        """Search the whole message, then each matched keyword until one hits.

        Unsegmented Chinese text is a single index token, so a full sentence
        rarely matches on its own.
        """
        for term in (message, *keywords):
            items = search_fn(term, limit).items
            if items:
                return items
        return []

    def retrieve(self, message: str) -> tuple[IntentResult, KbPayload]:
        """Detect intent and fetch matching facts. Never raises."""
        intent = detect_intent(message)
        payload = KbPayload()
        try:
            if intent.intent == Intent.EMERGENCY:
                items = self._search_terms(self.search.search_emergency, message, intent.keywords, 1)
                payload.emergency = items[0] if items else None
            elif intent.intent == Intent.FOOD:
                # Food keywords are phrasing labels, not food names
                payload.foods = self.search.search_food(message, 5).items or (
                    self.search.find_foods_in_text(message, 5)
                )
            elif intent.intent == Intent.SYMPTOM:
                payload.symptoms = self._search_terms(
                    self.search.search_symptom, message, intent.keywords, 3
                )
            elif intent.intent == Intent.EMOTIONAL:
                payload.emotional = self._search_terms(
                    self.search.search_emotional, message, intent.keywords, 3
                )
        except Exception as e:
            logger.warning("kb_retrieval_failed", intent=intent.intent, error=str(e))
            payload = KbPayload()

        logger.debug(
            "kb_retrieval",
            intent=intent.intent.value if intent.intent else None,
            keywords=intent.keywords,
            empty=payload.is_empty(),
        )
        return intent, payload

    def build_prompt(self, message: str, context: PregnancyContext) -> tuple[IntentResult, KbPayload, str]:
        intent, payload = self.retrieve(message)
        return intent, payload, build_kb_augmented_prompt(context, payload)

    async def ask(
        self,
        message: str,
        context: PregnancyContext,
        history: Sequence[dict] = (),
    ) -> AssistantReply:
        """Answer ``message``. LLM errors propagate to the caller."""
        text = (message or "").strip()
        if not text:
            raise ValueError("Message cannot be empty")
        if self.provider is None:
            raise ValueError("No LLM provider configured")
        text = text[:MAX_MESSAGE_CHARS]

        intent, payload, system_prompt = await asyncio.to_thread(self.build_prompt, text, context)

        messages = [
            {"role": m["role"], "content": m["content"]}
            for m in list(history)[-self.history_limit:]
            if m.get("role") in ("user", "assistant") and m.get("content")
        ]
        messages.append({"role": "user", "content": text})

        content = await asyncio.to_thread(
            self.provider.generate,
            messages,
            system_prompt,
            self.max_tokens,
            self.temperature,
        )
        return AssistantReply(
            content=content,
            intent=intent,
            payload=payload,
            context_summary=build_context_summary(context),
            system_prompt=system_prompt,
        )
