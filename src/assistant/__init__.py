from .engine import AssistantReply, KnowledgeAssistant
from .pregnancy import PregnancyContext, calculate_pregnancy_progress
from .prompts import KbPayload, build_kb_augmented_prompt, build_system_prompt

__all__ = [
    "KnowledgeAssistant",
    "AssistantReply",
    "PregnancyContext",
    "calculate_pregnancy_progress",
    "KbPayload",
    "build_system_prompt",
    "build_kb_augmented_prompt",
]
