"""Shared CLI utilities."""

import sys
from typing import Optional

import click
import structlog
from rich.console import Console

console = Console()
logger = structlog.get_logger()


def get_components(skip_assistant: bool = False, force_seed: bool = False):
    """Initialize all components from config.

    Args:
        skip_assistant: If True, skip LLM provider init (for commands that don't need it)
        force_seed: Reseed the knowledge base even if the stored version matches
    """
    from assistant import KnowledgeAssistant
    from cli.config import load_config_model
    from knowledge import FactKind, KnowledgeSearch, KnowledgeStore, initialize_knowledge_base
    from llm import LLMError, create_llm_provider

    try:
        config_model = load_config_model()
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)

    kb_cfg = config_model.knowledge
    if str(kb_cfg.db_path) != ":memory:":
        kb_cfg.db_path.parent.mkdir(parents=True, exist_ok=True)

    store = KnowledgeStore(kb_cfg.db_path)
    # Released when the invoking command finishes.
    ctx = click.get_current_context(silent=True)
    if ctx is not None:
        ctx.call_on_close(store.close)
    init = initialize_knowledge_base(store, data_dir=kb_cfg.data_dir, force=force_seed)
    if not init.success:
        # Search still works against whatever is already stored.
        logger.warning("kb_unavailable", db_path=str(kb_cfg.db_path))

    limits = config_model.search
    search = KnowledgeSearch(
        store,
        limits={
            FactKind.FOOD: limits.food_limit,
            FactKind.SYMPTOM: limits.symptom_limit,
            FactKind.EMOTIONAL: limits.emotional_limit,
            FactKind.EMERGENCY: limits.emergency_limit,
        },
    )

    assistant: Optional[KnowledgeAssistant] = None
    if not skip_assistant:
        llm_cfg = config_model.llm
        try:
            provider = create_llm_provider(
                provider=llm_cfg.provider,
                api_key=llm_cfg.api_key,
                model=llm_cfg.model,
                base_url=llm_cfg.base_url,
            )
        except LLMError as e:
            console.print(f"[red]Config error:[/] {e}")
            sys.exit(1)
        assistant = KnowledgeAssistant(
            search,
            provider=provider,
            history_limit=llm_cfg.history_limit,
            max_tokens=llm_cfg.max_tokens,
            temperature=llm_cfg.temperature,
        )

    return {
        "config_model": config_model,
        "store": store,
        "init": init,
        "search": search,
        "assistant": assistant,
    }
