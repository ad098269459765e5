"""Bundled pregnancy knowledge base: storage, seeding, search and triage."""

from .errors import KnowledgeBaseError, KnowledgeStoreError, SeedDataError
from .intent import Confidence, Intent, IntentResult, detect_intent
from .models import (
    Decision,
    DecisionRule,
    EmergencyFact,
    EmotionalFact,
    FactKind,
    FoodFact,
    KbStats,
    RuleTrigger,
    SafetyLevel,
    SearchResult,
    SymptomFact,
    TriggerKind,
    Urgency,
)
from .search import KnowledgeSearch
from .seeder import KB_VERSION, FactBundle, Seeder, initialize_knowledge_base
from .store import KnowledgeStore
from .triage import evaluate_decision_path

__all__ = [
    "KnowledgeStore",
    "KnowledgeSearch",
    "Seeder",
    "FactBundle",
    "KB_VERSION",
    "initialize_knowledge_base",
    "detect_intent",
    "evaluate_decision_path",
    "Intent",
    "IntentResult",
    "Confidence",
    "FactKind",
    "FoodFact",
    "SymptomFact",
    "EmotionalFact",
    "EmergencyFact",
    "DecisionRule",
    "RuleTrigger",
    "TriggerKind",
    "SafetyLevel",
    "Urgency",
    "Decision",
    "SearchResult",
    "KbStats",
    "KnowledgeBaseError",
    "KnowledgeStoreError",
    "SeedDataError",
]
