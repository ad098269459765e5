"""CLI command modules."""

from .ask import ask
from .kb import kb
from .triage import intent, triage

__all__ = [
    "kb",
    "intent",
    "triage",
    "ask",
]
