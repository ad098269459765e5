"""Full-text search over knowledge facts with substring fallback."""

import json
import re
import sqlite3
from typing import Callable, Optional

import structlog

from .models import (
    EmergencyFact,
    EmotionalFact,
    FactKind,
    FoodFact,
    SearchResult,
    SymptomFact,
)
from .store import KnowledgeStore

logger = structlog.get_logger()

DEFAULT_LIMITS = {
    FactKind.FOOD: 5,
    FactKind.SYMPTOM: 3,
    FactKind.EMOTIONAL: 3,
    FactKind.EMERGENCY: 1,
}

# Columns scanned by the substring fallback, per kind.
FALLBACK_COLUMNS = {
    FactKind.FOOD: ("name", "name_en", "category"),
    FactKind.SYMPTOM: ("symptom_name", "symptom_name_en", "search_text"),
    FactKind.EMOTIONAL: ("scenario_name", "trigger", "wife_feeling"),
    FactKind.EMERGENCY: ("emergency_name", "search_text"),
}

_FTS_SPECIAL = re.compile(r'["\-*()^~:]')
_WHITESPACE = re.compile(r"\s+")


def normalize_query(query: str) -> str:
    return (query or "").strip().lower()


def to_fts5_query(query: str) -> str:
    """Convert user text to a quoted FTS5 phrase.

    Characters with meaning in the FTS5 query language are replaced by
    spaces. Returns "" when nothing searchable remains.
    """
    cleaned = _WHITESPACE.sub(" ", _FTS_SPECIAL.sub(" ", query)).strip()
    if not cleaned:
        return ""
    return f'"{cleaned}"'


def _loads(value: Optional[str], default):
    if not value:
        return default
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return default


def row_to_food(row: sqlite3.Row) -> FoodFact:
    return FoodFact.model_validate(dict(row))


def row_to_symptom(row: sqlite3.Row) -> SymptomFact:
    data = dict(row)
    data["questions"] = _loads(row["questions"], [])
    data["decision_paths"] = _loads(row["decision_paths"], [])
    data["dad_actions"] = _loads(row["dad_actions"], [])
    return SymptomFact.model_validate(data)


def row_to_emotional(row: sqlite3.Row) -> EmotionalFact:
    return EmotionalFact.model_validate(dict(row))


def row_to_emergency(row: sqlite3.Row) -> EmergencyFact:
    data = dict(row)
    for key in (
        "recognition_signs",
        "immediate_actions",
        "what_not_to_do",
        "when_to_call_ambulance",
        "hospital_bag_items",
    ):
        data[key] = _loads(row[key], [])
    return EmergencyFact.model_validate(data)


ROW_CONVERTERS: dict[FactKind, Callable] = {
    FactKind.FOOD: row_to_food,
    FactKind.SYMPTOM: row_to_symptom,
    FactKind.EMOTIONAL: row_to_emotional,
    FactKind.EMERGENCY: row_to_emergency,
}


class KnowledgeSearch:
    """Query functions over a :class:`KnowledgeStore`.

    Every search goes index-first (BM25-ranked FTS5 phrase match) and falls
    back to a substring scan when the index yields nothing or the expression
    is rejected. None of the search methods raise for string input.
    """

    def __init__(self, store: KnowledgeStore, limits: Optional[dict[FactKind, int]] = None):
        self.store = store
        self.limits = {**DEFAULT_LIMITS, **(limits or {})}

    # ------------------------------------------------------------------
    # Ranked search
    # ------------------------------------------------------------------

    def search(self, kind: FactKind, query: str, limit: Optional[int] = None) -> SearchResult:
        """Search one fact kind. ``limit`` defaults to the kind's configured limit."""
        limit = self.limits[kind] if limit is None else limit
        normalized = normalize_query(query)

        if not normalized or limit <= 0 or not self.store.is_open:
            return SearchResult(items=[], query=normalized, total_matches=0)

        rows = self._indexed_rows(kind, normalized, limit)
        if not rows:
            rows = self._fallback_rows(kind, normalized, limit)

        convert = ROW_CONVERTERS[kind]
        items = []
        for row in rows[:limit]:
            try:
                items.append(convert(row))
            except ValueError as e:
                logger.warning("kb_row_invalid", kind=kind.value, id=row["id"], error=str(e))
        return SearchResult(items=items, query=normalized, total_matches=len(items))

    def search_food(self, query: str, limit: int = 5) -> SearchResult[FoodFact]:
        return self.search(FactKind.FOOD, query, limit)

    def search_symptom(self, query: str, limit: int = 3) -> SearchResult[SymptomFact]:
        return self.search(FactKind.SYMPTOM, query, limit)

    def search_emotional(self, query: str, limit: int = 3) -> SearchResult[EmotionalFact]:
        return self.search(FactKind.EMOTIONAL, query, limit)

    def search_emergency(self, query: str, limit: int = 1) -> SearchResult[EmergencyFact]:
        return self.search(FactKind.EMERGENCY, query, limit)

    def _indexed_rows(self, kind: FactKind, normalized: str, limit: int) -> list[sqlite3.Row]:
        fts_query = to_fts5_query(normalized)
        if not fts_query:
            return []
        try:
            return self.store.fts_query(kind, fts_query, limit)
        except sqlite3.Error as e:
            logger.debug("kb_fts_query_failed", kind=kind.value, query=fts_query, error=str(e))
            return []

    def _fallback_rows(self, kind: FactKind, normalized: str, limit: int) -> list[sqlite3.Row]:
        try:
            return self.store.like_query(kind, FALLBACK_COLUMNS[kind], normalized, limit)
        except sqlite3.Error as e:
            logger.warning("kb_fallback_query_failed", kind=kind.value, error=str(e))
            return []

    # ------------------------------------------------------------------
    # Point lookups
    # ------------------------------------------------------------------

    def _lookup(self, kind: FactKind, sql: str, params: tuple):
        try:
            row = self.store.fetch_one(sql, params)
        except sqlite3.Error as e:
            logger.warning("kb_lookup_failed", kind=kind.value, error=str(e))
            return None
        return ROW_CONVERTERS[kind](row) if row else None

    def _lookup_all(self, kind: FactKind, sql: str, params: tuple = ()) -> list:
        try:
            rows = self.store.fetch_all(sql, params)
        except sqlite3.Error as e:
            logger.warning("kb_lookup_failed", kind=kind.value, error=str(e))
            return []
        return [ROW_CONVERTERS[kind](r) for r in rows]

    def get_food_by_name(self, name: str) -> Optional[FoodFact]:
        return self._lookup(
            FactKind.FOOD, "SELECT * FROM kb_food WHERE name = ? OR name_en = ?", (name, name)
        )

    def find_foods_in_text(self, text: str, limit: int = 5) -> list[FoodFact]:
        """Foods whose name occurs inside ``text``, longest name first."""
        normalized = normalize_query(text)
        if not normalized or limit <= 0:
            return []
        return self._lookup_all(
            FactKind.FOOD,
            """SELECT * FROM kb_food
               WHERE instr(?, name) > 0 OR (name_en != '' AND instr(?, lower(name_en)) > 0)
               ORDER BY length(name) DESC
               LIMIT ?""",
            (normalized, normalized, limit),
        )

    def get_foods_by_category(self, category: str) -> list[FoodFact]:
        return self._lookup_all(
            FactKind.FOOD,
            "SELECT * FROM kb_food WHERE category = ? ORDER BY safety_level, name",
            (category,),
        )

    def get_symptom_by_id(self, symptom_id: str) -> Optional[SymptomFact]:
        return self._lookup(FactKind.SYMPTOM, "SELECT * FROM kb_symptom WHERE id = ?", (symptom_id,))

    def get_emotional_by_id(self, scenario_id: str) -> Optional[EmotionalFact]:
        return self._lookup(
            FactKind.EMOTIONAL, "SELECT * FROM kb_emotional WHERE id = ?", (scenario_id,)
        )

    def get_emergency_by_id(self, emergency_id: str) -> Optional[EmergencyFact]:
        return self._lookup(
            FactKind.EMERGENCY, "SELECT * FROM kb_emergency WHERE id = ?", (emergency_id,)
        )

    def get_all_emergencies(self) -> list[EmergencyFact]:
        return self._lookup_all(
            FactKind.EMERGENCY, "SELECT * FROM kb_emergency ORDER BY emergency_name"
        )

    def list_symptoms(self) -> list[SymptomFact]:
        return self._lookup_all(FactKind.SYMPTOM, "SELECT * FROM kb_symptom ORDER BY id")
