"""SQLite fact store with FTS5 shadow indexes for the knowledge base."""

import json
import sqlite3
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

import structlog

from db import wal_connect

from .errors import KnowledgeStoreError
from .models import (
    EmergencyFact,
    EmotionalFact,
    FactKind,
    FoodFact,
    KbStats,
    SymptomFact,
)

logger = structlog.get_logger()

_BASE_SCHEMA = """
CREATE TABLE IF NOT EXISTS kb_meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS kb_food (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    name_en TEXT,
    category TEXT NOT NULL,
    safety_level TEXT NOT NULL CHECK(safety_level IN ('SAFE', 'CAUTION', 'AVOID')),
    reason TEXT NOT NULL,
    dad_tip TEXT,
    trimester_notes TEXT,
    search_text TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS kb_symptom (
    id TEXT PRIMARY KEY,
    symptom_name TEXT NOT NULL,
    symptom_name_en TEXT,
    questions TEXT NOT NULL,
    decision_paths TEXT NOT NULL,
    dad_actions TEXT,
    search_text TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS kb_emotional (
    id TEXT PRIMARY KEY,
    scenario_name TEXT NOT NULL,
    scenario_name_en TEXT,
    trigger TEXT NOT NULL,
    wife_feeling TEXT,
    wrong_response TEXT,
    right_response TEXT NOT NULL,
    follow_up_actions TEXT,
    search_text TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS kb_emergency (
    id TEXT PRIMARY KEY,
    emergency_name TEXT NOT NULL,
    emergency_name_en TEXT,
    recognition_signs TEXT NOT NULL,
    immediate_actions TEXT NOT NULL,
    what_not_to_do TEXT,
    when_to_call_ambulance TEXT,
    hospital_bag_items TEXT,
    reassurance_script TEXT,
    search_text TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_food_safety ON kb_food(safety_level);
CREATE INDEX IF NOT EXISTS idx_food_category ON kb_food(category);
"""

# Per kind: base table, FTS table, indexed columns, insert columns.
TABLES: dict[FactKind, dict[str, Any]] = {
    FactKind.FOOD: {
        "table": "kb_food",
        "fts": "kb_food_fts",
        "fts_columns": ("name", "name_en", "category", "reason", "dad_tip"),
        "columns": (
            "id", "name", "name_en", "category", "safety_level",
            "reason", "dad_tip", "trimester_notes", "search_text",
        ),
    },
    FactKind.SYMPTOM: {
        "table": "kb_symptom",
        "fts": "kb_symptom_fts",
        "fts_columns": ("symptom_name", "symptom_name_en"),
        "columns": (
            "id", "symptom_name", "symptom_name_en", "questions",
            "decision_paths", "dad_actions", "search_text",
        ),
    },
    FactKind.EMOTIONAL: {
        "table": "kb_emotional",
        "fts": "kb_emotional_fts",
        "fts_columns": ("scenario_name", "scenario_name_en", "trigger", "wife_feeling"),
        "columns": (
            "id", "scenario_name", "scenario_name_en", "trigger", "wife_feeling",
            "wrong_response", "right_response", "follow_up_actions", "search_text",
        ),
    },
    FactKind.EMERGENCY: {
        "table": "kb_emergency",
        "fts": "kb_emergency_fts",
        "fts_columns": ("emergency_name", "emergency_name_en", "recognition_signs"),
        "columns": (
            "id", "emergency_name", "emergency_name_en", "recognition_signs",
            "immediate_actions", "what_not_to_do", "when_to_call_ambulance",
            "hospital_bag_items", "reassurance_script", "search_text",
        ),
    },
}


def _json_list(values: list[str]) -> Optional[str]:
    return json.dumps(values, ensure_ascii=False) if values else None


def _row_values(kind: FactKind, fact) -> tuple:
    """Flatten a fact model into the column order of its table."""
    if kind == FactKind.FOOD:
        f: FoodFact = fact
        return (
            f.id, f.name, f.name_en, f.category, f.safety_level.value,
            f.reason, f.dad_tip or None, f.trimester_notes or None, f.search_text,
        )
    if kind == FactKind.SYMPTOM:
        s: SymptomFact = fact
        return (
            s.id,
            s.symptom_name,
            s.symptom_name_en,
            json.dumps(s.questions, ensure_ascii=False),
            json.dumps([r.model_dump(mode="json") for r in s.decision_paths], ensure_ascii=False),
            _json_list(s.dad_actions),
            s.search_text,
        )
    if kind == FactKind.EMOTIONAL:
        e: EmotionalFact = fact
        return (
            e.id, e.scenario_name, e.scenario_name_en, e.trigger, e.wife_feeling or None,
            e.wrong_response or None, e.right_response, e.follow_up_actions or None,
            e.search_text,
        )
    m: EmergencyFact = fact
    return (
        m.id,
        m.emergency_name,
        m.emergency_name_en,
        json.dumps(m.recognition_signs, ensure_ascii=False),
        json.dumps(m.immediate_actions, ensure_ascii=False),
        _json_list(m.what_not_to_do),
        _json_list(m.when_to_call_ambulance),
        _json_list(m.hospital_bag_items),
        m.reassurance_script or None,
        m.search_text,
    )


class KnowledgeStore:
    """Process-wide handle on the knowledge database.

    One connection is opened in :meth:`open` and reused until :meth:`close`.
    Access is serialized with a lock so the handle can be shared with worker
    threads (``asyncio.to_thread``). While closed, reads return empty results
    and writes are no-ops.
    """

    def __init__(self, db_path: str | Path = ":memory:"):
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path).expanduser()
        self.fts_enabled = False
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> "KnowledgeStore":
        if self._conn is not None:
            return self
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = wal_connect(self.db_path, row_factory=True, check_same_thread=False)
        conn.executescript(_BASE_SCHEMA)
        self.fts_enabled = self._init_fts(conn)
        self._conn = conn
        logger.debug("kb_store_opened", db_path=str(self.db_path), fts=self.fts_enabled)
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "KnowledgeStore":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    @staticmethod
    def _init_fts(conn: sqlite3.Connection) -> bool:
        try:
            for meta in TABLES.values():
                conn.execute(
                    f"""CREATE VIRTUAL TABLE IF NOT EXISTS {meta['fts']} USING fts5(
                        {', '.join(meta['fts_columns'])},
                        content='{meta['table']}',
                        content_rowid='rowid'
                    )"""
                )
            conn.commit()
            return True
        except sqlite3.OperationalError as e:
            # e.g. "no such module: fts5" on builds without the extension
            logger.warning("kb_fts_unavailable", error=str(e))
            return False

    # ------------------------------------------------------------------
    # Version marker
    # ------------------------------------------------------------------

    def get_version(self) -> Optional[str]:
        row = self.fetch_one("SELECT value FROM kb_meta WHERE key = 'version'")
        return row["value"] if row else None

    def set_version(self, version: str) -> None:
        with self._lock:
            if self._conn is None:
                return
            with self._conn:
                self._conn.execute(
                    """INSERT INTO kb_meta (key, value, updated_at)
                       VALUES ('version', ?, datetime('now'))
                       ON CONFLICT(key) DO UPDATE
                       SET value = excluded.value, updated_at = datetime('now')""",
                    (version,),
                )

    # ------------------------------------------------------------------
    # Bulk replace
    # ------------------------------------------------------------------

    def replace_facts(self, kind: FactKind, facts: Sequence) -> int:
        """Replace every row of ``kind`` and rebuild its index atomically.

        Returns the number of rows inserted. On any row error the transaction
        is rolled back, prior contents remain, and KnowledgeStoreError is raised.
        """
        meta = TABLES[kind]
        columns = meta["columns"]
        placeholders = ", ".join("?" for _ in columns)
        insert_sql = f"INSERT INTO {meta['table']} ({', '.join(columns)}) VALUES ({placeholders})"

        with self._lock:
            if self._conn is None:
                return 0
            conn = self._conn
            try:
                conn.execute("BEGIN")
                conn.execute(f"DELETE FROM {meta['table']}")
                for fact in facts:
                    conn.execute(insert_sql, _row_values(kind, fact))
                if self.fts_enabled:
                    conn.execute(f"INSERT INTO {meta['fts']}({meta['fts']}) VALUES('rebuild')")
                conn.execute("COMMIT")
            except (sqlite3.Error, AttributeError, TypeError, ValueError) as e:
                if conn.in_transaction:
                    conn.rollback()
                logger.error("kb_replace_failed", kind=kind.value, error=str(e))
                raise KnowledgeStoreError(f"Failed to replace {kind.value} facts: {e}") from e

        logger.debug("kb_replace_done", kind=kind.value, count=len(facts))
        return len(facts)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_one(self, sql: str, params: Sequence = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            if self._conn is None:
                return None
            return self._conn.execute(sql, params).fetchone()

    def fetch_all(self, sql: str, params: Sequence = ()) -> list[sqlite3.Row]:
        with self._lock:
            if self._conn is None:
                return []
            return self._conn.execute(sql, params).fetchall()

    def fts_query(self, kind: FactKind, match: str, limit: int) -> list[sqlite3.Row]:
        """BM25-ranked rows of ``kind`` whose index matches ``match``.

        Raises sqlite3.Error for malformed expressions; callers fall back.
        """
        if not self.fts_enabled:
            return []
        meta = TABLES[kind]
        sql = f"""
            SELECT t.* FROM {meta['table']} t
            JOIN {meta['fts']} ON t.rowid = {meta['fts']}.rowid
            WHERE {meta['fts']} MATCH ?
            ORDER BY bm25({meta['fts']})
            LIMIT ?
        """
        return self.fetch_all(sql, (match, limit))

    def like_query(
        self, kind: FactKind, columns: Sequence[str], needle: str, limit: int
    ) -> list[sqlite3.Row]:
        """Rows of ``kind`` where any column contains ``needle`` (case-insensitive)."""
        escaped = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        where = " OR ".join(f"{c} LIKE ? ESCAPE '\\'" for c in columns)
        sql = f"SELECT * FROM {TABLES[kind]['table']} WHERE {where} LIMIT ?"
        return self.fetch_all(sql, (*([pattern] * len(columns)), limit))

    def count(self, kind: FactKind) -> int:
        row = self.fetch_one(f"SELECT COUNT(*) AS count FROM {TABLES[kind]['table']}")
        return row["count"] if row else 0

    def stats(self) -> KbStats:
        return KbStats(
            foods=self.count(FactKind.FOOD),
            symptoms=self.count(FactKind.SYMPTOM),
            emotional=self.count(FactKind.EMOTIONAL),
            emergencies=self.count(FactKind.EMERGENCY),
        )
