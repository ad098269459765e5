"""Versioned seeding of the knowledge store from bundled JSON releases."""

import json
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError

from .errors import KnowledgeBaseError, SeedDataError
from .models import FACT_MODELS, FactKind, KbStats
from .store import KnowledgeStore

logger = structlog.get_logger()

# Bump to force a full reseed on next start.
KB_VERSION = "1.1.0"

DATA_DIR = Path(__file__).parent / "data"

DATA_FILES = {
    FactKind.FOOD: "foods.json",
    FactKind.SYMPTOM: "symptoms.json",
    FactKind.EMOTIONAL: "emotional.json",
    FactKind.EMERGENCY: "emergencies.json",
}


@dataclass
class SkippedRecord:
    kind: FactKind
    index: int
    reason: str


@dataclass
class FactBundle:
    """Validated facts for every kind, ready to hand to the store."""

    facts: dict[FactKind, list] = field(default_factory=lambda: {k: [] for k in FactKind})
    skipped: list[SkippedRecord] = field(default_factory=list)

    @classmethod
    def from_records(cls, records: dict[FactKind, list[dict]]) -> "FactBundle":
        """Parse raw records, skipping any that fail validation."""
        bundle = cls()
        for kind in FactKind:
            model = FACT_MODELS[kind]
            seen: set[str] = set()
            for i, raw in enumerate(records.get(kind) or []):
                try:
                    if not isinstance(raw, dict):
                        raise ValueError(f"expected object, got {type(raw).__name__}")
                    fact = model.model_validate(raw)
                except (ValidationError, ValueError) as e:
                    reason = str(e).splitlines()[0]
                    logger.warning("kb_seed_record_skipped", kind=kind.value, index=i, reason=reason)
                    bundle.skipped.append(SkippedRecord(kind, i, reason))
                    continue
                if fact.id in seen:
                    logger.warning("kb_seed_duplicate_skipped", kind=kind.value, index=i, id=fact.id)
                    bundle.skipped.append(SkippedRecord(kind, i, f"duplicate id {fact.id}"))
                    continue
                seen.add(fact.id)
                bundle.facts[kind].append(fact)
        return bundle

    @classmethod
    def load(cls, data_dir: Optional[str | Path] = None) -> "FactBundle":
        """Read the four JSON fact files from ``data_dir`` (bundled data by default)."""
        directory = Path(data_dir).expanduser() if data_dir else DATA_DIR
        records: dict[FactKind, list[dict]] = {}
        for kind, filename in DATA_FILES.items():
            path = directory / filename
            if not path.exists():
                logger.warning("kb_seed_file_missing", kind=kind.value, path=str(path))
                records[kind] = []
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                raise SeedDataError(f"Cannot read {path}: {e}") from e
            if not isinstance(data, list):
                raise SeedDataError(f"{path} must contain a JSON array")
            records[kind] = data
        return cls.from_records(records)

    def counts(self) -> dict[str, int]:
        return {k.value: len(v) for k, v in self.facts.items()}


@dataclass
class SeedReport:
    version: str
    seeded: bool = False
    success: bool = True
    counts: dict[str, int] = field(default_factory=dict)
    skipped: list[SkippedRecord] = field(default_factory=list)
    error: Optional[str] = None


class Seeder:
    """Brings the store to ``version`` once per version bump."""

    def __init__(
        self,
        store: KnowledgeStore,
        bundle: Optional[FactBundle] = None,
        version: str = KB_VERSION,
        data_dir: Optional[str | Path] = None,
    ):
        self.store = store
        self.version = version
        self._bundle = bundle
        self._data_dir = data_dir

    @property
    def bundle(self) -> FactBundle:
        if self._bundle is None:
            self._bundle = FactBundle.load(self._data_dir)
        return self._bundle

    def needs_seed(self) -> bool:
        return self.store.get_version() != self.version

    def seed(self, force: bool = False) -> SeedReport:
        """Replace all four kinds if the stored version differs.

        Failures are logged and reported, never raised; the version marker is
        only written after every kind was replaced.
        """
        report = SeedReport(version=self.version)

        if not self.store.is_open:
            logger.warning("kb_seed_skipped_store_closed")
            report.success = False
            report.error = "store not open"
            return report

        try:
            if not force and not self.needs_seed():
                logger.info("kb_seed_up_to_date", version=self.version)
                return report

            logger.info("kb_seed_start", version=self.version, force=force)
            bundle = self.bundle
            report.skipped = list(bundle.skipped)
            for kind in FactKind:
                report.counts[kind.value] = self.store.replace_facts(kind, bundle.facts[kind])
                logger.info("kb_seed_kind_done", kind=kind.value, count=report.counts[kind.value])
            self.store.set_version(self.version)
        except (KnowledgeBaseError, sqlite3.Error) as e:
            logger.error("kb_seed_failed", version=self.version, error=str(e))
            report.success = False
            report.error = str(e)
            return report

        report.seeded = True
        logger.info("kb_seed_complete", version=self.version, skipped=len(report.skipped))
        return report


@dataclass
class InitResult:
    success: bool
    stats: KbStats
    version: str
    report: Optional[SeedReport] = None


def initialize_knowledge_base(
    store: KnowledgeStore,
    bundle: Optional[FactBundle] = None,
    data_dir: Optional[str | Path] = None,
    force: bool = False,
) -> InitResult:
    """Open the store and seed it if needed. Never raises."""
    try:
        store.open()
    except Exception as e:
        logger.error("kb_init_failed", error=str(e))
        return InitResult(success=False, stats=KbStats(), version="")

    try:
        report = Seeder(store, bundle=bundle, data_dir=data_dir).seed(force=force)
        stats = store.stats()
    except Exception as e:
        logger.error("kb_init_failed", error=str(e))
        return InitResult(success=False, stats=KbStats(), version="")

    return InitResult(
        success=report.success,
        stats=stats,
        version=KB_VERSION if report.success else "",
        report=report,
    )
