"""Data models for the pregnancy knowledge base.

Facts are pydantic models so that the bundled JSON releases are parsed and
validated into typed shapes at seed time. Search results, intents and
decisions are plain dataclasses.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator


class FactKind(str, Enum):
    FOOD = "food"
    SYMPTOM = "symptom"
    EMOTIONAL = "emotional"
    EMERGENCY = "emergency"


class SafetyLevel(str, Enum):
    SAFE = "SAFE"
    CAUTION = "CAUTION"
    AVOID = "AVOID"


class Urgency(str, Enum):
    """Severity of a decision outcome, ordered NORMAL < ... < EMERGENCY."""

    NORMAL = "NORMAL"
    MONITOR = "MONITOR"
    CALL_DOCTOR = "CALL_DOCTOR"
    EMERGENCY = "EMERGENCY"

    @property
    def severity(self) -> int:
        return _URGENCY_ORDER.index(self)


_URGENCY_ORDER = [Urgency.NORMAL, Urgency.MONITOR, Urgency.CALL_DOCTOR, Urgency.EMERGENCY]


class TriggerKind(str, Enum):
    ANY_YES = "ANY_YES"
    INDEX_TRUE = "INDEX_TRUE"
    COUNT_TRUE_GTE = "COUNT_TRUE_GTE"
    ALL_FALSE = "ALL_FALSE"


def _empty_if_none(v):
    return "" if v is None else v


def _list_or_empty(v):
    if v is None:
        return []
    if isinstance(v, str):
        return [v] if v.strip() else []
    return v


class _Fact(BaseModel):
    model_config = {"extra": "ignore"}


# ---------------------------------------------------------------------------
# Food
# ---------------------------------------------------------------------------

_FOOD_ID_RE = re.compile(r"[^a-zA-Z0-9一-龥]")


def food_id_for(name: str) -> str:
    """Stable identity for a food fact, derived from its name."""
    return "food_" + _FOOD_ID_RE.sub("_", name)


class FoodFact(_Fact):
    id: str = ""
    name: str = Field(..., min_length=1)
    name_en: str = ""
    category: str = Field(..., min_length=1)
    safety_level: SafetyLevel
    reason: str = Field(..., min_length=1)
    dad_tip: str = ""
    trimester_notes: str = ""

    @field_validator("name_en", "dad_tip", "trimester_notes", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return _empty_if_none(v)

    @field_validator("safety_level", mode="before")
    @classmethod
    def upper_safety_level(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def derive_id(self):
        if not self.id:
            self.id = food_id_for(self.name)
        return self

    @property
    def search_text(self) -> str:
        return f"{self.name} {self.name_en} {self.category} {self.reason}"


# ---------------------------------------------------------------------------
# Symptom decision trees
# ---------------------------------------------------------------------------


class RuleTrigger(_Fact):
    """Structured firing condition for a decision rule."""

    kind: TriggerKind
    indices: list[int] = Field(default_factory=list)
    threshold: int = 1

    @model_validator(mode="after")
    def check_arguments(self):
        if self.kind == TriggerKind.INDEX_TRUE and not self.indices:
            raise ValueError("INDEX_TRUE trigger needs at least one index")
        if self.kind == TriggerKind.COUNT_TRUE_GTE and self.threshold < 1:
            raise ValueError("COUNT_TRUE_GTE threshold must be >= 1")
        return self

    def matches(self, answers: list[bool]) -> bool:
        if self.kind == TriggerKind.ANY_YES:
            return any(answers)
        if self.kind == TriggerKind.INDEX_TRUE:
            return any(0 <= i < len(answers) and answers[i] for i in self.indices)
        if self.kind == TriggerKind.COUNT_TRUE_GTE:
            return sum(1 for a in answers if a) >= self.threshold
        return bool(answers) and not any(answers)


class DecisionRule(_Fact):
    condition: str = ""
    action: str = Field(..., min_length=1)
    urgency: Urgency
    triggers: list[RuleTrigger] = Field(default_factory=list)

    @field_validator("urgency", mode="before")
    @classmethod
    def upper_urgency(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


# Legacy content only describes conditions in prose. These markers are read
# once at load time and turned into explicit triggers.
_ANY_YES_MARKERS = ("任一为是",)
_SIGHTING_MARKERS = ("看到", "脐带")
_DISCHARGE_OR_PRETERM_MARKERS = ("绿色", "棕色", "不足37周")
_PRETERM_MARKER = "不足37周"


def infer_triggers(rule: DecisionRule, question_count: int) -> list[RuleTrigger]:
    """Derive triggers for a rule authored without them."""
    cond = rule.condition.lower()
    triggers: list[RuleTrigger] = []

    if any(m in cond for m in _ANY_YES_MARKERS):
        triggers.append(RuleTrigger(kind=TriggerKind.ANY_YES))

    if rule.urgency == Urgency.EMERGENCY:
        if any(m in cond for m in _SIGHTING_MARKERS):
            triggers.append(RuleTrigger(kind=TriggerKind.INDEX_TRUE, indices=[1]))
        if any(m in cond for m in _DISCHARGE_OR_PRETERM_MARKERS):
            triggers.append(RuleTrigger(kind=TriggerKind.INDEX_TRUE, indices=[0, 2]))
    elif rule.urgency == Urgency.CALL_DOCTOR:
        if _PRETERM_MARKER in cond and question_count > 2:
            idx = 3 if question_count > 3 else 2
            triggers.append(RuleTrigger(kind=TriggerKind.INDEX_TRUE, indices=[idx]))
    else:
        triggers.append(RuleTrigger(kind=TriggerKind.ALL_FALSE))

    return triggers


class SymptomFact(_Fact):
    id: str = Field(..., min_length=1)
    symptom_name: str = Field(..., min_length=1)
    symptom_name_en: str = ""
    questions: list[str] = Field(default_factory=list)
    decision_paths: list[DecisionRule] = Field(..., min_length=1)
    dad_actions: list[str] = Field(default_factory=list)

    @field_validator("symptom_name_en", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return _empty_if_none(v)

    @field_validator("questions", "dad_actions", mode="before")
    @classmethod
    def coerce_lists(cls, v):
        return _list_or_empty(v)

    @model_validator(mode="after")
    def fill_triggers(self):
        rules = [
            r if r.triggers else r.model_copy(update={"triggers": infer_triggers(r, len(self.questions))})
            for r in self.decision_paths
        ]
        self.decision_paths = rules
        return self

    @property
    def search_text(self) -> str:
        return f"{self.symptom_name} {self.symptom_name_en}"


# ---------------------------------------------------------------------------
# Emotional scenarios
# ---------------------------------------------------------------------------


class EmotionalFact(_Fact):
    id: str = Field(..., min_length=1)
    scenario_name: str = Field(..., min_length=1)
    scenario_name_en: str = ""
    trigger: str = Field(..., min_length=1)
    wife_feeling: str = ""
    wrong_response: str = ""
    right_response: str = Field(..., min_length=1)
    follow_up_actions: str = ""

    @field_validator(
        "scenario_name_en", "wife_feeling", "wrong_response", "follow_up_actions", mode="before"
    )
    @classmethod
    def none_to_empty(cls, v):
        return _empty_if_none(v)

    @field_validator("follow_up_actions", mode="before")
    @classmethod
    def join_actions(cls, v):
        if isinstance(v, list):
            return "；".join(str(x) for x in v)
        return v

    @property
    def search_text(self) -> str:
        return f"{self.scenario_name} {self.scenario_name_en} {self.trigger} {self.wife_feeling}"


# ---------------------------------------------------------------------------
# Emergency procedures
# ---------------------------------------------------------------------------


class EmergencyFact(_Fact):
    id: str = Field(..., min_length=1)
    emergency_name: str = Field(..., min_length=1)
    emergency_name_en: str = ""
    recognition_signs: list[str] = Field(default_factory=list)
    immediate_actions: list[str] = Field(default_factory=list)
    what_not_to_do: list[str] = Field(default_factory=list)
    when_to_call_ambulance: list[str] = Field(default_factory=list)
    hospital_bag_items: list[str] = Field(default_factory=list)
    reassurance_script: str = ""

    @field_validator("emergency_name_en", "reassurance_script", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return _empty_if_none(v)

    @field_validator(
        "recognition_signs",
        "immediate_actions",
        "what_not_to_do",
        "when_to_call_ambulance",
        "hospital_bag_items",
        mode="before",
    )
    @classmethod
    def coerce_lists(cls, v):
        return _list_or_empty(v)

    @property
    def search_text(self) -> str:
        return f"{self.emergency_name} {self.emergency_name_en} {' '.join(self.recognition_signs)}"


FACT_MODELS: dict[FactKind, type[_Fact]] = {
    FactKind.FOOD: FoodFact,
    FactKind.SYMPTOM: SymptomFact,
    FactKind.EMOTIONAL: EmotionalFact,
    FactKind.EMERGENCY: EmergencyFact,
}


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

T = TypeVar("T")


@dataclass
class SearchResult(Generic[T]):
    items: list[T] = field(default_factory=list)
    query: str = ""
    total_matches: int = 0


@dataclass
class KbStats:
    foods: int = 0
    symptoms: int = 0
    emotional: int = 0
    emergencies: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "foods": self.foods,
            "symptoms": self.symptoms,
            "emotional": self.emotional,
            "emergencies": self.emergencies,
        }


@dataclass
class Decision:
    """Outcome of walking a symptom's decision rules."""

    rule: Optional[DecisionRule]
    urgency: Urgency
    suggestion: str
