"""Rule-based intent classification for user messages.

Categories are checked in a fixed priority order and the first match wins:
emergency, symptom, food, emotional. Emergency phrasing always overrides a
topical match (a message about eating crab after the water breaks is an
emergency, not a food question).
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Intent(str, Enum):
    EMERGENCY = "emergency"
    SYMPTOM = "symptom"
    FOOD = "food"
    EMOTIONAL = "emotional"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class IntentResult:
    intent: Optional[Intent] = None
    keywords: list[str] = field(default_factory=list)
    confidence: Confidence = Confidence.LOW


EMERGENCY_KEYWORDS = [
    "破水", "大出血", "昏倒", "昏迷", "120", "急救", "抽搐",
    "胎动消失", "剧烈腹痛", "晕厥", "失去意识", "高烧不退",
]

SYMPTOM_KEYWORDS = [
    "疼", "痛", "出血", "发烧", "恶心", "呕吐", "宫缩",
    "胎动", "头晕", "水肿", "便秘", "腹泻", "失眠", "瘙痒",
]

FOOD_KEYWORDS = ["能吃", "可以吃", "安全吗", "能喝", "孕妇吃", "孕妇能吃", "孕妇能喝"]

FOOD_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"能吃.+吗"), "能吃X吗"),
    (re.compile(r"可以吃.+吗"), "可以吃X吗"),
    (re.compile(r"吃.+安全"), "X安全"),
    (re.compile(r"能喝.+吗"), "能喝X吗"),
    (re.compile(r"孕妇.*吃"), "孕妇吃"),
    (re.compile(r"孕妇.*喝"), "孕妇喝"),
]

EMOTIONAL_KEYWORDS = [
    "烦躁", "哭", "心情", "情绪", "吵架", "焦虑", "抑郁",
    "害怕", "担心", "压力", "崩溃", "委屈", "生气", "发脾气",
]


def _match_keywords(text: str, keywords: list[str]) -> list[str]:
    return [k for k in keywords if k in text]


def _tiered(matches: list[str]) -> Confidence:
    return Confidence.HIGH if len(matches) > 1 else Confidence.MEDIUM


def detect_food(text: str) -> list[str]:
    """Food keywords and pattern labels found in ``text``, deduplicated in order."""
    labels = _match_keywords(text, FOOD_KEYWORDS)
    labels += [label for pattern, label in FOOD_PATTERNS if pattern.search(text)]
    return list(dict.fromkeys(labels))


def detect_intent(text: str) -> IntentResult:
    """Classify ``text`` into at most one intent."""
    normalized = (text or "").strip().lower()
    if not normalized:
        return IntentResult()

    emergency = _match_keywords(normalized, EMERGENCY_KEYWORDS)
    if emergency:
        return IntentResult(Intent.EMERGENCY, emergency, Confidence.HIGH)

    symptom = _match_keywords(normalized, SYMPTOM_KEYWORDS)
    if symptom:
        return IntentResult(Intent.SYMPTOM, symptom, _tiered(symptom))

    food = detect_food(normalized)
    if food:
        return IntentResult(Intent.FOOD, food, _tiered(food))

    emotional = _match_keywords(normalized, EMOTIONAL_KEYWORDS)
    if emotional:
        return IntentResult(Intent.EMOTIONAL, emotional, _tiered(emotional))

    return IntentResult()
