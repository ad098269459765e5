"""Shared test fixtures for the Bansheng knowledge base."""

import sys
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def food_records():
    return [
        {
            "name": "螃蟹",
            "name_en": "Crab",
            "category": "海鲜",
            "safety_level": "CAUTION",
            "reason": "性寒，孕早期少吃；须彻底煮熟",
            "dad_tip": "买活蟹现做",
        },
        {
            "name": "三文鱼刺身",
            "name_en": "Salmon sashimi",
            "category": "海鲜",
            "safety_level": "AVOID",
            "reason": "生食有李斯特菌和寄生虫风险",
        },
        {
            "name": "酸奶",
            "name_en": "Yogurt",
            "category": "乳制品",
            "safety_level": "SAFE",
            "reason": "补钙，选巴氏杀菌产品",
        },
    ]


@pytest.fixture
def symptom_records():
    return [
        {
            "id": "symptom_bleeding",
            "symptom_name": "阴道出血",
            "symptom_name_en": "Vaginal bleeding",
            "questions": ["出血量多吗？", "伴有腹痛吗？", "是否超过一片卫生巾？"],
            "decision_paths": [
                {"condition": "任一为是", "action": "立即去医院", "urgency": "EMERGENCY"},
                {"condition": "少量褐色分泌物", "action": "观察并联系医生", "urgency": "MONITOR"},
            ],
            "dad_actions": ["记录出血时间和颜色"],
        },
        {
            "id": "symptom_headache",
            "symptom_name": "头痛",
            "symptom_name_en": "Headache",
            "questions": ["伴有视物模糊吗？", "血压高吗？"],
            "decision_paths": [
                {"condition": "任一为是", "action": "今天联系医生", "urgency": "CALL_DOCTOR"},
                {"condition": "都为否", "action": "休息补水", "urgency": "NORMAL"},
            ],
        },
    ]


@pytest.fixture
def emotional_records():
    return [
        {
            "id": "emotional_irritable",
            "scenario_name": "她突然烦躁发脾气",
            "trigger": "激素波动、睡眠不足",
            "wife_feeling": "自己也控制不住",
            "wrong_response": "你怎么又这样",
            "right_response": "我在，想说就说，不想说我陪着你",
            "follow_up_actions": ["准备她爱吃的", "主动分担家务"],
        }
    ]


@pytest.fixture
def emergency_records():
    return [
        {
            "id": "emergency_water_break",
            "emergency_name": "破水",
            "emergency_name_en": "Water breaking",
            "recognition_signs": ["液体持续流出", "无法控制"],
            "immediate_actions": ["让她平躺", "垫高臀部", "拨打120"],
            "what_not_to_do": ["不要让她走动"],
            "reassurance_script": "我在，已经叫车了",
        }
    ]


@pytest.fixture
def fact_records(food_records, symptom_records, emotional_records, emergency_records):
    from knowledge import FactKind

    return {
        FactKind.FOOD: food_records,
        FactKind.SYMPTOM: symptom_records,
        FactKind.EMOTIONAL: emotional_records,
        FactKind.EMERGENCY: emergency_records,
    }


@pytest.fixture
def bundle(fact_records):
    from knowledge import FactBundle

    return FactBundle.from_records(fact_records)


@pytest.fixture
def store(tmp_path):
    """Open, empty store backed by a temp file."""
    from knowledge import KnowledgeStore

    kb = KnowledgeStore(tmp_path / "kb.db").open()
    yield kb
    kb.close()


@pytest.fixture
def seeded_store(store, bundle):
    from knowledge import Seeder

    report = Seeder(store, bundle=bundle).seed()
    assert report.success
    return store


@pytest.fixture
def search(seeded_store):
    from knowledge import KnowledgeSearch

    return KnowledgeSearch(seeded_store)


@pytest.fixture
def pregnancy_context():
    from assistant import PregnancyContext

    # 280 - 100 = 180 days in: week 26, day 6
    return PregnancyContext.from_due_date(date(2026, 4, 11), today=date(2026, 1, 1))


@pytest.fixture
def mock_provider():
    provider = MagicMock()
    provider.generate.return_value = "Mocked assistant reply."
    return provider
