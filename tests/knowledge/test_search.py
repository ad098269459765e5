"""Tests for knowledge search: FTS5 ranking, substring fallback, lookups."""

import sqlite3
from unittest.mock import patch

import pytest

from knowledge import FactKind, KnowledgeSearch, KnowledgeStore, SafetyLevel, Seeder
from knowledge.search import normalize_query, to_fts5_query


class TestQueryHelpers:
    def test_normalize(self):
        assert normalize_query("  Crab ") == "crab"
        assert normalize_query(None) == ""

    def test_fts_phrase(self):
        assert to_fts5_query("螃蟹") == '"螃蟹"'

    @pytest.mark.parametrize("raw", ['"', "-*()", "^~:"])
    def test_fts_special_only(self, raw):
        assert to_fts5_query(raw) == ""

    def test_fts_special_stripped(self):
        assert to_fts5_query('cra"b -(x)') == '"cra b x"'


class TestSearch:
    def test_food_by_name(self, search):
        result = search.search_food("螃蟹")
        assert [f.name for f in result.items] == ["螃蟹"]
        assert result.items[0].safety_level == SafetyLevel.CAUTION
        assert result.total_matches == 1
        assert result.query == "螃蟹"

    def test_food_english_case_insensitive(self, search):
        result = search.search_food("CRAB")
        assert [f.name for f in result.items] == ["螃蟹"]

    def test_food_substring_fallback(self, search):
        # "三文鱼" is not a whole token of "三文鱼刺身"
        result = search.search_food("三文鱼")
        assert [f.name for f in result.items] == ["三文鱼刺身"]
        assert result.items[0].safety_level == SafetyLevel.AVOID

    def test_food_by_category(self, search):
        result = search.search_food("海鲜", limit=5)
        assert {f.name for f in result.items} == {"螃蟹", "三文鱼刺身"}

    def test_limit_respected(self, search):
        assert len(search.search_food("海鲜", limit=1).items) == 1

    @pytest.mark.parametrize("limit", [0, -3])
    def test_non_positive_limit(self, search, limit):
        assert search.search_food("螃蟹", limit=limit).items == []

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_empty_query(self, search, query):
        result = search.search_food(query)
        assert result.items == []
        assert result.total_matches == 0

    def test_no_match(self, search):
        assert search.search_food("榴莲").items == []

    @pytest.mark.parametrize("query", ['"', "螃蟹*", "(a OR b", "NEAR(", "^~:"])
    def test_special_characters_never_raise(self, search, query):
        search.search_food(query)

    def test_symptom(self, search):
        result = search.search_symptom("头痛")
        assert [s.id for s in result.items] == ["symptom_headache"]
        assert result.items[0].decision_paths[0].action == "今天联系医生"

    def test_symptom_english(self, search):
        result = search.search_symptom("bleeding")
        assert [s.id for s in result.items] == ["symptom_bleeding"]

    def test_emotional_by_trigger(self, search):
        result = search.search_emotional("睡眠不足")
        assert [e.id for e in result.items] == ["emotional_irritable"]
        assert result.items[0].follow_up_actions == "准备她爱吃的；主动分担家务"

    def test_emergency(self, search):
        result = search.search_emergency("破水")
        assert len(result.items) == 1
        emergency = result.items[0]
        assert emergency.id == "emergency_water_break"
        assert emergency.immediate_actions == ["让她平躺", "垫高臀部", "拨打120"]
        assert emergency.when_to_call_ambulance == []

    def test_dispatch_uses_configured_limits(self, seeded_store):
        search = KnowledgeSearch(seeded_store, limits={FactKind.FOOD: 1})
        assert len(search.search(FactKind.FOOD, "海鲜").items) == 1
        assert search.limits[FactKind.SYMPTOM] == 3

    def test_fts_error_falls_back(self, search):
        with patch.object(search.store, "fts_query", side_effect=sqlite3.OperationalError("fts5: syntax error")):
            result = search.search_food("螃蟹")
        assert [f.name for f in result.items] == ["螃蟹"]

    def test_fts_disabled_uses_fallback(self, search):
        search.store.fts_enabled = False
        assert [f.name for f in search.search_food("螃蟹").items] == ["螃蟹"]

    def test_closed_store(self):
        store = KnowledgeStore()
        search = KnowledgeSearch(store)
        assert search.search_food("螃蟹").items == []
        assert search.get_food_by_name("螃蟹") is None

    def test_literal_wildcards_do_not_match_everything(self, search):
        assert search.search_food("%").items == []
        assert search.search_food("_").items == []


class TestLookups:
    def test_food_by_name_round_trip(self, search):
        food = search.get_food_by_name("三文鱼刺身")
        assert food.safety_level == SafetyLevel.AVOID
        assert food.id == "food_三文鱼刺身"
        assert food.reason == "生食有李斯特菌和寄生虫风险"

    def test_food_by_english_name(self, search):
        assert search.get_food_by_name("Yogurt").name == "酸奶"

    def test_food_missing(self, search):
        assert search.get_food_by_name("不存在") is None

    def test_foods_by_category_ordered(self, search):
        foods = search.get_foods_by_category("海鲜")
        # AVOID sorts before CAUTION
        assert [f.name for f in foods] == ["三文鱼刺身", "螃蟹"]

    def test_find_foods_in_text(self, search):
        foods = search.find_foods_in_text("孕妇能吃螃蟹吗")
        assert [f.name for f in foods] == ["螃蟹"]

    def test_find_foods_in_text_english(self, search):
        foods = search.find_foods_in_text("Is yogurt ok?")
        assert [f.name for f in foods] == ["酸奶"]

    def test_find_foods_in_text_empty(self, search):
        assert search.find_foods_in_text("") == []
        assert search.find_foods_in_text("今天天气不错") == []

    def test_symptom_by_id_keeps_triggers(self, search):
        symptom = search.get_symptom_by_id("symptom_bleeding")
        assert symptom.questions[0] == "出血量多吗？"
        assert symptom.decision_paths[0].triggers[0].kind.value == "ANY_YES"

    def test_emotional_and_emergency_by_id(self, search):
        assert search.get_emotional_by_id("emotional_irritable").scenario_name == "她突然烦躁发脾气"
        assert search.get_emergency_by_id("emergency_water_break").emergency_name == "破水"
        assert search.get_emergency_by_id("nope") is None

    def test_all_emergencies_and_symptoms(self, search):
        assert [e.id for e in search.get_all_emergencies()] == ["emergency_water_break"]
        assert [s.id for s in search.list_symptoms()] == ["symptom_bleeding", "symptom_headache"]


def test_bundled_crab_end_to_end(tmp_path):
    """Seed the shipped data and look up the crab entry by name."""
    store = KnowledgeStore(tmp_path / "kb.db").open()
    try:
        assert Seeder(store).seed().success
        result = KnowledgeSearch(store).search_food("螃蟹", 5)
        assert result.items
        assert result.items[0].name == "螃蟹"
        assert result.items[0].safety_level == SafetyLevel.CAUTION
    finally:
        store.close()
