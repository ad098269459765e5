"""Tests for symptom decision path evaluation."""

import pytest

from knowledge import FactBundle, FactKind, SymptomFact, Urgency, evaluate_decision_path
from knowledge.triage import DEFAULT_SUGGESTION, normalize_answers


@pytest.fixture
def bleeding(symptom_records):
    return SymptomFact.model_validate(symptom_records[0])


@pytest.fixture
def headache(symptom_records):
    return SymptomFact.model_validate(symptom_records[1])


@pytest.fixture(scope="module")
def bundled_symptoms():
    bundle = FactBundle.load()
    return {s.id: s for s in bundle.facts[FactKind.SYMPTOM]}


class TestNormalizeAnswers:
    def test_pads_missing_with_false(self):
        assert normalize_answers([True], 3) == [True, False, False]

    def test_truncates_extra(self):
        assert normalize_answers([False, False, True, True], 2) == [False, False]

    def test_non_bool_values_are_no(self):
        assert normalize_answers([1, "yes", None], 3) == [False, False, False]


class TestEvaluate:
    def test_any_yes_is_emergency(self, bleeding):
        decision = evaluate_decision_path(bleeding, [True, False, False])
        assert decision.urgency == Urgency.EMERGENCY
        assert decision.suggestion == "立即去医院"
        assert decision.rule is bleeding.decision_paths[0]

    def test_all_no_prefers_monitor(self, bleeding):
        decision = evaluate_decision_path(bleeding, [False, False, False])
        assert decision.urgency == Urgency.MONITOR
        assert decision.suggestion == "观察并联系医生"

    def test_all_no_falls_back_to_normal(self, headache):
        decision = evaluate_decision_path(headache, [False, False])
        assert decision.urgency == Urgency.NORMAL
        assert decision.suggestion == "休息补水"

    def test_call_doctor_tier(self, headache):
        decision = evaluate_decision_path(headache, [False, True])
        assert decision.urgency == Urgency.CALL_DOCTOR

    def test_short_answers_padded(self, bleeding):
        assert evaluate_decision_path(bleeding, []).urgency == Urgency.MONITOR
        assert evaluate_decision_path(bleeding, [True]).urgency == Urgency.EMERGENCY

    def test_extra_answers_ignored(self, headache):
        # Third answer has no question and must not count
        decision = evaluate_decision_path(headache, [False, False, True])
        assert decision.urgency == Urgency.NORMAL

    def test_two_yes_hits_emergency_catch_all(self):
        symptom = SymptomFact(
            id="s",
            symptom_name="x",
            questions=["a", "b", "c"],
            decision_paths=[
                {"condition": "两项及以上为是", "action": "去医院", "urgency": "EMERGENCY",
                 "triggers": [{"kind": "INDEX_TRUE", "indices": [2]}]},
                {"condition": "其他", "action": "联系医生", "urgency": "CALL_DOCTOR"},
            ],
        )
        assert evaluate_decision_path(symptom, [True, True, False]).urgency == Urgency.EMERGENCY
        assert evaluate_decision_path(symptom, [True, False, False]).urgency == Urgency.CALL_DOCTOR

    def test_first_rule_in_tier_wins(self):
        symptom = SymptomFact(
            id="s",
            symptom_name="x",
            questions=["a", "b"],
            decision_paths=[
                {"action": "first", "urgency": "EMERGENCY", "triggers": [{"kind": "ANY_YES"}]},
                {"action": "second", "urgency": "EMERGENCY", "triggers": [{"kind": "ANY_YES"}]},
            ],
        )
        assert evaluate_decision_path(symptom, [True, False]).suggestion == "first"

    def test_fallback_to_last_rule(self):
        symptom = SymptomFact(
            id="s",
            symptom_name="x",
            questions=["a"],
            decision_paths=[
                {"action": "urgent", "urgency": "EMERGENCY", "triggers": [{"kind": "INDEX_TRUE", "indices": [3]}]},
                {"action": "last", "urgency": "CALL_DOCTOR", "triggers": [{"kind": "INDEX_TRUE", "indices": [3]}]},
            ],
        )
        decision = evaluate_decision_path(symptom, [False])
        assert decision.suggestion == "last"
        assert decision.urgency == Urgency.CALL_DOCTOR

    def test_authored_monitor_trigger_fires(self):
        symptom = SymptomFact(
            id="s",
            symptom_name="x",
            questions=["a", "b"],
            decision_paths=[
                {"action": "watch", "urgency": "MONITOR",
                 "triggers": [{"kind": "INDEX_TRUE", "indices": [0]}]},
                {"action": "rest", "urgency": "NORMAL"},
            ],
        )
        decision = evaluate_decision_path(symptom, [True, False])
        assert decision.urgency == Urgency.MONITOR
        assert decision.suggestion == "watch"
        # Authored trigger replaces the all-no default
        assert evaluate_decision_path(symptom, [False, False]).suggestion == "rest"

    def test_monitor_preferred_over_normal_when_both_fire(self):
        symptom = SymptomFact(
            id="s",
            symptom_name="x",
            questions=["a"],
            decision_paths=[
                {"action": "rest", "urgency": "NORMAL"},
                {"action": "watch", "urgency": "MONITOR"},
            ],
        )
        assert evaluate_decision_path(symptom, [False]).suggestion == "watch"

    def test_no_rules(self):
        symptom = SymptomFact.model_construct(id="s", symptom_name="x", questions=[], decision_paths=[])
        decision = evaluate_decision_path(symptom, [True])
        assert decision.rule is None
        assert decision.urgency == Urgency.NORMAL
        assert decision.suggestion == DEFAULT_SUGGESTION


class TestBundledTrees:
    def test_water_leak_cord_seen(self, bundled_symptoms):
        decision = evaluate_decision_path(bundled_symptoms["symptom_water_leak"], [False, True, False, False])
        assert decision.urgency == Urgency.EMERGENCY
        assert "脐带" in decision.suggestion

    def test_water_leak_preterm(self, bundled_symptoms):
        decision = evaluate_decision_path(bundled_symptoms["symptom_water_leak"], [False, False, True, False])
        assert decision.urgency == Urgency.EMERGENCY
        assert decision.suggestion == "立即去医院，途中保持平躺"

    def test_water_leak_contractions_only(self, bundled_symptoms):
        decision = evaluate_decision_path(bundled_symptoms["symptom_water_leak"], [False, False, False, True])
        assert decision.urgency == Urgency.CALL_DOCTOR
        assert decision.suggestion == "马上联系医生并准备出发"

    def test_headache_two_signs(self, bundled_symptoms):
        decision = evaluate_decision_path(bundled_symptoms["symptom_headache"], [True, True, False])
        assert decision.urgency == Urgency.EMERGENCY

    def test_bleeding_all_no(self, bundled_symptoms):
        decision = evaluate_decision_path(bundled_symptoms["symptom_bleeding"], [False, False, False])
        assert decision.urgency == Urgency.MONITOR
