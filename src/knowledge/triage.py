"""Decision path evaluation for symptom questionnaires."""

from collections.abc import Sequence

import structlog

from .models import Decision, RuleTrigger, SymptomFact, TriggerKind, Urgency

logger = structlog.get_logger()

DEFAULT_SUGGESTION = "观察情况"

# Every rule of a tier also fires on its tier's catch-all.
TIER_CATCH_ALL = {
    Urgency.EMERGENCY: RuleTrigger(kind=TriggerKind.COUNT_TRUE_GTE, threshold=2),
    Urgency.CALL_DOCTOR: RuleTrigger(kind=TriggerKind.ANY_YES),
}

# Lower tiers in preference order; rules without triggers fire when every answer is "no".
DEFAULT_TIER = (Urgency.MONITOR, Urgency.NORMAL)
DEFAULT_TRIGGER = RuleTrigger(kind=TriggerKind.ALL_FALSE)


def normalize_answers(answers: Sequence[bool], question_count: int) -> list[bool]:
    """Align answers with the questions: missing answers count as "no"."""
    values = [a is True for a in answers]
    if question_count <= 0:
        return values
    return (values + [False] * question_count)[:question_count]


def evaluate_decision_path(symptom: SymptomFact, answers: Sequence[bool]) -> Decision:
    """Select the single rule that applies to a completed questionnaire.

    Tiers are walked from most to least severe; within a tier the first
    firing rule wins. MONITOR rules are tried before NORMAL ones; by
    default they fire when every answer is "no". If nothing fired, the last rule of
    the tree is returned as-is.
    """
    rules = symptom.decision_paths
    if not rules:
        return Decision(rule=None, urgency=Urgency.NORMAL, suggestion=DEFAULT_SUGGESTION)

    values = normalize_answers(answers, len(symptom.questions))

    for tier, catch_all in TIER_CATCH_ALL.items():
        for rule in rules:
            if rule.urgency != tier:
                continue
            if any(t.matches(values) for t in rule.triggers) or catch_all.matches(values):
                logger.debug("kb_decision_fired", symptom=symptom.id, tier=tier.value)
                return Decision(rule=rule, urgency=tier, suggestion=rule.action)

    for urgency in DEFAULT_TIER:
        for rule in rules:
            if rule.urgency != urgency:
                continue
            if any(t.matches(values) for t in rule.triggers or [DEFAULT_TRIGGER]):
                return Decision(rule=rule, urgency=urgency, suggestion=rule.action)

    fallback = rules[-1]
    return Decision(rule=fallback, urgency=fallback.urgency, suggestion=fallback.action)
