"""Tests for pregnancy progress helpers."""

from datetime import date, timedelta

import pytest

from assistant.pregnancy import (
    BABY_SIZES,
    PregnancyContext,
    calculate_pregnancy_progress,
    due_date_from_last_period,
    get_baby_size,
    get_trimester,
    get_trimester_name,
)

TODAY = date(2026, 1, 1)


@pytest.mark.parametrize("week,trimester", [(1, 1), (13, 1), (14, 2), (27, 2), (28, 3), (40, 3)])
def test_trimester_boundaries(week, trimester):
    assert get_trimester(week) == trimester


def test_trimester_names():
    assert get_trimester_name(2) == "孕中期"
    assert get_trimester_name(9) == ""


def test_baby_size_table_complete():
    assert sorted(BABY_SIZES) == list(range(1, 41))


def test_baby_size_clamped():
    assert get_baby_size(0) == BABY_SIZES[1]
    assert get_baby_size(45) == BABY_SIZES[40]
    assert get_baby_size(20).comparison == "一根香蕉"


def test_progress_mid_pregnancy():
    progress = calculate_pregnancy_progress(TODAY + timedelta(days=100), today=TODAY)
    assert progress.current_week == 26
    assert progress.current_day == 6
    assert progress.trimester == 2
    assert progress.days_until_due == 100
    assert progress.total_days == 180
    assert progress.progress_percent == 64.3


def test_progress_on_due_date():
    progress = calculate_pregnancy_progress(TODAY, today=TODAY)
    assert progress.current_week == 40
    assert progress.days_until_due == 0
    assert progress.progress_percent == 100.0


def test_progress_overdue_clamped():
    progress = calculate_pregnancy_progress(TODAY - timedelta(days=10), today=TODAY)
    assert progress.current_week == 40
    assert progress.days_until_due == 0


def test_progress_before_conception_clamped():
    progress = calculate_pregnancy_progress(TODAY + timedelta(days=300), today=TODAY)
    assert progress.current_week == 1
    assert progress.total_days == 0
    assert progress.progress_percent == 0.0


def test_due_date_from_last_period():
    assert due_date_from_last_period(date(2026, 1, 1)) == date(2026, 10, 8)


def test_context_from_due_date():
    context = PregnancyContext.from_due_date(
        TODAY + timedelta(days=100), today=TODAY, warning_signs=["头痛伴视物模糊"]
    )
    assert (context.current_week, context.current_day, context.trimester) == (26, 6, 2)
    assert context.baby_size == BABY_SIZES[26]
    assert context.warning_signs == ["头痛伴视物模糊"]
