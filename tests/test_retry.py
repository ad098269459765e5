"""Tests for the LLM retry decorator."""

import pytest

from cli.retry import llm_retry


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda s: None)


def test_retries_until_success():
    calls = []

    @llm_retry(max_attempts=3, min_wait=0, max_wait=0, exceptions=(ConnectionError,))
    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise ConnectionError("reset")
        return "ok"

    assert flaky() == "ok"
    assert len(calls) == 3


def test_reraises_after_max_attempts():
    calls = []

    @llm_retry(max_attempts=2, min_wait=0, max_wait=0, exceptions=(ConnectionError,))
    def always_fails():
        calls.append(1)
        raise ConnectionError("reset")

    with pytest.raises(ConnectionError):
        always_fails()
    assert len(calls) == 2


def test_other_exceptions_not_retried():
    calls = []

    @llm_retry(max_attempts=3, exceptions=(ConnectionError,))
    def bad_input():
        calls.append(1)
        raise ValueError("bad")

    with pytest.raises(ValueError):
        bad_input()
    assert len(calls) == 1
