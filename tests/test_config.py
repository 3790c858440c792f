from __future__ import annotations
import pytest
from readiness_core.config import Settings, env_flag


def test_defaults_without_env(monkeypatch):
    for name in ("READINESS_BASE_URL", "READINESS_MAX_ATTEMPTS", "READINESS_ATTEMPT_TIMEOUT", "READINESS_CLIENT_ID"):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.base_url == "http://web:8080"
    assert s.max_attempts == 10
    assert s.attempt_timeout == 5.0
    assert s.client_id is None


def test_reads_env(monkeypatch):
    monkeypatch.setenv("READINESS_BASE_URL", "http://localhost:8080")
    monkeypatch.setenv("READINESS_TOKEN_PATH", "/token")
    monkeypatch.setenv("READINESS_CLIENT_ID", "cli")
    monkeypatch.setenv("READINESS_MAX_ATTEMPTS", "3")
    monkeypatch.setenv("READINESS_ATTEMPT_TIMEOUT", "none")
    monkeypatch.setenv("READINESS_POLL_DELAY", "0.5")
    s = Settings.from_env()
    assert s.base_url == "http://localhost:8080"
    assert s.token_path == "/token"
    assert s.client_id == "cli"
    assert s.max_attempts == 3
    assert s.attempt_timeout is None
    assert s.poll_delay == 0.5


def test_retry_policy_from_settings():
    p = Settings(max_attempts=4, attempt_timeout=2.0, poll_delay=0.3).retry_policy(label="web up?")
    assert (p.max_attempts, p.per_attempt_timeout, p.delay, p.label) == (4, 2.0, 0.3, "web up?")
    assert p.backoff == 1.0


@pytest.mark.parametrize("raw, expected", [("1", True), ("on", True), ("TRUE", True), ("0", False), ("", False)])
def test_env_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("READINESS_SOME_FLAG", raw)
    assert env_flag("READINESS_SOME_FLAG") is expected
    assert env_flag("READINESS_SOME_FLAG", explicit=False) is False
