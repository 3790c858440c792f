from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .core import RetryPolicy


# --- Helpers for env values ---------------------------------------------------


def env_flag(name: str, explicit: Optional[bool] = None) -> bool:
    if explicit is not None:
        return explicit
    return os.getenv(name, "").lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    if raw.lower() in {"none", "off"}:
        return None
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


# --- Settings -----------------------------------------------------------------


@dataclass(frozen=True)
class Settings:
    base_url: str = "http://web:8080"
    health_path: str = "/status"
    register_path: str = "/register"
    confirm_path: str = "/confirm"
    token_path: str = "/oauth/token"
    user_path: str = "/user"
    client_id: Optional[str] = None
    auth_scheme: str = "Bearer"
    request_timeout: Optional[float] = 10.0
    max_attempts: int = 10
    attempt_timeout: Optional[float] = 5.0
    poll_delay: float = 0.1

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``READINESS_*`` environment variables."""
        d = cls()
        return cls(
            base_url=os.getenv("READINESS_BASE_URL", d.base_url),
            health_path=os.getenv("READINESS_HEALTH_PATH", d.health_path),
            register_path=os.getenv("READINESS_REGISTER_PATH", d.register_path),
            confirm_path=os.getenv("READINESS_CONFIRM_PATH", d.confirm_path),
            token_path=os.getenv("READINESS_TOKEN_PATH", d.token_path),
            user_path=os.getenv("READINESS_USER_PATH", d.user_path),
            client_id=os.getenv("READINESS_CLIENT_ID") or None,
            auth_scheme=os.getenv("READINESS_AUTH_SCHEME", d.auth_scheme),
            request_timeout=_env_float("READINESS_REQUEST_TIMEOUT", d.request_timeout),
            max_attempts=_env_int("READINESS_MAX_ATTEMPTS", d.max_attempts),
            attempt_timeout=_env_float("READINESS_ATTEMPT_TIMEOUT", d.attempt_timeout),
            poll_delay=_env_float("READINESS_POLL_DELAY", d.poll_delay) or 0.0,
        )

    def retry_policy(self, label: str = "poll") -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            per_attempt_timeout=self.attempt_timeout,
            label=label,
            delay=self.poll_delay,
        )
