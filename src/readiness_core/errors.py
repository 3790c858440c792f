from __future__ import annotations
from typing import Optional


class ReadinessError(Exception):
    """Base class for everything raised by readiness-core."""


class ProbeError(ReadinessError):
    """A single probe attempt failed; the poller recovers from it."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProbeTimeout(ProbeError):
    def __init__(self, timeout_s: float):
        super().__init__(f"probe did not finish within {timeout_s}s")
        self.timeout_s = timeout_s


class PollError(ReadinessError):
    def __init__(self, label: str, last_error: Optional[BaseException], attempts: int):
        self.label = label
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(self._message())

    def _message(self) -> str:
        return f"{self.label}: polling failed after {self.attempts} attempt(s): {self.last_error!r}"


class Exhausted(PollError):
    """Raised when every allowed attempt failed."""

    def _message(self) -> str:
        return f"{self.label}: gave up after {self.attempts} attempt(s), last error: {self.last_error!r}"


class Aborted(PollError):
    """Raised when the classifier marked a failure as non-transient."""

    def _message(self) -> str:
        return f"{self.label}: stopped after {self.attempts} attempt(s) on non-transient error: {self.last_error!r}"


class RequestError(ReadinessError):
    """A one-shot (non-retried) HTTP or OAuth2 call failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        kind: Optional[str] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.kind = kind
        self.body = body
