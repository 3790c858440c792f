from .core import poll, RetryPolicy
from .errors import (
    Aborted,
    Exhausted,
    PollError,
    ProbeError,
    ProbeTimeout,
    ReadinessError,
    RequestError,
)
from .otel_runtime import poll_traced_optional
from .probes import json_field_probe, wait_until_up
from .types import Failure, Success

__all__ = [
    "poll",
    "poll_traced_optional",
    "RetryPolicy",
    "Success",
    "Failure",
    "json_field_probe",
    "wait_until_up",
    "ReadinessError",
    "ProbeError",
    "ProbeTimeout",
    "PollError",
    "Exhausted",
    "Aborted",
    "RequestError",
]

__version__ = "1.0.0"
