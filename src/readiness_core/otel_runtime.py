from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from . import otel_setup
from .config import env_flag
from .core import RetryPolicy, poll
from .errors import PollError


# --- Helpers for env flags ----------------------------------------------------


def _otel_enabled(explicit: Optional[bool]) -> bool:
    return env_flag("READINESS_OTEL_ENABLED", explicit)


def _metrics_enabled() -> bool:
    return env_flag("READINESS_OTEL_METRICS_ENABLED")


# --- Metrics plumbing (lazy / optional) --------------------------------------

_polls_counter = None
_attempts_counter = None
_duration_histogram = None
_metrics_instruments_ready = False


def _ensure_metrics() -> None:
    """
    Lazily create metric instruments if metrics are enabled and OTEL is available.
    Safe to call multiple times.
    """
    global _polls_counter, _attempts_counter, _duration_histogram, _metrics_instruments_ready

    if _metrics_instruments_ready or not _metrics_enabled():
        return

    meter = otel_setup.get_meter(__name__)
    if meter is None:
        return

    _polls_counter = meter.create_counter(
        "readiness_polls_total",
        description="Total number of readiness polls.",
    )
    _attempts_counter = meter.create_counter(
        "readiness_attempts_total",
        description="Total number of probe attempts (including retries).",
    )
    _duration_histogram = meter.create_histogram(
        "readiness_poll_duration_seconds",
        description="Time until a poll succeeded or gave up.",
        unit="s",
    )

    _metrics_instruments_ready = True


# --- Traced polling -----------------------------------------------------------


async def poll_traced_optional(
    probe: Callable[..., Any] | Callable[..., Awaitable[Any]],
    policy: Optional[RetryPolicy] = None,
    *,
    args: Tuple[Any, ...] = (),
    kwargs: Optional[Dict[str, Any]] = None,
    classifier: Optional[Callable[[BaseException], bool]] = None,
    pre_attempt: Optional[Callable[[], Awaitable[None]]] = None,
    otel_enabled: Optional[bool] = None,  # None -> read env READINESS_OTEL_ENABLED
    span_name: str = "readiness.poll",
    base_attrs: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Poll with tracing *if* OpenTelemetry is installed and enabled.
    Otherwise, falls back to plain `poll()`.

    When READINESS_OTEL_METRICS_ENABLED=1 (and OTEL metrics are available),
    this also emits:
      - readiness_polls_total
      - readiness_attempts_total
      - readiness_poll_duration_seconds
    """
    policy = policy or RetryPolicy()
    plain = dict(args=args, kwargs=kwargs, classifier=classifier, pre_attempt=pre_attempt)

    if not _otel_enabled(otel_enabled):
        return await poll(probe, policy, **plain)

    # Lazy import so this module stays importable without otel deps
    try:
        from opentelemetry.trace import SpanKind, Status, StatusCode
    except ImportError:
        return await poll(probe, policy, **plain)

    tracer = otel_setup.get_tracer(__name__)

    _ensure_metrics()
    metrics_active = _metrics_instruments_ready and _metrics_enabled()

    attrs = {
        "readiness.label": policy.label,
        "readiness.max_attempts": policy.max_attempts,
        "readiness.per_attempt_timeout": policy.per_attempt_timeout,
        "readiness.delay": policy.delay,
        "readiness.backoff": policy.backoff,
    }
    if base_attrs:
        attrs.update(base_attrs)
    metric_attrs_base = {"readiness.label": policy.label}

    attempt_events = {"n": 0}
    start = time.perf_counter()

    def record(outcome: str) -> None:
        if metrics_active and _polls_counter is not None and _duration_histogram is not None:
            metric_attrs = {**metric_attrs_base, "readiness.outcome": outcome}
            _polls_counter.add(1, attributes=metric_attrs)
            _duration_histogram.record(time.perf_counter() - start, attributes=metric_attrs)

    with tracer.start_as_current_span(span_name, kind=SpanKind.CLIENT) as root:
        for k, v in attrs.items():
            if v is not None:
                root.set_attribute(k, v)

        orig_pre = pre_attempt

        async def pre():
            attempt_events["n"] += 1
            if metrics_active and _attempts_counter is not None:
                _attempts_counter.add(1, attributes=metric_attrs_base)
            root.add_event("readiness.attempt", {"readiness.attempt.number": attempt_events["n"]})
            if orig_pre:
                await orig_pre()

        try:
            result = await poll(probe, policy, args=args, kwargs=kwargs, classifier=classifier, pre_attempt=pre)
        except BaseException as exc:
            root.record_exception(exc)
            root.set_status(Status(StatusCode.ERROR))
            outcome = type(exc).__name__.lower() if isinstance(exc, PollError) else "error"
            root.set_attribute("readiness.outcome", outcome)
            root.set_attribute("readiness.attempts", getattr(exc, "attempts", attempt_events["n"]))
            record(outcome)
            raise

        root.set_attribute("readiness.outcome", "success")
        root.set_attribute("readiness.attempts", attempt_events["n"])
        record("success")
        return result
