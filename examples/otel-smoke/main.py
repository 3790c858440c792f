import asyncio
import os
import random

from readiness_core import Exhausted, RetryPolicy
from readiness_core.otel_setup import init_tracer, init_metrics
from readiness_core.otel_runtime import poll_traced_optional

# Enable tracing / metrics via env (can still be disabled by user)
os.environ.setdefault("READINESS_OTEL_ENABLED", "1")
os.environ.setdefault("READINESS_OTEL_METRICS_ENABLED", "1")

# Defaults for local collector
os.environ.setdefault("OTEL_EXPORTER_OTLP_ENDPOINT", "http://127.0.0.1:4317")


async def flaky_health(ctx: dict) -> dict:
    """Pretends to be a /status endpoint that is often still starting."""
    await asyncio.sleep(random.uniform(0.01, 0.05))
    if random.random() < ctx["fail_prob"]:
        raise RuntimeError("status=starting")
    return {"status": "up"}


async def main() -> None:
    exporter = os.getenv("READINESS_OTEL_EXPORTER", "http").lower()
    if exporter not in ("http", "grpc"):
        print(f"[readiness] Unknown READINESS_OTEL_EXPORTER={exporter!r}, falling back to 'http'")
        exporter = "http"

    init_tracer(service_name="readiness-otel-smoke", exporter=exporter)
    init_metrics(service_name="readiness-otel-smoke", exporter=exporter)

    n_polls = int(os.getenv("READINESS_SMOKE_POLLS", "20"))
    fail_prob = float(os.getenv("READINESS_SMOKE_FAIL_PROB", "0.6"))
    print(f"[readiness] smoke: n_polls={n_polls}, fail_prob={fail_prob}, exporter={exporter}")

    policy = RetryPolicy(max_attempts=4, per_attempt_timeout=1.0, delay=0.05, label="smoke /status up?")

    for i in range(n_polls):
        ctx = {"fail_prob": fail_prob}
        try:
            doc = await poll_traced_optional(
                lambda: flaky_health(ctx),
                policy,
                span_name="readiness.smoke",
                base_attrs={"readiness.demo_poll_index": i},
            )
            print(f"[readiness] poll #{i} -> {doc}")
        except Exhausted as exc:
            print(f"[readiness] poll #{i} gave up: {exc}")

    print("[readiness] smoke run complete")


if __name__ == "__main__":
    asyncio.run(main())
