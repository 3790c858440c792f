from __future__ import annotations
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .errors import Aborted, Exhausted, ProbeTimeout
from .types import Failure, PreAttemptFn, Probe, Success, TransientClassifier

logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    max_attempts: int = 10
    per_attempt_timeout: Optional[float] = 5.0
    label: str = "poll"
    delay: float = 0.1
    backoff: float = 1.0
    max_delay: float = 5.0
    jitter: float = 0.0

    def delays(self) -> Iterable[float]:
        """Waits between attempts; one fewer than ``max_attempts``."""
        d = self.delay
        for _ in range(max(0, self.max_attempts - 1)):
            j = d * self.jitter
            yield max(0.0, min(self.max_delay, d + random.uniform(-j, j)))
            d = min(self.max_delay, d * self.backoff)


async def poll(
    probe: Probe,
    policy: Optional[RetryPolicy] = None,
    *,
    args: tuple = (),
    kwargs: dict[str, Any] | None = None,
    classifier: Optional[TransientClassifier] = None,
    pre_attempt: Optional[PreAttemptFn] = None,
) -> Any:
    """Run ``probe`` until it succeeds or the policy's attempts run out.

    The probe may be a plain function (run in a worker thread) or a coroutine
    function. Returning a value (or ``Success``) ends the poll; raising,
    returning ``Failure`` or overrunning ``per_attempt_timeout`` counts as one
    failed attempt. ``pre_attempt`` runs before each attempt, outside the
    attempt deadline.
    """
    policy = policy or RetryPolicy()
    kwargs = kwargs or {}

    if policy.max_attempts <= 0:
        raise Exhausted(policy.label, None, 0)

    async def _call():
        if asyncio.iscoroutinefunction(probe):
            return await probe(*args, **kwargs)
        # Blocking probes run in a worker thread so the deadline can abandon them
        res = await asyncio.to_thread(probe, *args, **kwargs)
        return await res if asyncio.iscoroutine(res) else res

    async def _with_deadline(coro):
        if policy.per_attempt_timeout is None:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=policy.per_attempt_timeout)
        except asyncio.TimeoutError as exc:
            raise ProbeTimeout(policy.per_attempt_timeout) from exc

    attempts = 0
    last_error: Optional[BaseException] = None
    for delay in (*policy.delays(), None):
        if pre_attempt:
            await pre_attempt()
        try:
            outcome = await _with_deadline(_call())
        except Exception as exc:
            last_error = exc
        else:
            if isinstance(outcome, Failure):
                last_error = outcome.error
            else:
                if attempts:
                    logger.info("%s: ready after %d attempt(s)", policy.label, attempts + 1)
                return outcome.value if isinstance(outcome, Success) else outcome

        attempts += 1
        logger.debug("%s: attempt %d/%d failed: %r", policy.label, attempts, policy.max_attempts, last_error)

        if classifier and not classifier(last_error):
            logger.warning("%s: non-transient failure, not retrying: %r", policy.label, last_error)
            raise Aborted(policy.label, last_error, attempts) from last_error
        if delay is None:
            break
        await asyncio.sleep(delay)

    logger.warning("%s: exhausted %d attempt(s)", policy.label, attempts)
    raise Exhausted(policy.label, last_error, attempts) from last_error
