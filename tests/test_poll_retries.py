from __future__ import annotations
import itertools
import pytest
from readiness_core import Failure, Success
from readiness_core.core import poll, RetryPolicy


class Boom(RuntimeError):
    pass


FAST = dict(delay=0.001, per_attempt_timeout=1.0)


@pytest.mark.asyncio
async def test_retries_then_succeeds():
    calls = itertools.count()

    async def sometimes(x):
        i = next(calls)
        if i < 2:
            raise Boom("boom")
        return x * 2

    out = await poll(sometimes, RetryPolicy(max_attempts=3, **FAST), args=(21,))
    assert out == 42


@pytest.mark.asyncio
@pytest.mark.parametrize("k", [1, 2, 5])
async def test_stops_at_first_success(k):
    calls = {"n": 0}

    async def probe():
        calls["n"] += 1
        if calls["n"] < k:
            raise Boom("not yet")
        return {"status": "up"}

    out = await poll(probe, RetryPolicy(max_attempts=5, **FAST))
    assert out == {"status": "up"}
    assert calls["n"] == k


@pytest.mark.asyncio
async def test_status_up_on_third_call_of_ten():
    docs = iter([{"status": "starting"}, {"status": "starting"}, {"status": "up"}])
    calls = {"n": 0}

    def probe():
        calls["n"] += 1
        doc = next(docs)
        return Success(doc) if doc["status"] == "up" else Failure(Boom(doc["status"]))

    out = await poll(probe, RetryPolicy(max_attempts=10, **FAST))
    assert out == {"status": "up"}
    assert calls["n"] == 3


@pytest.mark.asyncio
async def test_sync_raise_treated_like_async_failure():
    calls = itertools.count()

    def probe():
        if next(calls) == 0:
            raise Boom("sync boom")
        return "ok"

    assert await poll(probe, RetryPolicy(max_attempts=2, **FAST)) == "ok"


@pytest.mark.asyncio
async def test_kwargs_are_passed_through():
    async def probe(*, expected):
        return expected

    assert await poll(probe, RetryPolicy(max_attempts=1), kwargs={"expected": "up"}) == "up"
