from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from .core import RetryPolicy, poll
from .errors import ProbeError

logger = logging.getLogger(__name__)


def json_field_probe(
    client: httpx.AsyncClient,
    url: str,
    *,
    field: str = "status",
    expected: Any = "up",
) -> Callable[[], Awaitable[dict]]:
    """
    Build a probe that GETs ``url`` and checks ``doc[field] == expected``.

    Transport errors propagate as-is; bad status codes, non-JSON bodies and
    mismatched fields raise ProbeError. On success the decoded document is
    returned.
    """

    async def probe() -> dict:
        response = await client.get(url)
        if not response.is_success:
            raise ProbeError(f"GET {url} -> {response.status_code}", status_code=response.status_code)
        try:
            doc = response.json()
        except ValueError as exc:
            raise ProbeError(f"GET {url} returned a non-JSON body") from exc
        if not isinstance(doc, dict):
            raise ProbeError(f"GET {url} returned {type(doc).__name__}, expected an object")
        actual = doc.get(field)
        if actual != expected:
            raise ProbeError(f"GET {url}: {field}={actual!r}, expected {expected!r}")
        return doc

    return probe


async def wait_until_up(
    client: httpx.AsyncClient,
    url: str,
    policy: Optional[RetryPolicy] = None,
    *,
    field: str = "status",
    expected: Any = "up",
    **poll_kwargs: Any,
) -> dict:
    policy = policy or RetryPolicy(label=f"Service {url} up?")
    logger.debug("waiting for %s (%s == %r)", url, field, expected)
    return await poll(json_field_probe(client, url, field=field, expected=expected), policy, **poll_kwargs)
