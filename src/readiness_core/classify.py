from __future__ import annotations

import asyncio

import httpx

from .errors import ProbeError

# Statuses worth waiting out while a service is still starting
_RETRYABLE_STATUS = {404, 408, 425, 429}


def _status_is_transient(status: int) -> bool:
    return status >= 500 or status in _RETRYABLE_STATUS


def http_classifier(exc: BaseException) -> bool:
    # ---- HTTP status carried on the error ----
    if isinstance(exc, httpx.HTTPStatusError):
        return _status_is_transient(exc.response.status_code)
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return _status_is_transient(status)

    # ---- Probe-level failures (field mismatch, bad JSON, attempt timeout) ----
    if isinstance(exc, ProbeError):
        return True

    # ---- Transport: refused/reset connections, DNS, read timeouts ----
    if isinstance(exc, (httpx.TransportError, asyncio.TimeoutError, ConnectionError, OSError)):
        return True

    return False
