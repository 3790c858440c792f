from __future__ import annotations
import asyncio
import logging
import sys

import httpx

from readiness_core import Exhausted
from readiness_core.classify import http_classifier
from readiness_core.config import Settings
from readiness_core.probes import wait_until_up


async def main() -> int:
    # Settings from READINESS_* env; optional argv[1] overrides the health path
    settings = Settings.from_env()
    path = sys.argv[1] if len(sys.argv) > 1 else settings.health_path
    policy = settings.retry_policy(label=f"Service {path} up?")

    async with httpx.AsyncClient(base_url=settings.base_url, timeout=settings.request_timeout) as http:
        try:
            doc = await wait_until_up(http, path, policy, classifier=http_classifier)
        except Exhausted as exc:
            print(f"[readiness] {exc}", file=sys.stderr)
            return 1

    print(f"[readiness] {settings.base_url}{path} is up: {doc}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG if "-v" in sys.argv else logging.INFO)
    sys.argv = [a for a in sys.argv if a != "-v"]
    raise SystemExit(asyncio.run(main()))
