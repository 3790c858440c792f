from __future__ import annotations
import asyncio
import logging
import os
import uuid

from readiness_core.config import Settings
from readiness_core.scenario import UserFlow
from readiness_core.user_service import UserServiceClient


async def main() -> None:
    settings = Settings.from_env()
    name = os.getenv("READINESS_DEMO_USER", f"new-test-user-{uuid.uuid4().hex[:6]}")

    async with UserServiceClient.from_settings(settings) as client:
        flow = UserFlow(client)

        await flow.service_is_up(settings.health_path)
        await flow.register({"name": name, "email": f"{name}@example.com", "password": "secret"})
        await flow.confirm()
        tokens = await flow.login()
        user = await flow.fetch_user()
        refreshed = await flow.refresh()

    print(f"user: {user}")
    print(f"token_type={tokens.token_type} refreshed={refreshed.access_token != tokens.access_token}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
