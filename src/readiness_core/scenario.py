from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .core import RetryPolicy
from .errors import RequestError
from .probes import wait_until_up
from .user_service import AccessTokenResponse, CurrentUser, UserServiceClient

logger = logging.getLogger(__name__)


@dataclass
class ScenarioState:
    """Values one scenario hands from step to step. Never shared across scenarios."""

    credentials: dict[str, str] = field(default_factory=dict)
    confirm_token: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    previous_access_token: Optional[str] = None
    user: Optional[CurrentUser] = None
    health: Optional[dict] = None

    def require(self, name: str) -> Any:
        value = getattr(self, name)
        if not value:
            raise RequestError(f"no {name} in scenario state; did an earlier step fail?")
        return value

    def store_tokens(self, tokens: AccessTokenResponse) -> None:
        self.previous_access_token = self.access_token
        self.access_token = tokens.access_token
        self.refresh_token = tokens.refresh_token


class UserFlow:
    """Scenario steps against the user service, state passed explicitly."""

    def __init__(self, client: UserServiceClient, state: Optional[ScenarioState] = None):
        self.client = client
        self.state = state if state is not None else ScenarioState()

    async def service_is_up(self, path: str, policy: Optional[RetryPolicy] = None) -> dict:
        settings = self.client.settings
        policy = policy or settings.retry_policy(label=f"Service {path} up?")
        self.state.health = await wait_until_up(self.client.http, path, policy)
        return self.state.health

    async def register(self, data: dict[str, str], path: Optional[str] = None) -> str:
        data = dict(data)
        name, email, password = data.pop("name"), data.pop("email"), data.pop("password")
        response = await self.client.register(name, email, password, path=path, **data)
        self.state.credentials = {"name": name, "email": email, "password": password}
        self.state.confirm_token = response.confirm_token
        logger.info("registered %s", name)
        return response.confirm_token

    async def confirm(self) -> None:
        await self.client.confirm(self.state.require("confirm_token"))

    async def login(self, username: Optional[str] = None, password: Optional[str] = None) -> AccessTokenResponse:
        creds = self.state.credentials
        tokens = await self.client.password_grant(
            username or creds.get("name", ""),
            password or creds.get("password", ""),
        )
        self.state.store_tokens(tokens)
        return tokens

    async def fetch_user(self) -> CurrentUser:
        self.state.user = await self.client.current_user(self.state.require("access_token"))
        return self.state.user

    async def refresh(self) -> AccessTokenResponse:
        tokens = await self.client.refresh_grant(self.state.require("refresh_token"))
        self.state.store_tokens(tokens)
        return tokens
