from __future__ import annotations

import json
import secrets
from dataclasses import dataclass, field
from urllib.parse import parse_qs

import httpx
import pytest

from readiness_core.config import Settings

BASE_URL = "http://web:8080"


@dataclass
class _User:
    name: str
    email: str
    password: str
    identifier: str
    confirmed: bool = False


@dataclass
class FakeUserService:
    """
    In-memory stand-in for the user service, served through httpx.MockTransport.
    Reports {"status": "starting"} for the first `warmup` health checks.
    """

    warmup: int = 0
    health_calls: int = 0
    users: dict[str, _User] = field(default_factory=dict)
    confirm_tokens: dict[str, str] = field(default_factory=dict)
    access_tokens: dict[str, str] = field(default_factory=dict)
    refresh_tokens: dict[str, str] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=BASE_URL, transport=self.transport)

    def _issue(self, user: _User) -> httpx.Response:
        access, refresh = secrets.token_urlsafe(16), secrets.token_urlsafe(16)
        self.access_tokens[access] = user.name
        self.refresh_tokens[refresh] = user.name
        return httpx.Response(
            200,
            json={
                "access_token": access,
                "refresh_token": refresh,
                "token_type": "bearer",
                "expires_in": 0,
            },
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = (request.method, request.url.path)

        if route == ("GET", "/status"):
            self.health_calls += 1
            status = "up" if self.health_calls > self.warmup else "starting"
            return httpx.Response(200, json={"status": status})

        if route == ("POST", "/register"):
            body = json.loads(request.content)
            if body["name"] in self.users:
                return httpx.Response(400, text="UserExists")
            user = _User(body["name"], body["email"], body["password"], secrets.token_hex(16))
            self.users[user.name] = user
            token = secrets.token_urlsafe(16)
            self.confirm_tokens[token] = user.name
            return httpx.Response(200, json={"confirm_token": token})

        if route == ("GET", "/confirm"):
            name = self.confirm_tokens.pop(request.url.params.get("confirm_token", ""), None)
            if name is None:
                return httpx.Response(400, text="InvalidConfirmToken")
            self.users[name].confirmed = True
            return httpx.Response(200, json={})

        if route == ("POST", "/oauth/token"):
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            if form.get("grant_type") == "password":
                user = self.users.get(form.get("username", ""))
                if user and user.confirmed and user.password == form.get("password"):
                    return self._issue(user)
            elif form.get("grant_type") == "refresh_token":
                name = self.refresh_tokens.pop(form.get("refresh_token", ""), None)
                if name is not None:
                    return self._issue(self.users[name])
            return httpx.Response(401, text="PermissionDenied")

        if route == ("GET", "/user"):
            scheme, _, token = request.headers.get("Authorization", "").partition(" ")
            name = self.access_tokens.get(token) if scheme.lower() == "bearer" else None
            if name is None:
                return httpx.Response(401, text="PermissionDenied")
            user = self.users[name]
            return httpx.Response(
                200, json={"identifier": user.identifier, "name": user.name, "email": user.email}
            )

        return httpx.Response(404)


@pytest.fixture
def fake_service() -> FakeUserService:
    return FakeUserService()


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url=BASE_URL, poll_delay=0.0, attempt_timeout=1.0)
