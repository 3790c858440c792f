from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .config import Settings
from .errors import RequestError

logger = logging.getLogger(__name__)

# Error names the user service puts in the body of a 4xx response
SERVICE_ERROR_KINDS = ("InvalidConfirmToken", "PermissionDenied", "UserExists")


@dataclass(frozen=True)
class RegisterResponse:
    confirm_token: str


@dataclass(frozen=True)
class AccessTokenResponse:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = 0


@dataclass(frozen=True)
class CurrentUser:
    name: str
    email: str
    identifier: Optional[str] = None


def _error_kind(response: httpx.Response) -> Optional[str]:
    text = response.text.strip()
    if text in SERVICE_ERROR_KINDS:
        return text
    try:
        doc = response.json()
    except ValueError:
        return None
    if isinstance(doc, dict):
        kind = doc.get("error") or doc.get("kind")
        return str(kind) if kind else None
    return None


def _required(doc: dict, key: str, what: str) -> Any:
    value = doc.get(key)
    if value in (None, ""):
        raise RequestError(f"{what}: response has no {key!r}")
    return value


class UserServiceClient:
    """One-shot calls against the user service; nothing here retries."""

    def __init__(self, http: httpx.AsyncClient, settings: Optional[Settings] = None):
        self.http = http
        self.settings = settings or Settings()

    @classmethod
    def from_settings(cls, settings: Settings, **client_kwargs: Any) -> "UserServiceClient":
        http = httpx.AsyncClient(base_url=settings.base_url, timeout=settings.request_timeout, **client_kwargs)
        return cls(http, settings)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "UserServiceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _send(self, what: str, method: str, path: str, **kw: Any) -> httpx.Response:
        logger.debug("%s: %s %s", what, method, path)
        try:
            response = await self.http.request(method, path, **kw)
        except httpx.HTTPError as exc:
            raise RequestError(f"{what}: {method} {path} failed: {exc}") from exc
        if not response.is_success:
            kind = _error_kind(response)
            raise RequestError(
                f"{what}: {method} {path} -> {response.status_code}" + (f" ({kind})" if kind else ""),
                status_code=response.status_code,
                kind=kind,
                body=response.text,
            )
        return response

    @staticmethod
    def _json(what: str, response: httpx.Response) -> dict:
        try:
            doc = response.json()
        except ValueError as exc:
            raise RequestError(f"{what}: response is not JSON", status_code=response.status_code) from exc
        if not isinstance(doc, dict):
            raise RequestError(f"{what}: expected a JSON object", status_code=response.status_code)
        return doc

    def _token_form(self, **fields: str) -> dict[str, str]:
        if self.settings.client_id:
            fields["client_id"] = self.settings.client_id
        return fields

    def _token_response(self, what: str, response: httpx.Response) -> AccessTokenResponse:
        doc = self._json(what, response)
        return AccessTokenResponse(
            access_token=_required(doc, "access_token", what),
            refresh_token=_required(doc, "refresh_token", what),
            token_type=doc.get("token_type") or "bearer",
            expires_in=int(doc.get("expires_in") or 0),
        )

    async def health(self) -> dict:
        response = await self._send("health", "GET", self.settings.health_path)
        return self._json("health", response)

    async def register(
        self, name: str, email: str, password: str, *, path: Optional[str] = None, **extra: Any
    ) -> RegisterResponse:
        body = {"name": name, "email": email, "password": password, **extra}
        response = await self._send("register", "POST", path or self.settings.register_path, json=body)
        doc = self._json("register", response)
        return RegisterResponse(confirm_token=_required(doc, "confirm_token", "register"))

    async def confirm(self, confirm_token: str) -> None:
        await self._send(
            "confirm",
            "GET",
            self.settings.confirm_path,
            params={"confirm_token": confirm_token},
        )

    async def password_grant(self, username: str, password: str) -> AccessTokenResponse:
        form = self._token_form(grant_type="password", username=username, password=password)
        response = await self._send("password grant", "POST", self.settings.token_path, data=form)
        return self._token_response("password grant", response)

    async def refresh_grant(self, refresh_token: str) -> AccessTokenResponse:
        form = self._token_form(grant_type="refresh_token", refresh_token=refresh_token)
        response = await self._send("refresh grant", "POST", self.settings.token_path, data=form)
        return self._token_response("refresh grant", response)

    async def current_user(self, access_token: str) -> CurrentUser:
        headers = {"Authorization": f"{self.settings.auth_scheme} {access_token}"}
        response = await self._send("current user", "GET", self.settings.user_path, headers=headers)
        doc = self._json("current user", response)
        identifier = doc.get("identifier")
        return CurrentUser(
            name=_required(doc, "name", "current user"),
            email=_required(doc, "email", "current user"),
            identifier=str(identifier) if identifier is not None else None,
        )
