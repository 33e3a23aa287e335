"""GoTrue (``/auth/v1``) facade: password sign-in, sign-up and session state."""

from __future__ import annotations

from typing import Any, Mapping

import httpx
from pydantic import ValidationError

from stockdesk.client.auth_events import AuthCallback, AuthListeners, AuthSubscription
from stockdesk.client.http import json_result, network_failure
from stockdesk.core.logging import get_logger
from stockdesk.domain.enums import AuthEvent
from stockdesk.schemas.auth import Session
from stockdesk.schemas.common import QueryResult

logger = get_logger(__name__)

SESSION_MISSING_CODE = "AUTH_SESSION_MISSING"
MALFORMED_SESSION_CODE = "AUTH_MALFORMED_SESSION"


def _session_from_token_payload(payload: Any) -> dict[str, Any] | None:
    if not isinstance(payload, Mapping):
        logger.warning("Token response is not an object", extra={"payload_type": type(payload).__name__})
        return None
    try:
        return Session.model_validate(payload).as_dict()
    except ValidationError:
        logger.warning("Token response is missing session fields", extra={"keys": sorted(payload)})
        return None


class AuthClient:
    def __init__(self, *, http: httpx.AsyncClient, auth_url: str, api_key: str) -> None:
        self._http = http
        self._auth_url = auth_url
        self._api_key = api_key
        self._session: dict[str, Any] | None = None
        self._listeners = AuthListeners()

    @property
    def access_token(self) -> str | None:
        return self._session["access_token"] if self._session else None

    def _headers(self, token: str | None = None) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token or self._api_key}",
        }

    def _set_session(self, session: dict[str, Any] | None, event: AuthEvent) -> None:
        self._session = session
        self._listeners.emit(event, session)

    async def _post(self, path: str, body: dict[str, Any] | None = None, token: str | None = None) -> QueryResult[Any]:
        url = f"{self._auth_url}{path}"
        try:
            response = await self._http.post(url, json=body or {}, headers=self._headers(token))
        except httpx.HTTPError as exc:
            return network_failure(exc, target=url)
        return json_result(response)

    async def sign_in_with_password(self, credentials: Mapping[str, str]) -> QueryResult[dict[str, Any]]:
        result = await self._post(
            "/token?grant_type=password",
            {"email": credentials.get("email"), "password": credentials.get("password")},
        )
        if result.error is not None:
            logger.info("Password sign-in rejected", extra={"code": result.error.code})
            return result
        session = _session_from_token_payload(result.data)
        if session is None:
            return QueryResult.failure("Malformed session in token response", MALFORMED_SESSION_CODE)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return QueryResult(data={"user": result.data.get("user"), "session": session})

    async def sign_up(self, credentials: Mapping[str, str]) -> QueryResult[dict[str, Any]]:
        result = await self._post(
            "/signup",
            {"email": credentials.get("email"), "password": credentials.get("password")},
        )
        if result.error is not None:
            return result
        payload = result.data if isinstance(result.data, dict) else {}
        # With email confirmation enabled the service answers with the bare user.
        session = _session_from_token_payload(payload) if "access_token" in payload else None
        if session is not None:
            self._set_session(session, AuthEvent.SIGNED_IN)
            return QueryResult(data={"user": payload.get("user"), "session": session})
        return QueryResult(data={"user": payload, "session": None})

    async def sign_out(self) -> QueryResult[None]:
        token = self.access_token
        if token is not None:
            result = await self._post("/logout", token=token)
            if result.error is not None and result.error.code not in {"401", "403", "404"}:
                return QueryResult(error=result.error)
        self._set_session(None, AuthEvent.SIGNED_OUT)
        return QueryResult(data=None)

    async def get_session(self) -> QueryResult[dict[str, Any]]:
        return QueryResult(data={"session": self._session})

    async def get_user(self) -> QueryResult[dict[str, Any]]:
        token = self.access_token
        if token is None:
            return QueryResult.failure("Auth session missing!", SESSION_MISSING_CODE)
        url = f"{self._auth_url}/user"
        try:
            response = await self._http.get(url, headers=self._headers(token))
        except httpx.HTTPError as exc:
            return network_failure(exc, target=url)
        result = json_result(response)
        if result.error is not None:
            return result
        return QueryResult(data={"user": result.data})

    def on_auth_state_change(self, callback: AuthCallback) -> AuthSubscription:
        """Register ``callback`` and call it right away with the current state."""
        return self._listeners.subscribe(callback, (AuthEvent.INITIAL_SESSION, self._session))
