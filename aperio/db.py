"""Supabase REST client: PostgREST table access and GoTrue auth."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from aperio.models import User

logger = logging.getLogger(__name__)

# PostgREST code when a single-row request matched nothing
NOT_FOUND = "PGRST116"
# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


class DatabaseError(Exception):
    """Error reported by the database or auth backend."""

    def __init__(self, code: str, message: str):
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message


def _filter_params(filters: dict[str, Any] | None) -> dict[str, str]:
    """``{"slug": "x"}`` -> ``eq.x``; a ``(op, value)`` tuple picks the operator."""
    params = {}
    for column, value in (filters or {}).items():
        if isinstance(value, tuple):
            op, value = value
        else:
            op = "eq"
        if isinstance(value, bool):
            value = str(value).lower()
        params[column] = f"{op}.{value}"
    return params


def _user_from(data: dict) -> User:
    return User(
        id=data.get("id", ""),
        email=data.get("email", ""),
        metadata=data.get("user_metadata") or {},
    )


class SupabaseClient:
    """Thin async wrapper over a Supabase project's REST endpoints.

    The anon key authenticates every request; after ``sign_in`` the user's
    access token is sent as the bearer so row-level policies apply.
    """

    def __init__(self, url: str, anon_key: str, timeout: int = 30):
        if not url or not anon_key:
            raise ValueError("database url and anon_key must be configured")
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.access_token: str | None = None

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.access_token or self.anon_key}",
            "Content-Type": "application/json",
        }
        headers.update(extra or {})
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                resp = await client.request(
                    method,
                    f"{self.url}{path}",
                    params=params,
                    json=json,
                    headers=self._headers(headers),
                )
            except httpx.HTTPError as exc:
                raise DatabaseError("network", str(exc)) from exc

        if resp.is_error:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            code = str(body.get("code") or body.get("error_code") or resp.status_code)
            message = (
                body.get("message") or body.get("msg")
                or body.get("error_description") or resp.text
            )
            raise DatabaseError(code, message)

        if not resp.text:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise DatabaseError("invalid_response", "response body is not JSON") from exc

    # -- Tables -------------------------------------------------------------

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        limit: int | None = None,
        single: bool = False,
    ) -> Any:
        """Rows matching ``filters``. With ``single`` exactly one row or DatabaseError."""
        params = {"select": columns, **_filter_params(filters)}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        headers = {"Accept": "application/vnd.pgrst.object+json"} if single else None
        return await self._request("GET", f"/rest/v1/{table}", params=params, headers=headers)

    async def insert(self, table: str, rows: dict | list[dict]) -> list[dict]:
        if isinstance(rows, dict):
            rows = [rows]
        return await self._request(
            "POST", f"/rest/v1/{table}", json=rows,
            headers={"Prefer": "return=representation"},
        ) or []

    async def update(self, table: str, values: dict, filters: dict[str, Any]) -> list[dict]:
        return await self._request(
            "PATCH", f"/rest/v1/{table}", params=_filter_params(filters), json=values,
            headers={"Prefer": "return=representation"},
        ) or []

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        await self._request("DELETE", f"/rest/v1/{table}", params=_filter_params(filters))

    # -- Auth ---------------------------------------------------------------

    async def sign_up(self, email: str, password: str, metadata: dict | None = None) -> User:
        data = await self._request("POST", "/auth/v1/signup", json={
            "email": email, "password": password, "data": metadata or {},
        })
        # Depending on email confirmation settings the user is nested or top-level
        return _user_from(data.get("user") or data)

    async def sign_in(self, email: str, password: str) -> User:
        data = await self._request(
            "POST", "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        self.access_token = data.get("access_token")
        logger.info("Signed in as %s", email)
        return _user_from(data.get("user") or {})

    async def sign_out(self) -> None:
        if self.access_token is None:
            return
        await self._request("POST", "/auth/v1/logout")
        self.access_token = None

    async def get_user(self) -> User | None:
        if self.access_token is None:
            return None
        return _user_from(await self._request("GET", "/auth/v1/user"))
