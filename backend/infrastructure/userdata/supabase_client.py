"""Shared HTTP plumbing for the hosted Supabase project.

One ``SupabaseHttpClient`` is shared by the auth service and the table stores
so that the access token obtained at sign-in is used for every PostgREST and
Storage request (row level security runs as the signed-in user).
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Mapping, Optional
from urllib.parse import urljoin

import aiohttp

from domain.errors import AuthError, UserDataError
from infrastructure.config.settings import SUPABASE_ANON_KEY, SUPABASE_TIMEOUT_S, SUPABASE_URL

logger = logging.getLogger(__name__)

# PostgREST code for "requested a single object, got zero (or many) rows".
NO_ROWS_CODE = "PGRST116"
_OBJECT_ACCEPT = "application/vnd.pgrst.object+json"


def _join(base: str, path: str) -> str:
    base = (base or "").rstrip("/") + "/"
    path = (path or "").lstrip("/")
    return urljoin(base, path)


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def eq(value: Any) -> str:
    return f"eq.{value}"


def in_list(values: list[Any]) -> str:
    quoted = ",".join(f'"{v}"' for v in values)
    return f"in.({quoted})"


def _error_details(text: str) -> tuple[str, Optional[str]]:
    """Best-effort (message, code) from a GoTrue/PostgREST/Storage error body."""
    try:
        body = json.loads(text) if text else {}
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        return text[:200], None
    message = (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or body.get("error")
        or text[:200]
    )
    code = body.get("code") or body.get("error_code") or body.get("statusCode")
    return str(message), (str(code) if code is not None else None)


def parse_content_range(header: Optional[str]) -> int:
    """Total from a ``Content-Range: 0-24/3573`` (or ``*/0``) header."""
    if not header or "/" not in header:
        return 0
    total = header.rsplit("/", 1)[1].strip()
    if total == "*":
        return 0
    try:
        return int(total)
    except ValueError:
        return 0


class SupabaseHttpClient:
    """aiohttp wrapper for GoTrue (/auth/v1), PostgREST (/rest/v1) and Storage.

    Error mapping: 401/403 raise ``AuthError``; any other non-2xx raises
    ``UserDataError`` with the PostgREST code, except a missing row on a
    single-object read, which returns None.
    """

    def __init__(
        self,
        *,
        url: str = SUPABASE_URL,
        anon_key: str = SUPABASE_ANON_KEY,
        timeout_s: float = SUPABASE_TIMEOUT_S,
    ) -> None:
        self._url = (url or "").strip().rstrip("/")
        self._anon_key = (anon_key or "").strip()
        self._timeout_s = float(timeout_s or 10.0)
        self._access_token: Optional[str] = None
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    @property
    def url(self) -> str:
        return self._url

    @property
    def configured(self) -> bool:
        return bool(self._url and self._anon_key)

    def set_access_token(self, token: Optional[str]) -> None:
        self._access_token = token or None

    def auth_url(self, path: str) -> str:
        return _join(self._url, f"/auth/v1/{path.lstrip('/')}")

    def rest_url(self, table: str) -> str:
        return _join(self._url, f"/rest/v1/{table}")

    def storage_url(self, path: str) -> str:
        return _join(self._url, f"/storage/v1/{path.lstrip('/')}")

    def public_object_url(self, bucket: str, path: str) -> str:
        return self.storage_url(f"object/public/{bucket}/{path.lstrip('/')}")

    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._anon_key,
            "authorization": f"Bearer {self._access_token or self._anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None and not self._session.closed:
            return self._session

        async with self._lock:
            if self._session is not None and not self._session.closed:
                return self._session

            timeout = aiohttp.ClientTimeout(total=self._timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            return self._session

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        data: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        single: bool = False,
        auth_errors: bool = False,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty).

        ``single`` asks PostgREST for one object; a missing row yields None.
        ``auth_errors`` maps every failure to ``AuthError`` (GoTrue endpoints).
        """
        if not self.configured:
            logger.warning("Supabase client not configured (missing SUPABASE_URL or SUPABASE_ANON_KEY)")
            raise UserDataError("Supabase client not configured")

        extra = dict(headers or {})
        if single:
            extra["accept"] = _OBJECT_ACCEPT
        if json_body is not None:
            extra.setdefault("content-type", "application/json")

        try:
            session = await self._get_session()
            async with session.request(
                method,
                url,
                params=dict(params) if params else None,
                json=json_body,
                data=data,
                headers=self._headers(extra),
            ) as resp:
                if resp.status >= 400:
                    text = await resp.text()
                    message, code = _error_details(text)
                    if single and code == NO_ROWS_CODE:
                        return None
                    logger.error(
                        "Supabase %s failed (%s) url=%s code=%s: %s",
                        method,
                        resp.status,
                        url,
                        code,
                        message[:200],
                    )
                    if auth_errors or resp.status in (401, 403):
                        raise AuthError(message, status=resp.status)
                    raise UserDataError(message, status=resp.status, code=code)
                if method.upper() == "HEAD":
                    return {"content_range": resp.headers.get("Content-Range")}
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as exc:
            logger.error("Supabase %s timeout after %ss url=%s", method, self._timeout_s, url)
            if auth_errors:
                raise AuthError(f"Supabase timeout after {self._timeout_s}s") from exc
            raise UserDataError(f"Supabase timeout after {self._timeout_s}s") from exc
        except aiohttp.ClientError as exc:
            logger.error("Supabase %s transport error url=%s: %s", method, url, exc)
            if auth_errors:
                raise AuthError(f"Supabase transport error: {exc}") from exc
            raise UserDataError(f"Supabase transport error: {exc}") from exc

    async def count(self, table: str, filters: Mapping[str, Any]) -> int:
        """Exact row count via ``Prefer: count=exact`` on a HEAD request."""
        params = {"select": "id", **filters}
        result = await self.request(
            "HEAD",
            self.rest_url(table),
            params=params,
            headers={"prefer": "count=exact"},
        )
        return parse_content_range((result or {}).get("content_range"))

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
