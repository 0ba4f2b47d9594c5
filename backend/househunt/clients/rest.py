# backend/househunt/clients/rest.py
from __future__ import annotations

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import httpx

from .query import Backend, QuerySpec
from .results import NETWORK_ERROR_CODE, AuthSession, BackendError, Result
from .storage import RestStorage

log = logging.getLogger("househunt.backend")


def _json_default(o: Any) -> Any:
    # Currency goes over the wire as a decimal string; Postgres numeric casts it exactly.
    if isinstance(o, Decimal):
        return str(o)
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    raise TypeError(f"Object of type {o.__class__.__name__} is not JSON serializable")


def _filter_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{'true' if value else 'false'}"
    return f"eq.{value}"


class RestBackend(Backend):
    """
    PostgREST tables + GoTrue auth + storage over httpx.

    Every call opens a short-lived httpx.Client. Nothing is retried; every
    non-2xx response or transport error becomes Result(error=BackendError).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 20.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self.storage = RestStorage(self.base, api_key, timeout=timeout, transport=transport)

    # -----------------------------
    # HTTP plumbing
    # -----------------------------
    def _headers(self, session: Optional[AuthSession]) -> dict[str, str]:
        token = session.access_token if session else self.api_key
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        params: Any = None,
        payload: Any = None,
    ) -> Result:
        content = None
        if payload is not None:
            content = json.dumps(payload, default=_json_default)

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                r = client.request(method, url, headers=headers, params=params, content=content)
        except httpx.HTTPError as e:
            return Result(error=BackendError(str(e) or e.__class__.__name__, code=NETWORK_ERROR_CODE))

        body: Any = None
        if r.content:
            try:
                body = r.json(parse_float=Decimal)
            except ValueError:
                body = r.text

        if r.is_error:
            return Result(error=BackendError.from_body(r.status_code, body))
        return Result(data=body)

    # -----------------------------
    # Tables
    # -----------------------------
    def run_query(self, spec: QuerySpec, session: Optional[AuthSession]) -> Result:
        url = f"{self.base}/rest/v1/{spec.table}"
        headers = self._headers(session)
        params: list[tuple[str, str]] = []

        if spec.method == "select":
            params.append(("select", spec.columns))
        for column, value in spec.filters:
            params.append((column, _filter_value(value)))
        if spec.order:
            params.append(("order", ",".join(f"{c}.{'asc' if asc else 'desc'}" for c, asc in spec.order)))
        if spec.limit is not None:
            params.append(("limit", str(spec.limit)))

        if spec.method == "select":
            res = self._request("GET", url, headers=headers, params=params)
        elif spec.method == "insert":
            headers["Prefer"] = "return=representation"
            res = self._request("POST", url, headers=headers, params=params, payload=spec.payload)
        elif spec.method == "upsert":
            headers["Prefer"] = "return=representation,resolution=merge-duplicates"
            if spec.on_conflict:
                params.append(("on_conflict", ",".join(spec.on_conflict)))
            res = self._request("POST", url, headers=headers, params=params, payload=spec.payload)
        elif spec.method == "update":
            headers["Prefer"] = "return=representation"
            res = self._request("PATCH", url, headers=headers, params=params, payload=spec.payload)
        elif spec.method == "delete":
            headers["Prefer"] = "return=minimal"
            res = self._request("DELETE", url, headers=headers, params=params)
        else:
            return Result(error=BackendError(f"unsupported method: {spec.method}"))

        if res.error is not None:
            return res

        data = res.data
        if data is None or data == "":
            data = []
        elif isinstance(data, dict):
            data = [data]
        return Result(data=data)

    # -----------------------------
    # Auth
    # -----------------------------
    def sign_in_with_password(self, email: str, password: str) -> Result:
        url = f"{self.base}/auth/v1/token"
        res = self._request(
            "POST",
            url,
            headers=self._headers(None),
            params={"grant_type": "password"},
            payload={"email": email, "password": password},
        )
        if res.error is not None:
            log.warning("sign-in failed: %s", res.error.message, extra={"status_code": res.error.status_code})
            return res
        if not isinstance(res.data, dict) or not res.data.get("access_token"):
            return Result(error=BackendError("sign-in response did not include an access token"))

        session = AuthSession.from_token_response(res.data)
        log.info("signed in", extra={"user_id": session.user_id})
        return Result(data=session)

    def sign_out(self, session: AuthSession) -> Result:
        res = self._request("POST", f"{self.base}/auth/v1/logout", headers=self._headers(session))
        if res.error is not None:
            return res
        return Result(data=None)

    def get_session(self, access_token: str) -> Result:
        probe = AuthSession(access_token=access_token)
        res = self._request("GET", f"{self.base}/auth/v1/user", headers=self._headers(probe))
        if res.error is not None:
            if res.error.status_code in (401, 403):
                return Result(data=None)
            return res

        user = res.data if isinstance(res.data, dict) else {}
        return Result(data=AuthSession(access_token=access_token, user_id=user.get("id"), email=user.get("email")))
