# backend/househunt/clients/storage.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence
from urllib.parse import quote

import httpx

from .results import NETWORK_ERROR_CODE, AuthSession, BackendError, Result

log = logging.getLogger("househunt.storage")


def public_object_url(base_url: str, bucket: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/storage/v1/object/public/{bucket}/{quote(path.lstrip('/'))}"


class StorageAPI(ABC):
    """Object storage for home photos: buckets, uploads, public URLs."""

    @abstractmethod
    def list_buckets(self, *, session: Optional[AuthSession] = None) -> Result:
        """Result data is a list of {"id", "name", "public"} dicts."""

    @abstractmethod
    def create_bucket(
        self,
        name: str,
        *,
        public: bool = True,
        file_size_limit: Optional[int] = None,
        allowed_mime_types: Sequence[str] = (),
        session: Optional[AuthSession] = None,
    ) -> Result:
        ...

    @abstractmethod
    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
        cache_control: str = "3600",
        session: Optional[AuthSession] = None,
    ) -> Result:
        """Result data is {"path": ..., "key": ...}."""

    @abstractmethod
    def get_public_url(self, bucket: str, path: str) -> str:
        ...


class RestStorage(StorageAPI):
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

    def _headers(self, session: Optional[AuthSession]) -> dict[str, str]:
        token = session.access_token if session else self.api_key
        return {"apikey": self.api_key, "Authorization": f"Bearer {token}"}

    def _send(self, method: str, path: str, *, session: Optional[AuthSession], **kwargs: Any) -> Result:
        url = f"{self.base}/storage/v1{path}"
        headers = {**self._headers(session), **kwargs.pop("headers", {})}
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                r = client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            log.warning("storage request failed: %s", e)
            return Result(error=BackendError(str(e) or e.__class__.__name__, code=NETWORK_ERROR_CODE))

        try:
            body = r.json() if r.content else None
        except ValueError:
            body = r.text

        if r.is_error:
            err = BackendError.from_body(r.status_code, body)
            log.warning(
                "storage request rejected: %s",
                err.message,
                extra={"status_code": err.status_code, "error_code": err.code},
            )
            return Result(error=err)
        return Result(data=body)

    def list_buckets(self, *, session: Optional[AuthSession] = None) -> Result:
        return self._send("GET", "/bucket", session=session)

    def create_bucket(
        self,
        name: str,
        *,
        public: bool = True,
        file_size_limit: Optional[int] = None,
        allowed_mime_types: Sequence[str] = (),
        session: Optional[AuthSession] = None,
    ) -> Result:
        payload: dict[str, Any] = {"id": name, "name": name, "public": bool(public)}
        if file_size_limit:
            payload["file_size_limit"] = int(file_size_limit)
        if allowed_mime_types:
            payload["allowed_mime_types"] = list(allowed_mime_types)
        return self._send("POST", "/bucket", session=session, json=payload)

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
        cache_control: str = "3600",
        session: Optional[AuthSession] = None,
    ) -> Result:
        headers = {
            "Content-Type": content_type,
            "cache-control": f"max-age={cache_control}",
            "x-upsert": "true" if upsert else "false",
        }
        res = self._send(
            "POST",
            f"/object/{bucket}/{quote(path.lstrip('/'))}",
            session=session,
            content=content,
            headers=headers,
        )
        if res.error is not None:
            return res
        body = res.data if isinstance(res.data, dict) else {}
        return Result(data={"path": path, "key": body.get("Key") or f"{bucket}/{path}"})

    def get_public_url(self, bucket: str, path: str) -> str:
        return public_object_url(self.base, bucket, path)
