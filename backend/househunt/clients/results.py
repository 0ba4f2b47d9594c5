# backend/househunt/clients/results.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

# PostgREST's "JSON object requested, multiple (or no) rows returned".
# Callers treat it as "no row yet" and create a default record.
NO_ROWS_CODE = "PGRST116"
MULTIPLE_ROWS_CODE = "MULTIPLE_ROWS"
NETWORK_ERROR_CODE = "NETWORK_ERROR"
MISSING_FILTER_CODE = "MISSING_FILTER"

# Postgres integrity classes surfaced by the backend as validation failures.
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"
UNDEFINED_COLUMN = "42703"


class BackendError(Exception):
    """
    Uniform failure carried by Result.error.

    The shape follows the backend's own error bodies: message, code, details, hint,
    plus the HTTP status when there was a response at all.
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.hint = hint

    @property
    def is_no_rows(self) -> bool:
        return self.code == NO_ROWS_CODE

    @property
    def is_validation(self) -> bool:
        if self.code and self.code.startswith("23"):
            return True
        if self.code in (UNDEFINED_COLUMN, MISSING_FILTER_CODE):
            return True
        return self.status_code in (400, 409, 422)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            out["details"] = self.details
        if self.hint:
            out["hint"] = self.hint
        return out

    @classmethod
    def from_body(cls, status_code: int, body: Any) -> "BackendError":
        """
        Build from a non-2xx response body. Handles the three vocabularies the
        backend speaks:
          - PostgREST: {"code", "message", "details", "hint"}
          - GoTrue:    {"error", "error_description"} or {"code", "msg"}
          - Storage:   {"statusCode", "error", "message"}
        """
        if not isinstance(body, dict):
            text = str(body or "").strip()
            return cls(f"HTTP {status_code}: {text}" if text else f"HTTP {status_code}", status_code=status_code)

        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or f"HTTP {status_code}"
        )
        code = body.get("code") or body.get("error_code")
        if code is None and isinstance(body.get("error"), str) and body.get("error") != message:
            code = body.get("error")

        return cls(
            str(message),
            code=str(code) if code is not None else None,
            status_code=status_code,
            details=body.get("details"),
            hint=body.get("hint"),
        )

    def __repr__(self) -> str:
        return f"BackendError(code={self.code!r}, status_code={self.status_code!r}, message={self.message!r})"


@dataclass(frozen=True)
class Result(Generic[T]):
    data: Optional[T] = None
    error: Optional[BackendError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return data, or raise the carried BackendError."""
        if self.error is not None:
            raise self.error
        return self.data  # type: ignore[return-value]


@dataclass(frozen=True)
class AuthSession:
    """
    An authenticated session, passed explicitly to every backend call that
    should run as this user. Nothing caches it behind the caller's back.
    """

    access_token: str
    user_id: Optional[str] = None
    email: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None  # unix seconds

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and int(self.expires_at) <= int(time.time())

    @classmethod
    def from_token_response(cls, data: dict[str, Any]) -> "AuthSession":
        user = data.get("user") or {}
        expires_at = data.get("expires_at")
        if expires_at is None and data.get("expires_in") is not None:
            expires_at = int(time.time()) + int(data["expires_in"])
        return cls(
            access_token=str(data["access_token"]),
            user_id=user.get("id"),
            email=user.get("email"),
            refresh_token=data.get("refresh_token"),
            expires_at=int(expires_at) if expires_at is not None else None,
        )
