# backend/househunt/clients/demo.py
from __future__ import annotations

import logging
import threading
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

import jwt
from sqlalchemy import Boolean, Date, DateTime, Numeric, event, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import init_db, make_engine, make_sessionmaker, session_scope
from ..models import CONFLICT_TARGETS, TABLE_MODELS
from .query import Backend, QuerySpec
from .results import (
    FOREIGN_KEY_VIOLATION,
    NOT_NULL_VIOLATION,
    UNDEFINED_COLUMN,
    UNIQUE_VIOLATION,
    AuthSession,
    BackendError,
    Result,
)
from .storage import StorageAPI, public_object_url

log = logging.getLogger("househunt.demo")

DEMO_BASE_URL = "http://demo.localhost"
_JWT_AUDIENCE = "authenticated"


def _parse_datetime(value: str) -> datetime:
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    dt = datetime.fromisoformat(v)
    # Stored naive-UTC like the rest of the demo store.
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _coerce(column: Any, value: Any) -> Any:
    """Turn a JSON-ish wire value into what the column type expects."""
    if value is None:
        return None
    ctype = column.type
    if isinstance(ctype, Boolean):
        if isinstance(value, str):
            return value.strip().lower() in ("true", "t", "1", "yes")
        return bool(value)
    if isinstance(ctype, DateTime):
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                return value.astimezone(timezone.utc).replace(tzinfo=None)
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        return _parse_datetime(str(value))
    if isinstance(ctype, Date):
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value)[:10])
    if isinstance(ctype, Numeric):
        try:
            return Decimal(str(value))
        except InvalidOperation as e:
            raise BackendError(f"invalid input syntax for type numeric: {value!r}", code="22P02", status_code=400) from e
    return value


def _wire(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _row_to_dict(obj: Any) -> dict[str, Any]:
    return {c.name: _wire(getattr(obj, c.key)) for c in obj.__table__.columns}


def _integrity_error(e: IntegrityError) -> BackendError:
    msg = str(getattr(e, "orig", e))
    upper = msg.upper()
    if "NOT NULL" in upper:
        return BackendError(msg, code=NOT_NULL_VIOLATION, status_code=400)
    if "UNIQUE" in upper:
        return BackendError(msg, code=UNIQUE_VIOLATION, status_code=409)
    if "FOREIGN KEY" in upper:
        return BackendError(msg, code=FOREIGN_KEY_VIOLATION, status_code=409)
    return BackendError(msg, status_code=400)


class DemoStorage(StorageAPI):
    """Process-local buckets. Uploaded bytes live in memory only."""

    def __init__(self, base_url: str = DEMO_BASE_URL) -> None:
        self.base = base_url.rstrip("/")
        self._lock = threading.Lock()
        self._buckets: dict[str, dict[str, Any]] = {}

    def list_buckets(self, *, session: Optional[AuthSession] = None) -> Result:
        with self._lock:
            return Result(
                data=[{"id": name, "name": name, "public": b["public"]} for name, b in sorted(self._buckets.items())]
            )

    def create_bucket(
        self,
        name: str,
        *,
        public: bool = True,
        file_size_limit: Optional[int] = None,
        allowed_mime_types: Sequence[str] = (),
        session: Optional[AuthSession] = None,
    ) -> Result:
        with self._lock:
            if name in self._buckets:
                return Result(error=BackendError("The resource already exists", code="Duplicate", status_code=409))
            self._buckets[name] = {
                "public": bool(public),
                "file_size_limit": file_size_limit,
                "allowed_mime_types": list(allowed_mime_types),
                "objects": {},
            }
        return Result(data={"name": name})

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
        with self._lock:
            b = self._buckets.get(bucket)
            if b is None:
                return Result(error=BackendError("Bucket not found", code="NoSuchBucket", status_code=404))
            limit = b["file_size_limit"]
            if limit and len(content) > int(limit):
                return Result(
                    error=BackendError("The object exceeded the maximum allowed size", code="EntityTooLarge", status_code=413)
                )
            allowed = b["allowed_mime_types"]
            if allowed and content_type not in allowed:
                return Result(
                    error=BackendError(f"mime type {content_type} is not supported", code="InvalidMimeType", status_code=415)
                )
            key = path.lstrip("/")
            if key in b["objects"] and not upsert:
                return Result(error=BackendError("The resource already exists", code="Duplicate", status_code=409))
            b["objects"][key] = (bytes(content), content_type)
        return Result(data={"path": path, "key": f"{bucket}/{key}"})

    def get_public_url(self, bucket: str, path: str) -> str:
        return public_object_url(self.base, bucket, path)

    def get_object(self, bucket: str, path: str) -> Optional[bytes]:
        with self._lock:
            obj = self._buckets.get(bucket, {}).get("objects", {}).get(path.lstrip("/"))
        return obj[0] if obj else None


class DemoBackend(Backend):
    """
    Stand-in for the hosted backend when no credentials are configured.

    Tables live in a SQLAlchemy store (in-memory SQLite by default, one per
    backend instance); sign-in accepts any non-empty email/password and mints
    a local HS256 token. Nothing persists past the process.
    """

    demo = True

    def __init__(
        self,
        *,
        database_url: str = "sqlite://",
        jwt_secret: str = "demo-change-me",
        session_minutes: int = 60 * 24,
        base_url: str = DEMO_BASE_URL,
    ) -> None:
        self.engine = make_engine(database_url)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        init_db(self.engine)
        self._sessions = make_sessionmaker(self.engine)
        self._jwt_secret = jwt_secret
        self._session_minutes = int(session_minutes)
        self.storage = DemoStorage(base_url)

    def close(self) -> None:
        self.engine.dispose()

    # -----------------------------
    # Tables
    # -----------------------------
    def run_query(self, spec: QuerySpec, session: Optional[AuthSession]) -> Result:
        model = TABLE_MODELS.get(spec.table)
        if model is None:
            return Result(
                error=BackendError(
                    f'relation "public.{spec.table}" does not exist', code="42P01", status_code=404
                )
            )

        try:
            with session_scope(self._sessions) as db:
                rows = [_row_to_dict(r) for r in self._run(db, model, spec)]
                if spec.method == "select" and spec.columns.strip() != "*":
                    wanted = [c.strip() for c in spec.columns.split(",") if c.strip()]
                    for c in wanted:
                        self._column(model, c)
                    rows = [{c: r[c] for c in wanted} for r in rows]
                return Result(data=rows)
        except BackendError as e:
            return Result(error=e)
        except IntegrityError as e:
            return Result(error=_integrity_error(e))
        except SQLAlchemyError as e:
            log.exception("demo store failure", extra={"table": spec.table})
            return Result(error=BackendError(str(e), status_code=500))

    def _column(self, model: Any, name: str) -> Any:
        col = model.__table__.columns.get(name)
        if col is None:
            raise BackendError(
                f"column {model.__tablename__}.{name} does not exist", code=UNDEFINED_COLUMN, status_code=400
            )
        return col

    def _values(self, model: Any, record: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(record, dict):
            raise BackendError("payload rows must be JSON objects", status_code=400)
        return {k: _coerce(self._column(model, k), v) for k, v in record.items()}

    def _check_required(self, model: Any, values: dict[str, Any]) -> None:
        for col in model.__table__.columns:
            if col.nullable or col.default is not None or col.server_default is not None:
                continue
            if values.get(col.name) is None:
                raise BackendError(
                    f'null value in column "{col.name}" of relation "{model.__tablename__}" violates not-null constraint',
                    code=NOT_NULL_VIOLATION,
                    status_code=400,
                )

    def _matching(self, db: Session, model: Any, spec: QuerySpec) -> list[Any]:
        stmt = select(model)
        for name, value in spec.filters:
            col = getattr(model, self._column(model, name).key)
            value = _coerce(self._column(model, name), value)
            stmt = stmt.where(col.is_(None) if value is None else col == value)
        for name, ascending in spec.order:
            col = getattr(model, self._column(model, name).key)
            stmt = stmt.order_by(col.asc() if ascending else col.desc())
        if spec.limit is not None:
            stmt = stmt.limit(spec.limit)
        return list(db.scalars(stmt))

    def _run(self, db: Session, model: Any, spec: QuerySpec) -> list[Any]:
        if spec.method == "select":
            return self._matching(db, model, spec)

        if spec.method == "insert":
            records = spec.payload if isinstance(spec.payload, list) else [spec.payload]
            out = []
            for record in records:
                values = self._values(model, record)
                self._check_required(model, values)
                obj = model(**values)
                db.add(obj)
                out.append(obj)
            db.flush()
            return out

        if spec.method == "upsert":
            target = spec.on_conflict or CONFLICT_TARGETS.get(spec.table) or ("id",)
            records = spec.payload if isinstance(spec.payload, list) else [spec.payload]
            out = []
            for record in records:
                values = self._values(model, record)
                missing = [c for c in target if values.get(c) is None]
                if missing:
                    raise BackendError(
                        f"upsert on {spec.table} requires conflict column(s): {', '.join(missing)}",
                        code="42P10",
                        status_code=400,
                    )
                stmt = select(model)
                for c in target:
                    stmt = stmt.where(getattr(model, c) == values[c])
                existing = db.scalars(stmt).first()
                if existing is None:
                    self._check_required(model, values)
                    obj = model(**values)
                    db.add(obj)
                else:
                    for k, v in values.items():
                        if k != "id":
                            setattr(existing, k, v)
                    obj = existing
                out.append(obj)
            db.flush()
            return out

        if spec.method == "update":
            values = self._values(model, spec.payload or {})
            values.pop("id", None)
            rows = self._matching(db, model, spec)
            for obj in rows:
                for k, v in values.items():
                    setattr(obj, k, v)
            db.flush()
            return rows

        if spec.method == "delete":
            for obj in self._matching(db, model, spec):
                db.delete(obj)
            db.flush()
            return []

        raise BackendError(f"unsupported method: {spec.method}", status_code=400)

    # -----------------------------
    # Auth
    # -----------------------------
    def sign_in_with_password(self, email: str, password: str) -> Result:
        email = (email or "").strip().lower()
        if not email or not password:
            return Result(
                error=BackendError("Invalid login credentials", code="invalid_credentials", status_code=400)
            )

        now = datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self._session_minutes)
        user_id = str(uuid.uuid5(uuid.NAMESPACE_URL, f"mailto:{email}"))
        token = jwt.encode(
            {
                "sub": user_id,
                "email": email,
                "aud": _JWT_AUDIENCE,
                "iat": int(now.timestamp()),
                "exp": int(exp.timestamp()),
            },
            self._jwt_secret,
            algorithm="HS256",
        )
        log.info("demo sign-in", extra={"user_id": user_id})
        return Result(
            data=AuthSession(access_token=token, user_id=user_id, email=email, expires_at=int(exp.timestamp()))
        )

    def sign_out(self, session: AuthSession) -> Result:
        return Result(data=None)

    def get_session(self, access_token: str) -> Result:
        try:
            claims = jwt.decode(access_token, self._jwt_secret, algorithms=["HS256"], audience=_JWT_AUDIENCE)
        except jwt.ExpiredSignatureError:
            return Result(data=None)
        except jwt.InvalidTokenError:
            return Result(data=None)
        return Result(
            data=AuthSession(
                access_token=access_token,
                user_id=claims.get("sub"),
                email=claims.get("email"),
                expires_at=claims.get("exp"),
            )
        )


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    # Child rows cascade away with their home, as they do on the hosted database.
    cur = dbapi_connection.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()
