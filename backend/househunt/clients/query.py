# backend/househunt/clients/query.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Optional, Sequence

from .results import (
    MISSING_FILTER_CODE,
    MULTIPLE_ROWS_CODE,
    NO_ROWS_CODE,
    AuthSession,
    BackendError,
    Result,
)

if TYPE_CHECKING:
    from .storage import StorageAPI

log = logging.getLogger("househunt.backend")

Row = dict[str, Any]


@dataclass(frozen=True)
class QuerySpec:
    """Everything a backend needs to run one table operation."""

    table: str
    method: str = "select"  # select|insert|update|delete|upsert
    columns: str = "*"
    filters: tuple[tuple[str, Any], ...] = ()
    order: tuple[tuple[str, bool], ...] = ()  # (column, ascending)
    limit: Optional[int] = None
    single: bool = False
    payload: Any = None
    on_conflict: tuple[str, ...] = ()


@dataclass
class TableQuery:
    """
    Fluent, table-scoped query builder:

        backend.table("homes", session=s).select().eq("id", home_id).single().execute()

    Nothing is sent until execute(). execute() never raises; it returns a
    Result whose error is a BackendError.
    """

    backend: "Backend"
    spec: QuerySpec
    session: Optional[AuthSession] = field(default=None, repr=False)

    def _with(self, **changes: Any) -> "TableQuery":
        return TableQuery(self.backend, replace(self.spec, **changes), self.session)

    # ---- verbs ----
    def select(self, columns: str = "*") -> "TableQuery":
        return self._with(method="select", columns=columns or "*")

    def insert(self, record: Row | Sequence[Row]) -> "TableQuery":
        return self._with(method="insert", payload=record)

    def update(self, patch: Row) -> "TableQuery":
        return self._with(method="update", payload=dict(patch))

    def delete(self) -> "TableQuery":
        return self._with(method="delete")

    def upsert(self, record: Row | Sequence[Row], *, on_conflict: str | Sequence[str] | None = None) -> "TableQuery":
        if isinstance(on_conflict, str):
            target = tuple(c.strip() for c in on_conflict.split(",") if c.strip())
        else:
            target = tuple(on_conflict or ())
        return self._with(method="upsert", payload=record, on_conflict=target)

    # ---- modifiers ----
    def eq(self, column: str, value: Any) -> "TableQuery":
        return self._with(filters=self.spec.filters + ((column, value),))

    def order(self, column: str, *, ascending: bool = True) -> "TableQuery":
        return self._with(order=self.spec.order + ((column, bool(ascending)),))

    def limit(self, n: int) -> "TableQuery":
        return self._with(limit=int(n))

    def single(self) -> "TableQuery":
        return self._with(single=True)

    # ---- run ----
    def execute(self) -> Result:
        spec = self.spec

        if spec.method in ("update", "delete") and not spec.filters:
            err = BackendError(
                f"refusing to {spec.method} {spec.table} without a filter",
                code=MISSING_FILTER_CODE,
            )
            log.warning("backend query rejected", extra={"table": spec.table, "error_code": err.code})
            return Result(error=err)

        if spec.single:
            # Ask for two rows so "more than one" is detectable without trusting the backend.
            spec = replace(spec, limit=2)

        try:
            res = self.backend.run_query(spec, self.session)
        except Exception as e:  # a crashing backend still yields a Result
            log.exception("backend query crashed", extra={"table": spec.table})
            return Result(error=BackendError(str(e) or e.__class__.__name__))

        if res.error is not None:
            log.warning(
                "backend query failed: %s",
                res.error.message,
                extra={
                    "table": spec.table,
                    "status_code": res.error.status_code,
                    "error_code": res.error.code,
                },
            )
            return res

        if not self.spec.single:
            return res

        rows = list(res.data or [])
        if not rows:
            return Result(
                error=BackendError(
                    "JSON object requested, multiple (or no) rows returned",
                    code=NO_ROWS_CODE,
                    status_code=406,
                    details="The result contains 0 rows",
                )
            )
        if len(rows) > 1:
            err = BackendError(
                f"single() matched more than one row in {spec.table}",
                code=MULTIPLE_ROWS_CODE,
                status_code=406,
                details=f"The result contains {len(rows)} or more rows",
            )
            log.warning("backend single() ambiguous", extra={"table": spec.table, "error_code": err.code})
            return Result(error=err)
        return Result(data=rows[0])


class Backend(ABC):
    """
    The hosted backend as the application sees it: tables, password auth,
    object storage. RestBackend talks HTTP; DemoBackend keeps everything in
    a local store.
    """

    demo: bool = False
    storage: "StorageAPI"

    def table(self, name: str, *, session: Optional[AuthSession] = None) -> TableQuery:
        return TableQuery(self, QuerySpec(table=name), session)

    @abstractmethod
    def run_query(self, spec: QuerySpec, session: Optional[AuthSession]) -> Result:
        """Run one operation; data is always a list of row dicts."""

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> Result:
        """Password grant. Result data is an AuthSession."""

    @abstractmethod
    def sign_out(self, session: AuthSession) -> Result:
        ...

    @abstractmethod
    def get_session(self, access_token: str) -> Result:
        """Resolve a bearer token. Result data is an AuthSession, or None when the token is no longer valid."""

    def close(self) -> None:
        return None
