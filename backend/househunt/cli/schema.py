# backend/househunt/cli/schema.py
from __future__ import annotations

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable

from ..db import Base
from .. import models  # noqa: F401  (register tables on Base.metadata)


def schema_ddl() -> str:
    """
    PostgreSQL DDL for every backend table, parents before children. Row
    level security policies are managed on the hosted project, not here.
    """
    dialect = postgresql.dialect()
    statements: list[str] = []
    for table in Base.metadata.sorted_tables:
        statements.append(str(CreateTable(table).compile(dialect=dialect)).strip() + ";")
        for index in sorted(table.indexes, key=lambda i: i.name or ""):
            statements.append(str(CreateIndex(index).compile(dialect=dialect)).strip() + ";")
    return "\n\n".join(statements) + "\n"
