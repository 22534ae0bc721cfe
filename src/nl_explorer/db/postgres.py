from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass
from typing import Any, Callable, List
import time

import psycopg2

from nl_explorer.catalog.descriptor import DatabaseDescriptor
from nl_explorer.credentials.secret_store import SecretStore
from nl_explorer.db.result import ResultTable, Row, cell_to_str
from nl_explorer.db.utils import strip_jdbc_prefix
from nl_explorer.exceptions.errors import ExecutionError
from nl_explorer.logging.logger import get_logger


log = get_logger("db.postgres")


@dataclass
class PostgresExecutor:
    """Runs translated SQL against PostgreSQL (e.g. Amazon RDS) with credentials from Secrets Manager."""

    secret_store: SecretStore
    connect_timeout_seconds: int = 10
    statement_timeout_seconds: int = 120
    connect: Callable[..., Any] = psycopg2.connect

    def execute(self, descriptor: DatabaseDescriptor, query: str) -> ResultTable:
        if not descriptor.credential_reference:
            raise ExecutionError(
                f"Database {descriptor.name!r} has no credential reference for its PostgreSQL login"
            )
        creds = self.secret_store.get_credentials(descriptor.credential_reference)

        log.info(
            "PostgreSQL execute",
            extra={"database": descriptor.name, "sql_head": query[:300]},
        )
        t0 = time.monotonic()
        try:
            with closing(
                self.connect(
                    strip_jdbc_prefix(descriptor.connection_endpoint),
                    user=creds.username,
                    password=creds.password,
                    connect_timeout=self.connect_timeout_seconds,
                    options=f"-c statement_timeout={int(self.statement_timeout_seconds * 1000)}",
                )
            ) as conn:
                with conn.cursor() as cur:
                    cur.execute(query)
                    columns = [d[0] for d in (cur.description or [])]
                    rows: List[Row] = []
                    if cur.description is not None:
                        for rec in cur:
                            rows.append(tuple(cell_to_str(v) for v in rec))
        except psycopg2.Error as e:
            log.warning(
                "PostgreSQL query failed",
                extra={"database": descriptor.name, "pgcode": getattr(e, "pgcode", None), "error": str(e)},
            )
            raise ExecutionError(f"PostgreSQL query failed on {descriptor.name!r}: {e}") from e

        log.info(
            "PostgreSQL finished",
            extra={"database": descriptor.name, "rows": len(rows), "elapsed_s": round(time.monotonic() - t0, 3)},
        )
        return ResultTable.from_rows(columns, rows)
