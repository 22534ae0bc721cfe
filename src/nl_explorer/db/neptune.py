from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Callable, List

import neo4j
from neo4j import GraphDatabase, Query, TrustSystemCAs
from neo4j.exceptions import DriverError, Neo4jError
from neo4j.graph import Node

from nl_explorer.catalog.descriptor import DatabaseDescriptor
from nl_explorer.db.result import ResultTable, Row
from nl_explorer.exceptions.errors import ExecutionError
from nl_explorer.logging.logger import get_logger


log = get_logger("db.neptune")

RECORDS_COLUMN = "Records"


def render_value(value: Any) -> str:
    """Nodes become their property map as JSON, null becomes ``NULL``; everything else its display string."""
    if value is None:
        return "NULL"
    if isinstance(value, Node):
        return json.dumps(dict(value.items()), default=str)
    return str(value)


def render_record(record: Any) -> str:
    # Multi-field records are not laid out as separate columns; fields share the one cell.
    return ", ".join(render_value(v) for v in record.values())


def neptune_driver(uri: str, connect_timeout_seconds: float) -> neo4j.Driver:
    # Neptune openCypher over Bolt: TLS against the system trust store, no auth token (IAM auth off).
    return GraphDatabase.driver(
        uri,
        auth=None,
        encrypted=True,
        trusted_certificates=TrustSystemCAs(),
        connection_timeout=connect_timeout_seconds,
    )


@dataclass
class NeptuneExecutor:
    """Runs translated openCypher on Amazon Neptune; results come back as one ``Records`` column."""

    connect_timeout_seconds: float = 10.0
    statement_timeout_seconds: float = 120.0
    driver_factory: Callable[[str, float], Any] = neptune_driver

    def execute(self, descriptor: DatabaseDescriptor, query: str) -> ResultTable:
        log.info(
            "Neptune run",
            extra={"database": descriptor.name, "cypher_head": query[:300]},
        )
        rows: List[Row] = []
        try:
            with self.driver_factory(descriptor.connection_endpoint, self.connect_timeout_seconds) as driver:
                with driver.session() as session:
                    result = session.run(Query(query, timeout=self.statement_timeout_seconds))
                    for record in result:
                        rows.append((render_record(record),))
        except (Neo4jError, DriverError) as e:
            log.warning("Neptune query failed", extra={"database": descriptor.name, "error": str(e)})
            raise ExecutionError(f"Neptune query failed on {descriptor.name!r}: {e}") from e
        except ValueError as e:
            # Raised by the driver for unsupported URI schemes / config combinations.
            raise ExecutionError(f"Invalid Neptune endpoint for {descriptor.name!r}: {e}") from e

        log.info("Neptune finished", extra={"database": descriptor.name, "rows": len(rows)})
        return ResultTable.from_rows([RECORDS_COLUMN], rows)
