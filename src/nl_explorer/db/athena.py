from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List
import time

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from nl_explorer.catalog.descriptor import DatabaseDescriptor
from nl_explorer.db.result import ResultTable, Row
from nl_explorer.db.utils import AthenaEndpoint, parse_athena_endpoint
from nl_explorer.exceptions.errors import ExecutionError
from nl_explorer.logging.logger import get_logger


log = get_logger("db.athena")

_TERMINAL_STATES = {"SUCCEEDED", "FAILED", "CANCELLED"}


def athena_client_for(endpoint: AthenaEndpoint) -> Any:
    """Athena client for the endpoint's region and (optional) named credential profile."""
    session = boto3.Session(profile_name=endpoint.profile, region_name=endpoint.region)
    return session.client("athena", config=Config(retries={"total_max_attempts": 1}))


@dataclass
class AthenaExecutor:
    """Runs translated SQL on Amazon Athena.

    Everything needed to connect is carried by the descriptor's connection
    string (region, output location, workgroup, optional profile); no secret
    store lookup happens here. Authentication uses the AWS credential chain.
    """

    poll_interval_seconds: float = 0.5
    max_wait_seconds: float = 120.0
    client_factory: Callable[[AthenaEndpoint], Any] = athena_client_for

    def execute(self, descriptor: DatabaseDescriptor, query: str) -> ResultTable:
        try:
            endpoint = parse_athena_endpoint(descriptor.connection_endpoint)
        except ValueError as e:
            raise ExecutionError(f"Invalid Athena connection string for {descriptor.name!r}: {e}") from e

        try:
            ath = self.client_factory(endpoint)
            qid = self._start(ath, endpoint, descriptor, query)
            self._wait(ath, qid)
            return self._fetch(ath, qid)
        except (BotoCoreError, ClientError) as e:
            log.warning("Athena call failed", extra={"database": descriptor.name, "error": str(e)})
            raise ExecutionError(f"Athena query failed on {descriptor.name!r}: {e}") from e

    def _start(self, ath: Any, endpoint: AthenaEndpoint, descriptor: DatabaseDescriptor, query: str) -> str:
        context: Dict[str, str] = {"Catalog": endpoint.catalog}
        if endpoint.schema:
            context["Database"] = endpoint.schema

        start_args: Dict[str, Any] = {"QueryString": query, "QueryExecutionContext": context}
        if endpoint.output_location:
            start_args["ResultConfiguration"] = {"OutputLocation": endpoint.output_location}
        if endpoint.workgroup:
            start_args["WorkGroup"] = endpoint.workgroup

        log.info(
            "Athena start_query_execution",
            extra={
                "database": descriptor.name,
                "region": endpoint.region,
                "workgroup": endpoint.workgroup,
                "sql_head": query[:300],
            },
        )
        return ath.start_query_execution(**start_args)["QueryExecutionId"]

    def _wait(self, ath: Any, qid: str) -> None:
        deadline = time.monotonic() + self.max_wait_seconds
        state, reason = "QUEUED", ""
        while True:
            status = ath.get_query_execution(QueryExecutionId=qid).get("QueryExecution", {}).get("Status", {})
            state = status.get("State", "")
            reason = status.get("StateChangeReason", "") or ""
            if state in _TERMINAL_STATES:
                break
            if time.monotonic() >= deadline:
                # Don't leave the query running (and billing) after giving up on it.
                ath.stop_query_execution(QueryExecutionId=qid)
                raise ExecutionError(f"Athena query {qid} exceeded {self.max_wait_seconds}s and was stopped")
            time.sleep(self.poll_interval_seconds)

        if state != "SUCCEEDED":
            raise ExecutionError(f"Athena query {state}: {reason}")

    def _fetch(self, ath: Any, qid: str) -> ResultTable:
        columns: List[str] = []
        rows: List[Row] = []

        first = True
        for page in ath.get_paginator("get_query_results").paginate(QueryExecutionId=qid):
            result_set = page.get("ResultSet", {})

            records = result_set.get("Rows", [])
            if first:
                info = result_set.get("ResultSetMetadata", {}).get("ColumnInfo", [])
                columns = [c.get("Label") or c.get("Name", "") for c in info]
                # SELECT results repeat the column labels as the first row.
                if records and [d.get("VarCharValue") for d in records[0].get("Data", [])] == columns:
                    records = records[1:]
                first = False

            for rec in records:
                row = tuple(d.get("VarCharValue") for d in rec.get("Data", []))
                if len(row) != len(columns):
                    raise ExecutionError(
                        f"Athena query {qid} returned a row with {len(row)} values for {len(columns)} columns"
                    )
                rows.append(row)

        log.info("Athena finished", extra={"query_execution_id": qid, "rows": len(rows)})
        return ResultTable.from_rows(columns, rows)
