"""Shared test fixtures and fakes for nl_explorer."""

import io
import json
from typing import Any, Dict, List, Optional

import pytest

from nl_explorer.agents.registry import DialectHandler, DialectRegistry
from nl_explorer.catalog.descriptor import DatabaseDescriptor, Dialect
from nl_explorer.catalog.store import InMemoryCatalog
from nl_explorer.credentials.secret_store import Credentials
from nl_explorer.db.result import ResultTable
from nl_explorer.prompts.templates import ANALYTIC_PROMPT, GRAPH_PROMPT, RELATIONAL_PROMPT

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeModel:
    """Stands in for ``BedrockClient``: returns a canned response and records prompts."""

    def __init__(self, response: str = "", error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.prompts: List[str] = []

    def invoke(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class RecordingPromptBuilder:
    def __init__(self, inner) -> None:
        self.inner = inner
        self.calls: List[tuple] = []

    def build(self, descriptor: DatabaseDescriptor, question: str) -> str:
        self.calls.append((descriptor.name, question))
        return self.inner.build(descriptor, question)


class RecordingExecutor:
    def __init__(self, table: Optional[ResultTable] = None, error: Optional[Exception] = None) -> None:
        self.table = table or ResultTable.from_rows(["col"], [])
        self.error = error
        self.calls: List[tuple] = []

    def execute(self, descriptor: DatabaseDescriptor, query: str) -> ResultTable:
        self.calls.append((descriptor.name, query))
        if self.error is not None:
            raise self.error
        return self.table


class FakeSecretStore:
    def __init__(self, username: str = "reader", password: str = "s3cret") -> None:
        self.creds = Credentials(username=username, password=password)
        self.requested: List[str] = []

    def get_credentials(self, secret_id: str) -> Credentials:
        self.requested.append(secret_id)
        return self.creds


class FakeCursor:
    def __init__(self, columns: Optional[List[str]], rows: List[tuple], error: Optional[Exception] = None) -> None:
        self.description = None if columns is None else [(c, None, None, None, None, None, None) for c in columns]
        self._rows = rows
        self.error = error
        self.executed: List[str] = []
        self.closed = False

    def execute(self, query: str) -> None:
        self.executed.append(query)
        if self.error is not None:
            raise self.error

    def __iter__(self):
        return iter(self._rows)

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, cursor: FakeCursor) -> None:
        self._cursor = cursor
        self.closed = False

    def cursor(self) -> FakeCursor:
        return self._cursor

    def close(self) -> None:
        self.closed = True


class FakeConnect:
    """Replacement for ``psycopg2.connect`` that hands out one prepared connection."""

    def __init__(self, connection: FakeConnection, error: Optional[Exception] = None) -> None:
        self.connection = connection
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, dsn: str, **kwargs: Any) -> FakeConnection:
        self.calls.append({"dsn": dsn, **kwargs})
        if self.error is not None:
            raise self.error
        return self.connection


class FakeBedrockRuntime:
    def __init__(self, payload: Any = None, error: Optional[Exception] = None) -> None:
        self.payload = payload
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    def invoke_model(self, **kwargs: Any) -> Dict[str, Any]:
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        raw = self.payload if isinstance(self.payload, bytes) else json.dumps(self.payload).encode("utf-8")
        return {"body": io.BytesIO(raw)}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def shop_descriptor() -> DatabaseDescriptor:
    return DatabaseDescriptor(
        name="shop",
        connection_endpoint="postgresql://shop-db.internal:5432/shop",
        dialect=Dialect.RELATIONAL,
        schema_description="orders(id,total)",
        credential_reference="shop/readonly",
    )


@pytest.fixture
def graph_descriptor() -> DatabaseDescriptor:
    return DatabaseDescriptor(
        name="movies",
        connection_endpoint="bolt://movies.neptune.internal:8182",
        dialect=Dialect.GRAPH,
        schema_description="(:Person)-[:ACTED_IN]->(:Movie)",
    )


@pytest.fixture
def athena_descriptor() -> DatabaseDescriptor:
    return DatabaseDescriptor(
        name="weblogs",
        connection_endpoint="awsathena://AwsRegion=us-east-1;S3OutputLocation=s3://results/;Schema=logs",
        dialect=Dialect.ANALYTIC,
        schema_description="requests(path string, status int)",
    )


@pytest.fixture
def catalog(shop_descriptor, graph_descriptor, athena_descriptor) -> InMemoryCatalog:
    return InMemoryCatalog([shop_descriptor, graph_descriptor, athena_descriptor])


@pytest.fixture
def recording_registry():
    """Registry whose prompt builders and executors record every call."""
    handlers = {
        Dialect.RELATIONAL: DialectHandler(RecordingPromptBuilder(RELATIONAL_PROMPT), RecordingExecutor()),
        Dialect.GRAPH: DialectHandler(RecordingPromptBuilder(GRAPH_PROMPT), RecordingExecutor()),
        Dialect.ANALYTIC: DialectHandler(RecordingPromptBuilder(ANALYTIC_PROMPT), RecordingExecutor()),
    }
    return DialectRegistry(handlers)
