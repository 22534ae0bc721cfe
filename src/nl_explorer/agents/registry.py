from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Protocol

from nl_explorer.catalog.descriptor import DatabaseDescriptor, Dialect
from nl_explorer.credentials.secret_store import SecretStore
from nl_explorer.db.athena import AthenaExecutor
from nl_explorer.db.neptune import NeptuneExecutor
from nl_explorer.db.postgres import PostgresExecutor
from nl_explorer.db.result import ResultTable
from nl_explorer.exceptions.errors import ConfigurationError
from nl_explorer.prompts.templates import ANALYTIC_PROMPT, GRAPH_PROMPT, RELATIONAL_PROMPT


class PromptBuilder(Protocol):
    def build(self, descriptor: DatabaseDescriptor, question: str) -> str: ...


class QueryExecutor(Protocol):
    def execute(self, descriptor: DatabaseDescriptor, query: str) -> ResultTable: ...


@dataclass(frozen=True)
class DialectHandler:
    prompt_builder: PromptBuilder
    executor: QueryExecutor


class DialectRegistry:
    """Dialect -> (prompt builder, executor). A new backend is one ``register`` call."""

    def __init__(self, handlers: Optional[Mapping[Dialect, DialectHandler]] = None):
        self._handlers: Dict[Dialect, DialectHandler] = dict(handlers or {})

    def register(self, dialect: Dialect, handler: DialectHandler) -> None:
        self._handlers[dialect] = handler

    def resolve(self, dialect: Dialect) -> DialectHandler:
        try:
            return self._handlers[dialect]
        except KeyError:
            raise ConfigurationError(f"No handler registered for dialect {dialect.value}") from None


def default_registry(secret_store: SecretStore, settings) -> DialectRegistry:
    return DialectRegistry(
        {
            Dialect.RELATIONAL: DialectHandler(
                RELATIONAL_PROMPT,
                PostgresExecutor(
                    secret_store=secret_store,
                    connect_timeout_seconds=settings.db_connect_timeout_seconds,
                    statement_timeout_seconds=settings.db_statement_timeout_seconds,
                ),
            ),
            Dialect.GRAPH: DialectHandler(
                GRAPH_PROMPT,
                NeptuneExecutor(
                    connect_timeout_seconds=settings.db_connect_timeout_seconds,
                    statement_timeout_seconds=settings.db_statement_timeout_seconds,
                ),
            ),
            Dialect.ANALYTIC: DialectHandler(
                ANALYTIC_PROMPT,
                AthenaExecutor(
                    poll_interval_seconds=settings.athena_poll_interval_seconds,
                    max_wait_seconds=settings.athena_max_wait_seconds,
                ),
            ),
        }
    )
