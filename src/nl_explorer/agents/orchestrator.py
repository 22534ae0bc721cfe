from __future__ import annotations

import time

from nl_explorer.agents.registry import DialectRegistry
from nl_explorer.bedrock.translation import TranslationClient, TranslationResult
from nl_explorer.catalog.store import DatabaseCatalog
from nl_explorer.db.result import ResultTable
from nl_explorer.exceptions.errors import ExecutionError, NotFoundError, TranslationError
from nl_explorer.logging.logger import get_logger


log = get_logger("agents.orchestrator")


class ExecutionPipeline:
    """Question -> prompt -> translation -> query result, for one catalogued database.

    Steps run strictly in order and any failure ends the request: nothing is
    retried and no partial result is returned.
    """

    def __init__(self, catalog: DatabaseCatalog, translator: TranslationClient, registry: DialectRegistry):
        self.catalog = catalog
        self.translator = translator
        self.registry = registry

    def run(self, database_name: str, question: str) -> ResultTable:
        t0 = time.monotonic()

        descriptor = self.catalog.get(database_name)
        if descriptor is None:
            log.info("Database not in catalog", extra={"database": database_name})
            raise NotFoundError(database_name)

        handler = self.registry.resolve(descriptor.dialect)
        prompt = handler.prompt_builder.build(descriptor, question)

        try:
            translation = self.translator.translate(prompt)
        except TranslationError as e:
            log.exception("Translation failed", extra={"database": database_name})
            raise TranslationError(f"translation failed for database {database_name}", database=database_name) from e

        try:
            table = handler.executor.execute(descriptor, translation.query)
        except ExecutionError as e:
            log.exception(
                "Query execution failed",
                extra={"database": database_name, "dialect": descriptor.dialect.value, "query_head": translation.query[:300]},
            )
            raise ExecutionError(
                f"executing the query failed for database {database_name}, translation: {_describe(translation)}",
                database=database_name,
                translation=translation,
            ) from e

        log.info(
            "Pipeline finished",
            extra={
                "database": database_name,
                "dialect": descriptor.dialect.value,
                "rows": len(table.rows),
                "elapsed_s": round(time.monotonic() - t0, 3),
            },
        )
        return table.with_translation(translation)


def _describe(translation: TranslationResult) -> str:
    return f"query={translation.query!r} explanation={translation.explanation!r}"
