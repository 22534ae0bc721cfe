from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from nl_explorer.agents.orchestrator import ExecutionPipeline
from nl_explorer.agents.registry import default_registry
from nl_explorer.bedrock.client import BedrockClient, bedrock_config_from_settings
from nl_explorer.bedrock.translation import TranslationClient
from nl_explorer.catalog.store import DatabaseCatalog, DynamoDbCatalog, YamlCatalog, distinct_dialects
from nl_explorer.config.settings import Settings
from nl_explorer.credentials.secret_store import SecretStore
from nl_explorer.db.result import ResultTable
from nl_explorer.exceptions.errors import (
    CatalogError,
    ConfigurationError,
    DataExplorationError,
    ExecutionError,
    NotFoundError,
    TranslationError,
)
from nl_explorer.logging.logger import get_logger

log = get_logger("api.service")


@dataclass(frozen=True)
class QueryFailure:
    kind: str
    message: str
    status: int


@dataclass(frozen=True)
class QueryResponse:
    result: Optional[ResultTable] = None
    failure: Optional[QueryFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> Dict[str, Any]:
        if self.failure is not None:
            return {
                "ok": False,
                "error": {"kind": self.failure.kind, "message": self.failure.message},
                "status": self.failure.status,
            }
        return {"ok": True, "result": self.result.to_dict(), "status": 200}


# Order matters: first matching class wins.
_FAILURE_KINDS = (
    (NotFoundError, "not_found", 404),
    (TranslationError, "translation_failed", 502),
    (ExecutionError, "execution_failed", 502),
    (CatalogError, "catalog_error", 500),
    (ConfigurationError, "configuration_error", 500),
)


class DataExplorationService:
    """What an HTTP or UI layer calls: list catalogued databases and run questions against them."""

    def __init__(self, catalog: DatabaseCatalog, pipeline: ExecutionPipeline):
        self.catalog = catalog
        self.pipeline = pipeline

    def list_databases(self) -> List[Dict[str, Any]]:
        return [d.to_item() for d in self.catalog.list()]

    def distinct_dialects(self) -> List[str]:
        return distinct_dialects(self.catalog)

    def run_query(self, database_name: str, question: str) -> QueryResponse:
        if not (database_name or "").strip() or not (question or "").strip():
            return QueryResponse(
                failure=QueryFailure("invalid_request", "databaseName and question are required", 400)
            )

        try:
            return QueryResponse(result=self.pipeline.run(database_name, question))
        except DataExplorationError as e:
            for cls, kind, status in _FAILURE_KINDS:
                if isinstance(e, cls):
                    return QueryResponse(failure=QueryFailure(kind, str(e), status))
            raise


def build_catalog(settings: Settings) -> DatabaseCatalog:
    if settings.catalog_backend == "dynamodb":
        if not settings.catalog_table_name:
            raise ConfigurationError("CATALOG_TABLE_NAME is required when CATALOG_BACKEND=dynamodb")
        return DynamoDbCatalog.from_table_name(settings.catalog_table_name, region=settings.aws_region)
    if settings.catalog_backend == "yaml":
        return YamlCatalog.load(settings.catalog_path)
    raise ConfigurationError(f"CATALOG_BACKEND not supported: {settings.catalog_backend}")


def build_service(settings: Settings, catalog: Optional[DatabaseCatalog] = None) -> DataExplorationService:
    """Wire the service from settings. Remote clients are created once here and reused per request."""
    if catalog is None:
        catalog = build_catalog(settings)
    bedrock = BedrockClient(bedrock_config_from_settings(settings))
    secret_store = SecretStore(region=settings.aws_region)
    pipeline = ExecutionPipeline(
        catalog=catalog,
        translator=TranslationClient(bedrock),
        registry=default_registry(secret_store, settings),
    )
    log.info(
        "Service ready",
        extra={"catalog_backend": settings.catalog_backend, "model_id": settings.bedrock_chat_model_id},
    )
    return DataExplorationService(catalog, pipeline)
