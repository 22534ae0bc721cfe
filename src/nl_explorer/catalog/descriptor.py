from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from nl_explorer.exceptions.errors import CatalogError


class Dialect(str, Enum):
    RELATIONAL = "RELATIONAL"
    GRAPH = "GRAPH"
    ANALYTIC = "ANALYTIC"

    @classmethod
    def parse(cls, value: str) -> "Dialect":
        """Accept either a dialect name or the backend name stored in catalog records."""
        key = (value or "").strip().upper()
        if key in cls.__members__:
            return cls[key]
        if key in _DB_TYPE_TO_DIALECT:
            return _DB_TYPE_TO_DIALECT[key]
        raise CatalogError(f"Unknown database type: {value!r}")

    @property
    def db_type(self) -> str:
        return _DIALECT_TO_DB_TYPE[self]


# Backend technology names as written to the catalog table.
_DB_TYPE_TO_DIALECT = {
    "POSTGRESQL": Dialect.RELATIONAL,
    "NEPTUNE": Dialect.GRAPH,
    "ATHENA": Dialect.ANALYTIC,
}
_DIALECT_TO_DB_TYPE = {v: k for k, v in _DB_TYPE_TO_DIALECT.items()}


@dataclass(frozen=True)
class DatabaseDescriptor:
    name: str
    connection_endpoint: str
    dialect: Dialect
    schema_description: str = ""
    credential_reference: Optional[str] = None

    @staticmethod
    def from_item(item: Dict[str, Any]) -> "DatabaseDescriptor":
        """Build a descriptor from a catalog record (DynamoDB item or YAML entry)."""
        missing = [k for k in ("databaseName", "connectionUrl", "dbType") if not item.get(k)]
        if missing:
            raise CatalogError(f"Catalog record is missing {', '.join(missing)}: {item.get('databaseName')!r}")

        return DatabaseDescriptor(
            name=str(item["databaseName"]),
            connection_endpoint=str(item["connectionUrl"]),
            dialect=Dialect.parse(str(item["dbType"])),
            schema_description=str(item.get("schema") or ""),
            credential_reference=item.get("databaseCredentialsSsm") or None,
        )

    def to_item(self) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "databaseName": self.name,
            "connectionUrl": self.connection_endpoint,
            "dbType": self.dialect.db_type,
            "schema": self.schema_description,
        }
        if self.credential_reference:
            item["databaseCredentialsSsm"] = self.credential_reference
        return item
