from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

import boto3
import yaml
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from nl_explorer.catalog.descriptor import DatabaseDescriptor
from nl_explorer.exceptions.errors import CatalogError
from nl_explorer.logging.logger import get_logger

log = get_logger("catalog.store")


class DatabaseCatalog(Protocol):
    def get(self, name: str) -> Optional[DatabaseDescriptor]: ...

    def list(self) -> List[DatabaseDescriptor]: ...

    def put(self, descriptor: DatabaseDescriptor) -> None: ...


class InMemoryCatalog:
    def __init__(self, descriptors: Iterable[DatabaseDescriptor] = ()):
        self._items: Dict[str, DatabaseDescriptor] = {}
        for d in descriptors:
            self.put(d)

    def get(self, name: str) -> Optional[DatabaseDescriptor]:
        return self._items.get(name)

    def list(self) -> List[DatabaseDescriptor]:
        return list(self._items.values())

    def put(self, descriptor: DatabaseDescriptor) -> None:
        self._items[descriptor.name] = descriptor


class YamlCatalog:
    @staticmethod
    def load(path: str = "config/databases.yaml") -> InMemoryCatalog:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Database catalog not found: {p}")
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

        descriptors = [DatabaseDescriptor.from_item(item) for item in (raw.get("databases") or [])]
        names = [d.name for d in descriptors]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise CatalogError(f"Duplicate database names in {p}: {', '.join(dupes)}")

        log.info("Loaded database catalog", extra={"path": str(p), "databases": len(descriptors)})
        return InMemoryCatalog(descriptors)


class DynamoDbCatalog:
    """Catalog backed by a DynamoDB table keyed on ``databaseName``.

    Talks to the low-level client (safe to share between threads) and converts
    items through boto3's type (de)serializers.
    """

    def __init__(self, client: Any, table_name: str):
        self.client = client
        self.table_name = table_name
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    @classmethod
    def from_table_name(cls, table_name: str, region: Optional[str] = None) -> "DynamoDbCatalog":
        return cls(boto3.client("dynamodb", region_name=region or None), table_name)

    def _decode(self, item: Dict[str, Any]) -> DatabaseDescriptor:
        return DatabaseDescriptor.from_item({k: self._deserializer.deserialize(v) for k, v in item.items()})

    def get(self, name: str) -> Optional[DatabaseDescriptor]:
        try:
            resp = self.client.get_item(TableName=self.table_name, Key={"databaseName": {"S": name}})
        except (BotoCoreError, ClientError) as e:
            log.exception("Catalog lookup failed", extra={"database": name})
            raise CatalogError(f"Catalog lookup failed for {name!r}") from e
        item = resp.get("Item")
        return self._decode(item) if item else None

    def list(self) -> List[DatabaseDescriptor]:
        out: List[DatabaseDescriptor] = []
        try:
            for page in self.client.get_paginator("scan").paginate(TableName=self.table_name):
                out.extend(self._decode(i) for i in page.get("Items", []))
        except (BotoCoreError, ClientError) as e:
            log.exception("Catalog scan failed")
            raise CatalogError("Catalog scan failed") from e
        return out

    def put(self, descriptor: DatabaseDescriptor) -> None:
        item = {k: self._serializer.serialize(v) for k, v in descriptor.to_item().items()}
        try:
            self.client.put_item(TableName=self.table_name, Item=item)
        except (BotoCoreError, ClientError) as e:
            raise CatalogError(f"Could not store catalog entry {descriptor.name!r}") from e
        log.info("Stored catalog entry", extra={"database": descriptor.name, "dialect": descriptor.dialect.value})


def distinct_dialects(catalog: DatabaseCatalog) -> List[str]:
    """Backend types currently present in the catalog, computed fresh on every call."""
    return sorted({d.dialect.db_type for d in catalog.list()})
