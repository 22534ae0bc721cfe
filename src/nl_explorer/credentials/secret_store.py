from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from nl_explorer.exceptions.errors import ExecutionError
from nl_explorer.logging.logger import get_logger

log = get_logger("credentials.secret_store")


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


class SecretStore:
    """Reads ``{"username": ..., "password": ...}`` JSON secrets from AWS Secrets Manager."""

    def __init__(self, client: Any = None, region: Optional[str] = None):
        if client is None:
            import boto3

            client = boto3.client("secretsmanager", region_name=region or None)
        self.client = client

    def get_credentials(self, secret_id: str) -> Credentials:
        try:
            resp = self.client.get_secret_value(SecretId=secret_id)
        except (BotoCoreError, ClientError) as e:
            log.warning("Secret lookup failed", extra={"secret_id": secret_id, "error": str(e)})
            raise ExecutionError(f"Could not read database credentials from secret {secret_id!r}") from e

        try:
            secret = json.loads(resp.get("SecretString") or "")
            return Credentials(username=str(secret["username"]), password=str(secret["password"]))
        except (ValueError, KeyError, TypeError) as e:
            raise ExecutionError(
                f"Secret {secret_id!r} is not a JSON object with username and password"
            ) from e
