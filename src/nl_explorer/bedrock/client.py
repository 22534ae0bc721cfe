from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Optional

from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from nl_explorer.exceptions.errors import TranslationError
from nl_explorer.logging.logger import get_logger

log = get_logger("bedrock.client")

# Returned in mock mode so the UI and pipeline can run without Bedrock access.
MOCK_RESPONSE = (
    "<query>SELECT 1 AS mock_value</query>"
    "<explanation>Mock translation; USE_MOCK_BEDROCK is enabled.</explanation>"
)


@dataclass
class BedrockConfig:
    region: str
    chat_model_id: str
    max_tokens: int = 512
    temperature: float = 0.0
    top_k: int = 250
    top_p: float = 1.0
    timeout_seconds: float = 60.0
    use_mock: bool = False


class BedrockClient:
    """Owns one reusable bedrock-runtime client; each ``invoke`` is a single attempt."""

    def __init__(self, cfg: BedrockConfig, runtime: Any = None):
        self.cfg = cfg
        self.br = runtime
        if self.br is None and not cfg.use_mock:
            import boto3

            self.br = boto3.client(
                "bedrock-runtime",
                region_name=cfg.region,
                config=Config(
                    connect_timeout=cfg.timeout_seconds,
                    read_timeout=cfg.timeout_seconds,
                    retries={"total_max_attempts": 1},
                ),
            )

    def invoke(self, prompt: str) -> str:
        """Send ``prompt`` as a single user message and return the model's raw text."""
        if self.cfg.use_mock:
            return MOCK_RESPONSE

        if not self.br:
            raise TranslationError("Bedrock runtime client is not initialized.")

        body = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": self.cfg.max_tokens,
            "temperature": self.cfg.temperature,
            "top_k": self.cfg.top_k,
            "top_p": self.cfg.top_p,
            "stop_sequences": ["\n\nHuman:"],
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            resp = self.br.invoke_model(
                modelId=self.cfg.chat_model_id,
                contentType="application/json",
                accept="application/json",
                body=json.dumps(body).encode("utf-8"),
            )
            # StreamingBody can only be read once.
            raw_bytes = resp["body"].read()
        except (BotoCoreError, ClientError) as e:
            log.warning(
                "Bedrock invoke_model failed",
                extra={"error": str(e), "model_id": self.cfg.chat_model_id},
                exc_info=True,
            )
            raise TranslationError(f"Bedrock invocation failed: {e}") from e

        if not raw_bytes:
            raise TranslationError("Empty Bedrock response body.")

        try:
            payload = json.loads(raw_bytes.decode("utf-8"))
        except ValueError as e:
            raise TranslationError("Bedrock response body is not valid JSON.") from e

        text = self._extract_text(payload)
        log.info("Claude text head: %r", text[:300])
        return text

    def _extract_text(self, payload: Any) -> str:
        if not isinstance(payload, dict):
            return ""
        # Messages API shape: {"content":[{"type":"text","text":"..."}], ...}
        if "content" in payload:
            parts: List[str] = []
            for c in payload.get("content", []) or []:
                if isinstance(c, dict) and c.get("type") == "text":
                    parts.append(c.get("text", ""))
            return "".join(parts)
        # legacy text-completions shape
        completion: Optional[str] = payload.get("completion")
        return completion or ""


def bedrock_config_from_settings(settings: Any) -> BedrockConfig:
    return BedrockConfig(
        region=settings.aws_region,
        chat_model_id=settings.bedrock_chat_model_id,
        max_tokens=settings.llm_max_tokens,
        temperature=settings.llm_temperature,
        top_k=settings.llm_top_k,
        top_p=settings.llm_top_p,
        timeout_seconds=settings.llm_timeout_seconds,
        use_mock=settings.use_mock_bedrock,
    )
