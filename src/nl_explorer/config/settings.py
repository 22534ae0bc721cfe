from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import yaml
from dotenv import load_dotenv

load_dotenv()

def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)

def _env_bool(key: str, default: bool = False) -> bool:
    val = os.environ.get(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "y", "on")

@dataclass(frozen=True)
class Settings:
    env: str
    log_level: str
    log_file: str

    # Bedrock (query translation)
    use_mock_bedrock: bool
    aws_region: str
    bedrock_chat_model_id: str
    llm_max_tokens: int
    llm_temperature: float
    llm_top_k: int
    llm_top_p: float
    llm_timeout_seconds: float

    # Database catalog (yaml file for local runs, DynamoDB table in AWS)
    catalog_backend: str
    catalog_table_name: str
    catalog_path: str

    # Per-call deadlines for backend queries
    db_connect_timeout_seconds: int
    db_statement_timeout_seconds: int
    athena_poll_interval_seconds: float
    athena_max_wait_seconds: float

def load_settings(app_env: Optional[str] = None) -> Settings:
    app_env = app_env or _env("APP_ENV", "dev")
    cfg_path = Path("config") / f"{app_env}.yaml"
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    cfg = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    app_cfg = cfg.get("app") or {}
    models = cfg.get("models") or {}
    cat_cfg = cfg.get("catalog") or {}
    db_cfg = cfg.get("database") or {}

    # ------------------------------ Models ------------------------------
    aws_region = _env("AWS_REGION", str(models.get("region", "us-east-1")))
    bedrock_chat_model_id = _env("BEDROCK_CHAT_MODEL_ID", str(models.get("chat_model_id", "")))
    llm_max_tokens = int(_env("LLM_MAX_TOKENS", str(models.get("max_tokens", 512))))
    llm_temperature = float(_env("LLM_TEMPERATURE", str(models.get("temperature", 0.0))))
    llm_timeout_seconds = float(_env("LLM_TIMEOUT_SECONDS", str(models.get("timeout_seconds", 60))))

    # ------------------------------ Catalog ------------------------------
    catalog_backend = (_env("CATALOG_BACKEND", str(cat_cfg.get("backend", "yaml"))) or "yaml").strip().lower()
    catalog_table_name = _env("CATALOG_TABLE_NAME", str(cat_cfg.get("table_name", ""))) or ""
    catalog_path = _env("CATALOG_PATH", str(cat_cfg.get("path", "config/databases.yaml"))) or ""

    # ------------------------------ Database ------------------------------
    db_connect_timeout_seconds = int(
        _env("DB_CONNECT_TIMEOUT_SECONDS", str(db_cfg.get("connect_timeout_seconds", 10)))
    )
    db_statement_timeout_seconds = int(
        _env("DB_STATEMENT_TIMEOUT_SECONDS", str(db_cfg.get("statement_timeout_seconds", 120)))
    )
    athena_poll_interval_seconds = float(
        _env("ATHENA_POLL_INTERVAL_SECONDS", str(db_cfg.get("athena_poll_interval_seconds", 0.5)))
    )
    athena_max_wait_seconds = float(
        _env("ATHENA_MAX_WAIT_SECONDS", str(db_cfg.get("athena_max_wait_seconds", 120)))
    )

    return Settings(
        env=app_env,
        log_level=_env("LOG_LEVEL", str(app_cfg.get("log_level", "INFO"))),
        log_file=_env("LOG_FILE", str(app_cfg.get("log_file", "logs/explorer.log"))),
        use_mock_bedrock=_env_bool("USE_MOCK_BEDROCK", bool(models.get("use_mock", False))),
        aws_region=aws_region,
        bedrock_chat_model_id=bedrock_chat_model_id,
        llm_max_tokens=llm_max_tokens,
        llm_temperature=llm_temperature,
        llm_top_k=int(models.get("top_k", 250)),
        llm_top_p=float(models.get("top_p", 1.0)),
        llm_timeout_seconds=llm_timeout_seconds,
        catalog_backend=catalog_backend,
        catalog_table_name=catalog_table_name,
        catalog_path=catalog_path,
        db_connect_timeout_seconds=db_connect_timeout_seconds,
        db_statement_timeout_seconds=db_statement_timeout_seconds,
        athena_poll_interval_seconds=athena_poll_interval_seconds,
        athena_max_wait_seconds=athena_max_wait_seconds,
    )
