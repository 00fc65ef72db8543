from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

_BLOB_BACKENDS = {"local", "s3"}
_OCR_PROVIDERS = {"disabled", "textract"}
_GENERATION_PROVIDERS = {"disabled", "bedrock", "openai"}
_DATASTORE_BACKENDS = {"sqlite", "dynamodb"}

DEFAULT_REQUEST_SHAPES = ("input", "prompt", "messages", "text", "input_only")


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


def _choice(name: str, default: str, allowed: set[str]) -> str:
    value = (_get_env(name, default) or default).strip().lower()
    if value not in allowed:
        raise RuntimeError(f"{name} must be one of: {', '.join(sorted(allowed))} (got '{value}').")
    return value


@dataclass(frozen=True)
class Settings:
    app_name: str
    log_level: str
    sentry_dsn: str | None
    api_key: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_credentials: bool
    rate_limit: str
    rate_limit_enabled: bool
    aws_region: str
    blob_backend: str
    s3_bucket: str | None
    local_blob_dir: str
    ocr_provider: str
    ocr_poll_interval_s: float
    ocr_poll_backoff: float
    ocr_poll_max_interval_s: float
    ocr_poll_max_attempts: int
    ocr_job_timeout_s: float
    generation_provider: str
    bedrock_model_id: str | None
    openai_api_key: str | None
    openai_model: str
    openai_base_url: str | None
    generation_max_tokens: int
    generation_temperature: float
    generation_request_shapes: tuple[str, ...]
    datastore_backend: str
    dynamodb_table_name: str | None
    candidates_db_path: str
    max_upload_bytes: int
    pipeline_timeout_s: float
    jd_min_text_chars: int
    question_min_items: int
    personalized_questions: bool
    display_timezone: str


def validate_settings(settings: Settings) -> Settings:
    if settings.blob_backend == "s3" and not settings.s3_bucket:
        raise RuntimeError("BLOB_BACKEND=s3 requires S3_BUCKET to be set.")
    if settings.datastore_backend == "dynamodb" and not settings.dynamodb_table_name:
        raise RuntimeError("DATASTORE_BACKEND=dynamodb requires DYNAMODB_TABLE_NAME to be set.")
    if settings.generation_provider == "bedrock" and not settings.bedrock_model_id:
        raise RuntimeError("GENERATION_PROVIDER=bedrock requires BEDROCK_MODEL_ID to be set.")
    if settings.generation_provider == "openai" and not settings.openai_api_key:
        raise RuntimeError("GENERATION_PROVIDER=openai requires OPENAI_API_KEY to be set.")
    if settings.ocr_poll_interval_s <= 0 or settings.ocr_poll_max_attempts <= 0 or settings.ocr_job_timeout_s <= 0:
        raise RuntimeError("OCR polling interval, attempt count and timeout must be positive.")
    if settings.ocr_poll_backoff < 1.0:
        raise RuntimeError("OCR_POLL_BACKOFF must be >= 1.0.")
    if settings.max_upload_bytes <= 0 or settings.pipeline_timeout_s <= 0:
        raise RuntimeError("MAX_UPLOAD_BYTES and PIPELINE_TIMEOUT_S must be positive.")
    if settings.question_min_items < 1:
        raise RuntimeError("QUESTION_MIN_ITEMS must be >= 1.")
    unknown_shapes = [name for name in settings.generation_request_shapes if name not in DEFAULT_REQUEST_SHAPES]
    if unknown_shapes:
        raise RuntimeError(
            f"GENERATION_REQUEST_SHAPES contains unknown shapes: {', '.join(unknown_shapes)}. "
            f"Known shapes: {', '.join(DEFAULT_REQUEST_SHAPES)}."
        )
    return settings


def load_settings() -> Settings:
    """Read the environment once and return validated, immutable settings."""
    load_dotenv()
    settings = Settings(
        app_name=_get_env("APP_NAME", "Smart HR Intake API") or "Smart HR Intake API",
        log_level=(_get_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        sentry_dsn=_get_env("SENTRY_DSN"),
        api_key=_get_env("API_KEY"),
        cors_allowed_origins=_get_env_list(
            "CORS_ALLOWED_ORIGINS",
            ["http://localhost:3000", "http://127.0.0.1:3000"],
        ),
        cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", True),
        rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        aws_region=_get_env("AWS_REGION", "us-east-1") or "us-east-1",
        blob_backend=_choice("BLOB_BACKEND", "local", _BLOB_BACKENDS),
        s3_bucket=_get_env("S3_BUCKET"),
        local_blob_dir=_get_env("LOCAL_BLOB_DIR", "data/blobs") or "data/blobs",
        ocr_provider=_choice("OCR_PROVIDER", "disabled", _OCR_PROVIDERS),
        ocr_poll_interval_s=_get_env_float("OCR_POLL_INTERVAL_S", 2.0),
        ocr_poll_backoff=_get_env_float("OCR_POLL_BACKOFF", 1.5),
        ocr_poll_max_interval_s=_get_env_float("OCR_POLL_MAX_INTERVAL_S", 10.0),
        ocr_poll_max_attempts=_get_env_int("OCR_POLL_MAX_ATTEMPTS", 30),
        ocr_job_timeout_s=_get_env_float("OCR_JOB_TIMEOUT_S", 120.0),
        generation_provider=_choice("GENERATION_PROVIDER", "disabled", _GENERATION_PROVIDERS),
        bedrock_model_id=_get_env("BEDROCK_MODEL_ID"),
        openai_api_key=_get_env("OPENAI_API_KEY"),
        openai_model=_get_env("OPENAI_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
        openai_base_url=_get_env("OPENAI_BASE_URL"),
        generation_max_tokens=_get_env_int("GENERATION_MAX_TOKENS", 1000),
        generation_temperature=_get_env_float("GENERATION_TEMPERATURE", 0.7),
        generation_request_shapes=_get_env_list("GENERATION_REQUEST_SHAPES", DEFAULT_REQUEST_SHAPES),
        datastore_backend=_choice("DATASTORE_BACKEND", "sqlite", _DATASTORE_BACKENDS),
        dynamodb_table_name=_get_env("DYNAMODB_TABLE_NAME"),
        candidates_db_path=_get_env("CANDIDATES_DB_PATH", "data/candidates.db") or "data/candidates.db",
        max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        pipeline_timeout_s=_get_env_float("PIPELINE_TIMEOUT_S", 300.0),
        jd_min_text_chars=_get_env_int("JD_MIN_TEXT_CHARS", 80),
        question_min_items=_get_env_int("QUESTION_MIN_ITEMS", 3),
        personalized_questions=_get_env_bool("PERSONALIZED_QUESTIONS", True),
        display_timezone=_get_env("DISPLAY_TIMEZONE", "Asia/Kolkata") or "Asia/Kolkata",
    )
    return validate_settings(settings)
