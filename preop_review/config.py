"""Configuration for the questionnaire review service.

Settings cover the database DSN, upload limits and link id length. Each value
is taken from the first source that provides it: environment variable, a
one-value text file under `config/`, then `preop_config.json`. The result is
validated by the Pydantic models below.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("preop_config.json")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Unreadable overrides are skipped, lower-precedence sources still apply
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class UploadConfig(BaseModel):
    max_questions: int = Field(default=500, gt=0)
    max_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    max_question_text: int = Field(default=1000, gt=0)
    warn_option_count: int = Field(default=20, gt=0)
    warn_option_length: int = Field(default=100, gt=0)


class LinkConfig(BaseModel):
    link_id_bytes: int = Field(default=16, ge=8, le=64)


class AppConfig(BaseModel):
    database: DatabaseConfig
    upload: UploadConfig = Field(default_factory=UploadConfig)
    links: LinkConfig = Field(default_factory=LinkConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Build and validate an `AppConfig`.

    Sources, highest first:
    1) environment variables
    2) files in `config/`
    3) preop_config.json in the working directory
    4) in-memory SQLite and built-in limits
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    def _pick(env_key: str, file_key: str, json_key: str, default: str) -> str:
        return str(_env(env_key) or _read_config_file(file_key) or _base(json_key, default)).strip()

    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )

    try:
        upload = UploadConfig(
            max_questions=_pick("UPLOAD_MAX_QUESTIONS", "upload.max_questions", "upload.max_questions", "500"),
            max_bytes=_pick("UPLOAD_MAX_BYTES", "upload.max_bytes", "upload.max_bytes", str(5 * 1024 * 1024)),
            max_question_text=_pick("UPLOAD_MAX_QUESTION_TEXT", "upload.max_question_text", "upload.max_question_text", "1000"),
            warn_option_count=_pick("UPLOAD_WARN_OPTION_COUNT", "upload.warn_option_count", "upload.warn_option_count", "20"),
            warn_option_length=_pick("UPLOAD_WARN_OPTION_LENGTH", "upload.warn_option_length", "upload.warn_option_length", "100"),
        )
        links = LinkConfig(link_id_bytes=_pick("LINK_ID_BYTES", "links.id_bytes", "links.link_id_bytes", "16"))
        return AppConfig(database=DatabaseConfig(dsn=dsn), upload=upload, links=links)
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "UploadConfig",
    "LinkConfig",
    "load_config",
]
