"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="RASOAT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Hệ thống Rà soát Cư trú API"
    api_prefix: str = "/api"
    regions_file: Path = Field(
        default=Path("data/vietnam_provinces.json"),
        description="Province to district reference data used by the submission form.",
    )
    timezone: str = Field(
        default="Asia/Ho_Chi_Minh",
        description="Local timezone for check dates and spreadsheet timestamps.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Document store
    store_backend: Literal["supabase", "memory"] = Field(
        default="supabase",
        description="Document store implementation. 'memory' keeps records in-process only.",
    )
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    temporary_collection: str = Field(default="tam_tru_records")
    permanent_collection: str = Field(default="thuong_tru_records")
    legacy_collection: str = Field(
        default="verification_records",
        description="Shared collection written before records were split by type. Read only.",
    )
    legacy_record_types: tuple[str, ...] = Field(
        default=("tamTru",),
        description="Record types whose live view also merges the legacy collection.",
    )
    live_poll_interval_seconds: float = Field(default=2.0, gt=0.0)

    # Access control
    authorized_emails: tuple[str, ...] = Field(
        default=("phanminhdai.it@gmail.com",),
        description="Accounts allowed to list, delete and export records.",
    )

    @field_validator("regions_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", "legacy_record_types", "authorized_emails", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
