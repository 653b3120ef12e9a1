"""Client settings loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from sessionguard.utils.env import get_bool_env, get_mapping_env


class PipelineSettings(BaseModel):
    refresh_endpoint: str
    intercept_globally: Optional[bool] = None
    custom_refresh_headers: Dict[str, str] = Field(default_factory=dict)
    expiry_status_code: int = Field(default=401, ge=100, le=599)
    max_attempts: int = Field(default=10, ge=1)
    timeout: float = Field(default=30.0, gt=0)
    store_path: Optional[Path] = None

    @field_validator("refresh_endpoint")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        if not (value.startswith("http://") or value.startswith("https://")):
            raise ValueError("refresh_endpoint must start with http:// or https://")
        return value

    @classmethod
    def from_file(cls, path: Path) -> "PipelineSettings":
        data = yaml.safe_load(path.read_text()) or {}
        try:
            settings = cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid sessionguard settings: {exc}") from exc
        if settings.store_path and not settings.store_path.is_absolute():
            settings.store_path = (path.parent / settings.store_path).resolve()
        return settings

    @classmethod
    def from_env(cls, prefix: str = "SESSIONGUARD_") -> "PipelineSettings":
        data: Dict[str, object] = {
            "refresh_endpoint": os.getenv(f"{prefix}REFRESH_ENDPOINT", ""),
            "intercept_globally": get_bool_env(f"{prefix}INTERCEPT_GLOBALLY", default=None),
            "custom_refresh_headers": get_mapping_env(f"{prefix}REFRESH_HEADERS"),
        }
        for field in ("expiry_status_code", "max_attempts", "timeout", "store_path"):
            raw = os.getenv(f"{prefix}{field.upper()}")
            if raw:
                data[field] = raw
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid sessionguard settings: {exc}") from exc
