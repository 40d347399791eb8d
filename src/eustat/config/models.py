"""Pydantic models describing eustat configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CacheConfig(BaseModel):
    """Process-wide cache defaults; every field can be overridden per call."""

    model_config = ConfigDict(extra="allow")

    dir: Optional[Path] = None
    update: bool = False
    temp_subdir: str = "eurostat"

    @field_validator("temp_subdir")
    @classmethod
    def _validate_temp_subdir(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value:
            raise ValueError("temp_subdir must be a single path component.")
        return value


class SourceConfig(BaseModel):
    """Bulk-download endpoint and polite access policy."""

    model_config = ConfigDict(extra="allow")

    url_pattern: str = (
        "https://ec.europa.eu/eurostat/api/dissemination/sdmx/2.1/data/{id}"
        "?format=TSV&compressed=true"
    )
    timeout_seconds: int = Field(default=60, ge=1)
    attempts: int = Field(default=1, ge=1)
    rate_limit_seconds: float = Field(default=0.0, ge=0.0)
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("url_pattern")
    @classmethod
    def _validate_url_pattern(cls, value: str) -> str:
        if "{id}" not in value:
            raise ValueError("url_pattern must contain an '{id}' placeholder.")
        return value

    def url_for(self, dataset_id: str) -> str:
        """Return the download URL for `dataset_id`."""

        return self.url_pattern.format(id=dataset_id)


class EustatConfig(BaseModel):
    """Root configuration object threaded through dataset calls."""

    model_config = ConfigDict(extra="allow")

    cache: CacheConfig = Field(default_factory=CacheConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)


__all__ = ["CacheConfig", "EustatConfig", "SourceConfig"]
