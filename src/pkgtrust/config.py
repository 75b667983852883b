"""Process configuration read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    """Runtime settings for a scoring run.

    Built once at startup and passed explicitly to the components that need
    it; nothing reads the environment after that.
    """

    github_token: str | None = None
    log_file: Path | None = None
    log_level: int = Field(default=0, ge=0, le=2)
    provider_timeout: float = Field(default=60.0, gt=0)
    http_timeout: float = Field(default=30.0, gt=0)
    concurrent_urls: bool = False

    @field_validator("github_token", mode="before")
    @classmethod
    def _blank_token_is_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def has_token(self) -> bool:
        return self.github_token is not None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Validated Settings.

        Raises:
            pydantic.ValidationError: If a variable has an invalid value.
        """
        env = os.environ if environ is None else environ

        values: dict[str, object] = {"github_token": env.get("GITHUB_TOKEN")}
        if env.get("LOG_FILE"):
            values["log_file"] = env["LOG_FILE"]
        if env.get("LOG_LEVEL"):
            values["log_level"] = env["LOG_LEVEL"]
        if env.get("PKGTRUST_PROVIDER_TIMEOUT"):
            values["provider_timeout"] = env["PKGTRUST_PROVIDER_TIMEOUT"]
        if env.get("PKGTRUST_HTTP_TIMEOUT"):
            values["http_timeout"] = env["PKGTRUST_HTTP_TIMEOUT"]
        if env.get("PKGTRUST_CONCURRENT_URLS"):
            values["concurrent_urls"] = env["PKGTRUST_CONCURRENT_URLS"]

        return cls.model_validate(values)
