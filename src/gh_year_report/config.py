"""Configuration loading and validation."""

import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator

MIN_REPORT_YEAR = 2008
MAX_REPORT_YEAR = 2100


class AuthConfig(BaseModel):
    """GitHub authentication configuration."""

    token_env: str = "GH_STATS_TOKEN"


class GitHubConfig(BaseModel):
    """GitHub configuration section."""

    username: str = Field(default_factory=lambda: os.getenv("GH_USERNAME", ""))
    auth: AuthConfig = Field(default_factory=AuthConfig)
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0, le=10)


class ReportConfig(BaseModel):
    """Report configuration section."""

    year: int | None = Field(default=None, ge=MIN_REPORT_YEAR, le=MAX_REPORT_YEAR)
    year_mode: str = Field(default_factory=lambda: os.getenv("REPORT_YEAR_MODE", "current"))
    time_zone: str = Field(
        default_factory=lambda: os.getenv("REPORT_TZ", "Asia/Shanghai"),
        validate_default=True,
    )
    output_dir: Path = Field(default=Path("./assets"))
    readme_path: Path | None = None
    top_repos: int = Field(default=3, ge=1, le=20)
    top_languages: int = Field(default=5, ge=1, le=20)
    strict_calendar: bool = False

    @field_validator("time_zone")
    @classmethod
    def validate_time_zone(cls, v: str) -> str:
        """Validate that the time zone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            msg = f"Unknown time zone '{v}'"
            raise ValueError(msg) from e
        return v


class AIConfig(BaseModel):
    """AI summary configuration section."""

    enabled: bool = True
    base_url: str = Field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        validate_default=True,
    )
    model: str = Field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    api_key_env: str = "OPENAI_API_KEY"
    timeout_seconds: float = Field(default=20.0, gt=0, le=120)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        """Strip trailing slashes so endpoint paths can be appended."""
        v = v.strip()
        if not v:
            return "https://api.openai.com/v1"
        return v.rstrip("/")

    def resolve_api_key(self) -> str | None:
        """Read the API key from the configured environment variable."""
        return os.getenv(self.api_key_env) or None


class Config(BaseModel):
    """Root configuration model."""

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    ai: AIConfig = Field(default_factory=AIConfig)

    @classmethod
    def default(cls) -> "Config":
        """Build a configuration from defaults and environment variables only."""
        return cls.model_validate({})


def load_config(path: Path) -> Config:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValidationError: If the config is invalid.
    """
    if not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open() as f:
        raw_config: dict[str, Any] | None = yaml.safe_load(f)

    return Config.model_validate(raw_config or {})
