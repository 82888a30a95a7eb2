"""Environment configuration for the Slack MCP server."""
import logging
import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ConfigurationError

DEFAULT_API_BASE_URL = "https://slack.com/api"

# Ordered most to least verbose
LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Settings(BaseModel):
    """Process-wide settings, immutable once loaded."""

    bot_token: str = Field(..., min_length=1, description="Primary credential (SLACK_BOT_TOKEN)")
    team_id: str = Field(..., min_length=1, description="Workspace ID (SLACK_TEAM_ID)")
    user_token: Optional[str] = Field(None, description="Elevated credential (SLACK_USER_TOKEN)")
    log_level: str = "info"
    api_base_url: str = DEFAULT_API_BASE_URL
    http_timeout: float = Field(30.0, gt=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(LOG_LEVELS)}")
        return value

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def logging_level(self) -> int:
        return LOG_LEVELS[self.log_level]

    @property
    def has_user_token(self) -> bool:
        return bool(self.user_token)


def load_settings(environ: Optional[Mapping[str, str]] = None, load_env_file: bool = True) -> Settings:
    """Build Settings from the environment.

    A ``.env`` file in the working directory is loaded first when
    ``load_env_file`` is true; variables already set in the environment win.

    Raises:
        ConfigurationError: if SLACK_BOT_TOKEN or SLACK_TEAM_ID is missing,
            or an optional value cannot be parsed.
    """
    if environ is None:
        if load_env_file:
            load_dotenv(override=False)
        environ = os.environ

    missing = [name for name in ("SLACK_BOT_TOKEN", "SLACK_TEAM_ID") if not environ.get(name)]
    if missing:
        raise ConfigurationError(
            f"Please set {' and '.join(missing)} environment variable{'s' if len(missing) > 1 else ''}",
            missing=missing,
        )

    values = {
        "bot_token": environ["SLACK_BOT_TOKEN"],
        "team_id": environ["SLACK_TEAM_ID"],
        "user_token": environ.get("SLACK_USER_TOKEN") or None,
        "log_level": environ.get("LOG_LEVEL") or "info",
        "api_base_url": environ.get("SLACK_API_BASE_URL") or DEFAULT_API_BASE_URL,
    }
    if environ.get("SLACK_HTTP_TIMEOUT"):
        values["http_timeout"] = environ["SLACK_HTTP_TIMEOUT"]

    try:
        return Settings(**values)
    except ValueError as e:
        # pydantic.ValidationError subclasses ValueError
        raise ConfigurationError(f"Invalid configuration: {e}") from e
