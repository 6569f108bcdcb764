"""
Configuration management for Comic Client.

This module handles loading configuration from environment variables,
a .env file, and provides defaults when needed.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from comic_client.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_AUTH_COOKIE,
    DEFAULT_COMMENT_DEPTH,
    DEFAULT_LOGIN_REDIRECT,
    DEFAULT_REDIRECT_STATUS,
    DEFAULT_TIMEOUT,
    DEFAULT_TOKEN_ENV_VAR,
    DEFAULT_USER_AGENT,
    HTTP_RETRY_TOTAL,
    MAX_COMMENT_DEPTH,
)
from comic_client.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()


class APIConfig(BaseModel):
    """Configuration for the remote comics API."""

    base_url: str = Field(default=DEFAULT_API_BASE_URL, description="Base URL of the API")
    timeout: float = Field(default=DEFAULT_TIMEOUT, description="Request timeout in seconds")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User agent header")
    retries: int = Field(
        default=HTTP_RETRY_TOTAL,
        description="Transport-level retries (0 disables the retry adapter)",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL and drop the trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got '{v}'")
        return v.rstrip("/")

    @field_validator("timeout", "retries")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("must not be negative")
        return v


class AuthConfig(BaseModel):
    """Configuration for attaching the session credential."""

    cookie_name: str = Field(default=DEFAULT_AUTH_COOKIE, description="Name of the auth cookie")
    token_env_var: str = Field(
        default=DEFAULT_TOKEN_ENV_VAR, description="Environment variable holding the token"
    )
    login_redirect: str = Field(
        default=DEFAULT_LOGIN_REDIRECT, description="Where unauthenticated pages redirect to"
    )
    redirect_status: int = Field(
        default=DEFAULT_REDIRECT_STATUS, description="HTTP status used for the redirect"
    )


class CommentConfig(BaseModel):
    """Configuration for comment tree building."""

    max_depth: int = Field(
        default=DEFAULT_COMMENT_DEPTH, description="Levels of replies expanded below a root"
    )

    @field_validator("max_depth")
    @classmethod
    def validate_max_depth(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_depth must not be negative")
        if v > MAX_COMMENT_DEPTH:
            raise ValueError(f"max_depth must not exceed {MAX_COMMENT_DEPTH}")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    format: str = Field(
        default="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        description="Logging format string",
    )
    save_to_file: bool = Field(
        default=False, description="Whether to save logs to file"
    )
    log_file: Optional[Path] = Field(
        default=Path("logs/comic_client.log"), description="Path to log file"
    )
    rotation: str = Field(
        default="500 MB", description="Log rotation size"
    )
    retention: str = Field(
        default="10 days", description="Log retention period"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @field_validator("log_file")
    @classmethod
    def validate_log_file(cls, v: Optional[Path], info: ValidationInfo) -> Optional[Path]:
        """Ensure log file directory exists if logging to file."""
        if info.data.get("save_to_file") and v is not None:
            v.parent.mkdir(parents=True, exist_ok=True)
        return v


class AppConfig(BaseModel):
    """Main application configuration."""

    api: APIConfig = Field(default_factory=APIConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    comments: CommentConfig = Field(default_factory=CommentConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache()
def get_config() -> AppConfig:
    """
    Load and return the application configuration.

    Uses environment variables and default values.
    Results are cached; call ``get_config.cache_clear()`` after changing
    the environment.

    Raises:
        ConfigurationError: If an environment value is invalid
    """
    try:
        return AppConfig(
            api=APIConfig(
                base_url=os.getenv("COMIC_API_BASE_URL", DEFAULT_API_BASE_URL),
                timeout=os.getenv("COMIC_API_TIMEOUT", str(DEFAULT_TIMEOUT)),
                user_agent=os.getenv("COMIC_API_USER_AGENT", DEFAULT_USER_AGENT),
                retries=os.getenv("COMIC_API_RETRIES", str(HTTP_RETRY_TOTAL)),
            ),
            auth=AuthConfig(
                cookie_name=os.getenv("COMIC_AUTH_COOKIE", DEFAULT_AUTH_COOKIE),
                token_env_var=os.getenv("COMIC_TOKEN_ENV_VAR", DEFAULT_TOKEN_ENV_VAR),
                login_redirect=os.getenv("COMIC_LOGIN_REDIRECT", DEFAULT_LOGIN_REDIRECT),
            ),
            comments=CommentConfig(
                max_depth=os.getenv("COMMENT_MAX_DEPTH", str(DEFAULT_COMMENT_DEPTH)),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                save_to_file=os.getenv("LOG_SAVE_TO_FILE", "false").lower() == "true",
                log_file=Path(os.getenv("LOG_FILE", "logs/comic_client.log")),
            ),
        )
    except PydanticValidationError as e:
        raise ConfigurationError("Invalid configuration", {"errors": e.errors()}) from e
