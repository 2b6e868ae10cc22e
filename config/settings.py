"""
Configuration management for the session service.

This module provides centralized configuration loading and validation using
Pydantic settings. Values are read from environment variables or .env files,
with an optional environment-specific file layered on top.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Optional, List, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# 30 days, the lifetime a session gets on every write
DEFAULT_SESSION_LIFETIME_SECONDS = 2_592_000

# Sessions with less than 7 days left are extended on read
DEFAULT_REFRESH_THRESHOLD_SECONDS = 604_800


class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


def _detect_environment() -> Environment:
    """
    Detect the current environment from the ENVIRONMENT variable.

    Returns:
        Environment: The detected environment, defaults to DEVELOPMENT if not set.
    """
    env_value = os.environ.get("ENVIRONMENT", "development").lower().strip()
    try:
        return Environment(env_value)
    except ValueError:
        return Environment.DEVELOPMENT


def _get_env_files(environment: Environment) -> Tuple[str, ...]:
    """
    Get the list of .env files to load for the given environment.

    The base .env file is loaded first, then the environment-specific file
    overrides it.
    """
    env_file_map = {
        Environment.DEVELOPMENT: ".env.development",
        Environment.STAGING: ".env.staging",
        Environment.PRODUCTION: ".env.production",
    }
    env_specific_file = env_file_map.get(environment, ".env.development")

    return (".env", env_specific_file)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Nothing is strictly required in development: the in-memory cache backend
    and the default session lifetime work out of the box. Outside of
    development a Redis URL must be configured when the redis backend is
    selected.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (development, staging, production)"
    )

    # Session Configuration
    session_name: str = Field(
        default="NovaSession",
        description="Base name of the session cookie"
    )
    session_lifetime_seconds: int = Field(
        default=DEFAULT_SESSION_LIFETIME_SECONDS,
        ge=60,
        description="Lifetime given to a session record on every write"
    )
    session_refresh_threshold_seconds: int = Field(
        default=DEFAULT_REFRESH_THRESHOLD_SECONDS,
        ge=1,
        description="Remaining TTL below which a read extends the session"
    )
    session_cookie_path: str = Field(
        default="/",
        description="Path attribute of the session cookie"
    )
    session_cookie_secure: bool = Field(
        default=False,
        description="Only send the session cookie over HTTPS"
    )
    session_cookie_httponly: bool = Field(
        default=True,
        description="Hide the session cookie from JavaScript"
    )
    session_cookie_samesite: str = Field(
        default="lax",
        description="SameSite attribute of the session cookie"
    )
    app_root: str = Field(
        default_factory=lambda: str(Path.cwd()),
        description="Application root, hashed into the cookie name"
    )

    # Cache Configuration
    cache_backend: str = Field(
        default="memory",
        description="Cache backend for session storage: 'memory' or 'redis'"
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for session storage"
    )
    cache_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per cache round-trip before giving up"
    )
    cache_retry_initial_delay: float = Field(
        default=0.1,
        ge=0.0,
        description="Initial backoff delay between cache retries, in seconds"
    )

    # Observability Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("session_name")
    @classmethod
    def validate_session_name(cls, v: str) -> str:
        """Cookie names may not be empty or contain separators."""
        v = v.strip()
        if not v:
            raise ValueError("session_name cannot be empty")
        if any(ch in v for ch in " ;,="):
            raise ValueError("session_name must not contain spaces, ';', ',' or '='")
        return v

    @field_validator("session_cookie_samesite")
    @classmethod
    def validate_session_cookie_samesite(cls, v: str) -> str:
        """Validate that session_cookie_samesite is a SameSite value."""
        v = v.strip().lower()
        if v not in {"lax", "strict", "none"}:
            raise ValueError("session_cookie_samesite must be 'lax', 'strict' or 'none'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.strip().upper()
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        """Validate that cache_backend is either 'memory' or 'redis'."""
        v = v.strip().lower()
        if v not in {"memory", "redis"}:
            raise ValueError("cache_backend must be 'memory' or 'redis'")
        return v

    @model_validator(mode="after")
    def validate_cache_config(self) -> "Settings":
        """Validate that a Redis URL is provided for the redis backend."""
        if self.cache_backend == "redis" and not self.redis_url:
            if self.environment != Environment.DEVELOPMENT:
                raise ValueError(
                    "redis_url is required when cache_backend is 'redis' "
                    "in non-development environments"
                )
        return self


class ConfigurationError(Exception):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None,
                 invalid_fields: Optional[dict] = None):
        self.message = message
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        super().__init__(self.format_error_message())

    def format_error_message(self) -> str:
        """Format a descriptive error message listing all issues."""
        parts = [self.message]

        if self.missing_fields:
            parts.append(f"\nMissing required fields: {', '.join(self.missing_fields)}")

        if self.invalid_fields:
            invalid_parts = [f"  - {field}: {error}" for field, error in self.invalid_fields.items()]
            parts.append("\nInvalid field values:\n" + "\n".join(invalid_parts))

        return "".join(parts)


def create_settings_for_environment(environment: Optional[Environment] = None) -> Settings:
    """
    Factory function to create Settings for a specific environment.

    Args:
        environment: Optional environment override. If not provided, detected from
                    ENVIRONMENT variable.

    Returns:
        Settings: Validated settings for the specified environment.

    Raises:
        ConfigurationError: If settings are missing or invalid.
    """
    if environment is None:
        environment = _detect_environment()

    env_files = _get_env_files(environment)
    existing_env_files = [f for f in env_files if Path(f).exists()]
    if not existing_env_files:
        existing_env_files = list(env_files)

    try:
        class EnvironmentSettings(Settings):
            model_config = SettingsConfigDict(
                env_file=tuple(existing_env_files),
                env_file_encoding="utf-8",
                case_sensitive=False,
                extra="ignore"
            )

        return EnvironmentSettings()
    except Exception as e:
        missing_fields = []
        invalid_fields = {}

        if hasattr(e, 'errors'):
            for error in e.errors():
                field_name = '.'.join(str(loc) for loc in error.get('loc', []))
                error_type = error.get('type', '')
                error_msg = error.get('msg', str(error))

                if error_type == 'missing':
                    missing_fields.append(field_name)
                else:
                    invalid_fields[field_name or "settings"] = error_msg

        raise ConfigurationError(
            f"Failed to load configuration for environment '{environment.value}'",
            missing_fields=missing_fields,
            invalid_fields=invalid_fields
        ) from e


# Global settings cache
_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the application settings.

    Settings are loaded once and cached for subsequent calls.

    Raises:
        ConfigurationError: If settings are missing or invalid.
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = create_settings_for_environment()

    return _settings_cache


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    This is primarily useful for testing to allow reloading settings
    with different environment variables.
    """
    global _settings_cache
    _settings_cache = None


def validate_startup(settings: Optional[Settings] = None) -> None:
    """
    Validate settings at application startup.

    Raises:
        ConfigurationError: If any settings are missing or invalid.
    """
    settings = settings or get_settings()

    validation_errors = {}

    if not Path(settings.app_root).is_dir():
        validation_errors["app_root"] = (
            f"Application root is not a directory: {settings.app_root}"
        )

    # Browsers drop SameSite=None cookies that are not Secure
    if settings.session_cookie_samesite == "none" and not settings.session_cookie_secure:
        validation_errors["session_cookie_samesite"] = (
            "SameSite=None requires session_cookie_secure to be enabled"
        )

    if settings.environment == Environment.PRODUCTION and settings.cache_backend == "memory":
        validation_errors["cache_backend"] = (
            "The in-memory cache loses sessions on restart and is not shared "
            "between workers. Configure the redis backend for production."
        )

    if validation_errors:
        raise ConfigurationError(
            "Configuration validation failed during startup",
            invalid_fields=validation_errors
        )


def get_environment_info() -> dict:
    """
    Get information about the current environment configuration.

    Returns:
        dict: Information about the detected environment and loaded config files.
    """
    environment = _detect_environment()
    env_files = _get_env_files(environment)

    existing_files = [f for f in env_files if Path(f).exists()]

    return {
        "environment": environment.value,
        "env_files_checked": list(env_files),
        "env_files_loaded": existing_files,
    }
