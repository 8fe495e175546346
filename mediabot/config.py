"""Configuration module for the media relay bot."""
import json
import os
from dataclasses import dataclass
from typing import Optional, Tuple
from dotenv import load_dotenv

from mediabot.extraction.types import PlatformRule


class ConfigurationError(ValueError):
    """Raised when configuration is missing or malformed. Fatal at startup."""


def parse_platform_rules(raw: Optional[str]) -> Tuple[PlatformRule, ...]:
    """Parse the JSON-encoded platform pattern list.

    Expected format::

        [{"name": "tiktok", "patterns": ["tiktok.com", "vt.tiktok"]}, ...]

    Args:
        raw: JSON string from the PLATFORM_PATTERNS variable

    Returns:
        Tuple of PlatformRule in configured order

    Raises:
        ConfigurationError: If the value is missing, not valid JSON,
            or any rule has an empty name or no patterns.
    """
    if not raw or not raw.strip():
        raise ConfigurationError("PLATFORM_PATTERNS is required and cannot be empty")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"PLATFORM_PATTERNS is not valid JSON: {e}") from e

    if not isinstance(data, list) or not data:
        raise ConfigurationError("PLATFORM_PATTERNS must be a non-empty JSON list")

    rules = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ConfigurationError(f"PLATFORM_PATTERNS[{index}] must be an object")

        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError(f"PLATFORM_PATTERNS[{index}].name must be a non-empty string")

        patterns = item.get("patterns")
        if (
            not isinstance(patterns, list)
            or not patterns
            or not all(isinstance(p, str) and p for p in patterns)
        ):
            raise ConfigurationError(
                f"PLATFORM_PATTERNS[{index}].patterns must be a non-empty list of strings"
            )

        rules.append(PlatformRule(name=name.strip(), patterns=tuple(patterns)))

    return tuple(rules)


@dataclass(frozen=True)
class BotConfig:
    """Bot configuration dataclass with validation.

    Built once at startup and passed to the components that need it.
    Validation occurs at initialization time to ensure fail-fast
    behavior on invalid configuration.
    """

    # Required
    BOT_TOKEN: str
    MONGO_URI: str
    RAPIDAPI_URL: str
    RAPIDAPI_KEY: str
    RAPIDAPI_HOST: str
    PLATFORM_RULES: Tuple[PlatformRule, ...]

    # Persistence
    MONGO_DB_NAME: str = "mediabot"

    # Health endpoint
    PORT: int = 3000

    # Timeouts (seconds)
    MEDIA_FETCH_TIMEOUT: int = 90

    # Logging
    LOG_LEVEL: str = "INFO"

    # Optional Paths
    TEMP_DIR: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        errors = []

        required_fields = [
            ("TELEGRAM_BOT_TOKEN", self.BOT_TOKEN),
            ("MONGO_URI", self.MONGO_URI),
            ("RAPIDAPI_URL", self.RAPIDAPI_URL),
            ("RAPIDAPI_KEY", self.RAPIDAPI_KEY),
            ("RAPIDAPI_HOST", self.RAPIDAPI_HOST),
        ]
        for name, value in required_fields:
            if not value or not value.strip():
                errors.append(f"{name} is required and cannot be empty")

        if self.RAPIDAPI_URL and not self.RAPIDAPI_URL.startswith(("http://", "https://")):
            errors.append(f"RAPIDAPI_URL must be an http(s) URL (got: {self.RAPIDAPI_URL!r})")

        if not self.PLATFORM_RULES:
            errors.append("PLATFORM_PATTERNS must define at least one platform")

        if not self.MONGO_DB_NAME or not self.MONGO_DB_NAME.strip():
            errors.append("MONGO_DB_NAME cannot be empty")

        if not isinstance(self.PORT, int) or not 0 < self.PORT < 65536:
            errors.append(f"PORT must be between 1 and 65535 (got: {self.PORT})")

        if not isinstance(self.MEDIA_FETCH_TIMEOUT, int) or self.MEDIA_FETCH_TIMEOUT <= 0:
            errors.append(
                f"MEDIA_FETCH_TIMEOUT must be a positive integer (got: {self.MEDIA_FETCH_TIMEOUT})"
            )

        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.LOG_LEVEL not in valid_log_levels:
            errors.append(
                f"LOG_LEVEL must be one of {sorted(valid_log_levels)} (got: {self.LOG_LEVEL})"
            )

        # Raise if any validation errors
        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


def load_config(env_file: Optional[str] = None) -> BotConfig:
    """Load configuration from environment variables.

    Reads a .env file first (existing environment variables win), then
    builds and validates a BotConfig.

    Args:
        env_file: Optional explicit path to a .env file

    Returns:
        BotConfig instance with validated configuration values.

    Raises:
        ConfigurationError: If any configuration validation fails.
    """
    load_dotenv(env_file)

    # Helper to parse int from env var
    def _int_env(name: str, default: int) -> int:
        value = os.getenv(name)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(
                f"{name} must be a valid integer (got: {value!r})"
            )

    return BotConfig(
        BOT_TOKEN=os.getenv("TELEGRAM_BOT_TOKEN", ""),
        MONGO_URI=os.getenv("MONGO_URI", ""),
        RAPIDAPI_URL=os.getenv("RAPIDAPI_URL", ""),
        RAPIDAPI_KEY=os.getenv("RAPIDAPI_KEY", ""),
        RAPIDAPI_HOST=os.getenv("RAPIDAPI_HOST", ""),
        PLATFORM_RULES=parse_platform_rules(os.getenv("PLATFORM_PATTERNS")),
        MONGO_DB_NAME=os.getenv("MONGO_DB_NAME", "mediabot"),
        PORT=_int_env("PORT", 3000),
        MEDIA_FETCH_TIMEOUT=_int_env("MEDIA_FETCH_TIMEOUT", 90),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        TEMP_DIR=os.getenv("TEMP_DIR") or None,
    )


__all__ = ["BotConfig", "ConfigurationError", "load_config", "parse_platform_rules"]
