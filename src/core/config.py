"""
Emote Tracker - Configuration Module
====================================

Centralized configuration management with environment variable validation.

DESIGN:
    This module provides a single source of truth for all configuration,
    loaded from environment variables at startup. Using a dataclass ensures
    type safety once loaded.

    Key patterns:
    - Singleton pattern via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - Out-of-range tuning values are clamped with a warning

Author: حَـــــنَّـــــا
"""

import os
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo

from src.core.constants import (
    BACKFILL_FETCH_RETRIES,
    BACKFILL_PAGE_SIZE,
    CONSIDERATION_PERIOD,
    DRAIN_TIMEOUT,
    HEALTH_CHECK_PORT,
)


# =============================================================================
# Timezone Configuration
# =============================================================================

NY_TZ = ZoneInfo("America/New_York")
"""Eastern timezone for log timestamps."""


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    DESIGN:
        Required fields raise ConfigValidationError if missing.
        Optional fields have sensible defaults for development.
        All IDs are integers to prevent string comparison bugs.

    Attributes:
        discord_token: Discord bot authentication token.
        consideration_period: Seconds after creation during which edits
            are reconciled.
        no_backfilling: Disable automatic history backfill.
    """

    # -------------------------------------------------------------------------
    # Required: Discord
    # -------------------------------------------------------------------------

    discord_token: str

    # -------------------------------------------------------------------------
    # Optional: Reconciliation
    # -------------------------------------------------------------------------

    consideration_period: int = CONSIDERATION_PERIOD

    # -------------------------------------------------------------------------
    # Optional: Backfill
    # -------------------------------------------------------------------------

    no_backfilling: bool = False
    backfill_page_size: int = BACKFILL_PAGE_SIZE
    backfill_rate: float = 0.0          # Steps per second, 0 = unlimited
    backfill_concurrency: int = 0       # Running steps, 0 = unlimited
    backfill_fetch_retries: int = BACKFILL_FETCH_RETRIES
    drain_timeout: float = DRAIN_TIMEOUT

    # -------------------------------------------------------------------------
    # Optional: Logging
    # -------------------------------------------------------------------------

    log_channel_id: Optional[int] = None
    error_webhook_url: Optional[str] = None

    # -------------------------------------------------------------------------
    # Optional: Health
    # -------------------------------------------------------------------------

    health_check_port: int = HEALTH_CHECK_PORT


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """
    Raised when required configuration is missing or invalid.

    DESIGN:
        Custom exception type allows callers to distinguish config
        errors from other startup failures.
    """

    pass


def _parse_int_optional(value: Optional[str]) -> Optional[int]:
    """
    Parse optional string to integer, returning None on failure.

    Args:
        value: String value from environment variable, may be None.

    Returns:
        Parsed integer or None if parsing fails.
    """
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse a truthy environment flag ("1", "true", "yes", "on")."""
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_int_with_default(value: Optional[str], default: int, name: str, min_val: int = None, max_val: int = None) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
        if min_val is not None and parsed < min_val:
            from src.core.logger import logger
            logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
            return min_val
        if max_val is not None and parsed > max_val:
            from src.core.logger import logger
            logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
            return max_val
        return parsed
    except ValueError:
        from src.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default


def _parse_float_with_default(value: Optional[str], default: float, name: str, min_val: float = 0.0) -> float:
    """Parse optional non-negative float, falling back to default."""
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        from src.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if parsed < min_val:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """
    Validate URL format for webhooks.

    Args:
        value: URL string to validate.
        name: Variable name for warning messages.

    Returns:
        URL if valid, None if invalid or empty.
    """
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from src.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    DESIGN:
        Validates all required variables upfront before creating the
        Config object. This fail-fast approach prevents partial
        initialization and unclear runtime errors.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing or invalid.
    """
    missing = []

    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        missing.append("DISCORD_TOKEN")

    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return Config(
        discord_token=discord_token,
        consideration_period=_parse_int_with_default(
            os.getenv("CONSIDERATION_PERIOD"), CONSIDERATION_PERIOD,
            "CONSIDERATION_PERIOD", min_val=0,
        ),
        no_backfilling=_parse_bool(os.getenv("NO_BACKFILLING")),
        backfill_page_size=_parse_int_with_default(
            os.getenv("BACKFILL_PAGE_SIZE"), BACKFILL_PAGE_SIZE,
            "BACKFILL_PAGE_SIZE", min_val=1, max_val=BACKFILL_PAGE_SIZE,
        ),
        backfill_rate=_parse_float_with_default(
            os.getenv("BACKFILL_RATE"), 0.0, "BACKFILL_RATE",
        ),
        backfill_concurrency=_parse_int_with_default(
            os.getenv("BACKFILL_CONCURRENCY"), 0,
            "BACKFILL_CONCURRENCY", min_val=0,
        ),
        backfill_fetch_retries=_parse_int_with_default(
            os.getenv("BACKFILL_FETCH_RETRIES"), BACKFILL_FETCH_RETRIES,
            "BACKFILL_FETCH_RETRIES", min_val=0, max_val=10,
        ),
        drain_timeout=_parse_float_with_default(
            os.getenv("DRAIN_TIMEOUT"), DRAIN_TIMEOUT, "DRAIN_TIMEOUT",
        ),
        log_channel_id=_parse_int_optional(os.getenv("LOG_CHANNEL_ID")),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
        health_check_port=_parse_int_with_default(
            os.getenv("HEALTH_CHECK_PORT"), HEALTH_CHECK_PORT,
            "HEALTH_CHECK_PORT", min_val=1, max_val=65535,
        ),
    )


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Returns:
        The global Config instance.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


# =============================================================================
# Config Validation & Logging
# =============================================================================

def validate_and_log_config() -> None:
    """
    Validate configuration and log results at startup.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from src.core.logger import logger

    config = get_config()

    if not config.log_channel_id:
        logger.info("Optional config not set: LOG_CHANNEL_ID")
    if not config.error_webhook_url:
        logger.info("Optional config not set: ERROR_WEBHOOK_URL")

    logger.tree("Configuration Validated", [
        ("Backfill", "Disabled" if config.no_backfilling else "Enabled"),
        ("Page Size", str(config.backfill_page_size)),
        ("Rate", f"{config.backfill_rate}/s" if config.backfill_rate else "Unlimited"),
        ("Concurrency", str(config.backfill_concurrency or "Unlimited")),
        ("Consideration Period", f"{config.consideration_period}s"),
    ], emoji="⚙️")


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "ConfigValidationError",
    "NY_TZ",
    "get_config",
    "load_config",
    "validate_and_log_config",
]
