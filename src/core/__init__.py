"""
Emote Tracker - Core Package
============================

Core components shared by every service: configuration, storage,
logging, error types and the health endpoint.

DESIGN:
    Core modules are singletons or global instances so that state stays
    consistent across the application:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance

Author: حَـــــنَّـــــا
"""

# =============================================================================
# Core Imports
# =============================================================================

from .config import (
    Config,
    ConfigValidationError,
    NY_TZ,
    get_config,
)

from .database import DatabaseManager, get_db

from .errors import EmoteTrackerError, PermissionDenied, TransientStoreError

from .logger import logger, TreeLogger

from .health import HealthCheckServer


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "NY_TZ",
    "get_config",
    # Database
    "DatabaseManager",
    "get_db",
    # Errors
    "EmoteTrackerError",
    "PermissionDenied",
    "TransientStoreError",
    # Logger
    "logger",
    "TreeLogger",
    # Health
    "HealthCheckServer",
]
