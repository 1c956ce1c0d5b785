"""
Emote Tracker - Centralized Constants
=====================================

All magic numbers and constants are defined here for maintainability.
Import from this module instead of hardcoding values.

Author: حَـــــنَّـــــا
"""

# =============================================================================
# Time Constants
# =============================================================================

SECONDS_PER_HOUR = 3600

# Milliseconds conversion
MS_PER_SECOND = 1000

# =============================================================================
# Snowflake Constants
# =============================================================================

# First millisecond of 2015, the epoch Discord snowflakes count from
DISCORD_EPOCH_MS = 1420070400000

# Low bits of a snowflake hold worker, process and increment
SNOWFLAKE_TIMESTAMP_SHIFT = 22

# =============================================================================
# Network Constants
# =============================================================================

HEALTH_CHECK_PORT = 8081

# =============================================================================
# Backfill Constants
# =============================================================================

BACKFILL_PAGE_SIZE = 100              # Discord caps history pages at 100
BACKFILL_FETCH_RETRIES = 3            # Retries for a failed history page
BACKFILL_RETRY_BASE_DELAY = 1.0       # First backoff delay (seconds)
BACKFILL_RETRY_MAX_DELAY = 30.0       # Backoff ceiling (seconds)
DRAIN_TIMEOUT = 10.0                  # Queue drain budget on shutdown
DRAIN_POLL_INTERVAL = 0.05            # Idle check interval while draining

# =============================================================================
# Reconciliation Constants
# =============================================================================

CONSIDERATION_PERIOD = SECONDS_PER_HOUR  # Edits older than this are ignored

# =============================================================================
# Database Constants
# =============================================================================

DB_CONNECTION_TIMEOUT = 30.0          # SQLite connection timeout
SQLITE_BUSY_TIMEOUT = 5000            # SQLite busy timeout (ms)

# =============================================================================
# Display Constants
# =============================================================================

LOG_TRUNCATE_LENGTH = 100             # Error strings in log trees
CHANNEL_LOG_MAX_LENGTH = 1900         # Discord message limit minus code fence
