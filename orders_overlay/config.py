"""
Configuration for the Star Empires orders overlay.

Values come from environment variables (a local .env file is loaded first).
Everything has a safe default so the overlay works with no configuration.
"""

import os
from typing import Optional

from dotenv import load_dotenv

# Load .env BEFORE reading any settings
load_dotenv()


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    """Read a positive integer setting, falling back to the default."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        print(f"Warning: {name}='{raw}' is not an integer, falling back to {default}")
        return default
    if value < minimum:
        print(f"Warning: {name}={value} is below {minimum}, falling back to {default}")
        return default
    return value


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = (_env_str("OVERLAY_LOG_LEVEL", "INFO") or "INFO").upper()

# Structured entries kept in memory by OverlayTelemetry
LOG_BUFFER_SIZE = _env_int("OVERLAY_LOG_BUFFER_SIZE", 100)

# =============================================================================
# CACHES
# =============================================================================

# Entries per analyzer/generator cache (drop-oldest when full)
CACHE_SIZE = _env_int("OVERLAY_CACHE_SIZE", 100)

# Lines longer than this are classified but never cached
MAX_CACHED_LINE_LENGTH = _env_int("OVERLAY_MAX_CACHED_LINE_LENGTH", 200)

# =============================================================================
# CONTENT BUDGETS
# =============================================================================

MAX_COMMANDS_PER_CATEGORY = _env_int("OVERLAY_MAX_COMMANDS_PER_CATEGORY", 20)
MAX_TOTAL_COMMANDS = _env_int("OVERLAY_MAX_TOTAL_COMMANDS", 100)
MAX_CONTENT_LENGTH = _env_int("OVERLAY_MAX_CONTENT_LENGTH", 10000)

# Generation slower than this (ms) is reported as a performance warning.
# Single-command and partial-match views use half of it.
SLOW_GENERATION_MS = _env_int("OVERLAY_SLOW_GENERATION_MS", 50)

# =============================================================================
# COMMAND TABLE
# =============================================================================

# Optional JSON file replacing the built-in command table
COMMANDS_FILE = _env_str("OVERLAY_COMMANDS_FILE")

# =============================================================================
# HTTP SURFACE
# =============================================================================

HOST = _env_str("OVERLAY_HOST", "127.0.0.1")
PORT = _env_int("OVERLAY_PORT", 8005)
