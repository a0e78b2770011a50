"""
Page Builder configuration: all environment variables in one place.

Read from environment at import time. Every value has a working default;
nothing here is required.
"""

from __future__ import annotations

import os


def _flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings from environment variables."""

    # Page geometry (A4 at 96 dpi)
    PAGE_WIDTH: int = int(os.environ.get("PAGEBUILDER_PAGE_WIDTH", "794"))
    PAGE_MARGIN: int = int(os.environ.get("PAGEBUILDER_PAGE_MARGIN", "80"))

    # Delay between the final arc sync and the print capture
    PRINT_SETTLE_MS: int = int(os.environ.get("PAGEBUILDER_PRINT_SETTLE_MS", "200"))

    # Concurrent uploads on one field: last completion wins unless this is on
    DISCARD_STALE_READS: bool = _flag("PAGEBUILDER_DISCARD_STALE_READS")

    # Export
    EXPORT_FILENAME: str = os.environ.get("PAGEBUILDER_EXPORT_FILENAME", "index.html")

    # Logging
    LOG_LEVEL: str = os.environ.get("PAGEBUILDER_LOG_LEVEL", "WARNING").upper()

    @property
    def PRINT_SETTLE_SECONDS(self) -> float:
        return self.PRINT_SETTLE_MS / 1000


# Singleton instance
settings = Settings()

if settings.PAGE_WIDTH <= 0:
    raise RuntimeError("PAGEBUILDER_PAGE_WIDTH must be positive")
if settings.PRINT_SETTLE_MS < 0:
    raise RuntimeError("PAGEBUILDER_PRINT_SETTLE_MS must not be negative")
