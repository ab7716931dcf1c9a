"""
One-time check that the SQLite runtime can host the index.

Latest-version collapsing relies on window functions, so SQLite 3.25 or newer
is required.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from manifest_index.core.errors import DriverUnavailableError
from manifest_index.domain.models import DriverStatus

logger = logging.getLogger(__name__)

MIN_SQLITE_VERSION = (3, 25, 0)

_driver_status: Optional[DriverStatus] = None


def initialize_driver() -> DriverStatus:
    """
    Check the SQLite driver once per process and cache the result.
    """
    global _driver_status
    if _driver_status is not None:
        return _driver_status

    version = sqlite3.sqlite_version
    if sqlite3.sqlite_version_info < MIN_SQLITE_VERSION:
        required = ".".join(str(p) for p in MIN_SQLITE_VERSION)
        logger.error(f"SQLite {version} is too old, {required} or newer is required")
        _driver_status = DriverStatus(
            available=False,
            sqlite_version=version,
            error=f"SQLite {version} is too old, {required} or newer is required",
        )
        return _driver_status

    logger.debug(f"SQLite driver available: {version}")
    _driver_status = DriverStatus(available=True, sqlite_version=version)
    return _driver_status


def require_driver() -> DriverStatus:
    """Raise DriverUnavailableError unless the bootstrap succeeded."""
    status = initialize_driver()
    if not status.available:
        raise DriverUnavailableError(status.error or "SQLite driver is not available")
    return status


def reset_driver_status() -> None:
    """Forget the cached bootstrap result so the next call checks again."""
    global _driver_status
    _driver_status = None
