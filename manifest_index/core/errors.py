"""
Exception types raised by the manifest index.

Every error carries the operation that failed and, where one is known, the
(name, version, bucket) identity or (name, bucket) key it was working on.
"""
from __future__ import annotations

from typing import Optional, Tuple


class ManifestIndexError(Exception):
    """Base class for all manifest index errors."""

    def __init__(
        self,
        message: str,
        operation: str,
        identity: Optional[Tuple[str, ...]] = None,
    ):
        self.operation = operation
        self.identity = identity
        prefix = f"[{operation}]"
        if identity:
            prefix += f" {'/'.join(str(p) for p in identity)}"
        super().__init__(f"{prefix}: {message}")


class MalformedManifestError(ManifestIndexError):
    """Manifest content could not be parsed as structured data."""

    def __init__(self, message: str, identity: Optional[Tuple[str, ...]] = None):
        super().__init__(message, "extract", identity)


class IndexWriteError(ManifestIndexError):
    """A record in a batch failed; the whole batch was rolled back."""

    def __init__(self, message: str, identity: Optional[Tuple[str, ...]] = None):
        super().__init__(message, "write", identity)


class StoreUnavailableError(ManifestIndexError):
    """The backing SQLite file could not be opened or created."""

    def __init__(self, message: str, operation: str = "open"):
        super().__init__(message, operation)


class DriverUnavailableError(ManifestIndexError):
    """The SQLite runtime is missing or too old. Fatal."""

    def __init__(self, message: str):
        super().__init__(message, "bootstrap")


class QueryError(ManifestIndexError):
    """Query parameters were rejected before execution."""
