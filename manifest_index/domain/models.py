"""
Pydantic models for the manifest index.

This module defines the data shapes shared by the extractor, the SQLite
store and the HTTP layer:
- The indexed record (one row of the `app` table)
- The set of columns a search may match against
- Driver bootstrap and rebuild results

All models use Pydantic for validation and serialization.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field


# Separator used for every multi-valued column.
FIELD_SEPARATOR = " | "

# Column order of the `app` table. Inserts are built from this list only.
INDEX_COLUMNS: Tuple[str, ...] = (
    "name",
    "description",
    "version",
    "bucket",
    "manifest",
    "binary",
    "shortcut",
    "dependency",
    "suggest",
)


# ---------------------------------------------------------------------------
# Index Records
# ---------------------------------------------------------------------------


class IndexRecord(BaseModel):
    """
    Normalized, searchable view of one manifest version in one bucket.

    (name, version, bucket) is the identity; name compares case-insensitively
    in the store.
    """

    name: str = Field(description="Manifest file name without extension.")
    description: str = Field(default="", description="Manifest description, empty when absent.")
    version: str = Field(description="Version string exactly as stored; ordered lexicographically.")
    bucket: str = Field(description="Bucket the manifest came from.")
    manifest: str = Field(description="Raw manifest text.")
    binary: str = Field(default="", description="Executable names joined with ' | '.")
    shortcut: str = Field(default="", description="Shortcut names joined with ' | '.")
    dependency: str = Field(default="", description="Dependencies joined with ' | '.")
    suggest: str = Field(default="", description="Flattened suggestion groups joined with ' | '.")

    @property
    def identity(self) -> Tuple[str, str, str]:
        return (self.name, self.version, self.bucket)

    def to_row(self) -> dict:
        return {column: getattr(self, column) for column in INDEX_COLUMNS}


class SearchColumn(str, Enum):
    """Columns a pattern search is allowed to match against."""

    NAME = "name"
    DESCRIPTION = "description"
    BINARY = "binary"
    SHORTCUT = "shortcut"
    DEPENDENCY = "dependency"
    SUGGEST = "suggest"


DEFAULT_SEARCH_COLUMNS: Tuple[SearchColumn, ...] = (
    SearchColumn.NAME,
    SearchColumn.BINARY,
    SearchColumn.SHORTCUT,
)


# ---------------------------------------------------------------------------
# Bootstrap / Maintenance Results
# ---------------------------------------------------------------------------


class DriverStatus(BaseModel):
    """Outcome of the one-time SQLite runtime check."""

    available: bool
    sqlite_version: Optional[str] = None
    error: Optional[str] = None


class RebuildSummary(BaseModel):
    """Counts reported after indexing a buckets directory."""

    indexed: int = Field(default=0, description="Records written to the store.")
    skipped: int = Field(default=0, description="Manifests without a version.")
    failed: int = Field(default=0, description="Manifests that could not be read or parsed.")
