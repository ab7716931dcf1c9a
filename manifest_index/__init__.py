"""
Local SQLite index of package manifests.

Extract records from bucket manifests, write them in all-or-nothing batches
and answer substring searches and point lookups without re-reading the
manifest files.
"""

from manifest_index.core.config import IndexSettings, load_settings
from manifest_index.core.errors import (
    DriverUnavailableError,
    IndexWriteError,
    MalformedManifestError,
    ManifestIndexError,
    QueryError,
    StoreUnavailableError,
)
from manifest_index.domain.extractor import extract_record
from manifest_index.domain.models import (
    DEFAULT_SEARCH_COLUMNS,
    IndexRecord,
    SearchColumn,
)
from manifest_index.storage.driver import initialize_driver
from manifest_index.storage.index_store import IndexStore
from manifest_index.storage.query import lookup, search
from manifest_index.storage.writer import write_records

__all__ = [
    "DEFAULT_SEARCH_COLUMNS",
    "DriverUnavailableError",
    "IndexRecord",
    "IndexSettings",
    "IndexStore",
    "IndexWriteError",
    "MalformedManifestError",
    "ManifestIndexError",
    "QueryError",
    "SearchColumn",
    "StoreUnavailableError",
    "extract_record",
    "initialize_driver",
    "load_settings",
    "lookup",
    "search",
    "write_records",
]
