"""
Self-contained read paths: each call opens the index, queries it and closes it.

For several queries against one handle use IndexStore.open() directly.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from manifest_index.domain.models import DEFAULT_SEARCH_COLUMNS, IndexRecord, SearchColumn
from manifest_index.storage.index_store import IndexStore, normalize_columns, validate_lookup

logger = logging.getLogger(__name__)


def search(
    db_path: Union[str, Path],
    pattern: Optional[str] = "",
    columns: Iterable[Union[SearchColumn, str]] = DEFAULT_SEARCH_COLUMNS,
) -> List[IndexRecord]:
    """
    Find records whose `columns` contain `pattern`, latest version per (name, bucket).
    """
    # Validate before touching the database
    search_columns = normalize_columns(columns)
    with IndexStore.open(db_path) as store:
        results = store.search(pattern, search_columns)
    logger.debug(
        f"Search {pattern!r} in {[c.value for c in search_columns]}: {len(results)} results"
    )
    return results


def lookup(
    db_path: Union[str, Path],
    name: str,
    bucket: str,
    version: Optional[str] = None,
) -> List[IndexRecord]:
    """
    Return the record for (name, bucket, version), or the latest version when
    `version` is omitted. The list holds zero or one record.
    """
    validate_lookup(name, bucket, version)
    with IndexStore.open(db_path) as store:
        results = store.lookup(name, bucket, version)
    logger.debug(f"Lookup {bucket}/{name} version={version}: {len(results)} results")
    return results
