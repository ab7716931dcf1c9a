from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Union

from manifest_index.core.errors import IndexWriteError
from manifest_index.domain.models import IndexRecord
from manifest_index.storage.index_store import IndexStore

logger = logging.getLogger(__name__)


def write_records(db_path: Union[str, Path], records: Iterable[IndexRecord]) -> int:
    """
    Write a batch of records in a single transaction.

    Either every record is stored (replacing rows with the same
    name/version/bucket) or, if any insert fails, none is. An empty batch
    does not touch the database.

    Returns:
        Number of records written.
    """
    batch = list(records)
    if not batch:
        logger.debug("No records to write")
        return 0

    with IndexStore.open(db_path) as store:
        try:
            with store.transaction():
                written = store.upsert(batch)
        except IndexWriteError as e:
            logger.error(f"Rolled back batch of {len(batch)} records: {e}", exc_info=True)
            raise

    logger.info(f"Wrote {written} records to {db_path}")
    return written
