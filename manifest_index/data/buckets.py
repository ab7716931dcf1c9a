"""
Walk a buckets directory and rebuild the index from its manifests.

Expected layout:

    <buckets_dir>/<bucket>/bucket/<name>.json

Buckets without a `bucket/` sub-directory keep their manifests at the top
level of the bucket directory.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from manifest_index.core.config import IndexSettings
from manifest_index.core.errors import MalformedManifestError
from manifest_index.domain.extractor import MANIFEST_FORMATS, extract_record
from manifest_index.domain.manifest_utils import default_architecture
from manifest_index.domain.models import IndexRecord, RebuildSummary
from manifest_index.storage.writer import write_records

logger = logging.getLogger(__name__)


@dataclass
class ManifestFile:
    name: str
    bucket: str
    path: Path
    fmt: str


def _manifest_dir(bucket_dir: Path) -> Path:
    nested = bucket_dir / "bucket"
    return nested if nested.is_dir() else bucket_dir


def iter_manifests(buckets_dir: Path) -> Iterator[ManifestFile]:
    """
    Yield every manifest file under `buckets_dir`, bucket by bucket.

    The bucket is the first path segment below `buckets_dir`; the name is the
    file name without its extension.
    """
    if not buckets_dir.is_dir():
        logger.warning(f"Buckets directory not found: {buckets_dir}")
        return

    for bucket_dir in sorted(buckets_dir.iterdir()):
        if not bucket_dir.is_dir() or bucket_dir.name.startswith("."):
            continue
        bucket = bucket_dir.relative_to(buckets_dir).parts[0]
        try:
            paths = sorted(_manifest_dir(bucket_dir).iterdir())
        except OSError as e:
            logger.warning(f"Skipping unreadable bucket {bucket_dir}: {e}")
            continue
        for path in paths:
            fmt = MANIFEST_FORMATS.get(path.suffix.lower())
            if fmt is None or not path.is_file():
                continue
            yield ManifestFile(name=path.stem, bucket=bucket, path=path, fmt=fmt)


def collect_records(
    buckets_dir: Path,
    architecture: Optional[str] = None,
) -> Tuple[List[IndexRecord], RebuildSummary]:
    """
    Extract a record from every manifest under `buckets_dir`.

    Manifests without a version and manifests that cannot be read or parsed
    are skipped and counted, never raised.
    """
    arch = architecture or default_architecture()
    records: List[IndexRecord] = []
    summary = RebuildSummary()

    for manifest_file in iter_manifests(buckets_dir):
        try:
            content = manifest_file.path.read_text(encoding="utf-8")
            record = extract_record(
                content,
                manifest_file.name,
                manifest_file.bucket,
                arch,
                fmt=manifest_file.fmt,
            )
        except (OSError, UnicodeDecodeError, MalformedManifestError) as e:
            logger.warning(f"Skipping unreadable manifest {manifest_file.path}: {e}")
            summary.failed += 1
            continue

        if record is None:
            summary.skipped += 1
            continue
        records.append(record)

    return records, summary


def rebuild_index(settings: IndexSettings) -> RebuildSummary:
    """
    Index every manifest in settings.buckets_dir into settings.db_path.

    All records are written in one transaction.
    """
    logger.info(f"Indexing buckets in {settings.buckets_dir} into {settings.db_path}")
    records, summary = collect_records(settings.buckets_dir, settings.architecture)
    summary.indexed = write_records(settings.db_path, records)
    logger.info(
        f"Index rebuilt: {summary.indexed} indexed, "
        f"{summary.skipped} skipped, {summary.failed} failed"
    )
    return summary
