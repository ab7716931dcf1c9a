"""
Turn raw manifest text into an IndexRecord.

Pure transformation: the caller supplies the manifest's name (file stem) and
bucket, and the architecture used to pick bin/shortcuts entries.
"""
from __future__ import annotations

import json
import logging
import ntpath
import re
from typing import Any, List, Optional

import yaml

from manifest_index.core.errors import MalformedManifestError
from manifest_index.domain.manifest_utils import arch_specific, as_list, join_values
from manifest_index.domain.models import FIELD_SEPARATOR, IndexRecord

logger = logging.getLogger(__name__)

MANIFEST_FORMATS = {
    ".json": "json",
    ".yml": "yaml",
    ".yaml": "yaml",
}

_EXECUTABLE_EXTENSION_RE = re.compile(r"\.(exe|bat|cmd|ps1|jar|py)$", re.IGNORECASE)


def parse_manifest(content: str, fmt: str = "json", identity: Optional[tuple] = None) -> dict:
    """Parse manifest text into a mapping, raising MalformedManifestError."""
    text = content.lstrip("\ufeff")
    try:
        if fmt == "yaml":
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise MalformedManifestError(f"cannot parse {fmt} manifest: {e}", identity) from e

    if not isinstance(data, dict):
        raise MalformedManifestError(
            f"manifest must be a {fmt} object, got {type(data).__name__}", identity
        )
    return data


def _binary_name(entry: Any) -> str:
    # [path, alias, args...] is displayed as alias + extension of path
    if isinstance(entry, list):
        if len(entry) >= 2:
            path = str(entry[0])
            return f"{entry[1]}{ntpath.splitext(path)[1]}"
        entry = entry[0] if entry else ""
    return str(entry)


def extract_binaries(manifest: dict, architecture: str) -> str:
    names = [_binary_name(entry) for entry in as_list(arch_specific("bin", manifest, architecture))]
    # Empty names stay in the list so the separator count matches the entries.
    names = [_EXECUTABLE_EXTENSION_RE.sub("", name) for name in names]
    return FIELD_SEPARATOR.join(names)


def extract_shortcuts(manifest: dict, architecture: str) -> str:
    names: List[str] = []
    for entry in as_list(arch_specific("shortcuts", manifest, architecture)):
        if isinstance(entry, list):
            names.append(str(entry[1]) if len(entry) >= 2 else "")
        else:
            names.append(str(entry))
    return FIELD_SEPARATOR.join(names)


def extract_suggestions(manifest: dict) -> str:
    suggest = manifest.get("suggest")
    if isinstance(suggest, dict):
        groups = suggest.values()
    else:
        groups = as_list(suggest)
    return FIELD_SEPARATOR.join(join_values(group, FIELD_SEPARATOR) for group in groups)


def extract_record(
    content: str,
    name: str,
    bucket: str,
    architecture: str,
    *,
    fmt: str = "json",
) -> Optional[IndexRecord]:
    """
    Build the index record for one manifest.

    Returns None when the manifest has no version (not indexable).
    Raises MalformedManifestError when the content cannot be parsed.
    """
    manifest = parse_manifest(content, fmt, identity=(name, bucket))

    version = manifest.get("version")
    if version is None or version == "":
        logger.debug(f"Skipping {bucket}/{name}: manifest has no version")
        return None

    description = manifest.get("description")
    record = IndexRecord(
        name=name,
        description="" if description is None else str(description),
        # YAML (and sloppy JSON) may give numeric versions
        version=str(version),
        bucket=bucket,
        manifest=content,
        binary=extract_binaries(manifest, architecture),
        shortcut=extract_shortcuts(manifest, architecture),
        dependency=join_values(manifest.get("depends"), FIELD_SEPARATOR),
        suggest=extract_suggestions(manifest),
    )
    logger.debug(
        f"Extracted {bucket}/{name} {record.version}: "
        f"binary={record.binary!r}, shortcut={record.shortcut!r}"
    )
    return record
