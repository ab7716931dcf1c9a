"""
Shared test fixtures for the manifest index test suite.

  - db_path: path of a not-yet-created index file under tmp_path
  - make_record: factory for IndexRecord with sensible defaults
  - write_manifest: helper that lays out bucket manifests on disk
  - settings: IndexSettings rooted in tmp_path
"""

import json

import pytest

from manifest_index.core.config import IndexSettings
from manifest_index.domain.models import IndexRecord
from manifest_index.storage.driver import reset_driver_status


@pytest.fixture(autouse=True)
def fresh_driver_status():
    reset_driver_status()
    yield
    reset_driver_status()


@pytest.fixture
def settings(tmp_path):
    return IndexSettings.for_root(tmp_path / "scoop", architecture="64bit")


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "index" / "scoop.db"


@pytest.fixture
def make_record():
    def _make(name="git", version="2.40.0", bucket="main", **fields):
        manifest = fields.pop("manifest", json.dumps({"version": version}))
        return IndexRecord(name=name, version=version, bucket=bucket, manifest=manifest, **fields)

    return _make


@pytest.fixture
def write_manifest(settings):
    def _write(bucket, name, data, nested=True, suffix=".json"):
        bucket_dir = settings.buckets_dir / bucket
        if nested:
            bucket_dir = bucket_dir / "bucket"
        bucket_dir.mkdir(parents=True, exist_ok=True)
        path = bucket_dir / f"{name}{suffix}"
        text = data if isinstance(data, str) else json.dumps(data, indent=4)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
