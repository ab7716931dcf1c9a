"""
Manifest discovery for the index.

This package is responsible for:
* Walking a buckets directory and naming each manifest by file and bucket.
* Extracting records from those manifests and writing them in one batch.
"""
