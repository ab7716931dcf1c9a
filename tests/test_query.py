"""
Tests for pattern search and point lookup.
"""

import pytest

from manifest_index.core.errors import QueryError
from manifest_index.domain.models import SearchColumn
from manifest_index.storage.query import lookup, search
from manifest_index.storage.writer import write_records


@pytest.fixture
def populated_db(db_path, make_record):
    write_records(db_path, [
        make_record(name="git", version="2.40.0", binary="git.exe"),
        make_record(name="git", version="2.41.0", binary="git.exe | git-bash.exe"),
        make_record(name="git", version="2.39.0", bucket="versions", binary="git.exe"),
        make_record(name="python", version="3.12.0", binary="python | pip", shortcut="Python IDLE"),
        make_record(name="vscode", version="1.90.0", bucket="extras", shortcut="Visual Studio Code",
                    description="Lightweight code editor"),
    ])
    return db_path


# ═══════════════════════════════════════════════════════════════════════
# Pattern search
# ═══════════════════════════════════════════════════════════════════════

def test_search_collapses_to_latest_version(db_path, make_record):
    write_records(db_path, [make_record(name="git", version="2.40.0", binary="git.exe")])
    write_records(db_path, [make_record(name="git", version="2.41.0", binary="git.exe | git-bash.exe")])

    [row] = search(db_path, "git")
    assert row.version == "2.41.0"
    assert row.binary == "git.exe | git-bash.exe"


def test_empty_search_returns_each_name_and_bucket_once(populated_db):
    results = search(populated_db, "")
    assert [(r.name, r.bucket, r.version) for r in results] == [
        ("git", "main", "2.41.0"),
        ("git", "versions", "2.39.0"),
        ("python", "main", "3.12.0"),
        ("vscode", "extras", "1.90.0"),
    ]


def test_search_returns_all_columns(populated_db):
    [row] = search(populated_db, "vscode")
    assert row.description == "Lightweight code editor"
    assert row.shortcut == "Visual Studio Code"
    assert row.manifest


def test_binary_match_respects_columns(populated_db):
    assert [r.name for r in search(populated_db, "pip")] == ["python"]
    assert search(populated_db, "pip", [SearchColumn.NAME]) == []


def test_shortcut_match(populated_db):
    assert [r.name for r in search(populated_db, "Studio")] == ["vscode"]


def test_columns_given_as_strings(populated_db):
    results = search(populated_db, "editor", ["description"])
    assert [r.name for r in results] == ["vscode"]


def test_search_is_case_insensitive(populated_db):
    assert {r.bucket for r in search(populated_db, "GIT")} == {"main", "versions"}


def test_search_treats_wildcards_literally(db_path, make_record):
    write_records(db_path, [
        make_record(name="a_b", version="1.0"),
        make_record(name="axb", version="1.0"),
    ])
    assert [r.name for r in search(db_path, "a_b")] == ["a_b"]
    assert search(db_path, "%") == []


def test_search_uses_lexicographic_versions(db_path, make_record):
    write_records(db_path, [
        make_record(name="tool", version="9.0"),
        make_record(name="tool", version="10.0"),
    ])
    [row] = search(db_path, "tool")
    assert row.version == "9.0"


def test_search_rejects_unknown_column(db_path):
    with pytest.raises(QueryError) as exc_info:
        search(db_path, "git", ["name", "manifest"])
    assert exc_info.value.operation == "search"
    assert not db_path.exists()


def test_search_rejects_empty_column_set(db_path):
    with pytest.raises(QueryError):
        search(db_path, "git", [])


# ═══════════════════════════════════════════════════════════════════════
# Point lookup
# ═══════════════════════════════════════════════════════════════════════

def test_lookup_without_version_returns_latest(populated_db):
    [latest] = lookup(populated_db, "git", "main")
    assert latest.version == "2.41.0"
    assert lookup(populated_db, "git", "main", "2.41.0") == [latest]


def test_lookup_latest_is_lexicographic_max(db_path, make_record):
    write_records(db_path, [
        make_record(name="tool", version="9.0"),
        make_record(name="tool", version="10.0"),
    ])
    assert lookup(db_path, "tool", "main") == lookup(db_path, "tool", "main", "9.0")


def test_lookup_exact_version(populated_db):
    [row] = lookup(populated_db, "git", "main", "2.40.0")
    assert row.binary == "git.exe"


def test_lookup_is_scoped_to_bucket(populated_db):
    [row] = lookup(populated_db, "git", "versions")
    assert row.version == "2.39.0"
    assert lookup(populated_db, "python", "extras") == []


def test_lookup_name_is_case_insensitive(populated_db):
    [row] = lookup(populated_db, "Python", "main")
    assert row.name == "python"


def test_lookup_missing(populated_db):
    assert lookup(populated_db, "nope", "main") == []
    assert lookup(populated_db, "git", "main", "0.0.1") == []


@pytest.mark.parametrize("name, bucket, version", [
    ("", "main", None),
    ("git", "", None),
    ("  ", "main", None),
    ("git", "main", ""),
])
def test_lookup_rejects_empty_identity(db_path, name, bucket, version):
    with pytest.raises(QueryError) as exc_info:
        lookup(db_path, name, bucket, version)
    assert exc_info.value.operation == "lookup"
    assert not db_path.exists()
