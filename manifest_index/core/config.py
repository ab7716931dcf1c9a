from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

ROOT_ENV_VAR = "SCOOP"
DB_PATH_ENV_VAR = "SCOOP_INDEX_DB"
BUCKETS_DIR_ENV_VAR = "SCOOP_BUCKETS_DIR"
ARCH_ENV_VAR = "SCOOP_ARCH"

_DEFAULT_ROOT_DIR = Path("~/scoop")
DB_FILE_NAME = "scoop.db"


class IndexSettings(BaseModel):
    """
    Locations and options for one manifest index.

    Passed explicitly to everything that opens the store; nothing in the
    storage layer reads the environment on its own.
    """

    root_dir: Path = Field(
        description="Package manager root directory.",
    )
    db_path: Path = Field(
        description="Path of the SQLite index file.",
    )
    buckets_dir: Path = Field(
        description="Directory holding one sub-directory per bucket.",
    )
    architecture: Optional[str] = Field(
        default=None,
        description="Architecture used to resolve bin/shortcuts ('64bit', '32bit', 'arm64'). None means host default.",
    )

    @classmethod
    def for_root(cls, root_dir: Path, architecture: Optional[str] = None) -> "IndexSettings":
        root_dir = Path(root_dir)
        return cls(
            root_dir=root_dir,
            db_path=root_dir / DB_FILE_NAME,
            buckets_dir=root_dir / "buckets",
            architecture=architecture,
        )


def load_settings() -> IndexSettings:
    """
    Resolve settings from the environment.

    Priority for each location:
    1. Its own environment variable (SCOOP_INDEX_DB, SCOOP_BUCKETS_DIR)
    2. Derived from the root directory (SCOOP, default '~/scoop')
    """
    env_root = os.environ.get(ROOT_ENV_VAR)
    root_dir = Path(env_root) if env_root else _DEFAULT_ROOT_DIR
    settings = IndexSettings.for_root(
        root_dir.expanduser(),
        architecture=os.environ.get(ARCH_ENV_VAR) or None,
    )

    env_db = os.environ.get(DB_PATH_ENV_VAR)
    if env_db:
        settings.db_path = Path(env_db).expanduser()
    env_buckets = os.environ.get(BUCKETS_DIR_ENV_VAR)
    if env_buckets:
        settings.buckets_dir = Path(env_buckets).expanduser()
    return settings
