from typing import Optional

from manifest_index.core.config import IndexSettings, load_settings

_settings: Optional[IndexSettings] = None


def get_settings() -> IndexSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
