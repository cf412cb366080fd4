from __future__ import annotations

from bucketfs.config import Settings
from bucketfs.storage.local import LocalStorage


def get_storage(settings: Settings) -> LocalStorage:
    # Local disk is the only backend.
    return LocalStorage(settings.storage_root)
