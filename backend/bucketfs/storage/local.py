from __future__ import annotations

import os
from pathlib import Path
from typing import IO

from bucketfs.storage.paths import resolve


class LocalStorage:
    """
    Objects as plain files under root: <root>/<bucket>/<key>.
    No locking; concurrent writers to one key race and the last one to finish wins.
    """

    def __init__(self, root: str):
        self.root = root

    def resolve(self, bucket: str, key: str) -> str:
        return resolve(self.root, bucket, key)

    def open_write(self, bucket: str, key: str) -> IO[bytes]:
        dest = Path(self.resolve(bucket, key))
        dest.parent.mkdir(parents=True, exist_ok=True)
        # truncates any previous content
        return open(dest, "wb")

    def open_read(self, bucket: str, key: str) -> IO[bytes]:
        return open(self.resolve(bucket, key), "rb")

    def delete(self, bucket: str, key: str) -> bool:
        """Returns False if there was nothing to remove. Empty directories are left behind."""
        try:
            os.remove(self.resolve(bucket, key))
        except FileNotFoundError:
            return False
        return True
