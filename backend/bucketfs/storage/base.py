from __future__ import annotations

from typing import IO, Protocol


class Storage(Protocol):
    def resolve(self, bucket: str, key: str) -> str: ...
    def open_write(self, bucket: str, key: str) -> IO[bytes]: ...
    def open_read(self, bucket: str, key: str) -> IO[bytes]: ...
    def delete(self, bucket: str, key: str) -> bool: ...
