from __future__ import annotations

import os


class PathError(ValueError):
    pass


class PathTraversal(PathError):
    pass


class ResolutionError(PathError):
    pass


def validate_root(root: str) -> str:
    """
    Returns the absolute form of the storage root.
    Raises ResolutionError if the root is not something we can absolutize.
    """
    try:
        root_s = os.fspath(root)
        if not isinstance(root_s, str):
            raise TypeError("storage root must be a text path")
        if "\x00" in root_s:
            raise ValueError("embedded null byte")
        return os.path.abspath(root_s)
    except (OSError, TypeError, ValueError) as e:
        raise ResolutionError(f"Cannot resolve storage root {root!r}: {e}") from e


def resolve(root: str, bucket: str, key: str) -> str:
    """
    Maps (bucket, key) to an absolute path under root, lexically (no filesystem access).

    Leading separators on bucket/key are dropped before joining, so a key like
    "/etc/passwd" lands at root/bucket/etc/passwd instead of replacing the root.
    """
    abs_root = validate_root(root)
    relative = os.sep.join(p for p in (bucket, key) if p).lstrip(os.sep)
    target = os.path.abspath(os.path.normpath(os.path.join(os.fspath(root), relative)))

    # boundary-safe: "/data/b2" must not pass as being under "/data/b"
    if target != abs_root and not target.startswith(abs_root.rstrip(os.sep) + os.sep):
        raise PathTraversal(f"invalid path: {bucket!r}/{key!r} escapes storage root")
    return target
