from __future__ import annotations

import logging
from typing import IO, Iterator, NamedTuple
from urllib.parse import quote

from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect, Request
from starlette.background import BackgroundTask
from starlette.responses import Response, StreamingResponse

from bucketfs.config import Settings
from bucketfs.errors import BadRequest, InternalServerError, MethodNotAllowed, NotFound
from bucketfs.storage.base import Storage
from bucketfs.storage.paths import PathTraversal


log = logging.getLogger("bucketfs.objects")


class ObjectRef(NamedTuple):
    bucket: str
    key: str


def parse_object_path(path: str) -> ObjectRef:
    """
    "/my-bucket/folder/file.txt" -> ("my-bucket", "folder/file.txt").
    Exactly one leading slash is stripped; the key keeps any further slashes.
    """
    trimmed = path[1:] if path.startswith("/") else path
    bucket, sep, key = trimmed.partition("/")
    if not bucket:
        raise BadRequest("Bad Request: missing bucket")
    if not sep or not key:
        raise BadRequest("Bad Request: missing key")
    return ObjectRef(bucket, key)


def _object_ref(request: Request, method: str) -> ObjectRef:
    if request.method != method:
        raise MethodNotAllowed()
    # scope path is already percent-decoded; request.url would re-split on a decoded "?"
    ref = parse_object_path(request.scope["path"])
    log.debug("%s request received for bucket=%s key=%s", request.method, ref.bucket, ref.key)
    return ref


def _invalid_path(ref: ObjectRef, e: PathTraversal) -> BadRequest:
    log.warning("rejected bucket=%s key=%s: %s", ref.bucket, ref.key, e)
    return BadRequest("Invalid path")


def content_disposition(key: str) -> str:
    filename = key.rstrip("/").rsplit("/", 1)[-1] or key
    try:
        filename.encode("latin-1")
        plain = not any(ord(c) < 0x20 or ord(c) == 0x7F for c in filename)
    except UnicodeEncodeError:
        plain = False
    if not plain:
        # control characters must never reach the raw header
        return f"attachment; filename*=utf-8''{quote(filename)}"
    return 'attachment; filename="{}"'.format(filename.replace("\\", "\\\\").replace('"', '\\"'))


async def upload_object(request: Request, storage: Storage, settings: Settings) -> Response:
    """PUT /<bucket>/<key...>: create or truncate the object and stream the body into it."""
    ref = _object_ref(request, "PUT")
    try:
        f = await run_in_threadpool(storage.open_write, ref.bucket, ref.key)
    except PathTraversal as e:
        raise _invalid_path(ref, e) from e
    except (OSError, ValueError) as e:
        raise InternalServerError("Internal Server Error: cannot create object") from e

    written = 0
    try:
        with f:
            async for chunk in request.stream():
                if chunk:
                    await run_in_threadpool(f.write, chunk)
                    written += len(chunk)
    except (OSError, ClientDisconnect) as e:
        # the truncated/partial file is left as-is
        raise InternalServerError("Internal Server Error: write failed") from e

    log.debug("stored bucket=%s key=%s bytes=%s", ref.bucket, ref.key, written)
    return Response(status_code=204)


def _iter_file(f: IO[bytes], chunk_size: int, ref: ObjectRef) -> Iterator[bytes]:
    # Headers are already committed once this runs; a read failure can only cut the body short.
    try:
        with f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                yield chunk
    except OSError:
        log.exception("error streaming bucket=%s key=%s", ref.bucket, ref.key)
        return
    log.debug("served bucket=%s key=%s", ref.bucket, ref.key)


async def download_object(request: Request, storage: Storage, settings: Settings) -> Response:
    """GET /<bucket>/<key...>: stream the object back as an attachment."""
    ref = _object_ref(request, "GET")
    try:
        f = await run_in_threadpool(storage.open_read, ref.bucket, ref.key)
    except PathTraversal as e:
        raise _invalid_path(ref, e) from e
    except FileNotFoundError as e:
        raise NotFound() from e
    except (OSError, ValueError) as e:
        raise InternalServerError("Internal Server Error: cannot open object") from e

    return StreamingResponse(
        _iter_file(f, settings.chunk_size_bytes, ref),
        status_code=200,
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(ref.key)},
        # closes the handle even if the body is never iterated
        background=BackgroundTask(f.close),
    )


async def delete_object(request: Request, storage: Storage, settings: Settings) -> Response:
    """DELETE /<bucket>/<key...>: remove the object; a missing object is still a success."""
    ref = _object_ref(request, "DELETE")
    try:
        existed = await run_in_threadpool(storage.delete, ref.bucket, ref.key)
    except PathTraversal as e:
        raise _invalid_path(ref, e) from e
    except (OSError, ValueError) as e:
        raise InternalServerError("Internal Server Error: cannot delete object") from e

    log.debug("deleted bucket=%s key=%s existed=%s", ref.bucket, ref.key, existed)
    return Response(status_code=204)
