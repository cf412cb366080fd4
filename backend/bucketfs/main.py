from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.convertors import Convertor, register_url_convertor
from starlette.exceptions import HTTPException as StarletteHTTPException

from bucketfs.config import Settings, get_settings
from bucketfs.deps import get_app_settings, get_object_storage
from bucketfs.errors import MethodNotAllowed, ObjectStoreError
from bucketfs.middleware.logging_filter import RequestIdFilter
from bucketfs.middleware.request_id import RequestIdMiddleware
from bucketfs.services.objects import delete_object, download_object, upload_object
from bucketfs.storage import get_storage
from bucketfs.storage.base import Storage
from bucketfs.storage.paths import validate_root


log = logging.getLogger("bucketfs")
if not any(isinstance(f, RequestIdFilter) for f in log.filters):
    log.addFilter(RequestIdFilter())

ROUTED_METHODS = ["GET", "PUT", "DELETE", "HEAD", "POST", "PATCH", "OPTIONS"]

HANDLERS = {
    "PUT": upload_object,
    "GET": download_object,
    "DELETE": delete_object,
}

class AnyPathConvertor(Convertor):
    # "path" is ".*", which stops at a decoded newline
    regex = r"[\s\S]*"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("anypath", AnyPathConvertor())

router = APIRouter()


@router.api_route("/{object_path:anypath}", methods=ROUTED_METHODS)
async def dispatch_object_request(
    request: Request,
    storage: Storage = Depends(get_object_storage),
    settings: Settings = Depends(get_app_settings),
):
    handler = HANDLERS.get(request.method)
    if handler is None:
        raise MethodNotAllowed()
    return await handler(request, storage, settings)


async def _object_store_error(request: Request, exc: ObjectStoreError) -> PlainTextResponse:
    if exc.status_code >= 500:
        log.error("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.detail, exc_info=exc)
    else:
        log.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.detail)
    return PlainTextResponse(exc.detail, status_code=exc.status_code)


async def _http_error(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    log.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.detail)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Builds the app around one storage root. The root is validated and created here,
    once, so a malformed root fails at startup rather than per request.
    """
    settings = settings or get_settings()
    validate_root(settings.storage_root)
    settings.ensure_dirs()

    # docs/openapi routes are off: every path belongs to the object namespace
    app = FastAPI(title="bucketfs", version="0.1.0", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.storage = get_storage(settings)

    app.add_middleware(RequestIdMiddleware)
    app.add_exception_handler(ObjectStoreError, _object_store_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.include_router(router)

    log.debug("handlers configured for %s", ", ".join(HANDLERS))
    return app
