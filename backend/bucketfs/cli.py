from __future__ import annotations

import argparse
import logging
from typing import Sequence

import uvicorn

from bucketfs.config import get_settings
from bucketfs.main import create_app
from bucketfs.middleware.logging_filter import configure_logging
from bucketfs.storage.paths import ResolutionError


log = logging.getLogger("bucketfs")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="bucketfs", description="Serve a local directory as a PUT/GET/DELETE object store.")
    parser.add_argument("storage_root", help="Directory holding <bucket>/<key> files; created if missing.")
    parser.add_argument("--host", default=None, help="Bind address (default from BUCKETFS_HOST or 0.0.0.0).")
    parser.add_argument("--port", type=int, default=None, help="TCP port (default from BUCKETFS_PORT or 8080).")
    parser.add_argument("--log-level", default=None, help="Logging level (default from BUCKETFS_LOG_LEVEL or INFO).")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    overrides = {"storage_root": args.storage_root}
    for field in ("host", "port", "log_level"):
        value = getattr(args, field)
        if value is not None:
            overrides[field] = value
    settings = get_settings().model_copy(update=overrides)

    configure_logging(settings.log_level)
    try:
        app = create_app(settings)
    except ResolutionError as e:
        log.error("Invalid storage root '%s': %s", settings.storage_root, e)
        return 1
    except OSError as e:
        log.error("Unable to create storage root '%s': %s", settings.storage_root, e)
        return 1

    log.info("Starting bucketfs on %s:%s, storing at %s", settings.host, settings.port, settings.storage_root)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0
