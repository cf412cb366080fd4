from __future__ import annotations

from fastapi import Request

from bucketfs.config import Settings
from bucketfs.storage.base import Storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_object_storage(request: Request) -> Storage:
    return request.app.state.storage
