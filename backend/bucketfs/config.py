from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # .env is loaded manually in get_settings() so a missing/unreadable env file
    # doesn't break containers or CI.
    model_config = SettingsConfigDict(env_prefix="BUCKETFS_", extra="ignore")

    storage_root: str = "./storage"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    chunk_size_bytes: int = 1024 * 1024

    def ensure_dirs(self) -> None:
        Path(self.storage_root).mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    try:
        from dotenv import load_dotenv

        load_dotenv(".env", override=False)
    except ImportError:
        pass
    return Settings()
