import os
import logging
from typing import Mapping, Optional

from fastapi import Request
from pydantic import BaseModel, ConfigDict

log = logging.getLogger("config")

UPLOAD_FIELD = "fileToUpload"
ID_BYTES = 15  # token_urlsafe(15) -> 20 chars of [A-Za-z0-9_-]

STORAGE_PATH_VAR = "STORAGE_PATH"
BASE_URL_VAR = "BASE_URL"
REQUIRED_VARS = (BASE_URL_VAR, STORAGE_PATH_VAR)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000


class ConfigError(RuntimeError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(", ".join(f"{name} not set" for name in missing))


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    storage_path: str
    base_url: str

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Read STORAGE_PATH and BASE_URL. Empty values count as missing.
        Raises ConfigError listing every missing variable at once.
        """
        env = os.environ if environ is None else environ
        missing = [name for name in REQUIRED_VARS if not env.get(name)]
        if missing:
            raise ConfigError(missing)
        log.debug("Settings loaded from environment")
        return cls(
            storage_path=env[STORAGE_PATH_VAR],
            base_url=env[BASE_URL_VAR].rstrip("/"),
        )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
