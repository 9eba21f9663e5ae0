import os
import sys
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from app.api.routes_form import router as form_router
from app.api.routes_upload import router as upload_router
from app.api.routes_success import router as success_router
from app.core.config import (
    ConfigError, Settings, DEFAULT_HOST, DEFAULT_PORT,
)

log = logging.getLogger("main")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the service around one immutable Settings object. Without an
    argument, settings come from the environment (raises ConfigError).
    """
    if settings is None:
        settings = Settings.from_env()

    app = FastAPI(title="share-drop")
    app.state.settings = settings

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(form_router)
    app.include_router(upload_router)
    app.include_router(success_router)
    return app


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    try:
        app = create_app()
    except ConfigError as e:
        for name in e.missing:
            log.error("%s not set", name)
        log.error("Errors occurred.")
        sys.exit(1)

    host = os.getenv("HOST", DEFAULT_HOST)
    port = int(os.getenv("PORT", DEFAULT_PORT))
    log.info("Storing uploads in %s, links under %s",
             app.state.settings.storage_path, app.state.settings.base_url)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
