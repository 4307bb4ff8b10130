"""ASGI application entry point: FastAPI app + uvicorn runner."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from worship_planner import __version__
from worship_planner.config import Settings
from worship_planner.exceptions import ConfigError
from worship_planner.hymnal.matcher import HymnMatcher
from worship_planner.web.routes import router

logger = logging.getLogger(__name__)


def _load_hymnal(settings: Settings) -> HymnMatcher:
    if settings.hymnal_path is None:
        logger.warning("HYMNAL_PATH not set; hymnal lookups will find nothing")
        return HymnMatcher([])
    return HymnMatcher.from_file(settings.hymnal_path)


def create_app(
    settings: Optional[Settings] = None,
    hymnal: Optional[HymnMatcher] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the API app.

    *hymnal* defaults to the file named by ``HYMNAL_PATH``; *transport* is
    handed to every Planning Center client (tests pass a MockTransport).
    """
    settings = settings or Settings.from_env()

    app = FastAPI(title="Worship Planner", version=__version__)
    app.state.settings = settings
    app.state.hymnal = hymnal if hymnal is not None else _load_hymnal(settings)
    app.state.transport = transport

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    app.include_router(router)
    return app


def main() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings = Settings.from_env()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    if not settings.has_credentials:
        logger.warning("PLANNING_CENTER_ID / PLANNING_CENTER_TOKEN not set")

    uvicorn.run(create_app(settings), host="127.0.0.1", port=8000, log_level="info")


if __name__ == "__main__":
    main()
