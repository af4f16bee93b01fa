"""Relay — Main application entry point."""

import logging
import re
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from cleanup import run_cleanup
from config import HOST, PORT, UA_FILTER
from context import RelayContext
from logging_config import setup_logging
from api.pages.controllers.pages_controller import not_found_handler, router as pages_router
from api.download.controllers.download_controller import router as download_router
from api.upload.controllers.upload_controller import router as upload_router

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent.parent / "static"


def create_app(context: RelayContext | None = None, ua_filter: str = UA_FILTER) -> FastAPI:
    context = context or RelayContext()
    ua_pattern = re.compile(ua_filter) if ua_filter else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await run_cleanup(context)
        yield
        context.close()

    app = FastAPI(title="Relay", version="0.1.0", lifespan=lifespan)
    app.state.context = context

    @app.middleware("http")
    async def filter_user_agents(request: Request, call_next):
        # Answer filtered agents so they know not to retry
        ua = request.headers.get("user-agent", "")
        if ua_pattern is not None and ua_pattern.search(ua):
            logger.info("Filtered UA: %s", ua)
            return PlainTextResponse("Filtered UA", status_code=403)
        return await call_next(request)

    app.add_exception_handler(StarletteHTTPException, not_found_handler)

    # Static files
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    # Router registration order matters:
    # 1. Health check (before catch-all routes)
    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    # 2. Pages (exact match)
    app.include_router(pages_router)

    # 3. Upload (POST /new, POST /data)
    app.include_router(upload_router)

    # 4. Download (catch-all GET /{file_id})
    app.include_router(download_router)

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
