from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sprout_api.db import dispose_engine
from sprout_api.db_init import init_db
from sprout_api.routes import auth, bootstrap, goals, live, notes, progress, tasks

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
ROUTERS = (auth, bootstrap, tasks, goals, notes, progress, live)

logger = logging.getLogger("sprout_api")


def create_app() -> FastAPI:
    logging.basicConfig(level=os.getenv("BACKEND_LOG_LEVEL", "INFO").upper(), format=LOG_FORMAT)
    app = FastAPI(title="Sprout API", version="0.1.0")
    for module in ROUTERS:
        app.include_router(module.router)

    @app.on_event("startup")
    async def _create_tables():
        await init_db()
        logger.info("Sprout API ready (%d routers)", len(ROUTERS))

    @app.on_event("shutdown")
    async def _close_engine():
        await dispose_engine()

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal error"})

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


app = create_app()
