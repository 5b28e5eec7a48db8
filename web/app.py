from __future__ import annotations

import logging
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from billrecon.db import initialize_db
from billrecon.logging import configure_logging, reconfigure
from web.deps import DBConnectionMiddleware
from web.routes.bill import router as bill_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    initialize_db()
    # Alembic's fileConfig replaces the root handlers.
    reconfigure()
    logger.info("Application started")
    yield


app = FastAPI(title="billrecon", lifespan=lifespan)

app.add_middleware(DBConnectionMiddleware)

app.include_router(bill_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s:\n%s",
        request.method,
        request.url.path,
        traceback.format_exc(),
    )
    return JSONResponse({"error": "Internal Server Error"}, status_code=500)


@app.get("/health")
async def health():
    return {"status": "ok"}
