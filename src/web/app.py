"""FastAPI application entry point."""

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from observability import log_summary
from web.deps import close_resources
from web.routes import admin, line_webhook

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("web.startup")
    yield
    await close_resources()
    log_summary()
    logger.info("web.shutdown")


app = FastAPI(
    title="Helpdesk Bot",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow the admin dashboard origin
admin_origin = os.getenv("ADMIN_ORIGIN", "http://localhost:3000")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[admin_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(line_webhook.router)
app.include_router(admin.router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
