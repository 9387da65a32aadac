"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fixia.config import settings
from fixia.errors import register_exception_handlers
from fixia.middleware import AccessLogMiddleware, BodySizeLimitMiddleware, SecurityHeadersMiddleware
from fixia.routers import connections, explorer, professionals

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    from fixia.database import engine
    from fixia.redis import close_redis_pool

    logger.info("Fixia API starting (env=%s)", settings.env)

    yield

    await close_redis_pool()
    await engine.dispose()
    logger.info("Fixia API stopped")


app = FastAPI(
    title="Fixia Marketplace API",
    description="Explorer review obligations and marketplace gating",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - restrict to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware (the last one added runs outermost)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
app.add_middleware(AccessLogMiddleware)

register_exception_handlers(app)

# Routers
app.include_router(explorer.router)
app.include_router(connections.router)
app.include_router(professionals.router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}
