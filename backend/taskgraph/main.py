"""FastAPI application entry point."""

import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskgraph.config import DashboardConfig
from taskgraph.services.session import init_session, shutdown_session

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown."""
    # Startup
    config = DashboardConfig.from_env()
    logger.info(f"Watching task backend at {config.tasks_base_url}")
    await init_session(config)

    yield

    # Shutdown
    await shutdown_session()


app = FastAPI(
    title="Task Graph Dashboard",
    description="Live dependency graph of tasks with a stable force-directed layout",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware - allow any localhost port for local renderers
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^http://localhost(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers after app is created to avoid circular imports
from taskgraph.api import dashboard  # noqa: E402

app.include_router(dashboard.router, prefix="/api/v1", tags=["dashboard"])
