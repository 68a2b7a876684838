"""FastAPI main application."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rummy.api.routes import router
from rummy.api.websocket import websocket_manager
from rummy.config import settings

# Configure logging for the app (must be after imports but before app usage)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stdout,
)
logging.getLogger("rummy").setLevel(logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Shut every table down on exit (timers and bot tasks)."""
    logger.info("Infinite Rummy host starting (%s)", settings.environment)

    yield

    await websocket_manager.close_all()
    logger.info("Infinite Rummy host stopped")


# Create FastAPI app
app = FastAPI(
    title="Infinite Rummy API",
    description="Host-authoritative multiplayer phase rummy with bot players",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(router)


@app.get("/")
async def root() -> dict[str, str]:
    """API info."""
    return {
        "message": "Infinite Rummy API",
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "rummy.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level="info",
    )


if __name__ == "__main__":
    main()
