"""FastAPI application entry point."""
import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agile_canvas.config import settings
from agile_canvas.database import database
from agile_canvas.routers import activity, analytics, currency, export, projects, risks, tasks


logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


async def refresh_rates_periodically(interval_minutes: int) -> None:
    """Refresh currency rates now and then every interval."""
    while True:
        await database.currency.refresh_rates()
        await asyncio.sleep(interval_minutes * 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    # Startup
    await database.connect()
    refresher = asyncio.create_task(
        refresh_rates_periodically(settings.currency_refresh_minutes)
    )
    logger.info("Starting Agile Canvas API")
    yield
    # Shutdown
    refresher.cancel()
    with suppress(asyncio.CancelledError):
        await refresher
    await database.disconnect()
    logger.info("Stopped Agile Canvas API")


app = FastAPI(
    title="Agile Canvas API",
    description="Backend API for project tracking: tasks, risks, history and analytics",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(risks.router)
app.include_router(activity.router)
app.include_router(analytics.router)
app.include_router(currency.router)
app.include_router(export.router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"status": "ok", "message": "Agile Canvas API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "agile_canvas.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
