"""FastAPI application for the rent ledger."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.deps import get_config
from src.api.rent import router as rent_router
from src.services.rent_generation import run_generation_job
from src.services.scheduler import RentScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the daily rent scheduler with the app and stop it on shutdown."""
    config = get_config()
    scheduler = None
    if config.scheduler_enabled:
        scheduler = RentScheduler(lambda: run_generation_job(config=config), config)
        scheduler.start()
    else:
        logger.info("Rent scheduler disabled (SCHEDULER_ENABLED=false)")
    app.state.rent_scheduler = scheduler
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown()


app = FastAPI(
    title="Rent Ledger",
    description="Monthly rent ledger with arrears and credit carry-forward",
    version="0.1.0",
    lifespan=lifespan,
)

# Dashboard and tenant portal are served from other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rent_router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {"status": "ok"}


__all__ = ["app", "lifespan"]
