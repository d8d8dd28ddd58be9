"""FastAPI application entry point."""

import logging

from fastapi import FastAPI

from rebalancer import __version__
from rebalancer.api.routes import api_router
from rebalancer.core.config import settings
from rebalancer.core.logging_config import configure_logging

configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Inventory Rebalancing Engine",
    description="Cross-store stock rebalancing: opportunity discovery, planning and execution",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
def health_check():
    """Basic liveness check endpoint."""
    return {"status": "healthy", "version": __version__}
