"""API routes."""

from fastapi import APIRouter

from rebalancer.api.routes import rebalancing

api_router = APIRouter()

api_router.include_router(rebalancing.router, prefix="/rebalancing", tags=["rebalancing"])
