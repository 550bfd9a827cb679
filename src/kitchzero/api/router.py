"""Master API router mounted at /api/v1."""

from fastapi import APIRouter
from kitchzero.api.routes import (
    approvals,
    audit,
    health,
    inventory,
    waste,
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(approvals.router)
api_router.include_router(inventory.router)
api_router.include_router(waste.router)
api_router.include_router(audit.router)
