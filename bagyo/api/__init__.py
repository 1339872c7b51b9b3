"""API routers for Bagyo Watch."""

from fastapi import APIRouter

from .health import router as health_router
from .threat import router as threat_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(threat_router)

__all__ = ["api_router"]
