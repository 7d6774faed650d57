"""API route handlers for ClipBatch."""

from fastapi import APIRouter

from .batches import router as batches_router
from .history import router as history_router

# Combine all routers
api_router = APIRouter()
api_router.include_router(batches_router, tags=["batches"])
api_router.include_router(history_router, tags=["history"])

__all__ = ["api_router"]
