"""FastAPI dependencies."""

from fastapi import Request

from .services import BatchProcessingService


def get_batch_service(request: Request) -> BatchProcessingService:
    """Return the service instance owned by the running app."""
    return request.app.state.batch_service
