"""FastAPI application entry point for ClipBatch."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import settings
from .routes import api_router
from .services import BatchProcessingService, HttpAnalysisBackend, PlaceholderPathResolver

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("clipbatch")

# Create FastAPI app
app = FastAPI(
    title="ClipBatch API",
    description="Batch orchestration of per-clip media analysis, transcription and scene detection",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router)

backend = HttpAnalysisBackend(settings.backend_url, timeout=settings.backend_timeout_seconds)
app.state.batch_service = BatchProcessingService(
    backend,
    PlaceholderPathResolver(settings.clip_path_template),
    default_max_concurrent=settings.default_max_concurrent,
)


@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    logger.info(f"Starting ClipBatch API v{__version__}")
    logger.info(f"Analysis backend: {settings.backend_url}")
    logger.info(f"Default max concurrent clips per batch: {settings.default_max_concurrent}")

    # Log API key status
    valid_keys = settings.get_valid_api_keys()
    if valid_keys:
        logger.info(f"Loaded {len(valid_keys)} valid API keys")
    else:
        logger.warning("No API keys configured - running in development mode")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    logger.info("Shutting down ClipBatch API")
    await app.state.batch_service.shutdown()
    await backend.aclose()


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "ClipBatch API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "version": __version__,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clipbatch.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
