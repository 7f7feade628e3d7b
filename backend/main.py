"""
SentimentScope API - Main FastAPI Application

Submits text to external sentiment providers and keeps a rolling,
persisted history of past analyses.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import analysis, history, huggingface
from config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()

    # Startup
    logger.info(f"Starting {settings.app_name}...")

    from data.sentiment import get_sentiment_service, get_sentiment_store

    store = get_sentiment_store()
    logger.info(f"Sentiment store loaded with {len(store.get_entries())} entries")

    service = get_sentiment_service()
    for name, configured in service.provider_status().items():
        if not configured:
            logger.info(f"{name} credentials not configured - provider disabled")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await service.close()
    await huggingface.get_inference_client().close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Sentiment analysis dashboard backed by external AI providers",
        version=settings.api_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(analysis.router, prefix="/api/analyze", tags=["Analysis"])
    app.include_router(history.router, prefix="/api/history", tags=["History"])
    app.include_router(huggingface.router, prefix="/api", tags=["Hugging Face"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.api_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
