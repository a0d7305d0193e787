"""
IntelliBid - FastAPI Application

API server for multi-stakeholder AI evaluation of airline RFT proposals.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from config.logging_config import setup_logging
from database.connection import init_db, close_db
from api.routes import (
    criteria,
    documents,
    evaluations,
    features,
    metrics,
    portfolios,
    projects,
    scoring,
    stages,
    standards,
)
from api.middleware.error_handler import setup_error_handlers
from api.middleware.logging import LoggingMiddleware
from api.middleware.rate_limit import setup_rate_limiting

# Set up logging
logger = setup_logging(log_level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management."""
    logger.info("Starting IntelliBid API...")
    logger.info(f"Environment: {settings.api_env}")
    logger.info(f"LLM Provider: {settings.llm_provider.value} ({settings.default_model})")

    await init_db()

    yield

    try:
        from workers.queue import close_redis_pool
        await close_redis_pool()
    except (ConnectionError, OSError) as e:
        logger.warning(f"Could not close Redis pool: {e}")

    await close_db()
    logger.info("Shutting down IntelliBid API...")


app = FastAPI(
    title="IntelliBid API",
    description="Multi-agent evaluation of airline RFT vendor proposals",
    version="1.0.0",
    lifespan=lifespan
)

# Set up error handlers (before middleware)
setup_error_handlers(app)

setup_rate_limiting(app)

app.add_middleware(LoggingMiddleware)

# Configure CORS (should be last middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# API Routes
# ============================================================================

for module in (
    portfolios,
    standards,
    projects,
    documents,
    evaluations,
    criteria,
    scoring,
    stages,
    metrics,
    features,
):
    app.include_router(module.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "IntelliBid API",
        "version": "1.0.0",
        "status": "running",
        "environment": settings.api_env,
        "llm_provider": settings.llm_provider.value,
        "model": settings.default_model,
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.api_env,
        "llm_configured": settings.active_api_key is not None
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
