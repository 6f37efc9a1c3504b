import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.database import engine
from app.core.logging_config import setup_logging
from app.api.v1.api import api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"🍽️  Order fetch strategy: {settings.ORDER_FETCH_STRATEGY}")
    logger.info(f"🔌 DB pool: size={settings.DB_POOL_SIZE} overflow={settings.DB_MAX_OVERFLOW}")
    yield
    await engine.dispose()
    logger.info("👋 Resto Orders API stopped")


# Create FastAPI app
app_config = {
    "title": "Resto Orders API",
    "description": "Orders, delivery sessions and menu for the reception, waiter and delivery apps",
    "version": "1.0.0",
    "lifespan": lifespan,
}

app = FastAPI(**app_config)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS,
)

# Include routers
app.include_router(api_router, prefix="/api/v1")

@app.get("/")
async def root():
    return {
        "message": "🍽️ Welcome to the Resto Orders API!",
        "status": "active",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
    }


def run_http():
    """Run HTTP server on port 9106"""
    import uvicorn
    print("🚀 Starting HTTP server on port 9106...")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=9106,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run_http()
