import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uvicorn
from listing_studio.api.router import api_router
from listing_studio.config import settings
from listing_studio.context import get_plugin_context
from listing_studio.db.engine import dispose_engine

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger("listing")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic"""
    get_plugin_context()
    logger.info(f"Listing Studio starting on port {settings.PORT}")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}, bridge timeout: {settings.BRIDGE_TIMEOUT_SECONDS}s")
    yield
    if settings.STORAGE_BACKEND == "database":
        await dispose_engine()
    logger.info("Listing Studio shutting down")

app = FastAPI(
    title="Listing Studio",
    description="Amazon listing image generation behind a plugin UI bridge",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api/v1")

# Root health check
@app.get("/")
async def root():
    return {
        "service": "Listing Studio",
        "version": "0.1.0",
        "status": "running"
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": "0.1.0",
        "storage_backend": settings.STORAGE_BACKEND
    }

if __name__ == "__main__":
    uvicorn.run(
        "listing_studio.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG
    )
