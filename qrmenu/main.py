"""
QR Menu - Main Application Entry Point
Public digital menus and their admin panel
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from qrmenu.core.config import get_settings
from qrmenu.api import admin, auth, menu
from qrmenu.services.local_cache import open_local_cache
from qrmenu.services.registry import StoreRegistry, build_remote_store, prepare_remote_store

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Initializing QR Menu backend with {settings.REMOTE_BACKEND} remote store")
    remote = build_remote_store(settings)
    await prepare_remote_store(remote, settings)
    app.state.registry = StoreRegistry(remote, open_local_cache(settings))

    yield

    # Shutdown
    logger.info("Shutting down QR Menu backend")
    await app.state.registry.close()


# Create FastAPI application
app = FastAPI(
    title="QR Menu API",
    description="Digital restaurant menus with an offline-first admin panel",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(menu.router, prefix=f"{settings.API_V1_PREFIX}/menu", tags=["menu"])
app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])
app.include_router(admin.router, prefix=f"{settings.API_V1_PREFIX}/admin", tags=["admin"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "qrmenu-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "QR Menu API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "qrmenu.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
