# ============================================================================
# main.py - SNR Manager API
# ============================================================================

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
from contextlib import asynccontextmanager

from config import (
    APP_NAME, APP_VERSION, APP_DESCRIPTION,
    CORS_ORIGINS, HOST, PORT, LOG_LEVEL,
    AXL_SERVER, AXL_USERNAME, AXL_PASSWORD, AXL_VERSION
)
from shared.database import init_database
from shared.logging import setup_logging
from apps.axl import context as axl_context
from apps.axl.exceptions import ConfigurationError
from apps.snr.routes import router as snr_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize application on startup"""
    setup_logging()
    logger.info(f"🚀 Starting {APP_NAME}...")

    if init_database():
        logger.info("✅ Database ready")
    else:
        logger.warning("⚠️ Database initialization had issues")

    if AXL_SERVER:
        try:
            axl_context.initialize(AXL_SERVER, AXL_USERNAME, AXL_PASSWORD, AXL_VERSION)
            logger.info("✅ AXL session configured")
        except ConfigurationError as e:
            logger.error(f"❌ AXL configuration invalid: {e}")
    else:
        logger.warning("⚠️ AXL_SERVER not set; AXL routes will return 503")

    yield

# Create FastAPI app
app = FastAPI(
    title=APP_NAME,
    description=APP_DESCRIPTION,
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(snr_router)


@app.get("/")
async def root():
    return {
        "message": f"{APP_NAME} is running",
        "version": APP_VERSION,
        "docs": "/docs"
    }

@app.get("/health")
async def health_check():
    try:
        from shared.database import engine
        with engine.connect():
            pass
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"

    try:
        axl_endpoint = axl_context.get_context().endpoint
    except ConfigurationError:
        axl_endpoint = None

    return {
        "status": "healthy",
        "database": db_status,
        "axl_endpoint": axl_endpoint,
        "version": APP_VERSION
    }

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
        log_level=LOG_LEVEL
    )
