"""
qrtransfer - FastAPI Backend Entry Point

Run with:
    uvicorn qrtransfer.backend.main:app
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .. import __version__, config
from ..logging import API, configure_logging, get_logger
from .routes import transfer

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    configure_logging(config.LOG_LEVEL)
    logger.info(
        "%s Starting qrtransfer (max %d chunks, QR level %s)",
        API, config.MAX_CHUNKS, config.QR_ERROR_CORRECTION
    )
    yield
    logger.info("%s Shutting down qrtransfer", API)


app = FastAPI(
    title="qrtransfer API",
    description="Move structured snapshots through a series of QR codes",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware (scanner pages are served from other origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(transfer.router, prefix="/api/transfer", tags=["Transfer"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": __version__}
