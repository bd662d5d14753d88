"""
examwatch Monitor Service - FastAPI Application
"""
import time
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .monitor.api import router as monitor_router, shutdown_monitor
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Real-time remote proctoring monitor",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    start = time.time()
    path = request.url.path

    response = await call_next(request)

    # Status is polled every tick by the frontend
    if path not in ["/health", "/api/monitor/status", "/favicon.ico"]:
        duration_ms = int((time.time() - start) * 1000)
        logger.info(f"{request.method} {path} -> {response.status_code} in {duration_ms}ms")

    return response


# CORS middleware - allow all origins for LAN access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when using wildcard origin
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(monitor_router)


@app.on_event("startup")
async def startup_event():
    """Configure logging on service startup."""
    setup_logging(
        service_name="examwatch",
        level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
        log_to_file=settings.LOG_TO_FILE
    )
    logger.info(f"Tick interval: {settings.TICK_INTERVAL_SECONDS}s")
    logger.info(f"Camera source: {settings.CAMERA_SOURCE}")
    logger.info(f"Baseline store: {settings.BASELINE_STORE}")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop any active monitoring session."""
    await shutdown_monitor()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "1.0.0"
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.APP_NAME,
        "docs": "/docs" if settings.DEBUG else None,
        "monitor": "/api/monitor"
    }


def run():
    """Run the service with uvicorn."""
    import uvicorn

    uvicorn.run("examwatch.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
