"""
Job board - Main FastAPI application
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from app.core.config import settings
from app.core.database import init_db
from app.core.logging_config import configure_logging
from app.core.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    ExceptionHandlerMiddleware,
    error_payload,
)
from app.core.exceptions import JobBoardException
from app.events.router import router as events_router
from app.events.tracker import event_tracker
from app.jobboard.router import router as jobboard_router
from app.locations.router import router as locations_router

# Configure logging
configure_logging()
logger = structlog.get_logger()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Job board search engine and impressions tracking",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# Add middleware
app.add_middleware(CorrelationIDMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(ExceptionHandlerMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(JobBoardException)
async def jobboard_exception_handler(request: Request, exc: JobBoardException):
    """Handle job board exceptions"""
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


# Include routers
app.include_router(jobboard_router)
app.include_router(events_router)
app.include_router(locations_router)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize on startup"""
    logger.info("application_starting", version=settings.APP_VERSION)

    init_db()

    if settings.EVENTS_TRACKING_ENABLED:
        event_tracker.start()


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Flush pending events on shutdown"""
    logger.info("application_shutting_down")
    event_tracker.stop()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
