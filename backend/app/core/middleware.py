"""
Custom middleware for request processing
"""
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
import structlog

from app.core.exceptions import JobBoardException

logger = structlog.get_logger()


def error_payload(exc: JobBoardException) -> dict:
    """Body returned for application errors"""
    return {
        "error": {
            "message": exc.message,
            "details": exc.details,
            "type": exc.__class__.__name__,
        }
    }


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Add correlation ID to requests for tracing"""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests and responses"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        logger.info("request_started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                process_time=time.perf_counter() - start_time,
            )
            raise

        process_time = time.perf_counter() - start_time
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time=process_time,
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response


class ExceptionHandlerMiddleware(BaseHTTPMiddleware):
    """Turn exceptions escaping the routers into JSON error responses"""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except JobBoardException as e:
            return JSONResponse(status_code=e.status_code, content=error_payload(e))
        except Exception as e:
            logger.exception("unhandled_exception", error=str(e))
            return JSONResponse(
                status_code=500,
                content={
                    "error": {
                        "message": "Internal server error",
                        "type": "InternalServerError",
                    }
                },
            )
