"""
Branch Fulfillment — Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import structlog

from config import settings, check_connection
from exceptions import AppError, ValidationError, field_errors

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Check rule store connection
    Shutdown: Log only
    """
    logger.info(
        "application_starting",
        environment=settings.environment,
        rules_store=settings.rules_store,
        debug=settings.debug
    )

    store_status = check_connection()
    if store_status["status"] == "healthy":
        logger.info("rule_store_ready", **store_status)
    else:
        logger.error("rule_store_unavailable", error=store_status.get("error"))

    yield

    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Branch Fulfillment",
    description="Next-day cutoff status and branch fulfillment ranking",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status and rule store state
    """
    store_status = check_connection()

    return {
        "status": "healthy" if store_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "rule_store": store_status
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Branch Fulfillment API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "cutoff_rules": "/api/cutoff-rules",
            "fulfillment": "/api/v1/fulfillment/compare",
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Return the standard error envelope for application errors."""
    logger.warning(
        "app_error",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Field name in the error location -> domain error code
FIELD_ERROR_CODES = [
    ("cutoff_local", "INVALID_CUTOFF_TIME"),
    ("blackout_windows", "INVALID_BLACKOUT_WINDOW"),
    ("timezone", "INVALID_TIME_ZONE"),
]


def request_error_code(errors: list[dict]) -> str:
    """Domain code for the first field error that maps to one."""
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        for field_name, code in FIELD_ERROR_CODES:
            if field_name in loc:
                return code
    return "VALIDATION_ERROR"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Return request body and query failures in the standard error envelope."""
    errors = exc.errors()
    error = ValidationError(
        message="Request validation failed",
        code=request_error_code(errors),
        details={"errors": field_errors(errors)}
    )
    logger.warning("request_invalid", path=request.url.path, code=error.code, errors=len(errors))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.cutoff_rules import router as cutoff_rules_router
from routes.fulfillment import router as fulfillment_router

app.include_router(cutoff_rules_router, prefix="/api/cutoff-rules", tags=["Cutoff Rules"])
app.include_router(fulfillment_router, prefix="/api/v1/fulfillment", tags=["Fulfillment"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
