"""
Gyld Notify - Main FastAPI Application.

REST API layer for notification orchestration: one entry point that
resolves recipients, renders content and dispatches over push and email,
plus endpoints for managing scheduled sends.
"""
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import health, notify, workflows
from core.application.dtos import NotificationResultDTO
from core.application.dtos.notification_dto import format_validation_errors
from core.domain.entities import OrchestrationResult
from core.domain.errors import (
    DataSourceUnavailable,
    FailedContent,
    InvalidRequest,
    NotificationError,
    TemplateNotFound,
    UnknownScope,
    WorkflowNotFound,
    WorkflowPersistenceError,
)
from core.infrastructure.database.config import close_database, init_database
from core.settings import get_app_settings
from gyld_sdk.logging import configure_logging, get_logger

logger = get_logger(__name__)

ERROR_STATUS = {
    InvalidRequest: 400,
    TemplateNotFound: 404,
    UnknownScope: 404,
    WorkflowNotFound: 404,
    FailedContent: 502,
    DataSourceUnavailable: 503,
    WorkflowPersistenceError: 500,
}


# =============================================================================
# CREATE FASTAPI APP
# =============================================================================

app = FastAPI(
    title="Gyld Notify - Notification Orchestration API",
    description="""
    Notification orchestration and delivery for the Gyld community app.

    Features:
    - Push (Expo) and email (SendGrid) delivery
    - Recipients by user IDs, gathering RSVPs or group membership
    - Literal or templated content with live entity data
    - Scheduled sends with an executor for due workflows
    - Per-recipient failure reporting
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_app_settings().api.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# REQUEST LOGGING MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    logger.info(
        "http_request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration=round(time.time() - start_time, 3),
    )
    return response


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

def _failure_response(status_code: int, result: OrchestrationResult) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=NotificationResultDTO.from_domain(result).model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are reported as InvalidRequest."""
    detail = format_validation_errors(exc)
    logger.info("request_rejected", path=request.url.path, detail=detail)
    return _failure_response(
        400,
        OrchestrationResult.failed(
            error=InvalidRequest.code,
            message="Invalid notification request",
            detail=detail,
        ),
    )


@app.exception_handler(WorkflowNotFound)
async def workflow_not_found_handler(request: Request, exc: WorkflowNotFound):
    return JSONResponse(
        status_code=404,
        content={"error": exc.code, "message": exc.message, "path": request.url.path},
    )


@app.exception_handler(NotificationError)
async def notification_exception_handler(request: Request, exc: NotificationError):
    """Map domain errors to a status code and the result shape."""
    status_code = ERROR_STATUS.get(type(exc), 500)
    log = logger.error if status_code >= 500 else logger.info
    log("notification_error", path=request.url.path, error=exc.code, message=exc.message)
    return _failure_response(
        status_code,
        OrchestrationResult.failed(error=exc.code, message=exc.message, detail=exc.detail),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions."""
    logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=True)
    return _failure_response(
        500,
        OrchestrationResult.failed(error="InternalError", message="Internal server error", detail=str(exc)),
    )


# =============================================================================
# STARTUP/SHUTDOWN EVENTS
# =============================================================================

@app.on_event("startup")
async def startup_event():
    """Run on application startup."""
    settings = get_app_settings()
    configure_logging(level=settings.logging.level, json_output=settings.logging.json_output)
    await init_database()
    logger.info(
        "api_started",
        service=settings.orchestration.service_name,
        push_enabled=settings.push.enabled,
        email_enabled=settings.email.enabled,
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown."""
    await close_database()
    logger.info("api_stopped")


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(health.router, tags=["Health"])
app.include_router(notify.router, tags=["Notifications"])
app.include_router(workflows.router, tags=["Workflows"])


# =============================================================================
# ROOT ENDPOINT
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """API root endpoint."""
    return {
        "message": "Gyld Notify - Notification Orchestration API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
