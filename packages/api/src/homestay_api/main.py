# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .admin import setup_admin
from .core.config import settings
from .middleware.pii import PIIMaskingMiddleware
from .routes import (
    admin,
    analytics,
    applications,
    da,
    documents,
    dtdo,
    grievances,
    health,
    notifications,
    officer,
    payments,
)
from .schemas.error import ErrorResponse
from .services.document import DocumentUploadError
from .services.grievance import GrievanceAccessError
from .services.storage import init_storage_service
from .services.workflow import (
    ActionNotPermittedError,
    ConcurrencyConflictError,
    InvalidTransitionError,
    WorkflowRuleError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application startup/shutdown lifecycle."""
    init_storage_service(settings)
    logger.info(
        "HP homestay API starting (auth_disabled=%s, payment_workflow=%s)",
        settings.AUTH_DISABLED,
        settings.PAYMENT_WORKFLOW,
    )
    yield


app = FastAPI(
    title="HP Tourism Homestay Registration API",
    description="Homestay registration, scrutiny, inspection and certification workflow",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# PII masking -- runs after CORS, masks Aadhaar and mobile numbers for state officers
app.add_middleware(PIIMaskingMiddleware)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", str(uuid.uuid4()))


def _build_error(
    status_code: int,
    detail: str,
    request: Request,
    errors: list[dict] | None = None,
) -> JSONResponse:
    request_id = _request_id(request)
    body = ErrorResponse(
        type="about:blank",
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        request_id=request_id,
        instance=request.url.path,
        errors=errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers={"x-request-id": request_id},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    return _build_error(exc.status_code, str(exc.detail), request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    errors = jsonable_encoder(exc.errors())
    return _build_error(422, "Request validation failed.", request, errors=errors)


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return _build_error(422, str(exc), request)


@app.exception_handler(WorkflowRuleError)
async def workflow_rule_handler(request: Request, exc: WorkflowRuleError):
    return _build_error(400, str(exc), request)


@app.exception_handler(ActionNotPermittedError)
async def action_not_permitted_handler(request: Request, exc: ActionNotPermittedError):
    logger.warning("Action denied on %s: %s", request.url.path, exc)
    return _build_error(403, str(exc), request)


@app.exception_handler(ConcurrencyConflictError)
async def concurrency_conflict_handler(request: Request, exc: ConcurrencyConflictError):
    return _build_error(409, str(exc), request)


@app.exception_handler(GrievanceAccessError)
async def grievance_access_handler(request: Request, exc: GrievanceAccessError):
    return _build_error(403, str(exc), request)


@app.exception_handler(DocumentUploadError)
async def document_upload_handler(request: Request, exc: DocumentUploadError):
    return _build_error(exc.status_code, str(exc), request)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    logger.exception("Unhandled exception (request_id=%s)", _request_id(request))
    return _build_error(500, "An unexpected error occurred.", request)


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(documents.router, prefix="/api", tags=["documents"])
app.include_router(payments.router, prefix="/api", tags=["payments"])
app.include_router(da.router, prefix="/api/da", tags=["dealing-assistant"])
app.include_router(dtdo.router, prefix="/api/dtdo", tags=["dtdo"])
app.include_router(grievances.router, prefix="/api/grievances", tags=["grievances"])
app.include_router(officer.router, prefix="/api/officer", tags=["officer"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

# Setup SQLAdmin dashboard at /admin
setup_admin(app)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to the HP Tourism Homestay Registration API"}
