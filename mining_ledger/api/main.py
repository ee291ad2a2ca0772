"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from mining_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from mining_ledger.api.v1 import credit, incidents, loans, orgs, sales, shifts
from mining_ledger.domain.exceptions import (
    AuthenticationRequired,
    DomainException,
    DuplicateMembershipError,
    InsufficientPermissions,
    InvalidIdentifierError,
    InvalidLoanTermsError,
    InvalidMembershipChangeError,
    InvalidRepaymentError,
    InvalidSaleError,
    NotAMember,
    OrganizationIdMissing,
    PartialWriteError,
    ResourceNotFoundError,
)
from mining_ledger.infrastructure.observability.logging import setup_logging, log_access_denied
from mining_ledger.infrastructure.observability.metrics import access_denied_counter
from mining_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)

STATUS_BY_EXCEPTION = {
    OrganizationIdMissing: 400,
    InvalidIdentifierError: 400,
    InvalidMembershipChangeError: 400,
    AuthenticationRequired: 401,
    NotAMember: 403,
    InsufficientPermissions: 403,
    ResourceNotFoundError: 404,
    DuplicateMembershipError: 409,
    InvalidLoanTermsError: 422,
    InvalidSaleError: 422,
    InvalidRepaymentError: 422,
    PartialWriteError: 500,
}

DENIAL_REASONS = {
    OrganizationIdMissing: "organization_missing",
    NotAMember: "not_a_member",
    InsufficientPermissions: "insufficient_permissions",
}


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Translate domain errors into HTTP responses"""
    status_code = STATUS_BY_EXCEPTION.get(type(exc), 500)
    content = {"detail": str(exc), "error": type(exc).__name__}

    reason = DENIAL_REASONS.get(type(exc))
    if reason is not None:
        access_denied_counter.labels(reason=reason).inc()
        log_access_denied(
            getattr(request.state, "request_id", "unknown"),
            request.headers.get("X-User-ID", ""),
            request.path_params.get("org_id"),
            reason,
        )

    if isinstance(exc, PartialWriteError):
        content["orphan_id"] = exc.orphan_id

    return JSONResponse(status_code=status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 with pydantic errors; the rejected input is not echoed since it may be NaN or Infinity"""
    errors = [{key: value for key, value in error.items() if key != "input"} for error in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Mining Ledger",
        description="Record keeping, financial health and microloans for small-scale mining organizations",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(orgs.router, prefix="/v1", tags=["organizations"])
    app.include_router(sales.router, prefix="/v1", tags=["sales"])
    app.include_router(credit.router, prefix="/v1", tags=["financial-health"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(shifts.router, prefix="/v1", tags=["shifts"])
    app.include_router(incidents.router, prefix="/v1", tags=["incidents"])

    return app


app = create_app()
