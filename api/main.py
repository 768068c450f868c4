"""
FastAPI Backend for the FuelEU Maritime compliance ledger.

Provides REST API endpoints for:
- Compliance balance computation and lookup (with penalty)
- Banking of surplus CB and application of banked CB
- Pool validation and creation
- Route GHG intensity comparison against a baseline
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
import uvicorn

from api.config import settings
from api.health import perform_full_health_check, perform_liveness_check
from api.middleware import setup_middleware, get_request_id
from api.rate_limit import limiter
from api.routers.banking import router as banking_router
from api.routers.compliance import router as compliance_router
from api.routers.pools import router as pools_router
from api.routers.routes import router as routes_router
from fueleu import __version__
from fueleu.errors import (
    ConfigurationError,
    NotFoundError,
    PoolValidationError,
    ValidationError,
)

# Configure structured logging for production
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(message)s',  # JSON logs are self-contained
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """
    Application factory for the FuelEU Ledger API.

    Creates and configures the FastAPI application with middleware, domain
    error mapping and routers.

    Returns:
        FastAPI: Configured application instance
    """
    application = FastAPI(
        title="FuelEU Ledger API",
        description="""
## FuelEU Maritime Compliance Ledger

Computes ship compliance balances against the FuelEU GHG intensity
targets and keeps the banking and pooling records built on them.

### Flexibility mechanisms
- Banking: surplus CB carried forward to later years
- Pooling: CB redistributed among ships of a pool

### Rate Limiting
Write endpoints are limited per client address.
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Request ids, access logs, opaque 500s
    setup_middleware(application, debug=settings.debug)

    # CORS middleware - use configured origins only (NO WILDCARDS)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    application.state.limiter = limiter

    @application.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={
                "error": "Rate limit exceeded",
                "detail": str(exc.detail),
                "retry_after": getattr(exc, 'retry_after', 60),
            },
            headers={"Retry-After": str(getattr(exc, 'retry_after', 60))},
        )

    register_exception_handlers(application)

    application.include_router(compliance_router)
    application.include_router(banking_router)
    application.include_router(pools_router)
    application.include_router(routes_router)

    return application


def register_exception_handlers(application: FastAPI):
    """Map domain errors onto HTTP responses."""

    @application.exception_handler(ValidationError)
    async def domain_validation_handler(request: Request, exc: ValidationError):
        content = {"detail": exc.message}
        if isinstance(exc, PoolValidationError):
            content["errors"] = exc.errors
        return JSONResponse(status_code=400, content=content)

    @application.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @application.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.error(f"Configuration error on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": "An internal error occurred. Please contact support with the request ID.",
                "request_id": get_request_id(),
            },
        )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError):
    """Request validation errors without the raw input context objects."""
    return [
        {k: v for k, v in err.items() if k in ("type", "loc", "msg")}
        for err in exc.errors()
    ]


# Create the application
app = create_app()


# ============================================================================
# API Endpoints - Core
# ============================================================================

@app.get("/", tags=["System"])
async def root():
    """
    API root endpoint.

    Returns basic API information and available endpoint categories.
    """
    return {
        "name": "FuelEU Ledger API",
        "version": __version__,
        "status": "operational",
        "docs": "/api/docs",
        "endpoints": {
            "health": "/api/health",
            "compliance": "/api/compliance/...",
            "banking": "/api/banking/...",
            "pools": "/api/pools/...",
            "routes": "/api/routes/...",
        }
    }


@app.get("/api/health", tags=["System"])
async def health_check():
    """
    Health check endpoint for load balancers and orchestrators.

    Returns:
        - status: Overall health status (healthy/degraded/unhealthy)
        - components: Database and target table status
    """
    result = await perform_full_health_check()
    status_code = 503 if result["status"] == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=result)


@app.get("/api/health/live", tags=["System"])
async def liveness_check():
    """Liveness probe: the process is up and answering."""
    return await perform_liveness_check()


# ============================================================================
# Run Server
# ============================================================================

if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
