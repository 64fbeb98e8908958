"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from contact_api.core.config import settings
from contact_api.core.structured_logging import build_log_context, configure_logging
from contact_api.db.session import engine

configure_logging()
logger = logging.getLogger(__name__)

API_PREFIX = "/v1"

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,  # Contact forms carry names, emails, phone numbers
    )
    logger.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from contact_api.core.rate_limit import limiter

from contact_api.services.contact_cache import build_contact_cache
from contact_api.services.upload_client import UploadServiceClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create process-wide collaborators once; close the HTTP client on shutdown."""
    app.state.contact_cache = build_contact_cache()
    app.state.upload_client = UploadServiceClient()
    logger.info("Contact API %s started (env=%s)", settings.VERSION, settings.ENV)
    try:
        yield
    finally:
        await app.state.upload_client.aclose()


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Contact API",
    description="Contact form intake and message storage",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX or None,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Location", "Content-Disposition"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log anything the routers did not translate and answer with a bare 500."""
    context = build_log_context(
        request_id=request.headers.get("X-Request-ID"),
        route=request.url.path,
        method=request.method,
    )
    logger.error("Unhandled error %s", context, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ============================================================================
# Routers
# ============================================================================

from contact_api.routers import contacts, messages

app.include_router(contacts.router, prefix=API_PREFIX)
app.include_router(messages.router)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/contacts/liveness", tags=["health"])
def liveness():
    """Process is up; no dependencies checked."""
    return {"status": "ok"}


@app.get("/contacts/readiness", tags=["health"])
def readiness():
    """Ready to serve traffic when the database answers."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "unreachable"})
    return {"status": "ok", "database": "ok"}


@app.get("/health", tags=["health"])
def health():
    """
    Health check endpoint.

    Returns environment info without touching dependencies.
    """
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
