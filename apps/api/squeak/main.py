"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from squeak.core.config import settings
from squeak.core.exceptions import SqueakError
from squeak.core.rate_limit import limiter
from squeak.core.structured_logging import build_log_context, configure_logging
from squeak.db.session import engine

configure_logging()
logger = logging.getLogger(__name__)

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
        send_default_pii=False,
    )
    logging.info("Sentry initialized for error tracking")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pooled client for Slack and Cloudinary calls
    app.state.http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
    yield
    await app.state.http_client.aclose()
    engine.dispose()


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Squeak API",
    description="Embeddable multi-tenant Q&A widget API",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - only widget hosts listed in CORS_ORIGINS, with credentials
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ============================================================================
# Error Translation
# ============================================================================

@app.exception_handler(SqueakError)
async def squeak_error_handler(request: Request, exc: SqueakError):
    if exc.status_code >= 500:
        logger.error(
            "Request failed: %s",
            exc.message,
            extra=build_log_context(route=request.url.path, method=request.method),
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Field locations only; never echo the submitted values back
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "fields": fields},
    )


# ============================================================================
# Routers
# ============================================================================

from squeak.routers import images, question, register, slack_import, topics

app.include_router(question.router, prefix="/api", tags=["questions"])
app.include_router(register.router, prefix="/api", tags=["profiles"])
app.include_router(topics.router, prefix="/api", tags=["topics"])
app.include_router(images.router, prefix="/api", tags=["images"])
app.include_router(slack_import.router, prefix="/api", tags=["slack"])


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.
    
    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
