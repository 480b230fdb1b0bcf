from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.exceptions import NoticeboardError, validation_error_from_pydantic
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.api.router import api_router
from app.api.endpoints import files
from app.modules.auth.session_store import build_session_store
from app.modules.storage import build_storage
from app.services.file_upload import build_upload_handler
from slowapi.errors import RateLimitExceeded
import app.models  # noqa: F401  Import models so metadata knows about them

PLACEHOLDER_SECRETS = {"", "CHANGE_ME", "changeme", "secret"}

# Multipart framing on top of the largest allowed file
REQUEST_SIZE_OVERHEAD = 1024 * 1024


async def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if settings.SESSION_SECRET in PLACEHOLDER_SECRETS:
        if settings.is_production:
            errors.append("SESSION_SECRET is not set or using a placeholder value")
        else:
            warnings.append("SESSION_SECRET is a placeholder - sessions can be forged")

    if settings.STORAGE_BACKEND == "memory" and settings.is_production:
        warnings.append("STORAGE_BACKEND=memory in production - all data is lost on restart")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] ✓ Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    # Step 1: Validate critical configuration (fail fast!)
    await validate_critical_config()

    # Step 2: Storage and sessions, chosen once for the life of the process
    storage = build_storage(settings)
    await storage.startup()
    if settings.SEED_BOOTSTRAP_ACCOUNTS:
        await storage.seed_bootstrap_accounts()

    session_store = build_session_store(settings)
    await session_store.startup()
    await session_store.start_pruning()

    # Step 3: Upload directory
    upload_handler = build_upload_handler()
    upload_handler.ensure_directory()
    logger.info(f"Uploads stored in {upload_handler.upload_dir}")

    app.state.storage = storage
    app.state.session_store = session_store
    app.state.upload_handler = upload_handler

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")
    session_store.stop_pruning()
    await storage.shutdown()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Role-based school noticeboard for students, teachers and admins",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False  # Prevent 307 redirects that break CORS
)

# Add rate limiter state and exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Add middleware (order matters - last added runs first)
# 1. Request logging (runs first for all requests)
app.add_middleware(RequestLoggingMiddleware)

# 2. Security headers
app.add_middleware(SecurityHeadersMiddleware)

# 3. Request size limit
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_UPLOAD_SIZE + REQUEST_SIZE_OVERHEAD)

# 4. CORS - Origins from CORS_ORIGINS_STR in .env; credentials so the session cookie is sent
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


# Exception handlers
@app.exception_handler(NoticeboardError)
async def noticeboard_exception_handler(request: Request, exc: NoticeboardError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    error = validation_error_from_pydantic(exc.errors())
    logger.info(
        f"[Validation] {request.method} {request.url.path}: "
        f"{', '.join(e['field'] or '(body)' for e in error.errors)}"
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    content = {"message": "Internal server error"}
    if settings.DEBUG:
        content["detail"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
    }


# Include API router
app.include_router(api_router, prefix="/api")

# Uploaded material files
app.include_router(files.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )
