"""
IT Chronicle API

Wires the routers to the app and maps domain errors to HTTP statuses. It also
makes sure background skill derivations finish before the database engine is
disposed on shutdown.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chronicle.core.config import settings
from chronicle.core.database import init_db, close_db
from chronicle.core.exceptions import (
    ChronicleError, ResourceNotFoundError, ValidationError, IllegalTransitionError,
    LogbookLockedError, AuthorizationError, CollaboratorError
)
from chronicle.core.logging_config import logger
from chronicle.core.middleware import RequestLoggingMiddleware
from chronicle.api.v1.router import api_router
from chronicle.services.task_runner import runner
import chronicle.models  # noqa: F401  registers every table on Base.metadata

API_PREFIX = f"/api/{settings.API_VERSION}"

# Most specific first: LogbookLockedError is an AuthorizationError
ERROR_STATUS = (
    (LogbookLockedError, status.HTTP_423_LOCKED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (ResourceNotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (IllegalTransitionError, status.HTTP_409_CONFLICT),
    (CollaboratorError, status.HTTP_502_BAD_GATEWAY),
)

PLACEHOLDER_SECRETS = {"", "CHANGE_ME", "change-me", "change-me-too"}


def status_for(exc: ChronicleError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def check_settings() -> None:
    """
    Refuse to start production with placeholder secrets.

    A missing AI key is only a warning: skill derivation then fails in the
    background and the writing aids return their fallback text.
    """
    if settings.ENVIRONMENT == "production":
        weak = [
            name for name in ("SECRET_KEY", "JWT_SECRET_KEY")
            if getattr(settings, name) in PLACEHOLDER_SECRETS
        ]
        if weak:
            raise RuntimeError(f"Placeholder secrets in production: {', '.join(weak)}")

    if not settings.ANTHROPIC_API_KEY:
        logger.warning("[Startup] ANTHROPIC_API_KEY not set; skills will not be derived")


@asynccontextmanager
async def lifespan(app: FastAPI):
    check_settings()
    logger.info(
        f"[Startup] {settings.APP_NAME} ({settings.ENVIRONMENT}) serving {API_PREFIX}; "
        f"strict sign-off={settings.STRICT_FINAL_SIGNOFF}, duplicate weeks={settings.ALLOW_DUPLICATE_WEEKS}"
    )
    await init_db()

    yield

    if runner.pending:
        logger.info(f"[Shutdown] Waiting for {runner.pending} skill derivation(s)")
    await runner.drain()
    await close_db()
    logger.info("[Shutdown] Done")


app = FastAPI(
    title=settings.APP_NAME,
    description="Industrial training logbook: weekly logs, supervisor review, skills and final sign-off",
    version="1.0.0",
    lifespan=lifespan,
    redirect_slashes=False
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(ChronicleError)
async def chronicle_error_handler(request: Request, exc: ChronicleError):
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}", extra={"error_code": exc.code})
    else:
        logger.info(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": str(exc) if settings.DEBUG else "An unexpected error occurred",
            "details": {},
        }
    )


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "app": settings.APP_NAME, "environment": settings.ENVIRONMENT}


app.include_router(api_router, prefix=API_PREFIX)


def main():
    import uvicorn
    uvicorn.run(
        "chronicle.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    main()
