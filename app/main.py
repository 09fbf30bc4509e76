"""
TableBook - FastAPI Backend Application
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
import structlog

from app.config import settings
from app.database import engine, Base
from app.errors import BookingError, ErrorKind
from app.api import (
    auth,
    cron,
    feedback,
    holidays,
    public,
    realtime,
    reservations,
    settings as settings_api,
    staff,
    tables,
    timeslots,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting TableBook API", version="1.0.0")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()
    logger.info("Shutting down TableBook API")


# Create FastAPI application
app = FastAPI(
    title="TableBook",
    description="Restaurant table reservations with live slot holds",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, error: str, kind: ErrorKind) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "code": kind.value},
    )


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.kind == ErrorKind.SERVER:
        logger.error("Request failed", path=request.url.path, error=exc.error)
    return error_response(exc.status_code, exc.error, exc.kind)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return error_response(400, "; ".join(problems) or "Invalid request", ErrorKind.VALIDATION)


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": "1.0.0"}


@app.get("/health/ready")
async def ready():
    """Readiness check with dependency verification"""
    from app.database import SessionLocal

    checks = {}

    # Check database
    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"failed: {str(e)}"

    # Check Redis
    try:
        from app.jobs.celery_app import celery_app
        celery_app.control.ping(timeout=1)
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"failed: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
    }


# Include API routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(timeslots.router, prefix="/api/timeslots", tags=["Time Slots"])
app.include_router(reservations.router, prefix="/api/reservations", tags=["Reservations"])
app.include_router(tables.router, prefix="/api/tables", tags=["Tables"])
app.include_router(public.router, prefix="/api/public", tags=["Public"])
app.include_router(settings_api.router, prefix="/api/settings", tags=["Settings"])
app.include_router(holidays.router, prefix="/api/holidays", tags=["Holidays"])
app.include_router(feedback.router, prefix="/api/feedback", tags=["Feedback"])
app.include_router(staff.router, prefix="/api/staff", tags=["Staff"])
app.include_router(cron.router, prefix="/api/cron", tags=["Cron"])

# Include realtime router
app.include_router(realtime.router, prefix="/api/realtime", tags=["Realtime"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
