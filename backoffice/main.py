"""
Main FastAPI application
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select

from backoffice.config import get_settings
from backoffice.database import engine, Base, AsyncSessionLocal
from backoffice.exceptions import (
    ConfirmationRequired,
    ExternalFetchFailure,
    RecordNotFound,
    ValidationError,
)
from backoffice.models import Location
from backoffice.api import thresholds, shift_rules, job_roles, forecast, revenue_tags, daily_records
from backoffice.utils.logger import configure_logging

settings = get_settings()
logger = logging.getLogger(__name__)


async def seed_default_location(session_factory=AsyncSessionLocal) -> None:
    async with session_factory() as session:
        result = await session.execute(select(Location).where(Location.code == settings.SITE_CODE))
        if not result.scalar_one_or_none():
            session.add(Location(
                name=settings.SITE_NAME,
                code=settings.SITE_CODE,
                latitude=settings.SITE_LATITUDE,
                longitude=settings.SITE_LONGITUDE,
            ))
            await session.commit()
            logger.info(f"Created default location {settings.SITE_NAME}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")

    await seed_default_location()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})


@app.exception_handler(ConfirmationRequired)
async def confirmation_required_handler(request: Request, exc: ConfirmationRequired):
    return JSONResponse(status_code=409, content={"detail": str(exc), "record_id": exc.record_id})


@app.exception_handler(RecordNotFound)
async def not_found_handler(request: Request, exc: RecordNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ExternalFetchFailure)
async def fetch_failure_handler(request: Request, exc: ExternalFetchFailure):
    logger.error(f"Upstream read failed on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc), "retryable": True})


# Include routers
app.include_router(thresholds.router, prefix="/api/thresholds", tags=["Thresholds"])
app.include_router(shift_rules.router, prefix="/api/shift-rules", tags=["Shift Rules"])
app.include_router(job_roles.router, prefix="/api/job-roles", tags=["Job Roles"])
app.include_router(forecast.router, prefix="/api/forecast", tags=["Forecast"])
app.include_router(revenue_tags.router, prefix="/api/revenue-tags", tags=["Revenue Tags"])
app.include_router(daily_records.router, prefix="/api/daily-records", tags=["Daily Records"])


@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "site": settings.SITE_NAME,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backoffice.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
