# tutorbook/main.py - FastAPI application: billing, expenses and financial reports
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import traceback
import time

from tutorbook.core.config import settings
from tutorbook.core.db import db_manager
from tutorbook.api.deps.service import get_billing_service
from tutorbook.api.routers import budgets, expenses, payments, reports, students


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.log_format_string,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"Starting {settings.API_TITLE}...")
    logger.info(f"Environment: {settings.ENV}")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}")

    # Catch up on obligations and overdue flags missed while the app was down
    service = app.dependency_overrides.get(get_billing_service, get_billing_service)()
    service.refresh()

    yield

    logger.info(f"Shutting down {settings.API_TITLE}...")
    if settings.STORAGE_BACKEND == "sql":
        db_manager.close()


app = FastAPI(
    title=settings.API_TITLE,
    description="Students, monthly tuition billing, expenses and budget tracking for a tutoring business",
    version=settings.API_VERSION,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Error processing {request.method} {request.url.path}: {str(e)}")
        raise

    process_time = time.time() - start_time
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.3f}s)")
    return response


app.add_middleware(CORSMiddleware, **settings.get_cors_config())


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}")
    logger.error(traceback.format_exc())

    if settings.is_development:
        return JSONResponse(
            status_code=500,
            content={
                "detail": str(exc),
                "traceback": traceback.format_exc()
            }
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


@app.get("/health")
async def health_check():
    health = {
        "status": "healthy",
        "environment": settings.ENV,
        "version": settings.API_VERSION,
        "storage_backend": settings.STORAGE_BACKEND,
    }
    if settings.STORAGE_BACKEND == "sql":
        health["database"] = db_manager.health_check()
        if health["database"]["status"] != "healthy":
            health["status"] = "degraded"
    return health


logger.info("Registering API routers...")
app.include_router(students.router, prefix="/api/students", tags=["Students"])
app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])
app.include_router(expenses.router, prefix="/api/expenses", tags=["Expenses"])
app.include_router(budgets.router, prefix="/api/budgets", tags=["Budgets"])
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])
logger.info("All routers registered successfully")
