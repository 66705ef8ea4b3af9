"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from finledger import __version__
from finledger.config.settings import get_settings
from finledger.config.logging_config import setup_logging
from finledger.repositories.sqlalchemy.database import init_db
from finledger.api.routers import (
    actions_router,
    investments_router,
    reports_router,
    transactions_router,
)
from finledger.core.exceptions import AppError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging()
    init_db()
    yield


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Ledger derivation, FIFO cost basis and cash-flow reporting",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(transactions_router)
app.include_router(reports_router)
app.include_router(investments_router)
app.include_router(actions_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=400,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
