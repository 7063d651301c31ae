"""Bank statement ingestion API: FastAPI entry point.

Routes are served from domain modules under apps/api/domains/.
"""

import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.core.config import settings
from apps.api.core.errors import register_error_handlers
from apps.api.core.logging import setup_logging_from_settings

from apps.api.domains.bank_statements.router import router as bank_statements_router
from apps.api.domains.bank_transactions.router import router as bank_transactions_router
from apps.api.domains.categorization.router import router as categorization_router
from apps.api.routers import health

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup/shutdown hooks."""
    setup_logging_from_settings(settings)
    logger.info("app_starting", version=settings.APP_VERSION, environment=settings.ENVIRONMENT)
    yield
    logger.info("app_stopping")


app = FastAPI(
    title="Bank Statement Ingestion API",
    description="Imports bank CSV exports into the business-management backend.",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bank_statements_router, prefix="/api/v1")
app.include_router(bank_transactions_router, prefix="/api/v1")
app.include_router(categorization_router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1")
