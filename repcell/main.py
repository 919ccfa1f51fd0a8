from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
import logging

# Import database components
from repcell.database.database import engine, Base

# Import middleware and error handlers
from repcell.common.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from repcell.common.error_handlers import register_error_handlers

# Import routers
from repcell.modules.accounting.router import router as accounting_router
from repcell.modules.inventory.router import router as inventory_router
from repcell.modules.invoices.router import router as invoices_router
from repcell.modules.reports.routers import financial_router as financial_reports_router

# Import models for table creation
import repcell.modules.inventory.models
import repcell.modules.invoices.models
import repcell.modules.accounting.models

from repcell.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("RepCell API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"Business timezone: {settings.TIMEZONE or 'server local'}")
    yield
    logger.info("RepCell API shutting down...")


# FastAPI app
app = FastAPI(
    title="RepCell API",
    description="Cash ledger, inventory and financial reports for a repair shop",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include routers
app.include_router(accounting_router, prefix="/api")
app.include_router(inventory_router, prefix="/api")
app.include_router(invoices_router, prefix="/api")
app.include_router(financial_reports_router, prefix="/api")

# Create database tables (only for development - use migrations in production)
if settings.ENVIRONMENT == "development":
    Base.metadata.create_all(bind=engine)


@app.get("/")
async def read_root():
    return {
        "message": "RepCell API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}
