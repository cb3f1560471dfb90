"""
FastAPI application for the AI invoice service.

Provides endpoints for:
- Account registration, login and profile
- Invoice CRUD with server-side totals
- AI text-to-invoice parsing, reminder drafting and dashboard insights
- Sending reminder emails
"""

import logging

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import get_settings
from .database import init_db
from .models import HealthResponse
from .routers import ai, auth, email, invoices
from .services.ai import AIServiceError, get_ai_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting Invoice Service...")
    init_db()
    get_ai_service()
    logger.info("Services initialized successfully")
    yield
    logger.info("Shutting down Invoice Service...")


# Create FastAPI application
app = FastAPI(
    title="AI Invoice API",
    description="Invoice management with AI-assisted parsing, reminders and insights",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Health Endpoints
# =============================================================================


@app.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """Root endpoint - health check."""
    return HealthResponse(status="healthy", message="AI Invoice API is running")


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", message="Service is healthy")


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(auth.router)
app.include_router(invoices.router)
app.include_router(ai.router)
app.include_router(email.router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle unexpected database errors."""
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Server Error", "message": str(exc)},
    )


@app.exception_handler(AIServiceError)
async def ai_service_error_handler(request: Request, exc: AIServiceError):
    """Handle AI service errors."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )
