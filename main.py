"""
Wholesale Shipment Planning - Main Application

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog
from datetime import datetime, timezone

from config import settings, check_connection

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: probe Supabase once. Planning works without it; an
    unconfigured or unreachable database only disables
    GET /api/orders/{order_id}/planned-shipments, so failures are logged
    and startup continues.
    Shutdown: Log
    """
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info("database_connected")
    elif db_status["status"] == "not_configured":
        logger.warning("database_not_configured")
    else:
        logger.error(
            "database_connection_failed",
            error=db_status.get("error")
        )

    yield

    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Wholesale Shipment Planning",
    description="Order-to-shipment splitting and ship-window validation for wholesale orders",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Reports "healthy" when the database is healthy or simply not
    configured (new-order planning needs no storage), and "degraded"
    when Supabase is configured but unreachable, since editing existing
    orders cannot load their planned shipments then.
    """
    db_status = check_connection()

    return {
        "status": "degraded" if db_status["status"] == "unhealthy" else "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "database": db_status
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Wholesale Shipment Planning API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "shipment_plans": "/api/shipment-plans",
            "ship_windows": "/api/ship-windows",
            "orders": "/api/orders/{order_id}/planned-shipments",
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.shipment_plans import router as shipment_plans_router
from routes.ship_windows import router as ship_windows_router
from routes.orders import router as orders_router

app.include_router(shipment_plans_router)  # Prefix already in router
app.include_router(ship_windows_router)  # Prefix already in router
app.include_router(orders_router)  # Prefix already in router


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
