from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from gstbill.config import settings
from gstbill.api.v1.router import api_router
from gstbill.database import init_db, async_session_factory


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Create database tables
    """
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)
    await init_db()
    if settings.INVOICE_BACKEND_URL:
        logger.info("Invoice numbers listed from %s", settings.INVOICE_BACKEND_URL)

    yield

    logger.info("Shutting down...")


OPENAPI_TAGS = [
    {"name": "Company", "description": "Seller profile; its acronym prefixes invoice numbers"},
    {"name": "Invoice Numbers", "description": "Financial-year invoice number proposal and validation"},
    {"name": "Invoices", "description": "GST tax invoices with CGST/SGST/IGST totals"},
    {"name": "Calculations", "description": "Totals and amount in words for invoices being edited"},
]

API_DESCRIPTION = """
## GST Billing API

Tax invoices for businesses under India's GST regime.

### Invoice numbers

Format `ACRONYM/FY/SEQ`, e.g. `AGT/24-25/007`. The sequence restarts every
financial year (April-March) and must always be above the highest issued.

### Error Codes

| Code | Description |
|------|-------------|
| 404 | Not Found - Resource doesn't exist |
| 409 | Conflict - Invoice number rejected (duplicate or not above highest) |
| 422 | Unprocessable Entity - Validation failed or company profile missing |
| 500 | Internal Server Error |
"""

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=API_DESCRIPTION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=OPENAPI_TAGS,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log unexpected errors and return them as JSON."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": str(exc),
            "type": type(exc).__name__,
            "path": str(request.url.path),
            "method": request.method,
        },
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint with database validation."""
    from sqlalchemy import text
    from datetime import datetime, timezone

    health_status = {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": "unknown"
        }
    }

    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            health_status["checks"]["database"] = "connected"
    except Exception as e:
        logger.error("Health check database error: %s", e)
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = f"error: {str(e)}"

    if health_status["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=health_status)

    return health_status


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("gstbill.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
