"""
Main FastAPI application entry point.
Sets up the API, middleware, error handling and routes.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bankdash.api import accounts, cards, summary, transactions, transfers
from bankdash.core.config import settings
from bankdash.core.exceptions import LedgerError
from bankdash.core.logging import configure_logging, get_logger
from bankdash.database import Base, engine
from bankdash.services.events import ChangeNotifier

configure_logging()
logger = get_logger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc"  # ReDoc UI
)

# Process-wide change events and the double-submission guard
app.state.notifier = ChangeNotifier()
app.state.transfers_in_flight = set()

# CORS middleware (allows the dashboard front-end to call the API)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """
    Surface ledger errors as ``{"detail": message}`` with their status code.
    """
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=type(exc).__name__, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
def root():
    """
    Root endpoint - service information.
    """
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "accounts": f"{settings.API_V1_PREFIX}/accounts",
            "transactions": f"{settings.API_V1_PREFIX}/transactions",
            "transfers": f"{settings.API_V1_PREFIX}/transfers",
            "cards": f"{settings.API_V1_PREFIX}/cards",
            "summary": f"{settings.API_V1_PREFIX}/summary"
        }
    }


@app.get("/health")
def health_check():
    """
    Health check endpoint for monitoring.
    """
    return {
        "status": "healthy",
        "database": engine.dialect.name
    }


# Include API routers
app.include_router(accounts.router, prefix=settings.API_V1_PREFIX)
app.include_router(transactions.router, prefix=settings.API_V1_PREFIX)
app.include_router(transfers.router, prefix=settings.API_V1_PREFIX)
app.include_router(cards.router, prefix=settings.API_V1_PREFIX)
app.include_router(summary.router, prefix=settings.API_V1_PREFIX)
