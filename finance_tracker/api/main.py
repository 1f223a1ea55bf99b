"""FastAPI application factory"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finance_tracker.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finance_tracker.api.v1 import categories, data, recurring, summary, transactions
from finance_tracker.domain.exceptions import PersistenceError
from finance_tracker.infrastructure.observability.logging import setup_logging
from finance_tracker.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Storage failures surface as retryable 503s; nothing was committed"""
    logging.error(f"Ledger storage error: {exc}", extra={"request_id": getattr(request.state, "request_id", "unknown")})
    return JSONResponse(status_code=503, content={"detail": "Ledger storage unavailable"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Finance Tracker",
        description="Personal ledger with recurring transaction materialization",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(PersistenceError, persistence_error_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(data.router, prefix="/v1", tags=["data"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(categories.expense_router, prefix="/v1/expense-categories", tags=["categories"])
    app.include_router(categories.income_router, prefix="/v1/income-categories", tags=["categories"])
    app.include_router(recurring.router, prefix="/v1", tags=["recurring"])
    app.include_router(summary.router, prefix="/v1", tags=["summary"])

    return app


app = create_app()
