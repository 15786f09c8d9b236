"""Main FastAPI application for the currency conversion service."""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from convert_api.config import settings
from convert_api.logging_config import get_logger
from convert_api.middleware.logging import LoggingMiddleware
from convert_api.routers import conversion
from convert_api.services.currency_service import CurrencyService, ExchangeRateTable

# Structlog is configured automatically when logging_config is imported
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Rates are built once and shared read-only by every request
    app.state.currency_service = CurrencyService(ExchangeRateTable.default())
    logger.info(
        "Exchange rate table loaded",
        currencies=app.state.currency_service.supported_currencies(),
    )
    yield
    logger.info("Shutting down currency conversion service")


app = FastAPI(
    title="Currency Conversion Service",
    description="Converts currency-tagged amounts into the reference currency",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)
app.include_router(conversion.router)


def run() -> None:
    """Start the HTTP listener on the configured port."""
    logger.info("starting server...")
    if not settings.port_configured:
        logger.info(f"defaulting to port {settings.port}")

    logger.info(f"listening on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
