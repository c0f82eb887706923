"""
FastAPI Application - Mamãe Review service
"""

# Load environment variables from .env file before reading configuration
from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from mamae_review.controllers import operational_controller
from mamae_review.core.config import config
from mamae_review.core.errors import (
    ErrorResponse,
    error_response_handler,
    http_exception_handler,
    validation_exception_handler,
)
from mamae_review.core.logger import logger
from mamae_review.db.database import close_store, connect_store
from mamae_review.middlewares import CorrelationIdMiddleware
from mamae_review.routers import product_router, review_router
from mamae_review.routers.review_router import limiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Mamãe Review service...")
    await connect_store(config)

    logger.info(
        "Mamãe Review service started successfully",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "store_backend": config.store_backend,
            "port": config.port
        }
    )

    yield

    logger.info("Shutting down Mamãe Review service...")
    await close_store()


app = FastAPI(
    title="Mamãe Review",
    description="Product reviews with rating aggregation",
    version=config.service_version,
    lifespan=lifespan
)

app.state.limiter = limiter

app.add_middleware(CorrelationIdMiddleware)

# Register centralized error handlers
app.add_exception_handler(ErrorResponse, error_response_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(product_router, prefix="/api/products", tags=["products"])
app.include_router(review_router, prefix="/api/products", tags=["reviews"])

# Operational endpoints for infrastructure/monitoring
app.get("/health")(operational_controller.health)
app.get("/health/ready")(operational_controller.readiness)
app.get("/health/live")(operational_controller.liveness)
app.get("/metrics")(operational_controller.metrics)


if __name__ == "__main__":
    import uvicorn

    logger.info(
        f"Starting {config.service_name} on port {config.port}",
        metadata={"environment": config.environment, "port": config.port}
    )

    uvicorn.run(
        "mamae_review.main:app",
        host=config.host,
        port=config.port,
        reload=config.environment == "development"
    )
