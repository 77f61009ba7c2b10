"""
FastAPI main application.
REST API for spot prices and Earn-aware pair rebalancing.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.core.config import settings
from backend.app.core.errors import register_exception_handlers
from backend.app.core.middleware import register_middleware
from backend.app.api.v1.api import api_router
from rebalancer.container import Container

# Logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Sentry (global)
if settings.SENTRY_ENABLED and settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    def before_send_filter(event, hint):
        """Mask API keys in captured requests."""
        if 'request' in event:
            headers = event['request'].get('headers', {})
            for key in ['Authorization', 'X-MBX-APIKEY']:
                if key in headers:
                    headers[key] = '***MASKED***'
        return event

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=0.1,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR
            ),
        ],
        before_send=before_send_filter,
        send_default_pii=False,
        attach_stacktrace=True,
    )
    logger.info(f"Sentry initialized (environment: {settings.SENTRY_ENVIRONMENT})")


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        container: Dependency container (production wiring if None)
    """
    container = container or Container()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """Close exchange clients on shutdown."""
        logger.info(
            f"Starting {settings.PROJECT_NAME} "
            f"(dev_mode={container.dev_mode}, max_trade_value_usd={container.max_trade_value_usd})"
        )
        yield
        await container.aclose()
        logger.info("Application stopped")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    register_middleware(app)
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    if settings.PROMETHEUS_ENABLED:
        from backend.app.services.metrics import metrics_app
        app.mount("/metrics", metrics_app)

    @app.get("/")
    async def root() -> dict:
        """Root endpoint"""
        return {
            "message": "Binance rebalancer API is running",
            "version": settings.VERSION,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
