"""
HTTP middleware: GET request logging and request metrics.
"""
import logging
import time

from fastapi import FastAPI, Request

from backend.app.core.config import settings
from backend.app.services.metrics import record_http_request

logger = logging.getLogger("backend.app.requests")


def register_middleware(app: FastAPI) -> None:
    """Install request logging and metrics middleware."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        log_request = settings.LOG_GET_REQUESTS and request.method == "GET"
        if log_request:
            logger.info(
                f"--> {request.method} {request.url.path} | query={dict(request.query_params)}"
            )

        response = await call_next(request)

        duration = time.perf_counter() - start
        if log_request:
            logger.info(
                f"<-- {response.status_code} {request.method} {request.url.path} {duration * 1000:.0f}ms"
            )

        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        record_http_request(request.method, endpoint, response.status_code, duration)
        return response
