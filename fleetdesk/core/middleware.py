import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("fleetdesk.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware writing one access line per request.

    Client and server errors are logged at WARNING, everything else at INFO.
    The elapsed time is also returned in the ``X-Process-Time`` header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        line = f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms"
        if response.status_code >= 400:
            logger.warning(line)
        else:
            logger.info(line)

        response.headers["X-Process-Time"] = f"{duration_ms:.1f}ms"
        return response


def add_middleware(app: FastAPI) -> None:
    """Add all middleware to the FastAPI application."""
    app.add_middleware(RequestLoggingMiddleware)
