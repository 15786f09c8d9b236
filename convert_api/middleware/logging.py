"""Logging middleware for HTTP request/response tracking."""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from convert_api.logging_config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log HTTP requests and responses using structlog context binding."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log details.

        Args:
            request: The incoming request
            call_next: The next middleware/route handler

        Returns:
            The response from downstream handlers, tagged with its request ID
        """
        request_id = str(uuid.uuid4())
        method = request.method
        path = request.url.path

        request_logger = logger.bind(
            request_id=request_id,
            method=method,
            endpoint=path,
            client_ip=self._get_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
        )

        start_time = time.perf_counter()
        request_logger.debug(f"Incoming request: {method} {path}")
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            response_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
            request_logger.error(
                f"Request failed: {method} {path} - {e!s}",
                response_time_ms=response_time_ms,
                exc_info=True,
            )
            raise

        response_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
        request_logger.info(
            f"Request completed: {method} {path} - {response.status_code}",
            status_code=response.status_code,
            response_time_ms=response_time_ms,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address from request.

        Args:
            request: The HTTP request

        Returns:
            Client IP address
        """
        # Forwarded headers take precedence behind load balancers/proxies
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
