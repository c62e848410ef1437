"""Logging middleware for request/response tracking."""

import logging
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from labelvault.core.settings import get_settings


def configure_logging():
    """Configure structured logging with JSON output."""
    settings = get_settings()
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with timing and caller context.

    Exceptions that escape a route are logged with their traceback and
    answered with a 500 whose body carries the error message.
    """

    def __init__(self, app, logger_name: str = "labelvault.http"):
        super().__init__(app)
        self.logger = structlog.get_logger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start_time = time.time()

        request.state.request_id = request_id
        request_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": self._get_client_ip(request),
        }
        if get_settings().debug:
            request_data["query_params"] = dict(request.query_params)

        self.logger.info("HTTP request started", **request_data)

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            self.logger.error(
                "HTTP request failed with exception",
                error_type=type(e).__name__,
                error_message=str(e),
                process_time_ms=round(process_time * 1000, 2),
                user_id=getattr(request.state, "user_id", None),
                exc_info=True,
                **request_data,
            )
            response = JSONResponse(
                status_code=500,
                content={"error": str(e) or type(e).__name__, "code": "INTERNAL_ERROR"},
            )
            response.headers["X-Request-ID"] = request_id
            return response

        process_time = time.time() - start_time
        response_data = {
            **request_data,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "user_id": getattr(request.state, "user_id", None),
        }

        if response.status_code < 400:
            self.logger.info("HTTP request completed successfully", **response_data)
        elif response.status_code < 500:
            self.logger.warning("HTTP request completed with client error", **response_data)
        else:
            self.logger.error("HTTP request completed with server error", **response_data)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time)
        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address with proxy support."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("cf-connecting-ip") or request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"
