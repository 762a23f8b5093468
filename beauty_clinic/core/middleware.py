"""
Custom middleware for the FastAPI application.
"""
import time
import logging
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..exceptions import error_body

# Set up logging
logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging request and response information.
    """
    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        """
        Process the request and log information.

        Args:
            request: The incoming request
            call_next: The next middleware or endpoint handler

        Returns:
            Response: The response from the next handler
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request {request_id} started: {request.method} {request.url.path} from {client_host}")

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request {request_id} failed: {request.method} {request.url.path} "
                f"- Error: {str(e)} - Duration: {process_time:.4f}s"
            )
            raise

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Request-ID"] = request_id

        logger.info(
            f"Request {request_id} completed: {request.method} {request.url.path} "
            f"- Status: {response.status_code} - Duration: {process_time:.4f}s"
        )
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware for basic rate limiting.

    This is a simple in-memory, per-process rate limiter keyed by client IP.
    Clients idle for a whole window are swept out once per window.
    """
    def __init__(self, app: ASGIApp, rate_limit: int = 100, window_seconds: int = 60):
        super().__init__(app)
        self.rate_limit = rate_limit
        self.window_seconds = window_seconds
        self.requests = {}  # IP -> [timestamp1, timestamp2, ...]
        self.last_sweep = time.time()

    def prune(self, now: float) -> None:
        """Forget clients whose latest request is outside the window."""
        stale = [
            client_ip for client_ip, timestamps in self.requests.items()
            if not timestamps or now - timestamps[-1] >= self.window_seconds
        ]
        for client_ip in stale:
            del self.requests[client_ip]
        self.last_sweep = now
        if stale:
            logger.debug(f"Rate limiter dropped {len(stale)} idle clients")

    async def dispatch(self, request: Request, call_next):
        """
        Process the request with rate limiting.

        Returns:
            Response: The response from the next handler or a 429 response
        """
        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        if now - self.last_sweep >= self.window_seconds:
            self.prune(now)

        recent = [
            timestamp for timestamp in self.requests.get(client_ip, [])
            if now - timestamp < self.window_seconds
        ]

        if len(recent) >= self.rate_limit:
            self.requests[client_ip] = recent
            logger.warning(f"Rate limit exceeded for IP: {client_ip}")
            return JSONResponse(
                status_code=429,
                content=error_body("Rate limit exceeded"),
                headers={"Retry-After": str(self.window_seconds)},
            )

        recent.append(now)
        self.requests[client_ip] = recent
        return await call_next(request)


def setup_middlewares(app, settings):
    """
    Set up all custom middlewares for the application.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    if settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            rate_limit=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestLoggingMiddleware)
