"""
HTTP Middleware Module
======================

Starlette middleware for request processing.

Features:
- Request ID generation for tracing
- Request timing and access logging
- Security headers
- Login rate limiting
- Session-cookie redirects for the server-rendered pages

Note:
    The redirect middleware only checks that the session cookie is
    present. Full session validation is done in the dependency layer.
"""

import time
import uuid
from typing import Callable, Dict, List
from urllib.parse import quote

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from reportflow.core.config import settings
from reportflow.core.exceptions import RateLimitError, error_body
from reportflow.core.logging import LogContext, get_logger, security_logger
from reportflow.services.audit_service import get_client_ip

# Initialize logger
logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Per-request tracing and access logging.

    Responsibilities:
    - Generate (or accept) a request ID and echo it as X-Request-ID
    - Bind logging context variables for the request
    - Log request timing
    """

    # Paths that are not access-logged
    _QUIET_PATHS = {"/health", "/ready"}

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        # Initialize request state
        request.state.request_id = request_id
        request.state.user_id = None

        with LogContext(request_id=request_id):
            start_time = time.perf_counter()

            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "Request processing error",
                    extra={
                        "error": str(e),
                        "path": request.url.path,
                        "method": request.method,
                    }
                )
                raise

            process_time = time.perf_counter() - start_time
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.4f}"

            self._log_request(request, response, process_time)
        return response

    def _log_request(
        self,
        request: Request,
        response: Response,
        process_time: float,
    ) -> None:
        if request.url.path in self._QUIET_PATHS or request.url.path.startswith("/static"):
            return

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "user_id": getattr(request.state, "user_id", None),
            "ip_address": get_client_ip(request),
        }

        # Log based on status code
        if response.status_code >= 500:
            logger.error("Request completed with error", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("Request completed with client error", extra=log_data)
        else:
            logger.info("Request completed", extra=log_data)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all responses.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Referrer-Policy
    - Content-Security-Policy
    - Strict-Transport-Security (in production)
    """

    # Paths that serve Swagger / ReDoc UI assets
    _DOCS_PATHS = {"/docs", "/redoc", "/openapi.json"}

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Swagger UI and ReDoc load their assets from cdn.jsdelivr.net
        if settings.DEBUG and request.url.path in self._DOCS_PATHS:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com; "
                "worker-src 'self' blob:; "
                "frame-ancestors 'none';"
            )
        else:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self'; "
                "style-src 'self' 'unsafe-inline'; "
                "img-src 'self' data:; "
                "frame-ancestors 'none';"
            )

        if settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding-window rate limit for the login endpoint.

    State is per process; every worker keeps its own counters.
    """

    LOGIN_PATH = "/api/auth/login"
    WINDOW_SECONDS = 60

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self._requests: Dict[str, List[float]] = {}
        self._last_sweep = 0.0

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        if request.url.path == self.LOGIN_PATH and request.method == "POST":
            client_ip = get_client_ip(request)
            if self._is_rate_limited(client_ip, settings.LOGIN_RATE_LIMIT, self.WINDOW_SECONDS):
                security_logger.log_rate_limit_exceeded(
                    ip_address=client_ip,
                    endpoint=request.url.path,
                )
                error = RateLimitError(
                    message="Too many login attempts. Please try again later.",
                    retry_after=self.WINDOW_SECONDS,
                )
                return JSONResponse(
                    status_code=error.status_code,
                    content=error_body(error),
                    headers={"Retry-After": str(self.WINDOW_SECONDS)},
                )

        return await call_next(request)

    def _is_rate_limited(
        self,
        key: str,
        max_requests: int,
        window_seconds: int,
    ) -> bool:
        """
        Record a request for ``key`` and report whether it is over the limit.

        Args:
            key: Identifier (usually IP)
            max_requests: Maximum requests allowed
            window_seconds: Time window in seconds

        Returns:
            True if rate limited
        """
        current_time = time.time()
        window_start = current_time - window_seconds

        if current_time - self._last_sweep >= window_seconds:
            self._sweep(window_start)
            self._last_sweep = current_time

        recent = [ts for ts in self._requests.get(key, []) if ts > window_start]
        if len(recent) >= max_requests:
            self._requests[key] = recent
            return True

        recent.append(current_time)
        self._requests[key] = recent
        return False

    def _sweep(self, window_start: float) -> None:
        """Forget clients whose last request fell out of the window."""
        expired = [
            key for key, stamps in self._requests.items()
            if not stamps or stamps[-1] <= window_start
        ]
        for key in expired:
            del self._requests[key]

    def reset(self) -> None:
        self._requests.clear()


class SessionRedirectMiddleware(BaseHTTPMiddleware):
    """
    Redirects for the server-rendered pages.

    - /dashboard* and /admin* without a session cookie go to /login?from=<path>
    - /login and /register with a session cookie go to /dashboard
    """

    PROTECTED_PREFIXES = ("/dashboard", "/admin")
    GUEST_ONLY_PATHS = ("/login", "/register")

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        has_session = bool(request.cookies.get(settings.SESSION_COOKIE_NAME))

        if not has_session and self._is_protected(path):
            return RedirectResponse(
                url=f"/login?from={quote(path, safe='/')}",
                status_code=307,
            )

        if has_session and path in self.GUEST_ONLY_PATHS:
            return RedirectResponse(url="/dashboard", status_code=307)

        return await call_next(request)

    def _is_protected(self, path: str) -> bool:
        return any(
            path == prefix or path.startswith(prefix + "/")
            for prefix in self.PROTECTED_PREFIXES
        )
