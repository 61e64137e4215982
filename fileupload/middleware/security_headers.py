"""
Security Headers Middleware

Adds security headers to all HTTP responses. Uploaded files are served
back verbatim from the static mount, so browsers must not sniff them into
something executable or render them inside a frame.

Based on OWASP Secure Headers Project recommendations.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from fastapi import FastAPI


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to all responses

    Headers added:
    - X-Content-Type-Options: Prevents MIME sniffing of stored files
    - X-Frame-Options: Prevents clickjacking attacks
    - Referrer-Policy: Controls referrer information leakage
    - Content-Security-Policy: Sandboxes statically served uploads
    - Strict-Transport-Security: Enforces HTTPS (production only)
    """

    def __init__(self, app, static_prefix: str = "", is_production: bool = False):
        super().__init__(app)
        self.static_prefix = static_prefix.rstrip("/")
        self.is_production = is_production

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and add security headers to response"""
        response: Response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Stored files are user content: no scripts, no plugins
        if self.static_prefix and request.url.path.startswith(self.static_prefix + "/"):
            response.headers["Content-Security-Policy"] = "default-src 'none'; img-src 'self'; sandbox"

        forwarded_proto = request.headers.get("X-Forwarded-Proto", "")
        is_https = request.url.scheme == "https" or forwarded_proto.lower() == "https"
        if self.is_production and is_https:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


def add_security_headers(app: FastAPI, static_prefix: str = "", is_production: bool = False) -> None:
    """
    Add security headers middleware to FastAPI application

    Args:
        app: FastAPI application instance
        static_prefix: URL prefix the storage directory is served under
        is_production: Whether to send HSTS on HTTPS requests
    """
    app.add_middleware(
        SecurityHeadersMiddleware,
        static_prefix=static_prefix,
        is_production=is_production,
    )
