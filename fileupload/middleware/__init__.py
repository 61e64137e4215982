"""
Middleware package for FastAPI application.

Centralizes middleware configuration and registration:
- CORS configuration
- Security headers
- Error handlers
- Authorization hook
"""

from .cors import configure_cors
from .security_headers import add_security_headers
from .error_handlers import register_error_handlers
from .auth import authorize_upload

__all__ = [
    "configure_cors",
    "add_security_headers",
    "register_error_handlers",
    "authorize_upload",
]
