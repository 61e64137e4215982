"""
HTTP routers.
"""

from fileupload.routes.health import router as health_router
from fileupload.routes.upload import router as upload_router

__all__ = ["health_router", "upload_router"]
