"""
fileupload API entry point.

Run with `python -m fileupload.main` or `uvicorn fileupload.main:app`.
"""

from fileupload.app_factory import create_app
from fileupload.config import get_settings
from fileupload.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

app = create_app(settings)


def run() -> None:
    """Start the development server."""
    import uvicorn

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # keep our handlers
    )


if __name__ == "__main__":
    run()
