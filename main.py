"""Main application module."""
import logging

import uvicorn

from api import create_app
from api.config import get_settings
from version import __version__

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def create_and_configure_app():
    """Create and configure the FastAPI application."""
    logger.info(f"Starting application creation (v{__version__})")

    config = {
        "debug": settings.debug,
        "api_title": settings.api_title,
        "api_version": settings.api_version,
        "version": __version__
    }
    app = create_app(config)

    logger.info(f"Application configured with {len(app.routes)} routes ({settings.environment})")
    return app

# Create the FastAPI application instance
app = create_and_configure_app()

if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_config={
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
                }
            },
            "handlers": {
                "default": {
                    "formatter": "default",
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr"
                }
            },
            "loggers": {
                "": {"handlers": ["default"], "level": settings.log_level.upper()},
                "api": {"level": "DEBUG" if settings.debug else settings.log_level.upper()},
                "project_module": {"level": "DEBUG" if settings.debug else settings.log_level.upper()},
                "uvicorn": {"level": "INFO"}
            }
        }
    )
