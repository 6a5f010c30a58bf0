"""
FastAPI application initialization and configuration.
"""

from version import __version__

import logging
from typing import Dict, Any, Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)

# Global config storage
_app_config: Dict[str, Any] = {}

# Settings read only while building the app; everything else comes from
# the cached process settings (CODEBASE_* environment)
APP_OVERRIDES = frozenset({"api_title", "api_version", "debug"})

def create_app(config: Optional[Dict[str, Any]] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    from .config import get_settings
    from .errors import register_exception_handlers

    version = config.get("version", __version__) if config else __version__

    # Overrides apply to this app only; the cached settings stay untouched
    settings = get_settings().model_copy()

    global _app_config
    _app_config.update(settings.model_dump(exclude={"jwt_secret"}))

    if config:
        for key, value in dict(config).items():
            if key == "cors_origins":
                # Update input instead of computed property
                settings.cors_origins_input = ",".join(value if isinstance(value, list) else [value])
            elif key in APP_OVERRIDES:
                setattr(settings, key, value)
            elif key != "version":
                logger.warning(f"Ignoring override for {key}: only {sorted(APP_OVERRIDES)} apply per app")
        _app_config.update(settings.model_dump(exclude={"jwt_secret"}))

    app = FastAPI(
        title=settings.api_title,
        description=f"API for sharing projects with exclusive check-out editing (Version {version})",
        version=settings.api_version,
        debug=settings.debug,
        openapi_tags=[{"name": "version", "description": version}]
    )

    logger.debug(f"Creating app with config: {_app_config}")

    logger.info(f"Configuring CORS with origins: {settings.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    @app.middleware("http")
    async def log_requests(request, call_next):
        response = await call_next(request)
        logger.debug(f"{request.method} {request.url.path} -> {response.status_code}")
        return response

    register_exception_handlers(app)

    # Routers import the database layer, which imports api.config
    from .health import router as health_router
    from .auth import router as auth_router
    from .users import router as users_router
    from .projects import router as projects_router
    from .activities import router as activities_router
    from .discussions import router as discussions_router
    from .admin import router as admin_router

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(projects_router)
    app.include_router(activities_router)
    app.include_router(discussions_router)
    app.include_router(admin_router)

    @app.on_event("startup")
    async def startup_event():
        """Create tables and seed reference data."""
        from database import AsyncSessionLocal, engine, init_db
        try:
            await init_db(engine, AsyncSessionLocal)
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

    @app.on_event("shutdown")
    async def shutdown_event():
        """Dispose of pooled database connections."""
        from database import engine
        await engine.dispose()

    return app

def get_config() -> Dict[str, Any]:
    """Get current application configuration."""
    return _app_config

__all__ = ['create_app', 'get_config']
