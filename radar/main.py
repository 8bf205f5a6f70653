import os
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import Settings, settings as default_settings
from .db import Database
from .errors import install_error_handlers
from .logging import setup_logging, RequestIdMiddleware
from .auth.router import router as auth_router
from .routes.projects import router as projects_router
from .routes.tasks import router as tasks_router
from .routes.comments import router as comments_router
from .routes.timeline import router as timeline_router
from .routes.uploads import router as uploads_router


logger = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging()
    app = FastAPI(title=settings.app_name)
    app.state.settings = settings
    app.state.db = database or Database.from_settings(settings)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def _rate_limited(request, exc):
        return JSONResponse({"error": "Muitas requisições. Tente novamente em instantes."}, status_code=429)

    app.add_middleware(SlowAPIMiddleware)
    install_error_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(projects_router)
    app.include_router(tasks_router)
    app.include_router(comments_router)
    app.include_router(timeline_router)
    app.include_router(uploads_router)

    # Files written by LocalStorageProvider
    if settings.storage_provider != "blob":
        upload_dir = os.path.join(settings.storage_local_dir, "uploads")
        os.makedirs(upload_dir, exist_ok=True)
        app.mount("/files/local", StaticFiles(directory=upload_dir), name="local-files")

    # Metrics
    if settings.metrics_enabled:
        Instrumentator().instrument(app).expose(app)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.on_event("startup")
    def _startup():
        # Ensure local SQLite directory exists
        if settings.database_url.startswith("sqlite:///./"):
            os.makedirs("var", exist_ok=True)
        if settings.auto_create_db:
            app.state.db.create_all()
            logger.info("database_ready", auto_create=True)

    @app.on_event("shutdown")
    def _shutdown():
        app.state.db.dispose()
        logger.info("database_disposed")

    return app


app = create_app()
