from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
import psutil

from symvora.core.config import Settings, get_settings
from symvora.core.exceptions import register_exception_handlers
from symvora.core.logging_config import setup_logging
from symvora.core.metrics import MetricsTracker
from symvora.core.middleware import (
    CORSHeadersMiddleware,
    ErrorHandlingMiddleware,
    RequestContextMiddleware,
    metrics_middleware
)
from symvora.routes import analyze, health, root
from symvora.services.analyzer import Analyzer, build_analyzer

def create_app(settings: Optional[Settings] = None, analyzer: Optional[Analyzer] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    setup_logging(level=settings.LOG_LEVEL, log_path=settings.LOG_DIR, json_format=settings.LOG_JSON)

    app = FastAPI(
        title=f"{settings.PROJECT_NAME} API",
        description="Symptom advisory service",
        version=settings.VERSION
    )
    app.state.settings = settings
    app.state.analyzer = analyzer or build_analyzer(settings)

    register_exception_handlers(app)

    # Middleware added last runs first:
    # CORS -> request context -> metrics -> error handling -> routes
    app.add_middleware(ErrorHandlingMiddleware)
    app.middleware("http")(metrics_middleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSHeadersMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
        max_age=settings.CORS_MAX_AGE,
        preflight_paths=[f"{settings.API_PREFIX}/analyze"]
    )

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Endpoint for Prometheus metrics"""
        MetricsTracker.update_system_metrics(
            cpu_percent=psutil.cpu_percent(),
            memory_used_bytes=psutil.virtual_memory().used
        )
        return PlainTextResponse(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Include routers
    app.include_router(root.router)
    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(analyze.router, prefix=settings.API_PREFIX, tags=["Analyze"])

    return app

app = create_app()
