"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI

from zivy.api.admin import router as admin_router
from zivy.api.chat import router as chat_router
from zivy.api.cors import setup_cors
from zivy.api.exceptions import register_exception_handlers
from zivy.api.status import router as status_router
from zivy.configs.config import AppConfig, get_app_config
from zivy.core.context import RelayContext, build_relay_context
from zivy.core.metrics import setup_metrics
from zivy.infra.lifespan import inject
from zivy.infra.telemetry import init_telemetry


@inject
async def lifespan(
    app: FastAPI,
    _context: Annotated[RelayContext, Depends(build_relay_context)],
) -> AsyncGenerator[None, None]:
    """Startup/shutdown, each dependency owns its own teardown."""
    yield


def get_app(config: AppConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Middleware (CORS, Prometheus, OTEL) and exception handlers are
    attached here; Starlette freezes both when the app first starts.
    """
    if config is None:
        config = get_app_config()

    app = FastAPI(
        title="Zivy",
        description="Knowledge-grounded chat relay for the TravDif widget",
        version="0.1.0",
        lifespan=lifespan,
    )
    # Lifespan dependencies see the same config the middleware was built from.
    app.dependency_overrides[get_app_config] = lambda: config

    register_exception_handlers(app)
    setup_cors(app, config.cors)
    setup_metrics(app, config.tracing)
    init_telemetry(app, config.tracing)

    app.include_router(chat_router)
    app.include_router(status_router)
    app.include_router(admin_router)

    return app
