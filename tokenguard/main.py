from __future__ import annotations

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST

from . import __version__
from .metrics import render_latest
from .routers import health
from .routers.health import HealthRunner


def create_app(health_runner: HealthRunner | None = None) -> FastAPI:
    app = FastAPI(title="TokenGuard Health API", version=__version__)
    app.state.health_runner = health_runner
    app.include_router(health.router)

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(render_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
