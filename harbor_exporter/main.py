from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import HTMLResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST

from .config import Settings, settings
from .metrics.base import MetricGroup
from .metrics.descriptors import build_descriptors
from .metrics.exposition import render
from .metrics.groups import build_registry
from .services.client import HarborClient
from .services.collector import CollectionOrchestrator

logger = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head><title>Harbor Exporter</title></head>
<body>
<h1>Harbor Exporter</h1>
<p><a href="{metrics_path}">Metrics</a></p>
</body>
</html>
"""


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    config: Settings = settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    descriptors = build_descriptors(config.instance)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = HarborClient(
            config.uri,
            config.username,
            config.password,
            timeout=config.timeout,
            insecure=config.insecure,
            api_path=config.api_path,
            transport=transport,
        )
        try:
            api_path = await client.detect_api_path()
            logger.info("Using Harbor API at %s%s", client.uri, api_path)
            logger.info(
                "Cache enabled: %s, duration: %s", config.cache_enabled, config.cache_duration
            )
            enabled = config.enabled_groups
            for group in sorted(enabled, key=lambda g: g.value):
                logger.info("Collecting metrics group %s", group.value)
            for group in config.skip_metrics:
                logger.info("Skipping metrics group %s", group.value)

            registry = build_registry(
                client,
                descriptors,
                page_size=config.page_size,
                cache_enabled=config.cache_enabled,
                cache_duration=config.cache_duration,
                worker_pool_size=config.worker_pool_size,
                groups=[group for group in MetricGroup if group in enabled],
            )
            app.state.orchestrator = CollectionOrchestrator(registry, descriptors, enabled)
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Harbor Exporter", lifespan=lifespan)

    async def metrics(
        orchestrator: CollectionOrchestrator = Depends(get_orchestrator),
    ) -> Response:
        result = await orchestrator.scrape()
        return Response(
            content=render(result.samples, orchestrator.descriptors),
            media_type=CONTENT_TYPE_LATEST,
        )

    app.add_api_route(config.metrics_path, metrics, methods=["GET"], include_in_schema=False)

    @app.get("/", include_in_schema=False)
    async def landing_page() -> HTMLResponse:
        return HTMLResponse(LANDING_PAGE.format(metrics_path=config.metrics_path))

    @app.get("/-/healthy", include_in_schema=False)
    async def healthy() -> PlainTextResponse:
        return PlainTextResponse("OK")

    @app.get("/-/ready", include_in_schema=False)
    async def ready() -> PlainTextResponse:
        return PlainTextResponse("OK")

    return app


def get_orchestrator(request: Request) -> CollectionOrchestrator:
    return request.app.state.orchestrator


app = create_app()
