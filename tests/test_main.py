"""Tests for the HTTP surface and the Prometheus exposition."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from conftest import BASE_URL, FakeHarbor, paged
from harbor_exporter.config import Settings
from harbor_exporter.exceptions import ConfigurationError
from harbor_exporter.main import create_app
from harbor_exporter.metrics.base import MetricGroup, Sample
from harbor_exporter.metrics.descriptors import build_descriptors
from harbor_exporter.metrics.exposition import render

QUOTAS = [
    {"id": 1, "ref": {"id": 0, "name": ""}},
    {
        "id": 2,
        "ref": {"id": 3, "name": "library"},
        "hard": {"count": 5, "storage": 1000},
        "used": {"count": 2, "storage": 400},
    },
]


def _quotas_only_settings(**overrides) -> Settings:
    values = dict(
        uri=BASE_URL,
        skip_metrics=[group for group in MetricGroup if group is not MetricGroup.QUOTAS],
        cache_enabled=False,
    )
    values.update(overrides)
    return Settings(**values)


@pytest_asyncio.fixture
async def app_client(fake_harbor):
    fake_harbor.add("/systeminfo", {"harbor_version": "v2.9.0"})
    app = create_app(_quotas_only_settings(), transport=fake_harbor.transport())
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


class TestEndpoints:
    @pytest.mark.asyncio
    async def test_landing_page_links_metrics(self, app_client):
        response = await app_client.get("/")
        assert response.status_code == 200
        assert 'href="/metrics"' in response.text

    @pytest.mark.asyncio
    async def test_health_probes(self, app_client):
        for path in ("/-/healthy", "/-/ready"):
            response = await app_client.get(path)
            assert response.status_code == 200
            assert response.text == "OK"

    @pytest.mark.asyncio
    async def test_metrics_quotas_only(self, fake_harbor, app_client):
        fake_harbor.add("/quotas", handler=paged(QUOTAS))

        response = await app_client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        body = response.text
        assert 'harbor_quotas_count_total{type="hard",repo_name="library",repo_id="3"} 5.0' in body
        assert 'harbor_quotas_count_total{type="used",repo_name="library",repo_id="3"} 2.0' in body
        assert 'harbor_quotas_size_bytes{type="hard",repo_name="library",repo_id="3"} 1000.0' in body
        assert 'harbor_quotas_size_bytes{type="used",repo_name="library",repo_id="3"} 400.0' in body
        assert len([line for line in body.splitlines() if line.startswith("harbor_quotas_")]) == 4
        assert "harbor_up 1.0" in body
        assert "harbor_health" not in body

    @pytest.mark.asyncio
    async def test_metrics_reports_down_when_group_fails(self, app_client):
        response = await app_client.get("/metrics")

        assert response.status_code == 200
        assert "harbor_up 0.0" in response.text
        assert "harbor_quotas_count_total{" not in response.text


class TestStartup:
    @pytest.mark.asyncio
    async def test_detects_v2_api(self):
        fake = FakeHarbor()
        fake.add("/systeminfo", {})
        app = create_app(_quotas_only_settings(), transport=fake.transport())

        async with app.router.lifespan_context(app):
            orchestrator = app.state.orchestrator
            collector = orchestrator.registry.get(MetricGroup.QUOTAS)
            assert collector.client.is_v2

        probed = [request.url.path for request in fake.requests]
        assert probed == ["/api/systeminfo", "/api/v2.0/systeminfo"]

    @pytest.mark.asyncio
    async def test_fails_without_any_api(self):
        fake = FakeHarbor()
        app = create_app(_quotas_only_settings(), transport=fake.transport())

        with pytest.raises(ConfigurationError):
            async with app.router.lifespan_context(app):
                pass

    @pytest.mark.asyncio
    async def test_configured_api_path_skips_probe(self):
        fake = FakeHarbor(api_path="/api")
        app = create_app(_quotas_only_settings(api_path="/api"), transport=fake.transport())

        async with app.router.lifespan_context(app):
            assert app.state.orchestrator.enabled_groups == frozenset({MetricGroup.QUOTAS})

        assert fake.requests == []


class TestExposition:
    def test_counter_and_gauge_families(self):
        descriptors = build_descriptors("prod")
        labels = ("library", "1", "library/nginx", "10", "sha256:aaa", "1", "latest")
        body = render(
            [
                Sample("harbor_prod_artifacts_vulnerabilities_scans", 1.0, labels),
                Sample("harbor_prod_up", 1.0),
            ],
            descriptors,
        ).decode()

        assert "# TYPE harbor_prod_artifacts_vulnerabilities_scans counter" in body
        assert "harbor_prod_artifacts_vulnerabilities_scans_total{" in body
        assert "# TYPE harbor_prod_up gauge" in body
        assert "harbor_prod_up 1.0" in body
