"""Tests for the paginated fetch protocol."""

from typing import List

import httpx
import pytest

from conftest import json_response, paged
from harbor_exporter.exceptions import DecodeError, FetchError
from harbor_exporter.models import Project, decoder
from harbor_exporter.services.pager import PageCursor, PagedFetcher

decode_projects = decoder(List[Project])


def _projects(count: int) -> list:
    return [{"project_id": n, "name": f"project-{n}"} for n in range(1, count + 1)]


class TestPageCursor:
    def test_query_uses_question_mark_for_plain_path(self):
        cursor = PageCursor(page_number=2, page_size=50)
        assert cursor.query("/projects") == "/projects?page=2&page_size=50"

    def test_query_appends_to_existing_query(self):
        cursor = PageCursor(page_number=1, page_size=10)
        assert (
            cursor.query("/repositories?project_id=3")
            == "/repositories?project_id=3&page=1&page_size=10"
        )


class TestPagedFetcher:
    @pytest.mark.asyncio
    async def test_follows_total_count(self, fake_harbor, fetcher):
        fake_harbor.add("/projects", handler=paged(_projects(25)))

        pages = await fetcher.fetch_all("/projects", decode_projects)

        assert [len(page) for page in pages] == [10, 10, 5]
        assert len(fake_harbor.calls("/projects")) == 3
        assert [p.project_id for page in pages for p in page] == list(range(1, 26))

    @pytest.mark.asyncio
    async def test_single_request_without_total_count(self, fake_harbor, fetcher):
        # A full page but no header: pagination still stops.
        fake_harbor.add("/projects", handler=paged(_projects(30), total_header=False))

        items = await fetcher.fetch_items("/projects", decode_projects)

        assert len(items) == 10
        assert len(fake_harbor.calls("/projects")) == 1

    @pytest.mark.asyncio
    async def test_exact_multiple_of_page_size(self, fake_harbor, fetcher):
        fake_harbor.add("/projects", handler=paged(_projects(20)))

        items = await fetcher.fetch_items("/projects", decode_projects)

        assert len(items) == 20
        assert len(fake_harbor.calls("/projects")) == 2

    @pytest.mark.asyncio
    async def test_empty_page_stops_early(self, fake_harbor, fetcher):
        # The header claims more records than the server actually returns.
        fake_harbor.add(
            "/projects",
            handler=lambda request: json_response(
                _projects(10) if request.url.params["page"] == "1" else [],
                headers={"x-total-count": "100"},
            ),
        )

        items = await fetcher.fetch_items("/projects", decode_projects)

        assert len(items) == 10
        assert len(fake_harbor.calls("/projects")) == 2

    @pytest.mark.asyncio
    async def test_page_parameters_sent(self, fake_harbor, fetcher):
        fake_harbor.add("/projects", handler=paged(_projects(12)))

        await fetcher.fetch_all("/projects", decode_projects)

        params = [dict(request.url.params) for request in fake_harbor.calls("/projects")]
        assert params == [
            {"page": "1", "page_size": "10"},
            {"page": "2", "page_size": "10"},
        ]

    @pytest.mark.asyncio
    async def test_non_numeric_total_count_fails(self, fake_harbor, fetcher):
        fake_harbor.add(
            "/projects",
            handler=lambda request: json_response(
                _projects(10), headers={"x-total-count": "lots"}
            ),
        )

        with pytest.raises(FetchError):
            await fetcher.fetch_all("/projects", decode_projects)

    @pytest.mark.asyncio
    async def test_error_status_fails_whole_fetch(self, fake_harbor, fetcher):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["page"] == "2":
                return httpx.Response(500, text="boom")
            return paged(_projects(25))(request)

        fake_harbor.add("/projects", handler=handler)

        with pytest.raises(FetchError) as excinfo:
            await fetcher.fetch_all("/projects", decode_projects)
        assert excinfo.value.status_code == 500

    @pytest.mark.asyncio
    async def test_malformed_page_fails_whole_fetch(self, fake_harbor, fetcher):
        fake_harbor.add(
            "/projects",
            handler=lambda request: httpx.Response(200, content=b"{not json"),
        )

        with pytest.raises(DecodeError):
            await fetcher.fetch_all("/projects", decode_projects)

    @pytest.mark.asyncio
    async def test_transport_error_is_fetch_error(self):
        from harbor_exporter.services.client import HarborClient

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = HarborClient(
            "http://harbor.test", "admin", "secret", api_path="/api/v2.0",
            transport=httpx.MockTransport(handler),
        )
        try:
            with pytest.raises(FetchError):
                await PagedFetcher(client, 10).fetch_all("/projects", decode_projects)
        finally:
            await client.aclose()
