from __future__ import annotations

import time
from typing import Callable, List, Mapping, Optional
from urllib.parse import quote

from ..models import Project, Repository, decoder
from ..services.client import HarborClient
from ..services.pager import PagedFetcher
from ..services.workpool import WorkPool
from .base import GroupCollector, MetricDescriptor
from .cache import ReplayCache

decode_projects = decoder(List[Project])
decode_repositories = decoder(List[Repository])


class HarborGroupCollector(GroupCollector):
    """Group collector backed by the Harbor REST API."""

    def __init__(
        self,
        client: HarborClient,
        fetcher: PagedFetcher,
        descriptors: Mapping[str, MetricDescriptor],
        cache: Optional[ReplayCache] = None,
        pool: Optional[WorkPool] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(descriptors, cache=cache, clock=clock)
        self.client = client
        self.fetcher = fetcher
        self.pool = pool or WorkPool(1)

    async def load_projects(self) -> List[Project]:
        return await self.fetcher.fetch_items("/projects", decode_projects)

    def repositories_path(self, project: Project) -> str:
        if self.client.is_v2:
            return f"/projects/{quote(project.name, safe='')}/repositories"
        return f"/repositories?project_id={project.project_id}"

    async def load_repositories(self, project: Project) -> List[Repository]:
        return await self.fetcher.fetch_items(self.repositories_path(project), decode_repositories)


def repository_path_segment(project_name: str, repository_name: str) -> str:
    """Repository name relative to its project, escaped for a v2 URL path.

    Harbor expects the slashes of nested repository names double encoded.
    """
    prefix = f"{project_name}/"
    relative = repository_name[len(prefix):] if repository_name.startswith(prefix) else repository_name
    return quote(quote(relative, safe=""), safe="")
