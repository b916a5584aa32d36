from typing import List, Tuple

from ..models import Project, Repository
from .base import MetricGroup, Sample
from .harbor import HarborGroupCollector

ProjectRepositories = Tuple[Project, List[Repository]]


class RepositoriesCollector(HarborGroupCollector):
    """Pull, star and tag counts for every repository of every project.

    Repositories are listed per project, fanned out over the worker pool.
    """

    group = MetricGroup.REPOSITORIES
    latency_key = "repositories_latency"

    async def fetch(self) -> List[ProjectRepositories]:
        projects = await self.load_projects()

        async def load(project: Project) -> ProjectRepositories:
            return project, await self.load_repositories(project)

        return await self.pool.map(load, projects)

    def translate(self, data: List[ProjectRepositories]) -> List[Sample]:
        samples: List[Sample] = []
        for _, repositories in data:
            for repo in repositories:
                samples.append(self.sample("repositories_pull_total", repo.pull_count, repo.name, repo.id))
                samples.append(self.sample("repositories_star_total", repo.star_count, repo.name, repo.id))
                samples.append(self.sample("repositories_tags_total", repo.tags_count, repo.name, repo.id))
        return samples
