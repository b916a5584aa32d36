import logging
from typing import List, Tuple
from urllib.parse import quote

from ..models import Artifact, Project, Repository, decoder
from .base import MetricGroup, Sample
from .harbor import HarborGroupCollector, repository_path_segment

logger = logging.getLogger(__name__)

decode_artifacts = decoder(List[Artifact])

RepositoryArtifacts = Tuple[Repository, List[Artifact]]
ProjectArtifacts = Tuple[Project, List[RepositoryArtifacts]]

SCAN_STATUS_VALUES = {"success": 1.0, "running": 2.0}


class ArtifactsCollector(HarborGroupCollector):
    """Size and vulnerability scan results for every artifact.

    Walks projects, then the repositories of each project, then the
    artifacts of each repository. Only the v2 API exposes artifacts; against
    a v1 registry the group succeeds without samples.
    """

    group = MetricGroup.ARTIFACTS
    latency_key = "artifacts_latency"

    async def fetch(self) -> List[ProjectArtifacts]:
        if not self.client.is_v2:
            logger.debug("Artifacts are only available from the v2 API, skipping")
            return []

        projects = await self.load_projects()
        return await self.pool.map(self._load_project, projects)

    async def _load_project(self, project: Project) -> ProjectArtifacts:
        repositories = await self.load_repositories(project)
        loaded: List[RepositoryArtifacts] = []
        for repo in repositories:
            path = (
                f"/projects/{quote(project.name, safe='')}/repositories/"
                f"{repository_path_segment(project.name, repo.name)}"
                "/artifacts?with_tag=true&with_scan_overview=true"
            )
            loaded.append((repo, await self.fetcher.fetch_items(path, decode_artifacts)))
        return project, loaded

    def translate(self, data: List[ProjectArtifacts]) -> List[Sample]:
        samples: List[Sample] = []
        for project, repositories in data:
            for repo, artifacts in repositories:
                for artifact in artifacts:
                    labels = (
                        project.name,
                        project.project_id,
                        repo.name,
                        repo.id,
                        artifact.digest,
                        artifact.id,
                        artifact.first_tag,
                    )
                    samples.append(self.sample("artifacts_size", artifact.size, *labels))

                    report = artifact.report
                    if report is None or not report.report_id:
                        continue

                    summary = report.summary
                    for status, value in (
                        ("fixable", summary.fixable),
                        ("total", summary.total),
                        ("low", summary.summary.low),
                        ("medium", summary.summary.medium),
                        ("high", summary.summary.high),
                    ):
                        samples.append(
                            self.sample(
                                "artifacts_vulnerabilities", value, *labels, report.report_id, status
                            )
                        )

                    start = report.start_time.timestamp() if report.start_time else 0.0
                    samples.append(
                        self.sample(
                            "artifacts_vulnerabilities_scan_start", start, *labels, report.report_id
                        )
                    )
                    samples.append(
                        self.sample(
                            "artifacts_vulnerabilities_scan_duration",
                            report.duration,
                            *labels,
                            report.report_id,
                        )
                    )
                    samples.append(
                        self.sample(
                            "artifacts_vulnerabilities_scans",
                            SCAN_STATUS_VALUES.get(report.scan_status.lower(), 0.0),
                            *labels,
                        )
                    )
        return samples
