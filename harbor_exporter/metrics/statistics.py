from typing import List

from ..models import Statistics, decoder
from .base import MetricGroup, Sample
from .harbor import HarborGroupCollector

decode_statistics = decoder(Statistics)


class StatisticsCollector(HarborGroupCollector):
    group = MetricGroup.STATISTICS
    latency_key = "statistics_latency"

    async def fetch(self) -> Statistics:
        return decode_statistics(await self.client.request("/statistics"))

    def translate(self, data: Statistics) -> List[Sample]:
        return [
            self.sample("project_count_total", data.total_project_count, "total_project"),
            self.sample("project_count_total", data.public_project_count, "public_project"),
            self.sample("project_count_total", data.private_project_count, "private_project"),
            self.sample("repo_count_total", data.public_repo_count, "public_repo"),
            self.sample("repo_count_total", data.total_repo_count, "total_repo"),
            self.sample("repo_count_total", data.private_repo_count, "private_repo"),
        ]
