from typing import List

from ..models import HealthStatus, decoder
from .base import MetricGroup, Sample
from .harbor import HarborGroupCollector

decode_health = decoder(HealthStatus)


def status_value(status: str) -> float:
    return 1.0 if status == "healthy" else 0.0


class HealthCollector(HarborGroupCollector):
    group = MetricGroup.HEALTH
    latency_key = "health_latency"

    async def fetch(self) -> HealthStatus:
        return decode_health(await self.client.request("/health"))

    def translate(self, data: HealthStatus) -> List[Sample]:
        samples = [self.sample("health", status_value(data.status))]
        for component in data.components:
            samples.append(
                self.sample("components_health", status_value(component.status), component.name)
            )
        return samples
