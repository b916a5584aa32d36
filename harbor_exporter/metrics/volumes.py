from typing import List

from ..models import SystemVolumes, decoder
from .base import MetricGroup, Sample
from .harbor import HarborGroupCollector

decode_volumes = decoder(SystemVolumes)


class SystemVolumesCollector(HarborGroupCollector):
    group = MetricGroup.SYSTEM_VOLUMES
    latency_key = "system_volumes_latency"

    async def fetch(self) -> SystemVolumes:
        return decode_volumes(await self.client.request("/systeminfo/volumes"))

    def translate(self, data: SystemVolumes) -> List[Sample]:
        return [
            self.sample("system_volumes_bytes", data.storage.total, "total"),
            self.sample("system_volumes_bytes", data.storage.free, "free"),
        ]
