import logging
from typing import List

from ..models import Quota, decoder
from .base import MetricGroup, Sample
from .harbor import HarborGroupCollector

logger = logging.getLogger(__name__)

decode_quotas = decoder(List[Quota])


class QuotasCollector(HarborGroupCollector):
    group = MetricGroup.QUOTAS
    latency_key = None

    async def fetch(self) -> List[Quota]:
        return await self.fetcher.fetch_items("/quotas", decode_quotas)

    def translate(self, data: List[Quota]) -> List[Sample]:
        samples: List[Sample] = []
        for quota in data:
            ref = quota.ref
            if ref is None or ref.name == "" or ref.id == 0:
                logger.debug("Skipping quota %d without a project reference", quota.id)
                continue
            samples.extend(
                [
                    self.sample("quotas_count_total", quota.hard.count, "hard", ref.name, ref.id),
                    self.sample("quotas_count_total", quota.used.count, "used", ref.name, ref.id),
                    self.sample("quotas_size_bytes", quota.hard.storage, "hard", ref.name, ref.id),
                    self.sample("quotas_size_bytes", quota.used.storage, "used", ref.name, ref.id),
                ]
            )
        return samples
