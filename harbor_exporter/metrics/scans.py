from typing import Any, List

from ..models import ScanAllMetrics, decoder
from .base import MetricGroup, Sample
from .harbor import HarborGroupCollector

decode_scans = decoder(ScanAllMetrics)


def _requester_value(requester: Any) -> float:
    # Harbor reports the requester as a string; anything non-numeric counts as 0.
    try:
        return float(requester)
    except (TypeError, ValueError):
        return 0.0


class ScansCollector(HarborGroupCollector):
    group = MetricGroup.SCANS
    latency_key = "scans_latency"

    async def fetch(self) -> ScanAllMetrics:
        return decode_scans(await self.client.request("/scans/all/metrics"))

    def translate(self, data: ScanAllMetrics) -> List[Sample]:
        return [
            self.sample("scans_requester", _requester_value(data.requester)),
            self.sample("scans_total", data.total),
            self.sample("scans_completed", data.completed),
        ]
