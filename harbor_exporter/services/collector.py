from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Mapping, Optional

from ..metrics.base import MetricDescriptor, MetricGroup, Sample, SampleStream, ScrapeResult
from ..metrics.registry import MetricRegistry

logger = logging.getLogger(__name__)


class CollectionOrchestrator:
    """Runs the enabled group collectors for one scrape and aggregates liveness."""

    def __init__(
        self,
        registry: MetricRegistry,
        descriptors: Mapping[str, MetricDescriptor],
        enabled_groups: Optional[Iterable[MetricGroup]] = None,
    ) -> None:
        self.registry = registry
        self.descriptors = descriptors
        self.enabled_groups = (
            frozenset(enabled_groups)
            if enabled_groups is not None
            else frozenset(collector.group for collector in registry.all())
        )

    async def scrape(self, enabled_groups: Optional[Iterable[MetricGroup]] = None) -> ScrapeResult:
        groups = self.enabled_groups if enabled_groups is None else frozenset(enabled_groups)
        collectors = self.registry.select(groups)
        stream = SampleStream()

        # Every collector only returns after its relay drained into the stream.
        results = await asyncio.gather(*(collector.collect(stream) for collector in collectors))

        up = all(result.ok for result in results)
        await stream.send(self._up_sample(up))
        stream.close()

        failed = [result.group.value for result in results if not result.ok]
        if failed:
            logger.warning("Scrape finished with failed groups: %s", ", ".join(failed))
        else:
            logger.debug("Scrape finished, %d groups ok", len(results))

        return ScrapeResult(
            samples=stream.samples,
            up=up,
            results={result.group: result.ok for result in results},
        )

    def _up_sample(self, up: bool) -> Sample:
        return Sample(self.descriptors["up"].name, 1.0 if up else 0.0)

