import time
from datetime import timedelta
from typing import Callable, Dict, Iterable, Mapping, Type

from ..services.client import HarborClient
from ..services.pager import PagedFetcher
from ..services.workpool import WorkPool
from .artifacts import ArtifactsCollector
from .base import MetricDescriptor, MetricGroup
from .cache import ReplayCache
from .harbor import HarborGroupCollector
from .health import HealthCollector
from .quotas import QuotasCollector
from .registry import MetricRegistry
from .replication import ReplicationCollector
from .repositories import RepositoriesCollector
from .scans import ScansCollector
from .statistics import StatisticsCollector
from .systeminfo import SystemInfoCollector
from .volumes import SystemVolumesCollector

COLLECTOR_CLASSES: Dict[MetricGroup, Type[HarborGroupCollector]] = {
    MetricGroup.HEALTH: HealthCollector,
    MetricGroup.SCANS: ScansCollector,
    MetricGroup.STATISTICS: StatisticsCollector,
    MetricGroup.QUOTAS: QuotasCollector,
    MetricGroup.REPOSITORIES: RepositoriesCollector,
    MetricGroup.REPLICATION: ReplicationCollector,
    MetricGroup.SYSTEM_VOLUMES: SystemVolumesCollector,
    MetricGroup.SYSTEM_INFO: SystemInfoCollector,
    MetricGroup.ARTIFACTS: ArtifactsCollector,
}


def build_registry(
    client: HarborClient,
    descriptors: Mapping[str, MetricDescriptor],
    page_size: int,
    cache_enabled: bool,
    cache_duration: timedelta,
    worker_pool_size: int,
    groups: Iterable[MetricGroup] = tuple(MetricGroup),
    clock: Callable[[], float] = time.monotonic,
) -> MetricRegistry:
    """Create one collector per group, each with its own replay cache."""
    fetcher = PagedFetcher(client, page_size)
    pool = WorkPool(worker_pool_size)
    registry = MetricRegistry()
    for group in groups:
        collector_class = COLLECTOR_CLASSES[group]
        registry.register(
            collector_class(
                client,
                fetcher,
                descriptors,
                cache=ReplayCache(enabled=cache_enabled, ttl=cache_duration, clock=clock),
                pool=pool,
                clock=clock,
            )
        )
    return registry
