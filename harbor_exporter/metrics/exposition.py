from collections import OrderedDict
from typing import Iterable, Iterator, List, Mapping

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from .base import MetricDescriptor, MetricType, Sample
from .descriptors import descriptors_by_name


class SnapshotCollector:
    """prometheus_client collector publishing the samples of one scrape."""

    def __init__(self, samples: Iterable[Sample], descriptors: Mapping[str, MetricDescriptor]) -> None:
        self.samples = list(samples)
        self.by_name = descriptors_by_name(descriptors.values())

    def collect(self) -> Iterator[Metric]:
        families: "OrderedDict[str, Metric]" = OrderedDict()
        for sample in self.samples:
            family = families.get(sample.name)
            if family is None:
                family = self._family(self.by_name[sample.name])
                families[sample.name] = family
            family.add_metric(list(sample.labels), sample.value)
        return iter(families.values())

    @staticmethod
    def _family(descriptor: MetricDescriptor) -> Metric:
        labels: List[str] = list(descriptor.label_names)
        if descriptor.type is MetricType.COUNTER:
            return CounterMetricFamily(descriptor.name, descriptor.documentation, labels=labels)
        return GaugeMetricFamily(descriptor.name, descriptor.documentation, labels=labels)


def render(samples: Iterable[Sample], descriptors: Mapping[str, MetricDescriptor]) -> bytes:
    """Render samples in the Prometheus text exposition format."""
    registry = CollectorRegistry(auto_describe=False)
    registry.register(SnapshotCollector(samples, descriptors))
    return generate_latest(registry)
