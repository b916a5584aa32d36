from collections import OrderedDict
from typing import Iterable, List

from .base import GroupCollector, MetricGroup


class MetricRegistry:
    """Registry of the group collectors, at most one per metric group."""

    def __init__(self) -> None:
        self._collectors: "OrderedDict[MetricGroup, GroupCollector]" = OrderedDict()

    def register(self, collector: GroupCollector) -> None:
        group = collector.group
        if group in self._collectors:
            raise ValueError(f"Metric group '{group.value}' is already registered.")
        self._collectors[group] = collector

    def all(self) -> Iterable[GroupCollector]:
        return self._collectors.values()

    def get(self, group: MetricGroup) -> GroupCollector:
        if group not in self._collectors:
            raise KeyError(f"Metric group '{group.value}' is not registered.")
        return self._collectors[group]

    def select(self, groups: Iterable[MetricGroup]) -> List[GroupCollector]:
        """Registered collectors for ``groups``, in registration order."""
        wanted = set(groups)
        return [collector for group, collector in self._collectors.items() if group in wanted]
