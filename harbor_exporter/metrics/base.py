from __future__ import annotations

import enum
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Set, Tuple

from ..exceptions import DuplicateSampleError, GroupFailure, HarborExporterError, StreamClosedError
from .cache import ReplayCache
from .relay import SampleRelay

logger = logging.getLogger(__name__)


class MetricGroup(str, enum.Enum):
    """Independently fetched and cached categories of Harbor metrics."""

    HEALTH = "health"
    SCANS = "scans"
    STATISTICS = "statistics"
    QUOTAS = "quotas"
    REPOSITORIES = "repositories"
    REPLICATION = "replication"
    SYSTEM_VOLUMES = "systemvolumes"
    SYSTEM_INFO = "systeminfo"
    ARTIFACTS = "artifacts"


class MetricType(str, enum.Enum):
    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    """Declarative definition of one exported metric family."""

    key: str
    name: str
    documentation: str
    type: MetricType = MetricType.GAUGE
    label_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Sample:
    """One metric observation. Identity is the name plus the label values."""

    name: str
    value: float
    labels: Tuple[str, ...] = ()

    @property
    def identity(self) -> Tuple[str, Tuple[str, ...]]:
        return (self.name, self.labels)


@dataclass(frozen=True)
class GroupResult:
    group: MetricGroup
    ok: bool


class SampleSink(Protocol):
    async def send(self, sample: Sample) -> None: ...


class SampleStream:
    """Shared output stream for one scrape.

    Collectors for different groups write into the same stream concurrently.
    A sample identity may only appear once per scrape, and nothing may be
    written once the stream has been closed.
    """

    def __init__(self) -> None:
        self._samples: List[Sample] = []
        self._seen: Set[Tuple[str, Tuple[str, ...]]] = set()
        self._closed = False

    async def send(self, sample: Sample) -> None:
        if self._closed:
            raise StreamClosedError(f"sample {sample.name} written after the stream was closed")
        if sample.identity in self._seen:
            raise DuplicateSampleError(f"duplicate sample {sample.name}{list(sample.labels)}")
        self._seen.add(sample.identity)
        self._samples.append(sample)

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def samples(self) -> List[Sample]:
        return list(self._samples)


class GroupCollector(ABC):
    """Base class for the per-group Harbor collectors.

    Subclasses fetch everything they need from Harbor in ``fetch`` and turn
    the result into samples in ``translate``. All upstream I/O completes
    before the first sample is written, so a failing group publishes nothing.
    """

    group: MetricGroup
    latency_key: Optional[str] = None

    def __init__(
        self,
        descriptors: Mapping[str, MetricDescriptor],
        cache: Optional[ReplayCache] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.descriptors = descriptors
        self.cache = cache or ReplayCache(enabled=False)
        self.clock = clock

    @abstractmethod
    async def fetch(self) -> Any:
        """Load the upstream data this group needs."""

    @abstractmethod
    def translate(self, data: Any) -> List[Sample]:
        """Turn fetched data into samples. Must be deterministic."""

    def sample(self, key: str, value: float, *labels: Any) -> Sample:
        descriptor = self.descriptors[key]
        if len(labels) != len(descriptor.label_names):
            raise ValueError(
                f"{descriptor.name} expects labels {descriptor.label_names}, got {labels!r}"
            )
        return Sample(descriptor.name, float(value), tuple(str(label) for label in labels))

    def stage(self, data: Any, start: float) -> List[Sample]:
        """Translate ``data`` and append the latency sample.

        Raises DuplicateSampleError before anything is written, so a group
        whose own output repeats an identity publishes nothing.
        """
        samples = list(self.translate(data))
        if self.latency_key is not None:
            samples.append(self.sample(self.latency_key, self.clock() - start))
        seen: Set[Tuple[str, Tuple[str, ...]]] = set()
        for sample in samples:
            if sample.identity in seen:
                raise DuplicateSampleError(f"duplicate sample {sample.name}{list(sample.labels)}")
            seen.add(sample.identity)
        return samples

    def _failed(self, exc: HarborExporterError) -> GroupResult:
        logger.error("%s", GroupFailure(self.group.value, exc))
        return GroupResult(self.group, False)

    async def collect(self, out: SampleSink) -> GroupResult:
        start = self.clock()
        try:
            if await self.cache.try_replay(out):
                logger.debug("Replayed cached samples for group %s", self.group.value)
                return GroupResult(self.group, True)
        except HarborExporterError as exc:
            return self._failed(exc)

        sink, done = self.cache.begin_refresh(out)
        ok = False
        try:
            async def produce(handoff: SampleSink) -> None:
                data = await self.fetch()
                for sample in self.stage(data, start):
                    await handoff.send(sample)

            await SampleRelay().relay(produce, sink)
            ok = True
        except HarborExporterError as exc:
            return self._failed(exc)
        finally:
            done.complete(ok)
        return GroupResult(self.group, ok)


@dataclass
class ScrapeResult:
    samples: List[Sample] = field(default_factory=list)
    up: bool = True
    results: Dict[MetricGroup, bool] = field(default_factory=dict)
