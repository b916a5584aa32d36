import logging
from typing import List, Optional, Tuple

from ..models import ReplicationExecution, ReplicationPolicy, decoder
from .base import MetricGroup, Sample
from .harbor import HarborGroupCollector

logger = logging.getLogger(__name__)

decode_policies = decoder(List[ReplicationPolicy])
decode_executions = decoder(List[ReplicationExecution])

TASK_RESULTS = ("failed", "succeed", "in_progress", "stopped")


def reported_execution(executions: List[ReplicationExecution]) -> Optional[ReplicationExecution]:
    """Pick the execution whose outcome is published for a policy.

    Executions come newest first. A running execution would hide the last
    known result, so the previous one is used while one is in progress.
    """
    if not executions:
        return None
    latest = executions[0]
    if latest.in_progress_status and len(executions) > 1:
        return executions[1]
    return latest


class ReplicationCollector(HarborGroupCollector):
    group = MetricGroup.REPLICATION
    latency_key = "replication_latency"

    async def fetch(self) -> List[Tuple[ReplicationPolicy, Optional[ReplicationExecution]]]:
        policies = await self.fetcher.fetch_items("/replication/policies", decode_policies)
        reported = []
        for policy in policies:
            if not policy.enabled:
                continue
            body = await self.client.request(
                f"/replication/executions?policy_id={policy.id}&page=1&page_size=2"
            )
            execution = reported_execution(decode_executions(body))
            if execution is None:
                logger.debug("Replication policy %s has no executions yet", policy.name)
            reported.append((policy, execution))
        return reported

    def translate(
        self, data: List[Tuple[ReplicationPolicy, Optional[ReplicationExecution]]]
    ) -> List[Sample]:
        samples: List[Sample] = []
        for policy, execution in data:
            if execution is None:
                continue
            samples.append(
                self.sample("replication_status", execution.status == "Succeed", policy.name)
            )
            for result in TASK_RESULTS:
                samples.append(
                    self.sample("replication_tasks", getattr(execution, result), policy.name, result)
                )
        return samples
