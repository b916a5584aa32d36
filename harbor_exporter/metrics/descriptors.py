from typing import Dict, Iterable, Tuple

from .base import MetricDescriptor, MetricType

NAMESPACE = "harbor"

COMPONENT_LABELS = ("component",)
TYPE_LABELS = ("type",)
QUOTA_LABELS = ("type", "repo_name", "repo_id")
REPO_LABELS = ("repo_name", "repo_id")
ARTIFACT_LABELS = (
    "project_name",
    "project_id",
    "repo_name",
    "repo_id",
    "artifact_name",
    "artifact_id",
    "tag",
)
ARTIFACT_VULNERABILITY_LABELS = ARTIFACT_LABELS + ("report_id", "status")
ARTIFACT_SCAN_REPORT_LABELS = ARTIFACT_LABELS + ("report_id",)
STORAGE_LABELS = ("storage",)
REPLICATION_LABELS = ("repl_pol_name",)
REPLICATION_TASK_LABELS = ("repl_pol_name", "result")
SYSTEM_INFO_LABELS = (
    "auth_mode",
    "project_creation_restriction",
    "harbor_version",
    "registry_storage_provider_name",
)

# key -> (documentation, type, label names)
_DEFINITIONS: Dict[str, Tuple[str, MetricType, Tuple[str, ...]]] = {
    "up": ("Was the last query of harbor successful.", MetricType.GAUGE, ()),
    "health": ("Harbor overall health status: Healthy = 1, Unhealthy = 0", MetricType.GAUGE, ()),
    "components_health": (
        "Harbor components health status: Healthy = 1, Unhealthy = 0",
        MetricType.GAUGE,
        COMPONENT_LABELS,
    ),
    "health_latency": ("Time in seconds to collect health metrics", MetricType.GAUGE, ()),
    "scans_total": ("metrics of the latest scan all process", MetricType.GAUGE, ()),
    "scans_completed": ("metrics of the latest scan all process", MetricType.GAUGE, ()),
    "scans_requester": ("metrics of the latest scan all process", MetricType.GAUGE, ()),
    "scans_latency": ("Time in seconds to collect scan metrics", MetricType.GAUGE, ()),
    "project_count_total": ("projects number relevant to the user", MetricType.GAUGE, TYPE_LABELS),
    "repo_count_total": ("repositories number relevant to the user", MetricType.GAUGE, TYPE_LABELS),
    "statistics_latency": ("Time in seconds to collect statistics metrics", MetricType.GAUGE, ()),
    "quotas_count_total": ("quotas", MetricType.GAUGE, QUOTA_LABELS),
    "quotas_size_bytes": ("quotas", MetricType.GAUGE, QUOTA_LABELS),
    "quotas_latency": ("Time in seconds to collect quota metrics", MetricType.GAUGE, ()),
    "system_volumes_bytes": (
        "Get system volume info (total/free size).",
        MetricType.GAUGE,
        STORAGE_LABELS,
    ),
    "system_volumes_latency": (
        "Time in seconds to collect system_volume metrics",
        MetricType.GAUGE,
        (),
    ),
    "repositories_pull_total": ("Pull count of each repository.", MetricType.GAUGE, REPO_LABELS),
    "repositories_star_total": ("Star count of each repository.", MetricType.GAUGE, REPO_LABELS),
    "repositories_tags_total": ("Tag count of each repository.", MetricType.GAUGE, REPO_LABELS),
    "repositories_latency": ("Time in seconds to collect repository metrics", MetricType.GAUGE, ()),
    "artifacts_size": ("Size in bytes for uploaded artifacts", MetricType.GAUGE, ARTIFACT_LABELS),
    "artifacts_vulnerabilities": (
        "Detected vulnerabilities for uploaded artifacts",
        MetricType.GAUGE,
        ARTIFACT_VULNERABILITY_LABELS,
    ),
    "artifacts_vulnerabilities_scan_start": (
        "Vulnerabilities scan start time",
        MetricType.GAUGE,
        ARTIFACT_SCAN_REPORT_LABELS,
    ),
    "artifacts_vulnerabilities_scan_duration": (
        "Vulnerabilities scan duration",
        MetricType.GAUGE,
        ARTIFACT_SCAN_REPORT_LABELS,
    ),
    "artifacts_vulnerabilities_scans": (
        "Vulnerabilities scan operation status. Success == 1, running == 2; others == 0",
        MetricType.COUNTER,
        ARTIFACT_LABELS,
    ),
    "artifacts_latency": ("Time in seconds to collect artifacts metrics", MetricType.GAUGE, ()),
    "replication_status": (
        "Get status of the last execution of this replication policy: Succeed = 1, any other status = 0.",
        MetricType.GAUGE,
        REPLICATION_LABELS,
    ),
    "replication_tasks": (
        "Get number of replication tasks, with various results, in the latest execution of this replication policy.",
        MetricType.GAUGE,
        REPLICATION_TASK_LABELS,
    ),
    "replication_latency": ("Time in seconds to collect replication metrics", MetricType.GAUGE, ()),
    "system_info": (
        "A metric with a constant '1' value labeled by auth_mode, project_creation_restriction, "
        "harbor_version and registry_storage_provider_name from /systeminfo endpoint.",
        MetricType.GAUGE,
        SYSTEM_INFO_LABELS,
    ),
    "system_with_notary": ("If notary is used", MetricType.GAUGE, ()),
    "system_self_registration": ("If self registration is enabled", MetricType.GAUGE, ()),
    "system_has_ca_root": ("If harbor has a root ca", MetricType.GAUGE, ()),
    "system_read_only": ("If harbor is in read-only mode", MetricType.GAUGE, ()),
    "system_with_chartmuseum": ("If harbor has chartmuseum enabled", MetricType.GAUGE, ()),
    "system_notification_enable": ("If notifications are enabled", MetricType.GAUGE, ()),
}


def build_fq_name(*parts: str) -> str:
    """Join the non-empty name parts with underscores."""
    return "_".join(part for part in parts if part)


def build_descriptors(instance: str = "") -> Dict[str, MetricDescriptor]:
    """Build the descriptor table for one Harbor instance.

    The table is handed to every collector at construction instead of living
    in module state, so two exporters for different instances never clash.
    """
    descriptors: Dict[str, MetricDescriptor] = {}
    for key, (documentation, metric_type, label_names) in _DEFINITIONS.items():
        descriptors[key] = MetricDescriptor(
            key=key,
            name=build_fq_name(NAMESPACE, instance, key),
            documentation=documentation,
            type=metric_type,
            label_names=label_names,
        )
    return descriptors


def descriptors_by_name(descriptors: Iterable[MetricDescriptor]) -> Dict[str, MetricDescriptor]:
    return {descriptor.name: descriptor for descriptor in descriptors}
