from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError

from .exceptions import DecodeError


class HealthComponent(BaseModel):
    name: str
    status: str = ""


class HealthStatus(BaseModel):
    status: str = ""
    components: List[HealthComponent] = Field(default_factory=list)


class ScanAllMetrics(BaseModel):
    total: float = 0
    completed: float = 0
    requester: Any = None
    ongoing: bool = False


class Statistics(BaseModel):
    total_project_count: float = 0
    public_project_count: float = 0
    private_project_count: float = 0
    total_repo_count: float = 0
    public_repo_count: float = 0
    private_repo_count: float = 0


class QuotaRef(BaseModel):
    id: int = 0
    name: str = ""
    owner_name: str = ""


class QuotaResources(BaseModel):
    count: float = 0
    storage: float = 0


class Quota(BaseModel):
    id: int = 0
    ref: Optional[QuotaRef] = None
    hard: QuotaResources = Field(default_factory=QuotaResources)
    used: QuotaResources = Field(default_factory=QuotaResources)


class Project(BaseModel):
    project_id: int
    name: str


class Repository(BaseModel):
    id: int
    name: str
    project_id: int = 0
    pull_count: float = 0
    star_count: float = 0
    # v1 reports tags, v2 reports artifacts
    tags_count: float = Field(0, validation_alias=AliasChoices("tags_count", "artifact_count"))


class ReplicationPolicy(BaseModel):
    id: int
    name: str
    enabled: bool = False


class ReplicationExecution(BaseModel):
    id: int = 0
    status: str = ""
    failed: float = 0
    succeed: float = 0
    in_progress: float = 0
    stopped: float = 0

    @property
    def in_progress_status(self) -> bool:
        return self.status.replace("_", "").lower() == "inprogress"


class Storage(BaseModel):
    total: float = 0
    free: float = 0


class SystemVolumes(BaseModel):
    storage: Storage


class SystemInfo(BaseModel):
    with_notary: bool = False
    auth_mode: str = ""
    project_creation_restriction: str = ""
    self_registration: bool = False
    has_ca_root: bool = False
    harbor_version: str = ""
    registry_storage_provider_name: str = ""
    read_only: bool = False
    with_chartmuseum: bool = False
    notification_enable: bool = False


class SeveritySummary(BaseModel):
    critical: int = Field(0, alias="Critical")
    high: int = Field(0, alias="High")
    medium: int = Field(0, alias="Medium")
    low: int = Field(0, alias="Low")


class VulnerabilitySummary(BaseModel):
    fixable: int = 0
    total: int = 0
    summary: SeveritySummary = Field(default_factory=SeveritySummary)


class ScanOverview(BaseModel):
    report_id: str = ""
    scan_status: str = ""
    severity: str = ""
    duration: float = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    summary: VulnerabilitySummary = Field(default_factory=VulnerabilitySummary)


class Tag(BaseModel):
    id: int = 0
    name: str


class Artifact(BaseModel):
    id: int
    digest: str = ""
    size: float = 0
    project_id: int = 0
    repository_id: int = 0
    type: str = ""
    tags: Optional[List[Tag]] = None
    scan_overview: Optional[Dict[str, ScanOverview]] = None

    @property
    def first_tag(self) -> str:
        return self.tags[0].name if self.tags else ""

    @property
    def report(self) -> Optional[ScanOverview]:
        """The scan report with the smallest MIME-type key, if any."""
        if not self.scan_overview:
            return None
        return self.scan_overview[min(self.scan_overview)]


def decoder(model_type: Any) -> Callable[[bytes], Any]:
    """Return a callable validating a JSON body into ``model_type``."""
    adapter: TypeAdapter[Any] = TypeAdapter(model_type)

    def decode(body: bytes) -> Any:
        try:
            return adapter.validate_json(body)
        except ValidationError as exc:
            raise DecodeError(f"unexpected {model_type} payload: {exc}") from exc

    return decode
