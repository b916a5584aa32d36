import json
from datetime import timedelta
from typing import Annotated, Any, FrozenSet, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

from .metrics.base import MetricGroup


class Settings(BaseSettings):
    instance: str = Field("", description="Logical name of the Harbor instance, used in metric names.")
    uri: str = Field(
        "http://localhost:8500",
        description="HTTP API address of the Harbor server (prefix with https:// for TLS).",
    )
    username: str = "admin"
    password: str = "password"
    timeout: float = Field(10.0, gt=0, description="Timeout in seconds for each Harbor request.")
    insecure: bool = Field(False, description="Disable TLS host verification.")
    api_path: Optional[str] = Field(
        None, description="API root such as /api/v2.0. Probed at startup when unset."
    )
    page_size: int = Field(100, gt=0, description="Page size on requests to the Harbor API.")
    cache_enabled: bool = Field(False, description="Replay collected samples until they expire.")
    cache_duration: timedelta = Field(
        timedelta(seconds=20), description="How long collected samples are replayed."
    )
    skip_metrics: Annotated[List[MetricGroup], NoDecode] = Field(
        default_factory=list, description="Metric groups that are never collected."
    )
    worker_pool_size: int = Field(
        4, gt=0, description="Concurrent per-project fetches within one metric group."
    )
    listen_host: str = "0.0.0.0"
    listen_port: int = 9107
    metrics_path: str = Field("/metrics", description="Path under which metrics are exposed.")
    log_level: str = "INFO"

    @field_validator("uri")
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("skip_metrics", mode="before")
    def split_group_names(cls, value: Any) -> Any:
        # Accepts "artifacts,scans" as well as a JSON list.
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [name.strip() for name in value.split(",") if name.strip()]
        return value

    @field_validator("log_level")
    def normalise_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def enabled_groups(self) -> FrozenSet[MetricGroup]:
        skipped = set(self.skip_metrics)
        return frozenset(group for group in MetricGroup if group not in skipped)

    class Config:
        env_prefix = "HARBOR_"


settings = Settings()
