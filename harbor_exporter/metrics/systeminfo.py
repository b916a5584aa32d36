from typing import List

from ..models import SystemInfo, decoder
from .base import MetricGroup, Sample
from .harbor import HarborGroupCollector

decode_system_info = decoder(SystemInfo)


class SystemInfoCollector(HarborGroupCollector):
    """Publishes the string settings of /systeminfo as labels and each flag as 0/1."""

    group = MetricGroup.SYSTEM_INFO

    async def fetch(self) -> SystemInfo:
        return decode_system_info(await self.client.request("/systeminfo"))

    def translate(self, data: SystemInfo) -> List[Sample]:
        return [
            self.sample(
                "system_info",
                1,
                data.auth_mode,
                data.project_creation_restriction,
                data.harbor_version,
                data.registry_storage_provider_name,
            ),
            self.sample("system_with_notary", data.with_notary),
            self.sample("system_self_registration", data.self_registration),
            self.sample("system_has_ca_root", data.has_ca_root),
            self.sample("system_read_only", data.read_only),
            self.sample("system_with_chartmuseum", data.with_chartmuseum),
            self.sample("system_notification_enable", data.notification_enable),
        ]
