from __future__ import annotations

import logging
from typing import Optional, Tuple

import httpx

from ..exceptions import ConfigurationError, FetchError

logger = logging.getLogger(__name__)

V1_API_PATH = "/api"
V2_API_PATH = "/api/v2.0"


class HarborClient:
    """Thin async wrapper around the Harbor REST API."""

    def __init__(
        self,
        uri: str,
        username: str,
        password: str,
        timeout: float = 10.0,
        insecure: bool = False,
        api_path: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.uri = uri.rstrip("/")
        self.api_path = api_path
        self._client = httpx.AsyncClient(
            auth=httpx.BasicAuth(username, password),
            timeout=timeout,
            verify=not insecure,
            transport=transport,
        )

    @property
    def is_v2(self) -> bool:
        return self.api_path == V2_API_PATH

    async def aclose(self) -> None:
        await self._client.aclose()

    async def detect_api_path(self) -> str:
        """Probe the systeminfo endpoints and remember which API version answers."""
        if self.api_path:
            return self.api_path

        detected: Optional[str] = None
        for candidate in (V1_API_PATH, V2_API_PATH):
            url = f"{self.uri}{candidate}/systeminfo"
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as exc:
                logger.info("Probe of %s failed: %s", url, exc)
                continue
            logger.info("Probe of %s answered %d", url, response.status_code)
            if response.status_code == 200:
                detected = candidate

        if detected is None:
            raise ConfigurationError(f"unable to determine harbor API version at {self.uri}")
        self.api_path = detected
        return detected

    async def fetch(self, path: str) -> Tuple[bytes, httpx.Headers]:
        """GET ``path`` below the API root and return the body and headers."""
        url = f"{self.uri}{self.api_path or ''}{path}"
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(f"request for {path} failed: {exc}", path) from exc

        if response.status_code != 200:
            raise FetchError(
                f"request for {path} answered HTTP {response.status_code}",
                path,
                status_code=response.status_code,
            )
        return response.content, response.headers

    async def request(self, path: str) -> bytes:
        body, _ = await self.fetch(path)
        return body
