"""Async client that forwards dashboard queries to the InfluxDB HTTP API."""

from dataclasses import dataclass
from typing import Optional

import httpx

from config.config import (
    AUTH_SCHEME,
    BUCKETS_ENDPOINT,
    CSV_ACCEPT,
    FLUX_CONTENT_TYPE,
    JSON_ACCEPT,
    QUERY_ENDPOINT,
)
from config.models import InfluxConfig
from relay.queries import devices_query, field_keys_query, measurements_query, tag_keys_query
from utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class UpstreamResponse:
    """Successful upstream reply, relayed to the caller as-is."""
    status_code: int
    body: bytes
    content_type: Optional[str] = None


class UpstreamError(Exception):
    """Base class for failures talking to the upstream database."""


class UpstreamHTTPError(UpstreamError):
    """The database answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Upstream returned HTTP {status_code}")
        self.status_code = status_code
        self.body = body


class UpstreamTransportError(UpstreamError):
    """The database could not be reached at all."""


class InfluxRelay:
    """Forwards Flux queries and metadata lookups to InfluxDB.

    One ``httpx.AsyncClient`` is shared for the lifetime of the process and
    released through :meth:`aclose`. No retries are attempted; timeouts are
    httpx defaults.
    """

    def __init__(
        self,
        config: InfluxConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the relay.

        Args:
            config: Upstream connection details
            transport: Optional transport override (tests plug in
                ``httpx.MockTransport`` here)
        """
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers={"Authorization": f"{AUTH_SCHEME} {config.token}"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        endpoint: str,
        accept: str,
        content: Optional[str] = None,
    ) -> UpstreamResponse:
        headers = {"Accept": accept}
        if content is not None:
            headers["Content-Type"] = FLUX_CONTENT_TYPE

        logger.debug(f"{method} {endpoint} -> upstream")
        try:
            response = await self._client.request(
                method,
                endpoint,
                params={"org": self.config.organization},
                headers=headers,
                content=content,
            )
        except httpx.HTTPError as e:
            raise UpstreamTransportError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            raise UpstreamHTTPError(response.status_code, response.text)

        return UpstreamResponse(
            status_code=response.status_code,
            body=response.content,
            content_type=response.headers.get("content-type"),
        )

    async def query(self, flux: str) -> UpstreamResponse:
        """Run Flux text verbatim and return the annotated CSV result."""
        return await self._send("POST", QUERY_ENDPOINT, CSV_ACCEPT, content=flux)

    async def list_buckets(self) -> UpstreamResponse:
        return await self._send("GET", BUCKETS_ENDPOINT, JSON_ACCEPT)

    async def list_devices(self) -> UpstreamResponse:
        return await self.query(devices_query(self.config.bucket))

    async def list_measurements(self, device: Optional[str] = None) -> UpstreamResponse:
        return await self.query(measurements_query(self.config.bucket, device))

    async def list_fields(self, measurement: str) -> UpstreamResponse:
        return await self.query(field_keys_query(self.config.bucket, measurement))

    async def list_tags(self, measurement: str) -> UpstreamResponse:
        return await self.query(tag_keys_query(self.config.bucket, measurement))
