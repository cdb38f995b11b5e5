"""Query relay between the dashboard and the InfluxDB query API."""

from .client import (
    InfluxRelay,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamResponse,
    UpstreamTransportError,
)
from .queries import devices_query, field_keys_query, flux_string, measurements_query, tag_keys_query

__all__ = [
    "InfluxRelay",
    "UpstreamError",
    "UpstreamHTTPError",
    "UpstreamResponse",
    "UpstreamTransportError",
    "devices_query",
    "field_keys_query",
    "flux_string",
    "measurements_query",
    "tag_keys_query",
]
