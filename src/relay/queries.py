"""Flux query templates used by the dashboard.

Every caller-supplied value goes through :func:`flux_string` before it is
placed in a template, so device and measurement names cannot break out of
their string literal.
"""

from typing import Optional

from config.config import DEVICE_LOOKBACK, DEVICE_TAG

SCHEMA_IMPORT = 'import "influxdata/influxdb/schema"'


def flux_string(value: str) -> str:
    """Render ``value`` as a double-quoted Flux string literal.

    Escapes backslashes, double quotes and the ``${`` interpolation opener.
    """
    escaped = (
        str(value)
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("${", "\\${")
    )
    return f'"{escaped}"'


def devices_query(bucket: str) -> str:
    """Distinct values of the device tag across the bucket."""
    return (
        f"\n{SCHEMA_IMPORT}\n"
        f"schema.tagValues(bucket: {flux_string(bucket)}, tag: {flux_string(DEVICE_TAG)})\n"
    )


def measurements_query(bucket: str, device: Optional[str] = None) -> str:
    """Measurement names, optionally limited to those a device reported lately.

    Without a device this is a plain schema lookup. With one, the last
    ``DEVICE_LOOKBACK`` of data is scanned and filtered on the device tag,
    which only finds measurements with recent points.
    """
    if device:
        return (
            f"\nfrom(bucket: {flux_string(bucket)})\n"
            f"  |> range(start: {DEVICE_LOOKBACK})\n"
            f"  |> filter(fn: (r) => r.{DEVICE_TAG} == {flux_string(device)})\n"
            '  |> keep(columns: ["_measurement"])\n'
            '  |> distinct(column: "_measurement")\n'
        )
    return (
        f"\n{SCHEMA_IMPORT}\n"
        f"schema.measurements(bucket: {flux_string(bucket)})\n"
    )


def field_keys_query(bucket: str, measurement: str) -> str:
    return (
        f"\n{SCHEMA_IMPORT}\n"
        f"schema.measurementFieldKeys(bucket: {flux_string(bucket)}, "
        f"measurement: {flux_string(measurement)})\n"
    )


def tag_keys_query(bucket: str, measurement: str) -> str:
    return (
        f"\n{SCHEMA_IMPORT}\n"
        f"schema.measurementTagKeys(bucket: {flux_string(bucket)}, "
        f"measurement: {flux_string(measurement)})\n"
    )
