"""InfluxDB v2 sink.

Writes one point per record through influxdb-client's asyncio API. The
point is tagged by serial number and carries one field per scaled attribute
of every loaded section.
"""

from __future__ import annotations

import logging
import time

import aiohttp
from influxdb_client import Point, WritePrecision
from influxdb_client.client.influxdb_client_async import InfluxDBClientAsync
from influxdb_client.rest import ApiException

from pylxpstream.exceptions import SinkError
from pylxpstream.protocol.record import TelemetryRecord
from pylxpstream.transports.config import InfluxConfig

from .base import record_fields

_LOGGER = logging.getLogger(__name__)

SERIAL_TAG = "serial_number"


def build_point(
    record: TelemetryRecord,
    measurement: str,
    timestamp: int | None = None,
) -> Point | None:
    """Render a record as one InfluxDB point.

    An empty serial number is left untagged; line protocol has no empty
    tag values.

    Args:
        record: Decoded record
        measurement: Measurement name
        timestamp: Point time in seconds since the epoch (None = server time)

    Returns:
        Point, or None when the record has no loaded section
    """
    fields = record_fields(record)
    if not fields:
        return None

    point = Point(measurement)
    if record.serial_number:
        point.tag(SERIAL_TAG, record.serial_number)
    for key, value in fields.items():
        point.field(key, value)
    if timestamp is not None:
        point.time(timestamp, WritePrecision.S)
    return point


class InfluxDBSink:
    """Time-series sink writing to InfluxDB v2.

    Example:
        sink = InfluxDBSink(InfluxConfig(url="http://influx:8086", org="home",
                                         bucket="solar", token="..."))
        await sink.write(record)
        await sink.close()
    """

    name = "influxdb"

    def __init__(
        self,
        config: InfluxConfig,
        *,
        client: InfluxDBClientAsync | None = None,
        timeout: int = 10,
    ) -> None:
        """Initialize the sink.

        Args:
            config: Write target
            client: Optional InfluxDBClientAsync for client injection
            timeout: Request timeout in seconds
        """
        self._config = config
        self._timeout_ms = timeout * 1000
        self._client: InfluxDBClientAsync | None = client
        self._owns_client: bool = client is None

    def _get_client(self) -> InfluxDBClientAsync:
        # InfluxDBClientAsync opens its aiohttp session on construction, so
        # it has to be created inside the running loop.
        if self._client is None:
            self._client = InfluxDBClientAsync(
                url=self._config.url.rstrip("/"),
                token=self._config.token or None,
                org=self._config.org,
                timeout=self._timeout_ms,
            )
            self._owns_client = True
        return self._client

    async def write(self, record: TelemetryRecord) -> None:
        """Write one record as a point.

        Raises:
            SinkError: If the server rejects the write or is unreachable
        """
        point = build_point(record, self._config.measurement, int(time.time()))
        if point is None:
            return

        write_api = self._get_client().write_api()
        try:
            await write_api.write(
                bucket=self._config.bucket,
                org=self._config.org,
                record=point,
                write_precision=WritePrecision.S,
            )
        except ApiException as err:
            raise SinkError(self.name, f"HTTP {err.status}: {err.reason}") from err
        except (aiohttp.ClientError, TimeoutError) as err:
            raise SinkError(self.name, f"Request failed: {err}") from err

        _LOGGER.debug(
            "Wrote %s point for %s",
            self._config.measurement,
            record.serial_number,
        )

    async def close(self) -> None:
        """Close the client if we own it."""
        if self._client is not None and self._owns_client:
            await self._client.close()
            self._client = None


__all__ = [
    "InfluxDBSink",
    "build_point",
]
