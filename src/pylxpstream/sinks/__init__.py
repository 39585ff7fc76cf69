"""Downstream sinks for decoded telemetry records.

- InfluxDBSink: one time-series point per record (influxdb-client)
- MqttSink: one topic per field (paho-mqtt)

Both emit only the sections the record's frame loaded.
"""

from __future__ import annotations

from .base import RecordSink, record_fields
from .influx import InfluxDBSink, build_point
from .mqtt import MqttSink, build_messages

__all__ = [
    "InfluxDBSink",
    "MqttSink",
    "RecordSink",
    "build_point",
    "build_messages",
    "record_fields",
]
