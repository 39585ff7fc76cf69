"""Python decoder for Luxpower/EG4 WiFi dongle telemetry streams.

Usage:
    Decode a single frame:
        from pylxpstream import decode_frame

        result = decode_frame(buffer)
        if result.handled:
            print(result.record.serial_number)

    Stream frames from a dongle into sinks:
        from pylxpstream import DongleStream, FrameMonitor, InfluxDBSink

        async with DongleStream("192.168.1.100") as stream:
            monitor = FrameMonitor(stream, [InfluxDBSink(influx_config)])
            await monitor.run()
"""

from __future__ import annotations

from .constants import DeviceFunction, FunctionCode, Section
from .exceptions import (
    FrameError,
    HeaderPrefixMismatch,
    LengthMismatch,
    LuxpowerStreamError,
    SinkError,
    TruncatedFrame,
    UnrecognizedFrame,
    UnsupportedDeviceFunction,
)
from .monitor import FrameMonitor, MonitorStats
from .protocol import DecodeResult, SectionData, TelemetryRecord, decode_frame
from .sinks import InfluxDBSink, MqttSink, RecordSink
from .transports import DongleStream, InfluxConfig, MonitorConfig, MqttConfig

__version__ = "0.1.0"
__all__ = [
    # Decoding
    "decode_frame",
    "DecodeResult",
    "TelemetryRecord",
    "SectionData",
    # Streaming
    "DongleStream",
    "FrameMonitor",
    "MonitorStats",
    # Sinks
    "RecordSink",
    "InfluxDBSink",
    "MqttSink",
    # Configuration
    "MonitorConfig",
    "InfluxConfig",
    "MqttConfig",
    # Enums
    "FunctionCode",
    "DeviceFunction",
    "Section",
    # Exceptions
    "LuxpowerStreamError",
    "FrameError",
    "HeaderPrefixMismatch",
    "LengthMismatch",
    "UnsupportedDeviceFunction",
    "UnrecognizedFrame",
    "TruncatedFrame",
    "SinkError",
]
