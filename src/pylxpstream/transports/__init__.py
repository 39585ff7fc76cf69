"""Transport layer for pylxpstream.

Usage:
    from pylxpstream.transports import DongleStream

    async with DongleStream(host="192.168.1.100") as stream:
        async for frame in stream.frames():
            ...
"""

from __future__ import annotations

from .config import InfluxConfig, MonitorConfig, MqttConfig
from .dongle import DEFAULT_READ_TIMEOUT, DongleStream
from .exceptions import (
    TransportConnectionError,
    TransportError,
    TransportReadError,
    TransportTimeoutError,
)

__all__ = [
    # Stream
    "DongleStream",
    "DEFAULT_READ_TIMEOUT",
    # Configuration
    "MonitorConfig",
    "InfluxConfig",
    "MqttConfig",
    # Exceptions
    "TransportError",
    "TransportConnectionError",
    "TransportTimeoutError",
    "TransportReadError",
]
