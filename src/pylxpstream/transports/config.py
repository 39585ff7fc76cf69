"""Configuration for the dongle stream, the frame monitor and its sinks.

Configuration is passed explicitly to the collaborators that own
connections; the decoding core itself needs none.

Example:
    # Build from environment variables (and a .env file if present)
    config = MonitorConfig.from_env()
    config.validate()

    # Serialize to dict for storage
    data = config.to_dict()

    # Restore from dict
    restored = MonitorConfig.from_dict(data)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from pylxpstream.constants import DEFAULT_PORT, DEFAULT_TIMEOUT

from .dongle import DEFAULT_READ_TIMEOUT

DEFAULT_MQTT_PORT = 1883
DEFAULT_TOPIC_PREFIX = "lxp"
DEFAULT_MEASUREMENT = "inverter"


def _validate_port(port: int, name: str) -> None:
    if not 0 < port < 65536:
        raise ValueError(f"{name} must be between 1 and 65535")


@dataclass
class InfluxConfig:
    """InfluxDB v2 write target.

    Attributes:
        url: Base URL of the InfluxDB server (e.g. http://influx.lan:8086)
        org: Organization name
        bucket: Destination bucket
        token: API token with write access
        measurement: Measurement name for every point
    """

    url: str
    org: str
    bucket: str
    token: str = ""
    measurement: str = DEFAULT_MEASUREMENT

    def validate(self) -> None:
        """Raise ValueError if the target is incomplete."""
        if not self.url.startswith(("http://", "https://")):
            raise ValueError("influx url must start with http:// or https://")
        if not self.org:
            raise ValueError("influx org is required")
        if not self.bucket:
            raise ValueError("influx bucket is required")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "url": self.url,
            "org": self.org,
            "bucket": self.bucket,
            "token": self.token,
            "measurement": self.measurement,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InfluxConfig:
        """Create from a dictionary produced by to_dict()."""
        return cls(
            url=data.get("url", ""),
            org=data.get("org", ""),
            bucket=data.get("bucket", ""),
            token=data.get("token", ""),
            measurement=data.get("measurement", DEFAULT_MEASUREMENT),
        )


@dataclass
class MqttConfig:
    """MQTT broker target.

    Attributes:
        host: Broker hostname
        port: Broker port (default 1883)
        username: Optional username
        password: Optional password
        topic_prefix: First topic level, topics are <prefix>/<serial>/<field>
        client_id: MQTT client id (empty = broker assigned)
        qos: Publish QoS (0-2)
        retain: Publish with the retain flag
    """

    host: str
    port: int = DEFAULT_MQTT_PORT
    username: str | None = None
    password: str | None = None
    topic_prefix: str = DEFAULT_TOPIC_PREFIX
    client_id: str = ""
    qos: int = 0
    retain: bool = False

    def validate(self) -> None:
        """Raise ValueError if the target is invalid."""
        if not self.host:
            raise ValueError("mqtt host is required")
        _validate_port(self.port, "mqtt port")
        if self.qos not in (0, 1, 2):
            raise ValueError("mqtt qos must be 0, 1 or 2")
        if not self.topic_prefix or "#" in self.topic_prefix or "+" in self.topic_prefix:
            raise ValueError("mqtt topic prefix must be non-empty and contain no wildcards")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "password": self.password,
            "topic_prefix": self.topic_prefix,
            "client_id": self.client_id,
            "qos": self.qos,
            "retain": self.retain,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MqttConfig:
        """Create from a dictionary produced by to_dict()."""
        return cls(
            host=data.get("host", ""),
            port=data.get("port", DEFAULT_MQTT_PORT),
            username=data.get("username"),
            password=data.get("password"),
            topic_prefix=data.get("topic_prefix", DEFAULT_TOPIC_PREFIX),
            client_id=data.get("client_id", ""),
            qos=data.get("qos", 0),
            retain=data.get("retain", False),
        )


@dataclass
class MonitorConfig:
    """Configuration for one dongle connection and its sinks.

    Attributes:
        host: IP address or hostname of the WiFi dongle
        port: Dongle TCP port (default 8000)
        timeout: Connection timeout in seconds
        read_timeout: Seconds to wait for a frame before giving up
        connection_retries: Connection attempts before failing
        queue_size: Received frames buffered ahead of the decode workers
        workers: Number of concurrent decode workers
        influx: InfluxDB target, or None to disable
        mqtt: MQTT target, or None to disable
    """

    host: str
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    read_timeout: float | None = DEFAULT_READ_TIMEOUT
    connection_retries: int = 3
    queue_size: int = 64
    workers: int = 2
    influx: InfluxConfig | None = None
    mqtt: MqttConfig | None = None

    def validate(self) -> None:
        """Validate configuration completeness.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.host:
            raise ValueError("host is required")
        _validate_port(self.port, "port")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be positive")
        if self.connection_retries < 1:
            raise ValueError("connection_retries must be at least 1")
        if self.queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.influx:
            self.influx.validate()
        if self.mqtt:
            self.mqtt.validate()

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return {
            "host": self.host,
            "port": self.port,
            "timeout": self.timeout,
            "read_timeout": self.read_timeout,
            "connection_retries": self.connection_retries,
            "queue_size": self.queue_size,
            "workers": self.workers,
            "influx": self.influx.to_dict() if self.influx else None,
            "mqtt": self.mqtt.to_dict() if self.mqtt else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MonitorConfig:
        """Create configuration from dictionary."""
        influx = data.get("influx")
        mqtt = data.get("mqtt")
        return cls(
            host=data.get("host", ""),
            port=data.get("port", DEFAULT_PORT),
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            read_timeout=data.get("read_timeout", DEFAULT_READ_TIMEOUT),
            connection_retries=data.get("connection_retries", 3),
            queue_size=data.get("queue_size", 64),
            workers=data.get("workers", 2),
            influx=InfluxConfig.from_dict(influx) if influx else None,
            mqtt=MqttConfig.from_dict(mqtt) if mqtt else None,
        )

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> MonitorConfig:
        """Create configuration from environment variables.

        Values from ``env_file`` (default: ``.env`` in the working directory)
        are loaded first without overriding variables already set.

        Sink sections are only created when INFLUX_URL / MQTT_HOST are set.
        """
        load_dotenv(env_file)

        influx: InfluxConfig | None = None
        if os.getenv("INFLUX_URL"):
            influx = InfluxConfig(
                url=os.environ["INFLUX_URL"],
                org=os.getenv("INFLUX_ORG", ""),
                bucket=os.getenv("INFLUX_BUCKET", ""),
                token=os.getenv("INFLUX_TOKEN", ""),
                measurement=os.getenv("INFLUX_MEASUREMENT", DEFAULT_MEASUREMENT),
            )

        mqtt: MqttConfig | None = None
        if os.getenv("MQTT_HOST"):
            mqtt = MqttConfig(
                host=os.environ["MQTT_HOST"],
                port=int(os.getenv("MQTT_PORT", str(DEFAULT_MQTT_PORT))),
                username=os.getenv("MQTT_USERNAME") or None,
                password=os.getenv("MQTT_PASSWORD") or None,
                topic_prefix=os.getenv("MQTT_TOPIC_PREFIX", DEFAULT_TOPIC_PREFIX),
                client_id=os.getenv("MQTT_CLIENT_ID", ""),
            )

        return cls(
            host=os.getenv("LXP_HOST", ""),
            port=int(os.getenv("LXP_PORT", str(DEFAULT_PORT))),
            timeout=float(os.getenv("LXP_TIMEOUT", str(DEFAULT_TIMEOUT))),
            read_timeout=float(os.getenv("LXP_READ_TIMEOUT", str(DEFAULT_READ_TIMEOUT))),
            connection_retries=int(os.getenv("LXP_CONNECTION_RETRIES", "3")),
            queue_size=int(os.getenv("LXP_QUEUE_SIZE", "64")),
            workers=int(os.getenv("LXP_WORKERS", "2")),
            influx=influx,
            mqtt=mqtt,
        )


__all__ = [
    "InfluxConfig",
    "MonitorConfig",
    "MqttConfig",
]
