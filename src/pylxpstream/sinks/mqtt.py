"""MQTT sink.

Publishes every scaled attribute of the loaded sections as its own topic:

    <prefix>/<serial_number>/<FieldName>  →  textual value

Wildcard and separator characters in the serial number become "_".

The paho network loop runs in its own thread (loop_start); publish() only
queues the message, so write() never blocks the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import paho.mqtt.client as mqtt

from pylxpstream.exceptions import SinkError
from pylxpstream.protocol.record import TelemetryRecord
from pylxpstream.transports.config import MqttConfig

from .base import record_fields

_LOGGER = logging.getLogger(__name__)

# MQTT wildcards, the level separator and NUL are not allowed in a topic level
_TOPIC_LEVEL_UNSAFE = str.maketrans({"+": "_", "#": "_", "/": "_", "\x00": "_"})

UNKNOWN_SERIAL = "unknown"


def topic_level(serial_number: str) -> str:
    """Make a serial number safe to use as a single topic level."""
    return serial_number.translate(_TOPIC_LEVEL_UNSAFE) or UNKNOWN_SERIAL


def build_messages(record: TelemetryRecord, topic_prefix: str) -> list[tuple[str, str]]:
    """Render a record as (topic, payload) pairs for its loaded sections."""
    base = f"{topic_prefix.rstrip('/')}/{topic_level(record.serial_number)}"
    return [(f"{base}/{key}", str(value)) for key, value in record_fields(record).items()]


class MqttSink:
    """Publish/subscribe sink for an MQTT broker.

    Example:
        sink = MqttSink(MqttConfig(host="broker.lan"))
        await sink.connect()
        await sink.write(record)
        await sink.close()
    """

    name = "mqtt"

    def __init__(self, config: MqttConfig, client: mqtt.Client | None = None) -> None:
        """Initialize the sink.

        Args:
            config: Broker settings
            client: Optional pre-built paho client (mainly for testing)
        """
        self._config = config
        if client is None:
            client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=config.client_id)
        self._client = client
        if config.username:
            self._client.username_pw_set(config.username, config.password)
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._started = False

    @property
    def topic_prefix(self) -> str:
        """First topic level for every message."""
        return self._config.topic_prefix

    async def connect(self) -> None:
        """Connect to the broker and start the network loop.

        Raises:
            SinkError: If the broker cannot be reached
        """
        try:
            await asyncio.to_thread(self._client.connect, self._config.host, self._config.port, 60)
        except OSError as err:
            raise SinkError(
                self.name,
                f"Failed to connect to {self._config.host}:{self._config.port}: {err}",
            ) from err
        self._client.loop_start()
        self._started = True

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        if reason_code == 0:
            _LOGGER.info("Connected to MQTT broker %s:%s", self._config.host, self._config.port)
        else:
            _LOGGER.warning("MQTT broker refused connection: %s", reason_code)

    def _on_disconnect(
        self,
        client: mqtt.Client,
        userdata: Any,
        disconnect_flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        if reason_code != 0:
            _LOGGER.warning("Disconnected from MQTT broker (%s)", reason_code)

    async def write(self, record: TelemetryRecord) -> None:
        """Publish one message per field of the record's loaded sections.

        Raises:
            SinkError: If paho refuses a message (e.g. not connected)
        """
        messages = build_messages(record, self._config.topic_prefix)
        for topic, payload in messages:
            info = self._client.publish(
                topic, payload, qos=self._config.qos, retain=self._config.retain
            )
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                raise SinkError(
                    self.name, f"Publish to {topic} failed: {mqtt.error_string(info.rc)}"
                )

        _LOGGER.debug("Published %d topics for %s", len(messages), record.serial_number)

    async def close(self) -> None:
        """Stop the network loop and disconnect."""
        if self._started:
            self._client.disconnect()
            self._client.loop_stop()
            self._started = False


__all__ = [
    "MqttSink",
    "build_messages",
]
