#!/usr/bin/env python3
"""Dongle telemetry monitor for pylxpstream.

Connects to a Luxpower/EG4 WiFi dongle, decodes every telemetry frame it
pushes and forwards the readings to InfluxDB and/or an MQTT broker.

Settings come from environment variables (or a .env file) and can be
overridden on the command line.

Usage:
    pylxpstream-monitor --host 192.168.1.100 --mqtt-host broker.lan
    pylxpstream-monitor --decode a11a0100...
    pylxpstream-monitor --help
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import fields
from typing import TYPE_CHECKING

from pylxpstream import __version__
from pylxpstream.exceptions import FrameError, LuxpowerStreamError
from pylxpstream.monitor import FrameMonitor
from pylxpstream.protocol.decoder import decode_frame
from pylxpstream.sinks import InfluxDBSink, MqttSink
from pylxpstream.transports import DongleStream, InfluxConfig, MonitorConfig, MqttConfig

if TYPE_CHECKING:
    from pylxpstream.sinks import RecordSink

_LOGGER = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="pylxpstream-monitor",
        description="Decode Luxpower/EG4 WiFi dongle telemetry and forward it to sinks.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment variables:
  LXP_HOST, LXP_PORT, LXP_TIMEOUT, LXP_READ_TIMEOUT, LXP_CONNECTION_RETRIES,
  LXP_QUEUE_SIZE, LXP_WORKERS, INFLUX_URL, INFLUX_ORG, INFLUX_BUCKET,
  INFLUX_TOKEN, INFLUX_MEASUREMENT, MQTT_HOST, MQTT_PORT, MQTT_USERNAME,
  MQTT_PASSWORD, MQTT_TOPIC_PREFIX, MQTT_CLIENT_ID

Examples:
  pylxpstream-monitor --host 192.168.1.100 --mqtt-host broker.lan
      Publish readings to lxp/<serial>/<field> topics

  pylxpstream-monitor --host 192.168.1.100 --influx-url http://influx:8086 \\
      --influx-org home --influx-bucket solar --influx-token TOKEN
      Write readings to InfluxDB

  pylxpstream-monitor --decode a11a01006f00...
      Decode one hex-encoded frame and print it
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--env-file", help="Load settings from this .env file")
    parser.add_argument(
        "--decode",
        metavar="HEX",
        help="Decode one hex-encoded frame, print the result and exit",
    )

    conn_group = parser.add_argument_group("Connection Options")
    conn_group.add_argument("--host", "-H", help="WiFi dongle IP address")
    conn_group.add_argument("--port", "-p", type=int, help="Dongle TCP port (default: 8000)")
    conn_group.add_argument("--timeout", type=float, help="Connection timeout in seconds")
    conn_group.add_argument("--workers", type=int, help="Concurrent decode workers")
    conn_group.add_argument("--queue-size", type=int, help="Frames buffered ahead of workers")

    influx_group = parser.add_argument_group("InfluxDB Options")
    influx_group.add_argument("--influx-url", help="InfluxDB base URL")
    influx_group.add_argument("--influx-org", help="InfluxDB organization")
    influx_group.add_argument("--influx-bucket", help="InfluxDB bucket")
    influx_group.add_argument("--influx-token", help="InfluxDB API token")

    mqtt_group = parser.add_argument_group("MQTT Options")
    mqtt_group.add_argument("--mqtt-host", help="MQTT broker hostname")
    mqtt_group.add_argument("--mqtt-port", type=int, help="MQTT broker port (default: 1883)")
    mqtt_group.add_argument("--mqtt-prefix", help="Topic prefix (default: lxp)")

    return parser


def setup_logging(debug: bool) -> None:
    """Configure root logging for the command-line tool."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - [%(name)s] - %(levelname)s - %(message)s",
    )
    logging.getLogger("paho").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("influxdb_client").setLevel(logging.WARNING)


def build_config(args: argparse.Namespace) -> MonitorConfig:
    """Merge environment settings with command-line overrides."""
    config = MonitorConfig.from_env(args.env_file)

    for name in ("host", "port", "timeout", "workers", "queue_size"):
        value = getattr(args, name)
        if value is not None:
            setattr(config, name, value)

    if args.influx_url:
        config.influx = config.influx or InfluxConfig(url=args.influx_url, org="", bucket="")
        config.influx.url = args.influx_url
    if config.influx:
        if args.influx_org:
            config.influx.org = args.influx_org
        if args.influx_bucket:
            config.influx.bucket = args.influx_bucket
        if args.influx_token:
            config.influx.token = args.influx_token

    if args.mqtt_host:
        config.mqtt = config.mqtt or MqttConfig(host=args.mqtt_host)
        config.mqtt.host = args.mqtt_host
    if config.mqtt:
        if args.mqtt_port is not None:
            config.mqtt.port = args.mqtt_port
        if args.mqtt_prefix:
            config.mqtt.topic_prefix = args.mqtt_prefix

    return config


def format_result(frame: bytes) -> str:
    """Decode one frame and render it as text."""
    result = decode_frame(frame)
    lines = [result.header.describe()]
    if result.translated is not None:
        lines.append(result.translated.describe())
    if result.record is None:
        lines.append(f"Unhandled function: {result.header.function_name}")
        return "\n".join(lines)

    lines.append(f"Serial: {result.record.serial_number}")
    for section in result.record.loaded_sections:
        scaled = result.record.section(section).scaled
        lines.append(f"[{section.name}]")
        for f in fields(scaled):
            lines.append(f"  {f.name}: {getattr(scaled, f.name)}")
    return "\n".join(lines)


async def build_sinks(config: MonitorConfig) -> list[RecordSink]:
    """Create (and connect) the sinks enabled in the configuration."""
    sinks: list[RecordSink] = []
    if config.influx:
        sinks.append(InfluxDBSink(config.influx))
    if config.mqtt:
        mqtt_sink = MqttSink(config.mqtt)
        await mqtt_sink.connect()
        sinks.append(mqtt_sink)
    return sinks


async def run_monitor(config: MonitorConfig) -> int:
    """Run the monitor until the dongle closes the connection or a signal."""
    sinks = await build_sinks(config)
    if not sinks:
        _LOGGER.warning("No sinks configured; frames will only be decoded and logged")

    stream = DongleStream(
        config.host,
        port=config.port,
        timeout=config.timeout,
        read_timeout=config.read_timeout,
        connection_retries=config.connection_retries,
    )
    monitor = FrameMonitor(
        stream, sinks, queue_size=config.queue_size, workers=config.workers
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, monitor.stop)
        except NotImplementedError:
            pass  # Windows

    try:
        async with stream:
            await monitor.run()
    finally:
        await monitor.close()

    return 0


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()
    setup_logging(args.debug)

    if args.decode:
        try:
            frame = bytes.fromhex(args.decode)
        except ValueError:
            parser.error("--decode expects a hex string")
        try:
            print(format_result(frame))
        except FrameError as err:
            print(f"Frame rejected ({err.kind}): {err}", file=sys.stderr)
            return 1
        return 0

    config = build_config(args)
    try:
        config.validate()
    except ValueError as err:
        parser.error(str(err))

    try:
        return asyncio.run(run_monitor(config))
    except LuxpowerStreamError as err:
        _LOGGER.error("%s", err)
        return 1


if __name__ == "__main__":
    sys.exit(main())
