"""Protocol constants for the LuxPower/EG4 WiFi dongle telemetry stream.

The dongle pushes frames over a persistent TCP connection (port 8000).
Every frame starts with a fixed 20-byte little-endian header; data frames
(function 0xC2) carry a translated Modbus sub-header followed by one or more
register blocks.

Reference: https://github.com/celsworth/lxp-bridge/wiki/TCP-Packet-Spec
"""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Frame envelope
# ---------------------------------------------------------------------------

FRAME_PREFIX = 0x1AA1  # Read as little-endian uint16 (wire bytes A1 1A)
HEADER_SIZE = 20
TRANSLATED_DATA_SIZE = 15  # 14 bytes of fields + 1 value-length byte
SERIAL_NUMBER_SIZE = 10

# packet_length counts every byte after the prefix/version/length trio
LENGTH_FIELD_OVERHEAD = 6

# Declared packet lengths the dispatcher recognises
PACKET_LENGTH_SINGLE_BLOCK = 111  # One 40-register block
PACKET_LENGTH_ALL_BLOCKS = 285  # Registers 0-119 in one frame

# Bytes stripped from the end of a serial number
SERIAL_FILL_BYTES = b"\x00\xff "

# Default dongle connection settings
DEFAULT_PORT = 8000
DEFAULT_TIMEOUT = 10.0
DEFAULT_READ_SIZE = 1024


class FunctionCode(IntEnum):
    """Header (TCP-level) function codes."""

    HEARTBEAT = 0xC1
    DATA = 0xC2  # Translated Modbus data
    READ = 0xC3  # Read parameters
    WRITE = 0xC4  # Write parameters


class DeviceFunction(IntEnum):
    """Modbus function codes carried in the translated-data sub-header."""

    READ_HOLDING = 0x03
    READ_INPUT = 0x04
    WRITE_SINGLE = 0x06
    WRITE_MULTI = 0x10


class Section(IntEnum):
    """Telemetry blocks addressable by start register."""

    SECTION1 = 1  # Instantaneous electrical readings (input regs 0-39)
    SECTION2 = 2  # Cumulative energy and temperatures (input regs 40-79)
    SECTION3 = 3  # Battery-management status (input regs 80-119)


__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_READ_SIZE",
    "DEFAULT_TIMEOUT",
    "FRAME_PREFIX",
    "HEADER_SIZE",
    "LENGTH_FIELD_OVERHEAD",
    "PACKET_LENGTH_ALL_BLOCKS",
    "PACKET_LENGTH_SINGLE_BLOCK",
    "SERIAL_FILL_BYTES",
    "SERIAL_NUMBER_SIZE",
    "TRANSLATED_DATA_SIZE",
    "DeviceFunction",
    "FunctionCode",
    "Section",
]
