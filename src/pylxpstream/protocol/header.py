"""Frame header and translated-data sub-header parsing.

Frame layout (little-endian):
- Bytes 0-1:   Prefix (0x1AA1)
- Bytes 2-3:   Protocol version
- Bytes 4-5:   Packet length (bytes after this field)
- Byte 6:      Address
- Byte 7:      TCP function code (0xC1-0xC4)
- Bytes 8-17:  Dongle serial (10 bytes ASCII)
- Bytes 18-19: Reserved
- Bytes 20-34: Translated data (data frames only)
    - Byte 20:     Address
    - Byte 21:     Modbus function code
    - Bytes 22-31: Inverter serial (10 bytes ASCII)
    - Bytes 32-33: Start register
    - Byte 34:     Value length (consumed, not surfaced)
- Bytes 35+:   Register data
"""

from __future__ import annotations

from dataclasses import dataclass

from pylxpstream.constants import (
    FRAME_PREFIX,
    HEADER_SIZE,
    LENGTH_FIELD_OVERHEAD,
    SERIAL_FILL_BYTES,
    DeviceFunction,
    FunctionCode,
)
from pylxpstream.exceptions import HeaderPrefixMismatch, LengthMismatch
from pylxpstream.registers.layout import (
    HEADER_LAYOUT,
    TRANSLATED_DATA_LAYOUT,
    unpack_fields,
)


def decode_serial(raw: bytes) -> str:
    """Convert a 10-byte serial field to text, trimming trailing fill bytes."""
    return raw.rstrip(SERIAL_FILL_BYTES).decode("ascii", errors="replace")


def _code_name(value: int, enum: type[FunctionCode] | type[DeviceFunction]) -> str:
    try:
        return enum(value).name
    except ValueError:
        return "UNKNOWN"


@dataclass(frozen=True)
class FrameHeader:
    """Fixed 20-byte frame envelope."""

    prefix: int
    protocol_version: int
    packet_length: int
    address: int
    function: int
    serial_number: bytes
    reserved: int

    @property
    def dongle_serial(self) -> str:
        """Dongle serial number as text."""
        return decode_serial(self.serial_number)

    @property
    def is_data(self) -> bool:
        """True for translated-data frames (function 0xC2)."""
        return self.function == FunctionCode.DATA

    @property
    def function_name(self) -> str:
        """Name of the function code, or UNKNOWN."""
        return _code_name(self.function, FunctionCode)

    def describe(self) -> str:
        """Multi-line dump of the header for debug logging."""
        return (
            f"Header Prefix: {self.prefix:04X}\n"
            f"Header Protocol: {self.protocol_version:04X}\n"
            f"Header PacketLength: {self.packet_length}\n"
            f"Header Address: {self.address:02X}\n"
            f"Header Function: {self.function:02X} ({self.function_name})\n"
            f"Header Serial: {self.dongle_serial}\n"
            f"Header Reserved: {self.reserved}"
        )


@dataclass(frozen=True)
class TranslatedData:
    """Translated Modbus sub-header carried by data frames."""

    address: int
    device_function: int
    serial_number: bytes
    register: int

    @property
    def inverter_serial(self) -> str:
        """Inverter serial number as text."""
        return decode_serial(self.serial_number)

    @property
    def device_function_name(self) -> str:
        """Name of the Modbus function code, or UNKNOWN."""
        return _code_name(self.device_function, DeviceFunction)

    def describe(self) -> str:
        """Multi-line dump of the sub-header for debug logging."""
        return (
            f"Translated Address: {self.address:02X}\n"
            f"Translated DeviceFunction: {self.device_function:02X} "
            f"({self.device_function_name})\n"
            f"Translated Serial Number: {self.inverter_serial}\n"
            f"Translated Register: {self.register:04X}"
        )


def parse_header(frame: bytes, received_length: int | None = None) -> FrameHeader:
    """Parse and validate the frame header.

    Args:
        frame: Received bytes, starting at the frame prefix
        received_length: Total bytes received for this frame. Defaults to
            ``len(frame)``.

    Returns:
        Parsed header

    Raises:
        TruncatedFrame: If fewer than 20 bytes were received
        HeaderPrefixMismatch: If the prefix is not 0x1AA1
        LengthMismatch: If packet_length != received_length - 6
    """
    if received_length is None:
        received_length = len(frame)

    header = FrameHeader(**unpack_fields(HEADER_LAYOUT, frame, frame_length=received_length))

    if header.prefix != FRAME_PREFIX:
        raise HeaderPrefixMismatch(header.prefix, received_length)

    if header.packet_length != received_length - LENGTH_FIELD_OVERHEAD:
        raise LengthMismatch(header.packet_length, received_length)

    return header


def parse_translated_data(frame: bytes, frame_length: int | None = None) -> TranslatedData:
    """Parse the translated-data sub-header that follows the header.

    Raises:
        TruncatedFrame: If the sub-header is incomplete
    """
    values = unpack_fields(TRANSLATED_DATA_LAYOUT, frame, HEADER_SIZE, frame_length)
    return TranslatedData(**values)


__all__ = [
    "FrameHeader",
    "TranslatedData",
    "decode_serial",
    "parse_header",
    "parse_translated_data",
]
