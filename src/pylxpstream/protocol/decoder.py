"""Frame decoding pipeline.

decode_frame() runs one received buffer through every stage:

    header → function gate → translated data → dispatch → sections
           → scaling → record

Decoding is a pure function of the input bytes. It never logs, never keeps
state between calls, and either returns a complete result or raises a
FrameError subclass; a record is never partially built.

Note: the caller must hand over exactly one frame. A frame split across
two socket reads fails length validation rather than being reassembled.
"""

from __future__ import annotations

from dataclasses import dataclass

from pylxpstream.constants import HEADER_SIZE, TRANSLATED_DATA_SIZE, FunctionCode
from pylxpstream.protocol.dispatch import DispatchRule, select_sections
from pylxpstream.protocol.header import (
    FrameHeader,
    TranslatedData,
    parse_header,
    parse_translated_data,
)
from pylxpstream.protocol.record import TelemetryRecord, assemble_record
from pylxpstream.protocol.sections import decode_sections

SECTION_DATA_OFFSET = HEADER_SIZE + TRANSLATED_DATA_SIZE


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding one frame.

    Non-data frames (heartbeat, read/write parameter) are valid but carry no
    telemetry: ``record`` is None and ``handled`` is False.
    """

    header: FrameHeader
    translated: TranslatedData | None = None
    rule: DispatchRule | None = None
    record: TelemetryRecord | None = None

    @property
    def handled(self) -> bool:
        """True when the frame produced a telemetry record."""
        return self.record is not None

    @property
    def function(self) -> FunctionCode | int:
        """Header function code, as FunctionCode when known."""
        try:
            return FunctionCode(self.header.function)
        except ValueError:
            return self.header.function


def decode_frame(frame: bytes, received_length: int | None = None) -> DecodeResult:
    """Decode one frame into a telemetry record.

    Args:
        frame: Bytes of exactly one frame
        received_length: Bytes received for the frame. Defaults to
            ``len(frame)``.

    Returns:
        DecodeResult; ``record`` is set for data frames only

    Raises:
        HeaderPrefixMismatch: Magic prefix is wrong
        LengthMismatch: Declared length disagrees with bytes received
        UnsupportedDeviceFunction: Sub-header is not a read-input response
        UnrecognizedFrame: (register, packet_length) not in the dispatch table
        TruncatedFrame: Not enough bytes for a structure
    """
    if received_length is None:
        received_length = len(frame)

    header = parse_header(frame, received_length)
    if not header.is_data:
        return DecodeResult(header=header)

    translated = parse_translated_data(frame, received_length)
    rule = select_sections(
        translated.device_function,
        translated.register,
        header.packet_length,
        received_length,
    )
    raw_sections = decode_sections(rule.sections, frame, SECTION_DATA_OFFSET, received_length)
    record = assemble_record(translated.serial_number, raw_sections)

    return DecodeResult(header=header, translated=translated, rule=rule, record=record)


__all__ = [
    "SECTION_DATA_OFFSET",
    "DecodeResult",
    "decode_frame",
]
