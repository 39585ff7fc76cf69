"""Dongle telemetry frame decoding.

Usage:
    from pylxpstream.protocol import decode_frame

    result = decode_frame(buffer)
    if result.handled:
        record = result.record
        print(record.serial_number, record.section1.scaled.pv1_voltage)
"""

from __future__ import annotations

from .decoder import SECTION_DATA_OFFSET, DecodeResult, decode_frame
from .dispatch import DISPATCH_TABLE, DispatchRule, select_sections
from .header import (
    FrameHeader,
    TranslatedData,
    decode_serial,
    parse_header,
    parse_translated_data,
)
from .record import (
    ScaledSection1,
    ScaledSection2,
    ScaledSection3,
    SectionData,
    TelemetryRecord,
    assemble_record,
    scale_section,
)
from .sections import (
    RawSection1,
    RawSection2,
    RawSection3,
    decode_section,
    decode_sections,
)

__all__ = [
    # Pipeline
    "decode_frame",
    "DecodeResult",
    "SECTION_DATA_OFFSET",
    # Header
    "FrameHeader",
    "TranslatedData",
    "decode_serial",
    "parse_header",
    "parse_translated_data",
    # Dispatch
    "DISPATCH_TABLE",
    "DispatchRule",
    "select_sections",
    # Sections
    "RawSection1",
    "RawSection2",
    "RawSection3",
    "decode_section",
    "decode_sections",
    # Record
    "ScaledSection1",
    "ScaledSection2",
    "ScaledSection3",
    "SectionData",
    "TelemetryRecord",
    "assemble_record",
    "scale_section",
]
