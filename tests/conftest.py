"""Pytest configuration and fixtures for pylxpstream tests."""

from __future__ import annotations

import struct
from collections.abc import Callable
from typing import Any

import pytest

from pylxpstream.constants import FRAME_PREFIX, FunctionCode, Section
from pylxpstream.registers.layout import SECTION_LAYOUTS

DONGLE_SERIAL = b"BA12345678"
INVERTER_SERIAL = b"CE12345678"

# Raw register values used by the canned section fixtures
SECTION1_VALUES: dict[str, Any] = {
    "status": 0x10,
    "pv1_voltage": 3650,
    "pv2_voltage": 3120,
    "battery_voltage": 532,
    "soc": 100,
    "soh": 99,
    "pv1_power": 2400,
    "charge_power": 1800,
    "frequency_grid": 5998,
    "grid_power_factor": 1000,
    "inductor_current": 1234,
    "power_to_grid": -50,
    "pv1_energy_today": 87,
    "bus1_voltage": 380,
}

SECTION2_VALUES: dict[str, Any] = {
    "pv1_energy_total": 123456,
    "grid_total": 7890,
    "fault_code": 16,
    "warning_code": 0x80000000,
    "inner_temperature": 42,
    "battery_temperature": -3,
    "runtime": 0x80000001,
}

SECTION3_VALUES: dict[str, Any] = {
    "battery_com_type": 1,
    "bms_max_charge_current": 20000,
    "bms_charge_voltage_reference": 576,
    "bms_status": (1, 2, 3, 4, 5, 6, 7, 8, 9, 10),
    "battery_parallel_count": 2,
    "battery_capacity": 280,
    "battery_current": -1250,
    "max_cell_voltage": 34,
    "max_cell_temp": 25,
    "cycle_count": 321,
}


def pack_section(section: Section, **values: Any) -> bytes:
    """Pack raw values into section bytes; unnamed fields default to zero."""
    layout = SECTION_LAYOUTS[section]
    args: list[Any] = []
    for field_def in layout.value_fields:
        value = values.get(field_def.canonical_name)  # type: ignore[arg-type]
        if field_def.is_array:
            args.extend(value if value is not None else (0,) * field_def.count)
        else:
            args.append(value if value is not None else 0)
    return struct.pack(layout.struct_format, *args)


def build_frame(
    payload: bytes = b"",
    *,
    function: int = FunctionCode.DATA,
    register: int = 0,
    device_function: int = 0x04,
    packet_length: int | None = None,
    prefix: int = FRAME_PREFIX,
    dongle_serial: bytes = DONGLE_SERIAL,
    inverter_serial: bytes = INVERTER_SERIAL,
) -> bytes:
    """Build a frame as the dongle sends it.

    Data frames get a translated sub-header in front of ``payload``. When
    ``packet_length`` is given the frame is zero-padded to match it,
    otherwise the header declares the actual size.
    """
    body = payload
    if function == FunctionCode.DATA:
        body = (
            struct.pack(
                "<BB10sHB", 1, device_function, inverter_serial, register, len(payload) & 0xFF
            )
            + payload
        )

    if packet_length is None:
        packet_length = 20 + len(body) - 6

    header = struct.pack(
        "<HHHBB10sH", prefix, 2, packet_length, 1, function, dongle_serial, 0
    )
    frame = header + body
    return frame.ljust(packet_length + 6, b"\x00")


@pytest.fixture
def frame_builder() -> Callable[..., bytes]:
    """Frame builder function."""
    return build_frame


@pytest.fixture
def section_builder() -> Callable[..., bytes]:
    """Section packing function."""
    return pack_section


@pytest.fixture
def section1_bytes() -> bytes:
    """Packed section 1 with realistic readings."""
    return pack_section(Section.SECTION1, **SECTION1_VALUES)


@pytest.fixture
def section2_bytes() -> bytes:
    """Packed section 2 with realistic counters."""
    return pack_section(Section.SECTION2, **SECTION2_VALUES)


@pytest.fixture
def section3_bytes() -> bytes:
    """Packed section 3 with realistic BMS values."""
    return pack_section(Section.SECTION3, **SECTION3_VALUES)


@pytest.fixture
def section1_frame(section1_bytes: bytes) -> bytes:
    """Single-block frame carrying section 1 (register 0, length 111)."""
    return build_frame(section1_bytes, register=0, packet_length=111)


@pytest.fixture
def section2_frame(section2_bytes: bytes) -> bytes:
    """Single-block frame carrying section 2 (register 40, length 111)."""
    return build_frame(section2_bytes, register=40, packet_length=111)


@pytest.fixture
def section3_frame(section3_bytes: bytes) -> bytes:
    """Single-block frame carrying section 3 (register 80, length 111)."""
    return build_frame(section3_bytes, register=80, packet_length=111)


@pytest.fixture
def full_frame(section1_bytes: bytes, section2_bytes: bytes, section3_bytes: bytes) -> bytes:
    """Read-all frame carrying all three sections (register 0, length 285)."""
    return build_frame(
        section1_bytes + section2_bytes + section3_bytes, register=0, packet_length=285
    )


@pytest.fixture
def heartbeat_frame() -> bytes:
    """Heartbeat frame (function 0xC1) with a one-byte body."""
    return build_frame(b"\x00", function=FunctionCode.HEARTBEAT)
