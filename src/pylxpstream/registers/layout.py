"""Wire layout tables for every structure in a dongle telemetry frame.

Single source of truth for byte offsets, widths and signedness. Each
structure is an ordered tuple of FieldDefinition entries; the struct format
string is derived from the table, never written by hand, and one generic
routine (:func:`unpack_fields`) decodes any of them.

Each FieldDefinition carries the identity chain:
  struct code/width → Python attribute name → external sink field name

All multi-byte values are little-endian. Padding entries have no name: they
are consumed to keep offsets aligned but never surfaced.

Register blocks (input registers, function code 0x04):
  Section1: registers 0-39   (80 bytes)  instantaneous readings
  Section2: registers 40-79  (80 bytes)  cumulative energy + thermal
  Section3: registers 80-107 (56 bytes)  battery-management status
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from functools import cached_property
from typing import Any

from pylxpstream.constants import Section
from pylxpstream.exceptions import TruncatedFrame


@dataclass(frozen=True)
class FieldDefinition:
    """Single field in a fixed-layout structure.

    Attributes:
        canonical_name: Python attribute name. None for padding.
        sink_field: Field name used by time-series and pub/sub sinks.
            These names are a compatibility contract and MUST NOT change.
        fmt: struct format code ("B", "b", "H", "h", "I", "i", "s", "x").
        count: Array length. For "s" this is the byte length (one value),
            for "x" the number of pad bytes (no value).
        unit: Engineering unit after scaling.
        description: Human-readable description.
    """

    canonical_name: str | None
    sink_field: str | None
    fmt: str
    count: int = 1
    unit: str = ""
    description: str = ""

    @property
    def is_padding(self) -> bool:
        """True for reserved bytes that are consumed but not surfaced."""
        return self.canonical_name is None

    @property
    def is_array(self) -> bool:
        """True when the field decodes to a tuple of values."""
        return self.count > 1 and self.fmt not in ("s", "x")

    @property
    def struct_code(self) -> str:
        """Format fragment for this field, e.g. ``h`` or ``10H``."""
        return f"{self.count}{self.fmt}" if self.count > 1 else self.fmt


def _pad(size: int) -> FieldDefinition:
    return FieldDefinition(None, None, "x", size)


@dataclass(frozen=True)
class SectionLayout:
    """Ordered field table for one fixed-size structure."""

    name: str
    fields: tuple[FieldDefinition, ...]

    @cached_property
    def struct_format(self) -> str:
        """Little-endian struct format string derived from the table."""
        return "<" + "".join(f.struct_code for f in self.fields)

    @cached_property
    def size(self) -> int:
        """Structure size in bytes."""
        return struct.calcsize(self.struct_format)

    @cached_property
    def value_fields(self) -> tuple[FieldDefinition, ...]:
        """Fields that surface a value (padding excluded)."""
        return tuple(f for f in self.fields if not f.is_padding)

    def offset_of(self, canonical_name: str) -> int:
        """Byte offset of a named field from the start of the structure."""
        fmt = "<"
        for f in self.fields:
            if f.canonical_name == canonical_name:
                return struct.calcsize(fmt)
            fmt += f.struct_code
        raise KeyError(canonical_name)


def unpack_fields(
    layout: SectionLayout,
    data: bytes,
    offset: int = 0,
    frame_length: int | None = None,
) -> dict[str, Any]:
    """Decode one structure from ``data`` starting at ``offset``.

    Args:
        layout: Field table describing the structure
        data: Buffer holding the structure
        offset: Start offset within ``data``
        frame_length: Total frame length, reported in errors

    Returns:
        Dict mapping canonical_name to value. Arrays decode to tuples and
        byte strings stay as bytes.

    Raises:
        TruncatedFrame: If fewer than ``layout.size`` bytes remain
    """
    available = max(len(data) - offset, 0)
    if available < layout.size:
        raise TruncatedFrame(layout.name, layout.size, available, frame_length)

    flat = struct.unpack_from(layout.struct_format, data, offset)
    values: dict[str, Any] = {}
    index = 0
    for f in layout.value_fields:
        if f.is_array:
            values[f.canonical_name] = tuple(flat[index : index + f.count])  # type: ignore[index]
            index += f.count
        else:
            values[f.canonical_name] = flat[index]  # type: ignore[index]
            index += 1
    return values


# =============================================================================
# FRAME ENVELOPE
# =============================================================================

HEADER_LAYOUT = SectionLayout(
    "header",
    (
        FieldDefinition("prefix", None, "H", description="Magic 0x1AA1"),
        FieldDefinition("protocol_version", None, "H"),
        FieldDefinition("packet_length", None, "H", description="Bytes after this field"),
        FieldDefinition("address", None, "B"),
        FieldDefinition("function", None, "B", description="0xC1-0xC4"),
        FieldDefinition("serial_number", None, "s", 10, description="Dongle serial"),
        FieldDefinition("reserved", None, "H"),
    ),
)

# The trailing byte is the value-length byte; it is consumed, not surfaced.
TRANSLATED_DATA_LAYOUT = SectionLayout(
    "translated_data",
    (
        FieldDefinition("address", None, "B"),
        FieldDefinition("device_function", None, "B", description="Modbus function"),
        FieldDefinition("serial_number", None, "s", 10, description="Inverter serial"),
        FieldDefinition("register", None, "H", description="Start register"),
        _pad(1),
    ),
)

# =============================================================================
# SECTION 1 - instantaneous electrical readings (input registers 0-39)
# =============================================================================

SECTION1_LAYOUT = SectionLayout(
    "section1",
    (
        FieldDefinition("status", "Status", "H", description="Operating mode code"),
        FieldDefinition("pv1_voltage", "PV1_Voltage", "h", unit="V"),
        FieldDefinition("pv2_voltage", "PV2_Voltage", "h", unit="V"),
        FieldDefinition("pv3_voltage", "PV3_Voltage", "h", unit="V"),
        FieldDefinition("battery_voltage", "Battery_Voltage", "h", unit="V"),
        FieldDefinition("soc", "SOC", "b", unit="%", description="State of charge"),
        FieldDefinition("soh", "SOH", "b", unit="%", description="State of health"),
        _pad(2),
        FieldDefinition("pv1_power", "PV1_Power", "h", unit="W"),
        FieldDefinition("pv2_power", "PV2_Power", "h", unit="W"),
        FieldDefinition("pv3_power", "PV3_Power", "h", unit="W"),
        FieldDefinition("charge_power", "Charge_Power", "h", unit="W"),
        FieldDefinition("discharge_power", "Discharge_Power", "h", unit="W"),
        FieldDefinition("voltage_ac_r", "Voltage_AC_R", "h", unit="V"),
        FieldDefinition("voltage_ac_s", "Voltage_AC_S", "h", unit="V"),
        FieldDefinition("voltage_ac_t", "Voltage_AC_T", "h", unit="V"),
        FieldDefinition("frequency_grid", "Frequency_Grid", "h", unit="Hz"),
        FieldDefinition("active_charge_power", "ActiveCharge_Power", "h", unit="W"),
        FieldDefinition("active_inverter_power", "ActiveInverter_Power", "h", unit="W"),
        FieldDefinition("inductor_current", "Inductor_Current", "h", unit="A"),
        FieldDefinition("grid_power_factor", "Grid_Power_Factor", "h"),
        FieldDefinition("voltage_eps_r", "Voltage_EPS_R", "h", unit="V"),
        FieldDefinition("voltage_eps_s", "Voltage_EPS_S", "h", unit="V"),
        FieldDefinition("voltage_eps_t", "Voltage_EPS_T", "h", unit="V"),
        FieldDefinition("frequency_eps", "Frequency_EPS", "h", unit="Hz"),
        FieldDefinition("active_eps_power", "Active_EPS_Power", "h", unit="W"),
        FieldDefinition("apparent_eps_power", "Apparent_EPS_Power", "h", unit="VA"),
        FieldDefinition("power_to_grid", "Power_To_Grid", "h", unit="W"),
        FieldDefinition("power_from_grid", "Power_From_Grid", "h", unit="W"),
        FieldDefinition("pv1_energy_today", "PV1_Energy_Today", "h", unit="kWh"),
        FieldDefinition("pv2_energy_today", "PV2_Energy_Today", "h", unit="kWh"),
        FieldDefinition("pv3_energy_today", "PV3_Energy_Today", "h", unit="kWh"),
        FieldDefinition(
            "active_inverter_energy_today", "ActiveInverter_Energy_Today", "h", unit="kWh"
        ),
        FieldDefinition("ac_charging_today", "AC_Charging_Today", "h", unit="kWh"),
        FieldDefinition("charging_today", "Charging_Today", "h", unit="kWh"),
        FieldDefinition("discharging_today", "Discharging_Today", "h", unit="kWh"),
        FieldDefinition("eps_today", "EPS_Today", "h", unit="kWh"),
        FieldDefinition("exported_today", "Exported_Today", "h", unit="kWh"),
        FieldDefinition("grid_today", "Grid_Today", "h", unit="kWh"),
        FieldDefinition("bus1_voltage", "Bus1_Voltage", "h", unit="V"),
        FieldDefinition("bus2_voltage", "Bus2_Voltage", "h", unit="V"),
    ),
)

# =============================================================================
# SECTION 2 - cumulative counters and temperatures (input registers 40-79)
# =============================================================================
# 32-bit values are low word first, which is plain little-endian on the wire.

SECTION2_LAYOUT = SectionLayout(
    "section2",
    (
        FieldDefinition("pv1_energy_total", "PV1_Energy_Total", "i", unit="kWh"),
        FieldDefinition("pv2_energy_total", "PV2_Energy_Total", "i", unit="kWh"),
        FieldDefinition("pv3_energy_total", "PV3_Energy_Total", "i", unit="kWh"),
        FieldDefinition(
            "active_inverter_energy_total", "ActiveInverter_Energy_Total", "i", unit="kWh"
        ),
        FieldDefinition("ac_charging_total", "AC_Charging_Total", "i", unit="kWh"),
        FieldDefinition("charging_total", "Charging_Total", "i", unit="kWh"),
        FieldDefinition("discharging_total", "Discharging_Total", "i", unit="kWh"),
        FieldDefinition("eps_total", "EPS_Total", "i", unit="kWh"),
        FieldDefinition("exported_total", "Exported_Total", "i", unit="kWh"),
        FieldDefinition("grid_total", "Grid_Total", "i", unit="kWh"),
        FieldDefinition("fault_code", "FaultCode", "I", description="Fault bitfield"),
        FieldDefinition("warning_code", "WarningCode", "I", description="Warning bitfield"),
        FieldDefinition("inner_temperature", "Inner_Temperature", "h", unit="°C"),
        FieldDefinition("radiator1_temperature", "Radiator1_Temperature", "h", unit="°C"),
        FieldDefinition("radiator2_temperature", "Radiator2_Temperature", "h", unit="°C"),
        FieldDefinition("battery_temperature", "Battery_Temperature", "h", unit="°C"),
        _pad(2),
        FieldDefinition("runtime", "Runtime", "I", unit="s", description="Inverter on-time"),
        _pad(18),
    ),
)

# =============================================================================
# SECTION 3 - battery-management status (input registers 80-107)
# =============================================================================

SECTION3_LAYOUT = SectionLayout(
    "section3",
    (
        FieldDefinition("battery_com_type", "BatteryComType", "h"),
        FieldDefinition("bms_max_charge_current", "BMS_Max_Charge_Current", "h", unit="A"),
        FieldDefinition(
            "bms_max_discharge_current", "BMS_Max_Discharge_Current", "h", unit="A"
        ),
        FieldDefinition(
            "bms_charge_voltage_reference", "BMS_Charge_Voltage_Reference", "h", unit="V"
        ),
        FieldDefinition("bms_discharge_cutoff", "BMS_Discharge_Cutoff", "h", unit="V"),
        FieldDefinition("bms_status", "BMS_Status", "H", 10, description="Status words"),
        FieldDefinition("bms_inverter_status", "BMS_Inverter_Status", "h"),
        FieldDefinition("battery_parallel_count", "Battery_Parallel_Count", "h"),
        FieldDefinition("battery_capacity", "Battery_Capacity", "h", unit="Ah"),
        FieldDefinition("battery_current", "Battery_Current", "h", unit="A"),
        FieldDefinition("bms_event1", "BMS_Event1", "h"),
        FieldDefinition("bms_event2", "BMS_Event2", "h"),
        FieldDefinition("max_cell_voltage", "MaxCell_Voltage", "h", unit="V"),
        FieldDefinition("min_cell_voltage", "MinCell_Voltage", "h", unit="V"),
        FieldDefinition("max_cell_temp", "MaxCell_Temp", "h", unit="°C"),
        FieldDefinition("min_cell_temp", "MinCell_Temp", "h", unit="°C"),
        FieldDefinition("bms_fw_update_state", "BMS_FW_Update_State", "h"),
        FieldDefinition("cycle_count", "Cycle_Count", "h"),
        FieldDefinition("battery_inverter_voltage", "BatteryInverter_Voltage", "h", unit="V"),
    ),
)

# =============================================================================
# INDEXES
# =============================================================================

SECTION_LAYOUTS: dict[Section, SectionLayout] = {
    Section.SECTION1: SECTION1_LAYOUT,
    Section.SECTION2: SECTION2_LAYOUT,
    Section.SECTION3: SECTION3_LAYOUT,
}

BY_NAME: dict[str, FieldDefinition] = {
    f.canonical_name: f
    for layout in SECTION_LAYOUTS.values()
    for f in layout.value_fields
    if f.canonical_name
}

BY_SINK_FIELD: dict[str, FieldDefinition] = {
    f.sink_field: f for f in BY_NAME.values() if f.sink_field
}

SECTION_OF: dict[str, Section] = {
    f.canonical_name: section
    for section, layout in SECTION_LAYOUTS.items()
    for f in layout.value_fields
    if f.canonical_name
}


__all__ = [
    "BY_NAME",
    "BY_SINK_FIELD",
    "HEADER_LAYOUT",
    "SECTION1_LAYOUT",
    "SECTION2_LAYOUT",
    "SECTION3_LAYOUT",
    "SECTION_LAYOUTS",
    "SECTION_OF",
    "TRANSLATED_DATA_LAYOUT",
    "FieldDefinition",
    "SectionLayout",
    "unpack_fields",
]
