"""Scaled section values and the composite telemetry record.

All values in the scaled sections are in standard units:
- Voltage: Volts (V)
- Current: Amperes (A)
- Power: Watts (W) / Volt-amperes (VA)
- Energy: Kilowatt-hours (kWh)
- Temperature: Celsius (°C)
- Frequency: Hertz (Hz)
- Percentage: 0-100 (%)

Codes, counters and bitfields keep their integer type.

A TelemetryRecord is built fresh for every accepted frame. Its per-section
``loaded`` flags describe only that frame: a frame carrying section 2 yields
section 1 and section 3 with ``loaded=False`` regardless of earlier frames.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Generic, TypeVar

from pylxpstream.constants import Section
from pylxpstream.protocol.header import decode_serial
from pylxpstream.protocol.sections import (
    RawSection,
    RawSection1,
    RawSection2,
    RawSection3,
)
from pylxpstream.registers.scaling import scale_value


@dataclass(frozen=True)
class ScaledSection1:
    """Instantaneous electrical readings in engineering units."""

    status: int
    pv1_voltage: float  # V
    pv2_voltage: float  # V
    pv3_voltage: float  # V
    battery_voltage: float  # V
    soc: float  # %
    soh: float  # %
    pv1_power: float  # W
    pv2_power: float  # W
    pv3_power: float  # W
    charge_power: float  # W
    discharge_power: float  # W
    voltage_ac_r: float  # V
    voltage_ac_s: float  # V
    voltage_ac_t: float  # V
    frequency_grid: float  # Hz
    active_charge_power: float  # W
    active_inverter_power: float  # W
    inductor_current: float  # A
    grid_power_factor: float
    voltage_eps_r: float  # V
    voltage_eps_s: float  # V
    voltage_eps_t: float  # V
    frequency_eps: float  # Hz
    active_eps_power: float  # W
    apparent_eps_power: float  # VA
    power_to_grid: float  # W
    power_from_grid: float  # W
    pv1_energy_today: float  # kWh
    pv2_energy_today: float  # kWh
    pv3_energy_today: float  # kWh
    active_inverter_energy_today: float  # kWh
    ac_charging_today: float  # kWh
    charging_today: float  # kWh
    discharging_today: float  # kWh
    eps_today: float  # kWh
    exported_today: float  # kWh
    grid_today: float  # kWh
    bus1_voltage: float  # V
    bus2_voltage: float  # V


@dataclass(frozen=True)
class ScaledSection2:
    """Lifetime energy counters and temperatures in engineering units."""

    pv1_energy_total: float  # kWh
    pv2_energy_total: float  # kWh
    pv3_energy_total: float  # kWh
    active_inverter_energy_total: float  # kWh
    ac_charging_total: float  # kWh
    charging_total: float  # kWh
    discharging_total: float  # kWh
    eps_total: float  # kWh
    exported_total: float  # kWh
    grid_total: float  # kWh
    fault_code: int
    warning_code: int
    inner_temperature: float  # °C
    radiator1_temperature: float  # °C
    radiator2_temperature: float  # °C
    battery_temperature: float  # °C
    runtime: int  # s


@dataclass(frozen=True)
class ScaledSection3:
    """Battery-management status in engineering units."""

    battery_com_type: int
    bms_max_charge_current: float  # A
    bms_max_discharge_current: float  # A
    bms_charge_voltage_reference: float  # V
    bms_discharge_cutoff: float  # V
    bms_status: tuple[int, ...]
    bms_inverter_status: int
    battery_parallel_count: int
    battery_capacity: float  # Ah
    battery_current: float  # A
    bms_event1: int
    bms_event2: int
    max_cell_voltage: float  # V
    min_cell_voltage: float  # V
    max_cell_temp: float  # °C
    min_cell_temp: float  # °C
    bms_fw_update_state: int
    cycle_count: int
    battery_inverter_voltage: float  # V


ScaledSection = ScaledSection1 | ScaledSection2 | ScaledSection3

_SCALED_TYPES: dict[type, type] = {
    RawSection1: ScaledSection1,
    RawSection2: ScaledSection2,
    RawSection3: ScaledSection3,
}

RawT = TypeVar("RawT", RawSection1, RawSection2, RawSection3)
ScaledT = TypeVar("ScaledT", ScaledSection1, ScaledSection2, ScaledSection3)


def scale_section(raw: RawSection) -> ScaledSection:
    """Apply the calibration table to every field of a raw section."""
    values = {f.name: scale_value(f.name, getattr(raw, f.name)) for f in fields(raw)}
    return _SCALED_TYPES[type(raw)](**values)


@dataclass(frozen=True)
class SectionData(Generic[RawT, ScaledT]):
    """Raw and scaled values of one section plus its loaded flag."""

    raw: RawT | None = None
    scaled: ScaledT | None = None
    loaded: bool = False


@dataclass(frozen=True)
class TelemetryRecord:
    """Decoded telemetry from one data frame."""

    serial_number: str
    section1: SectionData[RawSection1, ScaledSection1]
    section2: SectionData[RawSection2, ScaledSection2]
    section3: SectionData[RawSection3, ScaledSection3]

    def section(self, section: Section) -> SectionData:
        """Get section data by Section enum."""
        return getattr(self, f"section{section.value}")

    @property
    def loaded_sections(self) -> tuple[Section, ...]:
        """Sections populated by this frame, in section order."""
        return tuple(s for s in Section if self.section(s).loaded)


def _section_data(raw: RawSection | None) -> SectionData:
    if raw is None:
        return SectionData()
    return SectionData(raw=raw, scaled=scale_section(raw), loaded=True)


def assemble_record(
    serial_number: bytes,
    sections: dict[Section, RawSection],
) -> TelemetryRecord:
    """Combine the serial number and decoded sections into one record.

    Args:
        serial_number: Raw 10-byte inverter serial from the sub-header
        sections: Raw sections decoded from this frame

    Returns:
        Immutable TelemetryRecord; sections absent from ``sections`` are
        marked not loaded.
    """
    return TelemetryRecord(
        serial_number=decode_serial(serial_number),
        section1=_section_data(sections.get(Section.SECTION1)),
        section2=_section_data(sections.get(Section.SECTION2)),
        section3=_section_data(sections.get(Section.SECTION3)),
    )


__all__ = [
    "ScaledSection",
    "ScaledSection1",
    "ScaledSection2",
    "ScaledSection3",
    "SectionData",
    "TelemetryRecord",
    "assemble_record",
    "scale_section",
]
