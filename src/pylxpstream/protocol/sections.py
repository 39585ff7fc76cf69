"""Raw telemetry section decoders.

Each section is decoded byte-exactly from the layout tables in
:mod:`pylxpstream.registers.layout`; the dataclasses below hold the raw
integer values with their declared widths and signedness preserved.
"""

from __future__ import annotations

from dataclasses import dataclass

from pylxpstream.constants import Section
from pylxpstream.registers.layout import SECTION_LAYOUTS, unpack_fields


@dataclass(frozen=True)
class RawSection1:
    """Instantaneous electrical readings (input registers 0-39)."""

    status: int  # uint16 operating mode
    pv1_voltage: int
    pv2_voltage: int
    pv3_voltage: int
    battery_voltage: int
    soc: int  # int8
    soh: int  # int8
    pv1_power: int
    pv2_power: int
    pv3_power: int
    charge_power: int
    discharge_power: int
    voltage_ac_r: int
    voltage_ac_s: int
    voltage_ac_t: int
    frequency_grid: int
    active_charge_power: int
    active_inverter_power: int
    inductor_current: int
    grid_power_factor: int
    voltage_eps_r: int
    voltage_eps_s: int
    voltage_eps_t: int
    frequency_eps: int
    active_eps_power: int
    apparent_eps_power: int
    power_to_grid: int
    power_from_grid: int
    pv1_energy_today: int
    pv2_energy_today: int
    pv3_energy_today: int
    active_inverter_energy_today: int
    ac_charging_today: int
    charging_today: int
    discharging_today: int
    eps_today: int
    exported_today: int
    grid_today: int
    bus1_voltage: int
    bus2_voltage: int


@dataclass(frozen=True)
class RawSection2:
    """Cumulative energy counters and temperatures (input registers 40-79)."""

    pv1_energy_total: int  # int32
    pv2_energy_total: int
    pv3_energy_total: int
    active_inverter_energy_total: int
    ac_charging_total: int
    charging_total: int
    discharging_total: int
    eps_total: int
    exported_total: int
    grid_total: int
    fault_code: int  # uint32
    warning_code: int  # uint32
    inner_temperature: int
    radiator1_temperature: int
    radiator2_temperature: int
    battery_temperature: int
    runtime: int  # uint32


@dataclass(frozen=True)
class RawSection3:
    """Battery-management status (input registers 80-107)."""

    battery_com_type: int
    bms_max_charge_current: int
    bms_max_discharge_current: int
    bms_charge_voltage_reference: int
    bms_discharge_cutoff: int
    bms_status: tuple[int, ...]  # 10 x uint16
    bms_inverter_status: int
    battery_parallel_count: int
    battery_capacity: int
    battery_current: int
    bms_event1: int
    bms_event2: int
    max_cell_voltage: int
    min_cell_voltage: int
    max_cell_temp: int
    min_cell_temp: int
    bms_fw_update_state: int
    cycle_count: int
    battery_inverter_voltage: int


RawSection = RawSection1 | RawSection2 | RawSection3

RAW_SECTION_TYPES: dict[Section, type[RawSection]] = {
    Section.SECTION1: RawSection1,
    Section.SECTION2: RawSection2,
    Section.SECTION3: RawSection3,
}


def decode_section(
    section: Section,
    data: bytes,
    offset: int = 0,
    frame_length: int | None = None,
) -> RawSection:
    """Decode one raw section from ``data`` at ``offset``.

    Raises:
        TruncatedFrame: If fewer bytes remain than the section requires
    """
    values = unpack_fields(SECTION_LAYOUTS[section], data, offset, frame_length)
    return RAW_SECTION_TYPES[section](**values)


def decode_sections(
    sections: tuple[Section, ...],
    data: bytes,
    offset: int,
    frame_length: int | None = None,
) -> dict[Section, RawSection]:
    """Decode consecutive sections starting at ``offset``.

    Sections are laid out back-to-back in the order given.
    """
    decoded: dict[Section, RawSection] = {}
    for section in sections:
        decoded[section] = decode_section(section, data, offset, frame_length)
        offset += SECTION_LAYOUTS[section].size
    return decoded


__all__ = [
    "RAW_SECTION_TYPES",
    "RawSection",
    "RawSection1",
    "RawSection2",
    "RawSection3",
    "decode_section",
    "decode_sections",
]
