"""Calibration table converting raw register values to engineering units.

The divisor table is the most compatibility-sensitive artifact in the
package: a wrong entry silently corrupts every downstream reading. It is
kept as data so it can be audited and tested field by field.

Two disjoint sets cover every value field of the three sections:

- SCALE_TABLE: fields converted to float by dividing by a ScaleFactor
  (ScaleFactor.NONE widens to float without scaling).
- UNSCALED_FIELDS: codes, counters and bitfields passed through with their
  integer type preserved.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ScaleFactor(int, Enum):
    """Divisor applied to raw register value."""

    NONE = 1
    DIV_10 = 10
    DIV_100 = 100
    DIV_1000 = 1000


_DIV_10_FIELDS = (
    # Section 1 voltages
    "pv1_voltage",
    "pv2_voltage",
    "pv3_voltage",
    "battery_voltage",
    "voltage_ac_r",
    "voltage_ac_s",
    "voltage_ac_t",
    "voltage_eps_r",
    "voltage_eps_s",
    "voltage_eps_t",
    # Section 1 daily energy (0.1 kWh)
    "pv1_energy_today",
    "pv2_energy_today",
    "pv3_energy_today",
    "active_inverter_energy_today",
    "ac_charging_today",
    "charging_today",
    "discharging_today",
    "eps_today",
    "exported_today",
    "grid_today",
    # Section 2 lifetime energy (0.1 kWh)
    "pv1_energy_total",
    "pv2_energy_total",
    "pv3_energy_total",
    "active_inverter_energy_total",
    "ac_charging_total",
    "charging_total",
    "discharging_total",
    "eps_total",
    "exported_total",
    "grid_total",
    # Section 3 BMS voltages
    "bms_charge_voltage_reference",
    "bms_discharge_cutoff",
    "max_cell_voltage",
    "min_cell_voltage",
    "battery_inverter_voltage",
)

_DIV_100_FIELDS = (
    "frequency_grid",
    "frequency_eps",
    "inductor_current",
    "bms_max_charge_current",
    "bms_max_discharge_current",
    "battery_current",
)

_DIV_1000_FIELDS = ("grid_power_factor",)

_PASS_THROUGH_FIELDS = (
    "soc",
    "soh",
    "pv1_power",
    "pv2_power",
    "pv3_power",
    "charge_power",
    "discharge_power",
    "active_charge_power",
    "active_inverter_power",
    "active_eps_power",
    "apparent_eps_power",
    "power_to_grid",
    "power_from_grid",
    "inner_temperature",
    "radiator1_temperature",
    "radiator2_temperature",
    "battery_temperature",
    "battery_capacity",
    "max_cell_temp",
    "min_cell_temp",
    "bus1_voltage",
    "bus2_voltage",
)

SCALE_TABLE: dict[str, ScaleFactor] = {
    **dict.fromkeys(_DIV_10_FIELDS, ScaleFactor.DIV_10),
    **dict.fromkeys(_DIV_100_FIELDS, ScaleFactor.DIV_100),
    **dict.fromkeys(_DIV_1000_FIELDS, ScaleFactor.DIV_1000),
    **dict.fromkeys(_PASS_THROUGH_FIELDS, ScaleFactor.NONE),
}

UNSCALED_FIELDS: frozenset[str] = frozenset(
    {
        "status",
        "fault_code",
        "warning_code",
        "runtime",
        "bms_status",
        "bms_inverter_status",
        "battery_parallel_count",
        "bms_event1",
        "bms_event2",
        "bms_fw_update_state",
        "cycle_count",
        "battery_com_type",
    }
)


def apply_scale(value: int | float, factor: ScaleFactor) -> float:
    """Apply a scale factor to a raw value.

    Args:
        value: Raw value from the register
        factor: Divisor to apply

    Returns:
        Scaled value as float

    Example:
        >>> apply_scale(3650, ScaleFactor.DIV_10)
        365.0
    """
    if factor is ScaleFactor.NONE:
        return float(value)
    return value / factor.value


def scale_value(name: str, value: Any) -> Any:
    """Scale one raw field value by canonical name.

    Floated fields return float, unscaled fields are returned unchanged
    (tuples stay tuples).

    Raises:
        KeyError: If the field appears in neither table
    """
    if name in UNSCALED_FIELDS:
        return value
    return apply_scale(value, SCALE_TABLE[name])


__all__ = [
    "SCALE_TABLE",
    "UNSCALED_FIELDS",
    "ScaleFactor",
    "apply_scale",
    "scale_value",
]
