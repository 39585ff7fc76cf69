"""Register dispatch: which sections a data frame carries.

The dongle reports telemetry in one of four shapes, identified by the
start register in the translated sub-header and the declared packet length.
Anything else is rejected wholesale; there is no best-effort decode.

| register | packet_length | sections          |
|----------|---------------|-------------------|
| 0        | 285           | 1, 2, 3           |
| 0        | 111           | 1                 |
| 40       | 111           | 2                 |
| 80       | 111           | 3                 |

Dispatch depends only on the frame's own header; no state is carried
between frames.
"""

from __future__ import annotations

from dataclasses import dataclass

from pylxpstream.constants import (
    PACKET_LENGTH_ALL_BLOCKS,
    PACKET_LENGTH_SINGLE_BLOCK,
    DeviceFunction,
    Section,
)
from pylxpstream.exceptions import UnrecognizedFrame, UnsupportedDeviceFunction


@dataclass(frozen=True)
class DispatchRule:
    """One recognised (register, packet_length) combination."""

    register: int
    packet_length: int
    sections: tuple[Section, ...]
    label: str


DISPATCH_TABLE: tuple[DispatchRule, ...] = (
    DispatchRule(
        0,
        PACKET_LENGTH_ALL_BLOCKS,
        (Section.SECTION1, Section.SECTION2, Section.SECTION3),
        "read_all",
    ),
    DispatchRule(0, PACKET_LENGTH_SINGLE_BLOCK, (Section.SECTION1,), "read_section1"),
    DispatchRule(40, PACKET_LENGTH_SINGLE_BLOCK, (Section.SECTION2,), "read_section2"),
    DispatchRule(80, PACKET_LENGTH_SINGLE_BLOCK, (Section.SECTION3,), "read_section3"),
)

BY_KEY: dict[tuple[int, int], DispatchRule] = {
    (rule.register, rule.packet_length): rule for rule in DISPATCH_TABLE
}


def select_sections(
    device_function: int,
    register: int,
    packet_length: int,
    frame_length: int | None = None,
) -> DispatchRule:
    """Select the decode path for a data frame.

    Args:
        device_function: Modbus function code from the sub-header
        register: Start register from the sub-header
        packet_length: Declared packet length from the header
        frame_length: Total frame length, reported in errors

    Returns:
        The matching DispatchRule

    Raises:
        UnsupportedDeviceFunction: If device_function is not read-input
        UnrecognizedFrame: If (register, packet_length) is not in the table
    """
    if device_function != DeviceFunction.READ_INPUT:
        raise UnsupportedDeviceFunction(device_function, frame_length)

    rule = BY_KEY.get((register, packet_length))
    if rule is None:
        raise UnrecognizedFrame(register, packet_length, frame_length)
    return rule


__all__ = [
    "BY_KEY",
    "DISPATCH_TABLE",
    "DispatchRule",
    "select_sections",
]
