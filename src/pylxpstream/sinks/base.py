"""Common sink interface and record flattening.

Sinks receive one TelemetryRecord per accepted frame and emit only the
sections that frame loaded. No sink merges values across frames; a frame
carrying section 2 produces section 2 fields and nothing else.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pylxpstream.protocol.record import TelemetryRecord
from pylxpstream.registers.layout import SECTION_LAYOUTS


def record_fields(record: TelemetryRecord) -> dict[str, float | int]:
    """Flatten the loaded sections of a record into sink fields.

    Keys are the external field names (``PV1_Voltage``, ``FaultCode``, ...).
    Array fields expand to one key per element (``BMS_Status_0`` ...).

    Returns:
        Ordered mapping of field name to scaled value. Empty when the
        record has no loaded section.
    """
    result: dict[str, float | int] = {}
    for section in record.loaded_sections:
        scaled = record.section(section).scaled
        for field_def in SECTION_LAYOUTS[section].value_fields:
            value = getattr(scaled, field_def.canonical_name)  # type: ignore[arg-type]
            if field_def.is_array:
                for index, item in enumerate(value):
                    result[f"{field_def.sink_field}_{index}"] = item
            else:
                result[field_def.sink_field] = value  # type: ignore[index]
    return result


@runtime_checkable
class RecordSink(Protocol):
    """Destination for decoded telemetry records."""

    name: str

    async def write(self, record: TelemetryRecord) -> None:
        """Deliver one record.

        Raises:
            SinkError: If the record could not be delivered
        """
        ...

    async def close(self) -> None:
        """Release connections held by the sink."""
        ...


__all__ = [
    "RecordSink",
    "record_fields",
]
