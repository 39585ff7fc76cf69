"""Frame layout and calibration tables.

This package is the single source of truth for the wire format:

- layout: byte layout of the header, the translated-data sub-header and the
  three telemetry sections
- scaling: per-field divisor table for raw → engineering-unit conversion
"""

from pylxpstream.registers.layout import (
    BY_NAME,
    BY_SINK_FIELD,
    HEADER_LAYOUT,
    SECTION1_LAYOUT,
    SECTION2_LAYOUT,
    SECTION3_LAYOUT,
    SECTION_LAYOUTS,
    SECTION_OF,
    TRANSLATED_DATA_LAYOUT,
    FieldDefinition,
    SectionLayout,
    unpack_fields,
)
from pylxpstream.registers.scaling import (
    SCALE_TABLE,
    UNSCALED_FIELDS,
    ScaleFactor,
    apply_scale,
    scale_value,
)

__all__ = [
    # Layout
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
    # Scaling
    "SCALE_TABLE",
    "UNSCALED_FIELDS",
    "ScaleFactor",
    "apply_scale",
    "scale_value",
]
