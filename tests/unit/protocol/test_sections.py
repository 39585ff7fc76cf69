"""Unit tests for raw section decoding."""

from __future__ import annotations

import pytest

from pylxpstream.constants import Section
from pylxpstream.exceptions import TruncatedFrame
from pylxpstream.protocol.sections import (
    RawSection1,
    RawSection2,
    RawSection3,
    decode_section,
    decode_sections,
)


class TestDecodeSection1:
    """Section 1 widths and signedness."""

    def test_values(self, section1_bytes: bytes) -> None:
        """Test raw readings are decoded unscaled."""
        raw = decode_section(Section.SECTION1, section1_bytes)

        assert isinstance(raw, RawSection1)
        assert raw.status == 0x10
        assert raw.pv1_voltage == 3650
        assert raw.battery_voltage == 532
        assert raw.soc == 100
        assert raw.frequency_grid == 5998

    def test_signed_power(self, section1_bytes: bytes) -> None:
        """Test int16 fields keep negative values."""
        raw = decode_section(Section.SECTION1, section1_bytes)
        assert raw.power_to_grid == -50

    def test_soc_is_int8(self, section_builder) -> None:
        """Test SOC is a signed single byte."""
        raw = decode_section(Section.SECTION1, section_builder(Section.SECTION1, soc=-1))
        assert raw.soc == -1

    def test_status_is_unsigned(self, section_builder) -> None:
        """Test the status word is uint16."""
        raw = decode_section(Section.SECTION1, section_builder(Section.SECTION1, status=0xFFFF))
        assert raw.status == 0xFFFF


class TestDecodeSection2:
    """Section 2 32-bit counters."""

    def test_values(self, section2_bytes: bytes) -> None:
        """Test counters and temperatures."""
        raw = decode_section(Section.SECTION2, section2_bytes)

        assert isinstance(raw, RawSection2)
        assert raw.pv1_energy_total == 123456
        assert raw.fault_code == 16
        assert raw.inner_temperature == 42
        assert raw.battery_temperature == -3

    def test_unsigned_32bit(self, section2_bytes: bytes) -> None:
        """Test fault/warning codes and runtime are uint32."""
        raw = decode_section(Section.SECTION2, section2_bytes)

        assert raw.warning_code == 0x80000000
        assert raw.runtime == 0x80000001

    def test_signed_energy_total(self, section_builder) -> None:
        """Test energy totals are int32."""
        data = section_builder(Section.SECTION2, grid_total=-2)
        assert decode_section(Section.SECTION2, data).grid_total == -2


class TestDecodeSection3:
    """Section 3 BMS block."""

    def test_values(self, section3_bytes: bytes) -> None:
        """Test BMS fields and the status array."""
        raw = decode_section(Section.SECTION3, section3_bytes)

        assert isinstance(raw, RawSection3)
        assert raw.bms_status == (1, 2, 3, 4, 5, 6, 7, 8, 9, 10)
        assert raw.battery_current == -1250
        assert raw.cycle_count == 321
        assert raw.battery_inverter_voltage == 0

    def test_truncated(self, section3_bytes: bytes) -> None:
        """Test short data raises TruncatedFrame."""
        with pytest.raises(TruncatedFrame) as exc_info:
            decode_section(Section.SECTION3, section3_bytes[:-1])

        assert exc_info.value.required == 56


class TestDecodeSections:
    """Back-to-back section decoding."""

    def test_consecutive(
        self, section1_bytes: bytes, section2_bytes: bytes, section3_bytes: bytes
    ) -> None:
        """Test sections are read one after another from the offset."""
        data = b"\xee" * 5 + section1_bytes + section2_bytes + section3_bytes
        decoded = decode_sections(
            (Section.SECTION1, Section.SECTION2, Section.SECTION3), data, 5
        )

        assert list(decoded) == [Section.SECTION1, Section.SECTION2, Section.SECTION3]
        assert decoded[Section.SECTION1].pv1_voltage == 3650
        assert decoded[Section.SECTION2].fault_code == 16
        assert decoded[Section.SECTION3].cycle_count == 321

    def test_single(self, section2_bytes: bytes) -> None:
        """Test a single section at an offset."""
        decoded = decode_sections((Section.SECTION2,), b"\x00" * 35 + section2_bytes, 35)
        assert set(decoded) == {Section.SECTION2}

    def test_second_section_truncated(self, section1_bytes: bytes) -> None:
        """Test a missing later section fails the whole decode."""
        with pytest.raises(TruncatedFrame) as exc_info:
            decode_sections((Section.SECTION1, Section.SECTION2), section1_bytes + b"\x00", 0)

        assert exc_info.value.structure == "section2"
