"""Unit tests for record flattening and point/topic rendering."""

from __future__ import annotations

from pylxpstream.protocol.decoder import decode_frame
from pylxpstream.protocol.record import assemble_record
from pylxpstream.sinks import build_messages, build_point, record_fields


class TestRecordFields:
    """Test record_fields()."""

    def test_section1_only(self, section1_frame: bytes) -> None:
        """Test only loaded sections are flattened."""
        fields = record_fields(decode_frame(section1_frame).record)

        assert fields["PV1_Voltage"] == 365.0
        assert fields["SOC"] == 100.0
        assert fields["Status"] == 0x10
        assert "FaultCode" not in fields
        assert "Cycle_Count" not in fields
        assert len(fields) == 40

    def test_bms_status_expanded(self, section3_frame: bytes) -> None:
        """Test array fields expand to indexed keys."""
        fields = record_fields(decode_frame(section3_frame).record)

        assert "BMS_Status" not in fields
        assert [fields[f"BMS_Status_{i}"] for i in range(10)] == list(range(1, 11))

    def test_full_frame(self, full_frame: bytes) -> None:
        """Test every field appears for a read-all frame."""
        fields = record_fields(decode_frame(full_frame).record)

        assert fields["FaultCode"] == 16
        assert fields["Runtime"] == 0x80000001
        assert fields["MaxCell_Temp"] == 25.0
        assert len(fields) == 40 + 17 + 28

    def test_no_loaded_sections(self) -> None:
        """Test an empty record has no fields."""
        assert record_fields(assemble_record(b"CE12345678", {})) == {}


class TestBuildPoint:
    """Test InfluxDB point rendering."""

    def test_point(self, section2_frame: bytes) -> None:
        """Test measurement, tag, typed fields and timestamp."""
        point = build_point(decode_frame(section2_frame).record, "inverter", 1700000000)

        assert point is not None
        line = point.to_line_protocol()
        assert line.startswith("inverter,serial_number=CE12345678 ")
        assert line.endswith(" 1700000000")
        assert "FaultCode=16i" in line
        assert "PV1_Energy_Total=12345.6" in line
        assert "PV1_Voltage" not in line

    def test_no_timestamp(self, section1_frame: bytes) -> None:
        """Test the timestamp is optional."""
        point = build_point(decode_frame(section1_frame).record, "inverter")

        assert point is not None
        measurement, field_set = point.to_line_protocol().split(" ")
        assert measurement == "inverter,serial_number=CE12345678"
        assert "Status=16i" in field_set

    def test_escaping(self, frame_builder, section1_bytes: bytes) -> None:
        """Test spaces and commas are escaped in identifiers."""
        frame = frame_builder(
            section1_bytes, packet_length=111, inverter_serial=b"CE 1,2\x00\x00\x00\x00"
        )
        point = build_point(decode_frame(frame).record, "my inverter")

        assert point is not None
        assert point.to_line_protocol().startswith(r"my\ inverter,serial_number=CE\ 1\,2 ")

    def test_blank_serial_untagged(self, frame_builder, section1_bytes: bytes) -> None:
        """Test an all-fill serial number produces no empty tag."""
        frame = frame_builder(section1_bytes, packet_length=111, inverter_serial=b"\x00" * 10)
        point = build_point(decode_frame(frame).record, "inverter", 1700000000)

        assert point is not None
        line = point.to_line_protocol()
        assert line.startswith("inverter Status=16i,")
        assert "serial_number" not in line

    def test_empty_record(self) -> None:
        """Test records without loaded sections render nothing."""
        assert build_point(assemble_record(b"CE12345678", {}), "inverter") is None



class TestBuildMessages:
    """Test MQTT topic rendering."""

    def test_topics(self, section1_frame: bytes) -> None:
        """Test one message per field under prefix/serial."""
        messages = dict(build_messages(decode_frame(section1_frame).record, "lxp"))

        assert messages["lxp/CE12345678/PV1_Voltage"] == "365.0"
        assert messages["lxp/CE12345678/Status"] == "16"
        assert len(messages) == 40

    def test_trailing_slash_prefix(self, section3_frame: bytes) -> None:
        """Test a trailing slash in the prefix is not doubled."""
        topics = [topic for topic, _ in build_messages(decode_frame(section3_frame).record, "home/")]

        assert "home/CE12345678/BMS_Status_9" in topics
        assert all(topic.startswith("home/CE12345678/") for topic in topics)

    def test_serial_wildcards_replaced(self, frame_builder, section1_bytes: bytes) -> None:
        """Test wildcard and separator characters cannot leak into topics."""
        frame = frame_builder(
            section1_bytes, packet_length=111, inverter_serial=b"CE+1/2#\x00\x00\x00"
        )
        messages = dict(build_messages(decode_frame(frame).record, "lxp"))

        assert messages["lxp/CE_1_2_/Status"] == "16"
        assert all(topic.count("/") == 2 for topic in messages)
        assert not any("+" in topic or "#" in topic for topic in messages)

    def test_blank_serial(self, frame_builder, section1_bytes: bytes) -> None:
        """Test an all-fill serial number still yields a non-empty topic level."""
        frame = frame_builder(section1_bytes, packet_length=111, inverter_serial=b"\xff" * 10)
        topics = [topic for topic, _ in build_messages(decode_frame(frame).record, "lxp")]

        assert "lxp/unknown/PV1_Voltage" in topics
