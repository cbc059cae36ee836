# =============================================================================
# test_records.py - Object Record Tests
# =============================================================================
# Tests for Header, Text and End record formatting and validation.
# =============================================================================

import pytest

from sicasm.assembler.records import (
    MAX_TEXT_BYTES,
    EndRecord,
    HeaderRecord,
    RecordType,
    TextRecord,
    render_records,
    unit_size,
)


class TestHeaderRecord:
    """Tests for HeaderRecord."""

    def test_render(self):
        assert HeaderRecord("COPY", 0x1000, 0x107A).render() == "H^ COPY^ 001000^ 00107A"

    def test_record_type(self):
        assert HeaderRecord("P", 0, 0).record_type is RecordType.HEADER

    def test_start_too_wide(self):
        with pytest.raises(ValueError, match="six hex digits"):
            HeaderRecord("P", 0x1000000, 0)

    def test_negative_length(self):
        with pytest.raises(ValueError):
            HeaderRecord("P", 0, -1)


class TestTextRecord:
    """Tests for TextRecord."""

    def test_render_has_trailing_delimiter(self):
        record = TextRecord(0x1000, ("001006", "181006", "000005"))
        assert record.render() == "T^ 001000^ 001006^ 181006^ 000005^ "

    def test_length_and_end(self):
        record = TextRecord(0x2000, ("001006", "F1", "454F46"))
        assert record.length == 7
        assert record.end == 0x2007

    def test_to_bytes(self):
        assert TextRecord(0, ("4C0000", "F1")).to_bytes() == b"\x4c\x00\x00\xf1"

    def test_thirty_bytes_allowed(self):
        record = TextRecord(0, ("000000",) * 10)
        assert record.length == MAX_TEXT_BYTES

    def test_over_thirty_bytes_rejected(self):
        with pytest.raises(ValueError, match="limit 30"):
            TextRecord(0, ("000000",) * 10 + ("F1",))

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="at least one"):
            TextRecord(0, ())

    @pytest.mark.parametrize("unit", ["F", "XYZW", "00 1"])
    def test_bad_unit_rejected(self, unit):
        with pytest.raises(ValueError, match="hex bytes"):
            TextRecord(0, (unit,))

    def test_immutable(self):
        record = TextRecord(0, ("F1",))
        with pytest.raises(AttributeError):
            record.start = 5


class TestEndRecord:
    """Tests for EndRecord."""

    def test_render(self):
        assert EndRecord(0x1000).render() == "E^ 001000"

    def test_address_too_wide(self):
        with pytest.raises(ValueError):
            EndRecord(0x1000000)


def test_render_records_in_order():
    records = [HeaderRecord("P", 0, 3), TextRecord(0, ("4C0000",)), EndRecord(0)]
    assert render_records(records) == ["H^ P^ 000000^ 000003", "T^ 000000^ 4C0000^ ", "E^ 000000"]


def test_unit_size():
    assert unit_size("181006") == 3
    assert unit_size("F1") == 1
