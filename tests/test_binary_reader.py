"""Tests for the bounds-aware binary reader."""

import struct

import pytest

from elfscope.core.errors import OutOfBoundsError
from elfscope.parsers.binary_reader import BinaryReader


class TestIntegerReads:

    def test_little_endian_widths(self):
        data = struct.pack("<BHIQ", 0xAB, 0x1234, 0xDEADBEEF, 0x0102030405060708)
        reader = BinaryReader(data)
        assert reader.read_u8(0) == 0xAB
        assert reader.read_u16(1) == 0x1234
        assert reader.read_u32(3) == 0xDEADBEEF
        assert reader.read_u64(7) == 0x0102030405060708

    def test_big_endian_widths(self):
        data = struct.pack(">HIQ", 0x1234, 0xDEADBEEF, 0x0102030405060708)
        reader = BinaryReader(data, byte_order="big")
        assert reader.read_u16(0) == 0x1234
        assert reader.read_u32(2) == 0xDEADBEEF
        assert reader.read_u64(6) == 0x0102030405060708

    def test_u64_full_range_is_exact(self):
        reader = BinaryReader(b"\xff" * 8)
        assert reader.read_u64(0) == 2**64 - 1

    def test_byte_order_changes_interpretation(self):
        data = b"\x01\x00"
        assert BinaryReader(data).read_u16(0) == 1
        assert BinaryReader(data, "big").read_u16(0) == 256

    def test_with_byte_order_shares_buffer(self):
        reader = BinaryReader(b"\x00\x01")
        swapped = reader.with_byte_order("big")
        assert swapped.byte_order == "big"
        assert swapped.data is reader.data
        assert swapped.read_u16(0) == 1

    def test_unpack_record(self):
        data = struct.pack(">IIQ", 1, 2, 3)
        assert BinaryReader(data, "big").unpack("IIQ", 0) == (1, 2, 3)

    def test_unknown_byte_order_rejected(self):
        with pytest.raises(ValueError):
            BinaryReader(b"", byte_order="middle")


class TestBounds:

    def test_read_at_exact_end_succeeds(self):
        reader = BinaryReader(b"\x00" * 4)
        assert reader.read_u32(0) == 0
        assert reader.read_bytes(4, 0) == b""

    @pytest.mark.parametrize("offset", [1, 3, 4, 100])
    def test_read_past_end_raises(self, offset):
        reader = BinaryReader(b"\x00" * 4)
        with pytest.raises(OutOfBoundsError):
            reader.read_u32(offset)

    def test_negative_offset_raises(self):
        with pytest.raises(OutOfBoundsError):
            BinaryReader(b"\x00" * 8).read_bytes(-1, 2)

    def test_error_carries_details(self):
        reader = BinaryReader(b"\x00" * 10)
        with pytest.raises(OutOfBoundsError) as info:
            reader.read_bytes(8, 4, field="e_phoff")
        err = info.value
        assert err.field == "e_phoff"
        assert err.offset == 8
        assert err.length == 4
        assert err.available == 10
        assert "e_phoff" in str(err)

    def test_huge_size_does_not_allocate(self):
        reader = BinaryReader(b"\x00" * 16)
        with pytest.raises(OutOfBoundsError):
            reader.read_bytes(0, 2**64 - 1)


class TestByteRanges:

    def test_read_bytes(self):
        reader = BinaryReader(b"abcdef")
        assert reader.read_bytes(1, 3) == b"bcd"

    def test_read_hex_is_lowercase(self):
        reader = BinaryReader(b"\xDE\xAD\xBE\xEF")
        assert reader.read_hex(0, 4) == "deadbeef"

    def test_buffer_is_copied(self):
        source = bytearray(b"\x01\x02")
        reader = BinaryReader(source)
        source[0] = 0xFF
        assert reader.read_u8(0) == 1
        assert len(reader) == 2
