"""Tests for the binary reader."""

import pytest
from wasm_decode.reader import BinaryReader
from wasm_decode.errors import DecodeError, UnexpectedEndError


class TestBinaryReader:
    """Test the binary reader helper class."""

    def test_read_bytes(self):
        reader = BinaryReader(bytes([1, 2, 3, 4, 5]))
        assert reader.read_bytes(3) == bytes([1, 2, 3])
        assert reader.read_bytes(2) == bytes([4, 5])

    def test_read_exact_is_read_bytes(self):
        reader = BinaryReader(bytes([9, 8]))
        assert reader.read_exact(2) == bytes([9, 8])

    def test_read_zero_bytes(self):
        reader = BinaryReader(b"")
        assert reader.read_bytes(0) == b""
        assert reader.eof()

    def test_read_byte(self):
        reader = BinaryReader(bytes([0xAB, 0xCD]))
        assert reader.read_byte() == 0xAB
        assert reader.read_byte() == 0xCD

    def test_position_tracking(self):
        reader = BinaryReader(bytes([1, 2, 3, 4, 5]))
        assert reader.position == 0
        reader.read_byte()
        assert reader.position == 1
        reader.read_bytes(2)
        assert reader.position == 3
        reader.skip(1)
        assert reader.position == 4
        assert reader.remaining() == 1

    def test_eof(self):
        reader = BinaryReader(bytes([1, 2]))
        assert not reader.eof()
        reader.read_bytes(2)
        assert reader.eof()

    def test_read_past_eof_raises(self):
        reader = BinaryReader(bytes([1]))
        reader.read_byte()
        with pytest.raises(UnexpectedEndError) as excinfo:
            reader.read_byte()
        assert excinfo.value.offset == 1
        assert isinstance(excinfo.value, DecodeError)

    def test_short_read_raises_without_consuming(self):
        reader = BinaryReader(bytes([1, 2, 3]))
        reader.read_byte()
        with pytest.raises(UnexpectedEndError, match="wanted 5 bytes, 2 left"):
            reader.read_bytes(5)
        assert reader.position == 1

    def test_accepts_bytearray(self):
        reader = BinaryReader(bytearray([7]))
        assert reader.read_byte() == 7
