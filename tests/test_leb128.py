"""Test LEB128 variable-length integer encoding."""

import pytest
from wasm_decode.reader import BinaryReader
from wasm_decode.leb128 import (
    decode_varint7,
    decode_varint32,
    decode_varuint1,
    decode_varuint7,
    decode_varuint32,
    encode_varint32,
    encode_varuint32,
    encoded_size,
)
from wasm_decode.errors import (
    DecodeError,
    TruncatedVarintError,
    UnexpectedEndError,
)


class TestUnsigned:
    def test_decode_zero(self):
        reader = BinaryReader(bytes([0x00]))
        assert decode_varuint32(reader) == 0

    def test_decode_single_byte(self):
        reader = BinaryReader(bytes([0x01]))
        assert decode_varuint32(reader) == 1

        reader = BinaryReader(bytes([0x7F]))
        assert decode_varuint32(reader) == 127

    def test_decode_multibyte(self):
        # 128 = 0x80 0x01
        reader = BinaryReader(bytes([0x80, 0x01]))
        assert decode_varuint32(reader) == 128

        # 624485 = 0xE5 0x8E 0x26
        reader = BinaryReader(bytes([0xE5, 0x8E, 0x26]))
        assert decode_varuint32(reader) == 624485
        assert reader.position == 3

    def test_decode_max_u32(self):
        # 2^32 - 1 = 0xFF 0xFF 0xFF 0xFF 0x0F
        reader = BinaryReader(bytes([0xFF, 0xFF, 0xFF, 0xFF, 0x0F]))
        assert decode_varuint32(reader) == 0xFFFFFFFF

    def test_overlong_encoding_accepted_by_default(self):
        reader = BinaryReader(bytes([0x80, 0x80, 0x80, 0x80, 0x80, 0x00]))
        assert decode_varuint32(reader) == 0
        assert reader.position == 6

    def test_max_varint_bytes(self):
        reader = BinaryReader(
            bytes([0x80, 0x80, 0x80, 0x80, 0x80, 0x00]), max_varint_bytes=5
        )
        with pytest.raises(DecodeError, match="too long") as excinfo:
            decode_varuint32(reader)
        assert excinfo.value.offset == 0

    def test_max_varint_bytes_allows_five_byte_u32(self):
        reader = BinaryReader(
            bytes([0xFF, 0xFF, 0xFF, 0xFF, 0x0F]), max_varint_bytes=5
        )
        assert decode_varuint32(reader) == 0xFFFFFFFF

    def test_truncated(self):
        reader = BinaryReader(bytes([0x80, 0x80]))
        with pytest.raises(TruncatedVarintError) as excinfo:
            decode_varuint32(reader)
        assert excinfo.value.offset == 2

    def test_empty_input_is_unexpected_end(self):
        reader = BinaryReader(b"")
        with pytest.raises(UnexpectedEndError) as excinfo:
            decode_varuint32(reader)
        assert not isinstance(excinfo.value, TruncatedVarintError)


class TestSigned:
    def test_decode_zero(self):
        reader = BinaryReader(bytes([0x00]))
        assert decode_varint32(reader) == 0

    def test_decode_positive(self):
        reader = BinaryReader(bytes([0x01]))
        assert decode_varint32(reader) == 1

        reader = BinaryReader(bytes([0x3F]))
        assert decode_varint32(reader) == 63

    def test_decode_negative(self):
        # -1 = 0x7F
        reader = BinaryReader(bytes([0x7F]))
        assert decode_varint32(reader) == -1

        # -123456 = 0xC0 0xBB 0x78
        reader = BinaryReader(bytes([0xC0, 0xBB, 0x78]))
        assert decode_varint32(reader) == -123456

    def test_decode_min_i32(self):
        # -2^31 = 0x80 0x80 0x80 0x80 0x78
        reader = BinaryReader(bytes([0x80, 0x80, 0x80, 0x80, 0x78]))
        assert decode_varint32(reader) == -(2**31)

    def test_decode_offsets(self):
        reader = BinaryReader(bytes([0x80, 0x80, 0x04]))
        assert decode_varint32(reader) == 0x10000

        reader = BinaryReader(bytes([0xA0, 0xFE, 0x04]))
        assert decode_varint32(reader) == 0x13F20

    def test_truncated(self):
        reader = BinaryReader(bytes([0xC0]))
        with pytest.raises(TruncatedVarintError):
            decode_varint32(reader)


class TestSingleByteFields:
    def test_varint7_sign_bit_is_bit_six(self):
        assert decode_varint7(BinaryReader(bytes([0x7F]))) == -1
        assert decode_varint7(BinaryReader(bytes([0x60]))) == -0x20
        assert decode_varint7(BinaryReader(bytes([0x40]))) == -0x40
        assert decode_varint7(BinaryReader(bytes([0x3F]))) == 0x3F

    def test_varint7_drops_high_bit(self):
        assert decode_varint7(BinaryReader(bytes([0xFF]))) == -1
        assert decode_varint7(BinaryReader(bytes([0x81]))) == 1

    def test_varuint7_and_varuint1_are_raw(self):
        assert decode_varuint7(BinaryReader(bytes([0xFF]))) == 0xFF
        assert decode_varuint1(BinaryReader(bytes([0x01]))) == 1
        assert decode_varuint1(BinaryReader(bytes([0x02]))) == 2

    def test_single_byte_fields_consume_one_byte(self):
        reader = BinaryReader(bytes([0x80, 0x80, 0x80]))
        decode_varint7(reader)
        decode_varuint7(reader)
        decode_varuint1(reader)
        assert reader.eof()


class TestEncoding:
    def test_encode_unsigned(self):
        assert encode_varuint32(0) == bytes([0x00])
        assert encode_varuint32(127) == bytes([0x7F])
        assert encode_varuint32(128) == bytes([0x80, 0x01])
        assert encode_varuint32(624485) == bytes([0xE5, 0x8E, 0x26])

    def test_encode_signed(self):
        assert encode_varint32(-1) == bytes([0x7F])
        assert encode_varint32(63) == bytes([0x3F])
        assert encode_varint32(64) == bytes([0xC0, 0x00])
        assert encode_varint32(-123456) == bytes([0xC0, 0xBB, 0x78])

    def test_encode_unsigned_rejects_negative(self):
        with pytest.raises(ValueError):
            encode_varuint32(-1)

    @pytest.mark.parametrize(
        "value,size",
        [
            (0, 1),
            (127, 1),
            (128, 2),
            (16383, 2),
            (16384, 3),
            (2**21 - 1, 3),
            (2**21, 4),
            (2**28, 5),
            (0xFFFFFFFF, 5),
        ],
    )
    def test_encoded_size(self, value, size):
        assert encoded_size(value) == size
        assert len(encode_varuint32(value)) == size

    @pytest.mark.parametrize(
        "value", [0, 1, 127, 128, 300, 65535, 0x10000, 2**31, 0xFFFFFFFF]
    )
    def test_unsigned_round_trip(self, value):
        encoded = encode_varuint32(value)
        reader = BinaryReader(encoded)
        assert decode_varuint32(reader) == value
        assert reader.position == encoded_size(value)

    @pytest.mark.parametrize("value", [0, -1, 63, -64, 64, -65, 2**31 - 1, -(2**31)])
    def test_signed_round_trip(self, value):
        assert decode_varint32(BinaryReader(encode_varint32(value))) == value
