"""LEB128 variable-length integers as used by the WebAssembly binary format.

Each byte carries 7 payload bits, least significant group first, and a
continuation bit (0x80). The fixed-width "varuint1", "varuint7" and "varint7"
fields are single bytes; they are read here so that every call site names the
exact interpretation its field uses.
"""

from .errors import DecodeError, TruncatedVarintError, UnexpectedEndError
from .reader import BinaryReader


def _read_varint_byte(reader: BinaryReader, count: int, start: int) -> int:
    if reader.max_varint_bytes is not None and count >= reader.max_varint_bytes:
        raise DecodeError("LEB128 integer too long", start)
    try:
        return reader.read_byte()
    except UnexpectedEndError as e:
        if count == 0:
            raise
        raise TruncatedVarintError("truncated LEB128 integer", e.offset) from e


def decode_varuint32(reader: BinaryReader) -> int:
    """Decode an unsigned LEB128 integer.

    No limit on the number of bytes is enforced unless the reader was built
    with ``max_varint_bytes``. Bits beyond 32 are discarded.
    """
    start = reader.position
    result = 0
    shift = 0
    count = 0
    while True:
        byte = _read_varint_byte(reader, count, start)
        count += 1
        result |= (byte & 0x7F) << shift
        if (byte & 0x80) == 0:
            break
        shift += 7
    return result & 0xFFFFFFFF


def decode_varint32(reader: BinaryReader) -> int:
    """Decode a signed LEB128 integer, wrapped to the signed 32-bit range."""
    start = reader.position
    result = 0
    shift = 0
    count = 0
    while True:
        byte = _read_varint_byte(reader, count, start)
        count += 1
        result |= (byte & 0x7F) << shift
        shift += 7
        if (byte & 0x80) == 0:
            break

    # Sign extend if the sign bit (bit 6 of the last byte) is set
    if byte & 0x40:
        result |= -(1 << shift)

    result &= 0xFFFFFFFF
    if result & 0x80000000:
        result -= 1 << 32
    return result


def skip_leb128(reader: BinaryReader) -> None:
    """Consume a LEB128 integer of any width without decoding it."""
    byte = reader.read_byte()
    while byte & 0x80:
        try:
            byte = reader.read_byte()
        except UnexpectedEndError as e:
            raise TruncatedVarintError("truncated LEB128 integer", e.offset) from e


def decode_varint7(reader: BinaryReader) -> int:
    """Read one byte as a signed 7-bit value (sign bit is bit 6)."""
    value = reader.read_byte() & 0x7F
    if value & 0x40:
        value -= 0x80
    return value


def decode_varuint7(reader: BinaryReader) -> int:
    """Read one raw byte."""
    return reader.read_byte()


def decode_varuint1(reader: BinaryReader) -> int:
    """Read one raw byte used as a flag."""
    return reader.read_byte()


def encode_varuint32(value: int) -> bytes:
    """Encode an unsigned integer as LEB128."""
    if value < 0:
        raise ValueError(f"cannot encode negative value {value} as unsigned")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value == 0:
            out.append(byte)
            return bytes(out)
        out.append(byte | 0x80)


def encode_varint32(value: int) -> bytes:
    """Encode a signed integer as LEB128."""
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if (value == 0 and not byte & 0x40) or (value == -1 and byte & 0x40):
            out.append(byte)
            return bytes(out)
        out.append(byte | 0x80)


def encoded_size(value: int) -> int:
    """Number of bytes ``encode_varuint32(value)`` produces."""
    size = 1
    while value > 0x7F:
        value >>= 7
        size += 1
    return size
