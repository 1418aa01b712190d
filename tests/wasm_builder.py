"""Helpers for assembling WebAssembly binaries in tests."""

from wasm_decode.leb128 import encode_varuint32

PREAMBLE = bytes([0x00, 0x61, 0x73, 0x6D, 0x01, 0x00, 0x00, 0x00])


def uleb(value: int) -> bytes:
    return encode_varuint32(value)


def name(text: str) -> bytes:
    data = text.encode("utf-8")
    return uleb(len(data)) + data


def vector(*entries: bytes) -> bytes:
    return uleb(len(entries)) + b"".join(entries)


def section(section_id: int, payload: bytes) -> bytes:
    return bytes([section_id]) + uleb(len(payload)) + payload


def name_subsection(name_type: int, payload: bytes) -> bytes:
    return bytes([name_type]) + uleb(len(payload)) + payload


def module_bytes(*sections: bytes) -> bytes:
    return PREAMBLE + b"".join(sections)


# (i32) -> i32
FUNC_TYPE_I32_I32 = bytes([0x60, 0x01, 0x7F, 0x01, 0x7F])
TYPE_SECTION = section(0x01, vector(FUNC_TYPE_I32_I32))
