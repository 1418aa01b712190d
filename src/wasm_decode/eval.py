"""Constant expression support.

Offsets of element and data segments, and the initial values of globals, are
stored as small instruction sequences terminated by ``end``. This module can
capture those sequences as raw bytes and evaluate the ``i32.const`` subset
that segment offsets use in practice.
"""

from . import opcodes
from .errors import UnsupportedInstructionError, context
from .leb128 import decode_varint32, skip_leb128
from .reader import BinaryReader


def evaluate(source: bytes | BinaryReader) -> list[int]:
    """Evaluate a constant expression and return the resulting stack.

    Only ``i32.const`` is supported; any other instruction before ``end``
    raises UnsupportedInstructionError. Running out of input before ``end``
    raises UnexpectedEndError.
    """
    reader = source if isinstance(source, BinaryReader) else BinaryReader(source)
    stack: list[int] = []
    while True:
        offset = reader.position
        opcode = reader.read_byte()
        if opcode == opcodes.END:
            return stack
        if opcode == opcodes.I32_CONST:
            with context("i32.const"):
                stack.append(decode_varint32(reader))
            continue
        raise UnsupportedInstructionError(
            opcode, opcodes.OPCODE_NAMES.get(opcode), offset
        )


def read_const_expr(reader: BinaryReader) -> bytes:
    """Read the raw bytes of a constant expression, including its ``end``.

    Immediates of known opcodes are skipped according to their encoding, so
    an immediate byte equal to 0x0B does not terminate the expression. From
    the first unknown opcode on, bytes are taken up to the next 0x0B.
    """
    start = reader.position
    while True:
        opcode = reader.read_byte()
        if opcode == opcodes.END:
            break
        if opcode in opcodes.NO_IMMEDIATE:
            continue
        if opcode in opcodes.LEB128_IMMEDIATE:
            skip_leb128(reader)
        elif opcode in opcodes.FIXED_IMMEDIATE:
            reader.skip(opcodes.FIXED_IMMEDIATE[opcode])
        else:
            while reader.read_byte() != opcodes.END:
                pass
            break
    return reader.data[start : reader.position]
