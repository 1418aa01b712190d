"""Pure Python WebAssembly module decoder.

Decodes the sections of a WebAssembly binary into immutable Python objects.
"""

__version__ = "0.1.0"

from .decoder import decode_module, decode_section
from .reader import BinaryReader
from .leb128 import (
    decode_varuint32,
    decode_varint32,
    encode_varuint32,
    encode_varint32,
    encoded_size,
)
from .eval import evaluate
from .errors import (
    WasmError,
    DecodeError,
    BadMagicError,
    UnsupportedVersionError,
    UnexpectedEndError,
    TruncatedVarintError,
    UnknownNameDiscriminantError,
    SectionLengthMismatchError,
    CorruptionError,
    UnsupportedInstructionError,
)
from .types import Module, Section, SectionID, ExternalKind

__all__ = [
    # Main API
    "decode_module",
    "decode_section",
    "evaluate",
    # Decoder internals (for testing)
    "BinaryReader",
    "decode_varuint32",
    "decode_varint32",
    "encode_varuint32",
    "encode_varint32",
    "encoded_size",
    # Types
    "Module",
    "Section",
    "SectionID",
    "ExternalKind",
    # Errors
    "WasmError",
    "DecodeError",
    "BadMagicError",
    "UnsupportedVersionError",
    "UnexpectedEndError",
    "TruncatedVarintError",
    "UnknownNameDiscriminantError",
    "SectionLengthMismatchError",
    "CorruptionError",
    "UnsupportedInstructionError",
]
