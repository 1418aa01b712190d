"""Exception classes for the WebAssembly decoder."""

from contextlib import contextmanager
from typing import Iterator


class WasmError(Exception):
    """Base class for all WebAssembly decoder errors."""

    pass


class DecodeError(WasmError):
    """Error during binary format decoding.

    Carries the byte offset at which the problem was detected and a
    breadcrumb trail of the decoding steps that were active at the time,
    outermost first. ``str()`` renders as ``[0x%06x] <context>: <cause>``.
    """

    def __init__(self, cause: str, offset: int | None = None) -> None:
        super().__init__(cause)
        self.cause = cause
        self.offset = offset
        self.context: list[str] = []

    def add_context(self, label: str) -> None:
        """Prepend a breadcrumb while the error unwinds."""
        self.context.insert(0, label)

    def __str__(self) -> str:
        message = ": ".join([*self.context, self.cause])
        if self.offset is None:
            return message
        return f"[0x{self.offset:06x}] {message}"


class BadMagicError(DecodeError):
    """The input does not start with the WebAssembly magic number."""

    pass


class UnsupportedVersionError(DecodeError):
    """The binary format version is not the supported one."""

    pass


class UnexpectedEndError(DecodeError):
    """The input ended in the middle of a field."""

    pass


class TruncatedVarintError(UnexpectedEndError):
    """The input ended in the middle of a LEB128 integer."""

    pass


class UnknownNameDiscriminantError(DecodeError):
    """A name subsection carried an unknown type byte."""

    def __init__(self, discriminant: int, offset: int | None = None) -> None:
        super().__init__(f"unknown name type 0x{discriminant:02x}", offset)
        self.discriminant = discriminant


class SectionLengthMismatchError(DecodeError):
    """A section decoder did not consume exactly its declared length."""

    def __init__(self, expected: int, actual: int, offset: int | None = None) -> None:
        super().__init__(
            f"section not fully read, expected {expected} but {actual} were read",
            offset,
        )
        self.expected = expected
        self.actual = actual


class CorruptionError(DecodeError):
    """A section id that can only appear if the cursor lost sync."""

    pass


class UnsupportedInstructionError(DecodeError):
    """An opcode outside the constant-expression subset."""

    def __init__(self, opcode: int, name: str | None = None, offset: int | None = None) -> None:
        cause = f"unsupported instruction 0x{opcode:02x}"
        if name is not None:
            cause += f" ({name})"
        super().__init__(cause, offset)
        self.opcode = opcode


@contextmanager
def context(label: str) -> Iterator[None]:
    """Add ``label`` to any DecodeError raised inside the block."""
    try:
        yield
    except DecodeError as e:
        e.add_context(label)
        raise
