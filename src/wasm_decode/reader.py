"""Forward-only byte cursor with position tracking."""

from .errors import UnexpectedEndError


class BinaryReader:
    """A reader for binary data with position tracking.

    ``position`` counts the bytes consumed so far. It is used for error
    offsets and for section length accounting, never to move backwards.
    """

    def __init__(self, data: bytes, max_varint_bytes: int | None = None) -> None:
        self.data = bytes(data)
        self.position = 0
        # Optional bound on LEB128 length, see leb128.decode_varuint32
        self.max_varint_bytes = max_varint_bytes

    def read_byte(self) -> int:
        """Read a single byte."""
        if self.position >= len(self.data):
            raise UnexpectedEndError("unexpected end of data", self.position)
        byte = self.data[self.position]
        self.position += 1
        return byte

    def read_bytes(self, n: int) -> bytes:
        """Read exactly n bytes."""
        if n < 0:
            raise ValueError(f"cannot read a negative number of bytes: {n}")
        if self.position + n > len(self.data):
            raise UnexpectedEndError(
                f"unexpected end of data: wanted {n} bytes, {self.remaining()} left",
                self.position,
            )
        result = self.data[self.position : self.position + n]
        self.position += n
        return result

    read_exact = read_bytes

    def skip(self, n: int) -> None:
        """Discard n bytes."""
        self.read_bytes(n)

    def eof(self) -> bool:
        """Check if at end of data."""
        return self.position >= len(self.data)

    def remaining(self) -> int:
        """Return number of remaining bytes."""
        return len(self.data) - self.position
