"""Bit-granular cursor over a byte buffer."""

import struct
from typing import Union

from .errors import Truncated

MSB_FIRST = "msb"
LSB_FIRST = "lsb"

MAX_BITS = 32

_UINT_FORMATS = {1: "B", 2: "H", 4: "L", 8: "Q"}
_BYTEORDER_PREFIX = {"little": "<", "big": ">"}

Buffer = Union[bytes, bytearray, memoryview]


class BitCursor:
    """Forward-only reader that consumes 1-32 bits at a time.

    With ``MSB_FIRST`` the bits of each byte are consumed from bit 7 down to
    bit 0 and the first bit read is the most significant bit of the result.
    With ``LSB_FIRST`` (the 802.11 bit numbering) bits are consumed from
    bit 0 up to bit 7 and the first bit read is the least significant bit of
    the result, so a 16-bit read over two bytes yields the little-endian word.

    A read that would run past the end of the buffer raises ``Truncated``
    and leaves the cursor where it was.
    """

    __slots__ = ("_buf", "_pos", "_order")

    def __init__(self, data: Buffer, order: str = MSB_FIRST):
        if order not in (MSB_FIRST, LSB_FIRST):
            raise ValueError(f"unknown bit order {order!r}")
        self._buf = memoryview(data).tobytes()
        self._pos = 0  # absolute bit position
        self._order = order

    # ---- position ----

    @property
    def offset(self) -> int:
        """Byte offset of the next unread bit."""
        return self._pos >> 3

    @property
    def bit_offset(self) -> int:
        """Bit position within the current byte (0 when aligned)."""
        return self._pos & 7

    @property
    def aligned(self) -> bool:
        return self._pos & 7 == 0

    @property
    def remaining_bits(self) -> int:
        return len(self._buf) * 8 - self._pos

    @property
    def remaining_bytes(self) -> int:
        return self.remaining_bits >> 3

    def __len__(self) -> int:
        return len(self._buf)

    # ---- reads ----

    def take_bits(self, n: int) -> int:
        """Consume the next ``n`` bits and return them as an unsigned int."""
        if not 1 <= n <= MAX_BITS:
            raise ValueError(f"bit count must be 1-{MAX_BITS}, got {n}")
        if n > self.remaining_bits:
            raise Truncated(self.offset, (n + 7) // 8, self.remaining_bytes)

        value = 0
        pos = self._pos
        for i in range(n):
            byte = self._buf[pos >> 3]
            if self._order == MSB_FIRST:
                bit = (byte >> (7 - (pos & 7))) & 1
                value = (value << 1) | bit
            else:
                bit = (byte >> (pos & 7)) & 1
                value |= bit << i
            pos += 1
        self._pos = pos
        return value

    def take_bool(self) -> bool:
        return self.take_bits(1) == 1

    def byte_align(self) -> None:
        """Fail unless the cursor sits on a byte boundary."""
        if not self.aligned:
            raise RuntimeError(
                f"cursor not byte aligned (byte {self.offset}, bit {self.bit_offset})"
            )

    def take_bytes(self, n: int) -> bytes:
        """Consume ``n`` whole bytes. The cursor must be byte aligned."""
        self.byte_align()
        start = self.offset
        if n < 0:
            raise ValueError(f"byte count must not be negative, got {n}")
        if n > len(self._buf) - start:
            raise Truncated(start, n, len(self._buf) - start)
        self._pos += n * 8
        return self._buf[start : start + n]

    def take_uint(self, size: int, byteorder: str = "little") -> int:
        """Consume a 1, 2, 4 or 8-byte unsigned integer in ``byteorder``."""
        if size not in _UINT_FORMATS:
            raise ValueError(f"unsupported integer size {size}")
        if byteorder not in _BYTEORDER_PREFIX:
            raise ValueError(f"unknown byte order {byteorder!r}")
        fmt = _BYTEORDER_PREFIX[byteorder] + _UINT_FORMATS[size]
        start = self.offset
        self.take_bytes(size)
        return struct.unpack_from(fmt, self._buf, start)[0]

    def __repr__(self) -> str:
        return (
            f"BitCursor(offset={self.offset}, bit={self.bit_offset}, "
            f"len={len(self._buf)}, order={self._order})"
        )
