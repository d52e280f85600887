"""Decode failures raised by the 802.11 frame decoder."""

from typing import Optional


class DecodeError(Exception):
    """Raised when a buffer cannot be decoded into a frame.

    Attributes:
        offset: Byte offset at which decoding stopped.
        state: Decoder state the failure was raised from (set by the
               frame decoder, ``None`` when raised by a standalone helper).
    """

    def __init__(self, message: str, offset: int = 0):
        super().__init__(message)
        self.offset = offset
        self.state = None

    def _init_args(self) -> tuple:
        return (self.args[0], self.offset)

    def __reduce__(self):
        # rebuild from the constructor arguments, then restore attributes
        return (type(self), self._init_args(), self.__dict__)


class Truncated(DecodeError):
    """Buffer ended before a required field."""

    def __init__(self, offset: int, needed: int = 0, available: Optional[int] = None):
        msg = f"truncated at byte {offset}"
        if needed:
            msg += f" (need {needed} bytes"
            if available is not None:
                msg += f", have {available}"
            msg += ")"
        super().__init__(msg, offset)
        self.needed = needed
        self.available = available

    def _init_args(self) -> tuple:
        return (self.offset, self.needed, self.available)


class UnsupportedVersion(DecodeError):
    """Protocol version field is not 0."""

    def __init__(self, version: int, offset: int = 0):
        super().__init__(f"unsupported protocol version {version}", offset)
        self.version = version

    def _init_args(self) -> tuple:
        return (self.version, self.offset)


class InvalidAddress(DecodeError):
    """A 6-byte hardware address could not be constructed."""

    def __init__(self, offset: int, reason: str = ""):
        msg = f"invalid address at byte {offset}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, offset)
        self.reason = reason

    def _init_args(self) -> tuple:
        return (self.offset, self.reason)


class InconsistentLength(DecodeError):
    """Decoded header is longer than the buffer holding it."""

    def __init__(self, consumed: int, total: int):
        super().__init__(
            f"header length {consumed} exceeds frame length {total}", total
        )
        self.consumed = consumed
        self.total = total

    def _init_args(self) -> tuple:
        return (self.consumed, self.total)
