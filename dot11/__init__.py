import logging

from .addr import BROADCAST, AddressRoles, MacAddress, has_address4, resolve_roles
from .bits import LSB_FIRST, MSB_FIRST, BitCursor
from .control import (
    ControlSubtype,
    DataSubtype,
    ExtensionSubtype,
    FrameControl,
    FrameControlFlags,
    FrameKind,
    FrameType,
    ManagementSubtype,
    TYPE_CODES_CONTROL_FIRST,
    TYPE_CODES_IEEE,
    decode_frame_control,
    decode_frame_type,
)
from .decoder import DEFAULT_CONFIG, DecoderConfig, DecodeState, FrameDecoder, decode
from .errors import (
    DecodeError,
    InconsistentLength,
    InvalidAddress,
    Truncated,
    UnsupportedVersion,
)
from .fields import QosControl, SequenceControl
from .frame import MIN_FRAME_SIZE, Frame

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "decode",
    "Frame",
    "FrameDecoder",
    "DecoderConfig",
    "DEFAULT_CONFIG",
    "DecodeState",
    "DecodeError",
    "Truncated",
    "UnsupportedVersion",
    "InvalidAddress",
    "InconsistentLength",
    "FrameControl",
    "FrameControlFlags",
    "FrameKind",
    "FrameType",
    "ManagementSubtype",
    "ControlSubtype",
    "DataSubtype",
    "ExtensionSubtype",
    "SequenceControl",
    "QosControl",
    "MacAddress",
    "AddressRoles",
    "BitCursor",
    "MSB_FIRST",
    "LSB_FIRST",
    "BROADCAST",
    "MIN_FRAME_SIZE",
    "TYPE_CODES_IEEE",
    "TYPE_CODES_CONTROL_FIRST",
    "decode_frame_control",
    "decode_frame_type",
    "has_address4",
    "resolve_roles",
]
