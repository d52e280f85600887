"""802.11 Frame Control field: version, type/subtype and flags."""

from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag
from typing import Optional, Union

from .bits import BitCursor
from .errors import UnsupportedVersion

FRAME_CONTROL_SIZE = 2
PROTOCOL_VERSION = 0


class FrameKind(IntEnum):
    """Frame family. Values are the IEEE 802.11 type codes."""

    MANAGEMENT = 0
    CONTROL = 1
    DATA = 2
    EXTENSION = 3


class ManagementSubtype(Enum):
    ASSOCIATION_REQUEST = "assoc-req"
    ASSOCIATION_RESPONSE = "assoc-resp"
    REASSOCIATION_REQUEST = "reassoc-req"
    REASSOCIATION_RESPONSE = "reassoc-resp"
    PROBE_REQUEST = "probe-req"
    PROBE_RESPONSE = "probe-resp"
    TIMING_ADVERTISEMENT = "timing-adv"
    BEACON = "beacon"
    ATIM = "atim"
    DISASSOCIATION = "disassoc"
    AUTHENTICATION = "auth"
    DEAUTHENTICATION = "deauth"
    ACTION = "action"
    ACTION_NO_ACK = "action-noack"
    RESERVED = "rsrv"


class ControlSubtype(Enum):
    TRIGGER = "trigger"
    BEAMFORMING_REPORT_POLL = "bf-report-poll"
    VHT_NDP_ANNOUNCEMENT = "vht-ndp-announce"
    CONTROL_FRAME_EXTENSION = "ctrl-ext"
    CONTROL_WRAPPER = "wrapper"
    BLOCK_ACK_REQUEST = "block-ack-req"
    BLOCK_ACK = "block-ack"
    PS_POLL = "pspoll"
    RTS = "rts"
    CTS = "cts"
    ACK = "ack"
    CF_END = "cfend"
    CF_END_CF_ACK = "cfend-cfack"
    RESERVED = "rsrv"


class ExtensionSubtype(Enum):
    DMG_BEACON = "dmg-beacon"
    RESERVED = "rsrv"


# subtype code -> name tables, anything missing is reserved
_MGMT_SUBTYPES = {
    0: ManagementSubtype.ASSOCIATION_REQUEST,
    1: ManagementSubtype.ASSOCIATION_RESPONSE,
    2: ManagementSubtype.REASSOCIATION_REQUEST,
    3: ManagementSubtype.REASSOCIATION_RESPONSE,
    4: ManagementSubtype.PROBE_REQUEST,
    5: ManagementSubtype.PROBE_RESPONSE,
    6: ManagementSubtype.TIMING_ADVERTISEMENT,
    8: ManagementSubtype.BEACON,
    9: ManagementSubtype.ATIM,
    10: ManagementSubtype.DISASSOCIATION,
    11: ManagementSubtype.AUTHENTICATION,
    12: ManagementSubtype.DEAUTHENTICATION,
    13: ManagementSubtype.ACTION,
    14: ManagementSubtype.ACTION_NO_ACK,
}

_CTRL_SUBTYPES = {
    2: ControlSubtype.TRIGGER,
    4: ControlSubtype.BEAMFORMING_REPORT_POLL,
    5: ControlSubtype.VHT_NDP_ANNOUNCEMENT,
    6: ControlSubtype.CONTROL_FRAME_EXTENSION,
    7: ControlSubtype.CONTROL_WRAPPER,
    8: ControlSubtype.BLOCK_ACK_REQUEST,
    9: ControlSubtype.BLOCK_ACK,
    10: ControlSubtype.PS_POLL,
    11: ControlSubtype.RTS,
    12: ControlSubtype.CTS,
    13: ControlSubtype.ACK,
    14: ControlSubtype.CF_END,
    15: ControlSubtype.CF_END_CF_ACK,
}

_EXT_SUBTYPES = {
    0: ExtensionSubtype.DMG_BEACON,
}

# legacy data subtype names indexed by the 4-bit code
_DATA_SUBTYPE_NAMES = [
    "data", "data-cfack", "data-cfpoll", "data-cfack-cfpoll",
    "null", "null-cfack", "null-cfpoll", "null-cfack-cfpoll",
    "qos-data", "qos-data-cfack", "qos-data-cfpoll", "qos-data-cfack-cfpoll",
    "qos-null", "rsrv", "qos-null-cfpoll", "qos-null-cfack-cfpoll",
]


def management_subtype(code: int) -> ManagementSubtype:
    return _MGMT_SUBTYPES.get(code, ManagementSubtype.RESERVED)


def control_subtype(code: int) -> ControlSubtype:
    return _CTRL_SUBTYPES.get(code, ControlSubtype.RESERVED)


def extension_subtype(code: int) -> ExtensionSubtype:
    return _EXT_SUBTYPES.get(code, ExtensionSubtype.RESERVED)


@dataclass(frozen=True)
class DataSubtype:
    """Data subtype as four independent modifier bits.

    The 16 legacy data subtypes are every combination of CF-Ack, CF-Poll,
    "no data" (null) and QoS, so the bits are kept as flags rather than a
    16-way enumeration.
    """

    ack: bool = False
    poll: bool = False
    null: bool = False
    qos: bool = False

    @property
    def has_data(self) -> bool:
        """False for null (no body) frames."""
        return not self.null

    @property
    def code(self) -> int:
        return (
            int(self.ack)
            | int(self.poll) << 1
            | int(self.null) << 2
            | int(self.qos) << 3
        )

    @property
    def name(self) -> str:
        return _DATA_SUBTYPE_NAMES[self.code]

    @classmethod
    def from_code(cls, code: int) -> "DataSubtype":
        return cls(
            ack=bool(code & 0x01),
            poll=bool(code & 0x02),
            null=bool(code & 0x04),
            qos=bool(code & 0x08),
        )


def data_subtype(code: int) -> DataSubtype:
    return DataSubtype.from_code(code)


Subtype = Union[ManagementSubtype, ControlSubtype, DataSubtype, ExtensionSubtype]

_SUBTYPE_DECODERS = {
    FrameKind.MANAGEMENT: management_subtype,
    FrameKind.CONTROL: control_subtype,
    FrameKind.DATA: data_subtype,
    FrameKind.EXTENSION: extension_subtype,
}


@dataclass(frozen=True)
class FrameType:
    """Frame type tagged with its family-specific subtype.

    ``code`` keeps the raw 4-bit subtype so reserved values are not lost and
    ``type_code`` the raw 2-bit type as it appeared on the wire.
    """

    kind: FrameKind
    subtype: Subtype
    code: int
    type_code: Optional[int] = None

    @property
    def is_management(self) -> bool:
        return self.kind == FrameKind.MANAGEMENT

    @property
    def is_control(self) -> bool:
        return self.kind == FrameKind.CONTROL

    @property
    def is_data(self) -> bool:
        return self.kind == FrameKind.DATA

    @property
    def is_extension(self) -> bool:
        return self.kind == FrameKind.EXTENSION

    @property
    def is_qos_data(self) -> bool:
        return self.kind == FrameKind.DATA and self.subtype.qos

    @property
    def is_reserved(self) -> bool:
        if self.kind == FrameKind.DATA:
            return self.subtype.name == "rsrv"
        return self.subtype.value == "rsrv"

    @property
    def name(self) -> str:
        """Short ``type/subtype`` label, e.g. ``mgmt/beacon``."""
        sub = self.subtype.name if self.kind == FrameKind.DATA else self.subtype.value
        return f"{FRAME_KIND_NAMES[self.kind]}/{sub}"


FRAME_KIND_NAMES = {
    FrameKind.MANAGEMENT: "mgmt",
    FrameKind.CONTROL: "ctrl",
    FrameKind.DATA: "data",
    FrameKind.EXTENSION: "ext",
}


TYPE_CODES_IEEE = "ieee"
TYPE_CODES_CONTROL_FIRST = "control-first"

# 2-bit type code -> kind
_TYPE_TABLES = {
    TYPE_CODES_IEEE: (
        FrameKind.MANAGEMENT, FrameKind.CONTROL, FrameKind.DATA, FrameKind.EXTENSION,
    ),
    TYPE_CODES_CONTROL_FIRST: (
        FrameKind.CONTROL, FrameKind.MANAGEMENT, FrameKind.DATA, FrameKind.EXTENSION,
    ),
}


def frame_kind(type_code: int, type_codes: str = TYPE_CODES_IEEE) -> FrameKind:
    """Map a 2-bit type code to a ``FrameKind`` using the ``type_codes`` table.

    ``TYPE_CODES_IEEE`` is 00 management, 01 control. ``TYPE_CODES_CONTROL_FIRST``
    swaps the two, 00 control and 01 management. Data and extension are the
    same in both.
    """
    try:
        table = _TYPE_TABLES[type_codes]
    except KeyError:
        raise ValueError(f"unknown type code table {type_codes!r}") from None
    return table[type_code]


def decode_frame_type(
    type_code: int, code: int, type_codes: str = TYPE_CODES_IEEE
) -> FrameType:
    """Map a 2-bit type and 4-bit subtype code to a ``FrameType``."""
    kind = frame_kind(type_code, type_codes)
    return FrameType(kind, _SUBTYPE_DECODERS[kind](code), code, int(type_code))


class FrameControlFlags(IntFlag):
    """Bits of the second Frame Control octet."""

    NONE = 0
    TO_DS = 1 << 0
    FROM_DS = 1 << 1
    MORE_FRAGMENTS = 1 << 2
    RETRY = 1 << 3
    POWER_MGMT = 1 << 4
    MORE_DATA = 1 << 5
    PROTECTED = 1 << 6
    ORDER = 1 << 7


@dataclass(frozen=True)
class FrameControl:
    version: int
    frame_type: FrameType
    to_ds: bool = False
    from_ds: bool = False
    more_fragments: bool = False
    retry: bool = False
    power_mgmt: bool = False
    more_data: bool = False
    protected: bool = False
    order: bool = False

    @property
    def flags(self) -> FrameControlFlags:
        f = FrameControlFlags.NONE
        for flag, attr in _FLAG_ATTRS:
            if getattr(self, attr):
                f |= flag
        return f

    @property
    def raw(self) -> int:
        """The field as the 16-bit little-endian word seen on the wire."""
        ft = self.frame_type
        type_code = int(ft.kind) if ft.type_code is None else ft.type_code
        first = self.version | type_code << 2 | ft.code << 4
        return first | int(self.flags) << 8


# flag order as the bits appear on the wire (LSB first)
_FLAG_ATTRS = (
    (FrameControlFlags.TO_DS, "to_ds"),
    (FrameControlFlags.FROM_DS, "from_ds"),
    (FrameControlFlags.MORE_FRAGMENTS, "more_fragments"),
    (FrameControlFlags.RETRY, "retry"),
    (FrameControlFlags.POWER_MGMT, "power_mgmt"),
    (FrameControlFlags.MORE_DATA, "more_data"),
    (FrameControlFlags.PROTECTED, "protected"),
    (FrameControlFlags.ORDER, "order"),
)


def decode_frame_control(
    cursor: BitCursor, type_codes: str = TYPE_CODES_IEEE
) -> FrameControl:
    """Consume the 2-byte Frame Control field from an LSB-first cursor.

    Fails with ``UnsupportedVersion`` as soon as the version bits are read.
    """
    cursor.byte_align()
    start = cursor.offset
    version = cursor.take_bits(2)
    if version != PROTOCOL_VERSION:
        raise UnsupportedVersion(version, start)
    type_code = cursor.take_bits(2)
    code = cursor.take_bits(4)
    frame_type = decode_frame_type(type_code, code, type_codes)
    flags = {attr: cursor.take_bool() for _, attr in _FLAG_ATTRS}
    cursor.byte_align()
    return FrameControl(version, frame_type, **flags)
