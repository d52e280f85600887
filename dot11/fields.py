"""Conditionally present header fields: Sequence, QoS and HT Control."""

from dataclasses import dataclass

from .bits import BitCursor
from .control import FrameControl, FrameKind, ManagementSubtype
from .errors import Truncated

SEQ_CTRL_SIZE = 2
QOS_CTRL_SIZE = 2
HT_CTRL_SIZE = 4

# management subtypes that may carry HT Control in every configuration
_HTC_MGMT_SUBTYPES = (ManagementSubtype.ACTION, ManagementSubtype.ACTION_NO_ACK)


@dataclass(frozen=True)
class SequenceControl:
    fragment_number: int
    sequence_number: int

    def __post_init__(self):
        if not 0 <= self.fragment_number <= 0x0F:
            raise ValueError(f"fragment number must be 0-15, got {self.fragment_number}")
        if not 0 <= self.sequence_number <= 0x0FFF:
            raise ValueError(
                f"sequence number must be 0-4095, got {self.sequence_number}"
            )

    @property
    def raw(self) -> int:
        return self.sequence_number << 4 | self.fragment_number


# QoS Control Std 9.2.4.5
# B0-B3 TID | B4 EOSP | B5-B6 Ack Policy | B7 A-MSDU Present | B8-B15 varies
QOS_ACK_NORMAL = 0
QOS_ACK_NONE = 1
QOS_ACK_NO_EXPLICIT = 2
QOS_ACK_BLOCK = 3


@dataclass(frozen=True)
class QosControl:
    """View over the opaque 16-bit QoS Control value.

    ``txop`` is the upper octet, which holds the TXOP limit, TXOP duration
    requested, AP PS buffer state, queue size or mesh fields depending on
    the sender and the subtype.
    """

    tid: int
    eosp: bool
    ack_policy: int
    amsdu_present: bool
    txop: int

    @classmethod
    def from_int(cls, value: int) -> "QosControl":
        return cls(
            tid=value & 0x0F,
            eosp=bool(value & (1 << 4)),
            ack_policy=(value >> 5) & 0x03,
            amsdu_present=bool(value & (1 << 7)),
            txop=(value >> 8) & 0xFF,
        )


def has_sequence_control(control: FrameControl) -> bool:
    """Management and Data frames carry Sequence Control, others never."""
    return control.frame_type.kind in (FrameKind.MANAGEMENT, FrameKind.DATA)


def has_qos_control(control: FrameControl) -> bool:
    return control.frame_type.is_qos_data


def has_ht_control(control: FrameControl, all_management: bool = False) -> bool:
    """HT Control follows the QoS field when the Order bit is set.

    Only QoS Data frames and Action/Action No Ack management frames qualify
    unless ``all_management`` widens the rule to every management subtype.
    """
    if not control.order:
        return False
    ft = control.frame_type
    if ft.is_qos_data:
        return True
    if ft.kind == FrameKind.MANAGEMENT:
        return all_management or ft.subtype in _HTC_MGMT_SUBTYPES
    return False


def decode_sequence_control(cursor: BitCursor) -> SequenceControl:
    """Consume fragment number (4 bits) then sequence number (12 bits)."""
    cursor.byte_align()
    if cursor.remaining_bytes < SEQ_CTRL_SIZE:
        raise Truncated(cursor.offset, SEQ_CTRL_SIZE, cursor.remaining_bytes)
    fragment = cursor.take_bits(4)
    sequence = cursor.take_bits(12)
    cursor.byte_align()
    return SequenceControl(fragment, sequence)


def decode_qos_control(cursor: BitCursor, byteorder: str = "little") -> int:
    return cursor.take_uint(QOS_CTRL_SIZE, byteorder)


def decode_ht_control(cursor: BitCursor, byteorder: str = "little") -> int:
    return cursor.take_uint(HT_CTRL_SIZE, byteorder)
