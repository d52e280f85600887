"""Decoded 802.11 MAC frame."""

from dataclasses import dataclass
from functools import cached_property
from typing import Optional

from .addr import ADDR_SIZE, AddressRoles, MacAddress, resolve_roles
from .control import FRAME_CONTROL_SIZE, FrameControl, FrameType
from .fields import HT_CTRL_SIZE, QOS_CTRL_SIZE, SEQ_CTRL_SIZE, QosControl, SequenceControl

DURATION_SIZE = 2
FCS_SIZE = 4

# frame control + duration/id + addr1..3
MIN_HEADER_SIZE = FRAME_CONTROL_SIZE + DURATION_SIZE + 3 * ADDR_SIZE  # 22
MIN_FRAME_SIZE = MIN_HEADER_SIZE + FCS_SIZE  # 26


@dataclass(frozen=True)
class Frame:
    """A single 802.11 MAC frame: header, body and FCS.

    Optional header fields are ``None`` when absent from the frame. The FCS
    is carried as read and never checked.
    """

    control: FrameControl
    duration_id: int
    address1: MacAddress
    address2: MacAddress
    address3: MacAddress
    address4: Optional[MacAddress] = None
    sequence_control: Optional[SequenceControl] = None
    qos_control: Optional[int] = None
    ht_control: Optional[int] = None
    body: bytes = b""
    integrity_field: int = 0

    # ---- frame control shortcuts ----

    @property
    def frame_type(self) -> FrameType:
        return self.control.frame_type

    @property
    def to_ds(self) -> bool:
        return self.control.to_ds

    @property
    def from_ds(self) -> bool:
        return self.control.from_ds

    @property
    def fcs(self) -> int:
        return self.integrity_field

    @property
    def header_length(self) -> int:
        """Bytes of header preceding the body."""
        n = MIN_HEADER_SIZE
        if self.sequence_control is not None:
            n += SEQ_CTRL_SIZE
        if self.address4 is not None:
            n += ADDR_SIZE
        if self.qos_control is not None:
            n += QOS_CTRL_SIZE
        if self.ht_control is not None:
            n += HT_CTRL_SIZE
        return n

    def __len__(self) -> int:
        return self.header_length + len(self.body) + FCS_SIZE

    @property
    def sequence_number(self) -> Optional[int]:
        sc = self.sequence_control
        return None if sc is None else sc.sequence_number

    @property
    def fragment_number(self) -> Optional[int]:
        sc = self.sequence_control
        return None if sc is None else sc.fragment_number

    @cached_property
    def qos(self) -> Optional[QosControl]:
        """Sub-fields of the QoS Control value, if present."""
        if self.qos_control is None:
            return None
        return QosControl.from_int(self.qos_control)

    # ---- derived addresses ----

    @cached_property
    def roles(self) -> AddressRoles:
        return resolve_roles(
            self.to_ds, self.from_ds,
            self.address1, self.address2, self.address3, self.address4,
        )

    @property
    def receiver(self) -> MacAddress:
        return self.roles.receiver

    @property
    def transmitter(self) -> MacAddress:
        return self.roles.transmitter

    @property
    def bssid(self) -> Optional[MacAddress]:
        return self.roles.bssid

    @property
    def src(self) -> Optional[MacAddress]:
        return self.roles.source

    @property
    def dst(self) -> MacAddress:
        return self.roles.destination

    # ---- convenience ----

    @staticmethod
    def mac_str(addr: Optional[MacAddress]) -> str:
        if addr is None:
            return "??:??:??:??:??:??"
        return str(addr)

    def __repr__(self) -> str:
        parts = [
            f"type={self.frame_type.name}",
            f"src={self.mac_str(self.src)}",
            f"dst={self.mac_str(self.dst)}",
        ]
        if self.sequence_control is not None:
            parts.append(f"seq={self.sequence_number}/{self.fragment_number}")
        if self.qos_control is not None:
            parts.append(f"qos=0x{self.qos_control:04x}")
        if self.ht_control is not None:
            parts.append(f"htc=0x{self.ht_control:08x}")
        parts.append(f"len={len(self)}")
        return f"Frame({', '.join(parts)})"
