"""Hardware addresses and the ToDS/FromDS address role table."""

from dataclasses import dataclass
from typing import NamedTuple, Optional

from .control import FrameControl

ADDR_SIZE = 6


@dataclass(frozen=True)
class MacAddress:
    """A 6-byte IEEE 802 hardware address."""

    octets: bytes

    def __post_init__(self):
        if not isinstance(self.octets, bytes):
            raise ValueError(f"address must be bytes, got {type(self.octets).__name__}")
        if len(self.octets) != ADDR_SIZE:
            raise ValueError(
                f"address must be {ADDR_SIZE} bytes, got {len(self.octets)}"
            )

    @classmethod
    def from_bytes(cls, data) -> "MacAddress":
        return cls(bytes(data))

    @classmethod
    def from_str(cls, text: str) -> "MacAddress":
        """Parse ``aa:bb:cc:dd:ee:ff`` (``-`` separators are accepted)."""
        parts = text.replace("-", ":").split(":")
        if len(parts) != ADDR_SIZE:
            raise ValueError(f"malformed address {text!r}")
        try:
            return cls(bytes(int(p, 16) for p in parts))
        except ValueError:
            raise ValueError(f"malformed address {text!r}") from None

    @property
    def is_broadcast(self) -> bool:
        return self == BROADCAST

    @property
    def is_multicast(self) -> bool:
        """Group bit set (includes broadcast)."""
        return bool(self.octets[0] & 0x01)

    @property
    def is_local(self) -> bool:
        """Locally administered bit set."""
        return bool(self.octets[0] & 0x02)

    @property
    def oui(self) -> str:
        return "-".join(f"{b:02X}" for b in self.octets[:3])

    def __bytes__(self) -> bytes:
        return self.octets

    def __str__(self) -> str:
        return ":".join(f"{b:02x}" for b in self.octets)

    def __repr__(self) -> str:
        return f"MacAddress('{self}')"


BROADCAST = MacAddress(b"\xff" * ADDR_SIZE)


def has_address4(control: FrameControl) -> bool:
    """The fourth address is carried only by frames relayed between DSs."""
    return control.to_ds and control.from_ds


class AddressRoles(NamedTuple):
    """Roles of the header addresses. Unused roles are None."""

    receiver: MacAddress
    transmitter: MacAddress
    destination: MacAddress
    source: Optional[MacAddress]
    bssid: Optional[MacAddress]


def resolve_roles(
    to_ds: bool,
    from_ds: bool,
    addr1: MacAddress,
    addr2: MacAddress,
    addr3: MacAddress,
    addr4: Optional[MacAddress] = None,
) -> AddressRoles:
    """Assign RA/TA/DA/SA/BSSID given the DS bits.

    ToDS FromDS  Addr1      Addr2      Addr3  Addr4
       0      0  RA=DA      TA=SA      BSSID  -
       0      1  RA=DA      TA=BSSID   SA     -
       1      0  RA=BSSID   TA=SA      DA     -
       1      1  RA         TA         DA     SA
    """
    if not to_ds and not from_ds:
        return AddressRoles(addr1, addr2, addr1, addr2, addr3)
    if not to_ds and from_ds:
        return AddressRoles(addr1, addr2, addr1, addr3, addr2)
    if to_ds and not from_ds:
        return AddressRoles(addr1, addr2, addr3, addr2, addr1)
    return AddressRoles(addr1, addr2, addr3, addr4, None)
