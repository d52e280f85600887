import struct
from typing import Optional

AP = bytes.fromhex("001122334455")
STA = bytes.fromhex("66778899aabb")
BSS = bytes.fromhex("0a0b0c0d0e0f")
WDS = bytes.fromhex("deadbeef0001")


def build_frame(
    kind: int = 2,
    subtype: int = 0,
    flags: int = 0,
    version: int = 0,
    duration: int = 0,
    addr1: bytes = b"\x00" * 6,
    addr2: bytes = b"\x00" * 6,
    addr3: bytes = b"\x00" * 6,
    seq_ctrl: Optional[int] = None,
    addr4: Optional[bytes] = None,
    qos: Optional[int] = None,
    htc: Optional[int] = None,
    body: bytes = b"",
    fcs: int = 0,
) -> bytes:
    """Lay out a frame byte by byte. Optional fields are written when given."""
    out = bytes([version | kind << 2 | subtype << 4, flags])
    out += struct.pack("<H", duration) + addr1 + addr2 + addr3
    if seq_ctrl is not None:
        out += struct.pack("<H", seq_ctrl)
    if addr4 is not None:
        out += addr4
    if qos is not None:
        out += struct.pack("<H", qos)
    if htc is not None:
        out += struct.pack("<L", htc)
    return out + body + struct.pack("<L", fcs)
