"""Single-pass 802.11 MAC frame decoder.

Fields are consumed strictly in header order. Whether each optional field
is present depends only on fields already decoded:

    Frame Control | Duration/ID | Addr1 | Addr2 | Addr3 | Seq Ctrl | Addr4 |
    QoS Ctrl | HT Ctrl | Body | FCS

    Seq Ctrl   management and data frames
    Addr4      ToDS and FromDS both set
    QoS Ctrl   data frames with the QoS subtype bit
    HT Ctrl    Order bit on QoS data or management action frames

There is no backtracking: a presence decision is final for the attempt.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .addr import ADDR_SIZE, MacAddress, has_address4
from .bits import LSB_FIRST, BitCursor, Buffer
from .control import TYPE_CODES_CONTROL_FIRST, TYPE_CODES_IEEE, decode_frame_control
from .errors import DecodeError, InconsistentLength, InvalidAddress, Truncated
from .fields import (
    decode_ht_control,
    decode_qos_control,
    decode_sequence_control,
    has_ht_control,
    has_qos_control,
    has_sequence_control,
)
from .frame import DURATION_SIZE, FCS_SIZE, Frame

log = logging.getLogger(__name__)

BYTEORDERS = ("little", "big")
TYPE_CODE_TABLES = (TYPE_CODES_IEEE, TYPE_CODES_CONTROL_FIRST)


@dataclass(frozen=True)
class DecoderConfig:
    """Decoder options.

    Args:
        byteorder: Byte order of the multi-octet integer fields (Duration/ID,
                   QoS Control, HT Control, FCS). 802.11 sends them least
                   significant octet first.
        ht_control_all_management: Accept HT Control on every management
                   subtype with the Order bit set, not only Action and
                   Action No Ack.
        type_codes: Table mapping the 2-bit type code to a frame family.
                   ``"ieee"`` reads 00 as management and 01 as control,
                   ``"control-first"`` reads 00 as control and 01 as
                   management.
    """

    byteorder: str = "little"
    ht_control_all_management: bool = False
    type_codes: str = TYPE_CODES_IEEE

    def __post_init__(self):
        if self.byteorder not in BYTEORDERS:
            raise ValueError(
                f"byteorder must be one of {BYTEORDERS}, got {self.byteorder!r}"
            )
        if self.type_codes not in TYPE_CODE_TABLES:
            raise ValueError(
                f"type_codes must be one of {TYPE_CODE_TABLES}, got {self.type_codes!r}"
            )


DEFAULT_CONFIG = DecoderConfig()


class DecodeState(Enum):
    START = "start"
    FRAME_CONTROL_DECODED = "frame-control-decoded"
    ADDRESSES_DECODED = "addresses-decoded"
    SEQUENCE_CONTROL_RESOLVED = "sequence-control-resolved"
    ADDRESS4_RESOLVED = "address4-resolved"
    QOS_RESOLVED = "qos-resolved"
    HT_RESOLVED = "ht-resolved"
    BODY_RESOLVED = "body-resolved"
    INTEGRITY_FIELD_READ = "integrity-field-read"
    DONE = "done"
    FAILED = "failed"


def resolve_body_length(total: int, consumed: int, fcs_length: int = FCS_SIZE) -> int:
    """Number of body bytes between a ``consumed``-byte header and the FCS.

    Raises ``InconsistentLength`` if the header is longer than the frame and
    ``Truncated`` if there is no room left for the FCS.
    """
    if consumed > total:
        raise InconsistentLength(consumed, total)
    if total - consumed < fcs_length:
        raise Truncated(consumed, fcs_length, total - consumed)
    return total - consumed - fcs_length


class FrameDecoder:
    """Decodes one buffer. Instances are single use.

    ``state`` reports how far decoding got; after a failure it is
    ``DecodeState.FAILED`` and the raised error's ``state`` attribute holds
    the state the failing step started from.
    """

    def __init__(self, data: Buffer, config: Optional[DecoderConfig] = None):
        self._cursor = BitCursor(data, LSB_FIRST)
        self._config = config or DEFAULT_CONFIG
        self.state = DecodeState.START

    @property
    def offset(self) -> int:
        return self._cursor.offset

    def decode(self) -> Frame:
        if self.state != DecodeState.START:
            raise RuntimeError(f"decoder already used (state {self.state.value})")
        try:
            return self._run()
        except DecodeError as e:
            e.state = self.state
            self.state = DecodeState.FAILED
            raise

    # ---- internal ----

    def _run(self) -> Frame:
        cur = self._cursor
        cfg = self._config

        control = decode_frame_control(cur, cfg.type_codes)
        self.state = DecodeState.FRAME_CONTROL_DECODED

        duration_id = cur.take_uint(DURATION_SIZE, cfg.byteorder)
        addr1 = self._address()
        addr2 = self._address()
        addr3 = self._address()
        self.state = DecodeState.ADDRESSES_DECODED

        seq_ctrl = None
        if has_sequence_control(control):
            seq_ctrl = decode_sequence_control(cur)
        self.state = DecodeState.SEQUENCE_CONTROL_RESOLVED

        addr4 = None
        if has_address4(control):
            addr4 = self._address()
        self.state = DecodeState.ADDRESS4_RESOLVED

        qos_ctrl = None
        if has_qos_control(control):
            qos_ctrl = decode_qos_control(cur, cfg.byteorder)
        self.state = DecodeState.QOS_RESOLVED

        ht_ctrl = None
        if has_ht_control(control, cfg.ht_control_all_management):
            ht_ctrl = decode_ht_control(cur, cfg.byteorder)
        self.state = DecodeState.HT_RESOLVED

        body_len = resolve_body_length(len(cur), cur.offset)
        body = cur.take_bytes(body_len)
        self.state = DecodeState.BODY_RESOLVED

        fcs = cur.take_uint(FCS_SIZE, cfg.byteorder)
        self.state = DecodeState.INTEGRITY_FIELD_READ

        frame = Frame(
            control=control,
            duration_id=duration_id,
            address1=addr1,
            address2=addr2,
            address3=addr3,
            address4=addr4,
            sequence_control=seq_ctrl,
            qos_control=qos_ctrl,
            ht_control=ht_ctrl,
            body=body,
            integrity_field=fcs,
        )
        self.state = DecodeState.DONE
        return frame

    def _address(self) -> MacAddress:
        start = self._cursor.offset
        raw = self._cursor.take_bytes(ADDR_SIZE)
        try:
            return MacAddress.from_bytes(raw)
        except ValueError as e:
            raise InvalidAddress(start, str(e)) from e


def decode(data: Buffer, config: Optional[DecoderConfig] = None) -> Frame:
    """Decode one 802.11 frame (header through FCS, no radiotap).

    Raises a ``DecodeError`` subclass if the buffer does not hold a frame.
    """
    decoder = FrameDecoder(data, config)
    try:
        frame = decoder.decode()
    except DecodeError as e:
        log.debug("decode failed in state %s: %s", e.state.value, e)
        raise
    log.debug("decoded %r", frame)
    return frame
