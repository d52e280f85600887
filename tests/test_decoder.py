import logging
import pickle

import pytest

from dot11 import (
    ControlSubtype,
    DecodeError,
    DecoderConfig,
    DecodeState,
    FrameDecoder,
    FrameKind,
    InconsistentLength,
    InvalidAddress,
    MacAddress,
    ManagementSubtype,
    MIN_FRAME_SIZE,
    SequenceControl,
    TYPE_CODES_CONTROL_FIRST,
    Truncated,
    UnsupportedVersion,
    decode,
)
from dot11.decoder import resolve_body_length

from .helpers import AP, BSS, STA, WDS, build_frame

TO_DS = 0x01
FROM_DS = 0x02
MORE_FRAG = 0x04
ORDER = 0x80


def minimal(kind, subtype, flags=0):
    """Smallest valid frame for a type/subtype with the given flags."""
    seq = 0 if kind in (FrameKind.MANAGEMENT, FrameKind.DATA) else None
    addr4 = b"\x00" * 6 if flags & TO_DS and flags & FROM_DS else None
    qos = 0 if kind == FrameKind.DATA and subtype & 0x08 else None
    htc = None
    if flags & ORDER and (
        (kind == FrameKind.DATA and subtype & 0x08)
        or (kind == FrameKind.MANAGEMENT and subtype in (13, 14))
    ):
        htc = 0
    return build_frame(kind, subtype, flags, seq_ctrl=seq, addr4=addr4, qos=qos, htc=htc)


ALL_TYPES = [(kind, code) for kind in FrameKind for code in range(16)]


class TestScenarios:
    """Worked examples"""

    def test_minimal_data_frame(self):
        buf = bytes([0x08, 0x00]) + b"\x00" * 2 + b"\x00" * 18 + b"\x00" * 4
        assert len(buf) == 26
        f = decode(buf)
        assert f.frame_type.kind is FrameKind.DATA
        assert f.frame_type.subtype.has_data
        assert not f.frame_type.subtype.qos
        assert f.address4 is None
        assert f.sequence_control is not None
        assert f.qos_control is None
        assert f.body == b""

    def test_qos_data_frame_too_short(self):
        buf = bytes([0x88, 0x00]) + b"\x00" * 24
        with pytest.raises(Truncated):
            decode(buf)

    def test_unsupported_version(self):
        for buf in (b"\x09\x00" + b"\x00" * 24, b"\x01", b"\x01" + b"\xff" * 40):
            with pytest.raises(UnsupportedVersion) as exc:
                decode(buf)
            assert exc.value.offset == 0

    def test_empty_buffer(self):
        with pytest.raises(Truncated) as exc:
            decode(b"")
        assert exc.value.offset == 0

    def test_beacon(self):
        body = bytes(12) + b"\x00\x04test"
        buf = build_frame(
            FrameKind.MANAGEMENT, 8, duration=0,
            addr1=b"\xff" * 6, addr2=AP, addr3=AP,
            seq_ctrl=0x1230, body=body, fcs=0xCAFEBABE,
        )
        f = decode(buf)
        assert f.frame_type.subtype is ManagementSubtype.BEACON
        assert f.address1.is_broadcast
        assert f.bssid == MacAddress(AP)
        assert f.sequence_control == SequenceControl(0, 0x123)
        assert f.body == body
        assert f.integrity_field == 0xCAFEBABE
        assert len(f) == len(buf)

    def test_rts_has_no_sequence_control(self):
        buf = build_frame(FrameKind.CONTROL, 11, duration=0x0100, addr1=AP, addr2=STA, addr3=BSS)
        f = decode(buf)
        assert f.sequence_control is None
        assert f.duration_id == 0x0100
        assert f.header_length == 22

    def test_wds_qos_data_with_ht_control(self):
        buf = build_frame(
            FrameKind.DATA, 8, TO_DS | FROM_DS | ORDER,
            addr1=AP, addr2=STA, addr3=BSS, seq_ctrl=0x0011, addr4=WDS,
            qos=0x0086, htc=0x12345678, body=b"payload", fcs=1,
        )
        f = decode(buf)
        assert f.address4 == MacAddress(WDS)
        assert f.fragment_number == 1 and f.sequence_number == 1
        assert f.qos_control == 0x0086
        assert f.qos.tid == 6 and f.qos.amsdu_present
        assert f.ht_control == 0x12345678
        assert f.body == b"payload"
        assert f.header_length == 36
        assert f.src == MacAddress(WDS)
        assert f.dst == MacAddress(BSS)

    def test_address4_follows_sequence_control(self):
        buf = build_frame(
            FrameKind.DATA, 0, TO_DS | FROM_DS,
            seq_ctrl=0xFFF7, addr4=WDS, body=b"\x01\x02",
        )
        f = decode(buf)
        assert f.sequence_control == SequenceControl(7, 0xFFF)
        assert f.address4 == MacAddress(WDS)
        assert f.body == b"\x01\x02"

    def test_control_frame_with_both_ds_bits(self):
        buf = build_frame(FrameKind.CONTROL, 13, TO_DS | FROM_DS, addr4=WDS)
        f = decode(buf)
        assert f.sequence_control is None
        assert f.address4 == MacAddress(WDS)

    def test_more_fragments_does_not_gate_sequence_control(self):
        f = decode(build_frame(FrameKind.CONTROL, 11, MORE_FRAG))
        assert f.sequence_control is None
        f = decode(build_frame(FrameKind.MANAGEMENT, 4, seq_ctrl=0x0020))
        assert f.sequence_number == 2

    def test_order_without_ht_eligible_frame(self):
        # non-QoS data with order set carries no HT Control
        f = decode(build_frame(FrameKind.DATA, 0, ORDER, seq_ctrl=0, body=b"abcd"))
        assert f.ht_control is None
        assert f.body == b"abcd"

    def test_action_with_ht_control(self):
        buf = build_frame(FrameKind.MANAGEMENT, 13, ORDER, seq_ctrl=0, htc=0xAABBCCDD, body=b"\x04\x00")
        f = decode(buf)
        assert f.ht_control == 0xAABBCCDD
        assert f.body == b"\x04\x00"

    def test_reserved_subtype(self):
        f = decode(build_frame(FrameKind.MANAGEMENT, 7, seq_ctrl=0))
        assert f.frame_type.subtype is ManagementSubtype.RESERVED
        assert f.frame_type.code == 7

    def test_accepts_bytearray(self):
        assert decode(bytearray(minimal(FrameKind.DATA, 0))).body == b""


class TestProperties:
    """Invariants over every type/subtype and flag combination"""

    @pytest.mark.parametrize("kind,code", ALL_TYPES)
    def test_minimal_frames_decode(self, kind, code):
        f = decode(minimal(kind, code))
        assert f.address4 is None
        assert (f.sequence_control is None) == (kind in (FrameKind.CONTROL, FrameKind.EXTENSION))
        assert (f.qos_control is not None) == (kind == FrameKind.DATA and bool(code & 0x08))
        assert f.ht_control is None
        assert f.body == b""
        assert f.frame_type.code == code

    @pytest.mark.parametrize("kind,code", ALL_TYPES)
    @pytest.mark.parametrize("flags", [0, TO_DS, FROM_DS, TO_DS | FROM_DS])
    def test_address4_iff_both_ds_bits(self, kind, code, flags):
        f = decode(minimal(kind, code, flags))
        assert (f.address4 is not None) == (f.to_ds and f.from_ds)

    @pytest.mark.parametrize("kind,code", ALL_TYPES)
    @pytest.mark.parametrize("flags", [0, TO_DS | FROM_DS | ORDER])
    def test_truncating_minimal_frame_fails(self, kind, code, flags):
        buf = minimal(kind, code, flags)
        decode(buf)
        for cut in range(1, len(buf) + 1):
            with pytest.raises(Truncated):
                decode(buf[:-cut])

    @pytest.mark.parametrize("kind,code", ALL_TYPES)
    def test_body_length(self, kind, code):
        buf = minimal(kind, code) + b"\x00" * 10
        f = decode(buf)
        assert len(f.body) == len(buf) - f.header_length - 4

    def test_deterministic(self):
        buf = build_frame(FrameKind.DATA, 8, TO_DS | FROM_DS, seq_ctrl=5, addr4=WDS, qos=3, body=b"xyz")
        assert decode(buf) == decode(buf)

    def test_frame_is_immutable(self):
        f = decode(minimal(FrameKind.DATA, 0))
        with pytest.raises(AttributeError):
            f.body = b"changed"

    def test_minimum_size(self):
        assert len(minimal(FrameKind.CONTROL, 13)) == MIN_FRAME_SIZE


class TestErrors:
    """Failure reporting"""

    def test_truncated_offset_at_missing_field(self):
        # data frame ends right after addr3: sequence control missing
        buf = build_frame(FrameKind.DATA, 0)
        with pytest.raises(Truncated) as exc:
            decode(buf)
        # the first two FCS bytes are read as sequence control, leaving 2
        assert exc.value.offset == 24
        assert exc.value.state is DecodeState.HT_RESOLVED

    def test_truncated_in_addresses(self):
        with pytest.raises(Truncated) as exc:
            decode(b"\x08\x00\x00\x00" + b"\x00" * 10)
        assert exc.value.offset == 10
        assert exc.value.state is DecodeState.FRAME_CONTROL_DECODED

    def test_version_error_state(self):
        with pytest.raises(UnsupportedVersion) as exc:
            decode(b"\x02\x00")
        assert exc.value.state is DecodeState.START

    def test_errors_share_base(self):
        for cls in (Truncated, UnsupportedVersion, InvalidAddress, InconsistentLength):
            assert issubclass(cls, DecodeError)

    def test_invalid_address(self, monkeypatch):
        def reject(cls, data):
            raise ValueError("rejected")

        monkeypatch.setattr(MacAddress, "from_bytes", classmethod(reject))
        with pytest.raises(InvalidAddress) as exc:
            decode(minimal(FrameKind.DATA, 0))
        assert exc.value.offset == 4
        assert isinstance(exc.value.__cause__, ValueError)

    def test_failure_is_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="dot11"):
            with pytest.raises(Truncated):
                decode(b"\x08\x00")
        assert any("decode failed" in r.getMessage() for r in caplog.records)
        assert all(r.levelno == logging.DEBUG for r in caplog.records)


class TestBodyLength:
    """Body length arithmetic"""

    def test_lengths(self):
        assert resolve_body_length(26, 22) == 0
        assert resolve_body_length(100, 24) == 72

    def test_no_room_for_fcs(self):
        with pytest.raises(Truncated) as exc:
            resolve_body_length(26, 24)
        assert exc.value.offset == 24

    def test_header_longer_than_frame(self):
        with pytest.raises(InconsistentLength) as exc:
            resolve_body_length(20, 22)
        assert exc.value.consumed == 22 and exc.value.total == 20


class TestFrameDecoder:
    """State machine and configuration"""

    def test_states(self):
        d = FrameDecoder(minimal(FrameKind.DATA, 0))
        assert d.state is DecodeState.START
        d.decode()
        assert d.state is DecodeState.DONE
        assert d.offset == 26

    def test_failed_state(self):
        d = FrameDecoder(b"\x08\x00\x00")
        with pytest.raises(Truncated):
            d.decode()
        assert d.state is DecodeState.FAILED

    def test_single_use(self):
        d = FrameDecoder(minimal(FrameKind.DATA, 0))
        d.decode()
        with pytest.raises(RuntimeError):
            d.decode()

    def test_big_endian_integers(self):
        buf = build_frame(FrameKind.DATA, 8, duration=0x0102, seq_ctrl=0, qos=0x0304, fcs=0x05060708)
        f = decode(buf, DecoderConfig(byteorder="big"))
        assert f.duration_id == 0x0201
        assert f.qos_control == 0x0403
        assert f.integrity_field == 0x08070605

    def test_bad_byteorder(self):
        with pytest.raises(ValueError):
            DecoderConfig(byteorder="middle")

    def test_ht_control_all_management(self):
        buf = build_frame(FrameKind.MANAGEMENT, 8, ORDER, seq_ctrl=0, htc=0x11223344, body=b"\x00" * 12)
        assert decode(buf).ht_control is None
        f = decode(buf, DecoderConfig(ht_control_all_management=True))
        assert f.ht_control == 0x11223344
        assert f.body == b"\x00" * 12

    def test_bad_type_codes(self):
        with pytest.raises(ValueError):
            DecoderConfig(type_codes="swapped")

    @pytest.mark.parametrize("data", [30, None, "\x08\x00" * 13])
    def test_rejects_non_buffer(self, data):
        with pytest.raises(TypeError):
            decode(data)


class TestTypeCodeTables:
    """Frames decoded under the control-first type code table"""

    CONFIG = DecoderConfig(type_codes=TYPE_CODES_CONTROL_FIRST)

    def test_type_0_is_control(self):
        buf = bytes([0x00, 0x00]) + bytes(24)
        f = decode(buf, self.CONFIG)
        assert f.frame_type.kind is FrameKind.CONTROL
        assert f.frame_type.subtype is ControlSubtype.RESERVED
        assert f.sequence_control is None
        assert f.header_length == 22
        assert f.body == b""

    def test_type_1_is_management(self):
        buf = bytes([0x04, 0x00]) + bytes(28)
        f = decode(buf, self.CONFIG)
        assert f.frame_type.kind is FrameKind.MANAGEMENT
        assert f.frame_type.subtype is ManagementSubtype.ASSOCIATION_REQUEST
        assert f.sequence_control == SequenceControl(0, 0)
        assert f.body == b"\x00\x00"
        assert f.control.raw == 0x0004

    def test_same_buffer_under_ieee_table(self):
        buf = bytes([0x04, 0x00]) + bytes(28)
        f = decode(buf)
        assert f.frame_type.kind is FrameKind.CONTROL
        assert f.sequence_control is None
        assert len(f.body) == 4

    def test_ack_under_control_first(self):
        buf = bytes([0xD0, 0x00]) + bytes(24)
        f = decode(buf, self.CONFIG)
        assert f.frame_type.subtype is ControlSubtype.ACK

    def test_data_unchanged(self):
        buf = minimal(FrameKind.DATA, 8)
        assert decode(buf, self.CONFIG) == decode(buf)


class TestPickling:
    """Errors survive a pickle round trip"""

    @pytest.mark.parametrize(
        "err",
        [
            DecodeError("bad frame", 3),
            Truncated(24, 4, 2),
            Truncated(0),
            UnsupportedVersion(2),
            InvalidAddress(10, "rejected"),
            InconsistentLength(30, 26),
        ],
    )
    def test_round_trip(self, err):
        copy = pickle.loads(pickle.dumps(err))
        assert type(copy) is type(err)
        assert str(copy) == str(err)
        assert copy.__dict__ == err.__dict__

    def test_truncated_fields(self):
        copy = pickle.loads(pickle.dumps(Truncated(24, 4, 2)))
        assert (copy.offset, copy.needed, copy.available) == (24, 4, 2)

    def test_inconsistent_length_fields(self):
        copy = pickle.loads(pickle.dumps(InconsistentLength(30, 26)))
        assert (copy.consumed, copy.total, copy.offset) == (30, 26, 26)

    def test_decode_state_preserved(self):
        with pytest.raises(Truncated) as exc:
            decode(b"\x08\x00\x00\x00" + b"\x00" * 10)
        copy = pickle.loads(pickle.dumps(exc.value))
        assert copy.state is DecodeState.FRAME_CONTROL_DECODED
        assert copy.offset == 10
