"""
Tests for gRPC / Connect envelope splitting.
"""

import gzip

import pytest

from protobuf_to_json.errors import FramingError
from protobuf_to_json.framing import looks_framed, split_frames

from helpers import grpc_frame, varint_field


class TestSplitFrames:
    def test_single_frame(self):
        payload = varint_field(1, 42)
        frames = split_frames(grpc_frame(payload))
        assert len(frames) == 1
        assert frames[0].payload == payload
        assert not frames[0].is_compressed
        assert not frames[0].is_trailer

    def test_multiple_frames_with_trailer(self):
        body = grpc_frame(varint_field(1, 1)) + grpc_frame(b"grpc-status: 0\r\n", flags=0x80)
        frames = split_frames(body)
        assert len(frames) == 2
        assert frames[1].is_trailer
        assert frames[1].trailer_text() == "grpc-status: 0\r\n"

    def test_gzip_frame_decompressed(self):
        payload = varint_field(1, 7)
        frames = split_frames(grpc_frame(gzip.compress(payload), flags=0x01))
        assert frames[0].is_compressed
        assert frames[0].payload == payload

    def test_empty_frame(self):
        assert split_frames(grpc_frame(b""))[0].payload == b""

    def test_empty_body(self):
        assert split_frames(b"") == []

    def test_truncated_header(self):
        with pytest.raises(FramingError):
            split_frames(b"\x00\x00\x00")

    def test_truncated_payload(self):
        with pytest.raises(FramingError):
            split_frames(b"\x00\x00\x00\x00\x05ab")

    def test_bad_gzip(self):
        with pytest.raises(FramingError):
            split_frames(grpc_frame(b"not gzip", flags=0x01))


class TestLooksFramed:
    def test_framed(self):
        assert looks_framed(grpc_frame(varint_field(1, 1)))

    def test_plain_protobuf(self):
        assert not looks_framed(varint_field(1, 1))

    def test_unknown_flags(self):
        assert not looks_framed(b"\x08\x00\x00\x00\x00")

    def test_compressed_first_frame(self):
        assert looks_framed(grpc_frame(gzip.compress(varint_field(1, 1)), flags=0x01))

    def test_leading_trailer_is_not_framed(self):
        # 0x80 also starts a multi-byte protobuf tag
        assert not looks_framed(grpc_frame(b"grpc-status: 0", flags=0x80))
