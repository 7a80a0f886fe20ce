"""
gRPC / Connect envelope handling.

Captured HTTP bodies wrap each protobuf message in a 5-byte envelope:
one flags byte followed by a big-endian u32 payload length.

Flags:
    0x01  payload is compressed (gzip)
    0x80  trailer / end-of-stream frame carrying text metadata
"""

import gzip
import struct
import zlib
from dataclasses import dataclass
from typing import List

from protobuf_to_json.errors import FramingError

HEADER_SIZE = 5
FLAG_COMPRESSED = 0x01
FLAG_TRAILER = 0x80


@dataclass
class Frame:
    """One enveloped message."""
    flags: int
    payload: bytes

    @property
    def is_compressed(self) -> bool:
        return bool(self.flags & FLAG_COMPRESSED)

    @property
    def is_trailer(self) -> bool:
        return bool(self.flags & FLAG_TRAILER)

    def trailer_text(self) -> str:
        return self.payload.decode("utf-8", errors="replace")


def split_frames(data: bytes) -> List[Frame]:
    """Split a body into frames, decompressing gzip payloads."""
    frames = []
    pos = 0

    while pos < len(data):
        if pos + HEADER_SIZE > len(data):
            raise FramingError(f"Truncated frame header at offset {pos}")

        flags, length = struct.unpack(">BI", data[pos:pos + HEADER_SIZE])
        pos += HEADER_SIZE
        if pos + length > len(data):
            raise FramingError(
                f"Frame at offset {pos - HEADER_SIZE} declares {length} bytes, "
                f"{len(data) - pos} available"
            )

        payload = bytes(data[pos:pos + length])
        pos += length

        if flags & FLAG_COMPRESSED:
            try:
                payload = gzip.decompress(payload)
            except (OSError, EOFError, zlib.error) as e:
                raise FramingError(f"Failed to decompress frame: {e}") from e

        frames.append(Frame(flags, payload))

    return frames


def looks_framed(data: bytes) -> bool:
    """True when the whole body splits cleanly into frames, led by a data frame.

    A leading 0x00 or 0x01 would be field number 0 in plain protobuf, so
    such a body can never be mistaken for an unframed message.
    """
    if len(data) < HEADER_SIZE or data[0] & ~FLAG_COMPRESSED:
        return False
    try:
        return bool(split_frames(data))
    except FramingError:
        return False
