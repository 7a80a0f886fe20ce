"""
Protobuf Wire Reader

Bounds-checked cursor over a protobuf wire-format buffer. Decodes tags,
varints and fixed-width scalars without any schema.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple, Union

from protobuf_to_json.errors import (
    InvalidFieldNumber,
    MalformedVarint,
    TruncatedInput,
    UnsupportedWireType,
)

MAX_VARINT_BYTES = 10
MAX_FIELD_NUMBER = (1 << 29) - 1
UINT64_MASK = (1 << 64) - 1


class WireType(IntEnum):
    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    FIXED32 = 5


WIRE_TYPE_NAMES = {
    WireType.VARINT: "varint",
    WireType.FIXED64: "fixed64",
    WireType.LENGTH_DELIMITED: "length_delimited",
    WireType.FIXED32: "fixed32",
}


@dataclass
class RawField:
    """One field of a single message level, undecoded beyond its wire type."""
    number: int
    wire_type: WireType
    value: Union[int, bytes]
    start: int
    end: int

    @property
    def wire_type_name(self) -> str:
        return WIRE_TYPE_NAMES[self.wire_type]


class WireReader:
    """Cursor over a byte buffer.

    Offsets reported in errors are absolute: ``base_offset`` is the position
    of ``buffer`` inside the top-level payload.
    """

    def __init__(self, buffer: bytes, base_offset: int = 0):
        self.buffer = bytes(buffer)
        self.base_offset = base_offset
        self.pos = 0

    @property
    def offset(self) -> int:
        return self.base_offset + self.pos

    def left_bytes(self) -> int:
        return len(self.buffer) - self.pos

    def at_end(self) -> bool:
        return self.pos >= len(self.buffer)

    def _check_bytes(self, length: int):
        available = self.left_bytes()
        if length > available:
            raise TruncatedInput(
                f"need {length} bytes, {available} left", self.offset
            )

    def read_varint(self) -> int:
        """Read a base-128 varint, masked to 64 bits."""
        start = self.offset
        value = 0
        for i in range(MAX_VARINT_BYTES):
            if self.at_end():
                raise TruncatedInput("varint runs past end of buffer", start)
            byte = self.buffer[self.pos]
            self.pos += 1
            value |= (byte & 0x7F) << (7 * i)
            if not byte & 0x80:
                # Bits above 64 in the tenth byte are dropped, as protobuf's own parsers do
                return value & UINT64_MASK
        raise MalformedVarint(
            f"varint longer than {MAX_VARINT_BYTES} bytes", start
        )

    def read_bytes(self, length: int) -> bytes:
        self._check_bytes(length)
        result = self.buffer[self.pos:self.pos + length]
        self.pos += length
        return result

    def read_fixed32(self) -> int:
        return int.from_bytes(self.read_bytes(4), "little")

    def read_fixed64(self) -> int:
        return int.from_bytes(self.read_bytes(8), "little")

    def read_length_delimited(self) -> bytes:
        start = self.offset
        length = self.read_varint()
        if length > self.left_bytes():
            raise TruncatedInput(
                f"length {length} exceeds {self.left_bytes()} remaining bytes",
                start,
            )
        return self.read_bytes(length)

    def next_tag(self) -> Optional[Tuple[int, WireType]]:
        """Read the next field tag.

        Returns:
            (field_number, wire_type), or None when the buffer is exhausted
        """
        if self.at_end():
            return None

        start = self.offset
        tag = self.read_varint()
        field_number = tag >> 3
        wire_type = tag & 0x07

        if wire_type not in WIRE_TYPE_NAMES:
            raise UnsupportedWireType(wire_type, start)
        if field_number < 1 or field_number > MAX_FIELD_NUMBER:
            raise InvalidFieldNumber(field_number, start)

        return field_number, WireType(wire_type)

    def read_value(self, wire_type: WireType) -> Union[int, bytes]:
        if wire_type == WireType.VARINT:
            return self.read_varint()
        elif wire_type == WireType.FIXED64:
            return self.read_fixed64()
        elif wire_type == WireType.LENGTH_DELIMITED:
            return self.read_length_delimited()
        return self.read_fixed32()


def scan_fields(buffer: bytes, base_offset: int = 0) -> List[RawField]:
    """Read every field of one message level without recursing.

    Strict: the first malformed tag or truncated value raises, so a
    successful scan means the whole buffer frames cleanly.
    """
    reader = WireReader(buffer, base_offset)
    fields = []

    while True:
        start = reader.offset
        tag = reader.next_tag()
        if tag is None:
            break
        number, wire_type = tag
        value = reader.read_value(wire_type)
        fields.append(RawField(number, wire_type, value, start, reader.offset))

    return fields
