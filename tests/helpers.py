"""Wire-format builders for test payloads."""

import struct


def encode_varint(value):
    result = []
    while value > 0x7f:
        result.append((value & 0x7f) | 0x80)
        value >>= 7
    result.append(value)
    return bytes(result)


def encode_tag(field_num, wire_type):
    return encode_varint((field_num << 3) | wire_type)


def varint_field(field_num, value):
    return encode_tag(field_num, 0) + encode_varint(value)


def bytes_field(field_num, value):
    if isinstance(value, str):
        value = value.encode("utf-8")
    return encode_tag(field_num, 2) + encode_varint(len(value)) + value


def fixed32_field(field_num, raw):
    return encode_tag(field_num, 5) + struct.pack("<I", raw)


def fixed64_field(field_num, raw):
    return encode_tag(field_num, 1) + struct.pack("<Q", raw)


def float_field(field_num, value):
    return encode_tag(field_num, 5) + struct.pack("<f", value)


def double_field(field_num, value):
    return encode_tag(field_num, 1) + struct.pack("<d", value)


def grpc_frame(data, flags=0):
    return struct.pack(">BI", flags, len(data)) + data


def nest(depth, leaf=b""):
    """Field 1 wrapping itself depth times around a leaf message."""
    data = leaf
    for _ in range(depth):
        data = bytes_field(1, data)
    return data
