"""
Length-Delimited Guesser

A length-delimited payload may be an embedded message, a UTF-8 string or
opaque bytes. The guess tries them in that fixed order:

1. nested message: the slice frames cleanly as fields from first to last
   byte and uses no reserved field number
2. string: the slice is valid UTF-8 (the empty slice is the empty string)
3. bytes: everything else, tagged with the configured display encoding

A nested attempt that fails for any reason except the depth limit demotes
the slice to string or bytes at this level, so corruption deep inside a
payload degrades one level up instead of failing the whole parse.
"""

import logging
from typing import List, Optional

from protobuf_to_json.config import DecoderConfig
from protobuf_to_json.errors import DecodeError, RecursionLimitExceeded
from protobuf_to_json.message import DecodedValue, Message, ValueKind
from protobuf_to_json.scalars import decode_fixed
from protobuf_to_json.wire import RawField, WireType, scan_fields

log = logging.getLogger(__name__)

# Reserved for the protobuf implementation; never used by real messages
RESERVED_FIELD_NUMBERS = range(19000, 20000)


def decode_message(
    data: bytes,
    config: DecoderConfig,
    depth: int = 0,
    base_offset: int = 0,
) -> Message:
    """Decode one message level and everything nested below it.

    Raises:
        DecodeError: if this level does not frame cleanly
    """
    if depth > config.max_depth:
        raise RecursionLimitExceeded(config.max_depth, base_offset)
    return build_message(scan_fields(data, base_offset), config, depth)


def build_message(fields: List[RawField], config: DecoderConfig, depth: int) -> Message:
    message = Message()
    for field in fields:
        message.add(field.number, decode_field(field, config, depth))
    return message


def decode_field(field: RawField, config: DecoderConfig, depth: int) -> DecodedValue:
    if field.wire_type == WireType.VARINT:
        return DecodedValue.integer(field.value)

    if field.wire_type == WireType.LENGTH_DELIMITED:
        payload_offset = field.end - len(field.value)
        return guess_length_delimited(field.value, config, depth + 1, payload_offset)

    width = 32 if field.wire_type == WireType.FIXED32 else 64
    value = decode_fixed(field.value, width, config.fixed_policy)
    if isinstance(value, float):
        kind = ValueKind.FLOAT32 if width == 32 else ValueKind.FLOAT64
        return DecodedValue(kind, value)
    return DecodedValue.integer(value)


def guess_length_delimited(
    data: bytes,
    config: DecoderConfig,
    depth: int,
    base_offset: int = 0,
) -> DecodedValue:
    """Pick message, string or bytes for a length-delimited payload.

    Args:
        data: The payload, without its length prefix
        config: Decoder settings (bytes encoding, depth limit)
        depth: Nesting depth the payload would have as a message
        base_offset: Absolute offset of the payload in the top-level buffer
    """
    nested = try_nested_message(data, config, depth, base_offset)
    if nested is not None:
        return DecodedValue.message(nested)

    try:
        return DecodedValue.string(bytes(data).decode("utf-8"))
    except UnicodeDecodeError:
        return DecodedValue.raw_bytes(data, config.bytes_encoding)


def try_nested_message(
    data: bytes,
    config: DecoderConfig,
    depth: int,
    base_offset: int = 0,
) -> Optional[Message]:
    """Decode the payload as a message, or return None if it is not one."""
    if not data:
        return None

    try:
        fields = scan_fields(data, base_offset)
    except DecodeError as e:
        log.debug("%d bytes at offset %d are not a message: %s", len(data), base_offset, e)
        return None

    if any(f.number in RESERVED_FIELD_NUMBERS for f in fields):
        log.debug("%d bytes at offset %d use reserved field numbers", len(data), base_offset)
        return None

    if depth > config.max_depth:
        raise RecursionLimitExceeded(config.max_depth, base_offset)

    return build_message(fields, config, depth)
