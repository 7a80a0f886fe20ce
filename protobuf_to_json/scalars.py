"""
Scalar decoding for the varint and fixed-width wire types.

Varints surface as plain unsigned integers. Fixed-width values are read as
IEEE floats or unsigned integers depending on the FixedPolicy; signed and
zigzag readings are display-only reinterpretations.
"""

import math
import struct
from enum import Enum
from typing import Any, Dict, List, Union

from protobuf_to_json.wire import RawField, WireType

# Plausible magnitude range for AUTO float detection
FLOAT_MIN_MAGNITUDE = 1e-7
FLOAT_MAX_MAGNITUDE = 1e10


class FixedPolicy(Enum):
    AUTO = "auto"
    FLOAT = "float"
    INTEGER = "integer"


def to_signed(value: int, bits: int = 64) -> int:
    """Two's complement reading of an unsigned value."""
    value &= (1 << bits) - 1
    if value >> (bits - 1):
        return value - (1 << bits)
    return value


def zigzag_decode(value: int) -> int:
    return (value >> 1) ^ -(value & 1)


def float32_from_bits(bits: int) -> float:
    """Shortest decimal that round-trips through float32."""
    raw = bits.to_bytes(4, "little")
    value = struct.unpack("<f", raw)[0]
    if not math.isfinite(value):
        return value
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        if struct.pack("<f", candidate) == raw:
            return candidate
    return value


def float64_from_bits(bits: int) -> float:
    return struct.unpack("<d", bits.to_bytes(8, "little"))[0]


def is_plausible_float(bits: int, width: int) -> bool:
    """True when the bit pattern is a normal, finite float of sane magnitude.

    Zero, subnormals, infinities and NaN are rejected; small integers stored
    in fixed fields are subnormal floats, so they fall back to integers.
    """
    if width == 32:
        exponent = (bits >> 23) & 0xFF
        max_exponent = 0xFF
        value = float32_from_bits(bits)
    else:
        exponent = (bits >> 52) & 0x7FF
        max_exponent = 0x7FF
        value = float64_from_bits(bits)

    if exponent == 0 or exponent == max_exponent:
        return False
    return FLOAT_MIN_MAGNITUDE <= abs(value) <= FLOAT_MAX_MAGNITUDE


def decode_fixed(bits: int, width: int, policy: FixedPolicy) -> Union[int, float]:
    """Interpret a fixed32/fixed64 value according to the policy."""
    if policy == FixedPolicy.INTEGER:
        return bits
    if policy == FixedPolicy.AUTO and not is_plausible_float(bits, width):
        return bits
    if width == 32:
        return float32_from_bits(bits)
    return float64_from_bits(bits)


def interpretations(field: RawField) -> List[Dict[str, Any]]:
    """All plausible readings of a non-length-delimited raw field."""
    value = field.value
    result = []

    if field.wire_type == WireType.VARINT:
        result.append({"type": "uint", "value": value})
        int64_value = to_signed(value, 64)
        if int64_value != value:
            result.append({"type": "int64", "value": int64_value})
        int32_value = to_signed(value, 32)
        if int32_value != value and int32_value != int64_value:
            result.append({"type": "int32", "value": int32_value})
        sint_value = zigzag_decode(value)
        if sint_value != value:
            result.append({"type": "sint", "value": sint_value})
        if value in (0, 1):
            result.append({"type": "bool", "value": bool(value)})

    elif field.wire_type == WireType.FIXED32:
        result.append({"type": "float", "value": float32_from_bits(value)})
        result.append({"type": "fixed32", "value": value})
        signed = to_signed(value, 32)
        if signed != value:
            result.append({"type": "sfixed32", "value": signed})

    elif field.wire_type == WireType.FIXED64:
        result.append({"type": "double", "value": float64_from_bits(value)})
        result.append({"type": "fixed64", "value": value})
        signed = to_signed(value, 64)
        if signed != value:
            result.append({"type": "sfixed64", "value": signed})

    return result
