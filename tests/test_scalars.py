"""
Tests for scalar interpretation of varint and fixed-width values.
"""

import math
import struct

import pytest

from protobuf_to_json.scalars import (
    FixedPolicy,
    decode_fixed,
    float32_from_bits,
    interpretations,
    is_plausible_float,
    to_signed,
    zigzag_decode,
)
from protobuf_to_json.wire import RawField, WireType


def f32_bits(value):
    return struct.unpack("<I", struct.pack("<f", value))[0]


def f64_bits(value):
    return struct.unpack("<Q", struct.pack("<d", value))[0]


class TestSignedReadings:
    """Tests for display reinterpretations."""

    def test_to_signed_64(self):
        assert to_signed(2**64 - 1) == -1
        assert to_signed(5) == 5

    def test_to_signed_32(self):
        assert to_signed(0xFFFFFFFE, 32) == -2

    @pytest.mark.parametrize("raw,expected", [(0, 0), (1, -1), (2, 1), (3, -2), (4294967294, 2147483647)])
    def test_zigzag(self, raw, expected):
        assert zigzag_decode(raw) == expected


class TestFloat32:
    """Tests for float32 rendering."""

    def test_shortest_round_trip(self):
        assert float32_from_bits(f32_bits(0.1)) == 0.1
        assert float32_from_bits(f32_bits(1.5)) == 1.5
        assert float32_from_bits(f32_bits(-273.15)) == -273.15

    def test_non_finite_passthrough(self):
        assert math.isinf(float32_from_bits(0x7F800000))
        assert math.isnan(float32_from_bits(0x7FC00000))


class TestPlausibleFloat:
    """Tests for the AUTO float detection heuristic."""

    def test_small_integers_are_not_floats(self):
        """Small integers are subnormal bit patterns."""
        assert not is_plausible_float(28, 32)
        assert not is_plausible_float(3029774971578, 64)

    def test_zero_is_not_a_float(self):
        assert not is_plausible_float(0, 32)

    def test_ordinary_floats(self):
        assert is_plausible_float(f32_bits(1.5), 32)
        assert is_plausible_float(f64_bits(3.14159), 64)

    def test_non_finite_rejected(self):
        assert not is_plausible_float(0x7F800000, 32)
        assert not is_plausible_float(0x7FF8000000000000, 64)

    def test_out_of_range_magnitude(self):
        assert not is_plausible_float(f64_bits(1e20), 64)
        assert not is_plausible_float(f32_bits(1e-12), 32)


class TestDecodeFixed:
    """Tests for FixedPolicy handling."""

    def test_auto_integer(self):
        assert decode_fixed(28, 32, FixedPolicy.AUTO) == 28

    def test_auto_float(self):
        assert decode_fixed(f32_bits(2.5), 32, FixedPolicy.AUTO) == 2.5
        assert decode_fixed(f64_bits(-0.75), 64, FixedPolicy.AUTO) == -0.75

    def test_float_policy_always_float(self):
        value = decode_fixed(28, 32, FixedPolicy.FLOAT)
        assert isinstance(value, float)
        assert 0 < value < 1e-40

    def test_integer_policy(self):
        bits = f64_bits(2.5)
        assert decode_fixed(bits, 64, FixedPolicy.INTEGER) == bits


class TestInterpretations:
    """Tests for the readings shown in the field listing."""

    def test_varint_minus_one(self):
        field = RawField(1, WireType.VARINT, 2**64 - 1, 0, 11)
        readings = {i["type"]: i["value"] for i in interpretations(field)}
        assert readings["uint"] == 2**64 - 1
        assert readings["int64"] == -1
        assert readings["sint"] == -(2**63)

    def test_varint_bool(self):
        field = RawField(7, WireType.VARINT, 1, 0, 2)
        readings = {i["type"]: i["value"] for i in interpretations(field)}
        assert readings["bool"] is True
        assert readings["sint"] == -1

    def test_fixed32(self):
        field = RawField(1, WireType.FIXED32, f32_bits(1.5), 0, 5)
        readings = {i["type"]: i["value"] for i in interpretations(field)}
        assert readings["float"] == 1.5
        assert readings["fixed32"] == f32_bits(1.5)

    def test_fixed64_signed(self):
        field = RawField(1, WireType.FIXED64, 2**64 - 2, 0, 9)
        readings = {i["type"]: i["value"] for i in interpretations(field)}
        assert readings["sfixed64"] == -2

    def test_length_delimited_has_none(self):
        field = RawField(1, WireType.LENGTH_DELIMITED, b"abc", 0, 5)
        assert interpretations(field) == []
