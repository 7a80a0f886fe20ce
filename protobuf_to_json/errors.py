"""
Decode errors.

Every failure of the wire-format engine is a DecodeError carrying a kind
and, where known, the absolute byte offset of the failure.
"""

from typing import Optional


class DecodeError(ValueError):
    """Base class for wire-format decode failures."""

    kind = "DecodeError"

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is None:
            return f"{self.kind}: {self.message}"
        return f"{self.kind} at offset {self.offset}: {self.message}"


class TruncatedInput(DecodeError):
    """Fewer bytes remain than a field declares."""

    kind = "TruncatedInput"


class MalformedVarint(DecodeError):
    """Varint exceeds the maximum of 10 bytes."""

    kind = "MalformedVarint"


class UnsupportedWireType(DecodeError):
    """Group markers (3, 4) or wire types 6 and 7."""

    kind = "UnsupportedWireType"

    def __init__(self, wire_type: int, offset: Optional[int] = None):
        super().__init__(f"wire type {wire_type} is not supported", offset)
        self.wire_type = wire_type


class InvalidFieldNumber(DecodeError):
    """Field number is 0 or above the protobuf maximum."""

    kind = "InvalidFieldNumber"

    def __init__(self, field_number: int, offset: Optional[int] = None):
        super().__init__(f"field number {field_number} is out of range", offset)
        self.field_number = field_number


class RecursionLimitExceeded(DecodeError):
    kind = "RecursionLimitExceeded"

    def __init__(self, max_depth: int, offset: Optional[int] = None):
        super().__init__(f"nested messages exceed depth {max_depth}", offset)
        self.max_depth = max_depth


class ConfigError(ValueError):
    """Invalid decoder configuration."""


class FramingError(ValueError):
    """Malformed gRPC / Connect envelope."""
