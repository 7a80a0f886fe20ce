"""
Decoded values and per-level field aggregation.

A Message maps field numbers to decoded values in first-occurrence order.
Repeats of a field number are merged into a list in encounter order. A
field seen exactly once stays a bare value, so a lone instance of a
repeated field looks exactly like a scalar; schema-less decoding cannot
tell them apart.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from protobuf_to_json.encoding import BytesEncoding


class ValueKind(Enum):
    INTEGER = "integer"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    BYTES = "bytes"
    MESSAGE = "message"


@dataclass(frozen=True)
class DecodedValue:
    kind: ValueKind
    value: Any
    # Only set for BYTES
    encoding: Optional[BytesEncoding] = None

    @classmethod
    def integer(cls, value: int) -> "DecodedValue":
        return cls(ValueKind.INTEGER, value)

    @classmethod
    def string(cls, value: str) -> "DecodedValue":
        return cls(ValueKind.STRING, value)

    @classmethod
    def raw_bytes(cls, value: bytes, encoding: BytesEncoding) -> "DecodedValue":
        return cls(ValueKind.BYTES, bytes(value), encoding)

    @classmethod
    def message(cls, value: "Message") -> "DecodedValue":
        return cls(ValueKind.MESSAGE, value)


FieldEntry = Union[DecodedValue, List[DecodedValue]]


class Message:
    """Ordered field_number -> value (or list of values) for one level."""

    def __init__(self):
        self.fields: Dict[int, FieldEntry] = {}

    def add(self, number: int, value: DecodedValue):
        existing = self.fields.get(number)
        if existing is None:
            self.fields[number] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            self.fields[number] = [existing, value]

    def get(self, number: int) -> Optional[FieldEntry]:
        return self.fields.get(number)

    def values(self, number: int) -> List[DecodedValue]:
        """Every value observed for a field number, as a list."""
        entry = self.fields.get(number)
        if entry is None:
            return []
        if isinstance(entry, list):
            return list(entry)
        return [entry]

    def items(self) -> Iterator[Tuple[int, FieldEntry]]:
        return iter(self.fields.items())

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, number: int) -> bool:
        return number in self.fields

    def __eq__(self, other) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        return self.fields == other.fields

    def __repr__(self) -> str:
        return f"Message({self.fields!r})"
