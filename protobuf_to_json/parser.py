"""
Protobuf to JSON Parser

Entry point of the decoder: turns raw wire-format bytes into a generic
document of dicts, lists, strings and numbers keyed by field number.

Usage:
    from protobuf_to_json import Parser, BytesEncoding

    result = Parser.with_bytes_encoding(BytesEncoding.HEX).parse(data)
    if result.ok:
        print(to_json(result.document, indent=2))
    else:
        print(f"{result.error.kind} at offset {result.error.offset}")
"""

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from protobuf_to_json.config import DecoderConfig
from protobuf_to_json.encoding import BytesEncoding, encode_bytes
from protobuf_to_json.errors import DecodeError, RecursionLimitExceeded
from protobuf_to_json.guesser import decode_message
from protobuf_to_json.message import DecodedValue, Message, ValueKind
from protobuf_to_json.wire import scan_fields


@dataclass
class ParseResult:
    """Outcome of one parse call: a document or a decode error, never both."""
    document: Optional[Dict[str, Any]] = None
    error: Optional[DecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Dict[str, Any]:
        """Return the document, raising the decode error on failure."""
        if self.error is not None:
            raise self.error
        return self.document


class Parser:
    """Schema-less protobuf parser. Holds configuration only, no parse state."""

    def __init__(self, config: Optional[DecoderConfig] = None):
        self.config = config or DecoderConfig()

    @classmethod
    def with_bytes_encoding(cls, bytes_encoding: BytesEncoding) -> "Parser":
        return cls(DecoderConfig(bytes_encoding=bytes_encoding))

    @property
    def bytes_encoding(self) -> BytesEncoding:
        return self.config.bytes_encoding

    def parse(self, data: bytes) -> ParseResult:
        """Decode a whole buffer. Any malformed field fails the entire call."""
        try:
            message = self.decode(data)
            document = render_message(message, self.config.bytes_encoding)
        except DecodeError as e:
            return ParseResult(error=e)
        except RecursionError:
            # Python's own stack ran out before the configured depth limit
            return ParseResult(error=RecursionLimitExceeded(self.config.max_depth))
        return ParseResult(document=document)

    def decode(self, data: bytes) -> Message:
        """Decode to the intermediate Message tree, raising DecodeError."""
        return decode_message(bytes(data), self.config)

    def parse_once(self, data: bytes):
        """Flat list of top-level RawFields, without guessing or recursion."""
        return scan_fields(bytes(data))


def render_value(value: DecodedValue, bytes_encoding: BytesEncoding) -> Any:
    if value.kind == ValueKind.MESSAGE:
        return render_message(value.value, bytes_encoding)
    if value.kind == ValueKind.BYTES:
        return encode_bytes(value.value, value.encoding or bytes_encoding)
    if value.kind in (ValueKind.FLOAT32, ValueKind.FLOAT64):
        return render_float(value.value)
    return value.value


def render_float(value: float) -> Any:
    # JSON has no NaN/Infinity literals
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return value


def render_message(message: Message, bytes_encoding: BytesEncoding) -> Dict[str, Any]:
    document = {}
    for number, entry in message.items():
        if isinstance(entry, list):
            document[str(number)] = [render_value(v, bytes_encoding) for v in entry]
        else:
            document[str(number)] = render_value(entry, bytes_encoding)
    return document


def parse(data: bytes, config: Optional[DecoderConfig] = None) -> ParseResult:
    return Parser(config).parse(data)


def to_json(document: Any, indent: Optional[int] = None) -> str:
    return json.dumps(document, indent=indent, ensure_ascii=False)
