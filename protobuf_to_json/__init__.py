"""Schema-less protobuf to JSON converter.

Decodes protocol-buffer wire-format bytes into a generic JSON-like tree
keyed by field number, guessing whether each length-delimited value is a
nested message, a string or raw bytes.

Example:
    from protobuf_to_json import Parser

    document = Parser().parse(data).unwrap()
    # {"1": 28, "2": "You", "5": {"1": "abc123", "2": ""}}
"""

from protobuf_to_json.config import DecoderConfig, load_config
from protobuf_to_json.encoding import BytesEncoding
from protobuf_to_json.errors import (
    ConfigError,
    DecodeError,
    FramingError,
    InvalidFieldNumber,
    MalformedVarint,
    RecursionLimitExceeded,
    TruncatedInput,
    UnsupportedWireType,
)
from protobuf_to_json.message import DecodedValue, Message, ValueKind
from protobuf_to_json.parser import ParseResult, Parser, parse, to_json
from protobuf_to_json.scalars import FixedPolicy
from protobuf_to_json.wire import RawField, WireReader, WireType, scan_fields

__version__ = "0.1.0"

__all__ = [
    "Parser",
    "ParseResult",
    "parse",
    "to_json",
    "DecoderConfig",
    "load_config",
    "BytesEncoding",
    "FixedPolicy",
    "Message",
    "DecodedValue",
    "ValueKind",
    "WireReader",
    "WireType",
    "RawField",
    "scan_fields",
    "DecodeError",
    "TruncatedInput",
    "MalformedVarint",
    "UnsupportedWireType",
    "InvalidFieldNumber",
    "RecursionLimitExceeded",
    "ConfigError",
    "FramingError",
]
