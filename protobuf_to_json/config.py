"""
Decoder configuration.

Settings live in an optional JSON file; CLI flags override them.

Example ~/.config/pb2json/config.json:
    {
      "bytes_encoding": "hex",
      "fixed_policy": "auto",
      "max_depth": 64
    }
"""

import json
from dataclasses import asdict, dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional, Type, TypeVar

from protobuf_to_json.encoding import DEFAULT_BYTES_ENCODING, BytesEncoding
from protobuf_to_json.errors import ConfigError
from protobuf_to_json.scalars import FixedPolicy

# Storage
CONFIG_FILE = Path.home() / ".config/pb2json/config.json"

DEFAULT_MAX_DEPTH = 100
# Each nesting level costs several Python frames
MAX_ALLOWED_DEPTH = 200

E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: Type[E], value) -> E:
    """Accept an enum member, its value or its name (case-insensitive)."""
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        if text in (member.value, member.name.lower()):
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise ConfigError(f"Invalid {enum_cls.__name__} {value!r} (choose from: {choices})")


@dataclass(frozen=True)
class DecoderConfig:
    bytes_encoding: BytesEncoding = DEFAULT_BYTES_ENCODING
    fixed_policy: FixedPolicy = FixedPolicy.AUTO
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self):
        if not isinstance(self.max_depth, int) or isinstance(self.max_depth, bool) or self.max_depth < 1:
            raise ConfigError(f"max_depth must be a positive integer, got {self.max_depth!r}")
        if self.max_depth > MAX_ALLOWED_DEPTH:
            raise ConfigError(f"max_depth must be at most {MAX_ALLOWED_DEPTH}, got {self.max_depth}")

    @classmethod
    def from_dict(cls, data: dict) -> "DecoderConfig":
        unknown = set(data) - {"bytes_encoding", "fixed_policy", "max_depth"}
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        kwargs = {}
        if "bytes_encoding" in data:
            kwargs["bytes_encoding"] = parse_enum(BytesEncoding, data["bytes_encoding"])
        if "fixed_policy" in data:
            kwargs["fixed_policy"] = parse_enum(FixedPolicy, data["fixed_policy"])
        if "max_depth" in data:
            kwargs["max_depth"] = data["max_depth"]
        return cls(**kwargs)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["bytes_encoding"] = self.bytes_encoding.value
        data["fixed_policy"] = self.fixed_policy.value
        return data

    def merged(self, **overrides) -> "DecoderConfig":
        """Copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "bytes_encoding" in changes:
            changes["bytes_encoding"] = parse_enum(BytesEncoding, changes["bytes_encoding"])
        if "fixed_policy" in changes:
            changes["fixed_policy"] = parse_enum(FixedPolicy, changes["fixed_policy"])
        return replace(self, **changes)


def load_config(path: Optional[Path] = None) -> DecoderConfig:
    """Load config from disk, falling back to defaults when the file is absent."""
    path = Path(path) if path is not None else CONFIG_FILE
    if not path.exists():
        return DecoderConfig()

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config in {path} must be a JSON object")
    return DecoderConfig.from_dict(data)
