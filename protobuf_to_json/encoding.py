"""Display encodings for length-delimited values that are neither messages nor text."""

import base64
from enum import Enum
from typing import List, Union


class BytesEncoding(Enum):
    HEX = "hex"
    BASE64 = "base64"
    BYTE_ARRAY = "array"
    STRING_LOSSY = "lossy"


DEFAULT_BYTES_ENCODING = BytesEncoding.BASE64


def encode_bytes(data: bytes, encoding: BytesEncoding) -> Union[str, List[int]]:
    """Render raw bytes for the output document.

    HEX is lowercase without separators, BASE64 is standard alphabet with
    padding, BYTE_ARRAY is a list of octets, STRING_LOSSY replaces invalid
    UTF-8 sequences with U+FFFD.
    """
    if encoding == BytesEncoding.HEX:
        return data.hex()
    elif encoding == BytesEncoding.BASE64:
        return base64.b64encode(data).decode("ascii")
    elif encoding == BytesEncoding.BYTE_ARRAY:
        return list(data)
    elif encoding == BytesEncoding.STRING_LOSSY:
        return data.decode("utf-8", errors="replace")
    raise ValueError(f"Unknown bytes encoding: {encoding}")
