"""
Pytest configuration and shared fixtures for decoder tests.
"""

import json
import sys
from pathlib import Path
import tempfile

import pytest

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def example_payload():
    """The canonical example: scalars, strings and one nested message."""
    return bytes.fromhex("0d1c0000001203596f751a024d65202b2a0a0a066162633132331200")


@pytest.fixture
def example_document():
    return {
        "1": 28,
        "2": "You",
        "3": "Me",
        "4": 43,
        "5": {"1": "abc123", "2": ""},
    }


@pytest.fixture
def extended_payload():
    """Canonical example followed by a fixed64 integer and a bool-like varint."""
    return bytes.fromhex(
        "0d1c0000001203596f751a024d65202b2a0a0a06616263313233120031ba32a96cc10200003801"
    )


@pytest.fixture
def config_file(temp_dir):
    """Write a config JSON file and return its path."""
    def _write(data):
        path = temp_dir / "config.json"
        path.write_text(data if isinstance(data, str) else json.dumps(data))
        return path
    return _write
