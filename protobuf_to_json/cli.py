"""
pb2json - decode protobuf bytes without a schema.

Usage:
    pb2json decode payload.bin                 # JSON to stdout
    pb2json decode --hex "0a0568656c6c6f"      # Decode a hex string
    cat payload.bin | pb2json decode -e hex    # stdin, bytes as hex
    pb2json decode body.bin                    # gRPC / Connect frames are detected
    pb2json decode body.bin --no-grpc          # Never unwrap frames
    pb2json fields payload.bin                 # Flat table of top-level fields
    pb2json fetch https://host/svc/Method --data-hex 0a00 --grpc
"""

import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from protobuf_to_json.config import DecoderConfig, load_config
from protobuf_to_json.errors import ConfigError, DecodeError, FramingError
from protobuf_to_json.framing import looks_framed, split_frames
from protobuf_to_json.guesser import guess_length_delimited
from protobuf_to_json.message import ValueKind
from protobuf_to_json.parser import Parser, render_value, to_json
from protobuf_to_json.scalars import interpretations
from protobuf_to_json.wire import WireType, scan_fields

app = typer.Typer(help="Decode schema-less protobuf bytes into JSON")
console = Console()
err_console = Console(stderr=True)

log = logging.getLogger(__name__)

PREVIEW_LENGTH = 60


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show guesser decisions"),
):
    """Decode schema-less protobuf bytes into JSON."""
    setup_logging(verbose)


def fail(message: str, code: int = 1):
    err_console.print(f"[red]✗ {escape(message)}[/red]")
    raise typer.Exit(code)


def read_input(file: Optional[Path], hex_data: Optional[str]) -> bytes:
    """Payload from --hex, a file, or stdin, in that order."""
    if hex_data is not None:
        try:
            return bytes.fromhex("".join(hex_data.split()))
        except ValueError:
            fail(f"Invalid hex string: {hex_data[:40]}", code=2)
    if file is not None:
        if not file.exists():
            fail(f"File not found: {file}", code=2)
        return file.read_bytes()
    return sys.stdin.buffer.read()


def build_config(
    encoding: Optional[str],
    fixed: Optional[str],
    max_depth: Optional[int],
    config_path: Optional[Path],
) -> DecoderConfig:
    try:
        return load_config(config_path).merged(
            bytes_encoding=encoding, fixed_policy=fixed, max_depth=max_depth
        )
    except ConfigError as e:
        fail(str(e), code=2)


def decode_body(data: bytes, parser: Parser, grpc: bool) -> Any:
    """Decode a plain payload, or every frame of a gRPC / Connect body."""
    if not grpc:
        return parser.parse(data).unwrap()

    results = []
    for i, frame in enumerate(split_frames(data)):
        if frame.is_trailer:
            results.append({"frame": i, "trailer": frame.trailer_text()})
        else:
            results.append({"frame": i, "message": parser.parse(frame.payload).unwrap()})
    return results


def emit(document: Any, indent: Optional[int], output: Optional[Path]):
    text = to_json(document, indent=indent if indent and indent > 0 else None)
    if output is not None:
        output.write_text(text + "\n")
        err_console.print(f"[green]✓ Wrote {escape(str(output))}[/green]")
    else:
        typer.echo(text)


def run_decode(data: bytes, config: DecoderConfig, grpc: bool, indent: Optional[int], output: Optional[Path]):
    try:
        document = decode_body(data, Parser(config), grpc)
    except DecodeError as e:
        fail(str(e))
    except FramingError as e:
        fail(f"FramingError: {e}")
    emit(document, indent, output)


@app.command()
def decode(
    file: Optional[Path] = typer.Argument(None, help="Binary payload file (default: stdin)"),
    hex_data: Optional[str] = typer.Option(None, "--hex", help="Hex string to decode"),
    encoding: Optional[str] = typer.Option(None, "--encoding", "-e", help="Bytes encoding: hex, base64, array, lossy"),
    fixed: Optional[str] = typer.Option(None, "--fixed", help="fixed32/fixed64 policy: auto, float, integer"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", help="Maximum nested message depth"),
    grpc: Optional[bool] = typer.Option(None, "--grpc/--no-grpc", help="Force framed decoding (default: detect frames)"),
    indent: int = typer.Option(2, "--indent", "-i", help="JSON indent (0 for compact)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to file"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file path"),
):
    """Decode a protobuf payload and print it as JSON."""
    data = read_input(file, hex_data)
    config = build_config(encoding, fixed, max_depth, config_path)
    if grpc is None:
        grpc = looks_framed(data)
        if grpc:
            log.info("Body looks like gRPC / Connect frames")
    run_decode(data, config, grpc, indent, output)


def describe_length_delimited(payload: bytes, config: DecoderConfig, offset: int) -> str:
    value = guess_length_delimited(payload, config, 1, offset)
    if value.kind == ValueKind.MESSAGE:
        return f"<message: {len(value.value)} fields>"
    if value.kind == ValueKind.STRING:
        text = value.value
        if len(text) > PREVIEW_LENGTH:
            text = text[:PREVIEW_LENGTH] + "..."
        return f'"{text}"'
    rendered = str(render_value(value, config.bytes_encoding))
    if len(rendered) > PREVIEW_LENGTH:
        rendered = rendered[:PREVIEW_LENGTH] + "..."
    return f"<bytes: {len(payload)}> {rendered}"


@app.command()
def fields(
    file: Optional[Path] = typer.Argument(None, help="Binary payload file (default: stdin)"),
    hex_data: Optional[str] = typer.Option(None, "--hex", help="Hex string to decode"),
    encoding: Optional[str] = typer.Option(None, "--encoding", "-e", help="Bytes encoding: hex, base64, array, lossy"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file path"),
):
    """List top-level fields with every plausible reading."""
    data = read_input(file, hex_data)
    config = build_config(encoding, None, None, config_path)

    try:
        raw_fields = scan_fields(data)
    except DecodeError as e:
        fail(str(e))

    table = Table(title=f"{len(data)} bytes, {len(raw_fields)} fields")
    table.add_column("Offset", justify="right", style="dim")
    table.add_column("Field", justify="right", style="cyan")
    table.add_column("Wire type", style="magenta")
    table.add_column("Value")

    for f in raw_fields:
        if f.wire_type == WireType.LENGTH_DELIMITED:
            try:
                value = describe_length_delimited(f.value, config, f.end - len(f.value))
            except DecodeError as e:
                fail(str(e))
        else:
            value = ", ".join(f"{i['type']}={i['value']}" for i in interpretations(f))
        table.add_row(str(f.start), str(f.number), f.wire_type_name, escape(value))

    console.print(table)


def parse_headers(headers: List[str]) -> dict:
    result = {}
    for header in headers:
        name, sep, value = header.partition(":")
        if not sep or not name.strip():
            fail(f"Invalid header (expected 'Name: value'): {header}", code=2)
        result[name.strip()] = value.strip()
    return result


@app.command()
def fetch(
    url: str = typer.Argument(..., help="URL returning a protobuf body"),
    data_hex: Optional[str] = typer.Option(None, "--data-hex", help="Request body as hex (sends POST)"),
    header: List[str] = typer.Option([], "--header", "-H", help="Extra header 'Name: value'"),
    encoding: Optional[str] = typer.Option(None, "--encoding", "-e", help="Bytes encoding: hex, base64, array, lossy"),
    grpc: Optional[bool] = typer.Option(None, "--grpc/--no-grpc", help="Force framed decoding (default: from Content-Type)"),
    timeout: float = typer.Option(30.0, "--timeout", help="Request timeout in seconds"),
    indent: int = typer.Option(2, "--indent", "-i", help="JSON indent (0 for compact)"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Config file path"),
):
    """Fetch a protobuf response over HTTP and decode it."""
    config = build_config(encoding, None, None, config_path)
    headers = parse_headers(header)
    body = read_input(None, data_hex) if data_hex is not None else None

    log.info("Fetching %s", url)
    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            if body is not None:
                response = client.post(url, content=body, headers=headers)
            else:
                response = client.get(url, headers=headers)
            response.raise_for_status()
    except httpx.TimeoutException:
        fail("Timeout")
    except httpx.HTTPStatusError as e:
        fail(f"HTTP {e.response.status_code}")
    except httpx.RequestError as e:
        fail(f"Request failed: {e}")

    if grpc is None:
        content_type = response.headers.get("content-type", "")
        grpc = "grpc" in content_type or "connect+proto" in content_type

    log.info("%d bytes, %s", len(response.content), response.headers.get("content-type", "no content-type"))
    run_decode(response.content, config, grpc, indent, None)


if __name__ == "__main__":
    app()
